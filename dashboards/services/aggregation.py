"""
Pure aggregation over row snapshots.

Nothing in this module queries the database: every function folds the rows
produced by OrganizationRecords (or hand-built rows in tests) into plain,
JSON-serializable dicts and lists.
"""

from collections import defaultdict, OrderedDict
from datetime import timedelta
from typing import Dict, Any, List, Iterable, Optional

from attendance.models import AttendanceRecord

ATTENDED = frozenset(AttendanceRecord.ATTENDED)
ON_LEAVE = frozenset(AttendanceRecord.ON_LEAVE)

EXCELLENT_ATTENDANCE = 95
GOOD_ATTENDANCE = 85


# =============================================================================
# SMALL HELPERS
# =============================================================================

def percent(part, whole, digits=1) -> float:
    """``part / whole * 100`` rounded; 0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, digits)


def percent_text(part, whole) -> str:
    """One-decimal percentage string, ``"0.0"`` for a zero total."""
    if not whole:
        return "0.0"
    return f"{part / whole * 100:.1f}"


def percent_change(current, previous) -> float:
    """Day-over-day change in percent; 0 when there is no baseline."""
    if not previous:
        return 0
    return round((current - previous) / previous * 100, 2)


def date_span(start, end) -> List:
    days = (end - start).days + 1
    return [start + timedelta(days=offset) for offset in range(max(days, 0))]


def attendance_status(rate) -> str:
    if rate >= EXCELLENT_ATTENDANCE:
        return 'excellent'
    if rate >= GOOD_ATTENDANCE:
        return 'good'
    return 'needs_improvement'


# =============================================================================
# PER-DAY RECONCILIATION
# =============================================================================

def _flock_lookup(flock_rows) -> Dict:
    by_key = defaultdict(list)
    for row in flock_rows:
        by_key[(row.date, row.farm_id)].append(row)
    return by_key


def _pick_flock_row(candidates, shed_id):
    """Same shed first, then the farm-level snapshot, then any for the farm."""
    if not candidates:
        return None
    for row in candidates:
        if shed_id is not None and row.shed_id == shed_id:
            return row
    for row in candidates:
        if row.shed_id is None:
            return row
    return candidates[0]


def _mortality_lookup(mortality_rows) -> Dict:
    totals = defaultdict(lambda: [0, 0])
    for row in mortality_rows:
        entry = totals[(row.date, row.farm_id)]
        entry[0] += row.male_mortality
        entry[1] += row.female_mortality
    return totals


def _present_by_date(attendance_rows) -> Dict:
    present = defaultdict(int)
    for row in attendance_rows:
        if row.status in ATTENDED:
            present[row.date] += 1
    return present


def reconcile_days(production_rows, flock_rows, mortality_rows, attendance_rows,
                   farms, workers) -> List[Dict[str, Any]]:
    """
    One detail row per production row, joined with that day's flock counts,
    mortality and labour.

    Bird counts come from the flock record for the same date and farm when
    there is one; otherwise from the farm's stored counts less that day's
    mortality, never below zero.
    """
    flocks = _flock_lookup(flock_rows)
    mortality = _mortality_lookup(mortality_rows)
    present = _present_by_date(attendance_rows)
    farms_by_id = {farm.id: farm for farm in farms}
    total_labors = len(workers)
    supervisors = len({worker.supervisor_id for worker in workers if worker.supervisor_id})

    details = []
    for row in production_rows:
        flock = _pick_flock_row(flocks.get((row.date, row.farm_id)), row.shed_id)
        if flock is not None:
            opening_male, opening_female = flock.opening_male, flock.opening_female
            mortality_male, mortality_female = flock.mortality_male, flock.mortality_female
            closing_male, closing_female = flock.closing_male, flock.closing_female
            age_weeks, age_days = flock.age_weeks, flock.age_day_of_week
        else:
            farm = farms_by_id.get(row.farm_id)
            opening_male = farm.male_count if farm else 0
            opening_female = farm.female_count if farm else 0
            mortality_male, mortality_female = mortality.get((row.date, row.farm_id), (0, 0))
            closing_male = max(0, opening_male - mortality_male)
            closing_female = max(0, opening_female - mortality_female)
            age_weeks, age_days = None, None

        total = row.total_daily_eggs
        sellable = row.sellable_eggs
        details.append({
            'date': row.date.isoformat(),
            'farm_id': row.farm_id,
            'farm_name': row.farm_name,
            'shed_id': row.shed_id,
            'shed_name': row.shed_name,
            'age_weeks': age_weeks,
            'age_days': age_days,
            'opening_male': opening_male,
            'opening_female': opening_female,
            'mortality_male': mortality_male,
            'mortality_female': mortality_female,
            'closing_male': closing_male,
            'closing_female': closing_female,
            'table_eggs': row.table_eggs,
            'hatching_eggs': row.hatching_eggs,
            'cracked_eggs': row.cracked_eggs,
            'jumbo_eggs': row.jumbo_eggs,
            'leaker_eggs': row.leaker_eggs,
            'total_daily_eggs': total,
            'sellable_eggs': sellable,
            'waste_eggs': row.waste_eggs,
            'total_labors': total_labors,
            'present_labors': present.get(row.date, 0),
            'supervisors': supervisors,
            'hd_percent': percent_text(sellable, total),
            'he_percent': percent_text(row.hatching_eggs, total),
        })
    return details


# =============================================================================
# PRODUCTION SUMMARIES
# =============================================================================

def summarize_production(details) -> Dict[str, Any]:
    total = sum(d['total_daily_eggs'] for d in details)
    sellable = sum(d['sellable_eggs'] for d in details)
    waste = sum(d['waste_eggs'] for d in details)
    days_reported = len({d['date'] for d in details})
    mortality = sum(d['mortality_male'] + d['mortality_female'] for d in details)

    return {
        'total_eggs': total,
        'sellable_eggs': sellable,
        'waste_eggs': waste,
        'table_eggs': sum(d['table_eggs'] for d in details),
        'hatching_eggs': sum(d['hatching_eggs'] for d in details),
        'loss_percentage': percent(waste, total),
        'average_daily': round(total / days_reported, 1) if days_reported else 0,
        'days_reported': days_reported,
        'total_mortality': mortality,
    }


def farm_breakdown(details) -> Dict[str, Dict[str, Any]]:
    farms = OrderedDict()
    for detail in details:
        entry = farms.setdefault(detail['farm_id'], {
            'farm_id': detail['farm_id'],
            'farm_name': detail['farm_name'],
            'total_eggs': 0,
            'sellable_eggs': 0,
            'waste_eggs': 0,
            'dates': set(),
        })
        entry['total_eggs'] += detail['total_daily_eggs']
        entry['sellable_eggs'] += detail['sellable_eggs']
        entry['waste_eggs'] += detail['waste_eggs']
        entry['dates'].add(detail['date'])

    for entry in farms.values():
        entry['days_reported'] = len(entry.pop('dates'))
        entry['efficiency'] = percent(entry['sellable_eggs'], entry['total_eggs'])
    return dict(farms)


def shed_breakdown(production_rows, sheds, total_days) -> List[Dict[str, Any]]:
    """Per-shed totals; efficiency is sellable per day against capacity, capped at 100."""
    totals = defaultdict(lambda: {'total': 0, 'sellable': 0, 'waste': 0})
    for row in production_rows:
        if row.shed_id is None:
            continue
        entry = totals[row.shed_id]
        entry['total'] += row.total_daily_eggs
        entry['sellable'] += row.sellable_eggs
        entry['waste'] += row.waste_eggs

    breakdown = []
    for shed in sheds:
        entry = totals.get(shed.id, {'total': 0, 'sellable': 0, 'waste': 0})
        if shed.capacity > 0 and total_days > 0:
            efficiency = min(100.0, round(entry['sellable'] / total_days / shed.capacity * 100, 1))
        else:
            efficiency = 0.0
        breakdown.append({
            'shed_id': shed.id,
            'shed_name': shed.name,
            'farm_id': shed.farm_id,
            'farm_name': shed.farm_name,
            'capacity': shed.capacity,
            'total_eggs': entry['total'],
            'sellable_eggs': entry['sellable'],
            'waste_eggs': entry['waste'],
            'efficiency': efficiency,
        })
    return breakdown


def shed_performance(production_rows, sheds) -> List[Dict[str, Any]]:
    """Average daily sellable eggs over the days each shed actually reported."""
    sellable = defaultdict(int)
    days = defaultdict(set)
    for row in production_rows:
        if row.shed_id is None:
            continue
        sellable[row.shed_id] += row.sellable_eggs
        days[row.shed_id].add(row.date)

    performance = []
    for shed in sheds:
        recorded = len(days.get(shed.id, ()))
        average = sellable[shed.id] / recorded if recorded else 0
        performance.append({
            'shed_id': shed.id,
            'shed_name': shed.name,
            'farm_name': shed.farm_name,
            'capacity': shed.capacity,
            'total_production': sellable[shed.id],
            'average_daily': round(average, 2),
            'efficiency': percent(average, shed.capacity, digits=2),
        })
    performance.sort(key=lambda item: item['total_production'], reverse=True)
    return performance


def production_by_date(production_rows) -> List[Dict[str, Any]]:
    by_date = OrderedDict()
    for row in sorted(production_rows, key=lambda r: r.date):
        entry = by_date.setdefault(row.date, {
            'date': row.date.isoformat(),
            'total_eggs': 0,
            'sellable_eggs': 0,
            'waste_eggs': 0,
            'table_eggs': 0,
            'hatching_eggs': 0,
        })
        entry['total_eggs'] += row.total_daily_eggs
        entry['sellable_eggs'] += row.sellable_eggs
        entry['waste_eggs'] += row.waste_eggs
        entry['table_eggs'] += row.table_eggs
        entry['hatching_eggs'] += row.hatching_eggs
    return list(by_date.values())


def production_by_week(production_rows) -> List[Dict[str, Any]]:
    """ISO-week buckets (``2026-W07``) in chronological order."""
    weeks = OrderedDict()
    for row in sorted(production_rows, key=lambda r: r.date):
        iso_year, iso_week, _ = row.date.isocalendar()
        key = f"{iso_year}-W{iso_week:02d}"
        monday = row.date - timedelta(days=row.date.weekday())
        entry = weeks.setdefault(key, {
            'week': key,
            'week_start': monday.isoformat(),
            'total_eggs': 0,
            'sellable_eggs': 0,
            'waste_eggs': 0,
            'days': set(),
        })
        entry['total_eggs'] += row.total_daily_eggs
        entry['sellable_eggs'] += row.sellable_eggs
        entry['waste_eggs'] += row.waste_eggs
        entry['days'].add(row.date)

    result = []
    for entry in weeks.values():
        days = len(entry.pop('days'))
        entry['days_reported'] = days
        entry['average_daily'] = round(entry['sellable_eggs'] / days, 1) if days else 0
        result.append(entry)
    return result


# =============================================================================
# ATTENDANCE
# =============================================================================

def attendance_rollup(workers, attendance_rows, total_days) -> Dict[str, Any]:
    """
    Per-worker attendance over a window of ``total_days`` days.

    Every day starts out counted as absent; a PRESENT or LATE row moves the
    day out of ``absent_days``. Leave rows stay inside ``absent_days`` and are
    reported separately in ``leave_days``; days with no row at all are
    reported in ``unrecorded_days``.
    """
    rows_by_user = defaultdict(list)
    for row in attendance_rows:
        rows_by_user[row.user_id].append(row)

    breakdown = []
    totals = {'present': 0, 'late': 0, 'absent': 0, 'leave': 0, 'unrecorded': 0}
    for worker in workers:
        present = late = leave = 0
        absent = total_days
        rows = rows_by_user.get(worker.id, [])
        for row in rows:
            if row.status == AttendanceRecord.Status.PRESENT:
                present += 1
                absent -= 1
            elif row.status == AttendanceRecord.Status.LATE:
                late += 1
                absent -= 1
            elif row.status in ON_LEAVE:
                leave += 1
        absent = max(0, absent)
        unrecorded = max(0, total_days - len(rows))
        rate = percent(present + late, total_days)

        totals['present'] += present
        totals['late'] += late
        totals['absent'] += absent
        totals['leave'] += leave
        totals['unrecorded'] += unrecorded

        breakdown.append({
            'user_id': worker.id,
            'user_name': worker.name,
            'total_days': total_days,
            'present_days': present,
            'late_days': late,
            'absent_days': absent,
            'leave_days': leave,
            'unrecorded_days': unrecorded,
            'attendance_rate': rate,
            'status': attendance_status(rate),
        })

    worker_days = total_days * len(workers)
    summary = {
        'total_workers': len(workers),
        'average_attendance_rate': percent(totals['present'] + totals['late'], worker_days),
        'total_present_days': totals['present'],
        'total_late_days': totals['late'],
        'total_absent_days': totals['absent'],
        'total_leave_days': totals['leave'],
        'total_unrecorded_days': totals['unrecorded'],
    }
    return {'summary': summary, 'worker_breakdown': breakdown}


def daily_attendance(workers, attendance_rows, days) -> List[Dict[str, Any]]:
    """Present / late / absent head-count for each day of the window."""
    worker_ids = {worker.id for worker in workers}
    counts = defaultdict(lambda: {'present': 0, 'late': 0})
    for row in attendance_rows:
        if row.user_id not in worker_ids:
            continue
        if row.status == AttendanceRecord.Status.PRESENT:
            counts[row.date]['present'] += 1
        elif row.status == AttendanceRecord.Status.LATE:
            counts[row.date]['late'] += 1

    result = []
    for day in days:
        entry = counts.get(day, {'present': 0, 'late': 0})
        attended = entry['present'] + entry['late']
        result.append({
            'date': day.isoformat(),
            'present': entry['present'],
            'late': entry['late'],
            'absent': max(0, len(worker_ids) - attended),
            'attendance_rate': percent(attended, len(worker_ids)),
        })
    return result


# =============================================================================
# INSIGHTS
# =============================================================================

HIGH_LOSS_PERCENT = 10
LOW_SHED_EFFICIENCY = 60
LOW_OUTPUT_SHARE = 0.5


def build_insights(production: Optional[Dict[str, Any]], attendance: Optional[Dict[str, Any]],
                   total_days: int, total_capacity: int = 0) -> Dict[str, Any]:
    """Rule-based observations and recommendations for a report."""
    insights = {}
    recommendations = []

    if production is not None:
        summary = production['summary']
        insights['production_trends'] = {
            'description': (
                f"Average daily production of {int(round(summary['average_daily']))} eggs "
                f"with {summary['loss_percentage']:.1f}% loss rate over {total_days} days."
            )
        }

        sheds = sorted(production.get('shed_breakdown') or [], key=lambda s: s['efficiency'], reverse=True)
        if sheds:
            best, worst = sheds[0], sheds[-1]
            insights['shed_performance'] = {
                'best_shed': best['shed_name'],
                'worst_shed': worst['shed_name'],
                'description': f"{best['shed_name']} is the top performer with {best['efficiency']:.1f}% efficiency.",
            }

        if summary['loss_percentage'] > HIGH_LOSS_PERCENT:
            recommendations.append(
                "High egg loss rate detected. Consider reviewing handling procedures and storage conditions."
            )

        low_sheds = [shed for shed in sheds if shed['efficiency'] < LOW_SHED_EFFICIENCY]
        if low_sheds:
            recommendations.append(
                f"{len(low_sheds)} shed(s) showing low efficiency. "
                f"Review feeding schedules and environmental conditions."
            )

        if total_capacity and summary['days_reported'] and \
                summary['average_daily'] < total_capacity * LOW_OUTPUT_SHARE:
            recommendations.append(
                "Average daily production is below half of total shed capacity. "
                "Check flock health, lighting and feed quality."
            )

    if attendance is not None:
        summary = attendance['summary']
        insights['attendance_insights'] = {
            'description': (
                f"Overall attendance rate of {summary['average_attendance_rate']:.1f}% "
                f"across {summary['total_workers']} workers."
            )
        }
        if summary['total_workers'] and summary['average_attendance_rate'] < GOOD_ATTENDANCE:
            recommendations.append(
                "Low attendance rate. Consider implementing attendance incentives or reviewing work conditions."
            )

    if not recommendations:
        recommendations.append("Operations are performing well. Continue current practices and monitor trends.")

    insights['recommendations'] = recommendations
    return insights


# =============================================================================
# ALERT RULES
# =============================================================================

EXPECTED_LAY_RATE = 0.8
LOW_PRODUCTION_SHARE = 0.6
WASTE_MEDIUM = 10
WASTE_HIGH = 15
CAPACITY_PRESSURE = 95
ABSENCE_ALERT_PERCENT = 20


def farm_alerts(farm, capacity, rows: Iterable) -> List[Dict[str, Any]]:
    """
    Alerts for one farm from its production rows in the look-back window.

    The most recent recorded day is judged for low production and waste; the
    average over all recorded days is judged for capacity pressure. A farm
    without rows yields no alerts.
    """
    rows = list(rows)
    if not rows:
        return []

    latest_date = max(row.date for row in rows)
    latest = [row for row in rows if row.date == latest_date]
    latest_sellable = sum(row.sellable_eggs for row in latest)
    latest_waste = sum(row.waste_eggs for row in latest)
    latest_total = sum(row.total_daily_eggs for row in latest)

    def alert(alert_type, message, severity):
        return {
            'type': alert_type,
            'message': message,
            'farm_id': farm.id,
            'farm_name': farm.name,
            'severity': severity,
        }

    alerts = []
    expected = capacity * EXPECTED_LAY_RATE
    if capacity > 0 and latest_sellable < expected * LOW_PRODUCTION_SHARE:
        alerts.append(alert(
            'low_production',
            f"{farm.name} production is significantly below expected "
            f"({latest_sellable} vs {int(round(expected))})",
            'high',
        ))

    waste_rate = latest_waste / latest_total * 100 if latest_total else 0
    if waste_rate > WASTE_MEDIUM:
        alerts.append(alert(
            'high_damage',
            f"{farm.name} has high egg waste rate ({int(round(waste_rate))}%) - check handling and storage",
            'high' if waste_rate > WASTE_HIGH else 'medium',
        ))

    recorded_days = len({row.date for row in rows})
    average = sum(row.sellable_eggs for row in rows) / recorded_days
    utilization = average / capacity * 100 if capacity > 0 else 0
    if utilization > CAPACITY_PRESSURE:
        alerts.append(alert(
            'capacity_issue',
            f"{farm.name} is operating at {int(round(utilization))}% capacity",
            'medium',
        ))

    return alerts


def attendance_alert(absent_count, total_workers) -> Optional[Dict[str, Any]]:
    if not total_workers:
        return None
    absent_rate = absent_count / total_workers * 100
    if absent_rate <= ABSENCE_ALERT_PERCENT:
        return None
    return {
        'type': 'poor_attendance',
        'message': f"High absence rate detected: {absent_rate:.1f}% of workers were absent",
        'farm_id': None,
        'farm_name': None,
        'severity': 'high',
    }
