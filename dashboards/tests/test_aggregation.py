"""
Tests for the pure aggregation functions.

Rows are built by hand; nothing here touches the database.
"""
from datetime import date, timedelta

import pytest

from attendance.models import AttendanceRecord
from dashboards.services import aggregation
from dashboards.services.rows import (
    FarmRow, ShedRow, ProductionRow, MortalityRow, FlockRow, AttendanceRow, WorkerRow,
)

DAY = date(2026, 2, 10)


def production(row_id='p1', day=DAY, farm_id='f1', shed_id=None, **counts):
    return ProductionRow(
        id=row_id,
        farm_id=farm_id,
        farm_name='North Farm',
        date=day,
        shed_id=shed_id,
        shed_name='Shed A' if shed_id else None,
        **counts
    )


FARM = FarmRow(id='f1', name='North Farm', male_count=100, female_count=900)


class TestEggCounts:

    def test_older_schema_row_splits_into_sellable_and_waste(self):
        row = production(total_eggs=100, broken_eggs=15, damaged_eggs=10)
        assert row.sellable_eggs == 75
        assert row.waste_eggs == 25
        assert row.total_daily_eggs == 100

    def test_category_row_partitions_total(self):
        row = production(table_eggs=50, hatching_eggs=30, jumbo_eggs=10, cracked_eggs=5, leaker_eggs=5)
        assert row.total_daily_eggs == 100
        assert row.sellable_eggs + row.waste_eggs == row.total_daily_eggs
        assert row.dashboard_eggs == 80

    def test_older_schema_sellable_never_negative(self):
        row = production(total_eggs=10, broken_eggs=8, damaged_eggs=8)
        assert row.sellable_eggs == 0


class TestPercentages:

    @pytest.mark.parametrize('current,previous,expected', [
        (50, 0, 0),
        (0, 0, 0),
        (120, 100, 20.0),
        (80, 100, -20.0),
        (1, 3, -66.67),
    ])
    def test_percent_change(self, current, previous, expected):
        assert aggregation.percent_change(current, previous) == expected

    def test_percent_text_zero_total(self):
        assert aggregation.percent_text(0, 0) == "0.0"
        assert aggregation.percent_text(1, 3) == "33.3"


class TestReconcileDays:

    def test_single_day_loss_percentage(self):
        rows = [production(total_eggs=100, broken_eggs=15, damaged_eggs=10)]
        details = aggregation.reconcile_days(rows, [], [], [], [FARM], [])
        summary = aggregation.summarize_production(details)

        assert details[0]['sellable_eggs'] == 75
        assert summary['loss_percentage'] == 25.0
        assert summary['days_reported'] == 1
        assert summary['average_daily'] == 100

    def test_percent_strings(self):
        rows = [
            production('p1', table_eggs=50, hatching_eggs=30, jumbo_eggs=10, cracked_eggs=5, leaker_eggs=5),
            production('p2', day=DAY - timedelta(days=1)),
        ]
        details = aggregation.reconcile_days(rows, [], [], [], [FARM], [])

        assert details[0]['hd_percent'] == "90.0"
        assert details[0]['he_percent'] == "30.0"
        assert details[1]['hd_percent'] == "0.0"
        assert details[1]['he_percent'] == "0.0"

    def test_flock_row_preferred_for_bird_counts(self):
        flock = FlockRow(
            farm_id='f1', date=DAY, age_weeks=30, age_day_of_week=3,
            opening_male=90, opening_female=800, mortality_male=1, mortality_female=4,
            closing_male=89, closing_female=796,
        )
        details = aggregation.reconcile_days([production(table_eggs=10)], [flock], [], [], [FARM], [])

        assert details[0]['opening_female'] == 800
        assert details[0]['closing_female'] == 796
        assert details[0]['age_weeks'] == 30

    def test_fallback_subtracts_mortality_and_floors_at_zero(self):
        mortality = [MortalityRow(farm_id='f1', date=DAY, male_mortality=5, female_mortality=950)]
        details = aggregation.reconcile_days([production(table_eggs=10)], [], mortality, [], [FARM], [])

        assert details[0]['opening_male'] == 100
        assert details[0]['closing_male'] == 95
        assert details[0]['closing_female'] == 0
        assert details[0]['age_weeks'] is None

    def test_labour_counts(self):
        workers = [
            WorkerRow(id='w1', name='A', supervisor_id='m1'),
            WorkerRow(id='w2', name='B', supervisor_id='m1'),
            WorkerRow(id='w3', name='C'),
        ]
        attendance = [
            AttendanceRow(user_id='w1', date=DAY, status='PRESENT'),
            AttendanceRow(user_id='w2', date=DAY, status='LATE'),
            AttendanceRow(user_id='w3', date=DAY, status='ABSENT'),
        ]
        details = aggregation.reconcile_days([production(table_eggs=10)], [], [], attendance, [FARM], workers)

        assert details[0]['present_labors'] == 2
        assert details[0]['total_labors'] == 3
        assert details[0]['supervisors'] == 1

    def test_empty_range_gives_zero_summary(self):
        summary = aggregation.summarize_production([])
        assert summary['total_eggs'] == 0
        assert summary['loss_percentage'] == 0
        assert summary['average_daily'] == 0


class TestBreakdowns:

    def test_farm_breakdown_efficiency(self):
        rows = [production(table_eggs=80, cracked_eggs=20)]
        details = aggregation.reconcile_days(rows, [], [], [], [FARM], [])
        breakdown = aggregation.farm_breakdown(details)

        assert breakdown['f1']['efficiency'] == 80.0
        assert breakdown['f1']['days_reported'] == 1

    def test_shed_efficiency_is_capped(self):
        shed = ShedRow(id='s1', name='Shed A', farm_id='f1', farm_name='North Farm', capacity=10)
        rows = [production(shed_id='s1', table_eggs=50)]
        breakdown = aggregation.shed_breakdown(rows, [shed], total_days=1)
        assert breakdown[0]['efficiency'] == 100.0

    def test_shed_without_capacity_has_zero_efficiency(self):
        shed = ShedRow(id='s1', name='Shed A', farm_id='f1', farm_name='North Farm', capacity=0)
        breakdown = aggregation.shed_breakdown([production(shed_id='s1', table_eggs=50)], [shed], total_days=1)
        assert breakdown[0]['efficiency'] == 0.0

    def test_shed_performance_averages_recorded_days(self):
        sheds = [
            ShedRow(id='s1', name='Shed A', farm_id='f1', farm_name='North Farm', capacity=1000),
            ShedRow(id='s2', name='Shed B', farm_id='f1', farm_name='North Farm', capacity=500),
        ]
        rows = [
            production('p1', shed_id='s1', table_eggs=300),
            production('p2', day=DAY - timedelta(days=1), shed_id='s1', table_eggs=500),
            production('p3', shed_id='s2', table_eggs=100),
        ]
        performance = aggregation.shed_performance(rows, sheds)

        assert [item['shed_id'] for item in performance] == ['s1', 's2']
        assert performance[0]['average_daily'] == 400
        assert performance[0]['efficiency'] == 40.0
        assert performance[1]['efficiency'] == 20.0

    def test_weekly_buckets_follow_iso_weeks(self):
        rows = [
            production('p1', day=date(2026, 2, 2), table_eggs=10),
            production('p2', day=date(2026, 2, 8), table_eggs=20),
            production('p3', day=date(2026, 2, 9), table_eggs=30),
        ]
        weeks = aggregation.production_by_week(rows)

        assert [week['week'] for week in weeks] == ['2026-W06', '2026-W07']
        assert weeks[0]['sellable_eggs'] == 30
        assert weeks[0]['week_start'] == '2026-02-02'
        assert weeks[0]['average_daily'] == 15


class TestAttendanceRollup:

    @pytest.mark.parametrize('status', ['PRESENT', 'LATE', 'ABSENT', 'SICK_LEAVE', 'VACATION'])
    def test_record_and_rollup_agree_on_attendance(self, status):
        record = AttendanceRecord(status=status)
        assert record.attended == (status in aggregation.ATTENDED)
        assert (status in record.ON_LEAVE) == (status in aggregation.ON_LEAVE)

    def test_unrecorded_days_count_as_absent(self):
        start = date(2026, 1, 1)
        worker = WorkerRow(id='w1', name='Wendy')
        rows = [AttendanceRow(user_id='w1', date=start + timedelta(days=i), status='PRESENT') for i in range(20)]
        rows += [AttendanceRow(user_id='w1', date=start + timedelta(days=20 + i), status='LATE') for i in range(2)]

        rollup = aggregation.attendance_rollup([worker], rows, total_days=30)
        entry = rollup['worker_breakdown'][0]

        assert entry['present_days'] == 20
        assert entry['late_days'] == 2
        assert entry['absent_days'] == 8
        assert entry['unrecorded_days'] == 8
        assert entry['attendance_rate'] == 73.3
        assert entry['status'] == 'needs_improvement'

    def test_days_always_add_up(self):
        worker = WorkerRow(id='w1', name='Wendy')
        statuses = ['PRESENT', 'LATE', 'ABSENT', 'SICK_LEAVE', 'VACATION']
        rows = [AttendanceRow(user_id='w1', date=DAY + timedelta(days=i), status=s) for i, s in enumerate(statuses)]

        entry = aggregation.attendance_rollup([worker], rows, total_days=7)['worker_breakdown'][0]

        assert entry['present_days'] + entry['late_days'] + entry['absent_days'] == 7
        assert entry['leave_days'] == 2
        assert entry['unrecorded_days'] == 2

    @pytest.mark.parametrize('present,expected', [
        (10, 'excellent'),
        (9, 'good'),
        (8, 'needs_improvement'),
    ])
    def test_status_buckets(self, present, expected):
        worker = WorkerRow(id='w1', name='Wendy')
        rows = [AttendanceRow(user_id='w1', date=DAY + timedelta(days=i), status='PRESENT') for i in range(present)]
        entry = aggregation.attendance_rollup([worker], rows, total_days=10)['worker_breakdown'][0]
        assert entry['status'] == expected

    def test_no_workers(self):
        summary = aggregation.attendance_rollup([], [], total_days=30)['summary']
        assert summary['total_workers'] == 0
        assert summary['average_attendance_rate'] == 0

    def test_daily_attendance(self):
        workers = [WorkerRow(id='w1', name='A'), WorkerRow(id='w2', name='B')]
        rows = [AttendanceRow(user_id='w1', date=DAY, status='LATE')]
        daily = aggregation.daily_attendance(workers, rows, [DAY, DAY + timedelta(days=1)])

        assert daily[0] == {'date': DAY.isoformat(), 'present': 0, 'late': 1, 'absent': 1, 'attendance_rate': 50.0}
        assert daily[1]['absent'] == 2


class TestInsights:

    def production_section(self, loss=5.0, average=500, sheds=None):
        return {
            'summary': {'average_daily': average, 'loss_percentage': loss, 'days_reported': 7},
            'shed_breakdown': sheds or [],
        }

    def attendance_section(self, rate, workers=4):
        return {'summary': {'average_attendance_rate': rate, 'total_workers': workers}}

    def test_default_recommendation(self):
        insights = aggregation.build_insights(self.production_section(), self.attendance_section(96.0), 7)
        assert insights['recommendations'] == [
            "Operations are performing well. Continue current practices and monitor trends."
        ]
        assert insights['production_trends']['description'] == (
            "Average daily production of 500 eggs with 5.0% loss rate over 7 days."
        )
        assert insights['attendance_insights']['description'] == (
            "Overall attendance rate of 96.0% across 4 workers."
        )

    def test_threshold_recommendations(self):
        sheds = [
            {'shed_name': 'Shed A', 'efficiency': 90.0},
            {'shed_name': 'Shed B', 'efficiency': 40.0},
        ]
        insights = aggregation.build_insights(
            self.production_section(loss=12.5, average=300, sheds=sheds),
            self.attendance_section(70.0),
            7,
            total_capacity=1000,
        )
        recommendations = insights['recommendations']

        assert any(text.startswith("High egg loss rate detected") for text in recommendations)
        assert any(text.startswith("Low attendance rate") for text in recommendations)
        assert "1 shed(s) showing low efficiency. Review feeding schedules and environmental conditions." \
            in recommendations
        assert any("below half of total shed capacity" in text for text in recommendations)
        assert insights['shed_performance']['best_shed'] == 'Shed A'
        assert insights['shed_performance']['worst_shed'] == 'Shed B'


class TestAlertRules:

    def test_low_production_alert(self):
        rows = [production(table_eggs=400)]
        alerts = aggregation.farm_alerts(FARM, 1000, rows)

        assert alerts == [{
            'type': 'low_production',
            'message': 'North Farm production is significantly below expected (400 vs 800)',
            'farm_id': 'f1',
            'farm_name': 'North Farm',
            'severity': 'high',
        }]

    def test_no_rows_no_alerts(self):
        assert aggregation.farm_alerts(FARM, 1000, []) == []

    @pytest.mark.parametrize('cracked,severity', [(12, 'medium'), (20, 'high')])
    def test_waste_alert_severity(self, cracked, severity):
        rows = [production(table_eggs=100 - cracked, cracked_eggs=cracked)]
        alerts = aggregation.farm_alerts(FARM, 100, rows)
        waste = [alert for alert in alerts if alert['type'] == 'high_damage']
        assert waste[0]['severity'] == severity

    def test_waste_alert_uses_latest_day_only(self):
        rows = [
            production('p1', day=DAY - timedelta(days=1), table_eggs=50, cracked_eggs=50),
            production('p2', day=DAY, table_eggs=100),
        ]
        alerts = aggregation.farm_alerts(FARM, 100, rows)
        assert not [alert for alert in alerts if alert['type'] == 'high_damage']

    def test_capacity_pressure(self):
        rows = [
            production('p1', day=DAY - timedelta(days=1), table_eggs=96),
            production('p2', day=DAY, table_eggs=98),
        ]
        alerts = aggregation.farm_alerts(FARM, 100, rows)
        assert alerts == [{
            'type': 'capacity_issue',
            'message': 'North Farm is operating at 97% capacity',
            'farm_id': 'f1',
            'farm_name': 'North Farm',
            'severity': 'medium',
        }]

    def test_attendance_alert(self):
        alert = aggregation.attendance_alert(3, 10)
        assert alert['message'] == 'High absence rate detected: 30.0% of workers were absent'
        assert alert['severity'] == 'high'
        assert aggregation.attendance_alert(2, 10) is None
        assert aggregation.attendance_alert(0, 0) is None
