"""
Report Generation Service

Builds the production / attendance report for a date range and optional
farm, shed or manager filter. The result is always a ReportResult:

- ok:      the report has production or attendance data
- no_data: nothing was recorded in the range; the report has its full, zeroed shape
- failed:  a query fault; ``reason`` says what went wrong, ``report`` is None

Connection-level failures (OperationalError) are not caught here. A window
that ends before it starts, or starts in the future, raises
InvalidReportWindow; request serializers check it first.

Usage:
    from dashboards.services import OrganizationRecords, ReportRequest, ReportService

    service = ReportService(OrganizationRecords(organization))
    result = service.generate(ReportRequest(report_type='weekly', start_date=date(2026, 2, 2)))
    if result.is_ok:
        send(result.report)
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Dict, Any

from django.db import DatabaseError, OperationalError
from django.utils import timezone

from . import aggregation

logger = logging.getLogger(__name__)


REPORT_TYPE_LABELS = {
    'comprehensive': 'Comprehensive Report',
    'production': 'Production Report',
    'attendance': 'Attendance Report',
    'daily': 'Daily Summary',
    'weekly': 'Weekly Summary',
    'monthly': 'Monthly Summary',
}

# Window length for the scheduled summaries, counted from start_date.
PERIOD_DAYS = {
    'daily': 1,
    'weekly': 7,
    'monthly': 30,
}

DATE_RANGE_FORMAT = '%b %d, %Y'


class InvalidReportWindow(ValueError):
    """The requested dates do not form a reportable window."""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class ReportRequest:
    report_type: str = 'comprehensive'
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    farm_id: Optional[str] = None
    shed_id: Optional[str] = None
    manager_id: Optional[str] = None

    def resolve_window(self, today=None):
        """Inclusive (start, end) for the request."""
        today = today or timezone.localdate()
        if self.report_type in PERIOD_DAYS:
            start = self.start_date or today - timedelta(days=PERIOD_DAYS[self.report_type])
            return start, start + timedelta(days=PERIOD_DAYS[self.report_type] - 1)
        end = self.end_date or today
        start = self.start_date or end - timedelta(days=29)
        return start, end

    def checked_window(self, today=None):
        """Like resolve_window, but rejects future starts and reversed ranges."""
        today = today or timezone.localdate()
        start, end = self.resolve_window(today)
        if start > today:
            raise InvalidReportWindow('start_date', 'Start date cannot be in the future.')
        if end < start:
            raise InvalidReportWindow('end_date', 'End date must be on or after start date.')
        return start, end

    @property
    def includes_production(self):
        return self.report_type != 'attendance'

    @property
    def includes_attendance(self):
        return self.report_type != 'production'


@dataclass(frozen=True)
class ReportResult:
    status: str
    report: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    OK = 'ok'
    NO_DATA = 'no_data'
    FAILED = 'failed'

    @classmethod
    def ok(cls, report):
        return cls(status=cls.OK, report=report)

    @classmethod
    def no_data(cls, report):
        return cls(status=cls.NO_DATA, report=report)

    @classmethod
    def failed(cls, reason):
        return cls(status=cls.FAILED, reason=reason)

    @property
    def is_ok(self):
        return self.status == self.OK

    @property
    def is_failed(self):
        return self.status == self.FAILED


class ReportService:
    """Report generation over an OrganizationRecords instance."""

    def __init__(self, records):
        self.records = records

    def generate(self, request: ReportRequest, today=None) -> ReportResult:
        start, end = request.checked_window(today)

        try:
            report = self.build(request, start, end)
        except OperationalError:
            raise
        except DatabaseError as exc:
            logger.exception(
                f"Report generation failed for {self.records.organization_name} "
                f"({request.report_type}, {start} to {end})"
            )
            return ReportResult.failed(str(exc) or exc.__class__.__name__)

        has_production = bool(report.get('production', {}).get('daily_data'))
        has_attendance = any(
            worker['present_days'] or worker['late_days'] or worker['leave_days']
            for worker in report.get('attendance', {}).get('worker_breakdown', [])
        )
        if not has_production and not has_attendance:
            return ReportResult.no_data(report)
        return ReportResult.ok(report)

    # =========================================================================
    # BUILDING
    # =========================================================================

    def build(self, request, start, end):
        total_days = (end - start).days + 1
        report = {
            'metadata': {
                'report_type': REPORT_TYPE_LABELS.get(request.report_type, 'Comprehensive Report'),
                'organization_name': self.records.organization_name,
                'date_range': f"{start.strftime(DATE_RANGE_FORMAT)} - {end.strftime(DATE_RANGE_FORMAT)}",
                'start_date': start.isoformat(),
                'end_date': end.isoformat(),
                'generated_at': timezone.now().isoformat(),
                'total_days': total_days,
            }
        }

        workers = self.records.workers(manager_id=request.manager_id)
        attendance_rows = self.records.attendance_rows(start, end, user_ids=[worker.id for worker in workers])

        production = None
        sheds = []
        if request.includes_production:
            production, sheds = self._production_section(request, start, end, total_days, workers, attendance_rows)
            report['production'] = production

        attendance = None
        if request.includes_attendance:
            attendance = aggregation.attendance_rollup(workers, attendance_rows, total_days)
            attendance['daily'] = aggregation.daily_attendance(
                workers, attendance_rows, aggregation.date_span(start, end)
            )
            report['attendance'] = attendance

        total_capacity = sum(shed.capacity for shed in sheds)
        report['insights'] = aggregation.build_insights(production, attendance, total_days, total_capacity)
        return report

    def _production_section(self, request, start, end, total_days, workers, attendance_rows):
        production_rows = self.records.production_rows(
            start, end,
            farm_id=request.farm_id,
            shed_id=request.shed_id,
            manager_id=request.manager_id,
        )
        flock_rows = self.records.flock_rows(start, end, farm_id=request.farm_id)
        mortality_rows = self.records.mortality_rows(start, end, farm_id=request.farm_id)
        farms = self.records.farms(farm_id=request.farm_id, manager_id=request.manager_id)
        sheds = self.records.sheds(
            farm_id=request.farm_id,
            shed_id=request.shed_id,
            manager_id=request.manager_id,
        )

        details = aggregation.reconcile_days(
            production_rows, flock_rows, mortality_rows, attendance_rows, farms, workers
        )
        section = {
            'summary': aggregation.summarize_production(details),
            'daily_data': details,
            'farm_breakdown': aggregation.farm_breakdown(details),
            'shed_breakdown': aggregation.shed_breakdown(production_rows, sheds, total_days),
        }
        return section, sheds
