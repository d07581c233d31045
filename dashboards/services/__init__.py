"""
Dashboard and report services.

Every service takes an OrganizationRecords instance; none of them reach the
ORM directly.
"""

from .records import OrganizationRecords
from .dashboard_stats import DashboardStatsService
from .reports import InvalidReportWindow, ReportRequest, ReportResult, ReportService
from .alerts import AlertService

__all__ = [
    'OrganizationRecords',
    'DashboardStatsService',
    'InvalidReportWindow',
    'ReportRequest',
    'ReportResult',
    'ReportService',
    'AlertService',
]
