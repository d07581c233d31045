"""
Dashboard, Analytics and Report API Views

Endpoints:
- GET /api/dashboard/stats/ - header figures for the organization dashboard
- GET /api/analytics/production-trend/
- GET /api/analytics/shed-performance/
- GET /api/analytics/weekly-production/
- GET /api/analytics/attendance/
- GET /api/analytics/alerts/
- POST /api/reports/ - generate a report
- GET /api/reports/export/{csv|excel|pdf}/
- GET/POST /api/reports/scheduled/
- GET/PUT/DELETE /api/reports/scheduled/{id}/
- GET/POST /api/cron/reports/ - dispatch due scheduled reports (Bearer CRON_SECRET)
- GET/POST /api/cron/alerts/ - send alert notifications (Bearer CRON_SECRET)
"""

import hmac
import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from accounts.permissions import IsOrganizationMember, IsOwnerOrManager
from core.api import OrganizationScopedView, success_response, error_response
from .models import ScheduledReport
from .serializers import AnalyticsQuerySerializer, ScheduledReportSerializer, ReportRequestSerializer
from .services import (
    OrganizationRecords, DashboardStatsService, ReportService, AlertService,
)
from .services import exports
from .services.alerts import dispatch_alert_notifications
from .services.scheduler import process_due_reports

logger = logging.getLogger(__name__)


class OrganizationAnalyticsView(APIView):
    """Base class for read-only analytics over the requester's organization."""
    permission_classes = [IsOrganizationMember]

    def get_records(self):
        return OrganizationRecords(self.request.user.organization)

    def parse_query(self, request):
        """Validated analytics query parameters, or None with the errors kept on ``self.query_errors``."""
        query = AnalyticsQuerySerializer(data=request.query_params)
        if not query.is_valid():
            self.query_errors = query.errors
            return None
        return query.validated_data

    def invalid_query(self):
        return error_response('Invalid query parameters', fields=self.query_errors)


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardStatsView(OrganizationAnalyticsView):
    """
    GET /api/dashboard/stats/

    Query Parameters:
        days (int): trailing window for total_production (default 30, 1-365)
    """

    def get(self, request):
        query = self.parse_query(request)
        if query is None:
            return self.invalid_query()
        days = query.get('days', settings.DASHBOARD_TRAILING_DAYS)
        try:
            stats = DashboardStatsService(self.get_records()).get_stats(days=days)
        except DatabaseError:
            logger.exception(f"Dashboard statistics failed for organization {request.user.organization_id}")
            return error_response('Failed to fetch dashboard statistics', status.HTTP_500_INTERNAL_SERVER_ERROR)
        return success_response(stats)


class ProductionTrendView(OrganizationAnalyticsView):
    """
    GET /api/analytics/production-trend/

    Query Parameters:
        days (int): default 30, 1-365
        farm (uuid): optional farm filter
    """

    def get(self, request):
        query = self.parse_query(request)
        if query is None:
            return self.invalid_query()
        service = DashboardStatsService(self.get_records())
        return success_response(service.production_trend_series(query.get('days', 30), farm_id=query.get('farm')))


class ShedPerformanceView(OrganizationAnalyticsView):
    """
    GET /api/analytics/shed-performance/

    Query Parameters:
        days (int): default 30, 1-365
        farm (uuid): optional farm filter
    """

    def get(self, request):
        query = self.parse_query(request)
        if query is None:
            return self.invalid_query()
        service = DashboardStatsService(self.get_records())
        return success_response(service.shed_performance(query.get('days', 30), farm_id=query.get('farm')))


class WeeklyProductionView(OrganizationAnalyticsView):
    """
    GET /api/analytics/weekly-production/

    Query Parameters:
        weeks (int): default 12, 1-52
        farm (uuid): optional farm filter
    """

    def get(self, request):
        query = self.parse_query(request)
        if query is None:
            return self.invalid_query()
        service = DashboardStatsService(self.get_records())
        return success_response(service.weekly_production(query['weeks'], farm_id=query.get('farm')))


class AttendanceSummaryView(OrganizationAnalyticsView):
    """GET /api/analytics/attendance/?days=30"""
    permission_classes = [IsOwnerOrManager]

    def get(self, request):
        query = self.parse_query(request)
        if query is None:
            return self.invalid_query()
        return success_response(DashboardStatsService(self.get_records()).attendance_summary(query.get('days', 30)))


class AlertsView(OrganizationAnalyticsView):
    """
    GET /api/analytics/alerts/

    Production alerts over the last 7 days; recomputed on every request.
    """

    def get(self, request):
        return success_response(AlertService(self.get_records()).detect())


# =============================================================================
# REPORTS
# =============================================================================

class ReportView(OrganizationAnalyticsView):
    """
    POST /api/reports/

    Request Body:
    {
        "report_type": "comprehensive|production|attendance|daily|weekly|monthly",
        "start_date": "2026-02-01",
        "end_date": "2026-02-28",
        "farm_id": "uuid",       // optional
        "shed_id": "uuid",       // optional
        "manager_id": "uuid"     // optional
    }

    Returns 200 with ``status`` ok or no_data, 400 for a future start or a
    reversed range, 503 when the report could not be produced.
    """
    permission_classes = [IsOwnerOrManager]

    def post(self, request):
        serializer = ReportRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)

        result = ReportService(self.get_records()).generate(serializer.to_request())
        if result.is_failed:
            return error_response(
                f'Report generation failed: {result.reason}',
                status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return success_response(result.report, status=result.status)


class ReportExportView(OrganizationAnalyticsView):
    """
    GET /api/reports/export/{csv|excel|pdf}/

    Takes the same parameters as POST /api/reports/ as query parameters.
    """
    permission_classes = [IsOwnerOrManager]

    FORMATS = {
        'csv': ('csv', 'text/csv', exports.render_csv),
        'excel': ('xlsx', 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', exports.render_excel),
        'pdf': ('pdf', 'application/pdf', exports.render_pdf),
    }

    def get(self, request, export_format):
        if export_format not in self.FORMATS:
            return error_response(f'Unsupported export format: {export_format}', status.HTTP_404_NOT_FOUND)

        serializer = ReportRequestSerializer(data=request.query_params)
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)

        result = ReportService(self.get_records()).generate(serializer.to_request())
        if result.is_failed:
            return error_response(
                f'Report generation failed: {result.reason}',
                status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        extension, content_type, render = self.FORMATS[export_format]
        response = HttpResponse(render(result.report), content_type=content_type)
        response['Content-Disposition'] = f'attachment; filename="{exports.filename_for(result.report, extension)}"'
        return response


class ScheduledReportListView(OrganizationScopedView):
    """
    GET /api/reports/scheduled/
    POST /api/reports/scheduled/
    """
    permission_classes = [IsOwnerOrManager]
    model = ScheduledReport
    serializer_class = ScheduledReportSerializer

    def get(self, request):
        reports = self.get_queryset().select_related('farm', 'shed', 'manager')
        return self.paginated(reports.order_by('-created_at'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        report = serializer.save(organization=request.user.organization, created_by=request.user)
        logger.info(f"Scheduled {report.report_type} report {report.id}; first send {report.next_send.isoformat()}")
        return success_response(
            self.get_serializer(report).data,
            message='Scheduled report created',
            status_code=status.HTTP_201_CREATED,
        )


class ScheduledReportDetailView(OrganizationScopedView):
    """
    GET /api/reports/scheduled/{id}/
    PUT /api/reports/scheduled/{id}/
    DELETE /api/reports/scheduled/{id}/
    """
    permission_classes = [IsOwnerOrManager]
    model = ScheduledReport
    serializer_class = ScheduledReportSerializer

    def get(self, request, report_id):
        report = self.get_object(report_id)
        if report is None:
            return self.not_found('Scheduled report')
        return success_response(self.get_serializer(report).data)

    def put(self, request, report_id):
        report = self.get_object(report_id)
        if report is None:
            return self.not_found('Scheduled report')
        serializer = self.get_serializer(report, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Scheduled report updated')

    def delete(self, request, report_id):
        report = self.get_object(report_id)
        if report is None:
            return self.not_found('Scheduled report')
        report.delete()
        return success_response(message='Scheduled report deleted')


# =============================================================================
# EXTERNAL TRIGGERS
# =============================================================================

class CronView(APIView):
    """
    Stateless job trigger for an external scheduler.

    Requires ``Authorization: Bearer <CRON_SECRET>``; every request is
    rejected while CRON_SECRET is unset.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def authorized(self, request):
        secret = settings.CRON_SECRET
        header = request.headers.get('Authorization', '')
        if not secret or not header.startswith('Bearer '):
            return False
        return hmac.compare_digest(header[len('Bearer '):], secret)

    def run(self):
        raise NotImplementedError

    def get(self, request):
        return self.handle(request)

    def post(self, request):
        return self.handle(request)

    def handle(self, request):
        if not self.authorized(request):
            return error_response('Unauthorized', status.HTTP_401_UNAUTHORIZED)
        return success_response(self.run())


class CronReportsView(CronView):
    """GET/POST /api/cron/reports/"""

    def run(self):
        summary = process_due_reports()
        logger.info(f"Cron report run: {summary}")
        return summary


class CronAlertsView(CronView):
    """GET/POST /api/cron/alerts/"""

    def run(self):
        summary = dispatch_alert_notifications()
        logger.info(f"Cron alert run: {summary}")
        return summary
