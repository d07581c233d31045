"""
Dashboard, analytics, report and cron URL configuration
"""

from django.urls import path

from .views import (
    DashboardStatsView,
    ProductionTrendView,
    ShedPerformanceView,
    WeeklyProductionView,
    AttendanceSummaryView,
    AlertsView,
    ReportView,
    ReportExportView,
    ScheduledReportListView,
    ScheduledReportDetailView,
    CronReportsView,
    CronAlertsView,
)

urlpatterns = [
    path('dashboard/stats/', DashboardStatsView.as_view(), name='dashboard-stats'),

    # Analytics
    path('analytics/production-trend/', ProductionTrendView.as_view(), name='analytics-production-trend'),
    path('analytics/shed-performance/', ShedPerformanceView.as_view(), name='analytics-shed-performance'),
    path('analytics/weekly-production/', WeeklyProductionView.as_view(), name='analytics-weekly-production'),
    path('analytics/attendance/', AttendanceSummaryView.as_view(), name='analytics-attendance'),
    path('analytics/alerts/', AlertsView.as_view(), name='analytics-alerts'),

    # Reports
    path('reports/', ReportView.as_view(), name='report-generate'),
    path('reports/export/<str:export_format>/', ReportExportView.as_view(), name='report-export'),
    path('reports/scheduled/', ScheduledReportListView.as_view(), name='scheduled-report-list'),
    path('reports/scheduled/<uuid:report_id>/', ScheduledReportDetailView.as_view(), name='scheduled-report-detail'),

    # External triggers
    path('cron/reports/', CronReportsView.as_view(), name='cron-reports'),
    path('cron/alerts/', CronAlertsView.as_view(), name='cron-alerts'),
]
