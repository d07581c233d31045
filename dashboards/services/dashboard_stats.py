"""
Dashboard Statistics Service

Today's figures and trailing-window totals for the organization dashboard,
plus the chart series behind the analytics page:
- Today's and trailing production (table + hatching eggs)
- Active farm / shed / worker counts
- Today's attendance rate
- Day-over-day trends
- Current flock size

Usage:
    from dashboards.services import DashboardStatsService, OrganizationRecords

    service = DashboardStatsService(OrganizationRecords(request.user.organization))
    stats = service.get_stats(days=30)
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from . import aggregation
from .aggregation import ATTENDED

logger = logging.getLogger(__name__)


class DashboardStatsService:
    """Read-only dashboard figures for one organization."""

    def __init__(self, records):
        self.records = records

    def _today(self, today=None):
        return today or timezone.localdate()

    # =========================================================================
    # SUMMARY
    # =========================================================================

    def get_stats(self, days=None, today=None):
        """
        Flat numeric summary for the dashboard header.

        Query failures propagate; the view turns them into a 500.
        """
        days = days or settings.DASHBOARD_TRAILING_DAYS
        today = self._today(today)
        yesterday = today - timedelta(days=1)

        # `days` dates ending today; yesterday is always read for the trend
        window_start = today - timedelta(days=max(days, 1) - 1)

        production = self.records.production_rows(min(window_start, yesterday), today)
        today_rows = [row for row in production if row.date == today]
        yesterday_rows = [row for row in production if row.date == yesterday]

        today_production = sum(row.dashboard_eggs for row in today_rows)
        yesterday_production = sum(row.dashboard_eggs for row in yesterday_rows)
        total_production = sum(row.dashboard_eggs for row in production if row.date >= window_start)

        workers = self.records.workers()
        worker_ids = [worker.id for worker in workers]
        attendance = self.records.attendance_rows(yesterday, today, user_ids=worker_ids)
        present_today = sum(1 for row in attendance if row.date == today and row.status in ATTENDED)
        present_yesterday = sum(1 for row in attendance if row.date == yesterday and row.status in ATTENDED)

        total_workers = len(workers)
        attendance_rate = round(present_today / total_workers * 100) if total_workers else 0

        return {
            'today_production': today_production,
            'today_hatching_eggs': sum(row.hatching_eggs for row in today_rows),
            'total_production': total_production,
            'attendance_rate': attendance_rate,
            'active_farms': self.records.active_farm_count(),
            'active_sheds': self.records.active_shed_count(),
            'total_workers': total_workers,
            'present_workers': present_today,
            'production_trend': aggregation.percent_change(today_production, yesterday_production),
            'attendance_trend': aggregation.percent_change(present_today, present_yesterday),
            'flock': self.flock_totals(),
        }

    def flock_totals(self):
        """Latest flock snapshot, or the farms' stored counts when none exists."""
        latest = self.records.latest_flock_row()
        if latest is not None:
            male, female = latest.closing_male, latest.closing_female
            source = 'flock_record'
        else:
            farms = self.records.farms()
            male = sum(farm.male_count for farm in farms)
            female = sum(farm.female_count for farm in farms)
            source = 'farms'
        return {
            'male': male,
            'female': female,
            'total': male + female,
            'source': source,
        }

    # =========================================================================
    # CHART SERIES
    # =========================================================================

    def production_trend_series(self, days=30, today=None, farm_id=None):
        today = self._today(today)
        rows = self.records.production_rows(today - timedelta(days=days - 1), today, farm_id=farm_id)
        return aggregation.production_by_date(rows)

    def shed_performance(self, days=30, today=None, farm_id=None):
        today = self._today(today)
        rows = self.records.production_rows(today - timedelta(days=days - 1), today, farm_id=farm_id)
        return aggregation.shed_performance(rows, self.records.sheds(farm_id=farm_id))

    def weekly_production(self, weeks=12, today=None, farm_id=None):
        today = self._today(today)
        monday = today - timedelta(days=today.weekday())
        start = monday - timedelta(weeks=weeks - 1)
        rows = self.records.production_rows(start, today, farm_id=farm_id)
        return aggregation.production_by_week(rows)

    def attendance_summary(self, days=30, today=None):
        today = self._today(today)
        start = today - timedelta(days=days - 1)
        workers = self.records.workers()
        rows = self.records.attendance_rows(start, today, user_ids=[worker.id for worker in workers])
        rollup = aggregation.attendance_rollup(workers, rows, days)
        rollup['daily'] = aggregation.daily_attendance(workers, rows, aggregation.date_span(start, today))
        return rollup
