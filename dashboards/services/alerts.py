"""
Alert detection over recent production and attendance.

Alerts are recomputed on every call; nothing is stored.
"""

import logging
from collections import defaultdict
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, OperationalError
from django.utils import timezone

from accounts.models import Organization
from attendance.models import AttendanceRecord
from . import aggregation
from .notifications import send_alert_email
from .records import OrganizationRecords

logger = logging.getLogger(__name__)


class AlertService:

    def __init__(self, records):
        self.records = records

    def detect(self, today=None):
        """
        Production alerts per active farm over the trailing window
        (``today - ALERT_WINDOW_DAYS`` through yesterday).
        """
        today = today or timezone.localdate()
        start = today - timedelta(days=settings.ALERT_WINDOW_DAYS)
        end = today - timedelta(days=1)

        rows_by_farm = defaultdict(list)
        for row in self.records.production_rows(start, end):
            rows_by_farm[row.farm_id].append(row)

        capacity_by_farm = defaultdict(int)
        for shed in self.records.sheds():
            capacity_by_farm[shed.farm_id] += shed.capacity

        alerts = []
        for farm in self.records.farms():
            alerts.extend(
                aggregation.farm_alerts(farm, capacity_by_farm[farm.id], rows_by_farm.get(farm.id, []))
            )
        return alerts

    def attendance_alerts(self, today=None):
        """Poor attendance yesterday, judged on explicit ABSENT rows."""
        today = today or timezone.localdate()
        yesterday = today - timedelta(days=1)
        workers = self.records.workers()
        rows = self.records.attendance_rows(yesterday, yesterday, user_ids=[worker.id for worker in workers])
        absent = sum(1 for row in rows if row.status == AttendanceRecord.Status.ABSENT)
        alert = aggregation.attendance_alert(absent, len(workers))
        return [alert] if alert else []

    def notification_alerts(self, today=None):
        """Everything the periodic alert email reports."""
        return self.detect(today) + self.attendance_alerts(today)


def dispatch_alert_notifications(today=None):
    """
    Detect alerts for every active organization and email its owners and
    managers, filtered by each user's notification settings.

    A failing organization or recipient is logged and counted in ``failed``;
    the run carries on with the rest. OperationalError propagates so the
    caller can retry the whole run.
    """
    summary = {'organizations': 0, 'alerts': 0, 'emails': 0, 'failed': 0}
    for organization in Organization.objects.filter(is_active=True).order_by('name'):
        records = OrganizationRecords(organization)
        try:
            alerts = AlertService(records).notification_alerts(today)
            recipients = records.alert_recipients() if alerts else []
        except OperationalError:
            raise
        except DatabaseError:
            logger.exception(f"Alert detection failed for {organization.name}")
            summary['failed'] += 1
            continue
        if not alerts:
            continue

        summary['organizations'] += 1
        summary['alerts'] += len(alerts)
        for user in recipients:
            try:
                sent = send_alert_email(user, alerts)
            except OperationalError:
                raise
            except Exception:
                logger.exception(f"Alert email to {user.email} failed for {organization.name}")
                summary['failed'] += 1
                continue
            if sent:
                summary['emails'] += 1
        logger.info(f"{len(alerts)} alert(s) detected for {organization.name}")
    return summary
