"""
Scheduled report dispatch.

process_due_reports() is stateless and safe to call from several workers at
once: each due row is claimed with ``SELECT ... FOR UPDATE SKIP LOCKED`` and
re-checked under the lock, so a slot is sent at most once. A failed send keeps
its ``next_send``; the next invocation retries it.

Usage:
    from dashboards.services.scheduler import process_due_reports

    summary = process_due_reports()
    # {'processed': 3, 'sent': 2, 'failed': 1}
"""

import logging
from datetime import datetime, time, timedelta

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from dashboards.models import ScheduledReport
from .notifications import send_report_email
from .records import OrganizationRecords
from .reports import ReportRequest, ReportService, PERIOD_DAYS

logger = logging.getLogger(__name__)


def calculate_next_send(report_type, now=None):
    """
    Next send slot after ``now`` at REPORT_SEND_HOUR local time:
    daily -> next day, weekly -> next Monday, monthly -> 1st of next month.
    """
    now = now or timezone.now()
    today = timezone.localtime(now).date()

    if report_type == ScheduledReport.ReportType.DAILY:
        next_date = today + timedelta(days=1)
    elif report_type == ScheduledReport.ReportType.WEEKLY:
        next_date = today + timedelta(days=(7 - today.weekday()) or 7)
    elif report_type == ScheduledReport.ReportType.MONTHLY:
        next_date = today.replace(day=1) + relativedelta(months=1)
    else:
        raise ValueError(f"Unknown report type: {report_type}")

    send_at = datetime.combine(next_date, time(hour=settings.REPORT_SEND_HOUR))
    return timezone.make_aware(send_at, timezone.get_current_timezone())


def build_request(scheduled, now):
    """Report window ending yesterday: 1, 7 or 30 days long."""
    today = timezone.localtime(now).date()
    return ReportRequest(
        report_type=scheduled.report_type,
        start_date=today - timedelta(days=PERIOD_DAYS[scheduled.report_type]),
        farm_id=str(scheduled.farm_id) if scheduled.farm_id else None,
        shed_id=str(scheduled.shed_id) if scheduled.shed_id else None,
        manager_id=str(scheduled.manager_id) if scheduled.manager_id else None,
    )


class ReportDispatchError(Exception):
    """The report could not be produced for sending."""


def send_scheduled_report(scheduled, now):
    service = ReportService(OrganizationRecords(scheduled.organization))
    result = service.generate(build_request(scheduled, now), today=timezone.localtime(now).date())
    if result.is_failed:
        raise ReportDispatchError(result.reason)
    send_report_email(result.report, scheduled.recipients)
    return result


def _claim(report_id, now):
    return (
        ScheduledReport.objects
        .select_for_update(skip_locked=True)
        .select_related('organization')
        .filter(pk=report_id, is_active=True, next_send__lte=now)
        .first()
    )


def process_due_reports(now=None):
    now = now or timezone.now()
    due_ids = list(
        ScheduledReport.objects
        .filter(is_active=True, next_send__lte=now)
        .order_by('next_send')
        .values_list('id', flat=True)
    )

    summary = {'processed': 0, 'sent': 0, 'failed': 0}
    for report_id in due_ids:
        with transaction.atomic():
            scheduled = _claim(report_id, now)
            if scheduled is None:
                # Another worker holds it or has already advanced it.
                continue

            summary['processed'] += 1
            try:
                with transaction.atomic():
                    result = send_scheduled_report(scheduled, now)
            except Exception as exc:
                logger.exception(f"Scheduled report {scheduled.id} ({scheduled.report_type}) failed")
                scheduled.last_error = f"{exc.__class__.__name__}: {exc}"
                scheduled.save(update_fields=['last_error', 'updated_at'])
                summary['failed'] += 1
                continue

            scheduled.last_sent = now
            scheduled.next_send = calculate_next_send(scheduled.report_type, now)
            scheduled.last_error = ''
            scheduled.save(update_fields=['last_sent', 'next_send', 'last_error', 'updated_at'])
            summary['sent'] += 1
            logger.info(
                f"Scheduled report {scheduled.id} sent ({result.status}); next at {scheduled.next_send.isoformat()}"
            )

    return summary
