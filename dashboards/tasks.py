"""
Dashboard Celery tasks.

Periodic entry points for scheduled reports and alert notifications. Celery
Beat (see core/celery.py) and the cron endpoints call the same service
functions. Only database outages are retried; other failures are counted
per row or recipient by the services themselves.
"""
from celery import shared_task
from django.db import OperationalError
from django.utils import timezone
import logging

from .services import scheduler
from .services.alerts import dispatch_alert_notifications

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def process_due_reports(self):
    """
    Send every scheduled report whose slot has come up.

    Scheduled via Celery Beat to run hourly. Rows that fail keep their
    next_send and are picked up again on the next run.
    """
    try:
        summary = scheduler.process_due_reports()
    except OperationalError as exc:
        logger.error(f"Scheduled report run could not reach the database: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))

    logger.info(
        f"Scheduled reports: {summary['sent']} sent, {summary['failed']} failed "
        f"of {summary['processed']} due"
    )
    return {
        'status': 'success',
        'timestamp': timezone.now().isoformat(),
        **summary,
    }


@shared_task(bind=True, max_retries=3)
def send_alert_notifications(self):
    """
    Detect farm alerts and email owners and managers who opted in.

    Scheduled via Celery Beat to run every 4 hours. A retry re-sends alerts
    to recipients who were already emailed in the failed run.
    """
    try:
        summary = dispatch_alert_notifications()
    except OperationalError as exc:
        logger.error(f"Alert notification run could not reach the database: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))

    logger.info(
        f"Alert notifications: {summary['emails']} email(s) for {summary['organizations']} organization(s), "
        f"{summary['failed']} failed"
    )
    return {
        'status': 'success',
        'timestamp': timezone.now().isoformat(),
        **summary,
    }
