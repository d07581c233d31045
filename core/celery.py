"""
Celery configuration for the Poultry Farm Operations backend.

This module configures Celery for background task processing.

Tasks to run in background:
- Scheduled report delivery (daily / weekly / monthly emails)
- Alert notification emails
- Any email sending triggered from request handlers
"""
import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')

# Create Celery app
app = Celery('core')

# Load config from Django settings with CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

# Auto-discover tasks in all installed apps
app.autodiscover_tasks()


# =============================================================================
# CELERY BEAT SCHEDULE - Periodic Tasks
# =============================================================================
app.conf.beat_schedule = {
    # Send scheduled reports whose slot has come up (run hourly)
    'process-due-reports': {
        'task': 'dashboards.tasks.process_due_reports',
        'schedule': crontab(minute=0),
    },

    # Detect farm alerts and notify owners/managers (run every 4 hours)
    'send-alert-notifications': {
        'task': 'dashboards.tasks.send_alert_notifications',
        'schedule': crontab(hour='*/4', minute=0),
    },
}

# Celery configuration
app.conf.update(
    # Task result expiry
    result_expires=3600,  # 1 hour

    # Task time limits
    task_time_limit=300,  # 5 minutes hard limit
    task_soft_time_limit=240,  # 4 minutes soft limit

    # Retry policy
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Prefetch multiplier (1 = fair distribution)
    worker_prefetch_multiplier=1,

    # Serialization
    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],

    # Timezone
    timezone=os.getenv('TIME_ZONE', 'Asia/Kolkata'),
    enable_utc=True,
)
