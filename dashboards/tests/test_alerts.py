"""
Tests for AlertService and alert notifications.
"""
from datetime import date, timedelta

import pytest
from django.db import DatabaseError, OperationalError

from accounts.models import NotificationSettings
from attendance.models import AttendanceRecord
from dashboards.services import AlertService, OrganizationRecords
from dashboards.services import alerts as alerts_module
from dashboards.services.alerts import dispatch_alert_notifications
from farms.models import Farm, Shed
from flock_management.models import DailyProduction

pytestmark = pytest.mark.django_db

TODAY = date(2026, 2, 10)
YESTERDAY = TODAY - timedelta(days=1)


@pytest.fixture
def service(organization):
    return AlertService(OrganizationRecords(organization))


def test_low_production_against_shed_capacity(service, farm, shed):
    DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)

    alerts = service.detect(today=TODAY)

    assert alerts == [{
        'type': 'low_production',
        'message': 'North Farm production is significantly below expected (400 vs 800)',
        'farm_id': str(farm.id),
        'farm_name': 'North Farm',
        'severity': 'high',
    }]


def test_farm_without_recent_rows_is_skipped(service, organization, farm, shed):
    quiet = Farm.objects.create(organization=organization, name='Quiet Farm')
    Shed.objects.create(farm=quiet, name='Q1', capacity=5000)
    DailyProduction.objects.create(farm=quiet, date=TODAY - timedelta(days=20), table_eggs=10)

    assert service.detect(today=TODAY) == []


def test_today_is_outside_the_window(service, farm, shed):
    DailyProduction.objects.create(farm=farm, shed=shed, date=TODAY, table_eggs=1)
    assert service.detect(today=TODAY) == []


def test_inactive_sheds_do_not_count_towards_capacity(service, farm, shed):
    Shed.objects.create(farm=farm, name='Closed', capacity=100000, is_active=False)
    DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=700)

    assert service.detect(today=TODAY) == []


def test_attendance_alert(service, worker):
    AttendanceRecord.objects.create(user=worker, date=YESTERDAY, status='ABSENT')

    alerts = service.attendance_alerts(today=TODAY)

    assert len(alerts) == 1
    assert alerts[0]['message'] == 'High absence rate detected: 100.0% of workers were absent'


class TestDispatch:

    def test_owner_and_manager_are_emailed(self, owner, manager, farm, shed, mailoutbox):
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)

        summary = dispatch_alert_notifications(today=TODAY)

        assert summary == {'organizations': 1, 'alerts': 1, 'emails': 2, 'failed': 0}
        assert sorted(message.to[0] for message in mailoutbox) == ['manager@test.com', 'owner@test.com']
        message = mailoutbox[0]
        assert message.subject == 'Farm Alert: 1 issue(s) require attention'
        assert message.body == (
            "The following alerts have been detected in your farm operations:\n\n"
            "• North Farm production is significantly below expected (400 vs 800)\n\n"
            "Please review your dashboard for more details and take appropriate action."
        )

    def test_notification_settings_are_honoured(self, owner, manager, worker, farm, shed, mailoutbox):
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)
        AttendanceRecord.objects.create(user=worker, date=YESTERDAY, status='ABSENT')

        owner_settings = NotificationSettings.for_user(owner)
        owner_settings.production_alerts = False
        owner_settings.save()
        manager_settings = NotificationSettings.for_user(manager)
        manager_settings.email_notifications = False
        manager_settings.save()

        summary = dispatch_alert_notifications(today=TODAY)

        assert summary['alerts'] == 2
        assert summary['emails'] == 1
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['owner@test.com']
        assert 'High absence rate detected' in mailoutbox[0].body
        assert 'production is significantly below expected' not in mailoutbox[0].body

    def test_no_alerts_no_email(self, owner, mailoutbox):
        assert dispatch_alert_notifications(today=TODAY)['emails'] == 0
        assert mailoutbox == []

    def test_failed_recipient_does_not_stop_the_run(
        self, owner, other_owner, farm, shed, other_farm, mailoutbox, monkeypatch
    ):
        Shed.objects.create(farm=other_farm, name='Other Shed', capacity=1000)
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)
        DailyProduction.objects.create(farm=other_farm, date=YESTERDAY, table_eggs=300)

        real_send = alerts_module.send_alert_email

        def flaky_send(user, alerts):
            if user.email == 'owner@test.com':
                raise ConnectionError('SMTP connection refused')
            return real_send(user, alerts)

        monkeypatch.setattr(alerts_module, 'send_alert_email', flaky_send)

        summary = dispatch_alert_notifications(today=TODAY)

        assert summary == {'organizations': 2, 'alerts': 2, 'emails': 1, 'failed': 1}
        assert [message.to for message in mailoutbox] == [['owner@other.com']]

    def test_failed_organization_does_not_stop_the_run(
        self, owner, other_owner, farm, shed, other_farm, mailoutbox, monkeypatch
    ):
        Shed.objects.create(farm=other_farm, name='Other Shed', capacity=1000)
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)
        DailyProduction.objects.create(farm=other_farm, date=YESTERDAY, table_eggs=300)

        real_detect = AlertService.notification_alerts

        def broken_for_sunrise(self, today=None):
            if self.records.organization_name == 'Sunrise Poultry':
                raise DatabaseError('relation "daily_production" is locked')
            return real_detect(self, today)

        monkeypatch.setattr(AlertService, 'notification_alerts', broken_for_sunrise)

        summary = dispatch_alert_notifications(today=TODAY)

        assert summary == {'organizations': 1, 'alerts': 1, 'emails': 1, 'failed': 1}
        assert mailoutbox[0].to == ['owner@other.com']

    def test_database_outage_propagates(self, owner, farm, shed, monkeypatch):
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)

        def unreachable(user, alerts):
            raise OperationalError('could not connect to server')

        monkeypatch.setattr(alerts_module, 'send_alert_email', unreachable)

        with pytest.raises(OperationalError):
            dispatch_alert_notifications(today=TODAY)

    def test_stored_thresholds_do_not_change_detection(self, owner, farm, shed, mailoutbox):
        DailyProduction.objects.create(farm=farm, shed=shed, date=YESTERDAY, table_eggs=400)
        owner_settings = NotificationSettings.for_user(owner)
        owner_settings.low_production_threshold = 0
        owner_settings.attendance_threshold = 0
        owner_settings.save()

        summary = dispatch_alert_notifications(today=TODAY)

        assert summary['emails'] == 1
        assert mailoutbox[0].to == ['owner@test.com']
