"""
API tests for dashboard, analytics, report and cron endpoints.
"""
from datetime import timedelta

import pytest
from django.db import DatabaseError
from django.utils import timezone
from rest_framework import status

from dashboards.models import ScheduledReport
from dashboards.services import ReportResult
from flock_management.models import DailyProduction

pytestmark = pytest.mark.django_db


class TestDashboardStats:
    url = '/api/dashboard/stats/'

    def test_requires_authentication(self, api_client):
        response = api_client.get(self.url)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_stats(self, worker_client, farm, shed):
        today = timezone.localdate()
        DailyProduction.objects.create(farm=farm, shed=shed, date=today, table_eggs=300, hatching_eggs=50)

        response = worker_client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['data']['today_production'] == 350
        assert response.data['data']['active_sheds'] == 1

    def test_query_failure_returns_500(self, owner_client, monkeypatch):
        def fail(self, days=None, today=None):
            raise DatabaseError('boom')

        monkeypatch.setattr('dashboards.views.DashboardStatsService.get_stats', fail)
        response = owner_client.get(self.url)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'success': False, 'error': 'Failed to fetch dashboard statistics'}


class TestAnalytics:

    def test_shed_performance(self, manager_client, farm, shed):
        DailyProduction.objects.create(farm=farm, shed=shed, date=timezone.localdate(), table_eggs=800)

        response = manager_client.get('/api/analytics/shed-performance/', {'days': 7})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data'][0]['total_production'] == 800

    def test_weekly_production(self, manager_client, farm):
        DailyProduction.objects.create(farm=farm, date=timezone.localdate(), table_eggs=70)
        response = manager_client.get('/api/analytics/weekly-production/', {'weeks': 4, 'farm': str(farm.id)})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['data'][-1]['sellable_eggs'] == 70

    @pytest.mark.parametrize('url,params,field', [
        ('/api/analytics/production-trend/', {'farm': 'abc'}, 'farm'),
        ('/api/analytics/shed-performance/', {'farm': 'abc'}, 'farm'),
        ('/api/analytics/weekly-production/', {'weeks': 'nonsense'}, 'weeks'),
        ('/api/analytics/attendance/', {'days': 0}, 'days'),
        ('/api/dashboard/stats/', {'days': 1000}, 'days'),
    ])
    def test_malformed_parameters_return_400(self, manager_client, url, params, field):
        response = manager_client.get(url, params)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert field in response.data['fields']

    def test_attendance_requires_manager(self, worker_client):
        response = worker_client.get('/api/analytics/attendance/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_alerts(self, owner_client, farm, shed):
        yesterday = timezone.localdate() - timedelta(days=1)
        DailyProduction.objects.create(farm=farm, shed=shed, date=yesterday, table_eggs=100)

        response = owner_client.get('/api/analytics/alerts/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data'][0]['type'] == 'low_production'

    def test_other_tenant_sees_nothing(self, other_client, farm, shed):
        yesterday = timezone.localdate() - timedelta(days=1)
        DailyProduction.objects.create(farm=farm, shed=shed, date=yesterday, table_eggs=100)

        response = other_client.get('/api/analytics/alerts/')
        assert response.data['data'] == []


class TestReports:
    url = '/api/reports/'

    def test_generate(self, owner_client, farm):
        day = timezone.localdate() - timedelta(days=1)
        DailyProduction.objects.create(farm=farm, date=day, total_eggs=100, broken_eggs=15, damaged_eggs=10)

        response = owner_client.post(self.url, {
            'report_type': 'production',
            'start_date': day.isoformat(),
            'end_date': day.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'ok'
        assert response.data['data']['production']['summary']['loss_percentage'] == 25.0

    def test_empty_range(self, owner_client):
        response = owner_client.post(self.url, {'report_type': 'weekly'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'no_data'

    def test_failure_returns_503(self, owner_client, monkeypatch):
        monkeypatch.setattr(
            'dashboards.views.ReportService.generate',
            lambda self, request, today=None: ReportResult.failed('database unavailable'),
        )
        response = owner_client.post(self.url, {'report_type': 'comprehensive'}, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['success'] is False

    def test_invalid_range(self, owner_client):
        response = owner_client.post(self.url, {
            'start_date': '2026-02-10',
            'end_date': '2026-02-01',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_date' in response.data['fields']

    def test_future_start_is_rejected(self, owner_client):
        start = timezone.localdate() + timedelta(days=3)
        response = owner_client.post(self.url, {
            'report_type': 'daily',
            'start_date': start.isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'start_date' in response.data['fields']

    def test_future_start_is_rejected_on_export(self, owner_client):
        start = timezone.localdate() + timedelta(days=3)
        response = owner_client.get('/api/reports/export/csv/', {'start_date': start.isoformat()})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_workers_cannot_generate_reports(self, worker_client):
        response = worker_client.post(self.url, {}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestExports:

    def test_csv(self, owner_client, farm):
        DailyProduction.objects.create(farm=farm, date=timezone.localdate(), table_eggs=10)
        response = owner_client.get('/api/reports/export/csv/', {'report_type': 'production'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        assert 'attachment; filename="production_report_' in response['Content-Disposition']
        assert b'=== SUMMARY ===' in response.content

    @pytest.mark.parametrize('export_format,content_type', [
        ('excel', 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'),
        ('pdf', 'application/pdf'),
    ])
    def test_binary_formats(self, owner_client, export_format, content_type):
        response = owner_client.get(f'/api/reports/export/{export_format}/')
        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == content_type

    def test_unknown_format(self, owner_client):
        response = owner_client.get('/api/reports/export/docx/')
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestScheduledReports:
    url = '/api/reports/scheduled/'

    def test_create_sets_first_slot(self, owner_client, owner, farm):
        response = owner_client.post(self.url, {
            'report_type': 'weekly',
            'recipients': ['owner@test.com'],
            'farm': str(farm.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        report = ScheduledReport.objects.get(pk=response.data['data']['id'])
        assert report.organization == owner.organization
        assert report.created_by == owner
        assert report.next_send > timezone.now()
        assert timezone.localtime(report.next_send).weekday() == 0

    def test_recipients_are_validated(self, owner_client):
        response = owner_client.post(self.url, {
            'report_type': 'daily',
            'recipients': ['not-an-email'],
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = owner_client.post(self.url, {'report_type': 'daily', 'recipients': []}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_farm_of_other_organization_is_rejected(self, owner_client, other_farm):
        response = owner_client.post(self.url, {
            'report_type': 'daily',
            'recipients': ['owner@test.com'],
            'farm': str(other_farm.id),
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'farm' in response.data['fields']

    def test_tenant_isolation(self, owner_client, other_client, organization):
        report = ScheduledReport.objects.create(
            organization=organization, report_type='daily',
            recipients=['owner@test.com'], next_send=timezone.now(),
        )

        assert other_client.get(self.url).data['data']['count'] == 0
        assert other_client.get(f'{self.url}{report.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert other_client.delete(f'{self.url}{report.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert owner_client.get(self.url).data['data']['count'] == 1

    def test_changing_type_moves_the_slot(self, owner_client, organization):
        report = ScheduledReport.objects.create(
            organization=organization, report_type='daily',
            recipients=['owner@test.com'], next_send=timezone.now(),
        )
        response = owner_client.put(f'{self.url}{report.id}/', {'report_type': 'monthly'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        report.refresh_from_db()
        assert timezone.localtime(report.next_send).day == 1

    def test_delete(self, owner_client, organization):
        report = ScheduledReport.objects.create(
            organization=organization, report_type='daily',
            recipients=['owner@test.com'], next_send=timezone.now(),
        )
        response = owner_client.delete(f'{self.url}{report.id}/')
        assert response.status_code == status.HTTP_200_OK
        assert not ScheduledReport.objects.filter(pk=report.id).exists()


class TestCron:

    @pytest.fixture(autouse=True)
    def cron_secret(self, settings):
        settings.CRON_SECRET = 'cron-test-secret'

    @pytest.mark.parametrize('url', ['/api/cron/reports/', '/api/cron/alerts/'])
    def test_rejects_missing_or_wrong_token(self, api_client, url):
        assert api_client.post(url).status_code == status.HTTP_401_UNAUTHORIZED
        response = api_client.post(url, HTTP_AUTHORIZATION='Bearer wrong')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize('method', ['get', 'post'])
    def test_reports_trigger(self, api_client, organization, method, mailoutbox):
        ScheduledReport.objects.create(
            organization=organization, report_type='daily',
            recipients=['owner@test.com'], next_send=timezone.now() - timedelta(minutes=5),
        )
        response = getattr(api_client, method)('/api/cron/reports/', HTTP_AUTHORIZATION='Bearer cron-test-secret')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['sent'] == 1
        assert len(mailoutbox) == 1

    def test_alerts_trigger(self, api_client, organization):
        response = api_client.get('/api/cron/alerts/', HTTP_AUTHORIZATION='Bearer cron-test-secret')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['organizations'] == 0

    def test_unset_secret_rejects_everything(self, api_client, settings):
        settings.CRON_SECRET = ''
        response = api_client.get('/api/cron/reports/', HTTP_AUTHORIZATION='Bearer ')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
