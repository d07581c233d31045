"""
Tests for attendance recording endpoints.
"""
from datetime import date, timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from attendance.models import AttendanceRecord
from conftest import make_user

pytestmark = pytest.mark.django_db

URL = '/api/attendance/'
DAY = date(2026, 2, 2)


@pytest.fixture
def second_worker(organization, manager):
    return make_user(organization, 'helper@test.com', 'WORKER', first_name='Harry', supervisor=manager)


class TestSingleRecord:

    def test_create(self, manager_client, manager, worker):
        response = manager_client.post(URL, {
            'user': str(worker.id),
            'date': DAY.isoformat(),
            'status': 'LATE',
            'check_in': '08:40',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        record = AttendanceRecord.objects.get()
        assert record.status == AttendanceRecord.Status.LATE
        assert record.attended is True
        assert record.recorded_by == manager

    def test_existing_record_conflicts(self, manager_client, worker):
        AttendanceRecord.objects.create(user=worker, date=DAY, status='PRESENT')

        response = manager_client.post(URL, {
            'user': str(worker.id),
            'date': DAY.isoformat(),
            'status': 'ABSENT',
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert AttendanceRecord.objects.get().status == 'PRESENT'

    def test_check_out_before_check_in(self, manager_client, worker):
        response = manager_client.post(URL, {
            'user': str(worker.id),
            'date': DAY.isoformat(),
            'status': 'PRESENT',
            'check_in': '17:00',
            'check_out': '08:00',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'check_out' in response.data['fields']

    def test_future_date(self, manager_client, worker):
        response = manager_client.post(URL, {
            'user': str(worker.id),
            'date': (timezone.localdate() + timedelta(days=2)).isoformat(),
            'status': 'PRESENT',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_user_of_other_organization(self, manager_client, other_owner):
        response = manager_client.post(URL, {
            'user': str(other_owner.id),
            'date': DAY.isoformat(),
            'status': 'PRESENT',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'user' in response.data['fields']

    def test_workers_cannot_record(self, worker_client, worker):
        response = worker_client.post(URL, {
            'user': str(worker.id),
            'date': DAY.isoformat(),
            'status': 'PRESENT',
        }, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestBulkRecords:

    def test_whole_day(self, manager_client, worker, second_worker):
        response = manager_client.post(URL, {
            'date': DAY.isoformat(),
            'records': [
                {'user': str(worker.id), 'status': 'PRESENT'},
                {'user': str(second_worker.id), 'status': 'SICK_LEAVE'},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data['data']) == 2
        assert AttendanceRecord.objects.filter(date=DAY).count() == 2

    def test_all_or_nothing(self, manager_client, worker, second_worker):
        AttendanceRecord.objects.create(user=second_worker, date=DAY, status='ABSENT')

        response = manager_client.post(URL, {
            'date': DAY.isoformat(),
            'records': [
                {'user': str(worker.id), 'status': 'PRESENT'},
                {'user': str(second_worker.id), 'status': 'PRESENT'},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'Harry' in response.data['error']
        assert not AttendanceRecord.objects.filter(user=worker).exists()

    def test_user_listed_twice(self, manager_client, worker):
        response = manager_client.post(URL, {
            'date': DAY.isoformat(),
            'records': [
                {'user': str(worker.id), 'status': 'PRESENT'},
                {'user': str(worker.id), 'status': 'LATE'},
            ],
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_day(self, manager_client):
        response = manager_client.post(URL, {'date': DAY.isoformat(), 'records': []}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestListing:

    def test_filters_and_tenant_scope(self, owner_client, worker, second_worker, other_owner):
        AttendanceRecord.objects.create(user=worker, date=DAY, status='PRESENT')
        AttendanceRecord.objects.create(user=second_worker, date=DAY, status='ABSENT')
        AttendanceRecord.objects.create(user=worker, date=DAY + timedelta(days=1), status='ABSENT')
        AttendanceRecord.objects.create(user=other_owner, date=DAY, status='ABSENT')

        response = owner_client.get(URL, {'date': DAY.isoformat(), 'status': 'absent'})

        results = response.data['data']['results']
        assert [row['user'] for row in results] == [second_worker.id]

    @pytest.mark.parametrize('params,field', [
        ({'start_date': '2026-02-30'}, 'start_date'),
        ({'date': 'yesterday'}, 'date'),
        ({'user': '42'}, 'user'),
    ])
    def test_malformed_filters_return_400(self, owner_client, params, field):
        response = owner_client.get(URL, params)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data['fields']

    def test_date_range(self, owner_client, worker):
        for offset in range(3):
            AttendanceRecord.objects.create(user=worker, date=DAY + timedelta(days=offset), status='PRESENT')

        response = owner_client.get(URL, {
            'start_date': (DAY + timedelta(days=1)).isoformat(),
            'end_date': (DAY + timedelta(days=2)).isoformat(),
        })
        assert response.data['data']['count'] == 2

    def test_update_and_delete(self, manager_client, worker):
        record = AttendanceRecord.objects.create(user=worker, date=DAY, status='ABSENT')

        response = manager_client.put(f'{URL}{record.id}/', {'status': 'VACATION'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        record.refresh_from_db()
        assert record.status == 'VACATION'

        response = manager_client.delete(f'{URL}{record.id}/')
        assert response.status_code == status.HTTP_200_OK
        assert not AttendanceRecord.objects.exists()
