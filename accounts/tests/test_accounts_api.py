"""
API tests for registration, login and organization user administration.
"""
import pytest
from rest_framework import status

from accounts.models import JobRole, NotificationSettings, Organization, User

pytestmark = pytest.mark.django_db

STRONG_PASSWORD = 'Layer-Flock-2026!'


class TestRegistration:
    url = '/api/auth/register/'

    def payload(self, **overrides):
        data = {
            'organization_name': 'Green Valley Poultry',
            'email': 'Founder@Example.com',
            'username': 'founder',
            'first_name': 'Fran',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
        }
        data.update(overrides)
        return data

    def test_creates_organization_and_owner(self, api_client):
        response = api_client.post(self.url, self.payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        user = User.objects.get(email='founder@example.com')
        assert user.role == User.UserRole.OWNER
        assert user.organization.name == 'Green Valley Poultry'
        assert response.data['data']['tokens']['access']

    def test_password_mismatch(self, api_client):
        response = api_client.post(self.url, self.payload(password_confirm='something-else-1'), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Organization.objects.filter(name='Green Valley Poultry').exists()

    def test_duplicate_email(self, api_client, owner):
        response = api_client.post(self.url, self.payload(email='owner@test.com'), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data['fields']


class TestLogin:

    def test_login_returns_user_details(self, api_client, owner):
        response = api_client.post('/api/auth/login/', {
            'email': 'owner@test.com',
            'password': 'testpass123',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['access']
        assert response.data['user']['role'] == 'OWNER'
        assert response.data['user']['organization'] == str(owner.organization_id)

    def test_wrong_password(self, api_client, owner):
        response = api_client.post('/api/auth/login/', {
            'email': 'owner@test.com',
            'password': 'nope',
        }, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestUsers:
    url = '/api/users/'

    def test_manager_creates_worker(self, manager_client, manager, organization):
        response = manager_client.post(self.url, {
            'username': 'newhand',
            'email': 'newhand@test.com',
            'password': STRONG_PASSWORD,
            'role': 'WORKER',
            'supervisor': str(manager.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        created = User.objects.get(email='newhand@test.com')
        assert created.organization == organization
        assert created.supervisor == manager
        assert created.check_password(STRONG_PASSWORD)

    def test_duplicate_email_conflicts(self, owner_client, worker):
        response = owner_client.post(self.url, {
            'username': 'someone',
            'email': 'worker@test.com',
            'password': STRONG_PASSWORD,
            'role': 'WORKER',
        }, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_manager_cannot_grant_owner_role(self, manager_client):
        response = manager_client.post(self.url, {
            'username': 'boss2',
            'email': 'boss2@test.com',
            'password': STRONG_PASSWORD,
            'role': 'OWNER',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'role' in response.data['fields']

    def test_worker_cannot_create_users(self, worker_client):
        response = worker_client.post(self.url, {}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_supervisor_from_other_organization(self, owner_client, other_owner):
        response = owner_client.post(self.url, {
            'username': 'crossed',
            'email': 'crossed@test.com',
            'password': STRONG_PASSWORD,
            'role': 'WORKER',
            'supervisor': str(other_owner.id),
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_is_tenant_scoped(self, owner_client, worker, other_owner):
        response = owner_client.get(self.url)
        emails = {user['email'] for user in response.data['data']['results']}
        assert 'worker@test.com' in emails
        assert 'owner@other.com' not in emails

    def test_list_filters(self, owner_client, manager, worker):
        worker.is_active = False
        worker.save()

        def emails(**params):
            response = owner_client.get(self.url, params)
            return sorted(user['email'] for user in response.data['data']['results'])

        assert 'worker@test.com' not in emails()
        assert emails(is_active='false') == ['worker@test.com']
        assert emails(is_active='all', role='worker') == ['worker@test.com']
        assert emails(role='manager') == ['manager@test.com']
        assert emails(is_active='all', supervisor=str(manager.id)) == ['worker@test.com']

    @pytest.mark.parametrize('params', [{'is_active': 'maybe'}, {'supervisor': 'abc'}])
    def test_malformed_filters_return_400(self, owner_client, params):
        response = owner_client.get(self.url, params)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert set(params) <= set(response.data['fields'])

    def test_other_tenant_user_is_not_found(self, owner_client, other_owner):
        response = owner_client.get(f'{self.url}{other_owner.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_is_soft(self, owner_client, worker):
        response = owner_client.delete(f'{self.url}{worker.id}/')

        assert response.status_code == status.HTTP_200_OK
        worker.refresh_from_db()
        assert worker.is_active is False

    def test_manager_cannot_deactivate_owner(self, manager_client, owner):
        response = manager_client.delete(f'{self.url}{owner.id}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cannot_deactivate_self(self, owner_client, owner):
        response = owner_client.delete(f'{self.url}{owner.id}/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestJobRoles:

    def test_create_and_soft_delete(self, owner_client, organization):
        response = owner_client.post('/api/job-roles/', {
            'title': 'Egg Collector',
            'salary': '450.00',
            'salary_type': 'DAILY',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        role = JobRole.objects.get(title='Egg Collector')
        assert role.organization == organization

        owner_client.delete(f'/api/job-roles/{role.id}/')
        role.refresh_from_db()
        assert role.is_active is False
        assert owner_client.get('/api/job-roles/').data['data']['count'] == 0


class TestNotificationSettings:
    url = '/api/settings/notifications/'

    def test_defaults_created_on_read(self, worker_client, worker):
        response = worker_client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['email_notifications'] is True
        assert NotificationSettings.objects.filter(user=worker).exists()

    def test_update(self, owner_client, owner):
        response = owner_client.put(self.url, {'attendance_alerts': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        settings_obj = NotificationSettings.for_user(owner)
        assert settings_obj.wants_alert('poor_attendance') is False
        assert settings_obj.wants_alert('low_production') is True


class TestOrganization:

    def test_only_owner_updates(self, manager_client, owner_client):
        response = manager_client.put('/api/organization/', {'name': 'Renamed'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = owner_client.put('/api/organization/', {'name': 'Renamed'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['name'] == 'Renamed'
