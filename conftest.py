"""
Shared pytest fixtures: organizations, users per role, farms and sheds.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.models import Organization
from farms.models import Farm, Shed

User = get_user_model()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def organization(db):
    return Organization.objects.create(name='Sunrise Poultry')


@pytest.fixture
def other_organization(db):
    """Second tenant for isolation tests."""
    return Organization.objects.create(name='Other Farms Ltd')


def make_user(organization, email, role, **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password='testpass123',
        organization=organization,
        role=role,
        **extra
    )


@pytest.fixture
def owner(organization):
    return make_user(organization, 'owner@test.com', 'OWNER', first_name='Olivia', last_name='Owner')


@pytest.fixture
def manager(organization):
    return make_user(organization, 'manager@test.com', 'MANAGER', first_name='Mark', last_name='Manager')


@pytest.fixture
def worker(organization, manager):
    return make_user(
        organization, 'worker@test.com', 'WORKER',
        first_name='Wendy', last_name='Worker', supervisor=manager
    )


@pytest.fixture
def other_owner(other_organization):
    return make_user(other_organization, 'owner@other.com', 'OWNER')


@pytest.fixture
def owner_client(api_client, owner):
    api_client.force_authenticate(user=owner)
    return api_client


@pytest.fixture
def manager_client(manager):
    client = APIClient()
    client.force_authenticate(user=manager)
    return client


@pytest.fixture
def worker_client(worker):
    client = APIClient()
    client.force_authenticate(user=worker)
    return client


@pytest.fixture
def other_client(other_owner):
    client = APIClient()
    client.force_authenticate(user=other_owner)
    return client


@pytest.fixture
def farm(organization, manager):
    return Farm.objects.create(
        organization=organization,
        name='North Farm',
        location='Hosur',
        manager=manager,
        male_count=100,
        female_count=900,
    )


@pytest.fixture
def shed(farm):
    return Shed.objects.create(farm=farm, name='Shed A', capacity=1000)


@pytest.fixture
def other_farm(other_organization):
    return Farm.objects.create(organization=other_organization, name='Elsewhere Farm')
