"""
Organization-scoped record queries.

OrganizationRecords is the only place the analytics services touch the ORM.
It is constructed per request (or per scheduled job) for one organization and
passed into every aggregator; tests substitute an in-memory object exposing
the same methods.

Usage:
    from dashboards.services.records import OrganizationRecords

    records = OrganizationRecords(request.user.organization)
    rows = records.production_rows(start, end, farm_id=farm_id)
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q

from attendance.models import AttendanceRecord
from farms.models import Farm, Shed
from flock_management.models import DailyProduction, MortalityRecord, FlockRecord
from .rows import (
    FarmRow, ShedRow, ProductionRow, MortalityRow, FlockRow, AttendanceRow, WorkerRow,
)

logger = logging.getLogger(__name__)

User = get_user_model()

PRODUCTION_COUNT_FIELDS = (
    'table_eggs', 'hatching_eggs', 'cracked_eggs', 'jumbo_eggs', 'leaker_eggs',
    'total_eggs', 'broken_eggs', 'damaged_eggs',
)

FLOCK_VALUES = (
    'farm_id', 'shed_id', 'date', 'age_weeks', 'age_day_of_week',
    'opening_male', 'opening_female', 'mortality_male', 'mortality_female',
    'closing_male', 'closing_female',
)


def _str_or_none(value):
    return str(value) if value is not None else None


class OrganizationRecords:
    """Read-only record access for a single organization."""

    def __init__(self, organization):
        self.organization = organization

    @property
    def organization_name(self):
        return self.organization.name

    # =========================================================================
    # FARMS & SHEDS
    # =========================================================================

    def _active_farms(self):
        return Farm.objects.filter(organization=self.organization, is_active=True)

    def _active_sheds(self):
        return Shed.objects.filter(
            farm__organization=self.organization,
            farm__is_active=True,
            is_active=True,
        )

    def farms(self, farm_id=None, manager_id=None):
        farms = self._active_farms()
        if farm_id:
            farms = farms.filter(pk=farm_id)
        if manager_id:
            farms = farms.filter(manager_id=manager_id)
        return [
            FarmRow(
                id=str(farm['id']),
                name=farm['name'],
                male_count=farm['male_count'],
                female_count=farm['female_count'],
                manager_id=_str_or_none(farm['manager_id']),
            )
            for farm in farms.order_by('name').values('id', 'name', 'male_count', 'female_count', 'manager_id')
        ]

    def sheds(self, farm_id=None, shed_id=None, manager_id=None):
        sheds = self._active_sheds()
        if farm_id:
            sheds = sheds.filter(farm_id=farm_id)
        if shed_id:
            sheds = sheds.filter(pk=shed_id)
        if manager_id:
            sheds = sheds.filter(farm__manager_id=manager_id)
        return [
            ShedRow(
                id=str(shed['id']),
                name=shed['name'],
                farm_id=str(shed['farm_id']),
                farm_name=shed['farm__name'],
                capacity=shed['capacity'],
            )
            for shed in sheds.order_by('farm__name', 'name').values(
                'id', 'name', 'farm_id', 'farm__name', 'capacity'
            )
        ]

    def active_farm_count(self):
        return self._active_farms().count()

    def active_shed_count(self):
        return self._active_sheds().count()

    # =========================================================================
    # PRODUCTION, MORTALITY & FLOCK
    # =========================================================================

    def production_rows(self, start, end, farm_id=None, shed_id=None, manager_id=None):
        """
        Production between ``start`` and ``end`` (inclusive) on active farms.
        Rows attached to an inactive shed are excluded; farm-level rows are
        kept.
        """
        rows = DailyProduction.objects.filter(
            farm__organization=self.organization,
            farm__is_active=True,
            date__gte=start,
            date__lte=end,
        ).filter(Q(shed__isnull=True) | Q(shed__is_active=True))
        if farm_id:
            rows = rows.filter(farm_id=farm_id)
        if shed_id:
            rows = rows.filter(shed_id=shed_id)
        if manager_id:
            rows = rows.filter(farm__manager_id=manager_id)

        values = rows.order_by('date', 'farm__name', 'shed__name').values(
            'id', 'farm_id', 'farm__name', 'shed_id', 'shed__name', 'date', *PRODUCTION_COUNT_FIELDS
        )
        return [
            ProductionRow(
                id=str(row['id']),
                farm_id=str(row['farm_id']),
                farm_name=row['farm__name'],
                shed_id=_str_or_none(row['shed_id']),
                shed_name=row['shed__name'],
                date=row['date'],
                **{field: row[field] for field in PRODUCTION_COUNT_FIELDS},
            )
            for row in values
        ]

    def mortality_rows(self, start, end, farm_id=None):
        rows = MortalityRecord.objects.filter(
            farm__organization=self.organization,
            date__gte=start,
            date__lte=end,
        )
        if farm_id:
            rows = rows.filter(farm_id=farm_id)
        return [
            MortalityRow(
                farm_id=str(row['farm_id']),
                date=row['date'],
                male_mortality=row['male_mortality'],
                female_mortality=row['female_mortality'],
            )
            for row in rows.order_by('date').values('farm_id', 'date', 'male_mortality', 'female_mortality')
        ]

    def flock_rows(self, start, end, farm_id=None):
        rows = FlockRecord.objects.filter(
            farm__organization=self.organization,
            date__gte=start,
            date__lte=end,
        )
        if farm_id:
            rows = rows.filter(farm_id=farm_id)
        return [self._flock_row(row) for row in rows.order_by('date').values(*FLOCK_VALUES)]

    def latest_flock_row(self):
        row = (
            FlockRecord.objects
            .filter(farm__organization=self.organization)
            .order_by('-date', '-created_at')
            .values(*FLOCK_VALUES)
            .first()
        )
        return self._flock_row(row) if row else None

    @staticmethod
    def _flock_row(row):
        return FlockRow(
            farm_id=str(row['farm_id']),
            shed_id=_str_or_none(row['shed_id']),
            date=row['date'],
            age_weeks=row['age_weeks'],
            age_day_of_week=row['age_day_of_week'],
            opening_male=row['opening_male'],
            opening_female=row['opening_female'],
            mortality_male=row['mortality_male'],
            mortality_female=row['mortality_female'],
            closing_male=row['closing_male'],
            closing_female=row['closing_female'],
        )

    # =========================================================================
    # STAFF & ATTENDANCE
    # =========================================================================

    def workers(self, manager_id=None):
        """Active WORKER users, optionally only those supervised by ``manager_id``."""
        users = User.objects.filter(
            organization=self.organization,
            role=User.UserRole.WORKER,
            is_active=True,
        )
        if manager_id:
            users = users.filter(supervisor_id=manager_id)
        return [
            WorkerRow(
                id=str(user.id),
                name=user.get_full_name() or user.email,
                supervisor_id=_str_or_none(user.supervisor_id),
            )
            for user in users.order_by('first_name', 'last_name', 'email')
        ]

    def attendance_rows(self, start, end, user_ids=None):
        rows = AttendanceRecord.objects.filter(
            user__organization=self.organization,
            date__gte=start,
            date__lte=end,
        )
        if user_ids is not None:
            rows = rows.filter(user_id__in=list(user_ids))
        return [
            AttendanceRow(user_id=str(row['user_id']), date=row['date'], status=row['status'])
            for row in rows.order_by('date').values('user_id', 'date', 'status')
        ]

    def alert_recipients(self):
        """Active owners and managers, with their notification settings."""
        return list(
            User.objects.filter(
                organization=self.organization,
                role__in=[User.UserRole.OWNER, User.UserRole.MANAGER],
                is_active=True,
            ).select_related('notification_settings')
        )

