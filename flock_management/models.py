"""
Flock Management Models

Daily production, mortality, flock count snapshots, production cycles and
egg dispatches.
Derived egg totals are computed from the raw counts on every read and are
never stored.
"""

from datetime import timedelta
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models, transaction
from django.utils import timezone
import uuid

from farms.models import Farm, Shed
from . import egg_counts


# =============================================================================
# DAILY PRODUCTION
# =============================================================================

class DailyProduction(models.Model):
    """
    Egg production for one shed (or a whole farm when ``shed`` is empty) on
    one date.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Associations
    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='daily_productions')
    shed = models.ForeignKey(
        Shed,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='daily_productions',
        help_text="Shed the eggs were collected from; empty for a farm-level record"
    )
    date = models.DateField(db_index=True, help_text="Date of this production record")

    # === CATEGORY COUNTS ===
    table_eggs = models.PositiveIntegerField(default=0, help_text="Standard eggs for sale")
    hatching_eggs = models.PositiveIntegerField(default=0, help_text="Eggs set aside for hatching")
    cracked_eggs = models.PositiveIntegerField(default=0)
    jumbo_eggs = models.PositiveIntegerField(default=0)
    leaker_eggs = models.PositiveIntegerField(default=0)

    # === OLDER SCHEMA COUNTS ===
    total_eggs = models.PositiveIntegerField(default=0, help_text="Total collected (older records)")
    broken_eggs = models.PositiveIntegerField(default=0)
    damaged_eggs = models.PositiveIntegerField(default=0)

    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='production_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'daily_production'
        ordering = ['-date']
        constraints = [
            models.UniqueConstraint(
                fields=['farm', 'shed', 'date'],
                name='unique_production_per_shed_date'
            ),
            models.UniqueConstraint(
                fields=['farm', 'date'],
                condition=models.Q(shed__isnull=True),
                name='unique_farm_level_production_per_date'
            ),
        ]
        indexes = [
            models.Index(fields=['farm', 'date']),
            models.Index(fields=['shed', 'date']),
        ]

    def __str__(self):
        where = self.shed.name if self.shed_id else self.farm.name
        return f"{where} - {self.date}"

    def clean(self):
        """Validate business logic"""
        errors = {}

        if self.shed_id and self.farm_id and self.shed.farm_id != self.farm_id:
            errors['shed'] = 'Shed does not belong to the selected farm.'

        if not egg_counts.uses_categories(self):
            if self.broken_eggs + self.damaged_eggs > self.total_eggs:
                errors['total_eggs'] = (
                    f'Broken ({self.broken_eggs}) plus damaged ({self.damaged_eggs}) eggs '
                    f'cannot exceed total eggs ({self.total_eggs})'
                )

        if self.date and self.date > timezone.localdate():
            errors['date'] = 'Production date cannot be in the future'

        if errors:
            raise ValidationError(errors)

    @property
    def total_daily_eggs(self):
        return egg_counts.total_eggs(self)

    @property
    def sellable_eggs(self):
        return egg_counts.sellable_eggs(self)

    @property
    def waste_eggs(self):
        return egg_counts.waste_eggs(self)

    def duplicate_exists(self):
        duplicates = DailyProduction.objects.filter(farm_id=self.farm_id, shed_id=self.shed_id, date=self.date)
        if self.pk:
            duplicates = duplicates.exclude(pk=self.pk)
        return duplicates.exists()


# =============================================================================
# MORTALITY RECORD
# =============================================================================

class MortalityRecord(models.Model):
    """
    Birds lost on a farm on a given date. Creating a record decrements the
    farm's stored male/female counts (see signals).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='mortality_records')
    production = models.ForeignKey(
        DailyProduction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='mortality_records',
        help_text="Production record this loss was reported with"
    )
    date = models.DateField(db_index=True)
    male_mortality = models.PositiveIntegerField(default=0)
    female_mortality = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='mortality_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'mortality_records'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['farm', 'date']),
        ]

    def __str__(self):
        return f"{self.farm.name} - {self.date}: {self.total_mortality} birds"

    @property
    def total_mortality(self):
        return self.male_mortality + self.female_mortality

    def clean(self):
        errors = {}
        if self.production_id and self.production.farm_id != self.farm_id:
            errors['production'] = 'Production record belongs to a different farm.'
        if self.total_mortality == 0:
            errors['male_mortality'] = 'Record at least one dead bird.'
        if errors:
            raise ValidationError(errors)


# =============================================================================
# FLOCK RECORD (bird count snapshot)
# =============================================================================

class FlockRecord(models.Model):
    """
    Daily snapshot of bird counts for a shed or farm. Closing counts are
    derived from opening counts and mortality when the record is saved.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='flock_records')
    shed = models.ForeignKey(
        Shed,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='flock_records'
    )
    date = models.DateField(db_index=True)

    age_weeks = models.PositiveIntegerField(default=0, help_text="Flock age in weeks")
    age_day_of_week = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(7)],
        help_text="Day within the current age week (1-7)"
    )

    opening_male = models.PositiveIntegerField(default=0)
    opening_female = models.PositiveIntegerField(default=0)
    mortality_male = models.PositiveIntegerField(default=0)
    mortality_female = models.PositiveIntegerField(default=0)
    closing_male = models.PositiveIntegerField(default=0, editable=False)
    closing_female = models.PositiveIntegerField(default=0, editable=False)

    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='flock_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'flock_records'
        ordering = ['-date']
        constraints = [
            models.UniqueConstraint(fields=['farm', 'shed', 'date'], name='unique_flock_record_per_shed_date'),
        ]

    def __str__(self):
        return f"{self.farm.name} flock - {self.date}"

    def save(self, *args, **kwargs):
        self.closing_male = max(0, self.opening_male - self.mortality_male)
        self.closing_female = max(0, self.opening_female - self.mortality_female)
        super().save(*args, **kwargs)

    def clean(self):
        if self.shed_id and self.farm_id and self.shed.farm_id != self.farm_id:
            raise ValidationError({'shed': 'Shed does not belong to the selected farm.'})


# =============================================================================
# PRODUCTION CYCLE
# =============================================================================

class ProductionCycle(models.Model):
    """
    A named laying period for a farm. At most one cycle per farm is active;
    activating one deactivates the others.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='production_cycles'
    )
    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='production_cycles')
    name = models.CharField(max_length=200)
    start_date = models.DateField()
    start_week = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text="Bird age (weeks) when the cycle started"
    )
    expected_end_week = models.PositiveSmallIntegerField(
        default=72,
        validators=[MinValueValidator(1), MaxValueValidator(200)]
    )
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'production_cycles'
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(
                fields=['farm'],
                condition=models.Q(is_active=True),
                name='one_active_cycle_per_farm'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.farm.name})"

    def clean(self):
        errors = {}
        if self.farm_id and self.organization_id and self.farm.organization_id != self.organization_id:
            errors['farm'] = 'Farm not found.'
        if self.expected_end_week and self.start_week and self.expected_end_week <= self.start_week:
            errors['expected_end_week'] = 'Expected end week must be after the start week.'
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if self.is_active:
                ProductionCycle.objects.filter(
                    farm_id=self.farm_id, is_active=True
                ).exclude(pk=self.pk).update(is_active=False, updated_at=timezone.now())
            super().save(*args, **kwargs)

    def activate(self):
        self.is_active = True
        self.save()

    def current_week(self, today=None):
        today = today or timezone.localdate()
        elapsed = max(0, (today - self.start_date).days)
        return self.start_week + elapsed // 7

    def progress_percent(self, today=None):
        span = self.expected_end_week - self.start_week
        if span <= 0:
            return 100.0
        done = self.current_week(today) - self.start_week
        return round(min(100.0, max(0.0, done / span * 100)), 1)

    def expected_end_date(self):
        return self.start_date + timedelta(weeks=self.expected_end_week - self.start_week)


# =============================================================================
# DISPATCH RECORD
# =============================================================================

class DispatchRecord(models.Model):
    """
    Eggs leaving a farm on a given date, by category. May reference the
    production record the eggs came from.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='dispatch_records')
    production = models.ForeignKey(
        DailyProduction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='dispatch_records',
        help_text="Production record the dispatched eggs were collected under"
    )
    date = models.DateField(db_index=True, help_text="Date the eggs left the farm")

    table_eggs = models.PositiveIntegerField(default=0)
    hatching_eggs = models.PositiveIntegerField(default=0)
    cracked_eggs = models.PositiveIntegerField(default=0)
    jumbo_eggs = models.PositiveIntegerField(default=0)
    leaker_eggs = models.PositiveIntegerField(default=0)

    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='dispatch_records'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'dispatch_records'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['farm', 'date']),
        ]

    def __str__(self):
        return f"{self.farm.name} dispatch - {self.date}: {self.total_dispatched} eggs"

    @property
    def total_dispatched(self):
        return (
            self.table_eggs + self.hatching_eggs + self.cracked_eggs
            + self.jumbo_eggs + self.leaker_eggs
        )

    def clean(self):
        errors = {}
        if self.production_id and self.farm_id and self.production.farm_id != self.farm_id:
            errors['production'] = 'Production record belongs to a different farm.'
        if self.total_dispatched == 0:
            errors['table_eggs'] = 'Dispatch at least one egg.'
        if self.date and self.date > timezone.localdate():
            errors['date'] = 'Dispatch date cannot be in the future'
        if errors:
            raise ValidationError(errors)
