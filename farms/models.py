"""
Farm and shed models.

A farm belongs to one organization and holds the stored flock counts used as
the fallback when no flock management record exists. Sheds are the housing
units of a farm; their capacity drives efficiency and expected-production
figures.
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
import uuid

from accounts.models import Organization


class Farm(models.Model):
    """Poultry farm owned by an organization."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='farms'
    )
    name = models.CharField(max_length=200, help_text="Farm name (unique within the organization)")
    location = models.CharField(max_length=255, blank=True, default='')
    description = models.TextField(blank=True, default='')
    manager = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_farms',
        help_text="Manager responsible for the farm"
    )

    # Stored flock counts, decremented as mortality is recorded
    male_count = models.PositiveIntegerField(default=0, help_text="Current number of male birds")
    female_count = models.PositiveIntegerField(default=0, help_text="Current number of female birds")

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'farms'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'name'],
                name='unique_farm_name_per_organization'
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.manager_id and self.manager.organization_id != self.organization_id:
            raise ValidationError({'manager': 'Manager must belong to the same organization.'})

    @property
    def total_birds(self):
        return self.male_count + self.female_count

    def has_production_records(self):
        return self.daily_productions.exists()

    def apply_mortality(self, male, female):
        """Decrease the stored counts, never below zero."""
        self.male_count = max(0, self.male_count - male)
        self.female_count = max(0, self.female_count - female)
        self.save(update_fields=['male_count', 'female_count', 'updated_at'])


class Shed(models.Model):
    """Housing unit (poultry house) within a farm."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    farm = models.ForeignKey(Farm, on_delete=models.CASCADE, related_name='sheds')
    name = models.CharField(max_length=100)
    capacity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Maximum number of birds the shed houses"
    )
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sheds'
        ordering = ['farm__name', 'name']
        constraints = [
            models.UniqueConstraint(fields=['farm', 'name'], name='unique_shed_name_per_farm'),
            models.CheckConstraint(condition=models.Q(capacity__gte=1), name='shed_capacity_positive'),
        ]

    def __str__(self):
        return f"{self.farm.name} - {self.name}"

    def has_production_records(self):
        return self.daily_productions.exists()
