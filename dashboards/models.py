"""
Scheduled report configuration.

Each row describes a recurring email report for one organization. The
scheduler claims due rows (``next_send <= now``), sends them and moves
``next_send`` forward; a failed send leaves ``next_send`` untouched so the
next run retries it.
"""

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import models
import uuid


class ScheduledReport(models.Model):

    class ReportType(models.TextChoices):
        DAILY = 'daily', 'Daily'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        'accounts.Organization',
        on_delete=models.CASCADE,
        related_name='scheduled_reports'
    )
    report_type = models.CharField(max_length=10, choices=ReportType.choices)
    recipients = models.JSONField(default=list, help_text="List of email addresses")
    is_active = models.BooleanField(default=True, db_index=True)

    last_sent = models.DateTimeField(null=True, blank=True)
    next_send = models.DateTimeField(db_index=True)
    last_error = models.TextField(blank=True, default='', help_text="Error from the most recent failed send")

    # Optional report filters
    farm = models.ForeignKey(
        'farms.Farm',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='scheduled_reports'
    )
    shed = models.ForeignKey(
        'farms.Shed',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='scheduled_reports'
    )
    manager = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='scheduled_reports'
    )

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_scheduled_reports'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'scheduled_reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'next_send']),
        ]

    def __str__(self):
        return f"{self.get_report_type_display()} report for {self.organization.name}"

    def clean(self):
        errors = {}
        if not isinstance(self.recipients, list) or not self.recipients:
            errors['recipients'] = 'At least one recipient email is required.'
        else:
            for address in self.recipients:
                try:
                    validate_email(address)
                except ValidationError:
                    errors['recipients'] = f'Invalid email address: {address}'
                    break
        if self.farm_id and self.farm.organization_id != self.organization_id:
            errors['farm'] = 'Farm not found.'
        if self.shed_id:
            if self.shed.farm.organization_id != self.organization_id:
                errors['shed'] = 'Shed not found.'
            elif self.farm_id and self.shed.farm_id != self.farm_id:
                errors['shed'] = 'Shed does not belong to the selected farm.'
        if self.manager_id and self.manager.organization_id != self.organization_id:
            errors['manager'] = 'Manager not found.'
        if errors:
            raise ValidationError(errors)
