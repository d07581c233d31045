from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
import uuid


class AttendanceRecord(models.Model):
    """One attendance status per user per date."""

    class Status(models.TextChoices):
        PRESENT = 'PRESENT', 'Present'
        ABSENT = 'ABSENT', 'Absent'
        LATE = 'LATE', 'Late'
        SICK_LEAVE = 'SICK_LEAVE', 'Sick leave'
        VACATION = 'VACATION', 'Vacation'

    # Status groups; the dashboard aggregation counts with these too
    ATTENDED = (Status.PRESENT, Status.LATE)
    ON_LEAVE = (Status.SICK_LEAVE, Status.VACATION)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='attendance_records'
    )
    date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=Status.choices, db_index=True)
    check_in = models.TimeField(null=True, blank=True)
    check_out = models.TimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_attendance'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'attendance'
        ordering = ['-date', 'user__first_name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'date'], name='unique_attendance_per_user_date'),
        ]
        indexes = [
            models.Index(fields=['date', 'status']),
        ]

    def __str__(self):
        return f"{self.user} - {self.date}: {self.get_status_display()}"

    @property
    def attended(self):
        return self.status in self.ATTENDED

    def clean(self):
        errors = {}
        if self.check_in and self.check_out and self.check_out < self.check_in:
            errors['check_out'] = 'Check-out time cannot be before check-in time.'
        if self.date and self.date > timezone.localdate():
            errors['date'] = 'Attendance cannot be recorded for a future date.'
        if errors:
            raise ValidationError(errors)
