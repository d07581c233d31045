from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class Organization(models.Model):
    """
    A farming business. Every farm, user and report belongs to exactly one
    organization and no query ever crosses that boundary.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200, help_text="Business name")
    address = models.TextField(blank=True, default='')
    phone = models.CharField(max_length=30, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'organizations'
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'
        ordering = ['name']

    def __str__(self):
        return self.name


class JobRole(models.Model):
    """Named job position with a pay rate, assignable to workers."""

    class SalaryType(models.TextChoices):
        HOURLY = 'HOURLY', 'Hourly'
        DAILY = 'DAILY', 'Daily'
        MONTHLY = 'MONTHLY', 'Monthly'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='job_roles'
    )

    title = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    salary = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)]
    )
    salary_type = models.CharField(
        max_length=10,
        choices=SalaryType.choices,
        default=SalaryType.MONTHLY
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive roles are hidden from listings"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'job_roles'
        ordering = ['title']

    def __str__(self):
        return self.title


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Users sign in with their email address. OWNER and MANAGER users run the
    organization; WORKER users are the staff whose attendance is tracked.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        OWNER = 'OWNER', 'Owner'
        MANAGER = 'MANAGER', 'Manager'
        WORKER = 'WORKER', 'Worker'

    email = models.EmailField(unique=True)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='users',
        null=True,
        blank=True,
        help_text="Organization the user belongs to (empty only for platform superusers)"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.WORKER,
        db_index=True,
        help_text="User's role within the organization"
    )

    supervisor = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='supervised_users',
        help_text="Manager responsible for this user"
    )

    job_role = models.ForeignKey(
        JobRole,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    phone_number = models.CharField(max_length=30, blank=True, default='')
    address = models.TextField(blank=True, default='')

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['organization', 'role', 'is_active']),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self):
        """Return the user's full name or username if name is not set."""
        full_name = super().get_full_name()
        return full_name if full_name else self.username

    def clean(self):
        errors = {}
        if self.supervisor_id and self.supervisor_id == self.id:
            errors['supervisor'] = 'A user cannot supervise themselves.'
        elif self.supervisor_id and self.supervisor.organization_id != self.organization_id:
            errors['supervisor'] = 'Supervisor must belong to the same organization.'
        if self.job_role_id and self.job_role.organization_id != self.organization_id:
            errors['job_role'] = 'Job role must belong to the same organization.'
        if errors:
            raise ValidationError(errors)

    @property
    def is_owner(self):
        return self.role == self.UserRole.OWNER

    @property
    def is_manager_or_owner(self):
        return self.role in (self.UserRole.OWNER, self.UserRole.MANAGER)

    def deactivate(self):
        """Soft delete: keep the row (and its attendance history) but block login."""
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])


class NotificationSettings(models.Model):
    """Per-user alert and email preferences."""

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='notification_settings'
    )

    email_notifications = models.BooleanField(default=True)
    production_alerts = models.BooleanField(default=True)
    attendance_alerts = models.BooleanField(default=True)
    low_production_threshold = models.PositiveSmallIntegerField(
        default=80,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Preferred low-production level (percent of expected); not used by alert detection"
    )
    attendance_threshold = models.PositiveSmallIntegerField(
        default=85,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Preferred attendance level (percent); not used by alert detection"
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notification_settings'
        verbose_name_plural = 'Notification settings'

    def __str__(self):
        return f"Notification settings for {self.user.email}"

    @classmethod
    def for_user(cls, user):
        """Fetch the user's settings, creating the defaults on first access."""
        settings_obj, _ = cls.objects.get_or_create(user=user)
        return settings_obj

    def wants_alert(self, alert_type):
        if not self.email_notifications:
            return False
        if alert_type == 'poor_attendance':
            return self.attendance_alerts
        return self.production_alerts
