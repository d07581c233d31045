from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Organization, JobRole, NotificationSettings

User = get_user_model()


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = ('id', 'name', 'address', 'phone', 'email', 'is_active', 'created_at', 'updated_at')
        read_only_fields = ('id', 'is_active', 'created_at', 'updated_at')


class RegistrationSerializer(serializers.Serializer):
    """
    Serializer for owner sign-up.
    Creates the organization and its OWNER user in one transaction.
    """
    organization_name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    username = serializers.CharField(max_length=150)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value.lower()

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("A user with this username already exists.")
        return value

    def validate(self, attrs):
        """Validate that passwords match."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError(
                {"password": "Password fields didn't match."}
            )
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        validated_data.pop('password_confirm')
        organization = Organization.objects.create(
            name=validated_data.pop('organization_name'),
            email=validated_data['email'],
            phone=validated_data.get('phone_number', ''),
        )
        password = validated_data.pop('password')
        user = User(organization=organization, role=User.UserRole.OWNER, **validated_data)
        user.set_password(password)
        user.save()
        return user


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for the signed-in user's own profile.
    Role and organization cannot be changed here.
    """
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    organization_name = serializers.CharField(source='organization.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'role', 'role_display', 'organization', 'organization_name',
            'phone_number', 'address', 'is_active', 'date_joined'
        )
        read_only_fields = (
            'id', 'email', 'role', 'organization', 'is_active', 'date_joined'
        )


class OrganizationUserSerializer(serializers.ModelSerializer):
    """
    Serializer used by owners and managers to administer the organization's
    users. Passwords are write-only and optional on update.
    """
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    password = serializers.CharField(
        write_only=True,
        required=False,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    supervisor_name = serializers.CharField(source='supervisor.get_full_name', read_only=True, default=None)
    job_role_title = serializers.CharField(source='job_role.title', read_only=True, default=None)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'role', 'supervisor', 'supervisor_name', 'job_role', 'job_role_title',
            'phone_number', 'address', 'is_active', 'password', 'date_joined'
        )
        read_only_fields = ('id', 'is_active', 'date_joined')
        # Duplicate emails on create are reported by the view as a conflict
        extra_kwargs = {'email': {'validators': []}}

    def _organization(self):
        return self.context['request'].user.organization

    def validate_email(self, value):
        if self.instance is not None:
            taken = User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk)
            if taken.exists():
                raise serializers.ValidationError("A user with this email already exists.")
        return value.lower()

    def validate_supervisor(self, value):
        if value is None:
            return value
        if value.organization_id != self._organization().id:
            raise serializers.ValidationError("Supervisor must belong to the same organization.")
        if self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A user cannot supervise themselves.")
        return value

    def validate_job_role(self, value):
        if value is not None and value.organization_id != self._organization().id:
            raise serializers.ValidationError("Job role not found.")
        return value

    def validate_role(self, value):
        requester = self.context['request'].user
        if value == User.UserRole.OWNER and requester.role != User.UserRole.OWNER:
            raise serializers.ValidationError("Only an owner can grant the owner role.")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({"password": "This field is required."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(organization=self._organization(), **validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class JobRoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = JobRole
        fields = ('id', 'title', 'description', 'salary', 'salary_type', 'is_active', 'created_at')
        read_only_fields = ('id', 'is_active', 'created_at')


class NotificationSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationSettings
        fields = (
            'email_notifications', 'production_alerts', 'attendance_alerts',
            'low_production_threshold', 'attendance_threshold', 'updated_at'
        )
        read_only_fields = ('updated_at',)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom JWT token serializer that includes additional user information.
    """
    def validate(self, attrs):
        data = super().validate(attrs)

        # Add custom claims
        data['user'] = {
            'id': str(self.user.id),
            'username': self.user.username,
            'email': self.user.email,
            'role': self.user.role,
            'organization': str(self.user.organization_id) if self.user.organization_id else None,
            'full_name': self.user.get_full_name(),
        }
        return data


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for password change endpoint."""
    old_password = serializers.CharField(required=True, write_only=True)
    new_password = serializers.CharField(
        required=True,
        write_only=True,
        validators=[validate_password]
    )
    new_password_confirm = serializers.CharField(required=True, write_only=True)

    def validate(self, attrs):
        """Validate that new passwords match."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError(
                {"new_password": "New password fields didn't match."}
            )
        return attrs

    def validate_old_password(self, value):
        """Validate that old password is correct."""
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("Old password is incorrect.")
        return value
