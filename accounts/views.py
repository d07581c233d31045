"""
Account, organization and user administration views.

Endpoints:
- POST /api/auth/register/ - Create an organization and its owner
- POST /api/auth/login/ - Obtain JWT pair
- GET/PUT /api/auth/profile/ - Own profile
- POST /api/auth/change-password/
- GET/PUT /api/organization/
- GET/POST /api/users/, GET/PUT/DELETE /api/users/{id}/
- GET/POST /api/job-roles/, GET/PUT/DELETE /api/job-roles/{id}/
- GET/PUT /api/settings/notifications/
"""

import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from core.api import OrganizationScopedView, success_response, error_response
from .filters import UserFilter
from .models import JobRole, NotificationSettings
from .permissions import IsOrganizationMember, IsOwner, IsOwnerOrManagerForWrites
from .serializers import (
    RegistrationSerializer,
    UserSerializer,
    OrganizationSerializer,
    OrganizationUserSerializer,
    JobRoleSerializer,
    NotificationSettingsSerializer,
    CustomTokenObtainPairSerializer,
    ChangePasswordSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class RegistrationView(APIView):
    """
    API endpoint for owner registration.
    No authentication required.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)
        user = serializer.save()

        # Generate tokens for the new user
        refresh = RefreshToken.for_user(user)
        logger.info(f"Registered organization {user.organization_id} for {user.email}")

        return success_response(
            {
                'user': UserSerializer(user).data,
                'organization': OrganizationSerializer(user.organization).data,
                'tokens': {
                    'refresh': str(refresh),
                    'access': str(refresh.access_token),
                },
            },
            message='Registration successful',
            status_code=status.HTTP_201_CREATED,
        )


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    Custom JWT token obtain view with additional user information.
    """
    serializer_class = CustomTokenObtainPairSerializer


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for retrieving and updating user profile.
    Requires authentication.
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ['get', 'put', 'patch']

    def get_object(self):
        return self.request.user

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)


class ChangePasswordView(APIView):
    """
    API endpoint for changing user password.
    Requires authentication.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(
            data=request.data,
            context={'request': request}
        )
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)

        # Set new password
        user = request.user
        user.set_password(serializer.validated_data['new_password'])
        user.save()

        return success_response(message='Password changed successfully')


class OrganizationView(APIView):
    """
    GET /api/organization/
    PUT /api/organization/

    Read (any member) and update (owner only) the caller's organization.
    """
    permission_classes = [IsOrganizationMember]

    def get_permissions(self):
        if self.request.method == 'PUT':
            return [IsOwner()]
        return super().get_permissions()

    def get(self, request):
        return success_response(OrganizationSerializer(request.user.organization).data)

    def put(self, request):
        serializer = OrganizationSerializer(request.user.organization, data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Organization updated')


class UserListView(OrganizationScopedView):
    """
    GET /api/users/
    POST /api/users/

    Query Parameters:
        role (str): OWNER | MANAGER | WORKER
        is_active (true|false|all): defaults to active users only
        supervisor (uuid): users reporting to this manager
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = User
    serializer_class = OrganizationUserSerializer
    filterset_class = UserFilter

    def get(self, request):
        filterset = self.get_filterset(self.get_queryset().select_related('supervisor', 'job_role'))
        if not filterset.is_valid():
            return self.invalid_filters(filterset)
        return self.paginated(filterset.qs.order_by('first_name', 'last_name', 'email'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        if User.objects.filter(email__iexact=serializer.validated_data['email']).exists():
            return self.conflict('A user with this email already exists')
        user = serializer.save()
        logger.info(f"User {user.email} created in organization {user.organization_id} by {request.user.email}")
        return success_response(self.get_serializer(user).data, status_code=status.HTTP_201_CREATED)


class UserDetailView(OrganizationScopedView):
    """
    GET /api/users/{id}/
    PUT /api/users/{id}/
    DELETE /api/users/{id}/ - soft delete (deactivates the user)
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = User
    serializer_class = OrganizationUserSerializer

    def get(self, request, user_id):
        user = self.get_object(user_id)
        if user is None:
            return self.not_found('User')
        return success_response(self.get_serializer(user).data)

    def put(self, request, user_id):
        user = self.get_object(user_id)
        if user is None:
            return self.not_found('User')
        if user.role == User.UserRole.OWNER and request.user.role != User.UserRole.OWNER:
            return error_response('Only an owner can modify an owner account', status.HTTP_403_FORBIDDEN)
        serializer = self.get_serializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='User updated')

    def delete(self, request, user_id):
        user = self.get_object(user_id)
        if user is None:
            return self.not_found('User')
        if user.pk == request.user.pk:
            return error_response('You cannot deactivate your own account')
        if user.role == User.UserRole.OWNER and request.user.role != User.UserRole.OWNER:
            return error_response('Only an owner can deactivate an owner account', status.HTTP_403_FORBIDDEN)
        user.deactivate()
        return success_response(message='User deactivated')


class JobRoleListView(OrganizationScopedView):
    """
    GET /api/job-roles/ - active roles ordered by title
    POST /api/job-roles/
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = JobRole
    serializer_class = JobRoleSerializer

    def get(self, request):
        return self.paginated(self.get_queryset().filter(is_active=True).order_by('title'))

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save(organization=self.get_organization())
        return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


class JobRoleDetailView(OrganizationScopedView):
    """
    GET /api/job-roles/{id}/
    PUT /api/job-roles/{id}/
    DELETE /api/job-roles/{id}/ - soft delete
    """
    permission_classes = [IsOwnerOrManagerForWrites]
    model = JobRole
    serializer_class = JobRoleSerializer

    def get(self, request, role_id):
        job_role = self.get_object(role_id)
        if job_role is None:
            return self.not_found('Job role')
        return success_response(self.get_serializer(job_role).data)

    def put(self, request, role_id):
        job_role = self.get_object(role_id)
        if job_role is None:
            return self.not_found('Job role')
        serializer = self.get_serializer(job_role, data=request.data, partial=True)
        if not serializer.is_valid():
            return self.validation_failed(serializer.errors)
        serializer.save()
        return success_response(serializer.data)

    def delete(self, request, role_id):
        job_role = self.get_object(role_id)
        if job_role is None:
            return self.not_found('Job role')
        job_role.is_active = False
        job_role.save(update_fields=['is_active', 'updated_at'])
        return success_response(message='Job role deactivated')


class NotificationSettingsView(APIView):
    """
    GET /api/settings/notifications/
    PUT /api/settings/notifications/

    Settings are created with defaults on first read.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        settings_obj = NotificationSettings.for_user(request.user)
        return success_response(NotificationSettingsSerializer(settings_obj).data)

    def put(self, request):
        settings_obj = NotificationSettings.for_user(request.user)
        serializer = NotificationSettingsSerializer(settings_obj, data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response('Validation failed', fields=serializer.errors)
        serializer.save()
        return success_response(serializer.data, message='Notification settings updated')
