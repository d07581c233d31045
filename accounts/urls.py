from django.urls import path

from .views import (
    OrganizationView,
    UserListView,
    UserDetailView,
    JobRoleListView,
    JobRoleDetailView,
    NotificationSettingsView,
)

urlpatterns = [
    path('organization/', OrganizationView.as_view(), name='organization'),

    # User management endpoints
    path('users/', UserListView.as_view(), name='user-list'),
    path('users/<uuid:user_id>/', UserDetailView.as_view(), name='user-detail'),

    path('job-roles/', JobRoleListView.as_view(), name='job-role-list'),
    path('job-roles/<uuid:role_id>/', JobRoleDetailView.as_view(), name='job-role-detail'),

    path('settings/notifications/', NotificationSettingsView.as_view(), name='notification-settings'),
]
