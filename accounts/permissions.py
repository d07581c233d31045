"""
Role-based permissions for organization members.
"""

from rest_framework import permissions


class IsOrganizationMember(permissions.BasePermission):
    """Authenticated user attached to an organization."""
    message = 'You must belong to an organization to access this resource.'

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.organization_id is not None
        )


class IsOwner(IsOrganizationMember):
    """Permission for organization owners only."""
    message = 'Only the organization owner can perform this action.'

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.role == 'OWNER'


class IsOwnerOrManager(IsOrganizationMember):
    """Permission for owners and managers."""
    message = 'Only owners and managers can perform this action.'

    def has_permission(self, request, view):
        return (
            super().has_permission(request, view) and
            request.user.role in ['OWNER', 'MANAGER']
        )


class IsOwnerOrManagerForWrites(IsOrganizationMember):
    """
    Any member may read; only owners and managers may create, change or
    delete.
    """
    message = 'Only owners and managers can modify this resource.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.role in ['OWNER', 'MANAGER']
