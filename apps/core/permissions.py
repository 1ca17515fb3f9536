"""
Permission Classes for the Payroll Backend

Provides role-based access control on top of the tenant-scoped caller.
"""
from rest_framework import permissions

from .authentication import AuthenticatedUser


class IsPayrollAdmin(permissions.BasePermission):
    """
    Allows access only to team members whose role may manage payroll
    (admin and owner by default, see PAYROLL_ADMIN_ROLES).
    """
    message = 'Only admins can view payroll information'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not isinstance(user, AuthenticatedUser):
            return False
        return user.is_administrator
