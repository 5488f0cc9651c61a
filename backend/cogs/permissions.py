"""
Permissions for the COGS system.

Every member of a business may read its costs and prices; changing them is
restricted to managers and above.
"""
from rest_framework import permissions

from users.models import User


class CanViewCOGS(permissions.BasePermission):
    """
    Read access to costing data.

    Allows any authenticated user that belongs to a business.
    """
    message = "You do not have permission to view COGS data."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return getattr(request.user, 'tenant_id', None) is not None


class CanManageCOGS(permissions.BasePermission):
    """
    Permission class for COGS management.

    Allows access to:
    - Owners
    - Admins
    - Managers

    Denies access to:
    - Staff
    - Users without a business
    - Unauthenticated users
    """
    message = "You do not have permission to manage COGS data."

    ALLOWED_ROLES = [
        User.Role.OWNER,
        User.Role.ADMIN,
        User.Role.MANAGER,
    ]

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if getattr(request.user, 'tenant_id', None) is None:
            return False

        return request.user.role in self.ALLOWED_ROLES
