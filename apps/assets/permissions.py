"""Assets app permissions."""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from apps.authentication.guard import manager_roles, principal_has_role


class CanManageAssets(BasePermission):
    """Any authenticated user can view; asset managers can change assets."""

    message = 'You do not have permission to manage assets.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        # Decommission is gated more narrowly by the registry itself
        return principal_has_role(user, manager_roles())


class CanViewTransfers(BasePermission):
    """
    Asset managers see every transfer; other users only see transfers they
    requested or that name their linked employee as recipient.
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if principal_has_role(user, manager_roles()):
            return True
        if obj.requested_by_id == user.id:
            return True
        return user.employee_id is not None and obj.employee_id == user.employee_id
