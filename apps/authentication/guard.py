"""
Authorization Guard

The narrow surface through which the asset core learns who is calling and
what they may do. Nothing outside this module inspects ``User.role``.
"""

import logging
from typing import Iterable, Union

from django.conf import settings
from rest_framework.exceptions import NotAuthenticated

from apps.core.exceptions import PermissionDeniedException

logger = logging.getLogger(__name__)


def approver_roles():
    """Roles allowed to approve, reject, complete and cancel transfers."""
    return tuple(getattr(settings, 'ASSET_APPROVER_ROLES', ('ADMIN',)))


def manager_roles():
    """Roles allowed to register, edit, assign and request transfers."""
    return tuple(getattr(settings, 'ASSET_MANAGER_ROLES', ('ADMIN', 'HR')))


def current_principal(request):
    """Resolve the calling identity or fail with 401."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        raise NotAuthenticated()
    return user


def principal_has_role(principal, roles: Union[str, Iterable[str]]) -> bool:
    if principal is None or not getattr(principal, 'is_authenticated', False):
        return False
    if not principal.is_active:
        return False
    if principal.is_superuser:
        return True
    if isinstance(roles, str):
        roles = [roles]
    return principal.role in roles


def require_role(principal, roles, action: str):
    """Raise ``PermissionDeniedException`` unless the principal holds one of ``roles``."""
    if not principal_has_role(principal, roles):
        logger.info(
            "role_check_failed user_id=%s role=%s action=%s",
            getattr(principal, 'id', None),
            getattr(principal, 'role', None),
            action,
        )
        raise PermissionDeniedException(f"You do not have permission to {action}.")


def is_employee(principal, employee_id) -> bool:
    """True when the principal's login is linked to ``employee_id``."""
    linked = getattr(principal, 'employee_id', None)
    return linked is not None and employee_id is not None and str(linked) == str(employee_id)
