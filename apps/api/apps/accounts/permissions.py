"""
Role-based permissions shared by every app.
"""
from rest_framework import permissions

from apps.accounts.models import POSTER_ROLES, RoleChoices


def get_user_roles(user):
    if not user or not user.is_authenticated:
        return set()
    return set(user.user_roles.values_list('role__name', flat=True))


class _HasRole(permissions.BasePermission):
    """Allow authenticated users holding any of `allowed_roles`."""
    allowed_roles = frozenset()
    message = 'You do not have the role required for this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(get_user_roles(request.user) & self.allowed_roles)


class IsHospital(_HasRole):
    allowed_roles = frozenset({RoleChoices.HOSPITAL})
    message = 'Only hospitals can perform this action.'


class IsBloodBank(_HasRole):
    allowed_roles = frozenset({RoleChoices.BLOOD_BANK})
    message = 'Only blood banks can perform this action.'


class IsVolunteer(_HasRole):
    allowed_roles = frozenset({RoleChoices.VOLUNTEER})
    message = 'Only volunteers can perform this action.'


class IsPoster(_HasRole):
    """Hospitals and blood banks, the roles that publish emergency posts."""
    allowed_roles = POSTER_ROLES
    message = 'Only hospitals and blood banks can perform this action.'
