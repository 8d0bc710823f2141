"""
Accounts services - sign-up, profile maintenance, account deletion.
"""
from typing import List, Optional

from django.db import transaction

from apps.core.exceptions import DomainValidationError
from apps.core.observability import log_domain_event

from .models import POSTER_ROLES, Profile, Role, RoleChoices, User, UserRole


class AccountError(DomainValidationError):
    """Raised when a sign-up or profile change breaks an account rule."""
    error_type = 'account'


class ProfileIncompleteError(DomainValidationError):
    """Raised when a volunteer profile lacks fields required to participate."""
    error_type = 'profile_incomplete'


@transaction.atomic
def register_user(
    email: str,
    password: str,
    full_name: str,
    role: str,
    phone: Optional[str] = None,
    organization_name: Optional[str] = None,
) -> User:
    """
    Create a user with its profile and role grant.

    Hospitals and blood banks must give an organization name; it is what
    volunteers and other posters see.

    Raises:
        AccountError: unknown role, duplicate email, or missing organization name
    """
    if role not in RoleChoices.values:
        raise AccountError(f"Invalid role. Must be one of: {', '.join(RoleChoices.values)}")

    if role in POSTER_ROLES and not (organization_name or '').strip():
        raise AccountError('organization_name is required for hospitals and blood banks')

    if User.objects.filter(email__iexact=email).exists():
        raise AccountError('An account with this email already exists')

    user = User.objects.create_user(email=email, password=password)
    Profile.objects.create(
        user=user,
        role=role,
        full_name=full_name,
        phone=phone or None,
        organization_name=(organization_name or '').strip() or None,
    )
    role_obj, _ = Role.objects.get_or_create(name=role)
    UserRole.objects.create(user=user, role=role_obj)

    log_domain_event(
        'user_registered',
        entity_type='User',
        entity_id=str(user.id),
        role=role,
    )
    return user


@transaction.atomic
def update_profile(profile: Profile, **changes) -> Profile:
    """
    Apply changes to a profile.

    A completed volunteer profile that loses a required field drops back
    to incomplete.
    """
    for name, value in changes.items():
        setattr(profile, name, value)

    if profile.role in POSTER_ROLES and not (profile.organization_name or '').strip():
        raise AccountError('organization_name is required for hospitals and blood banks')

    if profile.profile_completed and profile.missing_completion_fields():
        profile.profile_completed = False

    profile.save()
    return profile


@transaction.atomic
def complete_profile(profile: Profile, **details) -> Profile:
    """
    Fill in a volunteer's donor details and mark the profile completed.

    Raises:
        AccountError: profile does not belong to a volunteer
        ProfileIncompleteError: a required field is still empty
    """
    if profile.role != RoleChoices.VOLUNTEER:
        raise AccountError('Only volunteers complete a donor profile')

    for name, value in details.items():
        setattr(profile, name, value)

    missing = profile.missing_completion_fields()
    if missing:
        raise ProfileIncompleteError(
            f"Missing required profile fields: {', '.join(missing)}"
        )

    profile.profile_completed = True
    profile.save()

    log_domain_event(
        'profile_completed',
        entity_type='Profile',
        entity_id=str(profile.pk),
    )
    return profile


def ensure_participation_ready(profile: Profile) -> None:
    """Raise ProfileIncompleteError unless the volunteer may respond to posts."""
    if not profile.profile_completed:
        raise ProfileIncompleteError(
            'Complete your profile before responding to emergency posts'
        )


def list_hospitals(first_user_id=None) -> List[Profile]:
    """
    Every hospital profile, ordered by name.

    When `first_user_id` belongs to a hospital, that hospital is moved to
    the front of the list. The list is never narrowed to it.
    """
    hospitals = list(
        Profile.objects.filter(role=RoleChoices.HOSPITAL)
        .select_related('user')
        .order_by('organization_name', 'full_name')
    )
    if first_user_id is None:
        return hospitals

    first = [p for p in hospitals if str(p.pk) == str(first_user_id)]
    rest = [p for p in hospitals if str(p.pk) != str(first_user_id)]
    return first + rest


@transaction.atomic
def delete_account(user: User) -> None:
    """
    Delete a user and everything they own.

    Posts, participations, inventory rows, conversations, messages and
    appointments reference the user with cascading foreign keys.
    """
    user_id = str(user.id)
    user.delete()
    log_domain_event(
        'account_deleted',
        entity_type='User',
        entity_id=user_id,
    )
