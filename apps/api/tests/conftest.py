"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Authenticated API clients by role (hospital, blood bank, volunteer)
- Factories for users, inventory rows and emergency posts
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import Profile, Role, RoleChoices, User, UserRole
from apps.emergencies.models import EmergencyPost
from apps.inventory.models import InventoryItem


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db):
    """
    Create a user with a role and profile.

    Usage:
        bank = make_user(RoleChoices.BLOOD_BANK, organization_name='Red Cross', phone='555-0199')
    """
    counter = {'n': 0}

    def _make_user(role, email=None, full_name=None, **profile_fields):
        counter['n'] += 1
        email = email or f'{role}{counter["n"]}@test.com'
        user = User.objects.create_user(
            email=email,
            password='testpass123',
            is_active=True
        )

        role_obj, _ = Role.objects.get_or_create(name=role)
        UserRole.objects.create(user=user, role=role_obj)

        Profile.objects.create(
            user=user,
            role=role,
            full_name=full_name or f'Test {role} {counter["n"]}',
            **profile_fields
        )
        return user

    return _make_user


@pytest.fixture
def hospital_user(make_user):
    return make_user(
        RoleChoices.HOSPITAL,
        email='hospital@test.com',
        organization_name='Springfield General',
        phone='555-0100',
        city='Springfield',
    )


@pytest.fixture
def blood_bank_user(make_user):
    return make_user(
        RoleChoices.BLOOD_BANK,
        email='bank@test.com',
        organization_name='Springfield Blood Bank',
        phone='555-0199',
        city='Springfield',
    )


@pytest.fixture
def volunteer_user(make_user):
    """Volunteer with a completed donor profile."""
    return make_user(
        RoleChoices.VOLUNTEER,
        email='volunteer@test.com',
        full_name='Alex Donor',
        age=29,
        gender='female',
        weight=Decimal('62.5'),
        city='Springfield',
        phone='555-0142',
        blood_type='O-',
        stress_level='low',
        type_of_work='office',
        previous_donation=True,
        profile_completed=True,
    )


@pytest.fixture
def incomplete_volunteer_user(make_user):
    return make_user(RoleChoices.VOLUNTEER, email='newvolunteer@test.com')


@pytest.fixture
def make_inventory(db):
    def _make_inventory(blood_bank, blood_group, quantity, city='Springfield'):
        return InventoryItem.objects.create(
            blood_bank=blood_bank,
            city=city,
            blood_group=blood_group,
            quantity=quantity,
        )
    return _make_inventory


@pytest.fixture
def make_post(db):
    def _make_post(posted_by, blood_group='O-', quantity=2, **fields):
        fields.setdefault('location', 'Springfield General')
        fields.setdefault('contact_phone', '555-0100')
        fields.setdefault('urgency_level', 'critical')
        return EmergencyPost.objects.create(
            posted_by=posted_by,
            blood_group=blood_group,
            quantity=quantity,
            **fields
        )
    return _make_post


@pytest.fixture
def tomorrow():
    return timezone.now() + timedelta(days=1)


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def hospital_client(hospital_user):
    """Authenticated API client with Hospital role."""
    return _client_for(hospital_user)


@pytest.fixture
def blood_bank_client(blood_bank_user):
    """Authenticated API client with Blood Bank role."""
    return _client_for(blood_bank_user)


@pytest.fixture
def volunteer_client(volunteer_user):
    """Authenticated API client with Volunteer role (completed profile)."""
    return _client_for(volunteer_user)


@pytest.fixture
def client_for():
    """Authenticated API client for any user."""
    return _client_for
