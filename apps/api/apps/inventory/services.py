"""
Inventory services - availability lookup and stock level changes.
"""
from dataclasses import asdict, dataclass
from typing import List
from uuid import UUID

from django.conf import settings
from django.db import transaction

from apps.accounts.models import Profile
from apps.core.blood_groups import BloodGroupChoices, compatible_donor_groups
from apps.core.exceptions import DomainValidationError
from apps.core.observability.events import (
    log_inventory_adjusted,
    log_negative_inventory_blocked,
)

from .models import InventoryItem


class NegativeInventoryError(DomainValidationError):
    """Raised when a change would leave an inventory row below zero."""
    error_type = 'negative_inventory'


class InvalidBloodGroupError(DomainValidationError):
    error_type = 'validation'


@dataclass(frozen=True)
class SupplyMatch:
    """One blood bank row able to cover a request."""
    city: str
    blood_bank_id: UUID
    blood_bank_name: str
    quantity: int
    contact_phone: str
    blood_group: str

    def to_dict(self):
        return asdict(self)


def _validate_blood_group(blood_group):
    if blood_group not in BloodGroupChoices.values:
        raise InvalidBloodGroupError(
            f"Invalid blood group. Must be one of: {', '.join(BloodGroupChoices.values)}"
        )


def find_available_supply(
    blood_group: str,
    min_quantity: int,
    compatible: bool = False
) -> List[SupplyMatch]:
    """
    Find every blood bank row holding at least `min_quantity` units.

    Args:
        blood_group: Requested blood group (e.g. 'O-')
        min_quantity: Units needed; rows with fewer units are excluded
        compatible: If True, also match every donor group the requested
            recipient group can receive (ABO/Rh table)

    Returns:
        List of SupplyMatch ordered by city, then bank name. Empty when
        nothing matches. Database errors propagate.

    Each match carries the bank's organization name and phone, or the
    configured fallbacks when the bank has not filled them in.
    """
    _validate_blood_group(blood_group)
    if min_quantity < 1:
        raise DomainValidationError('min_quantity must be at least 1')

    groups = compatible_donor_groups(blood_group) if compatible else [blood_group]

    rows = list(
        InventoryItem.objects.filter(
            blood_group__in=groups,
            quantity__gte=min_quantity
        ).values('city', 'blood_bank_id', 'quantity', 'blood_group')
    )
    if not rows:
        return []

    profiles = {
        p['user_id']: p
        for p in Profile.objects.filter(
            user_id__in={row['blood_bank_id'] for row in rows}
        ).values('user_id', 'organization_name', 'phone')
    }

    unknown_name = getattr(settings, 'INVENTORY_UNKNOWN_BANK_NAME', 'Unknown Blood Bank')
    unknown_phone = getattr(settings, 'INVENTORY_UNKNOWN_PHONE', 'N/A')

    matches = []
    for row in rows:
        profile = profiles.get(row['blood_bank_id'], {})
        matches.append(SupplyMatch(
            city=row['city'],
            blood_bank_id=row['blood_bank_id'],
            blood_bank_name=profile.get('organization_name') or unknown_name,
            quantity=row['quantity'],
            contact_phone=profile.get('phone') or unknown_phone,
            blood_group=row['blood_group'],
        ))

    matches.sort(key=lambda m: (m.city, m.blood_bank_name, m.blood_group))
    return matches


@transaction.atomic
def set_quantity(blood_bank, city: str, blood_group: str, quantity: int) -> InventoryItem:
    """
    Create or overwrite the row for (blood_bank, city, blood_group).

    Raises:
        NegativeInventoryError: quantity < 0
    """
    _validate_blood_group(blood_group)
    city = city.strip()
    if not city:
        raise DomainValidationError('city is required')

    lookup = {'blood_bank': blood_bank, 'city': city, 'blood_group': blood_group}

    if quantity < 0:
        existing = InventoryItem.objects.filter(**lookup).first()
        if existing is not None:
            log_negative_inventory_blocked(existing, quantity)
        raise NegativeInventoryError(
            f"Quantity cannot be negative. Requested: {quantity}"
        )

    item, _ = InventoryItem.objects.select_for_update().get_or_create(
        **lookup, defaults={'quantity': 0}
    )
    previous = item.quantity
    item.quantity = quantity
    item.save(update_fields=['quantity', 'updated_at'])
    log_inventory_adjusted(item, previous_quantity=previous)
    return item


@transaction.atomic
def adjust_quantity(item: InventoryItem, delta: int) -> InventoryItem:
    """
    Add `delta` units (negative to remove) to an inventory row.

    The row is locked for the duration of the change.

    Raises:
        NegativeInventoryError: the result would be below zero
    """
    locked = InventoryItem.objects.select_for_update().get(pk=item.pk)
    previous = locked.quantity
    new_quantity = previous + delta

    if new_quantity < 0:
        log_negative_inventory_blocked(locked, new_quantity)
        raise NegativeInventoryError(
            f"Insufficient units of {locked.blood_group} in {locked.city}. "
            f"Available: {previous}, requested change: {delta}"
        )

    locked.quantity = new_quantity
    locked.save(update_fields=['quantity', 'updated_at'])
    log_inventory_adjusted(locked, previous_quantity=previous)
    return locked
