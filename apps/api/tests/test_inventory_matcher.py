"""
Tests for the availability lookup and stock level changes.
"""
from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError, transaction

from apps.accounts.models import RoleChoices
from apps.core.exceptions import DomainValidationError
from apps.inventory.models import InventoryItem
from apps.inventory.services import (
    NegativeInventoryError,
    adjust_quantity,
    find_available_supply,
    set_quantity,
)


@pytest.mark.django_db
class TestFindAvailableSupply:
    """Matches are exactly the rows with the group and enough units."""

    def test_empty_inventory_returns_empty_list(self):
        assert find_available_supply('O-', 1) == []

    def test_returns_rows_with_enough_units(self, blood_bank_user, make_user, make_inventory):
        other_bank = make_user(RoleChoices.BLOOD_BANK, organization_name='Capital Bank', phone='555-0300')
        make_inventory(blood_bank_user, 'O-', 5, city='Springfield')
        make_inventory(other_bank, 'O-', 2, city='Capital City')
        make_inventory(other_bank, 'O-', 1, city='Shelbyville')   # too few
        make_inventory(blood_bank_user, 'A+', 10, city='Springfield')  # other group

        matches = find_available_supply('O-', 2)

        assert [(m.city, m.quantity) for m in matches] == [
            ('Capital City', 2),
            ('Springfield', 5),
        ]

    def test_quantity_equal_to_request_matches(self, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'B+', 3)

        assert len(find_available_supply('B+', 3)) == 1
        assert find_available_supply('B+', 4) == []

    def test_match_carries_bank_contact(self, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 5)

        match = find_available_supply('O-', 2)[0]

        assert match.blood_bank_id == blood_bank_user.id
        assert match.blood_bank_name == 'Springfield Blood Bank'
        assert match.contact_phone == '555-0199'
        assert match.blood_group == 'O-'

    def test_bank_without_profile_details_uses_fallbacks(self, make_user, make_inventory):
        bank = make_user(RoleChoices.BLOOD_BANK)
        make_inventory(bank, 'AB-', 4)

        match = find_available_supply('AB-', 1)[0]

        assert match.blood_bank_name == 'Unknown Blood Bank'
        assert match.contact_phone == 'N/A'

    def test_results_ordered_by_city_then_bank_name(self, make_user, make_inventory):
        zeta = make_user(RoleChoices.BLOOD_BANK, organization_name='Zeta Bank')
        alpha = make_user(RoleChoices.BLOOD_BANK, organization_name='Alpha Bank')
        make_inventory(zeta, 'A-', 3, city='Ogdenville')
        make_inventory(alpha, 'A-', 3, city='Ogdenville')
        make_inventory(zeta, 'A-', 3, city='Capital City')

        names = [(m.city, m.blood_bank_name) for m in find_available_supply('A-', 1)]

        assert names == [
            ('Capital City', 'Zeta Bank'),
            ('Ogdenville', 'Alpha Bank'),
            ('Ogdenville', 'Zeta Bank'),
        ]

    def test_compatible_lookup_includes_donor_groups(self, blood_bank_user, make_inventory):
        make_inventory(blood_bank_user, 'O-', 4)
        make_inventory(blood_bank_user, 'A-', 4)
        make_inventory(blood_bank_user, 'B-', 4)

        exact = find_available_supply('A-', 2)
        widened = find_available_supply('A-', 2, compatible=True)

        assert {m.blood_group for m in exact} == {'A-'}
        assert {m.blood_group for m in widened} == {'A-', 'O-'}

    def test_invalid_blood_group_rejected(self):
        with pytest.raises(DomainValidationError):
            find_available_supply('C+', 1)

    def test_min_quantity_must_be_positive(self):
        with pytest.raises(DomainValidationError):
            find_available_supply('O+', 0)

    def test_store_failure_propagates(self):
        with patch(
            'apps.inventory.services.InventoryItem.objects.filter',
            side_effect=DatabaseError('connection reset')
        ):
            with pytest.raises(DatabaseError, match='connection reset'):
                find_available_supply('O-', 1)


@pytest.mark.django_db
class TestStockLevels:
    """Inventory quantities never go below zero."""

    def test_set_quantity_creates_row(self, blood_bank_user):
        item = set_quantity(blood_bank_user, 'Springfield', 'O+', 7)

        assert item.quantity == 7
        assert InventoryItem.objects.count() == 1

    def test_set_quantity_upserts_existing_row(self, blood_bank_user):
        set_quantity(blood_bank_user, 'Springfield', 'O+', 7)
        item = set_quantity(blood_bank_user, 'Springfield', 'O+', 3)

        assert item.quantity == 3
        assert InventoryItem.objects.count() == 1

    def test_set_negative_quantity_rejected_without_write(self, blood_bank_user):
        with pytest.raises(NegativeInventoryError):
            set_quantity(blood_bank_user, 'Springfield', 'O+', -1)

        assert InventoryItem.objects.count() == 0

    def test_adjust_adds_and_removes_units(self, blood_bank_user, make_inventory):
        item = make_inventory(blood_bank_user, 'B-', 4)

        item = adjust_quantity(item, 3)
        assert item.quantity == 7

        item = adjust_quantity(item, -7)
        assert item.quantity == 0

    def test_adjust_below_zero_rejected(self, blood_bank_user, make_inventory):
        item = make_inventory(blood_bank_user, 'B-', 2)

        with pytest.raises(NegativeInventoryError) as exc_info:
            adjust_quantity(item, -3)

        assert exc_info.value.error_type == 'negative_inventory'
        item.refresh_from_db()
        assert item.quantity == 2

    def test_database_rejects_negative_quantity(self, blood_bank_user, make_inventory):
        item = make_inventory(blood_bank_user, 'B-', 2)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                InventoryItem.objects.filter(pk=item.pk).update(quantity=-1)

    def test_negative_attempt_logged_as_blocked(self, blood_bank_user, make_inventory):
        item = make_inventory(blood_bank_user, 'AB+', 1)

        with patch('apps.inventory.services.log_negative_inventory_blocked') as mock_log:
            with pytest.raises(NegativeInventoryError):
                adjust_quantity(item, -2)

        mock_log.assert_called_once()
        assert mock_log.call_args[0][1] == -1
