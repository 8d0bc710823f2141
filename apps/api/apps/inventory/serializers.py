"""Inventory serializers."""
from rest_framework import serializers

from apps.core.blood_groups import BloodGroupChoices
from .models import InventoryItem


class InventoryItemSerializer(serializers.ModelSerializer):
    """Serializer for a blood bank's own inventory rows."""

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'blood_bank', 'city', 'blood_group', 'quantity',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'blood_bank', 'created_at', 'updated_at']
        # (blood_bank, city, blood_group) uniqueness is handled as an upsert
        validators = []


class InventoryQuantitySerializer(serializers.Serializer):
    """PATCH body: overwrite the quantity of one row."""
    quantity = serializers.IntegerField()


class InventoryAdjustSerializer(serializers.Serializer):
    """POST {id}/adjust/ body: add (or remove, if negative) units."""
    delta = serializers.IntegerField()

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError('delta must not be zero')
        return value


class AvailabilityQuerySerializer(serializers.Serializer):
    blood_group = serializers.ChoiceField(choices=BloodGroupChoices.choices)
    quantity = serializers.IntegerField(min_value=1, default=1)
    compatible = serializers.BooleanField(default=False)


class SupplyMatchSerializer(serializers.Serializer):
    city = serializers.CharField()
    blood_bank_id = serializers.UUIDField()
    blood_bank_name = serializers.CharField()
    quantity = serializers.IntegerField()
    contact_phone = serializers.CharField()
    blood_group = serializers.CharField()
