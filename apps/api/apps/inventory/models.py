"""
Blood inventory held by blood banks, per city and blood group.
"""
import uuid
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.blood_groups import BloodGroupChoices


class InventoryItem(models.Model):
    """
    Units of one blood group a blood bank holds in one city.

    Business Rules:
    - quantity >= 0 (no negative stock)
    - unique per (blood_bank, city, blood_group)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    blood_bank = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='inventory_items',
        verbose_name=_('Blood Bank')
    )
    city = models.CharField(_('City'), max_length=120)
    blood_group = models.CharField(
        _('Blood Group'),
        max_length=3,
        choices=BloodGroupChoices.choices
    )
    quantity = models.IntegerField(
        _('Quantity'),
        default=0,
        help_text=_('Units currently available')
    )

    created_at = models.DateTimeField(_('Created At'), auto_now_add=True)
    updated_at = models.DateTimeField(_('Updated At'), auto_now=True)

    class Meta:
        db_table = 'blood_inventory'
        ordering = ['city', 'blood_group']
        verbose_name = _('Inventory Item')
        verbose_name_plural = _('Inventory Items')
        constraints = [
            models.UniqueConstraint(
                fields=['blood_bank', 'city', 'blood_group'],
                name='unique_inventory_bank_city_group'
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='inventory_quantity_non_negative'
            ),
        ]
        indexes = [
            models.Index(fields=['blood_group', 'quantity'], name='idx_inventory_group_qty'),
            models.Index(fields=['blood_bank'], name='idx_inventory_bank'),
        ]

    def __str__(self):
        return f"{self.blood_group} @ {self.city}: {self.quantity}"
