from django.contrib import admin
from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['blood_group', 'city', 'quantity', 'blood_bank', 'updated_at']
    list_filter = ['blood_group', 'city']
    search_fields = ['city', 'blood_bank__email', 'blood_bank__profile__organization_name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    autocomplete_fields = ['blood_bank']
