from django.contrib import admin
from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['appointment_date', 'volunteer', 'hospital', 'status', 'emergency_post', 'created_at']
    list_filter = ['status', 'appointment_date']
    search_fields = ['volunteer__email', 'hospital__email', 'notes']
    readonly_fields = ['id', 'created_at', 'updated_at']
    autocomplete_fields = ['volunteer', 'hospital']
    date_hierarchy = 'appointment_date'
