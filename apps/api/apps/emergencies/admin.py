from django.contrib import admin
from .models import EmergencyPost, Participation


class ParticipationInline(admin.TabularInline):
    model = Participation
    extra = 0
    fields = ['volunteer', 'volunteer_name', 'city', 'status', 'created_at']
    readonly_fields = ['created_at']


@admin.register(EmergencyPost)
class EmergencyPostAdmin(admin.ModelAdmin):
    list_display = ['blood_group', 'quantity', 'location', 'urgency_level', 'status', 'posted_by', 'created_at']
    list_filter = ['status', 'urgency_level', 'blood_group']
    search_fields = ['location', 'description', 'posted_by__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    autocomplete_fields = ['posted_by']
    inlines = [ParticipationInline]


@admin.register(Participation)
class ParticipationAdmin(admin.ModelAdmin):
    list_display = ['volunteer_name', 'emergency', 'status', 'city', 'created_at']
    list_filter = ['status']
    search_fields = ['volunteer_name', 'volunteer__email', 'city']
    readonly_fields = ['id', 'created_at', 'updated_at']
    autocomplete_fields = ['volunteer']
