"""Appointment serializers."""
from rest_framework import serializers

from apps.accounts.models import User
from apps.emergencies.models import EmergencyPost

from .models import Appointment, AppointmentStatusChoices


class AppointmentSerializer(serializers.ModelSerializer):
    hospital_name = serializers.SerializerMethodField()
    volunteer_name = serializers.CharField(source='volunteer.profile.full_name', read_only=True, default=None)

    class Meta:
        model = Appointment
        fields = [
            'id',
            'volunteer',
            'volunteer_name',
            'hospital',
            'hospital_name',
            'emergency_post',
            'appointment_date',
            'notes',
            'status',
            'cancellation_reason',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_hospital_name(self, obj):
        profile = getattr(obj.hospital, 'profile', None)
        return profile.display_name if profile else None


class BookAppointmentSerializer(serializers.Serializer):
    """
    POST /api/v1/appointments/
    {
        "hospital": "uuid-hospital-user-id",
        "emergency_post": "uuid-post-id",      # optional
        "appointment_date": "2026-11-02T10:30:00Z",
        "notes": "Available mornings"
    }
    """
    hospital = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    emergency_post = serializers.PrimaryKeyRelatedField(
        queryset=EmergencyPost.objects.all(),
        required=False,
        allow_null=True
    )
    appointment_date = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AppointmentTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[
        AppointmentStatusChoices.CONFIRMED,
        AppointmentStatusChoices.COMPLETED,
        AppointmentStatusChoices.CANCELLED,
    ])
    reason = serializers.CharField(required=False, allow_blank=True)
