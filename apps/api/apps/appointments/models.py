"""
Donation appointments between a volunteer and a hospital.
"""
import uuid
from django.conf import settings
from django.db import models


class AppointmentStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class Appointment(models.Model):
    """
    A volunteer's requested donation slot at a hospital.

    Usually booked right after a Participation, but the two records are
    independent: the only link is the shared volunteer and, optionally,
    the emergency post. Duplicate bookings are allowed.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='volunteer_appointments'
    )
    hospital = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hospital_appointments'
    )
    emergency_post = models.ForeignKey(
        'emergencies.EmergencyPost',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='appointments'
    )
    appointment_date = models.DateTimeField()
    notes = models.TextField(blank=True, null=True)
    status = models.CharField(
        max_length=10,
        choices=AppointmentStatusChoices.choices,
        default=AppointmentStatusChoices.PENDING
    )
    cancellation_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointments'
        verbose_name = 'Appointment'
        verbose_name_plural = 'Appointments'
        ordering = ['appointment_date']
        indexes = [
            models.Index(fields=['volunteer'], name='idx_appointment_volunteer'),
            models.Index(fields=['hospital', 'appointment_date'], name='idx_appointment_hospital'),
            models.Index(fields=['status'], name='idx_appointment_status'),
        ]

    # BUSINESS RULE: Allowed status transitions
    _ALLOWED_TRANSITIONS = {
        'pending': ['confirmed', 'cancelled'],
        'confirmed': ['completed', 'cancelled'],
        'completed': [],  # Terminal state
        'cancelled': [],  # Terminal state
    }

    def __str__(self):
        return f"Appointment {self.appointment_date:%Y-%m-%d %H:%M} ({self.status})"

    @property
    def is_terminal(self):
        return not self._ALLOWED_TRANSITIONS.get(self.status)

    def can_transition_to(self, new_status):
        return new_status in self._ALLOWED_TRANSITIONS.get(self.status, [])
