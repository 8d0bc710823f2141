"""
Appointment services - booking and status transitions.
"""
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import RoleChoices
from apps.core.exceptions import DomainValidationError
from apps.core.observability import log_domain_event
from apps.core.observability.events import log_appointment_transition

from .models import Appointment, AppointmentStatusChoices


class AppointmentError(DomainValidationError):
    """Raised when a booking or a status change breaks an appointment rule."""
    error_type = 'appointment'


def _has_role(user, role):
    return user.user_roles.filter(role__name=role).exists()


@transaction.atomic
def book_appointment(
    volunteer,
    hospital,
    appointment_date,
    emergency_post=None,
    notes: Optional[str] = None,
) -> Appointment:
    """
    Book a pending donation appointment at a hospital.

    No duplicate check: a volunteer may book the same hospital again.

    Raises:
        AppointmentError: wrong roles, or the date is in the past
    """
    if not _has_role(volunteer, RoleChoices.VOLUNTEER):
        raise AppointmentError('Only volunteers can book donation appointments')
    if not _has_role(hospital, RoleChoices.HOSPITAL):
        raise AppointmentError('Appointments can only be booked with a hospital')
    if appointment_date < timezone.now():
        raise AppointmentError('Appointment date cannot be in the past')

    appointment = Appointment.objects.create(
        volunteer=volunteer,
        hospital=hospital,
        emergency_post=emergency_post,
        appointment_date=appointment_date,
        notes=notes or None,
        status=AppointmentStatusChoices.PENDING,
    )

    log_domain_event(
        'appointment_booked',
        entity_type='Appointment',
        entity_id=str(appointment.id),
        entity_ids={
            'volunteer_id': str(volunteer.id),
            'hospital_id': str(hospital.id),
            'emergency_post_id': str(emergency_post.id) if emergency_post else None,
        },
    )
    return appointment


# Statuses each side of the appointment may set
_HOSPITAL_STATUSES = {
    AppointmentStatusChoices.CONFIRMED,
    AppointmentStatusChoices.COMPLETED,
    AppointmentStatusChoices.CANCELLED,
}
_VOLUNTEER_STATUSES = {
    AppointmentStatusChoices.CANCELLED,
}


@transaction.atomic
def transition_status(appointment: Appointment, new_status: str, user, reason: Optional[str] = None) -> Appointment:
    """
    Move an appointment along pending -> confirmed -> completed, or cancel it.

    The hospital confirms and completes; either party may cancel.

    Raises:
        AppointmentError: user not a party, status not theirs to set, or
            transition not allowed
    """
    # Lock the row for update
    appointment = Appointment.objects.select_for_update().get(pk=appointment.pk)

    if user.id == appointment.hospital_id:
        permitted = _HOSPITAL_STATUSES
    elif user.id == appointment.volunteer_id:
        permitted = _VOLUNTEER_STATUSES
    else:
        raise AppointmentError('Only the volunteer or the hospital can change this appointment')

    if new_status not in permitted:
        raise AppointmentError(f"You cannot set this appointment to '{new_status}'")

    if appointment.is_terminal:
        log_appointment_transition(appointment, appointment.status, new_status, result='blocked')
        raise AppointmentError(
            f'Status "{appointment.get_status_display()}" is terminal and cannot be changed'
        )

    if not appointment.can_transition_to(new_status):
        allowed = Appointment._ALLOWED_TRANSITIONS[appointment.status]
        log_appointment_transition(appointment, appointment.status, new_status, result='blocked')
        raise AppointmentError(
            f'Transition not allowed: {appointment.status} -> {new_status}. '
            f'Valid transitions: {", ".join(allowed)}'
        )

    previous = appointment.status
    appointment.status = new_status
    if new_status == AppointmentStatusChoices.CANCELLED and reason:
        appointment.cancellation_reason = reason
    appointment.save(update_fields=['status', 'cancellation_reason', 'updated_at'])

    log_appointment_transition(appointment, previous, new_status)
    return appointment
