"""
Domain events logging helpers.

Provides structured event logging for business operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'emergency_workflow_transition')
        entity_type: Type of entity (e.g., 'EmergencyPost', 'InventoryItem')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, etc.)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'inventory_adjusted',
            entity_type='InventoryItem',
            entity_id=str(item.id),
            entity_ids={'blood_bank_id': str(item.blood_bank_id)},
            result='success',
            previous_quantity=4,
            new_quantity=6
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'duplicate']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_workflow_transition(from_state, to_state, poster_role, result='success', **extra):
    """Log an emergency request workflow state change."""
    log_domain_event(
        'emergency_workflow_transition',
        entity_type='EmergencyRequest',
        result=result,
        from_state=from_state,
        to_state=to_state,
        poster_role=poster_role,
        **extra
    )


def log_inventory_adjusted(item, previous_quantity, result='success'):
    """Log a change of stock level for one inventory row."""
    log_domain_event(
        'inventory_adjusted',
        entity_type='InventoryItem',
        entity_id=str(item.id),
        entity_ids={'blood_bank_id': str(item.blood_bank_id)},
        result=result,
        blood_group=item.blood_group,
        city=item.city,
        previous_quantity=previous_quantity,
        new_quantity=item.quantity,
    )


def log_negative_inventory_blocked(item, requested_quantity):
    """Log a blocked attempt to drive stock below zero."""
    log_domain_event(
        'inventory_negative_blocked',
        entity_type='InventoryItem',
        entity_id=str(item.id),
        entity_ids={'blood_bank_id': str(item.blood_bank_id)},
        result='blocked',
        current_quantity=item.quantity,
        requested_quantity=requested_quantity,
    )


def log_participation_recorded(participation):
    """Log a volunteer response to an emergency post."""
    log_domain_event(
        'participation_recorded',
        entity_type='Participation',
        entity_id=str(participation.id),
        entity_ids={
            'emergency_post_id': str(participation.emergency_id),
            'volunteer_id': str(participation.volunteer_id),
        },
        result='success',
    )


def log_appointment_transition(appointment, from_status, to_status, result='success', **extra):
    """Log appointment status transition event."""
    log_domain_event(
        'appointment_transition',
        entity_type='Appointment',
        entity_id=str(appointment.id),
        entity_ids={
            'volunteer_id': str(appointment.volunteer_id),
            'hospital_id': str(appointment.hospital_id),
        },
        result=result,
        from_status=from_status,
        to_status=to_status,
        **extra
    )


def log_conversation_resolved(conversation, created):
    """Log get-or-create of a hospital/blood bank conversation."""
    log_domain_event(
        'conversation_created' if created else 'conversation_reused',
        entity_type='Conversation',
        entity_id=str(conversation.id),
        entity_ids={
            'hospital_id': str(conversation.hospital_id),
            'blood_bank_id': str(conversation.blood_bank_id),
        },
        result='success' if created else 'duplicate',
    )
