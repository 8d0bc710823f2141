"""
Messaging services - conversations between hospitals and blood banks.
"""
from typing import Tuple

from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Q

from apps.accounts.models import RoleChoices
from apps.core import realtime
from apps.core.exceptions import DomainValidationError
from apps.core.observability.events import log_conversation_resolved

from .models import Conversation, Message


class ConversationError(DomainValidationError):
    error_type = 'conversation'


CONVERSATION_EXISTS = 'Conversation already exists'


def _has_role(user, role):
    return user.user_roles.filter(role__name=role).exists()


def get_or_create_conversation(hospital, blood_bank, emergency_post=None) -> Tuple[Conversation, bool]:
    """
    Return the conversation for (hospital, blood_bank, emergency_post),
    creating it if needed.

    Returns:
        (conversation, created). Calling twice with the same arguments
        yields the same conversation; concurrent callers racing on the
        insert both end up with the row that won.

    Raises:
        ConversationError: the parties do not hold the hospital and
            blood bank roles
    """
    if not _has_role(hospital, RoleChoices.HOSPITAL):
        raise ConversationError('A conversation needs a hospital')
    if not _has_role(blood_bank, RoleChoices.BLOOD_BANK):
        raise ConversationError('A conversation needs a blood bank')

    lookup = {
        'hospital': hospital,
        'blood_bank': blood_bank,
        'emergency_post': emergency_post,
    }

    conversation = Conversation.objects.filter(**lookup).first()
    if conversation is not None:
        log_conversation_resolved(conversation, created=False)
        return conversation, False

    try:
        with transaction.atomic():
            conversation = Conversation.objects.create(**lookup)
    except IntegrityError:
        # Lost the race against a concurrent insert of the same triple
        conversation = Conversation.objects.get(**lookup)
        log_conversation_resolved(conversation, created=False)
        return conversation, False

    log_conversation_resolved(conversation, created=True)
    return conversation, True


def conversations_for(user):
    """
    Conversations `user` takes part in, most recently active first, with
    `unread_count` and `last_message_at` annotated.
    """
    return (
        Conversation.objects
        .filter(Q(hospital=user) | Q(blood_bank=user))
        .select_related('hospital__profile', 'blood_bank__profile', 'emergency_post')
        .annotate(
            unread_count=Count(
                'messages',
                filter=Q(messages__read=False) & ~Q(messages__sender=user),
            ),
            last_message_at=Max('messages__created_at'),
        )
        .order_by('-updated_at')
    )


def unread_count(conversation: Conversation, viewer) -> int:
    """Messages in `conversation` not sent by `viewer` and not yet read."""
    return (
        conversation.messages
        .filter(read=False)
        .exclude(sender=viewer)
        .count()
    )


@transaction.atomic
def send_message(conversation: Conversation, sender, content: str) -> Message:
    """
    Append a message and bump the conversation to the top of both inboxes.

    Raises:
        ConversationError: sender is not a participant, or content is empty
    """
    if not conversation.has_participant(sender):
        raise ConversationError('Only the hospital and blood bank in this conversation can post to it')

    content = (content or '').strip()
    if not content:
        raise ConversationError('Message content cannot be empty')

    message = Message.objects.create(
        conversation=conversation,
        sender=sender,
        content=content,
    )
    conversation.save(update_fields=['updated_at'])
    return message


@transaction.atomic
def mark_read(conversation: Conversation, reader) -> int:
    """
    Mark every message the other party sent as read.

    Returns:
        Number of messages that changed.
    """
    if not conversation.has_participant(reader):
        raise ConversationError('Only participants can read this conversation')

    unread = conversation.messages.filter(read=False).exclude(sender=reader)
    rows = list(unread.values('id', 'conversation_id', 'sender_id', 'content', 'created_at'))
    if not rows:
        return 0

    updated = Message.objects.filter(pk__in=[row['id'] for row in rows]).update(read=True)

    # Bulk updates bypass post_save; publish them explicitly
    for row in rows:
        realtime.publish_on_commit(realtime.ChangeEvent(
            table=Message._meta.db_table,
            event=realtime.UPDATE,
            record={**row, 'read': True},
        ))
    return updated

