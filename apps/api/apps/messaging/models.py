"""
Hospital / blood bank conversations and their messages.
"""
import uuid
from django.conf import settings
from django.db import models


class Conversation(models.Model):
    """
    A thread between one hospital and one blood bank, optionally about
    one emergency post.

    Unique per (hospital, blood_bank, emergency_post). A separate partial
    constraint covers the thread with no post, since NULLs never collide
    in a plain unique constraint.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    hospital = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hospital_conversations'
    )
    blood_bank = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blood_bank_conversations'
    )
    emergency_post = models.ForeignKey(
        'emergencies.EmergencyPost',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='conversations'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'conversations'
        verbose_name = 'Conversation'
        verbose_name_plural = 'Conversations'
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['hospital', 'blood_bank', 'emergency_post'],
                name='unique_conversation_per_post'
            ),
            models.UniqueConstraint(
                fields=['hospital', 'blood_bank'],
                condition=models.Q(emergency_post__isnull=True),
                name='unique_conversation_without_post'
            ),
        ]
        indexes = [
            models.Index(fields=['hospital', '-updated_at'], name='idx_conversation_hospital'),
            models.Index(fields=['blood_bank', '-updated_at'], name='idx_conversation_bank'),
        ]

    def __str__(self):
        return f"Conversation {self.hospital_id} <-> {self.blood_bank_id}"

    def has_participant(self, user):
        return user.id in (self.hospital_id, self.blood_bank_id)


class Message(models.Model):
    """
    One message in a conversation. `read` is set only by the recipient.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages'
    )
    content = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'messages'
        verbose_name = 'Message'
        verbose_name_plural = 'Messages'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='idx_message_conversation'),
            models.Index(fields=['conversation', 'read'], name='idx_message_unread'),
        ]

    def __str__(self):
        return f"Message {self.id} in {self.conversation_id}"
