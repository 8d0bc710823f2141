"""Messaging serializers."""
from rest_framework import serializers

from apps.accounts.models import User
from apps.emergencies.models import EmergencyPost

from .models import Conversation, Message


def _display_name(user):
    profile = getattr(user, 'profile', None)
    return profile.display_name if profile else user.email


class MessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Message
        fields = ['id', 'conversation', 'sender', 'content', 'read', 'created_at']
        read_only_fields = ['id', 'conversation', 'sender', 'read', 'created_at']


class ConversationSerializer(serializers.ModelSerializer):
    hospital_name = serializers.SerializerMethodField()
    blood_bank_name = serializers.SerializerMethodField()
    unread_count = serializers.IntegerField(read_only=True, default=0)
    last_message_at = serializers.DateTimeField(read_only=True, default=None)

    class Meta:
        model = Conversation
        fields = [
            'id',
            'hospital',
            'hospital_name',
            'blood_bank',
            'blood_bank_name',
            'emergency_post',
            'unread_count',
            'last_message_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_hospital_name(self, obj):
        return _display_name(obj.hospital)

    def get_blood_bank_name(self, obj):
        return _display_name(obj.blood_bank)


class StartConversationSerializer(serializers.Serializer):
    """
    POST /api/v1/messaging/conversations/

    The caller is one side; name the other. A hospital sends
    `blood_bank`, a blood bank sends `hospital`.
    """
    hospital = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False)
    blood_bank = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False)
    emergency_post = serializers.PrimaryKeyRelatedField(
        queryset=EmergencyPost.objects.all(),
        required=False,
        allow_null=True
    )
