"""
Messaging views: hospital / blood bank conversations.
"""
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.accounts.models import RoleChoices
from apps.accounts.permissions import IsPoster, get_user_roles
from apps.core.exceptions import DomainValidationError, domain_error_response

from .serializers import (
    ConversationSerializer,
    MessageSerializer,
    StartConversationSerializer,
)
from .services import (
    CONVERSATION_EXISTS,
    conversations_for,
    get_or_create_conversation,
    mark_read as mark_conversation_read,
    send_message,
    unread_count,
)


class ConversationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Conversations between hospitals and blood banks.

    Endpoints:
    - GET  /api/v1/messaging/conversations/                  with unread_count per conversation
    - POST /api/v1/messaging/conversations/                  get-or-create
    - GET  /api/v1/messaging/conversations/{id}/
    - GET  /api/v1/messaging/conversations/{id}/messages/
    - POST /api/v1/messaging/conversations/{id}/messages/    {"content": "..."}
    - POST /api/v1/messaging/conversations/{id}/mark-read/

    Conversations the caller is not part of are invisible (404).
    """
    serializer_class = ConversationSerializer
    permission_classes = [IsPoster]

    def get_queryset(self):
        return conversations_for(self.request.user)

    def create(self, request, *args, **kwargs):
        """
        Start (or reopen) the conversation with the other party.

        201 with the new conversation, or 200 with the existing one and
        "detail": "Conversation already exists".
        """
        serializer = StartConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if RoleChoices.HOSPITAL in get_user_roles(request.user):
            hospital, blood_bank = request.user, data.get('blood_bank')
            missing = 'blood_bank'
        else:
            hospital, blood_bank = data.get('hospital'), request.user
            missing = 'hospital'

        if hospital is None or blood_bank is None:
            return Response(
                {'error': f'{missing} is required', 'error_type': 'validation'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            conversation, created = get_or_create_conversation(
                hospital=hospital,
                blood_bank=blood_bank,
                emergency_post=data.get('emergency_post'),
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        body = ConversationSerializer(self.get_queryset().get(pk=conversation.pk)).data
        if created:
            return Response(body, status=status.HTTP_201_CREATED)
        return Response({**body, 'detail': CONVERSATION_EXISTS}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get', 'post'])
    def messages(self, request, pk=None):
        conversation = self.get_object()

        if request.method == 'POST':
            serializer = MessageSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                message = send_message(conversation, request.user, serializer.validated_data['content'])
            except DomainValidationError as e:
                return domain_error_response(e)
            return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

        queryset = conversation.messages.order_by('created_at')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(MessageSerializer(page, many=True).data)
        return Response(MessageSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        conversation = self.get_object()
        try:
            marked = mark_conversation_read(conversation, request.user)
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response({
            'marked_read': marked,
            'unread_count': unread_count(conversation, request.user),
        })
