"""
Emergency views: posts (with the request workflow) and participations.
"""
from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsPoster, IsVolunteer, get_user_roles
from apps.core.exceptions import DomainValidationError, domain_error_response
from apps.inventory.serializers import SupplyMatchSerializer

from .models import EmergencyPost, EmergencyPostStatusChoices, Participation
from .permissions import IsPostOwner
from .serializers import (
    ClosePostSerializer,
    EmergencyPostSerializer,
    EmergencyRequestSerializer,
    ParticipateSerializer,
    ParticipationSerializer,
    ReviewParticipationSerializer,
)
from .services import (
    close_emergency_post,
    record_participation,
    review_participation,
    submit_emergency_request,
)
from .workflow import WorkflowStateChoices


class EmergencyPostViewSet(viewsets.ModelViewSet):
    """
    Emergency blood requests.

    Endpoints:
    - GET    /api/v1/emergencies/posts/                     active posts (?status=, ?mine=true, ?blood_group=)
    - GET    /api/v1/emergencies/posts/{id}/
    - POST   /api/v1/emergencies/posts/submit/              run the request workflow
    - POST   /api/v1/emergencies/posts/{id}/close/          poster marks fulfilled/closed
    - DELETE /api/v1/emergencies/posts/{id}/                poster only
    - POST   /api/v1/emergencies/posts/{id}/participate/    volunteer responds
    - GET    /api/v1/emergencies/posts/{id}/participations/ poster sees responses
    """
    serializer_class = EmergencyPostSerializer
    http_method_names = ['get', 'post', 'delete', 'head', 'options']
    search_fields = ['location', 'description']
    ordering = ['-created_at']

    def get_permissions(self):
        if self.action in ('create', 'submit'):
            return [IsPoster()]
        if self.action in ('destroy', 'close', 'participations'):
            return [IsPoster(), IsPostOwner()]
        if self.action == 'participate':
            return [IsVolunteer()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = (
            EmergencyPost.objects
            .select_related('posted_by__profile')
            .annotate(participation_count=Count('participations'))
        )
        if self.action != 'list':
            return queryset

        params = self.request.query_params
        if params.get('mine', '').lower() == 'true':
            queryset = queryset.filter(posted_by=self.request.user)

        status_filter = params.get('status', EmergencyPostStatusChoices.ACTIVE)
        if status_filter != 'all':
            queryset = queryset.filter(status=status_filter)

        blood_group = params.get('blood_group')
        if blood_group:
            queryset = queryset.filter(blood_group=blood_group)

        return queryset

    def create(self, request, *args, **kwargs):
        """POST /posts/ runs the same workflow as /posts/submit/."""
        return self.submit(request)

    @action(detail=False, methods=['post'])
    def submit(self, request):
        """
        Run the emergency request workflow.

        POST /api/v1/emergencies/posts/submit/
        {
            "blood_group": "O-",
            "quantity": 2,
            "location": "Springfield General",
            "contact_phone": "555-0100",
            "urgency_level": "critical",
            "post_anyway": false
        }

        Responses:
        - 201 {"state": "posted", "post": {...}, "matches": [...]}
        - 200 {"state": "availability_found", "matches": [...]}  blood banks can cover it;
          resubmit with "post_anyway": true to post to volunteers regardless
        - 200 {"state": "abandoned", "matches": [...]}  with "contact_blood_banks": true
        """
        serializer = EmergencyRequestSerializer(
            data=request.data,
            context={'caller_roles': get_user_roles(request.user)}
        )
        serializer.is_valid(raise_exception=True)

        try:
            outcome = submit_emergency_request(
                poster=request.user,
                request=serializer.to_post_request(),
                post_anyway=serializer.validated_data['post_anyway'],
                contact_blood_banks=serializer.validated_data['contact_blood_banks'],
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        workflow = outcome.workflow
        body = {
            'state': workflow.state,
            'matches': SupplyMatchSerializer(
                [m.to_dict() for m in workflow.matches], many=True
            ).data,
        }
        if outcome.post is not None:
            post = self.get_queryset().get(pk=outcome.post.pk)
            body['post'] = EmergencyPostSerializer(post).data

        if workflow.state == WorkflowStateChoices.POSTED:
            return Response(body, status=status.HTTP_201_CREATED)
        return Response(body, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        post = self.get_object()
        serializer = ClosePostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            post = close_emergency_post(post, serializer.validated_data['status'])
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(EmergencyPostSerializer(self.get_queryset().get(pk=post.pk)).data)

    @action(detail=True, methods=['post'])
    def participate(self, request, pk=None):
        """
        Volunteer responds to the post. Booking an appointment is a
        separate call (POST /api/v1/appointments/).
        """
        post = self.get_object()
        serializer = ParticipateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participation = record_participation(post, request.user, **serializer.validated_data)
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(ParticipationSerializer(participation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def participations(self, request, pk=None):
        post = self.get_object()
        queryset = post.participations.select_related('emergency').order_by('-created_at')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ParticipationSerializer(page, many=True).data)
        return Response(ParticipationSerializer(queryset, many=True).data)


class ParticipationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Participations visible to the caller.

    - Volunteers: their own responses
    - Posters: responses to their posts
    - POST /api/v1/emergencies/participations/{id}/review/ {"decision": "accepted"}
    """
    serializer_class = ParticipationSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action == 'review':
            return [IsPoster()]
        return super().get_permissions()

    def get_queryset(self):
        user = self.request.user
        queryset = Participation.objects.select_related('emergency').filter(
            Q(volunteer=user) | Q(emergency__posted_by=user)
        )
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset.order_by('-created_at')

    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        participation = self.get_object()
        serializer = ReviewParticipationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participation = review_participation(
                participation, request.user, serializer.validated_data['decision']
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(ParticipationSerializer(participation).data)
