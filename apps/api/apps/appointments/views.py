"""
Appointment views.
"""
from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsVolunteer
from apps.core.exceptions import DomainValidationError, domain_error_response

from .models import Appointment
from .serializers import (
    AppointmentSerializer,
    AppointmentTransitionSerializer,
    BookAppointmentSerializer,
)
from .services import book_appointment, transition_status


class AppointmentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Donation appointments of the caller (as volunteer or as hospital).

    Endpoints:
    - GET  /api/v1/appointments/                  (?status=)
    - GET  /api/v1/appointments/{id}/
    - POST /api/v1/appointments/                  volunteer books
    - POST /api/v1/appointments/{id}/transition/  {"status": "confirmed"}

    Allowed transitions:
    - pending -> confirmed | cancelled
    - confirmed -> completed | cancelled
    """
    serializer_class = AppointmentSerializer
    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action == 'create':
            return [IsVolunteer()]
        return super().get_permissions()

    def get_queryset(self):
        user = self.request.user
        queryset = Appointment.objects.select_related(
            'volunteer__profile', 'hospital__profile'
        ).filter(Q(volunteer=user) | Q(hospital=user))

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset.order_by('appointment_date')

    def create(self, request, *args, **kwargs):
        serializer = BookAppointmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            appointment = book_appointment(
                volunteer=request.user,
                hospital=serializer.validated_data['hospital'],
                appointment_date=serializer.validated_data['appointment_date'],
                emergency_post=serializer.validated_data.get('emergency_post'),
                notes=serializer.validated_data.get('notes'),
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='transition')
    def transition(self, request, pk=None):
        appointment = self.get_object()
        serializer = AppointmentTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            appointment = transition_status(
                appointment,
                serializer.validated_data['status'],
                user=request.user,
                reason=serializer.validated_data.get('reason'),
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(AppointmentSerializer(appointment).data)
