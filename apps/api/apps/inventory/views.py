"""
Inventory views: blood bank stock maintenance and the availability lookup.
"""
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsBloodBank
from apps.core.exceptions import DomainValidationError, domain_error_response

from .models import InventoryItem
from .serializers import (
    AvailabilityQuerySerializer,
    InventoryAdjustSerializer,
    InventoryItemSerializer,
    InventoryQuantitySerializer,
    SupplyMatchSerializer,
)
from .services import (
    NegativeInventoryError,
    adjust_quantity,
    find_available_supply,
    set_quantity,
)


class InventoryItemViewSet(viewsets.ModelViewSet):
    """
    A blood bank's own inventory.

    - GET    /api/v1/inventory/items/
    - POST   /api/v1/inventory/items/             upsert by (city, blood_group)
    - PATCH  /api/v1/inventory/items/{id}/        {"quantity": 7}
    - DELETE /api/v1/inventory/items/{id}/
    - POST   /api/v1/inventory/items/{id}/adjust/ {"delta": -2}

    Rows of other banks are invisible (404).
    """
    serializer_class = InventoryItemSerializer
    permission_classes = [IsBloodBank]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    search_fields = ['city', 'blood_group']
    ordering = ['city', 'blood_group']

    def get_queryset(self):
        return InventoryItem.objects.filter(blood_bank=self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = set_quantity(
                blood_bank=request.user,
                city=serializer.validated_data['city'],
                blood_group=serializer.validated_data['blood_group'],
                quantity=serializer.validated_data.get('quantity', 0),
            )
        except DomainValidationError as e:
            return domain_error_response(e)

        return Response(self.get_serializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        item = self.get_object()
        serializer = InventoryQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = set_quantity(
                blood_bank=request.user,
                city=item.city,
                blood_group=item.blood_group,
                quantity=serializer.validated_data['quantity'],
            )
        except NegativeInventoryError as e:
            return domain_error_response(e)

        return Response(self.get_serializer(item).data)

    @action(detail=True, methods=['post'])
    def adjust(self, request, pk=None):
        """Add or remove units; the result may not go below zero."""
        item = self.get_object()
        serializer = InventoryAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = adjust_quantity(item, serializer.validated_data['delta'])
        except NegativeInventoryError as e:
            return domain_error_response(e)

        return Response(self.get_serializer(item).data)


class AvailabilityView(APIView):
    """
    GET /api/v1/inventory/availability/?blood_group=O-&quantity=2[&compatible=true]

    Every blood bank row holding at least `quantity` units, with the bank's
    name and phone. An empty list means no supply was found.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        params = request.query_params.copy()
        # An unescaped '+' in a query string decodes to a space
        group = params.get('blood_group', '').strip()
        if group in ('A', 'B', 'AB', 'O'):
            params['blood_group'] = group + '+'

        serializer = AvailabilityQuerySerializer(data=params)
        serializer.is_valid(raise_exception=True)

        matches = find_available_supply(
            blood_group=serializer.validated_data['blood_group'],
            min_quantity=serializer.validated_data['quantity'],
            compatible=serializer.validated_data['compatible'],
        )
        return Response({
            'count': len(matches),
            'results': SupplyMatchSerializer([m.to_dict() for m in matches], many=True).data,
        })
