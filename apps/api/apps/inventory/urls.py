"""Inventory URLs."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from .views import AvailabilityView, InventoryItemViewSet

router = DefaultRouter()
router.register(r'items', InventoryItemViewSet, basename='inventory-item')

urlpatterns = [
    path('availability/', AvailabilityView.as_view(), name='inventory-availability'),
    path('', include(router.urls)),
]
