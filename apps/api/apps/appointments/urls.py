"""Appointment URLs."""
from django.urls import include, path
from rest_framework.routers import SimpleRouter
from .views import AppointmentViewSet

# SimpleRouter: a DefaultRouter API root would shadow the list at ''
router = SimpleRouter()
router.register(r'', AppointmentViewSet, basename='appointment')

urlpatterns = [
    path('', include(router.urls)),
]
