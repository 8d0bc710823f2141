"""Emergency URLs."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from .views import EmergencyPostViewSet, ParticipationViewSet

router = DefaultRouter()
router.register(r'posts', EmergencyPostViewSet, basename='emergency-post')
router.register(r'participations', ParticipationViewSet, basename='participation')

urlpatterns = [
    path('', include(router.urls)),
]
