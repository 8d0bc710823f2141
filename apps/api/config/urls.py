"""
URL configuration for the Lifeline API.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from apps.core.observability.health import HealthzView, ReadyzView

urlpatterns = [
    # Health checks (no auth required)
    path('healthz', HealthzView.as_view(), name='healthz'),
    path('readyz', ReadyzView.as_view(), name='readyz'),

    # Admin
    path('admin/', admin.site.urls),

    # Private API (authentication required unless stated by the view)
    path('api/', include('apps.core.urls')),  # JWT sign-in / refresh / sign-out
    path('api/v1/accounts/', include('apps.accounts.urls')),
    path('api/v1/inventory/', include('apps.inventory.urls')),
    path('api/v1/emergencies/', include('apps.emergencies.urls')),
    path('api/v1/appointments/', include('apps.appointments.urls')),
    path('api/v1/messaging/', include('apps.messaging.urls')),

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
