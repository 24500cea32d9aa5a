"""
SWIFTSHIP Main URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.health import health_check, readiness_check


# ===========================================
# ADMIN SITE CUSTOMIZATION
# ===========================================
admin.site.site_header = "SWIFTSHIP Operations"
admin.site.site_title = "SWIFTSHIP Admin"
admin.site.index_title = "Shipments & Tracking"


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'SWIFTSHIP API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'register': '/api/auth/register/',
                'token': '/api/auth/token/',
                'refresh': '/api/auth/token/refresh/',
            },
            'me': '/api/users/me/',
            'shipments': '/api/shipments/',
            'shipment_stats': '/api/shipments/stats/',
            'track': '/api/track/<tracking_number>/',
            'services': '/api/services/',
            'contact': '/api/contact/',
        }
    })


urlpatterns = [
    # Health probes
    path('health/', health_check, name='health'),
    path('health/ready/', readiness_check, name='health-ready'),

    # Admin
    path('admin/', admin.site.urls),

    # API Root & schema
    path('api/', api_root, name='api-root'),
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),

    # App URLs
    path('api/', include('core.urls')),
    path('api/', include('logistics.urls')),
    path('api/', include('support.urls')),
]
