"""
Logistics App URLs
"""

from django.urls import path

from .views import (
    ShipmentListCreateView, ShipmentStatsView, ShipmentEventCreateView,
    TrackShipmentView, ServiceCatalogueView,
)

urlpatterns = [
    # Customer dashboard
    path('shipments/', ShipmentListCreateView.as_view(), name='shipment-list'),
    path('shipments/stats/', ShipmentStatsView.as_view(), name='shipment-stats'),

    # Operations
    path(
        'shipments/<str:tracking_number>/events/',
        ShipmentEventCreateView.as_view(),
        name='shipment-events'
    ),

    # Public
    path('track/<str:tracking_number>/', TrackShipmentView.as_view(), name='shipment-track'),
    path('services/', ServiceCatalogueView.as_view(), name='service-catalogue'),
]
