"""
Logistics App Views - Shipments, Public Tracking & Service Catalogue
"""

import logging

from rest_framework import status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import StorageFailure, ValidationFailure
from .repositories import (
    ContactInfo, PackageInfo, ShipmentRepository, TrackingEventRepository,
)
from .serializers import (
    ShipmentSerializer, ShipmentCreateSerializer, TrackingEventSerializer,
    StatusChangeSerializer, ServiceTierSerializer,
)
from .services import shipment_rules
from .services.identity import CustomerProfileService
from .store import get_store_client

logger = logging.getLogger(__name__)


class StoreMixin:
    """Builds repositories against the configured store for each request."""

    def get_store_client(self):
        return get_store_client()

    def shipment_repository(self):
        return ShipmentRepository(self.get_store_client())

    def event_repository(self):
        return TrackingEventRepository(self.get_store_client())

    def profile_service(self):
        return CustomerProfileService(self.get_store_client())


class ShipmentListCreateView(StoreMixin, APIView):
    """
    Customer dashboard.

    GET  /api/shipments/  -> own shipments, newest first
    POST /api/shipments/  -> create a shipment (profile is created on first use)
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        customer_id = self.profile_service().find_customer_id(request.user.pk)
        if customer_id is None:
            return Response([])

        shipments = self.shipment_repository().list_shipments_for_customer(
            customer_id, filters=request.query_params
        )
        return Response(ShipmentSerializer(shipments, many=True).data)

    def post(self, request):
        serializer = ShipmentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            logger.info(f"Shipment form rejected: {sorted(serializer.errors)}")
            raise ValidationFailure(serializer.errors, "Failed to create shipment. Please check the form.")
        data = serializer.validated_data

        sender = ContactInfo(
            name=data['sender_name'],
            phone=data['sender_phone'],
            address=data['sender_address'],
        )
        recipient = ContactInfo(
            name=data['recipient_name'],
            phone=data['recipient_phone'],
            address=data['recipient_address'],
        )
        package = PackageInfo(weight=data['package_weight'], dimensions=data['package_dimensions'])

        repository = self.shipment_repository()
        # Profile is only created for a submission that will be accepted
        repository.validate(sender, recipient, package, data['service_type'])

        try:
            customer_id = self.profile_service().ensure_customer_profile(
                request.user.pk,
                defaults={
                    'full_name': sender.name or request.user.full_name,
                    'email': request.user.email or '',
                    'phone': sender.phone,
                    'address': sender.address,
                },
            )
            shipment = repository.create_shipment(
                customer_id=customer_id,
                sender=sender,
                recipient=recipient,
                package=package,
                service_type=data['service_type'],
                notes=data.get('notes'),
            )
        except StorageFailure as exc:
            raise StorageFailure(exc.operation, "Failed to create shipment. Please try again.") from exc

        return Response(ShipmentSerializer(shipment).data, status=status.HTTP_201_CREATED)


class ShipmentStatsView(StoreMixin, APIView):
    """GET /api/shipments/stats/ - dashboard counters."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        customer_id = self.profile_service().find_customer_id(request.user.pk)
        if customer_id is None:
            return Response(shipment_rules.shipment_stats([]))
        return Response(self.shipment_repository().shipment_stats(customer_id))


class TrackShipmentView(StoreMixin, APIView):
    """
    Public tracking lookup.

    GET /api/track/<tracking_number>/ -> shipment plus its events, newest first.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, tracking_number):
        try:
            shipment = self.shipment_repository().find_by_tracking_number(tracking_number)
            events = self.event_repository().list_events_for_shipment(shipment.pk)
        except StorageFailure as exc:
            raise StorageFailure(exc.operation, "An error occurred while tracking your shipment.") from exc

        return Response({
            'success': True,
            'shipment': ShipmentSerializer(shipment).data,
            'events': TrackingEventSerializer(events, many=True).data,
        })


class ShipmentEventCreateView(StoreMixin, APIView):
    """
    POST /api/shipments/<tracking_number>/events/

    Operations staff record a status change (and optionally assign a courier).
    """

    permission_classes = [permissions.IsAdminUser]

    def post(self, request, tracking_number):
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        repository = self.shipment_repository()
        shipment = repository.find_by_tracking_number(tracking_number)

        event = repository.record_status_change(
            shipment,
            status=data['status'],
            location=data.get('location', ''),
            description=data.get('description', ''),
            courier_id=data.get('courier_id'),
        )
        logger.info(f"{request.user} recorded '{event.status}' on {shipment.tracking_number}")

        return Response({
            'success': True,
            'shipment': ShipmentSerializer(shipment).data,
            'event': TrackingEventSerializer(event).data,
        }, status=status.HTTP_201_CREATED)


class ServiceCatalogueView(APIView):
    """GET /api/services/ - service tiers with price and ETA."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(ServiceTierSerializer(shipment_rules.service_catalogue(), many=True).data)
