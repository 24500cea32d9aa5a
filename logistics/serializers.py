"""
Logistics App Serializers - Shipments & Tracking
"""

from rest_framework import serializers

from .models import Shipment, TrackingEvent, Courier, ServiceType
from .repositories import MAX_WEIGHT, parse_weight
from .services import shipment_rules


class StatusPresentationMixin(serializers.Serializer):
    """Adds the label / icon / colour trio for the `status` column."""

    status_label = serializers.SerializerMethodField()
    status_icon = serializers.SerializerMethodField()
    status_color = serializers.SerializerMethodField()

    def get_status_label(self, obj):
        return shipment_rules.format_status_label(obj.status)

    def get_status_icon(self, obj):
        return shipment_rules.classify_status(obj.status).icon

    def get_status_color(self, obj):
        return shipment_rules.classify_status(obj.status).color_class


class CourierSerializer(serializers.ModelSerializer):
    """Public view of the assigned courier."""

    class Meta:
        model = Courier
        fields = ['id', 'full_name', 'phone', 'vehicle_type']


class ShipmentSerializer(StatusPresentationMixin, serializers.ModelSerializer):
    """Full serializer for Shipment model."""

    service_label = serializers.CharField(source='get_service_type_display', read_only=True)
    courier = CourierSerializer(read_only=True)

    class Meta:
        model = Shipment
        fields = [
            'id', 'tracking_number', 'customer', 'courier',
            'sender_name', 'sender_phone', 'sender_address',
            'recipient_name', 'recipient_phone', 'recipient_address',
            'package_weight', 'package_dimensions',
            'service_type', 'service_label',
            'status', 'status_label', 'status_icon', 'status_color',
            'estimated_delivery', 'actual_delivery',
            'price', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class TrackingEventSerializer(StatusPresentationMixin, serializers.ModelSerializer):

    class Meta:
        model = TrackingEvent
        fields = [
            'id', 'status', 'status_label', 'status_icon', 'status_color',
            'location', 'description', 'created_at',
        ]
        read_only_fields = fields


class ServiceTypeField(serializers.ChoiceField):
    """Service tier choice, accepted in any case and with surrounding spaces."""

    def __init__(self, **kwargs):
        kwargs.setdefault('choices', ServiceType.choices)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip().lower()
        return super().to_internal_value(data)


class ShipmentCreateSerializer(serializers.Serializer):
    """Shipment form payload (POST /api/shipments/)."""

    sender_name = serializers.CharField(max_length=150)
    sender_phone = serializers.CharField(max_length=30)
    sender_address = serializers.CharField(max_length=255)
    recipient_name = serializers.CharField(max_length=150)
    recipient_phone = serializers.CharField(max_length=30)
    recipient_address = serializers.CharField(max_length=255)
    package_weight = serializers.CharField()
    package_dimensions = serializers.CharField(max_length=50)
    service_type = ServiceTypeField(default=ServiceType.STANDARD)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate_package_weight(self, value):
        weight = parse_weight(value)
        if weight is None:
            raise serializers.ValidationError("Enter a weight greater than zero.")
        if weight > MAX_WEIGHT:
            raise serializers.ValidationError(f"Weight cannot exceed {MAX_WEIGHT}.")
        return weight


class StatusChangeSerializer(serializers.Serializer):
    """Operations payload for POST /api/shipments/<tracking_number>/events/."""

    status = serializers.CharField(max_length=30)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    courier_id = serializers.UUIDField(required=False, allow_null=True)


class ServiceTierSerializer(serializers.Serializer):
    code = serializers.CharField()
    label = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    eta_days = serializers.IntegerField()
    eta_label = serializers.CharField()
    description = serializers.CharField()
