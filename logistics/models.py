"""
LOGISTICS App - Shipments & Tracking for SWIFTSHIP

Handles: Customer profiles, Couriers, Shipments, Tracking events
"""

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import RegexValidator, MinValueValidator
from django.utils import timezone
from decimal import Decimal


TRACKING_NUMBER_REGEX = r'^SW\d{9}$'


class ServiceType(models.TextChoices):
    """Service tier, determines price and ETA."""
    STANDARD = 'standard', 'Standard'
    EXPRESS = 'express', 'Express'
    OVERNIGHT = 'overnight', 'Overnight'


class ShipmentStatus(models.TextChoices):
    """
    Known shipment statuses.

    Status is free text in the store; values written server-side that this
    code does not know about parse to UNRECOGNIZED.
    """
    PENDING = 'pending', 'Pending'
    IN_TRANSIT = 'in_transit', 'In Transit'
    OUT_FOR_DELIVERY = 'out_for_delivery', 'Out For Delivery'
    DELIVERED = 'delivered', 'Delivered'
    UNRECOGNIZED = 'unrecognized', 'Unrecognized'

    @classmethod
    def parse(cls, raw):
        """Map any stored string onto a member, never raising."""
        try:
            return cls((raw or '').strip().lower())
        except ValueError:
            return cls.UNRECOGNIZED


class CourierStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class Customer(models.Model):
    """
    Shipment-owning customer profile.

    Linked 1:1 to an account (unique user_id) and created lazily on the
    first shipment submission, see logistics.services.identity.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customer_profile',
        verbose_name="Linked account"
    )
    full_name = models.CharField(max_length=150, verbose_name="Full name")
    email = models.CharField(max_length=254, blank=True, verbose_name="E-mail")
    phone = models.CharField(max_length=30, verbose_name="Phone")
    address = models.CharField(max_length=255, verbose_name="Address")
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'customers'
        verbose_name = "Customer"
        verbose_name_plural = "Customers"
        ordering = ['-created_at']

    def __str__(self):
        return self.full_name or str(self.id)


class Courier(models.Model):
    """Courier that can be assigned to shipments by operations staff."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='courier_profile',
        verbose_name="Linked account"
    )
    full_name = models.CharField(max_length=150, verbose_name="Full name")
    email = models.CharField(max_length=254, blank=True, verbose_name="E-mail")
    phone = models.CharField(max_length=30, verbose_name="Phone")
    vehicle_type = models.CharField(max_length=50, blank=True, verbose_name="Vehicle type")
    license_number = models.CharField(max_length=50, blank=True, verbose_name="License number")
    status = models.CharField(
        max_length=20,
        choices=CourierStatus.choices,
        default=CourierStatus.ACTIVE,
        verbose_name="Status"
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'couriers'
        verbose_name = "Courier"
        verbose_name_plural = "Couriers"
        ordering = ['full_name']

    def __str__(self):
        return self.full_name


class Shipment(models.Model):
    """
    Core shipment model.

    tracking_number, customer, price and estimated_delivery are set once at
    creation and cannot change afterwards.
    """

    FROZEN_FIELDS = ('tracking_number', 'customer_id', 'price', 'estimated_delivery')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_number = models.CharField(
        max_length=11,
        unique=True,
        editable=False,
        validators=[RegexValidator(regex=TRACKING_NUMBER_REGEX, message="Format: SW followed by 9 digits")],
        verbose_name="Tracking number"
    )

    # Actors
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name='shipments',
        verbose_name="Customer"
    )
    courier = models.ForeignKey(
        Courier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shipments',
        verbose_name="Courier"
    )

    # Sender
    sender_name = models.CharField(max_length=150, verbose_name="Sender name")
    sender_phone = models.CharField(max_length=30, verbose_name="Sender phone")
    sender_address = models.CharField(max_length=255, verbose_name="Sender address")

    # Recipient
    recipient_name = models.CharField(max_length=150, verbose_name="Recipient name")
    recipient_phone = models.CharField(max_length=30, verbose_name="Recipient phone")
    recipient_address = models.CharField(max_length=255, verbose_name="Recipient address")

    # Package
    package_weight = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="Weight (kg)"
    )
    package_dimensions = models.CharField(
        max_length=50,
        verbose_name="Dimensions (LxWxH)"
    )
    service_type = models.CharField(
        max_length=20,
        choices=ServiceType.choices,
        default=ServiceType.STANDARD,
        verbose_name="Service"
    )

    # Free text in the store, see ShipmentStatus.parse
    status = models.CharField(
        max_length=30,
        default=ShipmentStatus.PENDING,
        verbose_name="Status"
    )

    # Delivery window
    estimated_delivery = models.DateTimeField(null=True, blank=True, verbose_name="Estimated delivery")
    actual_delivery = models.DateTimeField(null=True, blank=True, verbose_name="Delivered at")

    # Pricing (frozen at creation)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name="Price"
    )
    notes = models.TextField(null=True, blank=True, verbose_name="Notes")

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shipments'
        verbose_name = "Shipment"
        verbose_name_plural = "Shipments"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', '-created_at'], name='shipments_customer_created'),
            models.Index(fields=['status', 'created_at'], name='shipments_status_created'),
        ]

    def __str__(self):
        return f"{self.tracking_number} - {self.status}"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_values = dict(zip(field_names, values))
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_values', None)
        if loaded:
            for field in self.FROZEN_FIELDS:
                if field in loaded and getattr(self, field) != loaded[field]:
                    raise ValueError(f"Shipment.{field} cannot change after creation")
        super().save(*args, **kwargs)

    @property
    def status_enum(self) -> ShipmentStatus:
        return ShipmentStatus.parse(self.status)

    @property
    def is_pending(self) -> bool:
        return self.status_enum == ShipmentStatus.PENDING

    @property
    def is_delivered(self) -> bool:
        return self.status_enum == ShipmentStatus.DELIVERED


class TrackingEvent(models.Model):
    """
    Append-only history entry for a shipment.

    The shipment's own status column holds the current status; events are
    the history and are written together with it by
    ShipmentRepository.record_status_change.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shipment = models.ForeignKey(
        Shipment,
        on_delete=models.CASCADE,
        related_name='events',
        verbose_name="Shipment"
    )
    status = models.CharField(max_length=30, verbose_name="Status")
    location = models.CharField(max_length=255, blank=True, verbose_name="Location")
    description = models.TextField(blank=True, verbose_name="Description")
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = 'tracking_events'
        verbose_name = "Tracking event"
        verbose_name_plural = "Tracking events"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['shipment', '-created_at'], name='events_shipment_created'),
        ]

    def __str__(self):
        return f"{self.shipment_id} - {self.status} @ {self.location or '?'}"
