"""
Shipment & Tracking-Event Repositories

Read/write operations against the shipment store. Each repository is
built with an explicit StoreClient; every public method issues its store
work inside `client.request(...)` so database errors surface as
StorageFailure.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from .exceptions import NotFound, StorageFailure, ValidationFailure
from .filters import ShipmentFilter
from .models import Courier, Shipment, ShipmentStatus, ServiceType, TrackingEvent
from .services import shipment_rules
from .store import StoreClient

logger = logging.getLogger(__name__)

REQUIRED = "This field is required."
MAX_WEIGHT = Decimal('999999.99')


@dataclass
class ContactInfo:
    """Sender or recipient block of the shipment form."""
    name: str
    phone: str
    address: str


@dataclass
class PackageInfo:
    """Package block of the shipment form. `weight` is the raw form value."""
    weight: object
    dimensions: str


def parse_weight(raw) -> Optional[Decimal]:
    """
    Parse a form weight into a positive Decimal with 2 places.

    Returns None when the value is not a finite number above zero.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    if value <= 0:
        return None
    return value


class ShipmentRepository:
    """
    Shipments: create, list per customer, lookup by tracking number, and
    the operational status / courier updates.
    """

    def __init__(self, client: StoreClient, clock: Callable = timezone.now):
        self.client = client
        self.clock = clock

    # ==========================================
    # Create
    # ==========================================

    def create_shipment(
        self,
        customer_id,
        sender: ContactInfo,
        recipient: ContactInfo,
        package: PackageInfo,
        service_type: str,
        notes: Optional[str] = None,
    ) -> Shipment:
        """
        Validate the form, derive tracking number / price / ETA, insert.

        Raises:
            ValidationFailure: before any write, on blank or malformed input
            StorageFailure: the insert failed
        """
        if not customer_id:
            raise ValidationFailure({'customer_id': [REQUIRED]})
        weight, service_type = self.validate(sender, recipient, package, service_type)

        now = self.clock()
        price = shipment_rules.price_for_service(service_type)
        eta = shipment_rules.estimated_delivery(now, service_type)
        notes = (notes or '').strip() or None

        values = {
            'customer_id': customer_id,
            'sender_name': sender.name.strip(),
            'sender_phone': sender.phone.strip(),
            'sender_address': sender.address.strip(),
            'recipient_name': recipient.name.strip(),
            'recipient_phone': recipient.phone.strip(),
            'recipient_address': recipient.address.strip(),
            'package_weight': weight,
            'package_dimensions': package.dimensions.strip(),
            'service_type': service_type,
            'status': ShipmentStatus.PENDING,
            'estimated_delivery': eta,
            'actual_delivery': None,
            'price': price,
            'notes': notes,
            'created_at': now,
        }

        attempts = max(1, getattr(settings, 'SHIPMENT_TRACKING_NUMBER_ATTEMPTS', 5))
        millis = shipment_rules.epoch_millis(now)

        for attempt in range(attempts):
            tracking_number = shipment_rules.generate_tracking_number(millis + attempt)
            try:
                with self.client.request('create_shipment'):
                    with self.client.atomic():
                        shipment = self.client.table(Shipment).create(
                            tracking_number=tracking_number, **values
                        )
            except StorageFailure as exc:
                if isinstance(exc.__cause__, IntegrityError) and self._tracking_number_taken(tracking_number):
                    logger.warning(
                        f"Tracking number {tracking_number} already taken "
                        f"(attempt {attempt + 1}/{attempts}), regenerating"
                    )
                    continue
                raise

            logger.info(
                f"Shipment {shipment.tracking_number} created for customer {customer_id} "
                f"({service_type}, {price})"
            )
            return shipment

        logger.error(f"No free tracking number after {attempts} attempts")
        raise StorageFailure('create_shipment', "Could not allocate a tracking number. Please try again.")

    def validate(self, sender, recipient, package, service_type):
        """
        Domain checks for a new shipment: contact and package fields present,
        weight a positive number, service tier known.

        Returns:
            (weight, service_type) normalised for storage

        Raises:
            ValidationFailure: with per-field messages
        """
        errors: Dict[str, List[str]] = {}

        for prefix, info in (('sender', sender), ('recipient', recipient)):
            for part in ('name', 'phone', 'address'):
                if not (getattr(info, part, None) or '').strip():
                    errors[f'{prefix}_{part}'] = [REQUIRED]

        if not (package.dimensions or '').strip():
            errors['package_dimensions'] = [REQUIRED]

        weight = parse_weight(package.weight)
        if weight is None:
            errors['package_weight'] = ["Enter a weight greater than zero."]

        service_type = (service_type or '').strip().lower()
        if service_type not in ServiceType.values:
            errors['service_type'] = [f"Choose one of: {', '.join(ServiceType.values)}."]

        if errors:
            logger.info(f"Shipment rejected: {sorted(errors)}")
            raise ValidationFailure(errors, "Failed to create shipment. Please check the form.")
        return weight, service_type

    def _tracking_number_taken(self, tracking_number: str) -> bool:
        with self.client.request('check_tracking_number'):
            return self.client.table(Shipment).filter(tracking_number=tracking_number).exists()

    # ==========================================
    # Read
    # ==========================================

    def list_shipments_for_customer(self, customer_id, filters=None) -> List[Shipment]:
        """
        All shipments of the customer, newest first. Empty list when none.

        Args:
            filters: optional query-string mapping applied through ShipmentFilter
                (status, service_type, created_after, created_before, tracking_number)

        Raises:
            ValidationFailure: a filter value could not be parsed
        """
        queryset = (
            self.client.table(Shipment)
            .filter(customer_id=customer_id)
            .order_by('-created_at', '-id')
        )
        if filters:
            filterset = ShipmentFilter(filters, queryset=queryset)
            if not filterset.is_valid():
                raise ValidationFailure(
                    {field: [str(message) for message in messages]
                     for field, messages in filterset.errors.items()},
                    "Invalid shipment filter.",
                )
            queryset = filterset.qs

        with self.client.request('list_shipments_for_customer'):
            return list(queryset)

    def find_by_tracking_number(self, tracking_number: str) -> Shipment:
        """
        Case-insensitive lookup (input is trimmed and upper-cased).

        Raises:
            ValidationFailure: blank input
            NotFound: no shipment carries this tracking number
            StorageFailure: the lookup itself failed
        """
        normalized = (tracking_number or '').strip().upper()
        if not normalized:
            raise ValidationFailure({'tracking_number': [REQUIRED]}, "Enter a tracking number.")

        with self.client.request('find_by_tracking_number'):
            shipment = (
                self.client.table(Shipment)
                .select_related('courier')
                .filter(tracking_number=normalized)
                .first()
            )

        if shipment is None:
            raise NotFound("Tracking number not found. Please check and try again.")
        return shipment

    # ==========================================
    # Operational updates
    # ==========================================

    def record_status_change(
        self,
        shipment: Shipment,
        status: str,
        location: str = '',
        description: str = '',
        courier_id=None,
    ) -> TrackingEvent:
        """
        Set the shipment's current status (and optionally its courier) and
        append the matching tracking event in one transaction. Delivered
        shipments get actual_delivery.

        Raises:
            ValidationFailure: blank status
            NotFound: courier_id given but no such courier
        """
        status = (status or '').strip().lower().replace(' ', '_')
        if not status:
            raise ValidationFailure({'status': [REQUIRED]})

        now = self.clock()
        update = {'status': status, 'updated_at': now}
        if ShipmentStatus.parse(status) == ShipmentStatus.DELIVERED:
            update['actual_delivery'] = now
        if courier_id:
            update['courier_id'] = courier_id

        with self.client.request('record_status_change'):
            with self.client.atomic():
                if courier_id and not self.client.table(Courier).filter(pk=courier_id).exists():
                    raise NotFound("Courier not found.")
                self.client.table(Shipment).filter(pk=shipment.pk).update(**update)
                event = self.client.table(TrackingEvent).create(
                    shipment_id=shipment.pk,
                    status=status,
                    location=(location or '').strip(),
                    description=(description or '').strip(),
                    created_at=now,
                )

        for field, value in update.items():
            setattr(shipment, field, value)

        logger.info(f"Shipment {shipment.tracking_number} -> {status}")
        return event

    def assign_courier(self, shipment: Shipment, courier_id) -> Shipment:
        """
        Raises:
            NotFound: no courier with this id
        """
        with self.client.request('assign_courier'):
            if not self.client.table(Courier).filter(pk=courier_id).exists():
                raise NotFound("Courier not found.")
            self.client.table(Shipment).filter(pk=shipment.pk).update(
                courier_id=courier_id, updated_at=self.clock()
            )

        shipment.courier_id = courier_id
        logger.info(f"Shipment {shipment.tracking_number} assigned to courier {courier_id}")
        return shipment

    def shipment_stats(self, customer_id) -> Dict[str, int]:
        """Dashboard counters (total, in transit, delivered, pending)."""
        with self.client.request('shipment_stats'):
            statuses = list(
                self.client.table(Shipment)
                .filter(customer_id=customer_id)
                .values_list('status', flat=True)
            )
        return shipment_rules.shipment_stats(statuses)


class TrackingEventRepository:
    """Read side of the append-only tracking-event log."""

    def __init__(self, client: StoreClient):
        self.client = client

    def list_events_for_shipment(self, shipment_id) -> List[TrackingEvent]:
        """Events of the shipment, newest first. Empty list when none."""
        with self.client.request('list_events_for_shipment'):
            return list(
                self.client.table(TrackingEvent)
                .filter(shipment_id=shipment_id)
                .order_by('-created_at', '-id')
            )
