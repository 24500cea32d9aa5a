"""
Shipment Rules for SWIFTSHIP

Derivation rules applied when a shipment is created, and the status
presentation shared by the dashboard and the public tracker.

Pure functions, no I/O:
- Tracking number: "SW" + last 9 digits of the epoch-millisecond clock
- Price and ETA: fixed per service tier
- Status label / icon / colour: total over any stored status string
"""

from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Union

from django.utils import timezone

from logistics.models import ServiceType, ShipmentStatus


# ============================================
# CONSTANTS
# ============================================

TRACKING_PREFIX = 'SW'
TRACKING_DIGITS = 9

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


@dataclass(frozen=True)
class ServiceTier:
    code: str
    label: str
    price: Decimal
    eta_days: int
    description: str

    @property
    def eta_label(self) -> str:
        if self.eta_days == 0:
            return "Same day"
        return f"{self.eta_days} day" + ("" if self.eta_days == 1 else "s")


SERVICE_TIERS: Dict[str, ServiceTier] = {
    ServiceType.STANDARD: ServiceTier(
        code=ServiceType.STANDARD,
        label="Standard",
        price=Decimal('10.00'),
        eta_days=5,
        description="Reliable delivery at affordable rates",
    ),
    ServiceType.EXPRESS: ServiceTier(
        code=ServiceType.EXPRESS,
        label="Express",
        price=Decimal('25.00'),
        eta_days=1,
        description="Next-day delivery with priority handling",
    ),
    ServiceType.OVERNIGHT: ServiceTier(
        code=ServiceType.OVERNIGHT,
        label="Overnight",
        price=Decimal('40.00'),
        eta_days=0,
        description="Same-day delivery for urgent shipments",
    ),
}


StatusStyle = namedtuple('StatusStyle', ['icon', 'color_class'])

STATUS_STYLES = {
    ShipmentStatus.DELIVERED: StatusStyle('check-circle', 'bg-green-100 text-green-700'),
    ShipmentStatus.IN_TRANSIT: StatusStyle('truck', 'bg-blue-100 text-blue-700'),
    ShipmentStatus.OUT_FOR_DELIVERY: StatusStyle('truck', 'bg-blue-100 text-blue-700'),
    ShipmentStatus.PENDING: StatusStyle('clock', 'bg-amber-100 text-amber-700'),
}

FALLBACK_STATUS_STYLE = StatusStyle('package', 'bg-slate-100 text-slate-700')


# ============================================
# TRACKING NUMBER
# ============================================

def epoch_millis(now: datetime) -> int:
    """Unix-epoch milliseconds of `now` (naive values are read as local time)."""
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    return (now - EPOCH) // timedelta(milliseconds=1)


def generate_tracking_number(now: Union[datetime, int, None] = None) -> str:
    """
    Build a tracking number from the clock.

    Args:
        now: datetime or epoch milliseconds; defaults to the current time

    Returns:
        "SW" followed by the 9 least-significant digits of the millisecond
        timestamp, zero-padded. Not unique by itself: the store's unique
        constraint catches collisions.
    """
    if isinstance(now, bool):
        raise TypeError("generate_tracking_number() needs a datetime or epoch milliseconds, not bool")
    if now is None:
        now = timezone.now()
    millis = now if isinstance(now, int) else epoch_millis(now)
    window = millis % (10 ** TRACKING_DIGITS)
    return f"{TRACKING_PREFIX}{window:0{TRACKING_DIGITS}d}"


# ============================================
# SERVICE TIERS
# ============================================

def get_service_tier(service_type: str) -> ServiceTier:
    """
    Raises:
        ValueError: unknown service type
    """
    try:
        return SERVICE_TIERS[ServiceType(service_type)]
    except ValueError:
        raise ValueError(f"Unknown service type: {service_type!r}") from None


def price_for_service(service_type: str) -> Decimal:
    return get_service_tier(service_type).price


def eta_days_for_service(service_type: str) -> int:
    return get_service_tier(service_type).eta_days


def estimated_delivery(now: datetime, service_type: str) -> datetime:
    """
    now + ETA days, counted in calendar days on the local clock.
    No business-day skipping.
    """
    days = eta_days_for_service(service_type)
    if timezone.is_naive(now):
        now = timezone.make_aware(now)
    return timezone.localtime(now) + timedelta(days=days)


def service_catalogue() -> List[dict]:
    """Service tiers in display order (cheapest first)."""
    return [
        {
            'code': tier.code,
            'label': tier.label,
            'price': tier.price,
            'eta_days': tier.eta_days,
            'eta_label': tier.eta_label,
            'description': tier.description,
        }
        for tier in sorted(SERVICE_TIERS.values(), key=lambda t: t.price)
    ]


# ============================================
# STATUS PRESENTATION
# ============================================

def format_status_label(status: str) -> str:
    """'out_for_delivery' -> 'Out For Delivery'"""
    return ' '.join(word[:1].upper() + word[1:] for word in (status or '').split('_'))


def classify_status(status: str) -> StatusStyle:
    """Icon and colour class for any status string; unknown values get the fallback."""
    return STATUS_STYLES.get(ShipmentStatus.parse(status), FALLBACK_STATUS_STYLE)


def shipment_stats(statuses: Iterable[str]) -> Dict[str, int]:
    """Dashboard counters over a customer's shipment statuses."""
    counts = {'total': 0, 'in_transit': 0, 'delivered': 0, 'pending': 0}
    for status in statuses:
        counts['total'] += 1
        parsed = ShipmentStatus.parse(status)
        if parsed == ShipmentStatus.IN_TRANSIT:
            counts['in_transit'] += 1
        elif parsed == ShipmentStatus.DELIVERED:
            counts['delivered'] += 1
        elif parsed == ShipmentStatus.PENDING:
            counts['pending'] += 1
    return counts
