# Overview: Pure shipping formulas: rate calculator, tracking numbers, labels, and synthetic tracking history.

"""
Shipping Formulas

Everything here is a deterministic function of its inputs (tracking numbers
take an injectable random source). No database access; the shipping service
composes these.

RATE FORMULA:
    cost = round((base_rate[carrier] + weight * 2.50) * speed_multiplier[speed], 2)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_EVEN

from ..models.shipping import (
    CARRIER_DHL,
    CARRIER_FEDEX,
    CARRIER_UPS,
    CARRIER_USPS,
    SPEED_EXPRESS,
    SPEED_OVERNIGHT,
    SPEED_STANDARD,
    SPEED_TWO_DAY,
    STATUS_DELIVERED,
    STATUS_IN_TRANSIT,
    STATUS_LABEL_GENERATED,
    STATUS_OUT_FOR_DELIVERY,
    STATUS_PICKED_UP,
    status_rank,
)
from storefront.time_utils import to_utc_z


BASE_RATES = {
    CARRIER_USPS: Decimal("5.00"),
    CARRIER_FEDEX: Decimal("7.50"),
    CARRIER_UPS: Decimal("7.00"),
    CARRIER_DHL: Decimal("8.00"),
}

SPEED_MULTIPLIERS = {
    SPEED_STANDARD: Decimal("1.0"),
    SPEED_EXPRESS: Decimal("1.5"),
    SPEED_TWO_DAY: Decimal("2.0"),
    SPEED_OVERNIGHT: Decimal("3.0"),
}

RATE_PER_POUND = Decimal("2.50")

ESTIMATED_DAYS = {
    SPEED_OVERNIGHT: 1,
    SPEED_TWO_DAY: 2,
    SPEED_EXPRESS: 3,
    SPEED_STANDARD: 6,
}
DEFAULT_ESTIMATED_DAYS = 6

TRACKING_PREFIXES = {
    CARRIER_FEDEX: "FX",
    CARRIER_UPS: "1Z",
    CARRIER_USPS: "94",
    CARRIER_DHL: "DH",
}
UNKNOWN_TRACKING_PREFIX = "XX"

LABEL_URL_TEMPLATE = "https://shipping-labels.example.com/{tracking_number}.pdf"

CURRENCY = "USD"


@dataclass(frozen=True)
class ShippingRate:
    provider: str
    speed: str
    cost: Decimal
    currency: str
    estimated_days: int
    estimated_delivery: datetime
    service_name: str

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "speed": self.speed,
            "cost": float(self.cost),
            "currency": self.currency,
            "estimatedDays": self.estimated_days,
            "estimatedDelivery": to_utc_z(self.estimated_delivery),
            "serviceName": self.service_name,
        }


@dataclass(frozen=True)
class TrackingUpdate:
    tracking_number: str
    status: str
    location: str
    timestamp: datetime
    description: str

    def to_dict(self) -> dict:
        return {
            "trackingNumber": self.tracking_number,
            "status": self.status,
            "location": self.location,
            "timestamp": to_utc_z(self.timestamp),
            "description": self.description,
        }


def calculate_shipping_cost(carrier: str, speed: str, weight: Decimal) -> Decimal:
    """
    Rate calculator.

    Raises:
        KeyError: unknown carrier or speed (callers translate to ValidationError)
    """
    base_rate = BASE_RATES[carrier]
    multiplier = SPEED_MULTIPLIERS[speed]
    cost = (base_rate + Decimal(str(weight)) * RATE_PER_POUND) * multiplier
    return cost.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)


def estimated_days(speed: str) -> int:
    return ESTIMATED_DAYS.get(speed, DEFAULT_ESTIMATED_DAYS)


def generate_tracking_number(carrier: str, rng: random.Random | None = None) -> str:
    """Carrier prefix + 9 zero-padded digits drawn from [100000000, 999999999)."""
    rng = rng or random
    prefix = TRACKING_PREFIXES.get(carrier, UNKNOWN_TRACKING_PREFIX)
    number = rng.randrange(100_000_000, 999_999_999)
    return f"{prefix}{number:09d}"


def label_url(tracking_number: str) -> str:
    return LABEL_URL_TEMPLATE.format(tracking_number=tracking_number)


def build_tracking_updates(shipment) -> list[TrackingUpdate]:
    """
    Synthesize tracking history from the shipment's *current* status.

    Uses the rank in the linear progression, so Cancelled/Failed shipments
    report only the label event instead of ranking past Delivered.
    """
    tracking = shipment.tracking_number
    origin = f"{shipment.from_city}, {shipment.from_state}"
    destination = f"{shipment.to_city}, {shipment.to_state}"
    rank = status_rank(shipment.status)

    moment = shipment.created_at
    updates = [
        TrackingUpdate(tracking, STATUS_LABEL_GENERATED, origin, moment, "Shipping label created"),
    ]

    if rank is None:
        return updates

    if rank >= status_rank(STATUS_PICKED_UP):
        moment = moment + timedelta(hours=4)
        updates.append(TrackingUpdate(tracking, STATUS_PICKED_UP, origin, moment, "Package picked up"))

    if rank >= status_rank(STATUS_IN_TRANSIT):
        moment = moment + timedelta(days=1)
        updates.append(
            TrackingUpdate(tracking, STATUS_IN_TRANSIT, "Distribution Center", moment, "In transit to destination")
        )

    if rank >= status_rank(STATUS_OUT_FOR_DELIVERY):
        moment = moment + timedelta(days=1)
        updates.append(TrackingUpdate(tracking, STATUS_OUT_FOR_DELIVERY, destination, moment, "Out for delivery"))

    if shipment.status == STATUS_DELIVERED:
        moment = moment + timedelta(hours=6)
        updates.append(
            TrackingUpdate(
                tracking,
                STATUS_DELIVERED,
                f"{shipment.to_street1}, {destination}",
                moment,
                "Delivered",
            )
        )

    return updates
