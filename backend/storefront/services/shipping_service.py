# Overview: Service-layer operations for shipping; rates, shipment lifecycle, and tracking.

"""
Shipping Service

Mock multi-carrier shipping: every carrier is quoted from the same rate
formula and tracking history is synthesized from the shipment's current
status. Carrier API keys are only reported; no carrier is ever called.

LIFECYCLE:
    Created -> LabelGenerated -> PickedUp -> InTransit -> OutForDelivery -> Delivered
    Any non-terminal state -> Failed | Cancelled

- New shipments start at LabelGenerated (label is produced at creation)
- Status only moves forward along the progression
- Delivered, Failed and Cancelled are terminal
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any

from ..config import IntegrationSettings
from ..models import PaymentIntent, Shipment
from ..models.shipping import (
    CARRIERS,
    SHIPMENT_STATUSES,
    SPEEDS,
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_FAILED,
    STATUS_LABEL_GENERATED,
    TERMINAL_STATUSES,
    status_rank,
)
from ..validation import (
    IllegalStateError,
    NotFoundError,
    ValidationError,
    parse_cents,
    parse_decimal,
    parse_optional_int,
    parse_optional_text,
)
from . import shipping_rates
from .repository import Repository
from storefront.time_utils import to_utc_z, utcnow

logger = logging.getLogger(__name__)

MAX_WEIGHT_LBS = Decimal("150")

# Attempts at drawing an unused tracking number before giving up
TRACKING_NUMBER_ATTEMPTS = 5


def _canonical(value: Any, choices: tuple[str, ...], label: str) -> str:
    """Case-insensitive match against a constant tuple; returns the canonical spelling."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        for choice in choices:
            if choice.lower() == lowered:
                return choice
    raise ValidationError(f"Invalid {label}: {value}. Must be one of {list(choices)}")


def normalize_carrier(value: Any) -> str:
    return _canonical(value, CARRIERS, "provider")


def normalize_speed(value: Any) -> str:
    return _canonical(value, SPEEDS, "speed")


def normalize_status(value: Any) -> str:
    return _canonical(value, SHIPMENT_STATUSES, "status")


@dataclass(frozen=True)
class ShippingAddress:
    name: str = ""
    street1: str = ""
    street2: str | None = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "US"
    phone: str | None = None
    email: str | None = None

    @classmethod
    def from_payload(cls, payload: dict | None) -> "ShippingAddress":
        payload = payload or {}
        if not isinstance(payload, dict):
            raise ValidationError("Address must be an object")

        def text(key: str, default: str | None = "") -> str | None:
            value = payload.get(key)
            if value is None:
                return default
            return str(value).strip()

        return cls(
            name=text("name"),
            street1=text("street1"),
            street2=text("street2", None),
            city=text("city"),
            state=text("state"),
            postal_code=text("postalCode"),
            country=text("country") or "US",
            phone=text("phone", None),
            email=text("email", None),
        )

    @property
    def is_complete(self) -> bool:
        return all([self.street1, self.city, self.state, self.postal_code])


@dataclass(frozen=True)
class PackageDimensions:
    length: Decimal
    width: Decimal
    height: Decimal
    weight: Decimal

    @classmethod
    def from_payload(cls, payload: dict | None) -> "PackageDimensions":
        payload = payload or {}
        if not isinstance(payload, dict):
            raise ValidationError("dimensions must be an object")
        # Stored as Numeric(10, 2); validation must see the stored value
        return cls(
            length=parse_cents(payload.get("length", 0), "length"),
            width=parse_cents(payload.get("width", 0), "width"),
            height=parse_cents(payload.get("height", 0), "height"),
            weight=parse_cents(payload.get("weight", 0), "weight"),
        )


def validate_addresses(from_address: ShippingAddress, to_address: ShippingAddress) -> None:
    if not from_address.is_complete:
        raise ValidationError("From address is incomplete")
    if not to_address.is_complete:
        raise ValidationError("To address is incomplete")


def validate_dimensions(dimensions: PackageDimensions) -> None:
    if min(dimensions.length, dimensions.width, dimensions.height, dimensions.weight) <= 0:
        raise ValidationError("Package dimensions must be greater than zero")
    if dimensions.weight > MAX_WEIGHT_LBS:
        raise ValidationError("Package weight cannot exceed 150 pounds")


def validate_weight(weight: Decimal) -> None:
    if weight <= 0:
        raise ValidationError("weight must be greater than zero")
    if weight > MAX_WEIGHT_LBS:
        raise ValidationError("Package weight cannot exceed 150 pounds")


class ShippingService:
    """Rates, shipment creation/cancellation, status progression, and tracking."""

    def __init__(
        self,
        settings: IntegrationSettings,
        *,
        shipments: Repository[Shipment] | None = None,
        payments: Repository[PaymentIntent] | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.shipments = shipments or Repository(Shipment)
        self.payments = payments or Repository(PaymentIntent)
        self.rng = rng or random.Random()

        if not settings.carriers_configured:
            logger.warning("No shipping provider API keys configured. Using mock mode.")

    # =========================================================================
    # RATES
    # =========================================================================

    def get_shipping_rates(
        self,
        from_address: ShippingAddress,
        to_address: ShippingAddress,
        dimensions: PackageDimensions,
    ) -> list[shipping_rates.ShippingRate]:
        """
        Quote every carrier x speed combination (16 rates), cheapest first.

        Raises:
            ValidationError: incomplete address or invalid dimensions
        """
        validate_addresses(from_address, to_address)
        validate_dimensions(dimensions)

        now = utcnow()
        rates = []
        for carrier in CARRIERS:
            for speed in SPEEDS:
                days = shipping_rates.estimated_days(speed)
                rates.append(
                    shipping_rates.ShippingRate(
                        provider=carrier,
                        speed=speed,
                        cost=shipping_rates.calculate_shipping_cost(carrier, speed, dimensions.weight),
                        currency=shipping_rates.CURRENCY,
                        estimated_days=days,
                        estimated_delivery=now + timedelta(days=days),
                        service_name=f"{carrier} {speed}",
                    )
                )

        # sorted() is stable, so equal costs keep carrier/speed declaration order
        return sorted(rates, key=lambda r: r.cost)

    def calculate_shipping_cost(self, carrier: Any, speed: Any, weight: Any) -> Decimal:
        """Standalone quote; unknown carrier/speed or a weight outside (0, 150] is a ValidationError."""
        carrier = normalize_carrier(carrier)
        speed = normalize_speed(speed)
        weight = parse_decimal(weight, "weight")
        validate_weight(weight)
        return shipping_rates.calculate_shipping_cost(carrier, speed, weight)

    # =========================================================================
    # SHIPMENT LIFECYCLE
    # =========================================================================

    def create_shipment(
        self,
        *,
        carrier: Any,
        speed: Any,
        from_address: ShippingAddress,
        to_address: ShippingAddress,
        dimensions: PackageDimensions,
        payment_intent_id: int | None = None,
        order_id: int | None = None,
        notes: str | None = None,
    ) -> dict:
        """
        Create a labelled shipment.

        Nothing is written unless every check passes.

        Returns:
            ShipmentResponse dict (shipmentId, trackingNumber, provider, status,
            shippingCost, labelUrl, estimatedDelivery)

        Raises:
            ValidationError: bad carrier/speed, address, or dimensions
            NotFoundError: payment_intent_id does not exist
        """
        carrier = normalize_carrier(carrier)
        speed = normalize_speed(speed)
        validate_addresses(from_address, to_address)
        validate_dimensions(dimensions)
        payment_intent_id = parse_optional_int(payment_intent_id, "paymentIntentId")
        order_id = parse_optional_int(order_id, "orderId")
        notes = parse_optional_text(notes, "notes")

        if payment_intent_id is not None and self.payments.get(payment_intent_id) is None:
            raise NotFoundError(f"Payment intent {payment_intent_id} not found")

        cost = shipping_rates.calculate_shipping_cost(carrier, speed, dimensions.weight)
        now = utcnow()
        tracking_number = self._unused_tracking_number(carrier)

        shipment = Shipment(
            tracking_number=tracking_number,
            provider=carrier,
            speed=speed,
            status=STATUS_LABEL_GENERATED,
            order_id=order_id,
            payment_intent_id=payment_intent_id,
            from_name=from_address.name,
            from_street1=from_address.street1,
            from_street2=from_address.street2,
            from_city=from_address.city,
            from_state=from_address.state,
            from_postal_code=from_address.postal_code,
            from_country=from_address.country,
            to_name=to_address.name,
            to_street1=to_address.street1,
            to_street2=to_address.street2,
            to_city=to_address.city,
            to_state=to_address.state,
            to_postal_code=to_address.postal_code,
            to_country=to_address.country,
            to_phone=to_address.phone,
            to_email=to_address.email,
            length=dimensions.length,
            width=dimensions.width,
            height=dimensions.height,
            weight=dimensions.weight,
            shipping_cost=cost,
            currency=shipping_rates.CURRENCY,
            label_url=shipping_rates.label_url(tracking_number),
            created_at=now,
            estimated_delivery=now + timedelta(days=shipping_rates.estimated_days(speed)),
            notes=notes,
        )

        self.shipments.add(shipment)
        self.shipments.commit()

        logger.info("Shipment created: %s via %s", tracking_number, carrier)

        return {
            "shipmentId": shipment.id,
            "trackingNumber": shipment.tracking_number,
            "provider": shipment.provider,
            "status": shipment.status,
            "shippingCost": float(cost),
            "labelUrl": shipment.label_url,
            "estimatedDelivery": to_utc_z(shipment.estimated_delivery),
        }

    def _unused_tracking_number(self, carrier: str) -> str:
        for _ in range(TRACKING_NUMBER_ATTEMPTS):
            candidate = shipping_rates.generate_tracking_number(carrier, self.rng)
            if not self.shipments.exists(tracking_number=candidate):
                return candidate
        raise IllegalStateError("Could not allocate a unique tracking number")

    def get_shipment(self, shipment_id: int) -> Shipment | None:
        return self.shipments.get(shipment_id)

    def get_shipment_by_tracking(self, tracking_number: str) -> Shipment | None:
        return self.shipments.get_by(tracking_number=tracking_number)

    def _require_shipment(self, shipment_id: int) -> Shipment:
        shipment = self.get_shipment(shipment_id)
        if shipment is None:
            raise NotFoundError(f"Shipment {shipment_id} not found")
        return shipment

    def cancel_shipment(self, shipment_id: int) -> Shipment:
        """
        Raises:
            NotFoundError: unknown shipment
            IllegalStateError: already delivered or already cancelled
        """
        shipment = self._require_shipment(shipment_id)

        if shipment.status == STATUS_DELIVERED:
            raise IllegalStateError("Cannot cancel a delivered shipment")
        if shipment.status == STATUS_CANCELLED:
            raise IllegalStateError("Shipment is already cancelled")
        if shipment.status == STATUS_FAILED:
            raise IllegalStateError("Cannot cancel a failed shipment")

        self.shipments.update(shipment, status=STATUS_CANCELLED)
        self.shipments.commit()

        logger.info("Shipment cancelled: %s", shipment.tracking_number)
        return shipment

    def update_shipment_status(self, shipment_id: int, status: Any) -> Shipment:
        """
        Move a shipment along the progression (or to Failed/Cancelled).

        Raises:
            NotFoundError: unknown shipment
            ValidationError: unknown status name
            IllegalStateError: terminal current status or a non-forward move
        """
        target = normalize_status(status)
        shipment = self._require_shipment(shipment_id)

        if shipment.status in TERMINAL_STATUSES:
            raise IllegalStateError(f"Shipment is already {shipment.status}")

        if target == STATUS_CANCELLED:
            return self.cancel_shipment(shipment_id)

        if target != STATUS_FAILED:
            current_rank = status_rank(shipment.status)
            if status_rank(target) <= current_rank:
                raise IllegalStateError(f"Cannot move shipment from {shipment.status} to {target}")

        changes = {"status": target}
        if target == STATUS_DELIVERED:
            changes["actual_delivery"] = utcnow()

        self.shipments.update(shipment, **changes)
        self.shipments.commit()

        logger.info("Shipment %s moved to %s", shipment.tracking_number, target)
        return shipment

    # =========================================================================
    # TRACKING / HISTORY
    # =========================================================================

    def get_tracking_updates(self, tracking_number: str) -> list[shipping_rates.TrackingUpdate]:
        """
        Raises:
            NotFoundError: unknown tracking number
        """
        shipment = self.get_shipment_by_tracking(tracking_number)
        if shipment is None:
            raise NotFoundError(f"Shipment with tracking number {tracking_number} not found")
        return shipping_rates.build_tracking_updates(shipment)

    def get_shipment_history(self, customer_email: str | None = None) -> list[Shipment]:
        criteria = {"to_email": customer_email} if customer_email else {}
        return self.shipments.list(
            order_by=(Shipment.created_at.desc(), Shipment.id.desc()),
            **criteria,
        )
