from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow
from .catalog import money


# =============================================================================
# CARRIERS / SPEEDS / STATUSES (CONSTANTS)
# =============================================================================

CARRIER_FEDEX = "FedEx"
CARRIER_UPS = "UPS"
CARRIER_USPS = "USPS"
CARRIER_DHL = "DHL"

# Declaration order drives the tie-break when rates cost the same
CARRIERS = (CARRIER_FEDEX, CARRIER_UPS, CARRIER_USPS, CARRIER_DHL)

SPEED_STANDARD = "Standard"
SPEED_EXPRESS = "Express"
SPEED_OVERNIGHT = "Overnight"
SPEED_TWO_DAY = "TwoDay"

SPEEDS = (SPEED_STANDARD, SPEED_EXPRESS, SPEED_OVERNIGHT, SPEED_TWO_DAY)

STATUS_CREATED = "Created"
STATUS_LABEL_GENERATED = "LabelGenerated"
STATUS_PICKED_UP = "PickedUp"
STATUS_IN_TRANSIT = "InTransit"
STATUS_OUT_FOR_DELIVERY = "OutForDelivery"
STATUS_DELIVERED = "Delivered"
STATUS_FAILED = "Failed"
STATUS_CANCELLED = "Cancelled"

# Linear progression only; Failed/Cancelled are side exits and have no rank.
STATUS_PROGRESSION = (
    STATUS_CREATED,
    STATUS_LABEL_GENERATED,
    STATUS_PICKED_UP,
    STATUS_IN_TRANSIT,
    STATUS_OUT_FOR_DELIVERY,
    STATUS_DELIVERED,
)

SHIPMENT_STATUSES = STATUS_PROGRESSION + (STATUS_FAILED, STATUS_CANCELLED)

TERMINAL_STATUSES = {STATUS_DELIVERED, STATUS_FAILED, STATUS_CANCELLED}


def status_rank(status: str) -> int | None:
    """Position in the linear progression, or None for Failed/Cancelled/unknown."""
    try:
        return STATUS_PROGRESSION.index(status)
    except ValueError:
        return None


class Shipment(db.Model):
    """
    A labelled package moving through the carrier progression.

    shipping_cost is fixed at creation from the rate formula. Address and
    package columns are flattened so history queries never need joins.
    """
    __tablename__ = "shipments"
    __table_args__ = (
        db.Index("ix_shipments_to_email_created", "to_email", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tracking_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    provider = db.Column(db.String(16), nullable=False)
    speed = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(32), nullable=False, default=STATUS_CREATED, index=True)

    order_id = db.Column(db.Integer, nullable=True)
    payment_intent_id = db.Column(db.Integer, db.ForeignKey("payment_intents.id"), nullable=True, index=True)

    from_name = db.Column(db.String(255), nullable=False, default="")
    from_street1 = db.Column(db.String(255), nullable=False)
    from_street2 = db.Column(db.String(255), nullable=True)
    from_city = db.Column(db.String(128), nullable=False)
    from_state = db.Column(db.String(64), nullable=False)
    from_postal_code = db.Column(db.String(32), nullable=False)
    from_country = db.Column(db.String(8), nullable=False, default="US")

    to_name = db.Column(db.String(255), nullable=False, default="")
    to_street1 = db.Column(db.String(255), nullable=False)
    to_street2 = db.Column(db.String(255), nullable=True)
    to_city = db.Column(db.String(128), nullable=False)
    to_state = db.Column(db.String(64), nullable=False)
    to_postal_code = db.Column(db.String(32), nullable=False)
    to_country = db.Column(db.String(8), nullable=False, default="US")
    to_phone = db.Column(db.String(64), nullable=True)
    to_email = db.Column(db.String(255), nullable=True)

    # Inches / pounds
    length = db.Column(db.Numeric(10, 2), nullable=False)
    width = db.Column(db.Numeric(10, 2), nullable=False)
    height = db.Column(db.Numeric(10, 2), nullable=False)
    weight = db.Column(db.Numeric(10, 2), nullable=False)

    shipping_cost = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(8), nullable=False, default="USD")

    label_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    estimated_delivery = db.Column(db.DateTime(timezone=True), nullable=True)
    actual_delivery = db.Column(db.DateTime(timezone=True), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    payment_intent = db.relationship("PaymentIntent", backref=db.backref("shipments", lazy=True))

    def __repr__(self) -> str:
        return f"<Shipment id={self.id} tracking={self.tracking_number!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "trackingNumber": self.tracking_number,
            "provider": self.provider,
            "speed": self.speed,
            "status": self.status,
            "orderId": self.order_id,
            "paymentIntentId": self.payment_intent_id,
            "fromName": self.from_name,
            "fromStreet1": self.from_street1,
            "fromStreet2": self.from_street2,
            "fromCity": self.from_city,
            "fromState": self.from_state,
            "fromPostalCode": self.from_postal_code,
            "fromCountry": self.from_country,
            "toName": self.to_name,
            "toStreet1": self.to_street1,
            "toStreet2": self.to_street2,
            "toCity": self.to_city,
            "toState": self.to_state,
            "toPostalCode": self.to_postal_code,
            "toCountry": self.to_country,
            "toPhone": self.to_phone,
            "toEmail": self.to_email,
            "length": money(self.length),
            "width": money(self.width),
            "height": money(self.height),
            "weight": money(self.weight),
            "shippingCost": money(self.shipping_cost),
            "currency": self.currency,
            "labelUrl": self.label_url,
            "createdAt": to_utc_z(self.created_at),
            "estimatedDelivery": to_utc_z(self.estimated_delivery),
            "actualDelivery": to_utc_z(self.actual_delivery),
            "notes": self.notes,
        }
