from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow
from .catalog import money

# Intent statuses mirror the gateway's vocabulary
STATUS_PENDING = "pending"
STATUS_REQUIRES_PAYMENT_METHOD = "requires_payment_method"
STATUS_SUCCEEDED = "succeeded"
STATUS_CANCELED = "canceled"
STATUS_FAILED = "failed"

TERMINAL_STATUSES = {STATUS_SUCCEEDED, STATUS_CANCELED, STATUS_FAILED}


class PaymentIntent(db.Model):
    """
    Local mirror of a gateway payment intent.

    amount is product.price * quantity at creation and is never rewritten.
    Once status reaches succeeded/canceled/failed it stays there.
    """
    __tablename__ = "payment_intents"
    __table_args__ = (
        db.Index("ix_payment_intents_email_created", "customer_email", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    stripe_payment_intent_id = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Nulled when the product is deleted; payment history outlives catalog entries
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(8), nullable=False, default="usd")
    status = db.Column(db.String(32), nullable=False, default=STATUS_PENDING, index=True)

    customer_email = db.Column(db.String(255), nullable=True)
    customer_name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    failure_reason = db.Column(db.String(255), nullable=True)

    product = db.relationship("Product", backref=db.backref("payment_intents", lazy=True))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self) -> str:
        return f"<PaymentIntent id={self.id} ext={self.stripe_payment_intent_id!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stripePaymentIntentId": self.stripe_payment_intent_id,
            "productId": self.product_id,
            "product": self.product.to_dict() if self.product else None,
            "amount": money(self.amount),
            "currency": self.currency,
            "status": self.status,
            "customerEmail": self.customer_email,
            "customerName": self.customer_name,
            "createdAt": to_utc_z(self.created_at),
            "completedAt": to_utc_z(self.completed_at),
            "failureReason": self.failure_reason,
        }
