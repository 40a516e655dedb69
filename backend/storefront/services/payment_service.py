# Overview: Service-layer operations for payment intents; encapsulates business logic and database work.

"""
Payment Intent Service

WHY: Let a customer pay for N units of a catalog product through a
gateway payment intent, with a deterministic mock when no gateway
credential is configured.

DESIGN PRINCIPLES:
- amount = product.price * quantity, fixed when the intent is created
- Local record mirrors the gateway id and status
- Status is one-directional: pending/requires_payment_method -> succeeded | canceled | failed
- Repeating the transition already reached is a no-op; leaving a terminal status is refused
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from ..models import PaymentIntent, Product
from ..models.payments import (
    STATUS_CANCELED,
    STATUS_SUCCEEDED,
)
from ..validation import IllegalStateError, NotFoundError, parse_optional_text, parse_positive_int
from .payment_gateways import PaymentGateway
from .repository import Repository
from storefront.time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "usd"


class PaymentService:
    def __init__(
        self,
        gateway: PaymentGateway,
        *,
        products: Repository[Product] | None = None,
        payments: Repository[PaymentIntent] | None = None,
    ):
        self.gateway = gateway
        self.products = products or Repository(Product)
        self.payments = payments or Repository(PaymentIntent)

    # =========================================================================
    # AMOUNTS
    # =========================================================================

    def calculate_total_amount(self, product_id: int, quantity: Any) -> Decimal:
        """
        Raises:
            NotFoundError: product does not exist
            ValidationError: quantity is not a positive integer
        """
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        quantity = parse_positive_int(quantity, "quantity")
        return Decimal(product.price) * quantity

    # =========================================================================
    # INTENT LIFECYCLE
    # =========================================================================

    def create_payment_intent(
        self,
        *,
        product_id: int,
        quantity: Any = 1,
        customer_email: str | None = None,
        customer_name: str | None = None,
        currency: str | None = None,
    ) -> dict:
        """
        Create a gateway intent and its local mirror.

        Returns:
            PaymentResponse dict (paymentIntentId, clientSecret, amount,
            currency, status, publishableKey)

        Raises:
            NotFoundError: product does not exist
            ValidationError: quantity <= 0, or a non-string email, name or currency
            ExternalServiceError: gateway failure
        """
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")

        quantity = parse_positive_int(quantity, "quantity")
        customer_email = parse_optional_text(customer_email, "customerEmail")
        customer_name = parse_optional_text(customer_name, "customerName")
        currency = (parse_optional_text(currency, "currency") or DEFAULT_CURRENCY).strip().lower()
        total = self.calculate_total_amount(product_id, quantity)

        remote = self.gateway.create_intent(
            amount=total,
            currency=currency,
            description=f"Purchase of {product.name} (x{quantity})",
            receipt_email=customer_email,
            metadata={
                "product_id": str(product.id),
                "product_name": product.name,
                "quantity": str(quantity),
            },
        )

        intent = PaymentIntent(
            stripe_payment_intent_id=remote.id,
            product_id=product.id,
            amount=total,
            currency=currency,
            status=remote.status,
            customer_email=customer_email,
            customer_name=customer_name,
            created_at=utcnow(),
        )
        self.payments.add(intent)
        self.payments.commit()

        logger.info(
            "%s payment intent created: %s for product %s",
            "Mock" if self.gateway.is_mock else "Stripe",
            remote.id,
            product.id,
        )

        return {
            "paymentIntentId": remote.id,
            "clientSecret": remote.client_secret,
            "amount": float(total),
            "currency": currency,
            "status": remote.status,
            "publishableKey": self.gateway.publishable_key,
        }

    def _require_intent(self, intent_id: str) -> PaymentIntent:
        intent = self.payments.get_by(stripe_payment_intent_id=intent_id)
        if intent is None:
            raise NotFoundError(f"Payment intent {intent_id} not found")
        return intent

    @staticmethod
    def _confirmation(intent: PaymentIntent, receipt_url: str | None = None) -> dict:
        return {
            "paymentIntentId": intent.stripe_payment_intent_id,
            "status": intent.status,
            "amount": float(intent.amount),
            "receiptUrl": receipt_url,
        }

    def confirm_payment(self, intent_id: str) -> dict:
        """
        Raises:
            NotFoundError: unknown intent
            IllegalStateError: intent already canceled or failed
            ExternalServiceError: gateway failure
        """
        intent = self._require_intent(intent_id)

        if intent.status == STATUS_SUCCEEDED:
            return self._confirmation(intent)
        if intent.is_terminal:
            raise IllegalStateError(f"Cannot confirm a payment that is {intent.status}")

        remote = self.gateway.confirm_intent(intent_id)

        changes = {"status": remote.status}
        if remote.status == STATUS_SUCCEEDED:
            changes["completed_at"] = utcnow()
        self.payments.update(intent, **changes)
        self.payments.commit()

        logger.info("Payment confirmed: %s with status %s", intent_id, remote.status)
        return self._confirmation(intent, remote.receipt_url)

    def cancel_payment(self, intent_id: str) -> dict:
        """
        Raises:
            NotFoundError: unknown intent
            IllegalStateError: intent already succeeded or failed
            ExternalServiceError: gateway failure
        """
        intent = self._require_intent(intent_id)

        if intent.status == STATUS_CANCELED:
            return self._confirmation(intent)
        if intent.is_terminal:
            raise IllegalStateError(f"Cannot cancel a payment that is {intent.status}")

        remote = self.gateway.cancel_intent(intent_id)

        self.payments.update(intent, status=remote.status)
        self.payments.commit()

        logger.info("Payment canceled: %s", intent_id)
        return self._confirmation(intent)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_payment_status(self, intent_id: str) -> PaymentIntent | None:
        return self.payments.get_by(stripe_payment_intent_id=intent_id)

    def get_payment_history(self, customer_email: str | None = None) -> list[PaymentIntent]:
        criteria = {"customer_email": customer_email} if customer_email else {}
        return self.payments.list(
            order_by=(PaymentIntent.created_at.desc(), PaymentIntent.id.desc()),
            **criteria,
        )
