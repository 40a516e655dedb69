# Overview: Payment gateway strategies (deterministic mock and Stripe), chosen once at startup.

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

import stripe

from ..config import IntegrationSettings
from ..models.payments import (
    STATUS_CANCELED,
    STATUS_REQUIRES_PAYMENT_METHOD,
    STATUS_SUCCEEDED,
)
from ..validation import ExternalServiceError

logger = logging.getLogger(__name__)

MOCK_PUBLISHABLE_KEY = "pk_test_mock_key"
MOCK_RECEIPT_URL_TEMPLATE = "https://mock-receipt.stripe.com/{intent_id}"


@dataclass(frozen=True)
class GatewayIntent:
    id: str
    status: str
    client_secret: str | None = None
    receipt_url: str | None = None


def to_minor_units(amount: Decimal) -> int:
    """Gateway amounts are integer cents."""
    return int((amount * 100).to_integral_value())


class PaymentGateway(ABC):
    """Create / retrieve-or-confirm / cancel a remote payment intent."""

    is_mock = False

    @property
    @abstractmethod
    def publishable_key(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def create_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        description: str,
        receipt_email: str | None,
        metadata: dict[str, str],
    ) -> GatewayIntent:
        raise NotImplementedError

    @abstractmethod
    def confirm_intent(self, intent_id: str) -> GatewayIntent:
        raise NotImplementedError

    @abstractmethod
    def cancel_intent(self, intent_id: str) -> GatewayIntent:
        raise NotImplementedError


class MockPaymentGateway(PaymentGateway):
    """No network. Intents are random tokens; confirm always succeeds."""

    is_mock = True

    @property
    def publishable_key(self) -> str:
        return MOCK_PUBLISHABLE_KEY

    def create_intent(self, *, amount, currency, description, receipt_email, metadata) -> GatewayIntent:
        intent_id = f"pi_mock_{uuid.uuid4().hex}"
        return GatewayIntent(
            id=intent_id,
            status=STATUS_REQUIRES_PAYMENT_METHOD,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex}",
        )

    def confirm_intent(self, intent_id: str) -> GatewayIntent:
        return GatewayIntent(
            id=intent_id,
            status=STATUS_SUCCEEDED,
            receipt_url=MOCK_RECEIPT_URL_TEMPLATE.format(intent_id=intent_id),
        )

    def cancel_intent(self, intent_id: str) -> GatewayIntent:
        return GatewayIntent(id=intent_id, status=STATUS_CANCELED)


class StripePaymentGateway(PaymentGateway):
    """
    Stripe PaymentIntents via the official client.

    Confirmation is client-side in Stripe's flow, so confirm_intent only
    retrieves the current state. Any StripeError becomes ExternalServiceError.
    """

    def __init__(self, secret_key: str, publishable_key: str | None = None, timeout: float = 30.0):
        self._client = stripe.StripeClient(
            secret_key,
            http_client=stripe.HTTPXClient(timeout=timeout, allow_sync_methods=True),
        )
        self._publishable_key = publishable_key

        if secret_key.startswith("sk_test_"):
            logger.info("Stripe TEST MODE active - using sandbox environment (no real charges)")
        else:
            logger.warning("Stripe LIVE MODE active - processing REAL transactions")

    @property
    def publishable_key(self) -> str | None:
        return self._publishable_key

    def create_intent(self, *, amount, currency, description, receipt_email, metadata) -> GatewayIntent:
        params = {
            "amount": to_minor_units(amount),
            "currency": currency.lower(),
            "description": description,
            "metadata": metadata,
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        try:
            intent = self._client.payment_intents.create(params=params)
        except stripe.StripeError as exc:
            logger.exception("Stripe error creating payment intent")
            raise ExternalServiceError(f"Payment processing error: {exc.user_message or exc}") from exc
        return GatewayIntent(id=intent.id, status=intent.status, client_secret=intent.client_secret)

    def confirm_intent(self, intent_id: str) -> GatewayIntent:
        try:
            intent = self._client.payment_intents.retrieve(intent_id, params={"expand": ["latest_charge"]})
        except stripe.StripeError as exc:
            logger.exception("Stripe error confirming payment")
            raise ExternalServiceError(f"Payment confirmation error: {exc.user_message or exc}") from exc

        receipt_url = None
        charge = intent.latest_charge
        if charge is not None and not isinstance(charge, str):
            receipt_url = charge.receipt_url
        return GatewayIntent(id=intent.id, status=intent.status, receipt_url=receipt_url)

    def cancel_intent(self, intent_id: str) -> GatewayIntent:
        try:
            intent = self._client.payment_intents.cancel(intent_id)
        except stripe.StripeError as exc:
            logger.exception("Stripe error canceling payment")
            raise ExternalServiceError(f"Payment cancellation error: {exc.user_message or exc}") from exc
        return GatewayIntent(id=intent.id, status=intent.status)


def build_payment_gateway(settings: IntegrationSettings) -> PaymentGateway:
    if not settings.payments_live:
        logger.warning("Stripe secret key not configured. Payment features will use mock mode.")
        return MockPaymentGateway()
    return StripePaymentGateway(
        settings.stripe_secret_key,
        settings.stripe_publishable_key,
        timeout=settings.external_timeout_seconds,
    )
