"""
Payment service tests: amounts, intent lifecycle in mock mode, a stubbed
gateway for non-mock statuses, and Stripe error mapping.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from storefront.models import PaymentIntent
from storefront.services.payment_gateways import (
    GatewayIntent,
    MockPaymentGateway,
    PaymentGateway,
    StripePaymentGateway,
    to_minor_units,
)
from storefront.services.payment_service import PaymentService
from storefront.validation import (
    ExternalServiceError,
    IllegalStateError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def payments(db_session):
    return PaymentService(MockPaymentGateway())


class StubGateway(PaymentGateway):
    """Records calls; confirm returns whatever status the test sets."""

    def __init__(self, confirm_status="processing"):
        self.confirm_status = confirm_status
        self.created = []

    @property
    def publishable_key(self):
        return "pk_test_stub"

    def create_intent(self, *, amount, currency, description, receipt_email, metadata):
        self.created.append({"amount": amount, "currency": currency, "metadata": metadata})
        return GatewayIntent(id=f"pi_stub_{len(self.created)}", status="requires_payment_method", client_secret="cs")

    def confirm_intent(self, intent_id):
        return GatewayIntent(id=intent_id, status=self.confirm_status, receipt_url="https://receipts.example/r1")

    def cancel_intent(self, intent_id):
        return GatewayIntent(id=intent_id, status="canceled")


# =============================================================================
# AMOUNTS
# =============================================================================


class TestAmounts:

    def test_total_is_price_times_quantity(self, payments, product):
        assert payments.calculate_total_amount(product.id, 2) == Decimal("59.98")

    @pytest.mark.parametrize("quantity", [0, -1, "0"])
    def test_non_positive_quantity(self, payments, product, quantity):
        with pytest.raises(ValidationError, match="Quantity must be greater than 0"):
            payments.calculate_total_amount(product.id, quantity)

    def test_unknown_product(self, payments):
        with pytest.raises(NotFoundError):
            payments.calculate_total_amount(999999, 1)

    def test_minor_units(self):
        assert to_minor_units(Decimal("59.98")) == 5998
        assert to_minor_units(Decimal("0.10")) == 10


# =============================================================================
# MOCK LIFECYCLE
# =============================================================================


class TestMockLifecycle:

    def test_create(self, payments, product, db_session):
        result = payments.create_payment_intent(
            product_id=product.id,
            quantity=2,
            customer_email="ada@example.com",
            customer_name="Ada",
            currency="USD",
        )

        assert result["paymentIntentId"].startswith("pi_mock_")
        assert result["clientSecret"].startswith(result["paymentIntentId"] + "_secret_")
        assert result["amount"] == 59.98
        assert result["currency"] == "usd"
        assert result["status"] == "requires_payment_method"
        assert result["publishableKey"] == "pk_test_mock_key"

        stored = db_session.query(PaymentIntent).filter_by(stripe_payment_intent_id=result["paymentIntentId"]).one()
        assert stored.amount == Decimal("59.98")
        assert stored.product_id == product.id
        assert stored.customer_name == "Ada"

    def test_default_currency(self, payments, product):
        result = payments.create_payment_intent(product_id=product.id, customer_email="a@example.com")
        assert result["currency"] == "usd"

    def test_create_for_missing_product_writes_nothing(self, payments, db_session):
        with pytest.raises(NotFoundError):
            payments.create_payment_intent(product_id=999999, customer_email="a@example.com")
        assert db_session.query(PaymentIntent).count() == 0

    def test_create_with_zero_quantity(self, payments, product):
        with pytest.raises(ValidationError):
            payments.create_payment_intent(product_id=product.id, quantity=0)

    def test_confirm(self, payments, product):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]

        result = payments.confirm_payment(intent_id)

        assert result["status"] == "succeeded"
        assert result["amount"] == 29.99
        assert result["receiptUrl"] == f"https://mock-receipt.stripe.com/{intent_id}"
        assert payments.get_payment_status(intent_id).completed_at is not None

    def test_confirm_twice_is_a_no_op(self, payments, product):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]
        payments.confirm_payment(intent_id)
        completed_at = payments.get_payment_status(intent_id).completed_at

        result = payments.confirm_payment(intent_id)

        assert result["status"] == "succeeded"
        assert payments.get_payment_status(intent_id).completed_at == completed_at

    def test_confirm_unknown(self, payments):
        with pytest.raises(NotFoundError):
            payments.confirm_payment("pi_mock_missing")

    def test_cancel(self, payments, product):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]
        assert payments.cancel_payment(intent_id)["status"] == "canceled"
        assert payments.cancel_payment(intent_id)["status"] == "canceled"

    def test_cannot_cancel_succeeded(self, payments, product):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]
        payments.confirm_payment(intent_id)
        with pytest.raises(IllegalStateError):
            payments.cancel_payment(intent_id)

    def test_cannot_confirm_canceled(self, payments, product):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]
        payments.cancel_payment(intent_id)
        with pytest.raises(IllegalStateError):
            payments.confirm_payment(intent_id)

    def test_history_newest_first_and_filtered(self, payments, product):
        first = payments.create_payment_intent(product_id=product.id, customer_email="a@example.com")
        second = payments.create_payment_intent(product_id=product.id, customer_email="a@example.com")
        payments.create_payment_intent(product_id=product.id, customer_email="b@example.com")

        history = payments.get_payment_history("a@example.com")

        assert [p.stripe_payment_intent_id for p in history] == [
            second["paymentIntentId"],
            first["paymentIntentId"],
        ]
        assert len(payments.get_payment_history()) == 3

    def test_deleting_product_keeps_payment_history(self, payments, product, db_session):
        intent_id = payments.create_payment_intent(product_id=product.id)["paymentIntentId"]
        db_session.delete(product)
        db_session.commit()

        intent = payments.get_payment_status(intent_id)
        assert intent is not None
        assert intent.product_id is None
        assert intent.to_dict()["product"] is None


# =============================================================================
# NON-MOCK GATEWAYS
# =============================================================================


class TestGatewayDelegation:

    def test_create_passes_amount_and_metadata(self, product):
        gateway = StubGateway()
        service = PaymentService(gateway)

        result = service.create_payment_intent(product_id=product.id, quantity=3, currency="EUR")

        call = gateway.created[0]
        assert call["amount"] == Decimal("89.97")
        assert call["currency"] == "eur"
        assert call["metadata"] == {"product_id": str(product.id), "product_name": "Desk Lamp", "quantity": "3"}
        assert result["publishableKey"] == "pk_test_stub"

    def test_confirm_mirrors_non_terminal_status(self, product):
        service = PaymentService(StubGateway(confirm_status="processing"))
        intent_id = service.create_payment_intent(product_id=product.id)["paymentIntentId"]

        result = service.confirm_payment(intent_id)

        assert result["status"] == "processing"
        assert result["receiptUrl"] == "https://receipts.example/r1"
        assert service.get_payment_status(intent_id).completed_at is None

    def test_confirm_failed_is_terminal(self, product):
        service = PaymentService(StubGateway(confirm_status="failed"))
        intent_id = service.create_payment_intent(product_id=product.id)["paymentIntentId"]
        service.confirm_payment(intent_id)

        with pytest.raises(IllegalStateError):
            service.cancel_payment(intent_id)


class FakeIntents:
    def __init__(self, error=None, intent=None):
        self.error = error
        self.intent = intent

    def create(self, params=None):
        if self.error:
            raise self.error
        return self.intent

    def retrieve(self, intent_id, params=None):
        if self.error:
            raise self.error
        return self.intent

    def cancel(self, intent_id, params=None):
        if self.error:
            raise self.error
        return self.intent


def _stripe_gateway(intents):
    gateway = StripePaymentGateway("sk_test_dummy", "pk_test_dummy", timeout=5)
    gateway._client = SimpleNamespace(payment_intents=intents)
    return gateway


class TestStripeGateway:

    def test_create_sends_minor_units(self):
        captured = {}

        class Recording(FakeIntents):
            def create(self, params=None):
                captured.update(params)
                return SimpleNamespace(id="pi_123", status="requires_payment_method", client_secret="pi_123_secret")

        gateway = _stripe_gateway(Recording())
        intent = gateway.create_intent(
            amount=Decimal("59.98"),
            currency="USD",
            description="Purchase of Desk Lamp (x2)",
            receipt_email="ada@example.com",
            metadata={"quantity": "2"},
        )

        assert intent.id == "pi_123"
        assert captured["amount"] == 5998
        assert captured["currency"] == "usd"
        assert captured["receipt_email"] == "ada@example.com"

    def test_confirm_reads_expanded_receipt(self):
        charge = SimpleNamespace(receipt_url="https://pay.stripe.com/receipts/abc")
        gateway = _stripe_gateway(
            FakeIntents(intent=SimpleNamespace(id="pi_1", status="succeeded", latest_charge=charge))
        )
        result = gateway.confirm_intent("pi_1")
        assert result.status == "succeeded"
        assert result.receipt_url == "https://pay.stripe.com/receipts/abc"

    def test_confirm_without_expanded_charge(self):
        gateway = _stripe_gateway(
            FakeIntents(intent=SimpleNamespace(id="pi_1", status="processing", latest_charge="ch_1"))
        )
        assert gateway.confirm_intent("pi_1").receipt_url is None

    @pytest.mark.parametrize("method", ["create", "confirm", "cancel"])
    def test_stripe_errors_become_external_service_errors(self, method):
        gateway = _stripe_gateway(FakeIntents(error=stripe.StripeError("card declined")))

        with pytest.raises(ExternalServiceError):
            if method == "create":
                gateway.create_intent(
                    amount=Decimal("1.00"), currency="usd", description="x", receipt_email=None, metadata={}
                )
            elif method == "confirm":
                gateway.confirm_intent("pi_1")
            else:
                gateway.cancel_intent("pi_1")
