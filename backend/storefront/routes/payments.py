# Overview: Flask API routes for payment intents; parses input and returns JSON responses.

# backend/storefront/routes/payments.py
"""
Payment Intent API Routes

WHY: Let a client pay for a product through a gateway payment intent.

DESIGN:
- Create computes price * quantity server-side; clients never send amounts
- Confirm/cancel mirror the gateway status locally
- Gateway failures are logged and reported as 500 without retry
"""

from flask import Blueprint, current_app, jsonify, request

from .. import PAYMENT_SERVICE, get_service
from ..validation import (
    ExternalServiceError,
    IllegalStateError,
    NotFoundError,
    ValidationError,
)

payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


# =============================================================================
# INTENT LIFECYCLE
# =============================================================================

@payments_bp.post("/create")
def create_payment_route():
    """
    Create a payment intent.

    Request body:
    {
        "productId": 1,
        "quantity": 2,                      (default 1)
        "customerEmail": "a@example.com",
        "customerName": "Ada",              (optional)
        "currency": "usd"                   (optional, default usd)
    }

    Returns:
        200: PaymentResponse
        400: unknown product or invalid quantity
        500: gateway error
    """
    data = request.get_json(silent=True) or {}

    product_id = data.get("productId")
    if not isinstance(product_id, int) or isinstance(product_id, bool):
        return jsonify({"error": "productId is required"}), 400

    try:
        result = get_service(PAYMENT_SERVICE).create_payment_intent(
            product_id=product_id,
            quantity=data.get("quantity", 1),
            customer_email=data.get("customerEmail"),
            customer_name=data.get("customerName"),
            currency=data.get("currency"),
        )
    except (NotFoundError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ExternalServiceError as e:
        return jsonify({"error": str(e)}), 500
    except Exception:
        current_app.logger.exception("Failed to create payment intent")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200


def _transition(intent_id: str, action: str):
    payments = get_service(PAYMENT_SERVICE)
    operation = payments.confirm_payment if action == "confirm" else payments.cancel_payment
    try:
        result = operation(intent_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except IllegalStateError as e:
        return jsonify({"error": str(e)}), 400
    except ExternalServiceError as e:
        return jsonify({"error": str(e)}), 500
    except Exception:
        current_app.logger.exception("Failed to %s payment", action)
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200


@payments_bp.post("/<intent_id>/confirm")
def confirm_payment_route(intent_id: str):
    """Mirror the gateway's current status; stamps completedAt on success."""
    return _transition(intent_id, "confirm")


@payments_bp.post("/<intent_id>/cancel")
def cancel_payment_route(intent_id: str):
    return _transition(intent_id, "cancel")


# =============================================================================
# PAYMENT QUERIES
# =============================================================================

@payments_bp.get("/<intent_id>")
def get_payment_route(intent_id: str):
    intent = get_service(PAYMENT_SERVICE).get_payment_status(intent_id)
    if intent is None:
        return jsonify({"error": "Payment intent not found"}), 404
    return jsonify(intent.to_dict()), 200


@payments_bp.get("")
def payment_history_route():
    """
    Query params:
    - customerEmail: str (optional) - only this customer's intents
    """
    customer_email = request.args.get("customerEmail")
    intents = get_service(PAYMENT_SERVICE).get_payment_history(customer_email)
    return jsonify([i.to_dict() for i in intents]), 200
