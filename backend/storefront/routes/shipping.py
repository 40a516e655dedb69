# Overview: Flask API routes for shipping operations; parses input and returns JSON responses.

# backend/storefront/routes/shipping.py
"""
Shipping API Routes

WHY: Quote carriers, buy labels, and follow packages.

DESIGN:
- Rates are quoted across every carrier x speed, cheapest first
- Creating a shipment fixes its cost and tracking number
- Tracking history is synthesized from the current status
- Status moves forward only; Delivered/Failed/Cancelled are terminal

Address payloads use camelCase keys: name, street1, street2, city, state,
postalCode, country, phone, email.
"""

from flask import Blueprint, current_app, jsonify, request

from .. import SHIPPING_SERVICE, get_service
from ..services.shipping_service import (
    PackageDimensions,
    ShippingAddress,
    normalize_carrier,
    normalize_speed,
)
from ..validation import IllegalStateError, NotFoundError, ValidationError

shipping_bp = Blueprint("shipping", __name__, url_prefix="/api/shipping")


def _package(data: dict):
    return (
        ShippingAddress.from_payload(data.get("fromAddress")),
        ShippingAddress.from_payload(data.get("toAddress")),
        PackageDimensions.from_payload(data.get("dimensions")),
    )


# =============================================================================
# QUOTES
# =============================================================================

@shipping_bp.post("/rates")
def shipping_rates_route():
    """
    Quote all carriers and speeds.

    Request body:
    {
        "fromAddress": {...},
        "toAddress": {...},
        "dimensions": {"length": 10, "width": 8, "height": 6, "weight": 5}
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        from_address, to_address, dimensions = _package(data)
        rates = get_service(SHIPPING_SERVICE).get_shipping_rates(from_address, to_address, dimensions)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to get shipping rates")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify([r.to_dict() for r in rates]), 200


@shipping_bp.get("/calculate-cost")
def calculate_cost_route():
    """
    Query params:
    - provider: FedEx | UPS | USPS | DHL
    - speed: Standard | Express | TwoDay | Overnight
    - weight: pounds
    """
    provider = request.args.get("provider")
    speed = request.args.get("speed")
    weight = request.args.get("weight")

    try:
        shipping = get_service(SHIPPING_SERVICE)
        cost = shipping.calculate_shipping_cost(provider, speed, weight)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "provider": normalize_carrier(provider),
        "speed": normalize_speed(speed),
        "weight": float(weight),
        "cost": float(cost),
    }), 200


# =============================================================================
# SHIPMENT LIFECYCLE
# =============================================================================

@shipping_bp.post("/create")
def create_shipment_route():
    """
    Buy a label.

    Request body: rates body plus
    {
        "provider": "FedEx",
        "speed": "Express",
        "paymentIntentId": 12,     (optional, local payment intent id)
        "orderId": 99,             (optional)
        "notes": "Leave at door"   (optional)
    }

    Returns:
        201: ShipmentResponse
        400: invalid carrier, speed, address or dimensions
        404: paymentIntentId does not exist
    """
    data = request.get_json(silent=True) or {}

    try:
        from_address, to_address, dimensions = _package(data)
        result = get_service(SHIPPING_SERVICE).create_shipment(
            carrier=data.get("provider"),
            speed=data.get("speed"),
            from_address=from_address,
            to_address=to_address,
            dimensions=dimensions,
            payment_intent_id=data.get("paymentIntentId"),
            order_id=data.get("orderId"),
            notes=data.get("notes"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create shipment")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 201


@shipping_bp.post("/<int:shipment_id>/cancel")
def cancel_shipment_route(shipment_id: int):
    try:
        shipment = get_service(SHIPPING_SERVICE).cancel_shipment(shipment_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except IllegalStateError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(shipment.to_dict()), 200


@shipping_bp.post("/<int:shipment_id>/status")
def update_status_route(shipment_id: int):
    """
    Request body:
    {
        "status": "PickedUp"
    }
    """
    data = request.get_json(silent=True) or {}

    try:
        shipment = get_service(SHIPPING_SERVICE).update_shipment_status(shipment_id, data.get("status"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, IllegalStateError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(shipment.to_dict()), 200


# =============================================================================
# LOOKUPS / TRACKING
# =============================================================================

@shipping_bp.get("/<int:shipment_id>")
def get_shipment_route(shipment_id: int):
    shipment = get_service(SHIPPING_SERVICE).get_shipment(shipment_id)
    if shipment is None:
        return jsonify({"error": "Shipment not found"}), 404
    return jsonify(shipment.to_dict()), 200


@shipping_bp.get("/track/<tracking_number>")
def track_shipment_route(tracking_number: str):
    shipment = get_service(SHIPPING_SERVICE).get_shipment_by_tracking(tracking_number)
    if shipment is None:
        return jsonify({"error": "Shipment not found"}), 404
    return jsonify(shipment.to_dict()), 200


@shipping_bp.get("/track/<tracking_number>/updates")
def tracking_updates_route(tracking_number: str):
    try:
        updates = get_service(SHIPPING_SERVICE).get_tracking_updates(tracking_number)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify([u.to_dict() for u in updates]), 200


@shipping_bp.get("")
def shipment_history_route():
    """
    Query params:
    - customerEmail: str (optional) - recipient email filter
    """
    customer_email = request.args.get("customerEmail")
    shipments = get_service(SHIPPING_SERVICE).get_shipment_history(customer_email)
    return jsonify([s.to_dict() for s in shipments]), 200
