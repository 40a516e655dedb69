# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""
Product catalog routes.

CRUD over products plus a price quote for N units. Payloads are validated
against PRODUCT_POLICY before anything touches the session; the ai_* fields
are read-only here (see routes/catalog.py).
"""
from flask import Blueprint, current_app, jsonify, request

from .. import PAYMENT_SERVICE, get_service
from ..models import Product
from ..services import products_service
from ..services.products_service import PRODUCT_POLICY
from ..validation import (
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    parse_positive_int,
    validate_payload,
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """List all products, oldest first."""
    products = products_service.list_products()
    return jsonify([p.to_dict() for p in products])


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    product = products_service.get_product(product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product.to_dict()


@products_bp.post("")
def create_product_route():
    """
    Create a new product.

    Request body:
    {
        "name": "Wireless Headphones",      (required)
        "price": 199.99,                    (required, 0 .. 99,999,999.99)
        "description": "...",
        "category": "Electronics"
    }
    """
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = products_service.create_product(patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created.to_dict(), 201


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Update a product. Only the fields present in the body change."""
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    updated = products_service.update_product(product_id=product_id, patch=patch)
    if updated is None:
        return {"error": "Product not found"}, 404

    return updated.to_dict(), 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    deleted = products_service.delete_product(product_id=product_id)
    if not deleted:
        return {"error": "Product not found"}, 404
    return "", 204


@products_bp.get("/<int:product_id>/calculate-price")
def calculate_price_route(product_id: int):
    """
    Quote price * quantity.

    Query params:
    - quantity: int (default 1, must be > 0)

    Returns:
        200: {productId, quantity, totalAmount}
        400: unknown product or invalid quantity
    """
    payments = get_service(PAYMENT_SERVICE)

    try:
        quantity = parse_positive_int(request.args.get("quantity", "1"), "quantity")
        total = payments.calculate_total_amount(product_id, quantity)
    except (NotFoundError, ValidationError) as e:
        return {"error": str(e)}, 400

    return {"productId": product_id, "quantity": quantity, "totalAmount": float(total)}
