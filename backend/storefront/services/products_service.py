# Overview: Service-layer operations for catalog products; encapsulates business logic and database work.

# backend/storefront/services/products_service.py
"""
Products Service

Plain functions over the product repository. Payloads arrive already
validated by validate_payload + enforce_rules_product (see PRODUCT_POLICY);
these functions only apply patches and commit.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from ..models import Product
from ..validation import ModelValidationPolicy
from .repository import Repository
from storefront.time_utils import utcnow

logger = logging.getLogger(__name__)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "category"},
    required_on_create={"name", "price"},
)

PRODUCT_MUTABLE_FIELDS = PRODUCT_POLICY.writable_fields

SAMPLE_CATALOG = (
    {
        "name": "Wireless Headphones",
        "description": "Premium noise-cancelling wireless headphones with 30-hour battery life",
        "price": Decimal("199.99"),
        "category": "Electronics",
    },
    {
        "name": "Smart Watch",
        "description": "Fitness tracking smartwatch with heart rate monitor and GPS",
        "price": Decimal("299.99"),
        "category": "Electronics",
    },
    {
        "name": "Yoga Mat",
        "description": "Eco-friendly non-slip yoga mat with carrying strap",
        "price": Decimal("49.99"),
        "category": "Sports",
    },
)

_products = Repository(Product)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products() -> list[Product]:
    return _products.list(order_by=(Product.id.asc(),))


def get_product(product_id: int) -> Product | None:
    return _products.get(product_id)


def create_product(*, patch: dict) -> Product:
    """Create product using a validated patch dict."""
    p = Product(created_at=utcnow())
    apply_product_patch(p, patch)
    _products.add(p)
    _products.commit()
    logger.info("Product created: %s (%s)", p.id, p.name)
    return p


def update_product(*, product_id: int, patch: dict) -> Product | None:
    """
    Apply a validated patch.

    Returns:
        Updated product, or None if not found
    """
    p = _products.get(product_id)
    if p is None:
        return None
    apply_product_patch(p, patch)
    _products.commit()
    return p


def delete_product(*, product_id: int) -> bool:
    """
    Hard-delete a product. Payment intents that referenced it keep their
    history with product_id set to NULL.

    Returns:
        True if deleted, False if not found
    """
    p = _products.get(product_id)
    if p is None:
        return False
    _products.delete(p)
    _products.commit()
    logger.info("Product deleted: %s", product_id)
    return True


def seed_sample_catalog() -> int:
    """
    Insert the sample products that are not present yet (matched by name).

    Returns:
        Number of products inserted
    """
    created = 0
    for item in SAMPLE_CATALOG:
        if _products.exists(name=item["name"]):
            continue
        p = Product(created_at=utcnow())
        apply_product_patch(p, item)
        _products.add(p)
        created += 1
    _products.commit()
    return created
