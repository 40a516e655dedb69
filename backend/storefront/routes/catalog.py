# Overview: Flask API routes for AI product insights; generates copy and persists it on the product.

# backend/storefront/routes/catalog.py
"""
AI Insight Routes

WHY: Expose marketing copy, positioning, pricing analysis and category
suggestions per product, plus catalog-wide statistics and batch analysis.

DESIGN:
- Every single-product endpoint persists its field(s) and stamps
  lastAIAnalysis before responding
- Generation failures return 500 with the generator's message; nothing is
  written for a failed product
"""

from flask import Blueprint, current_app, jsonify

from .. import AI_SERVICE, get_service
from ..services import products_service
from ..validation import ExternalServiceError

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


def _generate(product_id: int, action: str, build):
    """
    Shared flow: load product, run build(ai, product) -> (fields, body),
    persist fields, respond with body.
    """
    product = products_service.get_product(product_id)
    if product is None:
        return {"error": "Product not found"}, 404

    ai = get_service(AI_SERVICE)
    try:
        fields, body = build(ai, product)
        ai.apply_fields(product, **fields)
        ai.commit()
    except ExternalServiceError as e:
        return {"error": str(e)}, 500
    except Exception:
        ai.rollback()
        current_app.logger.exception("Failed to %s", action)
        return {"error": "Internal server error"}, 500

    return body, 200


# =============================================================================
# SINGLE PRODUCT
# =============================================================================

@catalog_bp.post("/products/<int:product_id>/ai-insights")
def product_insights_route(product_id: int):
    """Marketing description, positioning, pricing analysis and category in one bundle."""
    def build(ai, product):
        insights = ai.generate_product_insights(product)
        fields = {
            "ai_generated_description": insights.marketing_description,
            "ai_positioning": insights.positioning,
            "ai_pricing_analysis": insights.pricing_analysis,
            "ai_category": insights.suggested_category,
        }
        return fields, insights.to_dict()

    return _generate(product_id, "generate product insights", build)


@catalog_bp.post("/products/<int:product_id>/marketing-description")
def marketing_description_route(product_id: int):
    def build(ai, product):
        text = ai.generate_marketing_description(product)
        return {"ai_generated_description": text}, {"productId": product.id, "marketingDescription": text}

    return _generate(product_id, "generate marketing description", build)


@catalog_bp.post("/products/<int:product_id>/positioning")
def positioning_route(product_id: int):
    def build(ai, product):
        text = ai.analyze_product_positioning(product)
        return {"ai_positioning": text}, {"productId": product.id, "positioning": text}

    return _generate(product_id, "analyze positioning", build)


@catalog_bp.post("/products/<int:product_id>/pricing-analysis")
def pricing_analysis_route(product_id: int):
    def build(ai, product):
        text = ai.analyze_pricing(product)
        return {"ai_pricing_analysis": text}, {"productId": product.id, "pricingAnalysis": text}

    return _generate(product_id, "analyze pricing", build)


@catalog_bp.post("/products/<int:product_id>/suggest-category")
def suggest_category_route(product_id: int):
    def build(ai, product):
        category = ai.suggest_category(product)
        body = {
            "productId": product.id,
            "suggestedCategory": category,
            "currentCategory": product.category,
        }
        return {"ai_category": category}, body

    return _generate(product_id, "suggest category", build)


# =============================================================================
# WHOLE CATALOG
# =============================================================================

@catalog_bp.post("/catalog/ai-insights")
def catalog_insights_route():
    """Product count, category distribution, price statistics and recommendations."""
    try:
        insights = get_service(AI_SERVICE).generate_catalog_insights(products_service.list_products())
    except ExternalServiceError as e:
        return {"error": str(e)}, 500
    except Exception:
        current_app.logger.exception("Failed to generate catalog insights")
        return {"error": "Internal server error"}, 500

    return jsonify(insights.to_dict()), 200


@catalog_bp.post("/catalog/batch-analyze")
def batch_analyze_route():
    """
    Analyze every product. Individual failures are reported per product;
    the call itself only fails if the batch cannot run at all.
    """
    try:
        summary = get_service(AI_SERVICE).batch_analyze_catalog(products_service.list_products())
    except Exception:
        current_app.logger.exception("Failed to batch analyze catalog")
        return {"error": "Internal server error"}, 500

    return summary, 200
