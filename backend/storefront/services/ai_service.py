# Overview: Service-layer operations for AI product insights; composes an insight writer with product persistence.

"""
AI Insight Service

WHY: Produce marketing copy, positioning, pricing analysis and category
suggestions for catalog products, and roll the catalog up into summary
statistics with recommendations.

DESIGN PRINCIPLES:
- Text generation is delegated to an InsightWriter chosen at startup
- A product bundle is all-or-nothing: if any of the four parts fails,
  nothing is returned and nothing is written
- Catalog statistics are computed locally; only the recommendation text
  comes from the writer
- Persisting AI fields always stamps last_ai_analysis
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from ..models import Product
from ..models.catalog import money
from ..validation import CENTS, ExternalServiceError
from .insight_writers import InsightWriter
from .repository import Repository
from storefront.time_utils import to_utc_z, utcnow

logger = logging.getLogger(__name__)

BATCH_SUCCESS = "Success"
BATCH_FAILED = "Failed"


@dataclass
class AIInsightResponse:
    product_id: int
    product_name: str
    marketing_description: str = ""
    positioning: str = ""
    pricing_analysis: str = ""
    suggested_category: str = ""
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "marketingDescription": self.marketing_description,
            "positioning": self.positioning,
            "pricingAnalysis": self.pricing_analysis,
            "suggestedCategory": self.suggested_category,
            "generatedAt": to_utc_z(self.generated_at),
        }


@dataclass
class CatalogInsights:
    total_products: int = 0
    category_distribution: dict[str, int] = field(default_factory=dict)
    average_price: Decimal = Decimal("0")
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("0")
    ai_recommendations: str = ""
    generated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "totalProducts": self.total_products,
            "categoryDistribution": dict(self.category_distribution),
            "averagePrice": money(self.average_price),
            "minPrice": money(self.min_price),
            "maxPrice": money(self.max_price),
            "aiRecommendations": self.ai_recommendations,
            "generatedAt": to_utc_z(self.generated_at),
        }


class AIInsightService:
    def __init__(self, writer: InsightWriter, *, products: Repository[Product] | None = None):
        self.writer = writer
        self.products = products or Repository(Product)

    @property
    def is_mock(self) -> bool:
        return self.writer.is_mock

    # =========================================================================
    # SINGLE-PRODUCT TEXT
    # =========================================================================

    def generate_marketing_description(self, product: Product) -> str:
        return self.writer.marketing_description(product)

    def analyze_product_positioning(self, product: Product) -> str:
        return self.writer.positioning(product)

    def analyze_pricing(self, product: Product) -> str:
        return self.writer.pricing_analysis(product)

    def suggest_category(self, product: Product) -> str:
        return self.writer.category(product)

    def generate_product_insights(self, product: Product) -> AIInsightResponse:
        """
        Run all four generators in order.

        Raises:
            ExternalServiceError: any part failed (no partial bundle is returned)
        """
        try:
            return AIInsightResponse(
                product_id=product.id,
                product_name=product.name,
                marketing_description=self.generate_marketing_description(product),
                positioning=self.analyze_product_positioning(product),
                pricing_analysis=self.analyze_pricing(product),
                suggested_category=self.suggest_category(product),
            )
        except ExternalServiceError:
            logger.exception("Error generating AI insights for product %s", product.id)
            raise

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def apply_fields(self, product: Product, **fields) -> Product:
        """Write AI-derived columns and stamp last_ai_analysis (flush only)."""
        return self.products.update(product, last_ai_analysis=utcnow(), **fields)

    def apply_insights(self, product: Product, insights: AIInsightResponse) -> Product:
        return self.apply_fields(
            product,
            ai_generated_description=insights.marketing_description,
            ai_positioning=insights.positioning,
            ai_pricing_analysis=insights.pricing_analysis,
            ai_category=insights.suggested_category,
        )

    def commit(self) -> None:
        self.products.commit()

    def rollback(self) -> None:
        self.products.rollback()

    # =========================================================================
    # CATALOG
    # =========================================================================

    def generate_catalog_insights(self, products: Iterable[Product]) -> CatalogInsights:
        """
        Count, category distribution (first-occurrence order) and price
        statistics, plus recommendation text. An empty catalog yields zeros.
        """
        products = list(products)
        insights = CatalogInsights(total_products=len(products))

        for product in products:
            key = product.category or ""
            insights.category_distribution[key] = insights.category_distribution.get(key, 0) + 1

        if products:
            prices = [Decimal(p.price) for p in products]
            insights.average_price = (sum(prices) / len(prices)).quantize(CENTS)
            insights.min_price = min(prices)
            insights.max_price = max(prices)

        insights.ai_recommendations = self.writer.catalog_recommendations(insights)
        return insights

    def batch_analyze_catalog(self, products: Iterable[Product]) -> dict:
        """
        Generate and persist insights for every product.

        A failing product is recorded as Failed with its error message and
        does not stop the batch; successful ones are committed together.
        """
        products = list(products)
        results = []

        for product in products:
            try:
                insights = self.generate_product_insights(product)
            except ExternalServiceError as e:
                results.append({
                    "productId": product.id,
                    "productName": product.name,
                    "status": BATCH_FAILED,
                    "error": str(e),
                })
                continue

            self.apply_insights(product, insights)
            results.append({
                "productId": product.id,
                "productName": product.name,
                "status": BATCH_SUCCESS,
            })

        self.commit()

        analyzed = sum(1 for r in results if r["status"] == BATCH_SUCCESS)
        logger.info("Batch analysis finished: %s analyzed, %s failed", analyzed, len(results) - analyzed)

        return {
            "totalProducts": len(products),
            "analyzed": analyzed,
            "failed": len(results) - analyzed,
            "results": results,
        }
