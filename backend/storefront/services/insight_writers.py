# Overview: Marketing-copy writers for the AI insight service: deterministic mock and chat-completions client.

"""
Insight Writers

Both writers expose the same five operations. The service picks one at
startup: the chat writer when WINDSURF_API_KEY is set, otherwise the mock.

PRICE SEGMENTS (mock):
    price < 50   -> budget-friendly
    price < 200  -> mid-range
    otherwise    -> premium
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal

import httpx

from ..config import IntegrationSettings
from ..validation import ExternalServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a product marketing and business analysis expert."
GENERATION_FAILED = "Failed to generate AI insights. Please check your API key and try again."

CATEGORY_KEYWORDS = (
    # (name keywords, description keywords, category)
    (("watch", "headphone", "phone"), (), "Electronics"),
    (("yoga", "fitness"), ("sport",), "Sports & Fitness"),
    (("book",), ("read",), "Books & Media"),
)


def _fmt(amount) -> str:
    return f"{Decimal(amount):.2f}"


def price_segment(price) -> str:
    if price < 50:
        return "budget-friendly"
    if price < 200:
        return "mid-range"
    return "premium"


def price_assessment(price) -> str:
    if price < 50:
        return "highly competitive and accessible"
    if price < 200:
        return "well-positioned in the mid-market"
    return "premium pricing reflecting quality"


def price_range_assessment(min_price, max_price) -> str:
    spread = max_price - min_price
    if spread < 100:
        return "focused price segment"
    if spread < 500:
        return "diverse price range"
    return "wide price spectrum serving multiple market segments"


class InsightWriter(ABC):
    is_mock = False

    @abstractmethod
    def marketing_description(self, product) -> str:
        raise NotImplementedError

    @abstractmethod
    def positioning(self, product) -> str:
        raise NotImplementedError

    @abstractmethod
    def pricing_analysis(self, product) -> str:
        raise NotImplementedError

    @abstractmethod
    def category(self, product) -> str:
        raise NotImplementedError

    @abstractmethod
    def catalog_recommendations(self, insights) -> str:
        raise NotImplementedError


class MockInsightWriter(InsightWriter):
    """Template copy built from the product's own fields."""

    is_mock = True

    def marketing_description(self, product) -> str:
        return (
            f"✨ Discover the exceptional {product.name}! {product.description} "
            f"At just ${_fmt(product.price)}, this premium {(product.category or '').lower()} product offers "
            "unmatched value and quality. Perfect for discerning customers who demand the best. "
            "Don't miss out on this opportunity to elevate your experience!"
        )

    def positioning(self, product) -> str:
        segment = price_segment(product.price)
        return (
            f"**Target Market**: {product.category} enthusiasts seeking {segment} solutions\n"
            f"**Competitive Position**: {segment.upper()} segment with strong value proposition\n"
            f"**Unique Value**: Quality and reliability at ${_fmt(product.price)}\n"
            f"**Key Differentiator**: {product.description}"
        )

    def pricing_analysis(self, product) -> str:
        return (
            f"**Price Point**: ${_fmt(product.price)} is {price_assessment(product.price)}\n"
            f"**Value Perception**: Strong value for money in the {product.category} category\n"
            "**Recommendation**: Current pricing aligns well with product positioning\n"
            "**Market Fit**: Attractive to target demographic"
        )

    def category(self, product) -> str:
        name = (product.name or "").lower()
        description = (product.description or "").lower()
        for name_words, description_words, category in CATEGORY_KEYWORDS:
            if any(w in name for w in name_words) or any(w in description for w in description_words):
                return category
        return product.category

    def catalog_recommendations(self, insights) -> str:
        lines = [
            "📊 **Catalog Analysis & Recommendations**",
            "",
            f"**Portfolio Overview**: Your catalog contains {insights.total_products} products "
            f"across {len(insights.category_distribution)} categories.",
            "",
            f"**Pricing Strategy**: Price range of ${_fmt(insights.min_price)} - ${_fmt(insights.max_price)} "
            f"with an average of ${_fmt(insights.average_price)} indicates a "
            f"{price_range_assessment(insights.min_price, insights.max_price)}.",
            "",
            "**Key Recommendations**:",
            "• Consider expanding underrepresented categories",
            "• Optimize product descriptions for better conversion",
            "• Implement dynamic pricing for competitive products",
            "• Focus marketing on high-margin items",
            "• Bundle complementary products for increased AOV",
        ]
        return "\n".join(lines) + "\n"


class ChatCompletionInsightWriter(InsightWriter):
    """
    Prompts an OpenAI-compatible /chat/completions endpoint.

    Every failure (timeout, HTTP status, malformed body) surfaces as
    ExternalServiceError; nothing is retried.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        model: str = "gpt-4",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.model = model
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    def complete(self, prompt: str) -> str:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": 500,
            "temperature": 0.7,
        }
        try:
            response = self._client.post("chat/completions", json=body)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.exception("Error calling text-generation API")
            raise ExternalServiceError(GENERATION_FAILED) from exc
        return content or "No response generated"

    @staticmethod
    def _product_block(product, *, category_label: str = "Category", with_price: bool = True) -> str:
        lines = [f"Name: {product.name}", f"Description: {product.description}"]
        if with_price:
            lines.append(f"Price: ${_fmt(product.price)}")
        lines.append(f"{category_label}: {product.category}")
        return "\n".join(lines)

    def marketing_description(self, product) -> str:
        return self.complete(
            "Generate a compelling marketing description for the following product:\n"
            f"{self._product_block(product)}\n\n"
            "Create an engaging, persuasive description that highlights key benefits and appeals to target customers."
        )

    def positioning(self, product) -> str:
        return self.complete(
            "Analyze the market positioning for this product:\n"
            f"{self._product_block(product)}\n\n"
            "Provide insights on target market, competitive positioning, and unique value proposition."
        )

    def pricing_analysis(self, product) -> str:
        return self.complete(
            "Analyze the pricing strategy for this product:\n"
            f"{self._product_block(product)}\n\n"
            "Provide insights on pricing competitiveness, perceived value, and recommendations."
        )

    def category(self, product) -> str:
        return self.complete(
            "Suggest the most appropriate product category for:\n"
            f"{self._product_block(product, category_label='Current Category', with_price=False)}\n\n"
            "Provide a single, specific category name that best fits this product."
        )

    def catalog_recommendations(self, insights) -> str:
        categories = ", ".join(f"{name} ({count})" for name, count in insights.category_distribution.items())
        return self.complete(
            "Analyze this product catalog and provide business insights:\n"
            f"Total Products: {insights.total_products}\n"
            f"Categories: {categories}\n"
            f"Price Range: ${_fmt(insights.min_price)} - ${_fmt(insights.max_price)}\n"
            f"Average Price: ${_fmt(insights.average_price)}\n\n"
            "Provide actionable recommendations for catalog optimization, pricing strategy, and product mix."
        )


def build_insight_writer(settings: IntegrationSettings) -> InsightWriter:
    if not settings.ai_enabled:
        logger.warning("Windsurf API key not configured. AI features will use mock data.")
        return MockInsightWriter()
    return ChatCompletionInsightWriter(
        settings.windsurf_api_key,
        base_url=settings.windsurf_base_url,
        model=settings.windsurf_model,
        timeout=settings.external_timeout_seconds,
    )
