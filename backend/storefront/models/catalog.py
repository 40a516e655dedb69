from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow


def money(value) -> float | None:
    """Decimal column -> JSON number (2dp)."""
    if value is None:
        return None
    return float(round(value, 2))


class Product(db.Model):
    """
    Catalog entry.

    The ai_* columns hold the most recent generated copy; they are written
    only by the AI insight service and are never accepted from clients.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    category = db.Column(db.String(128), nullable=False, default="")

    ai_generated_description = db.Column(db.Text, nullable=True)
    ai_positioning = db.Column(db.Text, nullable=True)
    ai_pricing_analysis = db.Column(db.Text, nullable=True)
    ai_category = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_ai_analysis = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} price={self.price}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": money(self.price),
            "category": self.category,
            "aiGeneratedDescription": self.ai_generated_description,
            "aiPositioning": self.ai_positioning,
            "aiPricingAnalysis": self.ai_pricing_analysis,
            "aiCategory": self.ai_category,
            "createdAt": to_utc_z(self.created_at),
            "lastAIAnalysis": to_utc_z(self.last_ai_analysis),
        }
