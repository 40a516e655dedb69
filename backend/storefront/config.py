# backend/storefront/config.py
from __future__ import annotations
import os
from dataclasses import dataclass, field


def _env(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/storefront.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///storefront.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Load the three sample products on first boot (mirrors `flask system seed`)
    SEED_SAMPLE_CATALOG = os.environ.get("SEED_SAMPLE_CATALOG", "false").lower() == "true"

    API_VERSION = "1.0.0"


CARRIER_KEY_VARS = {
    "FedEx": "FEDEX_API_KEY",
    "UPS": "UPS_API_KEY",
    "USPS": "USPS_API_KEY",
    "DHL": "DHL_API_KEY",
}


@dataclass(frozen=True)
class IntegrationSettings:
    """
    Credentials and endpoints for the external integrations.

    Built once at startup and handed to each service constructor. A missing
    credential switches the matching service to mock mode; it never fails
    startup.
    """
    windsurf_api_key: str | None = None
    windsurf_base_url: str = "https://api.windsurf.ai/v1"
    windsurf_model: str = "gpt-4"
    stripe_secret_key: str | None = None
    stripe_publishable_key: str | None = None
    carrier_api_keys: dict[str, str | None] = field(default_factory=dict)
    external_timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "IntegrationSettings":
        return cls(
            windsurf_api_key=_env("WINDSURF_API_KEY"),
            windsurf_base_url=_env("WINDSURF_BASE_URL") or "https://api.windsurf.ai/v1",
            windsurf_model=_env("WINDSURF_MODEL") or "gpt-4",
            stripe_secret_key=_env("STRIPE_SECRET_KEY"),
            stripe_publishable_key=_env("STRIPE_PUBLISHABLE_KEY"),
            carrier_api_keys={carrier: _env(var) for carrier, var in CARRIER_KEY_VARS.items()},
            external_timeout_seconds=float(_env("EXTERNAL_TIMEOUT_SECONDS") or 30),
        )

    @property
    def ai_enabled(self) -> bool:
        return bool(self.windsurf_api_key)

    @property
    def payments_live(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def carriers_configured(self) -> list[str]:
        return [carrier for carrier, key in self.carrier_api_keys.items() if key]
