# backend/storefront/routes/system.py
"""
System health endpoint.

Reports liveness, the API version and whether AI generation is live or
running on mock copy.
"""

from flask import Blueprint, current_app

from .. import SETTINGS, get_service
from storefront.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
def health():
    settings = get_service(SETTINGS)
    return {
        "status": "Healthy",
        "timestamp": to_utc_z(utcnow()),
        "version": current_app.config["API_VERSION"],
        "aiEnabled": settings.ai_enabled,
    }
