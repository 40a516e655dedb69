# backend/storefront/__init__.py
import logging

from flask import Flask, current_app

from .config import Config, IntegrationSettings
from .extensions import db, migrate

SHIPPING_SERVICE = "storefront.shipping"
PAYMENT_SERVICE = "storefront.payments"
AI_SERVICE = "storefront.ai"
SETTINGS = "storefront.settings"


def get_service(name: str):
    """Service instance built by create_app for the current application."""
    return current_app.extensions[name]


def create_app(settings: IntegrationSettings | None = None, config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # categoryDistribution keeps first-occurrence order
    app.json.sort_keys = False

    if not app.debug and not app.testing:
        logging.basicConfig(level=logging.INFO)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Integrations: a missing credential selects mock mode, never a startup failure
    from .services.ai_service import AIInsightService
    from .services.insight_writers import build_insight_writer
    from .services.payment_gateways import build_payment_gateway
    from .services.payment_service import PaymentService
    from .services.shipping_service import ShippingService

    settings = settings or IntegrationSettings.from_env()
    app.extensions[SETTINGS] = settings
    app.extensions[SHIPPING_SERVICE] = ShippingService(settings)
    app.extensions[PAYMENT_SERVICE] = PaymentService(build_payment_gateway(settings))
    app.extensions[AI_SERVICE] = AIInsightService(build_insight_writer(settings))

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.catalog import catalog_bp
    from .routes.payments import payments_bp
    from .routes.shipping import shipping_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(shipping_bp)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("SEED_SAMPLE_CATALOG"):
        from .services.products_service import seed_sample_catalog

        with app.app_context():
            db.create_all()
            seed_sample_catalog()

    return app
