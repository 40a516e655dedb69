"""
Pytest fixtures for storefront backend tests.

Provides the app (mock integrations, in-memory SQLite), test client, a
fresh database per test, and a small sample catalog.
"""

from decimal import Decimal

import pytest

from storefront import create_app
from storefront.config import IntegrationSettings
from storefront.extensions import db
from storefront.models import Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing. No credentials, so every integration runs in mock mode."""
    app = create_app(
        settings=IntegrationSettings(),
        config_overrides={
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
            'SQLALCHEMY_TRACK_MODIFICATIONS': False,
            'SEED_SAMPLE_CATALOG': False,
        },
    )

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_product(db_session, name="Widget", price="10.00", category="General", description="A widget"):
    product = Product(name=name, description=description, price=Decimal(price), category=category)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def sample_products(db_session):
    """Wireless Headphones, Smart Watch, Yoga Mat."""
    return [
        make_product(
            db_session,
            name="Wireless Headphones",
            price="199.99",
            category="Electronics",
            description="Premium noise-cancelling wireless headphones with 30-hour battery life",
        ),
        make_product(
            db_session,
            name="Smart Watch",
            price="299.99",
            category="Electronics",
            description="Fitness tracking smartwatch with heart rate monitor and GPS",
        ),
        make_product(
            db_session,
            name="Yoga Mat",
            price="49.99",
            category="Sports",
            description="Eco-friendly non-slip yoga mat with carrying strap",
        ),
    ]


@pytest.fixture(scope='function')
def product(db_session):
    """Single product priced at 29.99."""
    return make_product(db_session, name="Desk Lamp", price="29.99", category="Home", description="LED desk lamp")


def address(**overrides) -> dict:
    """Complete camelCase address payload."""
    payload = {
        "name": "Jane Sender",
        "street1": "1 Main St",
        "city": "Austin",
        "state": "TX",
        "postalCode": "73301",
        "country": "US",
        "email": "jane@example.com",
    }
    payload.update(overrides)
    return payload


def package(**overrides) -> dict:
    payload = {"length": 10, "width": 8, "height": 6, "weight": 5}
    payload.update(overrides)
    return payload
