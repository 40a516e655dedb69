# Overview: Flask CLI command groups for database bootstrap, sample data, and shipping quotes.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent).
# - python -m flask system seed
#   Insert the sample catalog (Wireless Headphones, Smart Watch, Yoga Mat) if missing.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Shipping:
# - python -m flask shipping quote --provider FedEx --speed Express --weight 10
#   Print the cost of one carrier/speed/weight combination.
# - python -m flask shipping rates --weight 5
#   Print every carrier/speed cost for a weight, cheapest first.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models.shipping import CARRIERS, SPEEDS
from .services import products_service, shipping_rates
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("OK  Tables created")


@system_group.command('seed')
@with_appcontext
def seed():
    """Insert the sample catalog products that are not present yet."""
    db.create_all()
    created = products_service.seed_sample_catalog()
    click.echo(f"OK  Seeded {created} product(s)")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("OK  Database reset")


@click.group('shipping')
def shipping_group():
    """Shipping rate inspection."""


@shipping_group.command('quote')
@click.option('--provider', required=True, help='FedEx, UPS, USPS or DHL')
@click.option('--speed', required=True, help='Standard, Express, TwoDay or Overnight')
@click.option('--weight', required=True, help='Package weight in pounds')
@with_appcontext
def quote(provider, speed, weight):
    """Print the cost of one carrier/speed/weight combination."""
    from . import SHIPPING_SERVICE

    shipping = current_app.extensions[SHIPPING_SERVICE]
    try:
        cost = shipping.calculate_shipping_cost(provider, speed, weight)
    except ValidationError as e:
        raise click.BadParameter(str(e))
    click.echo(f"{provider} {speed} {weight} lb: ${cost:.2f}")


@shipping_group.command('rates')
@click.option('--weight', required=True, type=float, help='Package weight in pounds')
def rates(weight):
    """Print every carrier/speed cost for a weight, cheapest first."""
    quotes = [
        (shipping_rates.calculate_shipping_cost(carrier, speed, weight), carrier, speed)
        for carrier in CARRIERS
        for speed in SPEEDS
    ]
    for cost, carrier, speed in sorted(quotes, key=lambda q: q[0]):
        click.echo(f"{carrier:<6} {speed:<10} ${cost:>8.2f}  ({shipping_rates.estimated_days(speed)} days)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(shipping_group)
