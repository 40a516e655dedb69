"""
Shipping formula tests: rate calculator, tracking numbers, labels, and
synthesized tracking history. Pure functions, no database.
"""

import random
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.models.shipping import (
    STATUS_CANCELLED,
    STATUS_CREATED,
    STATUS_DELIVERED,
    STATUS_FAILED,
    STATUS_IN_TRANSIT,
    STATUS_LABEL_GENERATED,
    STATUS_OUT_FOR_DELIVERY,
    STATUS_PICKED_UP,
)
from storefront.services import shipping_rates


# =============================================================================
# RATE CALCULATOR
# =============================================================================


class TestCalculateShippingCost:

    @pytest.mark.parametrize(
        "carrier,speed,weight,expected",
        [
            ("FedEx", "Standard", 5, "20.00"),
            ("UPS", "Express", 10, "48.00"),
            ("USPS", "Overnight", 3, "37.50"),
            ("USPS", "Standard", 5, "17.50"),
            ("FedEx", "Express", 10, "48.75"),
            ("DHL", "TwoDay", 1, "21.00"),
        ],
    )
    def test_formula(self, carrier, speed, weight, expected):
        assert shipping_rates.calculate_shipping_cost(carrier, speed, weight) == Decimal(expected)

    def test_fractional_weight_rounds_half_even(self):
        # (5.00 + 0.1 * 2.50) * 1.5 = 7.875 -> 7.88
        assert shipping_rates.calculate_shipping_cost("USPS", "Express", Decimal("0.1")) == Decimal("7.88")
        # (5.00 + 0.3 * 2.50) * 1.5 = 8.625 -> 8.62
        assert shipping_rates.calculate_shipping_cost("USPS", "Express", Decimal("0.3")) == Decimal("8.62")

    def test_deterministic(self):
        first = shipping_rates.calculate_shipping_cost("UPS", "TwoDay", 7)
        second = shipping_rates.calculate_shipping_cost("UPS", "TwoDay", 7)
        assert first == second

    def test_unknown_carrier_raises_key_error(self):
        with pytest.raises(KeyError):
            shipping_rates.calculate_shipping_cost("Pony Express", "Standard", 1)

    @pytest.mark.parametrize(
        "speed,days",
        [("Overnight", 1), ("TwoDay", 2), ("Express", 3), ("Standard", 6)],
    )
    def test_estimated_days(self, speed, days):
        assert shipping_rates.estimated_days(speed) == days


# =============================================================================
# TRACKING NUMBERS / LABELS
# =============================================================================


class TestTrackingNumbers:

    @pytest.mark.parametrize(
        "carrier,prefix",
        [("FedEx", "FX"), ("UPS", "1Z"), ("USPS", "94"), ("DHL", "DH"), ("Unknown", "XX")],
    )
    def test_prefix_and_length(self, carrier, prefix):
        number = shipping_rates.generate_tracking_number(carrier, random.Random(7))
        assert number.startswith(prefix)
        assert len(number) == len(prefix) + 9
        assert number[len(prefix):].isdigit()

    def test_digits_stay_in_range(self):
        rng = random.Random(1)
        for _ in range(200):
            digits = int(shipping_rates.generate_tracking_number("UPS", rng)[2:])
            assert 100_000_000 <= digits < 999_999_999

    def test_seeded_rng_is_reproducible(self):
        a = shipping_rates.generate_tracking_number("DHL", random.Random(42))
        b = shipping_rates.generate_tracking_number("DHL", random.Random(42))
        assert a == b

    def test_label_url(self):
        assert shipping_rates.label_url("FX123456789") == "https://shipping-labels.example.com/FX123456789.pdf"


# =============================================================================
# TRACKING HISTORY
# =============================================================================


CREATED_AT = datetime(2026, 3, 1, 9, 0, 0)


def _shipment(status):
    return SimpleNamespace(
        tracking_number="FX100000001",
        status=status,
        created_at=CREATED_AT,
        from_city="Austin",
        from_state="TX",
        to_city="Denver",
        to_state="CO",
        to_street1="9 Elm St",
    )


class TestTrackingUpdates:

    @pytest.mark.parametrize(
        "status,expected",
        [
            (STATUS_CREATED, [STATUS_LABEL_GENERATED]),
            (STATUS_LABEL_GENERATED, [STATUS_LABEL_GENERATED]),
            (STATUS_PICKED_UP, [STATUS_LABEL_GENERATED, STATUS_PICKED_UP]),
            (STATUS_IN_TRANSIT, [STATUS_LABEL_GENERATED, STATUS_PICKED_UP, STATUS_IN_TRANSIT]),
            (
                STATUS_OUT_FOR_DELIVERY,
                [STATUS_LABEL_GENERATED, STATUS_PICKED_UP, STATUS_IN_TRANSIT, STATUS_OUT_FOR_DELIVERY],
            ),
            (
                STATUS_DELIVERED,
                [
                    STATUS_LABEL_GENERATED,
                    STATUS_PICKED_UP,
                    STATUS_IN_TRANSIT,
                    STATUS_OUT_FOR_DELIVERY,
                    STATUS_DELIVERED,
                ],
            ),
        ],
    )
    def test_events_follow_current_status(self, status, expected):
        updates = shipping_rates.build_tracking_updates(_shipment(status))
        assert [u.status for u in updates] == expected

    @pytest.mark.parametrize("status", [STATUS_CANCELLED, STATUS_FAILED])
    def test_side_exits_report_only_label_event(self, status):
        updates = shipping_rates.build_tracking_updates(_shipment(status))
        assert [u.status for u in updates] == [STATUS_LABEL_GENERATED]

    def test_delivered_timeline_and_locations(self):
        updates = shipping_rates.build_tracking_updates(_shipment(STATUS_DELIVERED))

        assert [u.timestamp for u in updates] == [
            CREATED_AT,
            CREATED_AT + timedelta(hours=4),
            CREATED_AT + timedelta(hours=4, days=1),
            CREATED_AT + timedelta(hours=4, days=2),
            CREATED_AT + timedelta(hours=10, days=2),
        ]
        assert [u.location for u in updates] == [
            "Austin, TX",
            "Austin, TX",
            "Distribution Center",
            "Denver, CO",
            "9 Elm St, Denver, CO",
        ]
        assert all(u.tracking_number == "FX100000001" for u in updates)

    def test_update_serializes_camel_case(self):
        update = shipping_rates.build_tracking_updates(_shipment(STATUS_LABEL_GENERATED))[0]
        assert update.to_dict() == {
            "trackingNumber": "FX100000001",
            "status": "LabelGenerated",
            "location": "Austin, TX",
            "timestamp": "2026-03-01T09:00:00Z",
            "description": "Shipping label created",
        }
