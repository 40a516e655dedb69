"""
Shipping API tests: rates, label purchase, tracking, cancellation, status
updates, history and the standalone cost quote.
"""

import pytest

from conftest import address, package


def _shipment_payload(**overrides):
    payload = {
        "provider": "FedEx",
        "speed": "Express",
        "fromAddress": address(),
        "toAddress": address(name="Bob", street1="9 Elm St", city="Denver", state="CO", email="bob@example.com"),
        "dimensions": package(weight=10),
    }
    payload.update(overrides)
    return payload


def _create(client, **overrides):
    resp = client.post("/api/shipping/create", json=_shipment_payload(**overrides))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


class TestRates:

    def test_rates(self, client, db_session):
        resp = client.post(
            "/api/shipping/rates",
            json={"fromAddress": address(), "toAddress": address(), "dimensions": package()},
        )
        assert resp.status_code == 200
        rates = resp.get_json()
        assert len(rates) == 16
        costs = [r["cost"] for r in rates]
        assert costs == sorted(costs)
        assert set(rates[0]) == {
            "provider", "speed", "cost", "currency", "estimatedDays", "estimatedDelivery", "serviceName",
        }

    def test_incomplete_address(self, client, db_session):
        resp = client.post(
            "/api/shipping/rates",
            json={"fromAddress": address(street1=""), "toAddress": address(), "dimensions": package()},
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "From address is incomplete"

    def test_overweight(self, client, db_session):
        resp = client.post(
            "/api/shipping/rates",
            json={"fromAddress": address(), "toAddress": address(), "dimensions": package(weight=200)},
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "provider,speed,weight,cost",
        [
            ("FedEx", "Standard", "5", 20.0),
            ("UPS", "Express", "10", 48.0),
            ("USPS", "Overnight", "3", 37.5),
        ],
    )
    def test_calculate_cost(self, client, db_session, provider, speed, weight, cost):
        resp = client.get(f"/api/shipping/calculate-cost?provider={provider}&speed={speed}&weight={weight}")
        assert resp.status_code == 200
        assert resp.get_json() == {"provider": provider, "speed": speed, "weight": float(weight), "cost": cost}

    @pytest.mark.parametrize(
        "query",
        [
            "provider=Pony&speed=Standard&weight=1",
            "provider=UPS&speed=Warp&weight=1",
            "provider=UPS&speed=Standard",
            "provider=UPS&speed=Standard&weight=1e400",
            "provider=UPS&speed=Standard&weight=0",
        ],
    )
    def test_calculate_cost_bad_params(self, client, db_session, query):
        assert client.get(f"/api/shipping/calculate-cost?{query}").status_code == 400


class TestShipments:

    def test_create_and_lookup(self, client, db_session):
        created = _create(client)

        assert created["provider"] == "FedEx"
        assert created["status"] == "LabelGenerated"
        assert created["shippingCost"] == 48.75
        assert created["trackingNumber"].startswith("FX")

        by_id = client.get(f"/api/shipping/{created['shipmentId']}").get_json()
        by_tracking = client.get(f"/api/shipping/track/{created['trackingNumber']}").get_json()
        assert by_id == by_tracking
        assert by_id["shippingCost"] == 48.75
        assert by_id["toEmail"] == "bob@example.com"

    def test_create_invalid_provider(self, client, db_session):
        resp = client.post("/api/shipping/create", json=_shipment_payload(provider="Pony"))
        assert resp.status_code == 400

    def test_create_unknown_payment_reference(self, client, db_session):
        resp = client.post("/api/shipping/create", json=_shipment_payload(paymentIntentId=999999))
        assert resp.status_code == 404

    @pytest.mark.parametrize(
        "overrides",
        [{"orderId": "not-a-number"}, {"paymentIntentId": [1]}, {"notes": {"text": "x"}}],
    )
    def test_create_rejects_mistyped_references(self, client, db_session, overrides):
        resp = client.post("/api/shipping/create", json=_shipment_payload(**overrides))
        assert resp.status_code == 400
        assert client.get("/api/shipping").get_json() == []

    def test_create_rejects_weight_that_rounds_to_zero(self, client, db_session):
        resp = client.post("/api/shipping/create", json=_shipment_payload(dimensions=package(weight=0.001)))
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Package dimensions must be greater than zero"

    def test_order_id_round_trips(self, client, db_session):
        created = _create(client, orderId=99, notes="Leave at door")
        stored = client.get(f"/api/shipping/{created['shipmentId']}").get_json()
        assert stored["orderId"] == 99
        assert stored["notes"] == "Leave at door"

    def test_lookup_missing(self, client, db_session):
        assert client.get("/api/shipping/999999").status_code == 404
        assert client.get("/api/shipping/track/FX000000000").status_code == 404
        assert client.get("/api/shipping/track/FX000000000/updates").status_code == 404

    def test_tracking_updates(self, client, db_session):
        created = _create(client)
        client.post(f"/api/shipping/{created['shipmentId']}/status", json={"status": "InTransit"})

        resp = client.get(f"/api/shipping/track/{created['trackingNumber']}/updates")
        assert resp.status_code == 200
        assert [u["status"] for u in resp.get_json()] == ["LabelGenerated", "PickedUp", "InTransit"]

    def test_cancel(self, client, db_session):
        created = _create(client)
        resp = client.post(f"/api/shipping/{created['shipmentId']}/cancel")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "Cancelled"

        again = client.post(f"/api/shipping/{created['shipmentId']}/cancel")
        assert again.status_code == 400
        assert again.get_json()["error"] == "Shipment is already cancelled"

    def test_cancel_delivered(self, client, db_session):
        created = _create(client)
        client.post(f"/api/shipping/{created['shipmentId']}/status", json={"status": "Delivered"})

        resp = client.post(f"/api/shipping/{created['shipmentId']}/cancel")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Cannot cancel a delivered shipment"

    def test_cancel_missing(self, client, db_session):
        assert client.post("/api/shipping/999999/cancel").status_code == 404

    def test_status_update(self, client, db_session):
        created = _create(client)
        resp = client.post(f"/api/shipping/{created['shipmentId']}/status", json={"status": "Delivered"})
        assert resp.status_code == 200
        assert resp.get_json()["actualDelivery"] is not None

    @pytest.mark.parametrize("status", ["Created", "Teleported", None])
    def test_status_update_rejected(self, client, db_session, status):
        created = _create(client)
        resp = client.post(f"/api/shipping/{created['shipmentId']}/status", json={"status": status})
        assert resp.status_code == 400

    def test_history(self, client, db_session):
        first = _create(client)
        second = _create(client)
        _create(client, toAddress=address(email="carol@example.com"))

        resp = client.get("/api/shipping?customerEmail=bob@example.com")
        assert resp.status_code == 200
        assert [s["id"] for s in resp.get_json()] == [second["shipmentId"], first["shipmentId"]]
        assert len(client.get("/api/shipping").get_json()) == 3
