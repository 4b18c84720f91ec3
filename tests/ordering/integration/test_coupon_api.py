"""Integration tests for Coupon API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.routes import coupon_router
from shared.api import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(coupon_router)
    return TestClient(app)


def _create(client, **overrides):
    payload = {"code": "save10", "discount_type": "percentage", "discount_value": 10}
    payload.update(overrides)
    return client.post("/coupons", json=payload)


class TestCouponCrud:
    def test_create(self, client):
        response = _create(client, applicable_products=["P1"])

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == 201
        assert body["data"]["code"] == "SAVE10"
        assert body["data"]["applicable_products"] == ["P1"]

    def test_duplicate(self, client):
        _create(client)
        response = _create(client)
        assert response.status_code == 409
        assert response.json()["kind"] == "Conflict"

    def test_invalid_discount_type(self, client):
        response = _create(client, discount_type="bogo")
        assert response.status_code == 400

    def test_percentage_over_100(self, client):
        response = _create(client, discount_value=150)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidInput"

    def test_past_expiry(self, client):
        response = _create(client, expiry_date="2000-01-01T00:00:00+00:00")
        assert response.status_code == 400

    def test_edit(self, client):
        coupon_id = _create(client).json()["data"]["coupon_id"]
        response = client.put(f"/coupons/{coupon_id}", json={"description": "Ten off", "applicable_products": ["P2"]})

        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Ten off"
        assert response.json()["data"]["applicable_products"] == ["P2"]

    def test_edit_missing(self, client):
        response = client.put("/coupons/cpn-404", json={"description": "x"})
        assert response.status_code == 404

    def test_delete_and_list(self, client):
        coupon_id = _create(client).json()["data"]["coupon_id"]
        _create(client, code="KEEP20", discount_value=20)

        assert client.delete(f"/coupons/{coupon_id}").status_code == 200

        codes = [c["code"] for c in client.get("/coupons").json()["data"]]
        assert codes == ["KEEP20"]

    def test_list_filters(self, client):
        _create(client, code="ALPHA")
        _create(client, code="BETA", is_active=False)

        response = client.get("/coupons", params={"active": "true"})
        assert [c["code"] for c in response.json()["data"]] == ["ALPHA"]

        response = client.get("/coupons", params={"search": "bet"})
        assert [c["code"] for c in response.json()["data"]] == ["BETA"]


class TestValidateCoupon:
    def test_valid(self, client):
        _create(client)
        response = client.post(
            "/coupons/validate",
            json={"code": "save10", "user_id": "user-001", "cart_total": 500, "items": [{"product_id": "P1"}]},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["discount"] == 50.0
        assert data["final_total"] == 450.0

    def test_below_minimum(self, client):
        _create(client, min_order_value=1000)
        response = client.post("/coupons/validate", json={"code": "SAVE10", "user_id": "user-001", "cart_total": 500})

        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidState"
        assert response.json()["details"]["min_order_value"] == 1000

    def test_unknown(self, client):
        response = client.post("/coupons/validate", json={"code": "NOPE", "user_id": "user-001", "cart_total": 500})
        assert response.status_code == 404

    def test_missing_total(self, client):
        _create(client)
        response = client.post("/coupons/validate", json={"code": "SAVE10", "user_id": "user-001", "cart_total": 0})
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidInput"
