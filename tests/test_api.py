from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_cache_service, get_lock_service
from app.data.database import get_db
from app.main import create_app
from app.services.balance_service import BalanceService


@pytest.fixture
def client(session_factory, lock_service, cache_service, bus):
    app = create_app(message_bus=bus, create_tables=False)

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_cache_service] = lambda: cache_service

    with TestClient(app) as client:
        yield client

    assert bus.closed


def _register(client, name):
    resp = client.post("/api/v1/users/", json={"name": name, "email": f"{name}@example.com"})
    assert resp.status_code == 201
    return resp.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_shopping_flow(client, bus):
    uid = _register(client, "ala")
    assert Decimal(client.post(f"/api/v1/balance/deposit?user_id={uid}", json={"amount": "100.00"}).json()["balance"]) == 100

    product = client.post("/api/v1/products/", json={"name": "Kubek", "price": "12.50", "stock": 3}).json()
    cart = client.post(f"/api/v1/carts/items?user_id={uid}", json={"product_id": product["id"], "quantity": 2}).json()
    assert Decimal(cart["total_price"]) == Decimal("25.00")

    resp = client.post(f"/api/v1/checkout/?user_id={uid}", json={"payment_method": "balance"})
    assert resp.status_code == 201
    order_id = resp.json()["order_id"]

    resp = client.post(f"/api/v1/payments/pay?user_id={uid}", json={"order_id": order_id})
    assert resp.status_code == 200
    assert resp.json()["payment_status"] == "completed"
    assert bus.published == [("order.status", {"order_id": order_id, "status": "paid"})]

    assert Decimal(client.get(f"/api/v1/balance/?user_id={uid}").json()["balance"]) == Decimal("75.00")

    order = client.get(f"/api/v1/orders/{order_id}?user_id={uid}").json()
    assert [(i["product_id"], i["quantity"]) for i in order["items"]] == [(product["id"], 2)]
    assert order["payment"]["payment_status"] == "completed"
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 1


def test_transfer_response_shape(client):
    a = _register(client, "ala")
    b = _register(client, "ola")
    client.post(f"/api/v1/balance/deposit?user_id={a}", json={"amount": "200"})
    client.post(f"/api/v1/balance/deposit?user_id={b}", json={"amount": "10"})

    body = client.post(f"/api/v1/balance/transfer?user_id={a}", json={"recipient_id": b, "amount": "50"}).json()

    assert body["from"]["user_id"] == a
    assert Decimal(body["from"]["balance"]) == Decimal("150.00")
    assert body["to"]["user_id"] == b
    assert Decimal(body["to"]["balance"]) == Decimal("60.00")


def test_domain_errors_map_to_status_codes(client, lock_service):
    uid = _register(client, "ala")

    assert client.get("/api/v1/users/404").status_code == 404
    assert client.post(f"/api/v1/balance/withdraw?user_id={uid}", json={"amount": "1"}).status_code == 400
    assert client.post(f"/api/v1/balance/transfer?user_id={uid}", json={"recipient_id": uid, "amount": "1"}).status_code == 400
    assert client.post(f"/api/v1/checkout/?user_id={uid}", json={"payment_method": "balance"}).status_code == 400
    assert client.post(f"/api/v1/payments/pay?user_id={uid}", json={"order_id": 404}).status_code == 404

    lock_service.acquire(f"balance_lock:{uid}", 5)
    assert client.post(f"/api/v1/balance/deposit?user_id={uid}", json={"amount": "1"}).status_code == 409


def test_request_validation(client):
    uid = _register(client, "ala")

    assert client.post(f"/api/v1/balance/deposit?user_id={uid}", json={"amount": "-1"}).status_code == 422
    assert client.post(f"/api/v1/checkout/?user_id={uid}", json={"payment_method": "cash"}).status_code == 422


def test_deposit_returns_balance_from_the_write(client, monkeypatch):
    uid = _register(client, "ala")

    def no_reread(self, user_id):
        raise AssertionError("deposit should not read the balance again")

    monkeypatch.setattr(BalanceService, "check_balance", no_reread)

    resp = client.post(f"/api/v1/balance/deposit?user_id={uid}", json={"amount": "30.00"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["balance"]) == Decimal("30.00")
    resp = client.post(f"/api/v1/balance/deposit?user_id={uid}", json={"amount": "12.50"})
    assert Decimal(resp.json()["balance"]) == Decimal("42.50")
