"""Tests for API endpoints"""
import json
from types import SimpleNamespace
from unittest.mock import Mock

import httpx
import pytest

from api.index import app
from storefront.cart import CartRegistry, get_cart_registry
from storefront.cart import service as service_module
from storefront.checkout import CheckoutSessionClient
from storefront.payments import PaymentSessionService
from storefront.payments import sessions as sessions_module
from storefront.routers import deps
from storefront.routers.deps import CART_SESSION_COOKIE, get_checkout_orchestrator, get_payment_session_service


def _use_session_endpoint(monkeypatch, handler):
    """Route the orchestrator's session requests to ``handler``."""
    session_client = CheckoutSessionClient(
        "http://shop.test/api/checkout_sessions",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    monkeypatch.setattr(deps, "_session_client", session_client)
    return session_client


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_empty_cart_issues_session_cookie(client):
    response = client.get("/api/cart")

    assert response.status_code == 200
    assert CART_SESSION_COOKIE in response.cookies
    data = response.json()
    assert data["is_empty"] is True
    assert data["total"] == 0.0
    assert data["total_display"] == "$0.00"
    assert data["shipping_display"] == "FREE"
    assert data["tax"] is None


def test_add_to_cart_groups_duplicates(client, sample_product):
    client.post("/api/cart/items", json=sample_product)
    response = client.post("/api/cart/items", json=sample_product)

    assert response.status_code == 200
    data = response.json()
    assert data["total_items"] == 2
    assert data["total"] == 1998.0
    assert data["total_display"] == "$1,998.00"
    assert len(data["items"]) == 1
    line = data["items"][0]
    assert line["id"] == "prod-iphone"
    assert line["quantity"] == 2
    assert line["total_price"] == 1998.0
    assert line["metadata"]["slug"]["current"] == "iphone-14-pro"


def test_add_to_cart_validates_product(client):
    response = client.post("/api/cart/items", json={"_id": "prod-1", "title": "Bad", "price": -1})
    assert response.status_code == 422

    response = client.post("/api/cart/items", json={"title": "No id", "price": 1})
    assert response.status_code == 422


def test_remove_one_unit(client, sample_product):
    client.post("/api/cart/items", json=sample_product)
    client.post("/api/cart/items", json=sample_product)

    response = client.delete("/api/cart/items/prod-iphone")

    assert response.status_code == 200
    assert response.json()["items"][0]["quantity"] == 1


def test_remove_unknown_item_is_noop(client, sample_product):
    client.post("/api/cart/items", json=sample_product)

    response = client.delete("/api/cart/items/prod-missing")

    assert response.status_code == 200
    assert response.json()["total_items"] == 1


def test_clear_cart(client, sample_product):
    client.post("/api/cart/items", json=sample_product)

    response = client.delete("/api/cart")

    assert response.status_code == 200
    assert response.json()["is_empty"] is True


def test_carts_are_per_session(client, sample_product):
    client.post("/api/cart/items", json=sample_product)

    client.cookies.clear()
    response = client.get("/api/cart")

    assert response.json()["is_empty"] is True


def test_end_session_discards_cart(client, sample_product):
    client.post("/api/cart/items", json=sample_product)

    response = client.delete("/api/session")

    assert response.status_code == 200
    assert response.json()["ended"] is True


def test_checkout_returns_payment_url(client, sample_product, monkeypatch):
    sent = []

    async def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "cs_test_1", "url": "https://checkout.test/cs_test_1"})

    _use_session_endpoint(monkeypatch, handler)
    client.post("/api/cart/items", json=sample_product)

    response = client.post("/api/cart/checkout")

    assert response.status_code == 200
    data = response.json()
    assert data["session_id"] == "cs_test_1"
    assert data["url"] == "https://checkout.test/cs_test_1"
    assert data["state"] == "redirecting"
    assert [item["_id"] for item in sent[0]["items"]] == ["prod-iphone"]


def test_checkout_without_provider_url_uses_template(client, sample_product, monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "cs_test_2"})

    _use_session_endpoint(monkeypatch, handler)
    client.post("/api/cart/items", json=sample_product)

    response = client.post("/api/cart/checkout")

    assert response.json()["url"] == "https://pay.test/c/cs_test_2"


def test_checkout_server_error_returns_502(client, sample_product, monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"statusCode": 500, "message": "Invalid API Key provided"})

    _use_session_endpoint(monkeypatch, handler)
    client.post("/api/cart/items", json=sample_product)

    response = client.post("/api/cart/checkout")

    assert response.status_code == 502
    assert response.json()["detail"] == "Invalid API Key provided"


def test_checkout_in_flight_returns_409(client):
    app.dependency_overrides[get_checkout_orchestrator] = lambda: Mock(loading=True)

    response = client.post("/api/cart/checkout")

    assert response.status_code == 409


def test_create_checkout_session(client, sample_product, monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id="cs_test_abc", url="https://checkout.stripe.com/c/pay/cs_test_abc")

    monkeypatch.setattr(sessions_module.stripe.checkout.Session, "create", fake_create)

    response = client.post("/api/checkout_sessions", json={"items": [sample_product, sample_product]})

    assert response.status_code == 200
    assert response.json() == {"id": "cs_test_abc", "url": "https://checkout.stripe.com/c/pay/cs_test_abc"}
    assert calls[0]["line_items"][0]["quantity"] == 2
    assert calls[0]["line_items"][0]["price_data"]["unit_amount"] == 99900


def test_create_checkout_session_empty_items(client):
    response = client.post("/api/checkout_sessions", json={"items": []})

    assert response.status_code == 500
    assert response.json()["statusCode"] == 500
    assert response.json()["message"] == "Cart is empty"


def test_create_checkout_session_not_configured(client, sample_product, make_settings):
    service = PaymentSessionService(make_settings(stripe_secret_key=""))
    app.dependency_overrides[get_payment_session_service] = lambda: service

    response = client.post("/api/checkout_sessions", json={"items": [sample_product]})

    assert response.status_code == 500
    assert response.json()["statusCode"] == 500
    assert "STRIPE_SECRET_KEY" in response.json()["message"]


def test_create_checkout_session_provider_error(client, sample_product, monkeypatch):
    def fake_create(**kwargs):
        raise RuntimeError("Stripe unreachable")

    monkeypatch.setattr(sessions_module.stripe.checkout.Session, "create", fake_create)

    response = client.post("/api/checkout_sessions", json={"items": [sample_product]})

    assert response.status_code == 500
    assert response.json() == {"statusCode": 500, "message": "Internal server error"}


@pytest.mark.parametrize("path", ["/api/cart", "/api/health"])
def test_get_endpoints_respond(client, path):
    assert client.get(path).status_code == 200


def test_reading_cart_does_not_grow_registry(client):
    """Cookieless visitors who only read their cart leave nothing behind."""
    registry = get_cart_registry()
    before = len(registry)

    for _ in range(50):
        client.cookies.clear()
        assert client.get("/api/cart").status_code == 200

    assert len(registry) == before


def test_idle_orchestrators_are_evicted(monkeypatch):
    now = [0.0]
    registry = CartRegistry(ttl_seconds=10, clock=lambda: now[0])
    monkeypatch.setattr(service_module, "_cart_registry", registry)
    monkeypatch.setattr(deps, "_orchestrators", {})

    registry.get("stale")
    registry.get("paying")
    deps._orchestrators["stale"] = Mock(loading=False)
    in_flight = Mock(loading=True)
    deps._orchestrators["paying"] = in_flight

    now[0] += 11

    assert deps.evict_idle_orchestrators() == 1
    assert "stale" not in deps._orchestrators
    assert deps._orchestrators["paying"] is in_flight
    assert len(registry) == 0
