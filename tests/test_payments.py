from types import SimpleNamespace
from typing import Any, Dict, List

import pytest  # type: ignore[reportMissingImports]
import stripe

from storefront.cart import Cart
from storefront.payments import PaymentSessionService
from storefront.payments import sessions as sessions_module
from storefront.services.money import to_minor_units


def _capture_session_create(monkeypatch, calls: List[Dict[str, Any]], session_id: str = "cs_test_abc"):
    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    monkeypatch.setattr(sessions_module.stripe.checkout.Session, "create", fake_create)


def test_line_items_grouped_by_product(make_item, make_settings):
    service = PaymentSessionService(make_settings(checkout_currency="usd"))
    cart = Cart().add(make_item("a", 999.0, title="iPhone")).add(make_item("b", 0.5)).add(make_item("a", 999.0, title="iPhone"))

    line_items = service.build_line_items(cart)

    assert line_items == [
        {
            "price_data": {"currency": "usd", "product_data": {"name": "iPhone"}, "unit_amount": 99900},
            "quantity": 2,
        },
        {
            "price_data": {"currency": "usd", "product_data": {"name": "Product b"}, "unit_amount": 50},
            "quantity": 1,
        },
    ]


def test_line_items_charge_cart_total_when_prices_differ(make_item, make_settings):
    """The same product added at two prices is charged at both prices."""
    service = PaymentSessionService(make_settings())
    cart = Cart().add(make_item("a", 10)).add(make_item("a", 20)).add(make_item("b", 5))

    line_items = service.build_line_items(cart)

    charged = sum(line["price_data"]["unit_amount"] * line["quantity"] for line in line_items)
    assert charged == to_minor_units(cart.total) == 3500
    assert [(line["price_data"]["unit_amount"], line["quantity"]) for line in line_items] == [
        (1000, 1),
        (2000, 1),
        (500, 1),
    ]


def test_create_session_calls_stripe(monkeypatch, make_item, make_settings):
    calls: List[Dict[str, Any]] = []
    _capture_session_create(monkeypatch, calls)
    service = PaymentSessionService(make_settings(stripe_secret_key="sk_test_xyz", storefront_url="http://shop.test"))

    session = service.create_session(Cart().add(make_item("a", 10)))

    assert session == {"id": "cs_test_abc", "url": "https://checkout.stripe.com/c/pay/cs_test_abc"}
    assert len(calls) == 1
    assert calls[0]["api_key"] == "sk_test_xyz"
    assert calls[0]["mode"] == "payment"
    assert calls[0]["success_url"] == "http://shop.test/success?session_id={CHECKOUT_SESSION_ID}"
    assert calls[0]["cancel_url"] == "http://shop.test/checkout"
    assert calls[0]["line_items"][0]["quantity"] == 1


def test_create_session_requires_config(monkeypatch, make_item, make_settings):
    calls: List[Dict[str, Any]] = []
    _capture_session_create(monkeypatch, calls)
    service = PaymentSessionService(make_settings(stripe_secret_key=""))

    with pytest.raises(ValueError):
        service.create_session(Cart().add(make_item("a")))

    assert calls == []


def test_create_session_rejects_empty_cart(monkeypatch, make_settings):
    calls: List[Dict[str, Any]] = []
    _capture_session_create(monkeypatch, calls)
    service = PaymentSessionService(make_settings())

    with pytest.raises(ValueError):
        service.create_session(Cart())

    assert calls == []


def test_create_session_propagates_stripe_errors(monkeypatch, make_item, make_settings):
    def fake_create(**kwargs):
        raise stripe.InvalidRequestError("No such price", param="line_items")

    monkeypatch.setattr(sessions_module.stripe.checkout.Session, "create", fake_create)
    service = PaymentSessionService(make_settings())

    with pytest.raises(stripe.StripeError):
        service.create_session(Cart().add(make_item("a")))
