"""Pytest configuration and fixtures"""
import os
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

# Set test environment variables
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_key")
os.environ.setdefault("STOREFRONT_URL", "http://shop.test")
os.environ.setdefault("CHECKOUT_SESSIONS_URL", "http://shop.test/api/checkout_sessions")
os.environ.setdefault("HOSTED_CHECKOUT_URL", "https://pay.test/c/{session_id}")

from storefront.cart import Item  # noqa: E402
from storefront.config import get_settings  # noqa: E402


@pytest.fixture
def sample_product():
    """Sample catalog document"""
    return {
        "_id": "prod-iphone",
        "_type": "product",
        "title": "iPhone 14 Pro",
        "price": 999.0,
        "slug": {"_type": "slug", "current": "iphone-14-pro"},
        "image": [{"_type": "image", "asset": {"_ref": "image-abc123-800x800-png"}}],
    }


@pytest.fixture
def make_item():
    """Factory for cart items"""
    def _make(item_id: str = "prod-1", price=100, title: str | None = None, **metadata) -> Item:
        return Item(id=item_id, title=title or f"Product {item_id}", price=price, metadata=metadata)
    return _make


@pytest.fixture
def make_settings():
    """Settings with selected fields overridden"""
    def _make(**overrides):
        return replace(get_settings(), **overrides)
    return _make


@pytest.fixture
def client():
    """Test client; the app lifespan resets carts and shared clients on exit"""
    from api.index import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
