"""Storefront settings read from the environment."""
import os
from dataclasses import dataclass
from functools import cache

from dotenv import load_dotenv

DEFAULT_STOREFRONT_URL = "http://localhost:3000"
DEFAULT_CHECKOUT_SESSIONS_URL = "http://localhost:8000/api/checkout_sessions"
DEFAULT_HOSTED_CHECKOUT_URL = "https://checkout.stripe.com/c/pay/{session_id}"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Built once per process by :func:`get_settings`; tests clear the cache
    after changing the environment.
    """
    stripe_secret_key: str
    storefront_url: str
    checkout_sessions_url: str
    hosted_checkout_url: str
    checkout_currency: str
    http_timeout_seconds: float
    cart_ttl_seconds: float = 24 * 60 * 60

    @property
    def success_url(self) -> str:
        return f"{self.storefront_url.rstrip('/')}/success?session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.storefront_url.rstrip('/')}/checkout"

    @property
    def is_payment_configured(self) -> bool:
        return bool(self.stripe_secret_key)


def _get_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@cache
def get_settings() -> Settings:
    """Load settings from the environment (and a local .env file, if any)."""
    load_dotenv()
    return Settings(
        stripe_secret_key=os.environ.get("STRIPE_SECRET_KEY", ""),
        storefront_url=os.environ.get("STOREFRONT_URL", DEFAULT_STOREFRONT_URL),
        checkout_sessions_url=os.environ.get("CHECKOUT_SESSIONS_URL", DEFAULT_CHECKOUT_SESSIONS_URL),
        hosted_checkout_url=os.environ.get("HOSTED_CHECKOUT_URL", DEFAULT_HOSTED_CHECKOUT_URL),
        checkout_currency=os.environ.get("CHECKOUT_CURRENCY", "usd").lower(),
        http_timeout_seconds=_get_float("HTTP_TIMEOUT_SECONDS", 10.0),
        cart_ttl_seconds=_get_float("CART_TTL_SECONDS", 24 * 60 * 60),
    )
