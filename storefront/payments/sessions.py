"""Payment Session Service - Stripe Checkout integration.

Turns a cart into a hosted Stripe Checkout session. Duplicate cart entries
are collapsed into one line item per product with a quantity.
"""
from typing import Any, Optional

import stripe

from storefront.cart.models import Cart
from storefront.config import Settings, get_settings
from storefront.errors import ERROR_CART_EMPTY, ERROR_PAYMENT_NOT_CONFIGURED
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import to_minor_units

logger = get_logger(__name__)


class PaymentSessionService:
    """Creates hosted checkout sessions with Stripe."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _validate_config(self) -> str:
        """Return the API key or raise if Stripe is not configured."""
        if not self.settings.is_payment_configured:
            raise ValueError(f"{ERROR_PAYMENT_NOT_CONFIGURED} (STRIPE_SECRET_KEY)")
        return self.settings.stripe_secret_key

    def build_line_items(self, cart: Cart) -> list[dict[str, Any]]:
        """
        One line item per (product id, unit price), quantity = number of
        cart entries at that price.

        The same product added at two prices becomes two line items, so the
        amount charged always equals ``cart.total``.
        """
        line_items = []
        for items in cart.grouped_by_identity().values():
            by_price: dict[int, list] = {}
            for item in items:
                by_price.setdefault(to_minor_units(item.price), []).append(item)

            for unit_amount, priced in by_price.items():
                first = priced[0]
                line_items.append({
                    "price_data": {
                        "currency": self.settings.checkout_currency,
                        "product_data": {"name": first.title or first.id},
                        "unit_amount": unit_amount,
                    },
                    "quantity": len(priced),
                })
        return line_items

    def create_session(self, cart: Cart) -> dict[str, Any]:
        """
        Create a Stripe Checkout session for the cart.

        Returns:
            Dict with the session ``id`` and hosted page ``url``

        Raises:
            ValueError: Stripe is not configured or the cart is empty
            stripe.StripeError: Stripe rejected the request
        """
        api_key = self._validate_config()
        if cart.is_empty:
            raise ValueError(ERROR_CART_EMPTY)

        session = stripe.checkout.Session.create(
            api_key=api_key,
            mode="payment",
            payment_method_types=["card"],
            line_items=self.build_line_items(cart),
            success_url=self.settings.success_url,
            cancel_url=self.settings.cancel_url,
        )
        logger.info(
            "Created checkout session %s for %d items",
            sanitize_id_for_logging(session.id),
            cart.total_items,
        )
        return {"id": session.id, "url": session.url}
