"""
Cart Router

Shopping cart endpoints for the storefront. The cart lives in process memory
for the shopper session identified by the ``cart_session`` cookie.

Response format:
- Lines are grouped by product id with a quantity
- Amounts come as floats for calculations and as formatted USD for display
- Tax is not computed; ``tax`` is always null with a placeholder display
"""
from fastapi import APIRouter, Depends, Response

from storefront.cart import Cart, CartStore, get_cart_registry
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import format_money, sum_money, to_float
from .deps import CART_SESSION_COOKIE, end_shopper_session, get_cart_session_id, get_cart_store
from .models import CatalogProduct

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])

DISPLAY_CURRENCY = "USD"
SHIPPING_DISPLAY = "FREE"
TAX_PLACEHOLDER = "$ -"


def _format_cart_response(cart: Cart) -> dict:
    """Build the cart summary shown on the checkout page."""
    lines = []
    for item_id, items in cart.grouped_by_identity().items():
        first = items[0]
        line_total = sum_money(item.price for item in items)
        lines.append({
            "id": item_id,
            "title": first.title,
            "quantity": len(items),
            "unit_price": to_float(first.price),
            "total_price": to_float(line_total),
            "unit_price_display": format_money(first.price, DISPLAY_CURRENCY),
            "total_price_display": format_money(line_total, DISPLAY_CURRENCY),
            "metadata": dict(first.metadata),
        })

    total = cart.total
    return {
        "items": lines,
        "is_empty": cart.is_empty,
        "total_items": cart.total_items,
        "subtotal": to_float(total),
        "total": to_float(total),
        "subtotal_display": format_money(total, DISPLAY_CURRENCY),
        "total_display": format_money(total, DISPLAY_CURRENCY),
        "shipping_display": SHIPPING_DISPLAY,
        "tax": None,
        "tax_display": TAX_PLACEHOLDER,
        "currency": DISPLAY_CURRENCY,
    }


@router.get("/cart")
async def get_cart(session_id: str = Depends(get_cart_session_id)):
    """Get the shopper's cart summary. Reading never creates a cart."""
    store = get_cart_registry().peek(session_id)
    return _format_cart_response(store.cart if store is not None else Cart())


@router.post("/cart/items")
async def add_to_cart(product: CatalogProduct, store: CartStore = Depends(get_cart_store)):
    """Add one unit of a catalog product."""
    cart = store.add(product.to_item())
    logger.info("Added %s to cart", sanitize_id_for_logging(product.id))
    return _format_cart_response(cart)


@router.delete("/cart/items/{item_id}")
async def remove_cart_item(item_id: str, store: CartStore = Depends(get_cart_store)):
    """Remove one unit of a product. Unknown ids leave the cart unchanged."""
    return _format_cart_response(store.remove(item_id))


@router.delete("/cart")
async def clear_cart(store: CartStore = Depends(get_cart_store)):
    """Empty the cart."""
    return _format_cart_response(store.clear())


@router.delete("/session")
async def end_session(response: Response, session_id: str = Depends(get_cart_session_id)):
    """End the shopper session and discard its cart."""
    discarded = end_shopper_session(session_id)
    response.delete_cookie(CART_SESSION_COOKIE)
    return {"ended": discarded}
