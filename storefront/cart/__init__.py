"""Cart package: models, per-session store, and registry."""
from .models import Item, Cart
from .service import CartStore, CartRegistry, get_cart_registry

__all__ = [
    "Item",
    "Cart",
    "CartStore",
    "CartRegistry",
    "get_cart_registry",
]
