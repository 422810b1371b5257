"""In-memory cart state per shopper session."""
import time
from decimal import Decimal
from typing import Callable, Dict, Optional

from storefront.config import get_settings
from storefront.logging import get_logger, sanitize_id_for_logging
from .models import Cart, Item

logger = get_logger(__name__)


class CartStore:
    """
    Holds the current cart snapshot for one shopper session.

    Every mutation swaps in a new immutable ``Cart``; readers holding an
    earlier snapshot (e.g. an in-flight checkout) keep seeing it unchanged.
    """

    def __init__(self, cart: Optional[Cart] = None):
        self._cart = cart if cart is not None else Cart()

    @property
    def cart(self) -> Cart:
        """Current snapshot."""
        return self._cart

    def add(self, item: Item) -> Cart:
        """Append ``item``. Caller guarantees a valid id and a non-negative price."""
        self._cart = self._cart.add(item)
        logger.debug("Added %s to cart (%d items)", sanitize_id_for_logging(item.id), self._cart.total_items)
        return self._cart

    def remove(self, item_id: str) -> Cart:
        """Remove one unit of ``item_id``; unknown ids are a logged no-op."""
        self._cart = self._cart.remove(item_id)
        return self._cart

    def clear(self) -> Cart:
        self._cart = self._cart.clear()
        return self._cart

    @property
    def total(self) -> Decimal:
        return self._cart.total

    def grouped_by_identity(self) -> dict[str, list[Item]]:
        return self._cart.grouped_by_identity()


# Abandoned carts expire after a day without access
CART_TTL_SECONDS = 24 * 60 * 60


class CartRegistry:
    """
    Process-wide map of shopper session id -> CartStore.

    A session's cart is created empty on first access and dropped by
    ``discard`` when the session ends, or by the sweep in ``get`` once it
    has gone ``ttl_seconds`` without being touched. Nothing is persisted.
    """

    def __init__(self, ttl_seconds: float = CART_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._stores: Dict[str, CartStore] = {}
        self._last_access: Dict[str, float] = {}

    def get(self, session_id: str) -> CartStore:
        """Return the session's store, creating it if needed."""
        now = self.clock()
        self.evict_expired(now)
        store = self._stores.get(session_id)
        if store is None:
            store = CartStore()
            self._stores[session_id] = store
            logger.debug("Started cart for session %s", sanitize_id_for_logging(session_id))
        self._last_access[session_id] = now
        return store

    def peek(self, session_id: str) -> Optional[CartStore]:
        """Return the session's store without creating one."""
        store = self._stores.get(session_id)
        if store is not None:
            self._last_access[session_id] = self.clock()
        return store

    def evict_expired(self, now: Optional[float] = None) -> int:
        """Drop carts idle for longer than ``ttl_seconds``. Returns how many."""
        if now is None:
            now = self.clock()
        expired = [
            session_id
            for session_id, last_access in self._last_access.items()
            if now - last_access > self.ttl_seconds
        ]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info("Evicted %d abandoned carts", len(expired))
        return len(expired)

    def discard(self, session_id: str) -> bool:
        """Drop the session's cart. Returns False if there was none."""
        self._last_access.pop(session_id, None)
        return self._stores.pop(session_id, None) is not None

    def reset(self) -> None:
        self._stores.clear()
        self._last_access.clear()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)


# Singleton instance
_cart_registry: Optional[CartRegistry] = None


def get_cart_registry() -> CartRegistry:
    """Get CartRegistry singleton."""
    global _cart_registry
    if _cart_registry is None:
        _cart_registry = CartRegistry(ttl_seconds=get_settings().cart_ttl_seconds)
    return _cart_registry
