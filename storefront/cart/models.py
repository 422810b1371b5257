"""Cart models with Decimal-based pricing.

A cart is an immutable snapshot. Every mutation returns a new ``Cart``, so a
total or grouped view derived from one snapshot never changes underneath the
caller.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import sum_money, to_decimal

logger = get_logger(__name__)

# Catalog documents carry their identity under "_id"
CATALOG_ID_KEY = "_id"


@dataclass(frozen=True)
class Item:
    """A catalog product as held in the cart.

    ``id`` comes from the catalog and is never generated here. ``metadata``
    holds everything else the catalog sent (image references, slugs, ...)
    and is passed through untouched.
    """
    id: str
    title: str
    price: Decimal
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict:
        """Convert to the catalog document shape."""
        data = dict(self.metadata)
        data.update({
            CATALOG_ID_KEY: self.id,
            "title": self.title,
            "price": str(self.price),
        })
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        """Create from a catalog document (``_id``) or a plain dict (``id``)."""
        item_id = data.get(CATALOG_ID_KEY) or data.get("id")
        if not item_id:
            raise KeyError(CATALOG_ID_KEY)
        metadata = {
            key: value
            for key, value in data.items()
            if key not in (CATALOG_ID_KEY, "id", "title", "price")
        }
        return cls(
            id=str(item_id),
            title=str(data.get("title", "")),
            price=to_decimal(data.get("price")),
            metadata=metadata,
        )


@dataclass(frozen=True)
class Cart:
    """Ordered sequence of items; quantity is represented by repetition."""
    items: Tuple[Item, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def add(self, item: Item) -> "Cart":
        """Return a cart with ``item`` appended. Duplicates are kept."""
        return Cart(items=self.items + (item,))

    def remove(self, item_id: str) -> "Cart":
        """Return a cart without the first item whose id is ``item_id``.

        Removes one unit, not every unit of that id. An unknown id is
        logged and the same cart is returned.
        """
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return Cart(items=self.items[:index] + self.items[index + 1:])
        logger.warning(
            "Can't remove product %s as it's not in cart",
            sanitize_id_for_logging(item_id),
        )
        return self

    def clear(self) -> "Cart":
        return Cart()

    @property
    def total(self) -> Decimal:
        """Sum of item prices; Decimal("0") for an empty cart."""
        return sum_money(item.price for item in self.items)

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def grouped_by_identity(self) -> dict[str, list[Item]]:
        """Map each item id to all cart items sharing it, in cart order."""
        grouped: dict[str, list[Item]] = {}
        for item in self.items:
            grouped.setdefault(item.id, []).append(item)
        return grouped

    def count(self, item_id: str) -> int:
        """Quantity of ``item_id`` in the cart."""
        return sum(1 for item in self.items if item.id == item_id)

    def to_dict(self) -> dict:
        """Serialize as a checkout session request body."""
        return {"items": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Cart":
        return cls(items=tuple(Item.from_dict(item) for item in data.get("items", [])))
