"""
Storefront API Pydantic Models

Request bodies for cart and checkout endpoints.
"""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront.cart import Item


class CatalogProduct(BaseModel):
    """A catalog document as sent by the storefront frontend.

    Fields other than ``_id``, ``title`` and ``price`` (image, slug, ...) are
    kept and travel with the cart item as metadata.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    title: str = ""
    price: Decimal = Field(ge=0)

    def to_item(self) -> Item:
        return Item(
            id=self.id,
            title=self.title,
            price=self.price,
            metadata=dict(self.model_extra or {}),
        )


class CheckoutSessionRequest(BaseModel):
    items: list[CatalogProduct] = []
