"""Storefront API Router.

Combines cart and checkout sub-routers under the /api prefix.
"""

from fastapi import APIRouter

from .cart import router as cart_router
from .checkout import router as checkout_router

router = APIRouter(prefix="/api")

router.include_router(cart_router)
router.include_router(checkout_router)

__all__ = ["router"]
