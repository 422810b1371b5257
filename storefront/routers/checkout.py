"""
Checkout Endpoints

- POST /cart/checkout: run the checkout orchestrator for the shopper's cart
- POST /checkout_sessions: payment-session endpoint backed by Stripe
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from storefront.cart import Cart, CartStore
from storefront.checkout import CheckoutErrorKind, CheckoutOrchestrator
from storefront.checkout.constants import SERVER_ERROR_KEY, SERVER_ERROR_STATUS
from storefront.errors import ERROR_CHECKOUT_IN_PROGRESS, ERROR_INTERNAL
from storefront.logging import get_logger
from storefront.payments import PaymentSessionService
from .deps import get_cart_store, get_checkout_orchestrator, get_payment_session_service
from .models import CheckoutSessionRequest

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])


@router.post("/cart/checkout")
async def checkout_cart(
    store: CartStore = Depends(get_cart_store),
    orchestrator: CheckoutOrchestrator = Depends(get_checkout_orchestrator),
):
    """Create a payment session for the cart and return the payment page URL."""
    # The frontend disables its button while loading; this catches double submits
    if orchestrator.loading:
        raise HTTPException(status_code=409, detail=ERROR_CHECKOUT_IN_PROGRESS)

    outcome = await orchestrator.checkout(store.cart)

    if outcome.ok:
        return {
            "session_id": outcome.session_id,
            "url": outcome.url,
            "state": outcome.state.value,
        }

    if outcome.failure.kind == CheckoutErrorKind.IN_PROGRESS:
        raise HTTPException(status_code=409, detail=outcome.failure.message)
    raise HTTPException(status_code=502, detail=outcome.failure.message)


def _server_error(message: str) -> JSONResponse:
    """Error body in the shape the session client recognizes."""
    return JSONResponse(
        status_code=SERVER_ERROR_STATUS,
        content={SERVER_ERROR_KEY: SERVER_ERROR_STATUS, "message": message},
    )


@router.post("/checkout_sessions")
def create_checkout_session(
    request: CheckoutSessionRequest,
    service: PaymentSessionService = Depends(get_payment_session_service),
):
    """Create a hosted payment session for the posted items."""
    cart = Cart(items=tuple(product.to_item() for product in request.items))

    try:
        session = service.create_session(cart)
    except ValueError as e:
        logger.warning(f"Checkout session rejected: {e}")
        return _server_error(str(e))
    except Exception as e:
        logger.error(f"Failed to create checkout session: {e}", exc_info=True)
        return _server_error(ERROR_INTERNAL)

    return session
