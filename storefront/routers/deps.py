"""
Shared Dependencies for Routers

Lazy-loaded singletons and the shopper-session cookie.
"""

import uuid
from typing import Dict, Optional

from fastapi import Depends, Request, Response

from storefront.cart import CartStore, get_cart_registry
from storefront.checkout import CheckoutOrchestrator, CheckoutSessionClient, HostedCheckoutRedirector
from storefront.config import get_settings
from storefront.payments import PaymentSessionService

CART_SESSION_COOKIE = "cart_session"


# ==================== LAZY SINGLETONS ====================

_session_client: Optional[CheckoutSessionClient] = None
_redirector: Optional[HostedCheckoutRedirector] = None
_payment_session_service: Optional[PaymentSessionService] = None
_orchestrators: Dict[str, CheckoutOrchestrator] = {}


def get_session_client() -> CheckoutSessionClient:
    """Get or create the shared CheckoutSessionClient"""
    global _session_client
    if _session_client is None:
        settings = get_settings()
        _session_client = CheckoutSessionClient(
            endpoint=settings.checkout_sessions_url,
            timeout=settings.http_timeout_seconds,
        )
    return _session_client


def get_redirector() -> HostedCheckoutRedirector:
    """Get or create the shared HostedCheckoutRedirector"""
    global _redirector
    if _redirector is None:
        _redirector = HostedCheckoutRedirector(url_template=get_settings().hosted_checkout_url)
    return _redirector


def get_payment_session_service() -> PaymentSessionService:
    """Get or create PaymentSessionService singleton"""
    global _payment_session_service
    if _payment_session_service is None:
        _payment_session_service = PaymentSessionService()
    return _payment_session_service


# ==================== SHOPPER SESSION ====================

def get_cart_session_id(request: Request, response: Response) -> str:
    """Read the shopper session id from its cookie, issuing one on first visit."""
    session_id = request.cookies.get(CART_SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(CART_SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return session_id


def get_cart_store(session_id: str = Depends(get_cart_session_id)) -> CartStore:
    return get_cart_registry().get(session_id)


def evict_idle_orchestrators() -> int:
    """Drop orchestrators whose cart has expired, keeping any still in flight."""
    registry = get_cart_registry()
    registry.evict_expired()
    idle = [
        session_id
        for session_id, orchestrator in _orchestrators.items()
        if session_id not in registry and not orchestrator.loading
    ]
    for session_id in idle:
        del _orchestrators[session_id]
    return len(idle)


def get_checkout_orchestrator(session_id: str = Depends(get_cart_session_id)) -> CheckoutOrchestrator:
    """One orchestrator per shopper session so `loading` is tracked per cart."""
    evict_idle_orchestrators()
    orchestrator = _orchestrators.get(session_id)
    if orchestrator is None:
        orchestrator = CheckoutOrchestrator(
            session_client=get_session_client(),
            redirector=get_redirector(),
        )
        _orchestrators[session_id] = orchestrator
    return orchestrator


def end_shopper_session(session_id: str) -> bool:
    """Drop the session's cart and checkout state."""
    _orchestrators.pop(session_id, None)
    return get_cart_registry().discard(session_id)


async def close_dependencies() -> None:
    """Release shared clients and forget singletons (shutdown and tests)."""
    global _session_client, _redirector, _payment_session_service
    if _session_client is not None:
        await _session_client.aclose()
    _session_client = None
    _redirector = None
    _payment_session_service = None
    _orchestrators.clear()
    get_cart_registry().reset()
