"""Checkout module: session client, redirect, orchestrator."""
from .constants import CheckoutErrorKind, CheckoutState
from .client import CheckoutSessionClient, CheckoutSessionResult
from .redirect import HostedCheckoutRedirector, RedirectError, RedirectResult
from .orchestrator import CheckoutFailure, CheckoutOrchestrator, CheckoutOutcome

__all__ = [
    "CheckoutErrorKind",
    "CheckoutState",
    "CheckoutSessionClient",
    "CheckoutSessionResult",
    "HostedCheckoutRedirector",
    "RedirectError",
    "RedirectResult",
    "CheckoutFailure",
    "CheckoutOrchestrator",
    "CheckoutOutcome",
]
