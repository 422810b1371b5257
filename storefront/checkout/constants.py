"""Checkout constants and enums."""
from enum import Enum


class CheckoutState(str, Enum):
    """
    Checkout attempt lifecycle.

    Flow:
        idle -> requesting -> redirecting
                           -> failed -> idle
                              redirecting -> failed -> idle

    - idle: no attempt in flight, cart may be mutated freely
    - requesting: session-creation call in flight (loading)
    - redirecting: session created, handed to the hosted payment page
    - failed: attempt ended with an error; the orchestrator drops back to idle
    """
    IDLE = "idle"
    REQUESTING = "requesting"
    REDIRECTING = "redirecting"
    FAILED = "failed"


class CheckoutErrorKind(str, Enum):
    """Why a checkout attempt did not reach the payment page."""
    SESSION_CREATION_FAILED = "session_creation_failed"
    REDIRECT_FAILED = "redirect_failed"
    IN_PROGRESS = "in_progress"


# The session endpoint signals server-side failure inside the JSON body
SERVER_ERROR_STATUS = 500
SERVER_ERROR_KEY = "statusCode"
