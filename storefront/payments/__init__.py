"""Payment provider integration."""
from .sessions import PaymentSessionService

__all__ = ["PaymentSessionService"]
