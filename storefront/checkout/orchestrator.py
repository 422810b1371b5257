"""Checkout orchestration: cart -> payment session -> hosted payment page."""
from dataclasses import dataclass
from typing import Callable, Optional

from storefront.cart.models import Cart
from storefront.errors import (
    ERROR_CHECKOUT_IN_PROGRESS,
    ERROR_REDIRECT_FAILED,
    ERROR_SESSION_CREATION_FAILED,
)
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from .client import CheckoutSessionClient
from .constants import CheckoutErrorKind, CheckoutState
from .redirect import HostedCheckoutRedirector

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutFailure:
    kind: CheckoutErrorKind
    message: str


@dataclass(frozen=True)
class CheckoutOutcome:
    """Result of one ``checkout`` call."""
    state: CheckoutState
    session_id: Optional[str] = None
    url: Optional[str] = None
    failure: Optional[CheckoutFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


ErrorReporter = Callable[[CheckoutFailure], None]


class CheckoutOrchestrator:
    """
    Drives one shopper session from "reviewing cart" to the payment page.

    ``loading`` is true only while an attempt is in flight and is cleared on
    every exit path. Failures never escape ``checkout``: they are logged,
    passed to ``report_error`` and returned in the outcome, and the
    orchestrator goes back to idle so the shopper can retry.
    """

    def __init__(
        self,
        session_client: CheckoutSessionClient,
        redirector: HostedCheckoutRedirector,
        report_error: Optional[ErrorReporter] = None,
    ):
        self._session_client = session_client
        self._redirector = redirector
        self._report_error = report_error
        self._state = CheckoutState.IDLE
        self._loading = False
        self.last_failure: Optional[CheckoutFailure] = None

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    async def checkout(self, cart: Cart) -> CheckoutOutcome:
        """
        Create a payment session for the cart and redirect to it.

        An empty cart is sent as-is; the payment provider rejects it.
        """
        if self._loading:
            logger.warning("Checkout requested while another attempt is in flight")
            return CheckoutOutcome(
                state=self._state,
                failure=CheckoutFailure(CheckoutErrorKind.IN_PROGRESS, ERROR_CHECKOUT_IN_PROGRESS),
            )

        # Cart is immutable; this is the snapshot the request is built from
        items = cart.items
        self._state = CheckoutState.REQUESTING
        self._loading = True
        self.last_failure = None

        try:
            try:
                result = await self._session_client.create_session(items)
            except Exception as e:
                logger.error(f"Checkout session creation raised: {e}", exc_info=True)
                return self._fail(CheckoutErrorKind.SESSION_CREATION_FAILED, ERROR_SESSION_CREATION_FAILED)

            if not result.ok:
                return self._fail(
                    CheckoutErrorKind.SESSION_CREATION_FAILED,
                    result.error or ERROR_SESSION_CREATION_FAILED,
                )

            self._state = CheckoutState.REDIRECTING
            logger.info("Redirecting to checkout session %s", sanitize_id_for_logging(result.session_id))

            try:
                redirect = await self._redirector.redirect_to_checkout(result.session_id, url=result.url)
            except Exception as e:
                logger.error(f"Redirect to checkout raised: {e}", exc_info=True)
                return self._fail(CheckoutErrorKind.REDIRECT_FAILED, ERROR_REDIRECT_FAILED)

            # Absent error means the hand-off went through
            error = redirect.error
            if error is not None:
                return self._fail(CheckoutErrorKind.REDIRECT_FAILED, error.message or ERROR_REDIRECT_FAILED)

            return CheckoutOutcome(
                state=CheckoutState.REDIRECTING,
                session_id=result.session_id,
                url=redirect.url,
            )
        finally:
            self._loading = False

    def _fail(self, kind: CheckoutErrorKind, message: str) -> CheckoutOutcome:
        failure = CheckoutFailure(kind=kind, message=message)
        self._state = CheckoutState.FAILED
        self._loading = False
        self.last_failure = failure
        logger.warning("Checkout failed (%s): %s", kind.value, sanitize_string_for_logging(message))

        if self._report_error is not None:
            try:
                self._report_error(failure)
            except Exception as e:
                logger.error(f"Checkout error reporter raised: {e}", exc_info=True)

        self._state = CheckoutState.IDLE
        return CheckoutOutcome(state=CheckoutState.FAILED, failure=failure)
