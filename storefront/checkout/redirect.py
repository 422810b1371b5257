"""Hand-off to the hosted payment page."""
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

from storefront.errors import ERROR_REDIRECT_FAILED, ERROR_SESSION_ID_MISSING
from storefront.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RedirectError:
    message: str = ""
    type: str = "redirect_error"


@dataclass(frozen=True)
class RedirectResult:
    """Outcome of a redirect. ``error`` is optional and usually absent."""
    url: Optional[str] = None
    error: Optional[RedirectError] = None


# Performs the actual navigation; returns an error instead of raising
Navigator = Callable[[str], Awaitable[Optional[RedirectError]]]


class HostedCheckoutRedirector:
    """
    Resolves the hosted checkout page for a session and navigates to it.

    Without a ``navigate`` callback the resolved URL is simply returned and
    the HTTP layer answers with it.
    """

    def __init__(self, url_template: str, navigate: Optional[Navigator] = None):
        self.url_template = url_template
        self.navigate = navigate

    def checkout_url(self, session_id: str) -> str:
        return self.url_template.format(session_id=quote(session_id, safe=""))

    async def redirect_to_checkout(self, session_id: str, url: Optional[str] = None) -> RedirectResult:
        """
        Send the shopper to the payment page for ``session_id``.

        ``url`` is the page address the provider returned with the session,
        if any; otherwise it is built from the template.
        """
        if not session_id:
            return RedirectResult(error=RedirectError(message=ERROR_SESSION_ID_MISSING))

        if not url:
            try:
                url = self.checkout_url(session_id)
            except (KeyError, IndexError, ValueError) as e:
                logger.error("Invalid hosted checkout URL template %r: %s", self.url_template, e)
                return RedirectResult(error=RedirectError(message=ERROR_REDIRECT_FAILED))

        if self.navigate is None:
            return RedirectResult(url=url)

        error = await self.navigate(url)
        return RedirectResult(url=url, error=error)
