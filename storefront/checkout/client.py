"""HTTP client for the checkout session-creation endpoint."""
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx

from storefront.errors import ERROR_SESSION_CREATION_FAILED, ERROR_SESSION_ID_MISSING
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.cart.models import Item
from .constants import SERVER_ERROR_KEY, SERVER_ERROR_STATUS

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutSessionResult:
    """Either a session id or an error message, never both."""
    session_id: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.session_id)

    @classmethod
    def failure(cls, message: str) -> "CheckoutSessionResult":
        return cls(error=message or ERROR_SESSION_CREATION_FAILED)

    @classmethod
    def from_response(cls, payload: Any) -> "CheckoutSessionResult":
        """
        Interpret a session endpoint body.

        Success is ``{"id": ...}`` (optionally with ``url``). Server errors
        come back as ``{"statusCode": 500, "message": ...}``. Anything
        without a usable id is a failure.
        """
        if not isinstance(payload, dict):
            return cls.failure(ERROR_SESSION_CREATION_FAILED)

        if payload.get(SERVER_ERROR_KEY) == SERVER_ERROR_STATUS:
            return cls.failure(str(payload.get("message") or ERROR_SESSION_CREATION_FAILED))

        session_id = payload.get("id")
        if not isinstance(session_id, str) or not session_id:
            return cls.failure(ERROR_SESSION_ID_MISSING)

        url = payload.get("url")
        return cls(session_id=session_id, url=url if isinstance(url, str) and url else None)


class CheckoutSessionClient:
    """Posts cart items to the session-creation endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def create_session(self, items: Sequence[Item]) -> CheckoutSessionResult:
        """
        Request a checkout session for ``items``.

        The body is serialized before the request is sent, so later cart
        changes cannot leak into it. Transport errors and non-JSON bodies
        come back as failed results instead of exceptions.
        """
        body = {"items": [item.to_dict() for item in items]}
        client = await self._get_http_client()

        try:
            response = await client.post(self.endpoint, json=body)
        except httpx.HTTPError as e:
            logger.warning("Checkout session request failed: %s", sanitize_string_for_logging(str(e)))
            return CheckoutSessionResult.failure(ERROR_SESSION_CREATION_FAILED)

        # Error responses still carry a JSON body describing the failure
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Checkout session endpoint returned non-JSON body (HTTP %s)", response.status_code)
            return CheckoutSessionResult.failure(ERROR_SESSION_CREATION_FAILED)

        result = CheckoutSessionResult.from_response(payload)
        if not result.ok:
            logger.warning(
                "Checkout session not created (HTTP %s): %s",
                response.status_code,
                sanitize_string_for_logging(result.error),
            )
        return result

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
