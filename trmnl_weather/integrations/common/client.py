"""
Base API client.

Provides shared functionality for API clients:
- httpx.AsyncClient lifecycle management
- Async context manager support
- Translation of HTTP failures into integration errors
"""

from typing import Any, Self

import httpx
import structlog

from .exceptions import IntegrationAPIError

logger = structlog.get_logger()

# Hard upper bound on how long a single request may take
DEFAULT_TIMEOUT_SECONDS = 30.0


class BaseAPIClient:
    """
    Base class for API clients using httpx.

    Subclasses set `error_class` and `rate_limited_class` to the exceptions
    raised for failed requests and for 429 responses.

    An existing httpx.AsyncClient can be passed in, in which case the caller
    owns it and it is left open when this client is closed.
    """

    error_class: type[IntegrationAPIError] = IntegrationAPIError
    rate_limited_class: type[IntegrationAPIError] = IntegrationAPIError

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request, raising `error_class` on transport failures and
        non-2xx responses, and `rate_limited_class` on 429 responses.
        """

        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise self.error_class(f"{method} request failed: {e}") from e

        if response.status_code == 429:
            raise self.rate_limited_class(
                "Rate limited", status_code=response.status_code, body=response.text
            )

        if not response.is_success:
            raise self.error_class(
                "Unexpected response",
                status_code=response.status_code,
                body=response.text,
            )

        return response
