"""Common exception classes for integrations."""

import httpx

# Longest response body excerpt kept on an error
MAX_BODY_EXCERPT = 512


def excerpt(body: str, *, limit: int = MAX_BODY_EXCERPT) -> str:
    """
    Truncate a response body so it can be safely logged.
    """

    if len(body) <= limit:
        return body
    return f"{body[:limit]}... ({len(body) - limit} more characters)"


class IntegrationAPIError(Exception):
    """
    Base exception for all integration API errors.

    Carries the HTTP status code (when a response was received) and an
    excerpt of the response body.
    """

    def __init__(
        self, message: str, *, status_code: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = excerpt(body)

    def __str__(self) -> str:
        message = super().__str__()
        if self.status_code is not None:
            message = f"{message} (status {self.status_code})"
        if self.body:
            message = f"{message}: {self.body}"
        return message


class SourceError(IntegrationAPIError):
    """The weather data source failed or returned an unexpected response."""

    pass


class WebhookError(IntegrationAPIError):
    """Delivering the payload to the webhook failed."""

    pass


class RateLimited(IntegrationAPIError):
    """The remote end responded with 429 Too Many Requests."""

    pass


class SourceRateLimited(SourceError, RateLimited):
    """The weather data source is rate limiting us."""

    pass


class WebhookRateLimited(WebhookError, RateLimited):
    """The webhook is rate limiting us."""

    pass


class NotFound(IntegrationAPIError):
    """The requested device is not in the source response."""

    pass


def is_rate_limited(exc: BaseException) -> bool:
    """
    Check if an error is a 429 Too Many Requests error.
    """

    if isinstance(exc, RateLimited):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429
    return getattr(exc, "status_code", None) == 429
