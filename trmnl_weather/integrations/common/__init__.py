"""Common utilities for integrations."""

from .client import DEFAULT_TIMEOUT_SECONDS, BaseAPIClient
from .exceptions import (
    IntegrationAPIError,
    NotFound,
    RateLimited,
    SourceError,
    SourceRateLimited,
    WebhookError,
    WebhookRateLimited,
    is_rate_limited,
)

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "BaseAPIClient",
    "IntegrationAPIError",
    "NotFound",
    "RateLimited",
    "SourceError",
    "SourceRateLimited",
    "WebhookError",
    "WebhookRateLimited",
    "is_rate_limited",
]
