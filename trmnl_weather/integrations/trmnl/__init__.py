from .client import TrmnlWebhookClient
from .exceptions import TrmnlRateLimited, TrmnlWebhookError
from .types import HourlyRecord, MergeVariables, WebhookPayload

__all__ = [
    "HourlyRecord",
    "MergeVariables",
    "TrmnlRateLimited",
    "TrmnlWebhookClient",
    "TrmnlWebhookError",
    "WebhookPayload",
]
