from ..common.exceptions import WebhookError, WebhookRateLimited


class TrmnlWebhookError(WebhookError):
    """TRMNL rejected the webhook request, or it could not be sent."""

    pass


class TrmnlRateLimited(TrmnlWebhookError, WebhookRateLimited):
    """TRMNL limits how often a plugin's webhook may be updated."""

    pass
