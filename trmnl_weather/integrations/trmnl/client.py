import httpx
import structlog

from ..common import DEFAULT_TIMEOUT_SECONDS, BaseAPIClient
from .exceptions import TrmnlRateLimited, TrmnlWebhookError
from .types import WebhookPayload

logger = structlog.get_logger()


class TrmnlWebhookClient(BaseAPIClient):
    """
    Pushes data to a TRMNL private plugin webhook.
    """

    error_class = TrmnlWebhookError
    rate_limited_class = TrmnlRateLimited

    def __init__(
        self,
        *,
        webhook_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.webhook_url = webhook_url

    async def send(self, payload: WebhookPayload) -> httpx.Response:
        """
        Serialize the payload and POST it to the webhook.

        The payload is sent exactly once, there are no retries.
        """

        content = payload.model_dump_json().encode()

        size = len(content)
        logger.info(
            "Webhook payload details",
            size_bytes=size,
            size_human=f"{size / 1024:.2f} KB",
        )

        response = await self._send(
            "POST",
            self.webhook_url,
            content=content,
            headers={"Content-Type": "application/json"},
        )

        logger.info("Webhook request sent successfully", status=response.status_code)
        return response
