from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from ..common import DEFAULT_TIMEOUT_SECONDS, BaseAPIClient
from .exceptions import AmbientAPIError, AmbientRateLimited
from .types import Device, Reading

logger = structlog.get_logger()

API_URL = "https://rt.ambientweather.net/v1"

# The API refuses to return more than this many records per request
MAX_RESULTS_LIMIT = 288

T = TypeVar("T")

_devices_adapter = TypeAdapter(list[Device])
_readings_adapter = TypeAdapter(list[dict[str, Any]])


class AmbientClient(BaseAPIClient):
    """
    A client for communicating with the Ambient Weather REST API.

    Note that the API allows at most one request per second per API key, so
    callers issuing several requests in a row have to pace them.
    """

    error_class = AmbientAPIError
    rate_limited_class = AmbientRateLimited

    def __init__(
        self,
        *,
        application_key: str,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        base_url: str = API_URL,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.application_key = application_key
        self.api_key = api_key
        self.base_url = base_url

    ###########
    # Devices #
    ###########

    async def get_devices(self) -> list[Device]:
        """
        List all devices on the account, with their most recent readings.
        """

        response = await self._api_request("devices")
        return self._decode(response, _devices_adapter)

    async def get_device_data(
        self, *, mac_address: str, limit: int, end_date: datetime | None = None
    ) -> list[Reading]:
        """
        List past readings for a single device, newest first.

        Args:
            mac_address: The MAC address of the station
            limit: Maximum number of readings to return (at most 288)
            end_date: Most recent time to return data for (defaults to now)

        Returns:
            The raw readings, one per sample
        """

        if not 1 <= limit <= MAX_RESULTS_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_RESULTS_LIMIT}")

        end_date = end_date or datetime.now(UTC)
        response = await self._api_request(
            f"devices/{mac_address}",
            params={
                "endDate": str(int(end_date.timestamp() * 1000)),
                "limit": str(limit),
            },
        )
        return self._decode(response, _readings_adapter)

    ####################
    # Internal helpers #
    ####################

    async def _api_request(
        self, endpoint: str, *, params: dict[str, str] | None = None
    ) -> httpx.Response:
        """
        Make an authenticated API request.
        """

        logger.debug("Ambient API request", endpoint=endpoint, params=params)
        return await self._send(
            "GET",
            f"{self.base_url}/{endpoint}",
            params={
                "applicationKey": self.application_key,
                "apiKey": self.api_key,
                **(params or {}),
            },
        )

    def _decode(self, response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        try:
            return adapter.validate_json(response.text)
        except ValidationError as e:
            raise AmbientAPIError(
                f"Unable to decode response: {e.error_count()} validation errors",
                status_code=response.status_code,
                body=response.text,
            ) from e
