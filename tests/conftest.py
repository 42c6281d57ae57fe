from collections.abc import AsyncIterator, Callable, Iterator
from typing import Any

import httpx
import pytest
import structlog

from trmnl_weather.integrations.ambient import AmbientClient
from trmnl_weather.integrations.trmnl import TrmnlWebhookClient

WEBHOOK_URL = "https://usetrmnl.com/api/custom_plugins/0a1b2c3d-test"

# Floor to the hour of 1700000000000 (2023-11-14 22:00 UTC)
HOUR = 1699999200000
ONE_HOUR = 3600000


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """
    The CLI configures structlog to log to the (captured) stderr, which is
    closed once the command finishes.
    """

    yield
    structlog.reset_defaults()


#######################
# Ambient Weather API #
#######################


@pytest.fixture
def mac_address() -> str:
    return "00:0E:C6:20:0F:7B"


@pytest.fixture
def last_data() -> dict[str, Any]:
    return {
        "dateutc": 1700000400000,
        "tempf": 71.6,
        "feelsLike": 71.6,
        "humidity": 44,
        "dailyrainin": 0.0,
        "windspeedmph": 1.3,
        "baromrelin": 30.12,
        "date": "2023-11-14T22:20:00.000Z",
    }


@pytest.fixture
def devices(mac_address: str, last_data: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        {
            "macAddress": "00:0E:C6:AA:BB:CC",
            "info": {"name": "Garage"},
            "lastData": {"dateutc": 1700000400000, "tempf": 50.0},
        },
        {
            "macAddress": mac_address,
            "info": {"name": "Backyard", "location": "Home"},
            "lastData": last_data,
        },
    ]


@pytest.fixture
def device_data() -> list[dict[str, Any]]:
    # Newest first, like the API returns them
    return [
        {"dateutc": HOUR + ONE_HOUR + 1100000, "tempf": 69.0},
        {"dateutc": HOUR + ONE_HOUR + 800000, "tempf": 68.0},
        {"dateutc": 1700000001000, "tempf": 72.0},
        {"dateutc": 1700000000000, "tempf": 70.0},
        {"dateutc": 1699999000000, "humidity": 45},
    ]


##################
# HTTP transport #
##################


@pytest.fixture
def sent_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def routes(
    mac_address: str,
    devices: list[dict[str, Any]],
    device_data: list[dict[str, Any]],
) -> dict[str, tuple[int, Any]]:
    """
    Status code and response data for each path. Strings are sent as is,
    anything else as JSON. Exceptions are raised.
    """

    return {
        "/v1/devices": (200, devices),
        f"/v1/devices/{mac_address}": (200, device_data),
        "/api/custom_plugins/0a1b2c3d-test": (200, {"message": None}),
    }


@pytest.fixture
def handler(
    sent_requests: list[httpx.Request], routes: dict[str, tuple[int, Any]]
) -> Callable[[httpx.Request], httpx.Response]:
    def _handler(request: httpx.Request) -> httpx.Response:
        sent_requests.append(request)
        status_code, data = routes.get(request.url.path, (404, "Not found"))
        if isinstance(data, Exception):
            raise data
        if isinstance(data, str):
            return httpx.Response(status_code, text=data)
        return httpx.Response(status_code, json=data)

    return _handler


@pytest.fixture
async def http_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def ambient_client(http_client: httpx.AsyncClient) -> AmbientClient:
    return AmbientClient(
        application_key="application-key", api_key="api-key", client=http_client
    )


@pytest.fixture
def webhook_client(http_client: httpx.AsyncClient) -> TrmnlWebhookClient:
    return TrmnlWebhookClient(webhook_url=WEBHOOK_URL, client=http_client)
