"""
A single update: load data from Ambient Weather and push it to TRMNL.
"""

import asyncio

import structlog
from structlog.typing import FilteringBoundLogger

from .aggregation import aggregate_hourly
from .integrations.ambient import AmbientClient, Reading
from .integrations.trmnl import (
    HourlyRecord,
    MergeVariables,
    TrmnlWebhookClient,
    WebhookPayload,
)
from .projection import project_latest
from .utils import timed

logger = structlog.get_logger()

# Ambient Weather answers a second request within the same second with an
# immediate 429: "API requests are capped at 1 request/second for each user's
# apiKey and 3 requests/second per applicationKey."
REQUEST_PACING_SECONDS = 1.0

# Number of raw records included in debug logs
DEBUG_RECORDS = 10


async def get_latest(
    source: AmbientClient,
    *,
    mac_address: str,
    logger: FilteringBoundLogger = logger,
) -> Reading:
    """
    Load the most recent readings for the given device.
    """

    logger.info("Getting latest weather data", mac=mac_address)
    devices = await source.get_devices()
    logger.debug("Latest", records=[device.model_dump() for device in devices])
    return project_latest(devices, mac_address)


async def get_historical(
    source: AmbientClient,
    *,
    mac_address: str,
    limit: int,
    logger: FilteringBoundLogger = logger,
) -> list[HourlyRecord]:
    """
    Load past readings for the given device, reduced to hourly averages.
    """

    logger.info("Getting historical weather data", mac=mac_address, records=limit)
    readings = await source.get_device_data(mac_address=mac_address, limit=limit)
    logger.debug(
        "Historical (last 10 records only)",
        total_records=len(readings),
        last_records=readings[-DEBUG_RECORDS:],
    )

    historical = aggregate_hourly(readings)
    logger.info(
        "Bucketed historical data",
        original_count=len(readings),
        bucketed_count=len(historical),
    )
    return historical


async def collect_payload(
    source: AmbientClient,
    *,
    mac_address: str,
    limit: int,
    pacing_delay: float = REQUEST_PACING_SECONDS,
    logger: FilteringBoundLogger = logger,
) -> WebhookPayload:
    """
    Assemble latest and historical data into the webhook data format.
    """

    latest = await get_latest(source, mac_address=mac_address, logger=logger)

    # Two requests are never allowed within the same second
    await asyncio.sleep(pacing_delay)

    historical = await get_historical(
        source, mac_address=mac_address, limit=limit, logger=logger
    )

    return WebhookPayload(
        merge_variables=MergeVariables(latest=latest, historical=historical)
    )


async def run_update(
    source: AmbientClient,
    webhook: TrmnlWebhookClient,
    *,
    mac_address: str,
    limit: int,
    pacing_delay: float = REQUEST_PACING_SECONDS,
    logger: FilteringBoundLogger = logger,
) -> None:
    """
    Run one update cycle, raising on any failure. Nothing is sent to the
    webhook unless all data was loaded successfully.
    """

    with timed("Update finished", logger=logger, mac=mac_address):
        payload = await collect_payload(
            source,
            mac_address=mac_address,
            limit=limit,
            pacing_delay=pacing_delay,
            logger=logger,
        )
        logger.debug(
            "Sending data to TRMNL",
            webhook=webhook.webhook_url,
            data=payload.model_dump(),
        )
        await webhook.send(payload)
