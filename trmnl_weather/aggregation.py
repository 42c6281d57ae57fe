"""
Hourly aggregation of historical station readings.

The Ambient Weather API returns one reading every five minutes, which is far
more data than a TRMNL display needs (and more than fits in a webhook
payload). Readings are reduced to one average temperature per UTC hour.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .integrations.ambient import Reading
from .integrations.trmnl import HourlyRecord

TEMPERATURE_FIELD = "tempf"
TIMESTAMP_FIELD = "dateutc"

MILLISECONDS_PER_HOUR = 60 * 60 * 1000

# Timestamps are signed 64-bit milliseconds
MAX_TIMESTAMP = 2**63 - 1
MIN_TIMESTAMP = -(2**63)


class ParseError(ValueError):
    """A reading value could not be coerced to the expected type."""


def _coerce(value: Any) -> Decimal:
    """
    Coerce an int, float or numeric string to a finite Decimal.
    """

    # bool is a subclass of int, but True is not a temperature
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise ParseError(f"Unsupported value type: {type(value).__name__}")

    try:
        number = Decimal(value.strip() if isinstance(value, str) else value)
    except InvalidOperation as e:
        raise ParseError(f"Not a number: {value!r}") from e

    if not number.is_finite():
        raise ParseError(f"Not a finite number: {value!r}")

    return number


def coerce_timestamp(value: Any) -> int:
    """
    Coerce a timestamp in milliseconds since the epoch to an int.

    Fractional milliseconds are truncated. Values that don't fit in a signed
    64-bit integer are rejected.
    """

    number = _coerce(value)

    # Checked before int(), which would expand 1e999999999 digit by digit
    if number.adjusted() > 18:
        raise ParseError(f"Timestamp out of range: {value!r}")

    timestamp = int(number)
    if not MIN_TIMESTAMP <= timestamp <= MAX_TIMESTAMP:
        raise ParseError(f"Timestamp out of range: {value!r}")
    return timestamp


def coerce_temperature(value: Any) -> float:
    temperature = float(_coerce(value))
    # Finite decimals like 1e400 overflow to inf as a float
    if not math.isfinite(temperature):
        raise ParseError(f"Temperature out of range: {value!r}")
    return temperature


def floor_to_hour(timestamp_ms: int) -> int:
    """
    Truncate a millisecond timestamp to the start of its UTC hour.
    """

    return timestamp_ms - timestamp_ms % MILLISECONDS_PER_HOUR


def round_half_away_from_zero(value: float, ndigits: int = 1) -> float:
    """
    Round like most people expect, rather than Python's round half to even.
    """

    scale = 10**ndigits
    scaled = Decimal(value * scale).to_integral_value(rounding=ROUND_HALF_UP)
    return float(scaled) / scale


@dataclass
class HourBucket:
    """Running total of the temperatures measured in one hour."""

    start: int
    total: float = 0.0
    count: int = 0

    def add(self, temperature: float) -> None:
        self.total += temperature
        self.count += 1

    @property
    def average(self) -> float:
        return round_half_away_from_zero(self.total / self.count, 1)


def aggregate_hourly(readings: Iterable[Reading]) -> list[HourlyRecord]:
    """
    Reduce readings to one average temperature per UTC hour.

    Readings without a parseable temperature and timestamp are skipped. The
    input does not need to be sorted, the output is sorted by hour.
    """

    buckets: dict[int, HourBucket] = {}

    for reading in readings:
        if TEMPERATURE_FIELD not in reading or TIMESTAMP_FIELD not in reading:
            continue

        try:
            timestamp = coerce_timestamp(reading[TIMESTAMP_FIELD])
            temperature = coerce_temperature(reading[TEMPERATURE_FIELD])
        except ParseError:
            continue

        hour = floor_to_hour(timestamp)
        if hour not in buckets:
            buckets[hour] = HourBucket(start=hour)
        buckets[hour].add(temperature)

    return [
        HourlyRecord(tempf=bucket.average, dateutc=bucket.start)
        for _, bucket in sorted(buckets.items())
    ]
