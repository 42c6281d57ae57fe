"""
Process configuration, supplied as command line flags or environment
variables.
"""

import re
from datetime import timedelta
from typing import Any

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

from .integrations.ambient import MAX_RESULTS_LIMIT
from .integrations.common import DEFAULT_TIMEOUT_SECONDS

ENV_PREFIX = "TRMNL_WTHR_SVR"

DEFAULT_INTERVAL = timedelta(minutes=15)

# One day of five minute readings, which is also the most the API returns
DEFAULT_RESULTS_LIMIT = MAX_RESULTS_LIMIT

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as "15m", "1h30m" or "90s". A plain number is
    taken to be seconds.
    """

    value = value.strip()
    try:
        return timedelta(seconds=float(value))
    except (ValueError, OverflowError):
        pass

    if not value or _DURATION_PART.sub("", value):
        raise ValueError(f"Invalid duration: {value!r}")

    return sum(
        (
            float(amount) * _DURATION_UNITS[unit]
            for amount, unit in _DURATION_PART.findall(value)
        ),
        timedelta(),
    )


def env(name: str) -> str:
    """Name of the environment variable for a setting."""
    return f"{ENV_PREFIX}_{name.upper()}"


class Settings(BaseModel):
    """Everything needed to load data from Ambient Weather and push it to TRMNL."""

    application_key: str = Field(min_length=1, repr=False)
    api_key: str = Field(min_length=1, repr=False)
    device: str = Field(min_length=1)
    webhook_url: AnyHttpUrl | None = None
    results_limit: int = Field(
        default=DEFAULT_RESULTS_LIMIT, ge=1, le=MAX_RESULTS_LIMIT
    )
    interval: timedelta = DEFAULT_INTERVAL
    request_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("interval", mode="before")
    @classmethod
    def parse_interval(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("interval")
    @classmethod
    def check_interval(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("interval must be positive")
        return v
