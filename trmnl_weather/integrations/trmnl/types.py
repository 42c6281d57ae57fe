from typing import Any

import pydantic


class HourlyRecord(pydantic.BaseModel):
    """Average temperature for one hour, starting at `dateutc` (epoch ms)."""

    tempf: float
    dateutc: int


class MergeVariables(pydantic.BaseModel):
    """The weather data used for templating in the TRMNL plugin."""

    latest: dict[str, Any]
    historical: list[HourlyRecord]


class WebhookPayload(pydantic.BaseModel):
    """The webhook data format expected by TRMNL."""

    merge_variables: MergeVariables
