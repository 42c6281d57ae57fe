from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# A single set of readings from a station, keyed by Ambient's field names
# (tempf, feelsLike, humidity, dailyrainin, dateutc, ...)
Reading = dict[str, Any]


class DeviceInfo(BaseModel):
    """User supplied metadata for a station."""

    name: str | None = None
    location: str | None = None

    model_config = ConfigDict(extra="allow")


class Device(BaseModel):
    """A station as returned by the /devices endpoint."""

    mac_address: str = Field(alias="macAddress")
    info: DeviceInfo | None = None
    last_data: Reading = Field(default_factory=dict, alias="lastData")

    model_config = ConfigDict(populate_by_name=True)
