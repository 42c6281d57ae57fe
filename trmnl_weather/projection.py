from collections.abc import Sequence

from .integrations.ambient import Device, Reading
from .integrations.common import NotFound

# The subset of the latest readings sent to TRMNL
LATEST_FIELDS = ("tempf", "feelsLike", "humidity", "dailyrainin", "dateutc")


def project_latest(devices: Sequence[Device], mac_address: str) -> Reading:
    """
    Pick out the latest readings of the device with the given MAC address,
    keeping only the fields in LATEST_FIELDS. Fields the device did not
    report are left out.
    """

    if not devices:
        raise NotFound("Received zero device records")

    for device in devices:
        if device.mac_address == mac_address:
            return {
                field: device.last_data[field]
                for field in LATEST_FIELDS
                if field in device.last_data
            }

    raise NotFound(f"No device data found for device MAC: {mac_address}")
