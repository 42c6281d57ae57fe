from .client import MAX_RESULTS_LIMIT, AmbientClient
from .exceptions import AmbientAPIError, AmbientRateLimited
from .types import Device, DeviceInfo, Reading

__all__ = [
    "MAX_RESULTS_LIMIT",
    "AmbientAPIError",
    "AmbientClient",
    "AmbientRateLimited",
    "Device",
    "DeviceInfo",
    "Reading",
]
