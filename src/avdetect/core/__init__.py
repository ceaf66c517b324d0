"""Core models, errors and device detection."""

from avdetect.core.errors import DeviceDetectionError, NoDevicesFoundError, ProbeLaunchError
from avdetect.core.models import Device, DeviceKind, HostPlatform

__all__ = [
    "Device",
    "DeviceDetectionError",
    "DeviceKind",
    "HostPlatform",
    "NoDevicesFoundError",
    "ProbeLaunchError",
]
