"""Exceptions raised by device detection."""

from typing import Optional


class DeviceDetectionError(Exception):
    """Base class for device detection failures."""


class ProbeLaunchError(DeviceDetectionError):
    """An external probe command could not be started."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(
            message or f"Failed to start {tool}, make sure it is installed and in your PATH."
        )


class NoDevicesFoundError(DeviceDetectionError):
    """All probes ran but none of them reported a device."""

    def __init__(self, message: str = "No audio or video devices found on this system."):
        super().__init__(message)
