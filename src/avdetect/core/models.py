"""Core data models for avdetect.

This module contains the enums and value objects shared by the backend
parsers, the device detector and the output writer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# ============================================================================
# Basic Enums
# ============================================================================


class DeviceKind(Enum):
    """Kind of capture device."""

    AUDIO = "Audio"
    VIDEO = "Video"

    def __str__(self) -> str:
        return self.value


class HostPlatform(Enum):
    """Host platform family, which decides the probes to run.

    - LINUX: v4l2-ctl for video and FFmpeg -sources for audio
    - WINDOWS: FFmpeg with the dshow input device
    - MACOS: FFmpeg with the avfoundation input device (also used for
      any other non-Linux Unix-like host)
    """

    LINUX = "linux"
    WINDOWS = "windows"
    MACOS = "macos"


# ============================================================================
# Device Models
# ============================================================================


@dataclass(frozen=True)
class Device:
    """A capture device discovered by one of the probes.

    Only ``kind`` and ``name`` are always present. The optional fields carry
    backend-specific addressing information:

    - ``id``: index used by avfoundation (``-i "0:1"``)
    - ``alternative_name``: dshow moniker, or ``backend:device`` for Linux audio
    - ``device_paths``: ``/dev/videoN`` nodes reported by v4l2-ctl
    """

    kind: DeviceKind
    name: str
    id: Optional[int] = None
    alternative_name: Optional[str] = None
    device_paths: Optional[Tuple[str, ...]] = None

    @property
    def is_video(self) -> bool:
        return self.kind is DeviceKind.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.kind is DeviceKind.AUDIO

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary.

        Absent optional fields are left out of the result instead of being
        written as ``None``.

        Returns:
            Dictionary with ``kind`` and ``name`` plus any populated optional field
        """
        data: Dict[str, Any] = {"kind": self.kind.value, "name": self.name}
        if self.id is not None:
            data["id"] = self.id
        if self.alternative_name is not None:
            data["alternativeName"] = self.alternative_name
        if self.device_paths is not None:
            data["devicePaths"] = list(self.device_paths)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Device:
        """Create from a dictionary produced by :meth:`to_dict`.

        Raises:
            ValueError: If ``kind`` is not a known device kind
            KeyError: If ``kind`` or ``name`` is missing
        """
        paths = data.get("devicePaths")
        return cls(
            kind=DeviceKind(data["kind"]),
            name=data["name"],
            id=data.get("id"),
            alternative_name=data.get("alternativeName"),
            device_paths=tuple(paths) if paths is not None else None,
        )

    def __str__(self) -> str:
        """String representation."""
        if self.id is not None:
            return f"[{self.kind}] {self.id}: {self.name}"
        if self.device_paths:
            return f"[{self.kind}] {self.name} ({', '.join(self.device_paths)})"
        if self.alternative_name is not None:
            return f"[{self.kind}] {self.name} ({self.alternative_name})"
        return f"[{self.kind}] {self.name}"
