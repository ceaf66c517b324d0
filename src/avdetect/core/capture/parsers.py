"""Parsers for the text output of the device listing probes.

Each parser is a pure function taking the complete captured output of one
probe and returning the devices it describes, in source order. Lines that do
not have the expected shape are skipped; nothing in here raises on bad input.

Supported formats:

- ``ffmpeg -f dshow -list_devices true -i dummy`` (Windows)
- ``ffmpeg -f avfoundation -list_devices true -i dummy`` (macOS)
- ``v4l2-ctl --list-devices`` (Linux video)
- ``ffmpeg -sources`` (Linux audio: alsa, pulse, pipewire)
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from avdetect.core.models import Device, DeviceKind

logger = logging.getLogger(__name__)

# DirectShow
DSHOW_PREFIX = "[dshow @"
DSHOW_ALTERNATIVE_NAME = "Alternative name"
DSHOW_ALTERNATIVE_NAME_START = 'Alternative name "'
DSHOW_VIDEO_MARKER = "(video)"

# AVFoundation
AVFOUNDATION_VIDEO_HEADER = "AVFoundation video devices:"
AVFOUNDATION_AUDIO_HEADER = "AVFoundation audio devices:"
AVFOUNDATION_DEVICE_PATTERN = re.compile(r"\[(\d+)\]\s+(.+)")

# v4l2-ctl
V4L2_VIDEO_PATH_PREFIX = "/dev/video"

# ffmpeg -sources
SOURCES_HEADER = "Auto-detected sources for"
SOURCES_CANNOT_LIST = "Cannot list sources"
SOURCES_BACKENDS = ("alsa", "pulse", "pipewire")
UNKNOWN_BACKEND = "unknown"


def _split_lines(output: str) -> List[str]:
    return output.split("\n")


# ============================================================================
# DirectShow
# ============================================================================


def parse_dshow(output: str) -> List[Device]:
    """Parse the device list printed by FFmpeg's dshow input device.

    Device lines look like::

        [dshow @ 000001] "Integrated Camera" (video)
        [dshow @ 000001]   Alternative name "@device_pnp_\\\\?\\usb#vid_0000"

    The alternative name, when FFmpeg prints one, is always on the line right
    after its device, so only that single line is inspected.

    Args:
        output: Complete stderr of the probe

    Returns:
        Devices in the order they appear
    """
    lines = _split_lines(output)
    devices: List[Device] = []

    for index, raw_line in enumerate(lines):
        line = raw_line.strip()

        if (
            not line.startswith(DSHOW_PREFIX)
            or '"' not in line
            or DSHOW_ALTERNATIVE_NAME in line
        ):
            continue

        info = _extract_dshow_device(line)
        if info is None:
            logger.debug(f"Skipping malformed dshow line: {line!r}")
            continue
        kind, name = info

        alternative_name = None
        if index + 1 < len(lines):
            next_line = lines[index + 1].strip()
            if next_line.startswith(DSHOW_PREFIX) and DSHOW_ALTERNATIVE_NAME in next_line:
                alternative_name = _extract_dshow_alternative_name(next_line)

        devices.append(Device(kind=kind, name=name, alternative_name=alternative_name))

    return devices


def _extract_dshow_device(line: str) -> Optional[Tuple[DeviceKind, str]]:
    first_quote = line.find('"')
    last_quote = line.rfind('"')
    if first_quote == -1 or first_quote == last_quote:
        return None

    name = line[first_quote + 1 : last_quote]
    kind = DeviceKind.VIDEO if DSHOW_VIDEO_MARKER in line else DeviceKind.AUDIO
    return kind, name


def _extract_dshow_alternative_name(line: str) -> Optional[str]:
    start = line.find(DSHOW_ALTERNATIVE_NAME_START)
    if start == -1:
        return None

    start += len(DSHOW_ALTERNATIVE_NAME_START)
    end = line.find('"', start)
    return line[start:end] if end > start else None


# ============================================================================
# AVFoundation
# ============================================================================


def parse_avfoundation(output: str) -> List[Device]:
    """Parse the device list printed by FFmpeg's avfoundation input device.

    Devices are listed under a video section and then an audio section, each
    entry carrying the index avfoundation uses to address it::

        [AVFoundation indev @ 0x7f8] AVFoundation video devices:
        [AVFoundation indev @ 0x7f8] [0] FaceTime HD Camera
        [AVFoundation indev @ 0x7f8] AVFoundation audio devices:
        [AVFoundation indev @ 0x7f8] [0] MacBook Microphone

    Entries seen before any header are treated as video.

    Args:
        output: Complete stderr of the probe

    Returns:
        Devices in the order they appear
    """
    section = DeviceKind.VIDEO
    devices: List[Device] = []

    for line in _split_lines(output):
        if AVFOUNDATION_VIDEO_HEADER in line:
            section = DeviceKind.VIDEO
            continue
        if AVFOUNDATION_AUDIO_HEADER in line:
            section = DeviceKind.AUDIO
            continue

        match = AVFOUNDATION_DEVICE_PATTERN.search(line)
        if match is None:
            continue

        try:
            device_id = int(match.group(1))
        except ValueError:
            logger.debug(f"Skipping avfoundation line with bad index: {line!r}")
            continue

        devices.append(Device(kind=section, id=device_id, name=match.group(2).strip()))

    return devices


# ============================================================================
# v4l2-ctl
# ============================================================================


def parse_v4l2(output: str) -> List[Device]:
    """Parse ``v4l2-ctl --list-devices`` output.

    The listing groups device nodes under an unindented card name::

        Integrated Camera: Integrated C (usb-0000:00:14.0-8):
                /dev/video0
                /dev/video1
                /dev/media0

    Every group becomes one video device whose ``device_paths`` hold its
    ``/dev/videoN`` nodes in listing order. Other nodes are ignored.

    Args:
        output: Complete stdout of ``v4l2-ctl``

    Returns:
        One device per distinct group name
    """
    groups: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in _split_lines(output):
        stripped = line.strip()
        if not stripped:
            continue

        if not line[0].isspace() and stripped.endswith(":"):
            current = stripped.rstrip(":")
            groups.setdefault(current, [])
        elif stripped.startswith(V4L2_VIDEO_PATH_PREFIX) and current is not None:
            groups[current].append(stripped)

    return [
        Device(kind=DeviceKind.VIDEO, name=name, device_paths=tuple(paths))
        for name, paths in groups.items()
    ]


# ============================================================================
# ffmpeg -sources
# ============================================================================


def parse_audio_sources(output: str) -> List[Device]:
    """Parse the audio sources listed by ``ffmpeg -sources``.

    Only sections for alsa, pulse and pipewire are read. A section ends at the
    next header or at a ``Cannot list sources`` line::

        Auto-detected sources for pulse:
        * alsa_input.pci-0000_00_1f.3.analog-stereo [Built-in Audio Analog Stereo] (none)
          alsa_output.pci-0000_00_1f.3.analog-stereo.monitor [Monitor of Built-in Audio] (none)

    Monitor sources (loopback taps of outputs) are dropped.

    Args:
        output: Complete stderr of the probe

    Returns:
        Audio devices whose ``alternative_name`` is ``<backend>:<device id>``
    """
    devices: List[Device] = []
    backend: Optional[str] = None

    for raw_line in _split_lines(output):
        line = raw_line.strip()

        if line.startswith(SOURCES_HEADER):
            name = _extract_sources_backend(line)
            backend = name if name in SOURCES_BACKENDS else None
            continue
        if line.startswith(SOURCES_CANNOT_LIST):
            backend = None
            continue
        if backend is None or not line or line.startswith("Cannot list"):
            continue

        device = _parse_audio_source_line(line, backend)
        if device is not None:
            devices.append(device)

    return devices


def _extract_sources_backend(line: str) -> str:
    start = line.find("for ") + len("for ")
    end = line.find(":", start)
    return line[start:end] if end > start else UNKNOWN_BACKEND


def _parse_audio_source_line(line: str, backend: str) -> Optional[Device]:
    trimmed = line.lstrip("* ")
    if not trimmed:
        return None

    bracket_start = trimmed.find("[")
    bracket_end = trimmed.rfind("]")
    if bracket_start <= 0 or bracket_end <= bracket_start:
        logger.debug(f"Skipping malformed {backend} source line: {line!r}")
        return None

    device_id = trimmed[:bracket_start].strip()
    description = trimmed[bracket_start + 1 : bracket_end]

    if is_monitor_source(description):
        logger.debug(f"Skipping {backend} monitor source: {device_id}")
        return None

    return Device(
        kind=DeviceKind.AUDIO,
        name=description,
        alternative_name=f"{backend}:{device_id}",
    )


def is_monitor_source(description: str) -> bool:
    """Check whether a source description names an output monitor.

    A description mentioning "monitor" is a monitor unless it also mentions
    "input" (case-insensitive).
    """
    lowered = description.lower()
    return "monitor" in lowered and "input" not in lowered
