"""Capture device detection.

This module provides the probe selection, the backend output parsers and the
DeviceDetector that ties them together.
"""

from avdetect.core.capture.device import (
    DeviceDetector,
    Probe,
    detect_host_platform,
    devices_from_json,
    devices_to_json,
    probes_for,
    run_probe,
)
from avdetect.core.capture.parsers import (
    parse_audio_sources,
    parse_avfoundation,
    parse_dshow,
    parse_v4l2,
)

__all__ = [
    "DeviceDetector",
    "Probe",
    "detect_host_platform",
    "devices_from_json",
    "devices_to_json",
    "parse_audio_sources",
    "parse_avfoundation",
    "parse_dshow",
    "parse_v4l2",
    "probes_for",
    "run_probe",
]
