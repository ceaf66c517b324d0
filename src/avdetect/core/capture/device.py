"""Device detector for enumerating capture devices.

This module provides the DeviceDetector class which selects the probes for
the host platform, runs them one after another, feeds their output to the
matching parsers and writes the merged device list to disk.
"""

from __future__ import annotations

import json
import logging
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from avdetect.core.capture.parsers import (
    parse_audio_sources,
    parse_avfoundation,
    parse_dshow,
    parse_v4l2,
)
from avdetect.core.errors import NoDevicesFoundError, ProbeLaunchError
from avdetect.core.models import Device, HostPlatform
from avdetect.core.settings.manager import DetectorSettings

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"

DEFAULT_OUTPUT_FILE = "devices.json"


@dataclass(frozen=True)
class Probe:
    """One external command and the parser that understands its output.

    Attributes:
        name: Short label used in log messages
        command: Full argv of the command
        stream: Which output stream carries the listing ("stdout" or "stderr")
        parser: Function turning the captured text into devices
    """

    name: str
    command: Tuple[str, ...]
    stream: str
    parser: Callable[[str], List[Device]]

    @property
    def tool(self) -> str:
        return self.command[0]


ProbeRunner = Callable[[Probe], str]


def detect_host_platform(system: Optional[str] = None) -> HostPlatform:
    """Map ``platform.system()`` to the platform family used for probing.

    Anything that is neither Linux nor Windows is probed through avfoundation.

    Args:
        system: System name to classify (defaults to ``platform.system()``)

    Returns:
        Detected HostPlatform
    """
    if system is None:
        system = platform.system()

    if system == "Linux":
        return HostPlatform.LINUX
    if system == "Windows":
        return HostPlatform.WINDOWS
    return HostPlatform.MACOS


def _ffmpeg_list_devices(ffmpeg: str, input_format: str) -> Tuple[str, ...]:
    return (
        ffmpeg,
        "-hide_banner",
        "-f",
        input_format,
        "-list_devices",
        "true",
        "-i",
        "dummy",
    )


def probes_for(
    host: HostPlatform, ffmpeg: str = "ffmpeg", v4l2_ctl: str = "v4l2-ctl"
) -> List[Probe]:
    """Get the probes to run on a platform.

    Args:
        host: Platform family
        ffmpeg: FFmpeg executable
        v4l2_ctl: v4l2-ctl executable (Linux only)

    Returns:
        Probes in the order their results are concatenated
    """
    if host is HostPlatform.LINUX:
        return [
            Probe("v4l2", (v4l2_ctl, "--list-devices"), STDOUT, parse_v4l2),
            Probe("sources", (ffmpeg, "-hide_banner", "-sources"), STDERR, parse_audio_sources),
        ]
    if host is HostPlatform.WINDOWS:
        return [Probe("dshow", _ffmpeg_list_devices(ffmpeg, "dshow"), STDERR, parse_dshow)]
    return [
        Probe(
            "avfoundation",
            _ffmpeg_list_devices(ffmpeg, "avfoundation"),
            STDERR,
            parse_avfoundation,
        )
    ]


def run_probe(probe: Probe) -> str:
    """Run a probe to completion and return the text of its listing stream.

    The exit status is not checked: FFmpeg always fails on the ``dummy``
    input after printing the device list.

    Args:
        probe: Probe to run

    Returns:
        Captured stdout or stderr, as selected by ``probe.stream``

    Raises:
        ProbeLaunchError: If the command could not be started
    """
    logger.debug(f"Running {probe.name} probe: {' '.join(probe.command)}")

    try:
        result = subprocess.run(
            list(probe.command),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.error(f"Could not start {probe.tool}: {e}")
        raise ProbeLaunchError(probe.tool) from e

    logger.debug(f"{probe.name} probe exited with status {result.returncode}")
    output = result.stdout if probe.stream == STDOUT else result.stderr
    return output or ""


class DeviceDetector:
    """Detects audio and video capture devices on the host.

    The probes are chosen once, when the detector is created, from the host
    platform and the configured tool paths.
    """

    def __init__(
        self,
        host: Optional[HostPlatform] = None,
        settings: Optional[DetectorSettings] = None,
        runner: ProbeRunner = run_probe,
    ):
        """Initialize the DeviceDetector.

        Args:
            host: Platform to probe for (defaults to the running host)
            settings: Tool paths and output settings (defaults to DetectorSettings())
            runner: Function running one probe and returning its output
        """
        self._host = host if host is not None else detect_host_platform()
        self._settings = settings if settings is not None else DetectorSettings()
        self._runner = runner
        self._probes = probes_for(
            self._host,
            ffmpeg=self._settings.ffmpeg_path,
            v4l2_ctl=self._settings.v4l2_ctl_path,
        )
        logger.info(f"DeviceDetector initialized on platform: {self._host.value}")

    @property
    def host(self) -> HostPlatform:
        return self._host

    @property
    def probes(self) -> Sequence[Probe]:
        return tuple(self._probes)

    def detect(self) -> List[Device]:
        """Run every probe and collect the devices they report.

        Returns:
            Devices from all probes, in probe order

        Raises:
            ProbeLaunchError: If a probe command could not be started
            NoDevicesFoundError: If no probe reported any device
        """
        logger.info("Detecting devices...")
        devices: List[Device] = []

        for probe in self._probes:
            output = self._runner(probe)
            found = probe.parser(output)
            logger.info(f"Found {len(found)} device(s) with {probe.name}")
            for device in found:
                logger.debug(f"Found device: {device}")
            devices.extend(found)

        if not devices:
            logger.error("No audio or video devices found")
            raise NoDevicesFoundError()

        logger.info(f"Found {len(devices)} device(s)")
        return devices

    def save(self, devices: Sequence[Device], path: Union[str, Path, None] = None) -> Path:
        """Write devices to a JSON file.

        Args:
            devices: Devices to write
            path: Target file (defaults to the configured output file)

        Returns:
            Absolute path of the written file

        Raises:
            IOError: If the file cannot be written
        """
        target = Path(path if path is not None else self._settings.output_file).absolute()

        try:
            target.parent.mkdir(parents=True, exist_ok=True)

            # Write to temporary file first, then rename (atomic operation)
            temp_file = target.with_suffix(target.suffix + ".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                f.write(devices_to_json(devices))
            temp_file.replace(target)

        except OSError as e:
            logger.error(f"Failed to save devices: {e}")
            raise IOError(f"Failed to save devices: {e}") from e

        logger.info(f"Saved {len(devices)} device(s) to {target}")
        return target

    def detect_and_save(self, path: Union[str, Path, None] = None) -> Path:
        """Detect devices and write them to a JSON file.

        Returns:
            Absolute path of the written file
        """
        return self.save(self.detect(), path)


def devices_to_json(devices: Sequence[Device]) -> str:
    """Serialize devices as indented JSON, leaving out absent optional fields."""
    return json.dumps([device.to_dict() for device in devices], indent=2, ensure_ascii=False)


def devices_from_json(text: str) -> List[Device]:
    """Load devices written by :func:`devices_to_json`."""
    return [Device.from_dict(item) for item in json.loads(text)]
