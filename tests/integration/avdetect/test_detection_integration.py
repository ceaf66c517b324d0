"""Integration tests for device detection from probe output to devices.json.

Only the process boundary is faked: subprocess.run returns recorded tool
output, and platform.system reports the host being simulated.
"""

import json
import logging
import subprocess
from unittest.mock import patch

import pytest

from avdetect.__main__ import EX_DATAERR, EX_OK, EX_UNAVAILABLE, main

V4L2_LIST_DEVICES = """\
Integrated Camera: Integrated C (usb-0000:00:14.0-8):
\t/dev/video0
\t/dev/video1
\t/dev/media0

"""

FFMPEG_SOURCES = """\
Auto-detected sources for alsa:
Cannot list sources: Not implemented.
Auto-detected sources for pulse:
* default [Default ALSA Output (currently PipeWire Media Server)] (none)
  alsa_output.pci-0000_00_1f.3.analog-stereo.monitor [Monitor of Built-in Audio Analog Stereo] (none)
  alsa_input.pci-0000_00_1f.3.analog-stereo [Built-in Audio Analog Stereo] (none)
"""

FFMPEG_DSHOW = """\
[dshow @ 0000020d6c0b4c40] "Integrated Camera" (video)
[dshow @ 0000020d6c0b4c40]   Alternative name "@device_pnp_\\\\?\\usb#vid_04f2&pid_b6d9"
[dshow @ 0000020d6c0b4c40] "Microphone (Realtek(R) Audio)" (audio)
[dshow @ 0000020d6c0b4c40]   Alternative name "@device_cm_{33D9A762}\\wave_{D1E2}"
dummy: Immediate exit requested
"""

FFMPEG_AVFOUNDATION = """\
[AVFoundation indev @ 0x7f9b4c704a40] AVFoundation video devices:
[AVFoundation indev @ 0x7f9b4c704a40] [0] FaceTime HD Camera
[AVFoundation indev @ 0x7f9b4c704a40] [1] Capture screen 0
[AVFoundation indev @ 0x7f9b4c704a40] AVFoundation audio devices:
[AVFoundation indev @ 0x7f9b4c704a40] [0] MacBook Pro Microphone
"""


def completed(args, stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)


def fake_tools(args, **kwargs):
    """Answer each probe command the way the real tools would."""
    if args[0] == "v4l2-ctl":
        return completed(args, stdout=V4L2_LIST_DEVICES)
    if "-sources" in args:
        return completed(args, stderr=FFMPEG_SOURCES)
    if "dshow" in args:
        return completed(args, stderr=FFMPEG_DSHOW, returncode=1)
    if "avfoundation" in args:
        return completed(args, stderr=FFMPEG_AVFOUNDATION, returncode=1)
    raise AssertionError(f"unexpected command: {args}")


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    """Run in an empty directory with no user settings and restore logging afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "avdetect.core.settings.manager.SettingsManager._get_default_config_dir",
        lambda self: tmp_path / "config",
    )
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield tmp_path
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def read_devices(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestDetectionIntegration:
    """End-to-end detection per platform."""

    @patch("platform.system", return_value="Linux")
    @patch("subprocess.run", side_effect=fake_tools)
    def test_linux(self, mock_run, mock_system, isolated_run):
        assert main([]) == EX_OK

        assert [call.args[0][0] for call in mock_run.call_args_list] == ["v4l2-ctl", "ffmpeg"]
        assert read_devices(isolated_run / "devices.json") == [
            {
                "kind": "Video",
                "name": "Integrated Camera: Integrated C (usb-0000:00:14.0-8)",
                "devicePaths": ["/dev/video0", "/dev/video1"],
            },
            {
                "kind": "Audio",
                "name": "Default ALSA Output (currently PipeWire Media Server)",
                "alternativeName": "pulse:default",
            },
            {
                "kind": "Audio",
                "name": "Built-in Audio Analog Stereo",
                "alternativeName": "pulse:alsa_input.pci-0000_00_1f.3.analog-stereo",
            },
        ]

    @patch("platform.system", return_value="Windows")
    @patch("subprocess.run", side_effect=fake_tools)
    def test_windows(self, mock_run, mock_system, isolated_run):
        assert main([]) == EX_OK

        assert read_devices(isolated_run / "devices.json") == [
            {
                "kind": "Video",
                "name": "Integrated Camera",
                "alternativeName": "@device_pnp_\\\\?\\usb#vid_04f2&pid_b6d9",
            },
            {
                "kind": "Audio",
                "name": "Microphone (Realtek(R) Audio)",
                "alternativeName": "@device_cm_{33D9A762}\\wave_{D1E2}",
            },
        ]

    @patch("platform.system", return_value="Darwin")
    @patch("subprocess.run", side_effect=fake_tools)
    def test_macos(self, mock_run, mock_system, isolated_run):
        assert main([]) == EX_OK

        assert read_devices(isolated_run / "devices.json") == [
            {"kind": "Video", "name": "FaceTime HD Camera", "id": 0},
            {"kind": "Video", "name": "Capture screen 0", "id": 1},
            {"kind": "Audio", "name": "MacBook Pro Microphone", "id": 0},
        ]

    @patch("platform.system", return_value="Linux")
    @patch("subprocess.run", return_value=completed(["x"], stdout="", stderr=""))
    def test_nothing_found(self, mock_run, mock_system, isolated_run):
        assert main([]) == EX_DATAERR
        assert not (isolated_run / "devices.json").exists()

    @patch("platform.system", return_value="Linux")
    @patch("subprocess.run", side_effect=FileNotFoundError(2, "No such file or directory"))
    def test_tool_missing(self, mock_run, mock_system, isolated_run):
        assert main([]) == EX_UNAVAILABLE
        assert mock_run.call_count == 1
