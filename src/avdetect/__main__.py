"""
avdetect CLI entry point.

This module provides the command-line interface for detecting capture
devices and writing them to a JSON file.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from avdetect.core.capture.device import DeviceDetector, devices_to_json
from avdetect.core.errors import NoDevicesFoundError, ProbeLaunchError
from avdetect.core.logging import setup_logging
from avdetect.core.settings.manager import SettingsManager
from avdetect.core.version import __version__

APP_NAME = "avdetect"
APP_DESCRIPTION = "Detect audio and video capture devices using FFmpeg and v4l2-ctl"

# os.EX_* constants are only defined on Unix
EX_OK = getattr(os, "EX_OK", 0)
EX_DATAERR = getattr(os, "EX_DATAERR", 65)
EX_NOINPUT = getattr(os, "EX_NOINPUT", 66)
EX_UNAVAILABLE = getattr(os, "EX_UNAVAILABLE", 69)
EX_SOFTWARE = getattr(os, "EX_SOFTWARE", 70)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Detect devices and write devices.json in the current directory
  python -m avdetect

  # Write to a specific file and also print the list
  python -m avdetect --output out/devices.json --print

  # Use a custom FFmpeg build
  python -m avdetect --ffmpeg /opt/ffmpeg/bin/ffmpeg
        """,
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        metavar="PATH",
        help="Output JSON file (default: devices.json in the current directory)",
    )

    parser.add_argument(
        "--print",
        dest="print_devices",
        action="store_true",
        help="Also print the detected devices as JSON on stdout",
    )

    parser.add_argument("--config", type=str, metavar="PATH", help="Path to settings file")

    parser.add_argument("--ffmpeg", type=str, metavar="PATH", help="FFmpeg executable")

    parser.add_argument("--v4l2-ctl", type=str, metavar="PATH", help="v4l2-ctl executable (Linux)")

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        metavar="LEVEL",
        help="Logging level (default: INFO)",
    )

    parser.add_argument("--log-file", type=str, metavar="PATH", help="Also write a debug log here")

    parser.add_argument("--version", action="version", version=f"{APP_NAME} {__version__}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for avdetect.

    Returns:
        Exit code using os.EX_* constants:
        - EX_OK (0): Devices written
        - EX_DATAERR (65): Probes ran but found no devices
        - EX_NOINPUT (66): Settings file missing or invalid
        - EX_UNAVAILABLE (69): A probe tool is not installed
        - EX_SOFTWARE (70): Internal software error
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Logging is configured before settings are read so load errors are reported
    setup_logging(
        log_level=args.log_level or "INFO",
        log_file=Path(args.log_file) if args.log_file else None,
    )
    logger = logging.getLogger(__name__)
    logger.debug(f"Command-line arguments: {args}")

    config_path: Optional[Path] = None
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            return EX_NOINPUT

    try:
        settings = SettingsManager(settings_file=config_path).load_settings()
    except ValueError as e:
        logger.error(str(e))
        return EX_NOINPUT

    if args.ffmpeg:
        settings.ffmpeg_path = args.ffmpeg
    if args.v4l2_ctl:
        settings.v4l2_ctl_path = args.v4l2_ctl
    if args.output:
        settings.output_file = args.output
    if args.log_level is None and settings.log_level.upper() != "INFO":
        setup_logging(
            log_level=settings.log_level,
            log_file=Path(args.log_file) if args.log_file else None,
        )

    try:
        detector = DeviceDetector(settings=settings)
        devices = detector.detect()
        output_path = detector.save(devices)

        message = f"Audio and video devices saved to: {output_path}"
        if args.print_devices:
            print(devices_to_json(devices))
            print(message, file=sys.stderr)
        else:
            print(message)
        return EX_OK

    except ProbeLaunchError as e:
        logger.error(str(e))
        return EX_UNAVAILABLE

    except NoDevicesFoundError as e:
        logger.error(str(e))
        return EX_DATAERR

    except KeyboardInterrupt:
        logger.info("Detection interrupted by user")
        return EX_OK

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return EX_SOFTWARE


if __name__ == "__main__":
    sys.exit(main())
