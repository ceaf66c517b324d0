"""Settings manager for avdetect.

This module provides the SettingsManager class for persisting and loading
detector settings (tool locations, output file and log level) as JSON.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


@dataclass
class DetectorSettings:
    """Settings used by the device detector and the command line."""

    ffmpeg_path: str = "ffmpeg"
    v4l2_ctl_path: str = "v4l2-ctl"
    output_file: str = "devices.json"
    log_level: str = "INFO"


class SettingsManager:
    """Manages detector settings.

    Provides methods for:
    - Loading and saving settings to a JSON file
    - Resolving the platform config directory
    """

    def __init__(self, config_dir: Optional[Path] = None, settings_file: Optional[Path] = None):
        """Initialize settings manager.

        Args:
            config_dir: Optional custom config directory. If None, uses platform default.
            settings_file: Optional explicit settings file, overrides config_dir.
        """
        if settings_file is not None:
            self.settings_file = Path(settings_file)
            self.config_dir = self.settings_file.parent
        else:
            if config_dir is None:
                config_dir = self._get_default_config_dir()
            self.config_dir = Path(config_dir)
            self.settings_file = self.config_dir / SETTINGS_FILE_NAME

        logger.debug(f"Settings manager initialized with settings file: {self.settings_file}")

    def _get_default_config_dir(self) -> Path:
        """Get platform-specific default config directory.

        Returns:
            Path to config directory
        """
        if sys.platform == "darwin":
            # macOS: ~/Library/Application Support/avdetect
            base = Path.home() / "Library" / "Application Support"
        elif sys.platform == "win32":
            # Windows: %APPDATA%/avdetect
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        else:
            # Linux: ~/.config/avdetect
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

        return base / "avdetect"

    def load_settings(self) -> DetectorSettings:
        """Load settings from storage.

        Returns:
            DetectorSettings with loaded values, or defaults if the file doesn't exist

        Raises:
            ValueError: If settings file is corrupted or invalid
        """
        if not self.settings_file.exists():
            logger.debug("Settings file not found, using default settings")
            return DetectorSettings()

        try:
            with open(self.settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            logger.info(f"Settings loaded from {self.settings_file}")
            return self._deserialize_settings(data)

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse settings file: {e}")
            raise ValueError(f"Settings file is corrupted: {e}") from e
        except Exception as e:
            logger.error(f"Failed to load settings: {e}")
            raise ValueError(f"Failed to load settings: {e}") from e

    def save_settings(self, settings: DetectorSettings) -> None:
        """Save settings to storage.

        Args:
            settings: DetectorSettings to save

        Raises:
            IOError: If settings file cannot be written
        """
        try:
            data = self._serialize_settings(settings)
            self.config_dir.mkdir(parents=True, exist_ok=True)

            # Write to temporary file first, then rename (atomic operation)
            temp_file = self.settings_file.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            temp_file.replace(self.settings_file)

            logger.info("Settings saved successfully")

        except Exception as e:
            logger.error(f"Failed to save settings: {e}")
            raise IOError(f"Failed to save settings: {e}") from e

    def _serialize_settings(self, settings: DetectorSettings) -> Dict[str, Any]:
        return {
            "ffmpeg_path": settings.ffmpeg_path,
            "v4l2_ctl_path": settings.v4l2_ctl_path,
            "output_file": settings.output_file,
            "log_level": settings.log_level,
        }

    def _deserialize_settings(self, data: Dict[str, Any]) -> DetectorSettings:
        """Build DetectorSettings from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If the data is not an object or a value is not a string
        """
        if not isinstance(data, dict):
            raise ValueError("Settings must be a JSON object")

        defaults = DetectorSettings()
        values: Dict[str, str] = {}
        for key in ("ffmpeg_path", "v4l2_ctl_path", "output_file", "log_level"):
            value = data.get(key, getattr(defaults, key))
            if not isinstance(value, str):
                raise ValueError(f"Setting {key} must be a string, got {type(value).__name__}")
            values[key] = value

        return DetectorSettings(**values)
