"""Settings persistence."""

from avdetect.core.settings.manager import DetectorSettings, SettingsManager

__all__ = ["DetectorSettings", "SettingsManager"]
