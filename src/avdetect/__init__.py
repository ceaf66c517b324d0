"""Audio and video capture device detection using FFmpeg and v4l2-ctl."""

from avdetect.core.version import __version__

__all__ = ["__version__"]
