"""Console front-end."""

from .recorder_screen import RecorderScreen

__all__ = ["RecorderScreen"]
