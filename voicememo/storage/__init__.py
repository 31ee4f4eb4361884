"""Local storage of downloaded recordings."""

from .file_manager import FileManager, recording_filename

__all__ = ["FileManager", "recording_filename"]
