"""Session-related data models."""

from enum import Enum


class SessionState(Enum):
    """Lifecycle state of a recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    FINISHED = "finished"
    ERROR = "error"
