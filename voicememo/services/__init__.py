"""Services layer for voicememo application logic."""

from .recording_session import RecordingSession
from .transcription_service import TranscriptionClient

__all__ = [
    "RecordingSession",
    "TranscriptionClient",
]
