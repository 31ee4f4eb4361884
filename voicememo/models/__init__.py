"""Data models for the voicememo application."""

from .audio import AudioStats, DrainedAudio, WavBlob
from .session import SessionState
from .events import SessionEvent, TranscriptionEvent
from .transcription import TranscriptionResult, TranscriptionStatus

__all__ = [
    "AudioStats",
    "DrainedAudio",
    "WavBlob",
    "SessionState",
    "SessionEvent",
    "TranscriptionEvent",
    "TranscriptionResult",
    "TranscriptionStatus",
]
