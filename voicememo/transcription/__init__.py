"""Server-side transcription backends."""

from .base import AbstractTranscriptionBackend
from .command_backend import CommandTranscriptionBackend

__all__ = [
    "AbstractTranscriptionBackend",
    "CommandTranscriptionBackend",
]
