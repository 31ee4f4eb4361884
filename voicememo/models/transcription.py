"""Transcription-related data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class TranscriptionResult:
    """Result of a transcription request."""
    text: str
    processing_time: float
    timestamp: datetime
    service: str
    filename: Optional[str] = None


@dataclass
class TranscriptionStatus:
    """Status of the most recent transcription, independent of the recording state."""
    is_busy: bool = False
    text: Optional[str] = None
    error: Optional[str] = None
    result: Optional[TranscriptionResult] = None
