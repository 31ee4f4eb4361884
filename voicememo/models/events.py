"""Event models published on the pub/sub topics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

SESSION_STATE_TOPIC = "session.state"
TRANSCRIPTION_STATUS_TOPIC = "transcription.status"


@dataclass
class SessionEvent:
    """Session lifecycle event, one per state transition."""
    event_type: str  # new state value: "idle", "recording", "finished", "error"
    previous_state: str
    message: str = ""
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class TranscriptionEvent:
    """Transcription progress event."""
    event_type: str  # "started", "completed", "failed"
    text: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
