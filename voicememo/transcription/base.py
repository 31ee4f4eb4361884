"""Abstract base class for transcription backends."""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Turns an audio file on disk into text."""

    name = "abstract"

    @abstractmethod
    async def transcribe_file(self, audio_path: str) -> str:
        """Transcribe an audio file and return the transcript.

        Args:
            audio_path: Path to a WAV file

        Returns:
            Transcript text, stripped of surrounding whitespace
        """
        pass
