"""Saving recordings to the download directory."""

import re
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List

from ..models.audio import WavBlob

logger = logging.getLogger(__name__)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO 8601 timestamp with millisecond precision, e.g. 2024-01-02T03:04:05.678Z."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def recording_filename(moment: Optional[datetime] = None) -> str:
    """Build the recording file name: recording-<timestamp with ':' and '.' as '-'>.wav."""
    return f"recording-{re.sub(r'[:.]', '-', iso_timestamp(moment))}.wav"


class FileManager:
    """Writes recordings to a download directory."""

    def __init__(self, download_dir: str = "./recordings"):
        """Initialize file manager.

        Args:
            download_dir: Directory downloaded recordings are written to
        """
        self.download_dir = Path(download_dir)
        logger.info(f"FileManager initialized with download_dir: {self.download_dir}")

    def save_recording(self, blob: WavBlob, filename: Optional[str] = None,
                       directory: Optional[str] = None) -> str:
        """Save a recording and return its path.

        Args:
            blob: Encoded recording
            filename: Optional file name, defaults to the recording-<timestamp>.wav convention
            directory: Optional directory overriding the download directory

        Returns:
            Full path to the saved WAV file
        """
        target_dir = Path(directory) if directory else self.download_dir
        target_dir.mkdir(parents=True, exist_ok=True)

        filepath = target_dir / (filename or recording_filename())
        with open(filepath, 'wb') as f:
            f.write(blob.data)

        logger.info(f"Saved recording: {filepath} ({len(blob.data)} bytes)")
        return str(filepath)

    def list_recordings(self) -> List[str]:
        """List saved recordings, newest name first."""
        if not self.download_dir.exists():
            return []
        return sorted((p.name for p in self.download_dir.glob("recording-*.wav")), reverse=True)
