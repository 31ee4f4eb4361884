"""Client for the transcription upload endpoint."""

import time
import asyncio
import logging
from datetime import datetime
from typing import Optional

import aiohttp

from ..errors import TranscriptionRequestFailed
from ..models.audio import WavBlob
from ..models.transcription import TranscriptionResult
from ..storage.file_manager import recording_filename

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Uploads recordings to the transcription server and returns the transcript."""

    def __init__(self, endpoint: str, timeout_seconds: float = 120):
        """Initialize transcription client.

        Args:
            endpoint: URL of the upload endpoint, e.g. http://127.0.0.1:8000/api/transcribe
            timeout_seconds: Total timeout of one request
        """
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        logger.info(f"TranscriptionClient initialized with endpoint: {endpoint}")

    async def transcribe(self, blob: WavBlob, filename: Optional[str] = None) -> TranscriptionResult:
        """Upload a recording as multipart field `file` and return the transcript.

        Args:
            blob: Encoded recording
            filename: Upload file name, defaults to the recording-<timestamp>.wav convention

        Returns:
            TranscriptionResult with the transcript text

        Raises:
            TranscriptionRequestFailed: If the request fails or the server answers non-2xx
        """
        filename = filename or recording_filename()
        form = aiohttp.FormData()
        form.add_field("file", blob.data, filename=filename, content_type=blob.content_type)

        started = time.time()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.endpoint, data=form) as response:
                    payload = await self._read_json(response)
                    if response.status < 200 or response.status >= 300:
                        error = payload.get("error") if isinstance(payload, dict) else None
                        raise TranscriptionRequestFailed(error or f"Request failed ({response.status})")
        except aiohttp.ClientError as e:
            logger.error(f"Transcription request to {self.endpoint} failed: {e}")
            raise TranscriptionRequestFailed(f"Request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TranscriptionRequestFailed(f"Request timed out after {self.timeout_seconds}s") from e

        if not isinstance(payload, dict):
            raise TranscriptionRequestFailed("Transcription server returned an invalid response")

        text = payload.get("text") or ""
        processing_time = time.time() - started
        logger.info(f"Transcribed {filename} in {processing_time:.2f}s: {len(text)} characters")

        return TranscriptionResult(
            text=text,
            processing_time=processing_time,
            timestamp=datetime.now(),
            service=self.endpoint,
            filename=filename,
        )

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse):
        try:
            return await response.json(content_type=None)
        except ValueError:
            return None
