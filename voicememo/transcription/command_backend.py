"""Transcription backend that runs an external speech-to-text command."""

import asyncio
import logging
from typing import List, Optional, Sequence

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionExecutableError

logger = logging.getLogger(__name__)


class CommandTranscriptionBackend(AbstractTranscriptionBackend):
    """Runs `<command...> <audio file>` and takes its standard output as the transcript."""

    name = "command"

    def __init__(self, command: Sequence[str], timeout_seconds: Optional[float] = 300):
        """Initialize the command backend.

        Args:
            command: Executable and leading arguments, e.g. ["bash", "scripts/transcribe.sh"]
            timeout_seconds: Kill the command after this long; None waits forever
        """
        if not command:
            raise ValueError("Transcription command must not be empty")
        self.command: List[str] = [str(part) for part in command]
        self.timeout_seconds = timeout_seconds
        logger.info(f"CommandTranscriptionBackend initialized: {' '.join(self.command)}")

    async def transcribe_file(self, audio_path: str) -> str:
        """Run the command on the file.

        Raises:
            TranscriptionExecutableError: The command is missing, timed out or exited non-zero
        """
        argv = self.command + [str(audio_path)]
        logger.debug(f"Running transcription command: {argv}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise TranscriptionExecutableError(f"Transcription command not found: {self.command[0]}") from e
        except PermissionError as e:
            raise TranscriptionExecutableError(f"Transcription command is not executable: {self.command[0]}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise TranscriptionExecutableError(
                f"Transcription command timed out after {self.timeout_seconds}s")

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            logger.error(f"Transcription command failed with code {process.returncode}: {stderr_text}")
            message = f"Command failed: {' '.join(argv)}"
            if stderr_text:
                message = f"{message}\n{stderr_text}"
            raise TranscriptionExecutableError(message, returncode=process.returncode, stderr=stderr_text)

        if stderr_text:
            logger.warning(f"Transcription command stderr: {stderr_text}")

        return stdout_text.strip()
