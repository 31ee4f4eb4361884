"""Unit tests for CommandTranscriptionBackend."""

import sys
from pathlib import Path

import pytest

from voicememo.errors import TranscriptionExecutableError
from voicememo.transcription import CommandTranscriptionBackend


@pytest.mark.unit
class TestCommandTranscriptionBackend:
    """Test cases for CommandTranscriptionBackend."""

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            CommandTranscriptionBackend([])

    async def test_stdout_is_transcript(self, transcribe_script, temp_data_dir):
        audio = Path(temp_data_dir) / "memo.wav"
        audio.write_bytes(b"\x00" * 10)
        backend = CommandTranscriptionBackend(transcribe_script)

        text = await backend.transcribe_file(str(audio))

        assert text == "transcript of memo.wav (10 bytes)"

    async def test_nonzero_exit_raises_with_stderr(self, transcribe_script, temp_data_dir):
        audio = Path(temp_data_dir) / "fail.wav"
        audio.write_bytes(b"")
        backend = CommandTranscriptionBackend(transcribe_script)

        with pytest.raises(TranscriptionExecutableError) as exc_info:
            await backend.transcribe_file(str(audio))

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "model not found"
        assert "model not found" in str(exc_info.value)

    async def test_missing_executable(self, temp_data_dir):
        backend = CommandTranscriptionBackend([str(Path(temp_data_dir) / "no-such-binary")])

        with pytest.raises(TranscriptionExecutableError, match="not found"):
            await backend.transcribe_file("memo.wav")

    async def test_timeout_kills_command(self, temp_data_dir):
        backend = CommandTranscriptionBackend(
            [sys.executable, "-c", "import time, sys; time.sleep(10)"],
            timeout_seconds=0.2,
        )

        with pytest.raises(TranscriptionExecutableError, match="timed out"):
            await backend.transcribe_file("memo.wav")
