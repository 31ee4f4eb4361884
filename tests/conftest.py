"""Pytest configuration and fixtures for voicememo tests."""

import pytest
import sys
import tempfile
import logging
import textwrap
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock, patch
import numpy as np

from voicememo.config import VoiceMemoConfig
from voicememo.models.audio import WavBlob
from voicememo.models.transcription import TranscriptionResult


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sine_frames():
    """Three 4096-sample float32 frames of a 440 Hz sine at 16 kHz."""
    sample_rate = 16000
    t = np.arange(3 * 4096) / sample_rate
    wave_data = (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)
    return [wave_data[i:i + 4096] for i in range(0, wave_data.shape[0], 4096)]


@pytest.fixture
def test_config(temp_data_dir):
    """Config built from defaults with every directory inside the temp dir."""
    config = VoiceMemoConfig()
    config.set('storage.download_directory', str(Path(temp_data_dir) / "recordings"))
    config.set('server.temp_directory', str(Path(temp_data_dir) / "tmp-audio"))
    config.set('logging.file_path', str(Path(temp_data_dir) / "logs" / "voicememo.log"))
    return config


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.is_active.return_value = True

        mock_pyaudio_instance.get_device_count.return_value = 1
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            "name": "Test Microphone",
            "maxInputChannels": 1,
            "defaultSampleRate": 48000.0,
        }
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.get_format_from_width.return_value = 8  # paInt16

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class FakeCapture:
    """Stand-in for AudioCapture that lets a test push frames by hand."""

    def __init__(self, callback, sample_rate: int = 16000, error: Optional[Exception] = None):
        self.callback = callback
        self.sample_rate = sample_rate
        self.frame_size = 4096
        self.duration_seconds = 0.0
        self.error = error
        self.open_calls = 0
        self.close_calls = 0

    def open(self) -> int:
        self.open_calls += 1
        if self.error is not None:
            raise self.error
        return self.sample_rate

    def close(self) -> None:
        self.close_calls += 1

    def push(self, frame) -> None:
        self.callback(frame)


@pytest.fixture
def fake_capture_factory():
    """Factory recording every FakeCapture it builds; set `.error` / `.sample_rate` to configure."""

    class Factory:
        def __init__(self):
            self.captures: List[FakeCapture] = []
            self.error: Optional[Exception] = None
            self.sample_rate = 16000

        def __call__(self, callback):
            capture = FakeCapture(callback, sample_rate=self.sample_rate, error=self.error)
            self.captures.append(capture)
            return capture

        @property
        def last(self) -> FakeCapture:
            return self.captures[-1]

    return Factory()


class FakeTranscriptionClient:
    """Records uploaded blobs and answers with a fixed text or error."""

    def __init__(self, text: str = "hello world", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[WavBlob] = []

    async def transcribe(self, blob: WavBlob, filename: Optional[str] = None) -> TranscriptionResult:
        from datetime import datetime

        self.calls.append(blob)
        if self.error is not None:
            raise self.error
        return TranscriptionResult(text=self.text, processing_time=0.01,
                                   timestamp=datetime.now(), service="fake", filename=filename)


@pytest.fixture
def fake_transcription_client():
    return FakeTranscriptionClient()


@pytest.fixture
def transcribe_script(temp_data_dir):
    """Write a Python script that mimics the speech-to-text tool and return its command.

    The script prints "transcript of <file name>" and the file size to stdout,
    or fails with a message on stderr when the file name contains "fail".
    """
    script = Path(temp_data_dir) / "fake_stt.py"
    script.write_text(textwrap.dedent("""
        import os
        import sys

        path = sys.argv[1]
        if "fail" in os.path.basename(path):
            sys.stderr.write("model not found\\n")
            sys.exit(2)
        sys.stderr.write("loading model\\n")
        print("  transcript of %s (%d bytes)  " % (os.path.basename(path), os.path.getsize(path)))
    """))
    return [sys.executable, str(script)]
