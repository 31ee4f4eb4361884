"""Unit tests for the console front-end and the auto mode runner."""

import asyncio
import io
import logging
import threading
from pathlib import Path
from unittest.mock import Mock

import pytest
from rich.console import Console

from voicememo.main import run_auto, setup_logging
from voicememo.models.session import SessionState
from voicememo.services.recording_session import RecordingSession
from voicememo.storage.file_manager import FileManager
from voicememo.ui.recorder_screen import RecorderScreen


@pytest.fixture
def session(test_config, fake_capture_factory, fake_transcription_client):
    return RecordingSession(
        test_config,
        capture_factory=fake_capture_factory,
        transcription_client=fake_transcription_client,
        file_manager=FileManager(test_config.get_download_directory()),
        player=Mock(),
    )


@pytest.fixture
def screen(session):
    output = io.StringIO()
    return RecorderScreen(session, console=Console(file=output, width=120)), output


@pytest.mark.unit
class TestRecorderScreen:
    """Test cases for RecorderScreen command handling."""

    def test_start_and_stop_commands(self, screen, session, fake_capture_factory, sine_frames):
        recorder_screen, output = screen

        assert recorder_screen.handle_command("1") is True
        assert session.state == SessionState.RECORDING
        fake_capture_factory.last.push(sine_frames[0])
        assert recorder_screen.handle_command("2") is True
        assert session.state == SessionState.FINISHED

        recorder_screen.show_status()
        assert "FINISHED" in output.getvalue()

    def test_stop_without_audio_reports_error(self, screen, session):
        recorder_screen, output = screen

        recorder_screen.handle_command("1")
        recorder_screen.handle_command("2")

        assert session.state == SessionState.ERROR
        assert "No audio captured" in output.getvalue()

    def test_download_command(self, screen, session, fake_capture_factory, sine_frames):
        recorder_screen, output = screen
        recorder_screen.handle_command("1")
        fake_capture_factory.last.push(sine_frames[0])
        recorder_screen.handle_command("2")

        recorder_screen.handle_command("4")

        assert "Saved to" in output.getvalue()

    def test_transcribe_command_runs_in_background(self, screen, session, fake_capture_factory,
                                                   sine_frames, fake_transcription_client):
        recorder_screen, _ = screen
        recorder_screen.handle_command("1")
        fake_capture_factory.last.push(sine_frames[0])
        recorder_screen.handle_command("2")

        recorder_screen.handle_command("5")
        recorder_screen.transcription_thread.join(timeout=5)

        assert session.transcription.text == "hello world"
        assert fake_transcription_client.calls == [session.current_blob]

    def test_repeated_transcribe_command_sends_one_upload(self, screen, session, fake_capture_factory,
                                                         sine_frames, fake_transcription_client):
        recorder_screen, output = screen
        recorder_screen.handle_command("1")
        fake_capture_factory.last.push(sine_frames[0])
        recorder_screen.handle_command("2")

        gate = threading.Event()
        original = fake_transcription_client.transcribe

        async def slow_transcribe(blob, filename=None):
            while not gate.is_set():
                await asyncio.sleep(0.01)
            return await original(blob, filename)

        fake_transcription_client.transcribe = slow_transcribe
        recorder_screen.handle_command("5")
        first_thread = recorder_screen.transcription_thread
        recorder_screen.handle_command("5")

        assert recorder_screen.transcription_thread is first_thread
        assert "Transcription already in progress" in output.getvalue()

        gate.set()
        first_thread.join(timeout=5)
        assert len(fake_transcription_client.calls) == 1
        assert session.transcription.text == "hello world"

    def test_quit_and_unknown_commands(self, screen):
        recorder_screen, output = screen

        assert recorder_screen.handle_command("x") is True
        assert "Unknown command" in output.getvalue()
        assert recorder_screen.handle_command("q") is False


@pytest.mark.unit
class TestRunAuto:
    """Test cases for auto mode."""

    def test_records_and_saves(self, session, fake_capture_factory, sine_frames, monkeypatch):
        def fake_sleep(_seconds):
            fake_capture_factory.last.push(sine_frames[0])

        monkeypatch.setattr("voicememo.main.time.sleep", fake_sleep)

        assert run_auto(session, duration=1, transcribe=True) == 0
        assert session.state == SessionState.FINISHED
        assert len(session.file_manager.list_recordings()) == 1
        assert session.transcription.text == "hello world"

    def test_empty_recording_fails(self, session, monkeypatch):
        monkeypatch.setattr("voicememo.main.time.sleep", lambda _seconds: None)

        assert run_auto(session, duration=1, transcribe=False) == 1
        assert session.state == SessionState.ERROR


@pytest.mark.unit
def test_setup_logging_writes_log_file(test_config):
    root_logger = logging.getLogger()
    previous_handlers = root_logger.handlers[:]
    previous_level = root_logger.level
    try:
        setup_logging(test_config, "DEBUG")
        logging.getLogger("voicememo.test").debug("hello from test")
        for handler in root_logger.handlers:
            handler.flush()

        log_file = Path(test_config.get('logging.file_path'))
        assert "hello from test" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = previous_handlers
        root_logger.setLevel(previous_level)
