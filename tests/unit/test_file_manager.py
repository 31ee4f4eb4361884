"""Unit tests for FileManager and the recording file name convention."""

import re
from datetime import datetime, timezone, timedelta
from pathlib import Path

import numpy as np
import pytest

from voicememo.audio.wav_encoder import encode_wav
from voicememo.storage.file_manager import FileManager, iso_timestamp, recording_filename


@pytest.mark.unit
class TestRecordingFilename:
    """Test cases for the recording-<timestamp>.wav convention."""

    def test_iso_timestamp_matches_javascript_format(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert iso_timestamp(moment) == "2024-01-02T03:04:05.678Z"

    def test_filename_replaces_colons_and_dots(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert recording_filename(moment) == "recording-2024-01-02T03-04-05-678Z.wav"

    def test_timestamp_is_converted_to_utc(self):
        moment = datetime(2024, 1, 2, 11, 0, 0, tzinfo=timezone(timedelta(hours=8)))
        assert recording_filename(moment) == "recording-2024-01-02T03-00-00-000Z.wav"

    def test_default_is_now(self):
        name = recording_filename()
        assert re.fullmatch(r"recording-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.wav", name)


@pytest.mark.unit
class TestFileManager:
    """Test cases for FileManager class."""

    def test_initialization_does_not_create_directory(self, temp_data_dir):
        fm = FileManager(str(Path(temp_data_dir) / "recordings"))

        assert fm.download_dir == Path(temp_data_dir) / "recordings"
        assert not fm.download_dir.exists()

    def test_save_recording(self, temp_data_dir):
        fm = FileManager(str(Path(temp_data_dir) / "recordings"))
        blob = encode_wav(np.zeros(100, dtype=np.float32), 16000)

        path = fm.save_recording(blob)

        saved = Path(path)
        assert saved.parent == fm.download_dir
        assert saved.name.startswith("recording-")
        assert saved.read_bytes() == blob.data
        assert fm.list_recordings() == [saved.name]

    def test_save_recording_custom_name_and_directory(self, temp_data_dir):
        fm = FileManager(str(Path(temp_data_dir) / "recordings"))
        blob = encode_wav([0.5], 8000)
        other = Path(temp_data_dir) / "other"

        path = fm.save_recording(blob, filename="memo.wav", directory=str(other))

        assert Path(path) == other / "memo.wav"
        assert Path(path).read_bytes() == blob.data

    def test_list_recordings_empty(self, temp_data_dir):
        assert FileManager(str(Path(temp_data_dir) / "missing")).list_recordings() == []
