"""Recording session state machine: start, stop, play, download and transcribe."""

import logging
import threading
from typing import Optional, Dict, Any, Callable

import numpy as np
from pubsub import pub

from ..audio.buffer import PCMAccumulator
from ..audio.capture import AudioCapture
from ..audio.playback import AudioPlayer
from ..audio.wav_encoder import encode_wav
from ..config import VoiceMemoConfig
from ..errors import EmptyRecording, NoRecording, VoiceMemoError
from ..models.audio import AudioStats, WavBlob
from ..models.events import (
    SESSION_STATE_TOPIC,
    TRANSCRIPTION_STATUS_TOPIC,
    SessionEvent,
    TranscriptionEvent,
)
from ..models.session import SessionState
from ..models.transcription import TranscriptionStatus
from ..storage.file_manager import FileManager
from .transcription_service import TranscriptionClient

logger = logging.getLogger(__name__)

CaptureFactory = Callable[[Callable[[np.ndarray], None]], AudioCapture]

IDLE_MESSAGE = "Press start to record, then stop to finish."
RECORDING_MESSAGE = "Recording... press stop to finish."
FINISHED_MESSAGE = "Recording finished. You can play it back, download it as WAV or transcribe it."
DEFAULT_TRANSCRIPTION_ERROR = "Transcription failed, please try again later."

_STARTABLE_STATES = (SessionState.IDLE, SessionState.FINISHED, SessionState.ERROR)


class RecordingSession:
    """Owns the capture, the PCM accumulator and the latest recording.

    Only one recording buffer accepts frames at a time, and only while the
    session is recording. Every successful capture open is matched by one
    teardown on stop(), on a failed start() or on close().
    """

    def __init__(
        self,
        config: VoiceMemoConfig,
        capture_factory: Optional[CaptureFactory] = None,
        transcription_client: Optional[TranscriptionClient] = None,
        file_manager: Optional[FileManager] = None,
        player: Optional[AudioPlayer] = None,
    ):
        """Initialize recording session.

        Args:
            config: Application configuration
            capture_factory: Builds an AudioCapture around a frame callback
            transcription_client: Client for the transcription endpoint
            file_manager: Writes downloaded recordings
            player: Plays recordings back
        """
        self.config = config
        self.capture_factory = capture_factory or self._default_capture
        self.transcription_client = transcription_client or TranscriptionClient(
            endpoint=config.get('client.endpoint'),
            timeout_seconds=config.get('client.timeout_seconds', 120),
        )
        self.file_manager = file_manager or FileManager(config.get_download_directory())
        self.player = player or AudioPlayer()

        self.accumulator = PCMAccumulator()
        self.capture: Optional[AudioCapture] = None

        self.state = SessionState.IDLE
        self.message = IDLE_MESSAGE
        self.error: Optional[str] = None
        self.current_blob: Optional[WavBlob] = None
        self.transcription = TranscriptionStatus()
        self._transcription_lock = threading.Lock()

    def _default_capture(self, callback: Callable[[np.ndarray], None]) -> AudioCapture:
        return AudioCapture(
            callback=callback,
            sample_rate=self.config.get('audio.sample_rate'),
            frame_size=self.config.get('audio.frame_size', 4096),
            input_device_index=self.config.get('audio.input_device_index'),
        )

    @property
    def is_recording(self) -> bool:
        return self.state == SessionState.RECORDING

    def start(self) -> Dict[str, Any]:
        """Acquire the microphone and begin a new recording.

        Returns:
            Result dictionary with success status and details
        """
        if self.state not in _STARTABLE_STATES:
            logger.warning("Recording already in progress")
            return {"success": False, "error": "Already recording"}

        self.error = None
        self.capture = self.capture_factory(self.accumulator.append)
        try:
            sample_rate = self.capture.open()
        except VoiceMemoError as e:
            logger.error(f"Error starting recording: {e}")
            self._teardown_capture()
            self._fail(e.message)
            return {"success": False, "error": e.message}

        self.accumulator.open(sample_rate)
        self.current_blob = None
        self._transition(SessionState.RECORDING, RECORDING_MESSAGE)
        logger.info(f"Started recording at {sample_rate}Hz")
        return {"success": True, "sample_rate": sample_rate}

    def stop(self) -> Dict[str, Any]:
        """Release the microphone and encode what was captured.

        Returns:
            Result dictionary with success status and recording details
        """
        if self.state != SessionState.RECORDING:
            logger.warning("No recording in progress")
            return {"success": False, "error": "Not recording"}

        self.accumulator.close()
        self._teardown_capture()

        drained = self.accumulator.drain()
        if drained is None:
            message = EmptyRecording().message
            logger.warning("Recording stopped without any captured audio")
            self._fail(message)
            return {"success": False, "error": message}

        blob = encode_wav(drained.samples, drained.sample_rate)
        self.current_blob = blob
        self._transition(SessionState.FINISHED, FINISHED_MESSAGE)

        logger.info(f"Recording finished: {drained.total_samples} samples, "
                    f"{blob.duration_seconds:.2f}s, {len(blob.data)} bytes")
        return {
            "success": True,
            "duration_seconds": blob.duration_seconds,
            "sample_rate": blob.sample_rate,
            "size_bytes": len(blob.data),
        }

    def download(self, directory: Optional[str] = None) -> Dict[str, Any]:
        """Save the latest recording as a WAV file; the session state is unchanged."""
        blob = self.current_blob
        if blob is None:
            return {"success": False, "error": "Nothing to download yet, please record first."}

        try:
            path = self.file_manager.save_recording(blob, directory=directory)
        except OSError as e:
            logger.error(f"Error saving recording: {e}")
            return {"success": False, "error": f"Failed to save recording: {e}"}
        return {"success": True, "path": path}

    def play(self) -> Dict[str, Any]:
        """Play the latest recording; the session state is unchanged."""
        blob = self.current_blob
        if blob is None:
            return {"success": False, "error": "Nothing to play yet, please record first."}

        try:
            self.player.play(blob)
        except OSError as e:
            logger.error(f"Error playing recording: {e}")
            return {"success": False, "error": f"Playback failed: {e}"}
        return {"success": True, "duration_seconds": blob.duration_seconds}

    async def transcribe(self) -> TranscriptionStatus:
        """Send the latest recording to the transcription endpoint.

        Tracks its own busy/result/error status and never touches the
        recording state, so a new recording may start while this runs.
        """
        blob = self.current_blob
        if blob is None:
            self._set_transcription(TranscriptionStatus(error=NoRecording().message), "failed")
            return self.transcription

        # Callers may run this from several threads, each with its own loop
        with self._transcription_lock:
            if self.transcription.is_busy:
                logger.warning("Transcription already in progress")
                return self.transcription
            self.transcription = TranscriptionStatus(is_busy=True)

        self._set_transcription(self.transcription, "started")
        try:
            result = await self.transcription_client.transcribe(blob)
        except VoiceMemoError as e:
            logger.error(f"Transcription failed: {e}")
            self._set_transcription(TranscriptionStatus(error=e.message), "failed")
        except Exception as e:
            logger.exception("Unexpected transcription error")
            self._set_transcription(TranscriptionStatus(error=str(e) or DEFAULT_TRANSCRIPTION_ERROR), "failed")
        else:
            self._set_transcription(TranscriptionStatus(text=result.text, result=result), "completed")
        return self.transcription

    def close(self) -> None:
        """Release any capture resources; safe to call repeatedly."""
        self.accumulator.close()
        self._teardown_capture()
        if self.state == SessionState.RECORDING:
            self.accumulator.reset()
            self._transition(SessionState.IDLE, IDLE_MESSAGE)

    def get_stats(self) -> AudioStats:
        capture = self.capture
        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=capture.duration_seconds if capture else 0.0,
            sample_rate=self.accumulator.sample_rate,
            frame_size=capture.frame_size if capture else self.config.get('audio.frame_size', 4096),
            total_frames=self.accumulator.frame_count,
            total_samples=self.accumulator.total_samples,
        )

    def _teardown_capture(self) -> None:
        capture, self.capture = self.capture, None
        if capture is not None:
            capture.close()

    def _fail(self, message: str) -> None:
        self.error = message
        self._transition(SessionState.ERROR, message)

    def _transition(self, to_state: SessionState, message: str) -> None:
        from_state = self.state
        self.state = to_state
        self.message = message
        logger.debug(f"Session state {from_state.value} -> {to_state.value}")
        pub.sendMessage(SESSION_STATE_TOPIC, event=SessionEvent(
            event_type=to_state.value,
            previous_state=from_state.value,
            message=message,
            error=self.error,
        ))

    def _set_transcription(self, status: TranscriptionStatus, event_type: str) -> None:
        self.transcription = status
        pub.sendMessage(TRANSCRIPTION_STATUS_TOPIC, event=TranscriptionEvent(
            event_type=event_type,
            text=status.text,
            error=status.error,
        ))
