"""Microphone capture delivering float32 frames through a callback."""

import time
import logging
from typing import Optional, Callable, Any, Dict

import numpy as np
import pyaudio

from ..errors import DeviceError, EnvironmentUnsupported, PermissionDenied

logger = logging.getLogger(__name__)

# PortAudio error codes that mean the OS refused access to the device
_PERMISSION_ERROR_CODES = {pyaudio.paDeviceUnavailable}


class AudioCapture:
    """Owns the PyAudio instance and input stream of one recording.

    open() acquires the microphone, close() releases it. close() is safe to
    call any number of times and on a half-opened capture.
    """

    def __init__(
        self,
        callback: Callable[[np.ndarray], None],
        sample_rate: Optional[int] = None,
        frame_size: int = 4096,
        input_device_index: Optional[int] = None,
    ):
        """Initialize audio capture.

        Args:
            callback: Receives one float32 frame per stream callback
            sample_rate: Capture rate in Hz; None uses the device's default rate
            frame_size: Samples per frame
            input_device_index: PortAudio device index; None uses the default input
        """
        self.frame_callback = callback
        self.requested_sample_rate = sample_rate
        self.sample_rate: Optional[int] = sample_rate
        self.frame_size = frame_size
        self.input_device_index = input_device_index

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream: Optional[Any] = None
        self.is_open = False

        self.start_time: Optional[float] = None
        self.total_frames = 0

    def open(self) -> int:
        """Acquire the microphone and start streaming frames.

        Returns:
            The sample rate the stream runs at

        Raises:
            EnvironmentUnsupported: No input device is available
            PermissionDenied: The device exists but access was refused
            DeviceError: The stream could not be opened for another reason
        """
        if self.is_open:
            logger.warning("Audio capture already open")
            return self.sample_rate

        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            device_info = self._get_input_device_info()
            self.sample_rate = self.requested_sample_rate or int(device_info["defaultSampleRate"])

            self.total_frames = 0
            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device_index,
                frames_per_buffer=self.frame_size,
                stream_callback=self._on_audio,
            )
            self.stream.start_stream()
        except (EnvironmentUnsupported, PermissionDenied, DeviceError):
            self.close()
            raise
        except OSError as e:
            self.close()
            raise self._map_open_error(e) from e
        except Exception as e:
            self.close()
            raise DeviceError(f"Failed to open microphone: {e}") from e

        self.is_open = True
        self.start_time = time.time()
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, {self.frame_size} samples/frame")
        return self.sample_rate

    def close(self) -> None:
        """Stop the stream and release the microphone and PortAudio."""
        stream, self.stream = self.stream, None
        instance, self.pyaudio_instance = self.pyaudio_instance, None
        was_open = self.is_open
        self.is_open = False

        if stream is not None:
            try:
                if stream.is_active():
                    stream.stop_stream()
            except OSError as e:
                logger.warning(f"Error stopping audio stream: {e}")
            try:
                stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")

        if instance is not None:
            instance.terminate()

        if was_open:
            logger.info(f"Audio stream closed. Total frames: {self.total_frames}")

    def _get_input_device_info(self) -> Dict[str, Any]:
        if self.pyaudio_instance.get_device_count() == 0:
            raise EnvironmentUnsupported()
        try:
            if self.input_device_index is not None:
                info = self.pyaudio_instance.get_device_info_by_index(self.input_device_index)
            else:
                info = self.pyaudio_instance.get_default_input_device_info()
        except (IOError, ValueError) as e:
            raise EnvironmentUnsupported(f"No audio input device available: {e}") from e

        if int(info.get("maxInputChannels", 0)) < 1:
            raise EnvironmentUnsupported(f"Device '{info.get('name')}' has no input channels")
        return info

    def _map_open_error(self, error: OSError) -> Exception:
        code = error.errno
        text = str(error).lower()
        if code in _PERMISSION_ERROR_CODES or "permission" in text or "denied" in text:
            return PermissionDenied()
        return DeviceError(f"{DeviceError.default_message} ({error})")

    def _on_audio(self, in_data: bytes, frame_count: int, time_info: Any, status: int):
        """PortAudio callback: hand the frame over and keep streaming."""
        if in_data:
            self.total_frames += 1
            self.frame_callback(np.frombuffer(in_data, dtype=np.float32))
        return None, pyaudio.paContinue

    @property
    def duration_seconds(self) -> float:
        if not self.start_time or not self.is_open:
            return 0.0
        return time.time() - self.start_time

    def __del__(self):
        """Ensure the microphone is released on deletion."""
        if self.stream is not None or self.pyaudio_instance is not None:
            self.close()
