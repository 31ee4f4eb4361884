"""Playback of an encoded recording through the default output device."""

import logging
from typing import Optional

import pyaudio

from ..models.audio import WavBlob

logger = logging.getLogger(__name__)


class AudioPlayer:
    """Plays WavBlob payloads with a blocking PyAudio output stream."""

    def __init__(self, chunk_size: int = 4096, output_device_index: Optional[int] = None):
        self.chunk_size = chunk_size
        self.output_device_index = output_device_index

    def play(self, blob: WavBlob) -> None:
        """Play the whole recording, returning when playback has finished."""
        pyaudio_instance = pyaudio.PyAudio()
        stream = None
        try:
            stream = pyaudio_instance.open(
                format=pyaudio_instance.get_format_from_width(blob.bits_per_sample // 8),
                channels=blob.channels,
                rate=blob.sample_rate,
                output=True,
                output_device_index=self.output_device_index,
            )
            payload = blob.pcm_payload
            step = self.chunk_size * blob.channels * (blob.bits_per_sample // 8)
            for offset in range(0, len(payload), step):
                stream.write(payload[offset:offset + step])
            logger.info(f"Played {blob.duration_seconds:.1f}s of audio")
        finally:
            if stream is not None:
                stream.stop_stream()
                stream.close()
            pyaudio_instance.terminate()
