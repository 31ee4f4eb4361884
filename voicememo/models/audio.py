"""Audio-related data models."""

import struct
from dataclasses import dataclass

import numpy as np

WAV_HEADER_SIZE = 44


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    frame_size: int
    total_frames: int
    total_samples: int


@dataclass
class DrainedAudio:
    """Merged samples handed out by the accumulator when a recording ends."""
    samples: np.ndarray  # float32, frames concatenated in arrival order
    sample_rate: int
    total_samples: int


@dataclass(frozen=True)
class WavBlob:
    """An encoded mono 16-bit PCM WAV file held in memory."""
    data: bytes
    sample_rate: int
    channels: int = 1
    bits_per_sample: int = 16
    content_type: str = "audio/wav"

    @property
    def riff_size(self) -> int:
        return struct.unpack_from("<I", self.data, 4)[0]

    @property
    def data_size(self) -> int:
        return struct.unpack_from("<I", self.data, 40)[0]

    @property
    def sample_count(self) -> int:
        return self.data_size // (self.bits_per_sample // 8)

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.sample_count / self.sample_rate

    @property
    def pcm_payload(self) -> bytes:
        return self.data[WAV_HEADER_SIZE:]

    def __len__(self) -> int:
        return len(self.data)
