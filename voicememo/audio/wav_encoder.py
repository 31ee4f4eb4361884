"""Mono 16-bit PCM WAV encoding of merged float audio."""

import logging
import struct
from typing import Any, Dict, Sequence, Union

import numpy as np

from ..models.audio import WAV_HEADER_SIZE, WavBlob

logger = logging.getLogger(__name__)

NUM_CHANNELS = 1
BITS_PER_SAMPLE = 16
PCM_FORMAT_TAG = 1
FMT_CHUNK_SIZE = 16

# RIFF header, fmt chunk and data chunk header, all little-endian
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def float_to_pcm16(samples: Union[np.ndarray, Sequence[float]]) -> np.ndarray:
    """Convert float samples to int16 with the asymmetric scale.

    Samples are held as float32, clamped to [-1, 1], negative values are
    scaled by 32768 and the rest by 32767, then truncated toward zero.
    NaN samples become 0.
    """
    values = np.asarray(samples, dtype=np.float32).reshape(-1).astype(np.float64)
    values = np.nan_to_num(values, nan=0.0, posinf=1.0, neginf=-1.0)
    values = np.clip(values, -1.0, 1.0)
    scaled = np.where(values < 0, values * 32768.0, values * 32767.0)
    return np.trunc(scaled).astype("<i2")


def build_wav_header(sample_count: int, sample_rate: int) -> bytes:
    """Build the canonical 44-byte header for a mono 16-bit PCM stream."""
    block_align = NUM_CHANNELS * BITS_PER_SAMPLE // 8
    byte_rate = sample_rate * NUM_CHANNELS * BITS_PER_SAMPLE // 8
    data_size = sample_count * block_align
    return _HEADER_STRUCT.pack(
        b"RIFF", 36 + data_size, b"WAVE",
        b"fmt ", FMT_CHUNK_SIZE, PCM_FORMAT_TAG, NUM_CHANNELS,
        sample_rate, byte_rate, block_align, BITS_PER_SAMPLE,
        b"data", data_size,
    )


def encode_wav(samples: Union[np.ndarray, Sequence[float]], sample_rate: int) -> WavBlob:
    """Encode merged float samples into a complete WAV file.

    Args:
        samples: Merged mono float samples, nominally in [-1.0, 1.0]
        sample_rate: Sample rate of the capture in Hz

    Returns:
        Immutable WavBlob holding header and PCM payload
    """
    sample_rate = int(sample_rate)
    pcm = float_to_pcm16(samples)
    header = build_wav_header(pcm.shape[0], sample_rate)
    data = header + pcm.tobytes()

    logger.debug(f"Encoded {pcm.shape[0]} samples at {sample_rate}Hz into {len(data)} bytes")
    return WavBlob(data=data, sample_rate=sample_rate,
                   channels=NUM_CHANNELS, bits_per_sample=BITS_PER_SAMPLE)


def read_wav_header(data: bytes) -> Dict[str, Any]:
    """Parse the canonical 44-byte WAV header.

    Raises:
        ValueError: If the data is too short or is not a RIFF/WAVE file
    """
    if len(data) < WAV_HEADER_SIZE:
        raise ValueError(f"WAV data too short: {len(data)} bytes")

    (riff, riff_size, wave, fmt, fmt_size, format_tag, channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_id, data_size) = _HEADER_STRUCT.unpack_from(data)

    if riff != b"RIFF" or wave != b"WAVE":
        raise ValueError("Not a RIFF/WAVE file")

    return {
        "riff_size": riff_size,
        "fmt_chunk_size": fmt_size,
        "format_tag": format_tag,
        "channels": channels,
        "sample_rate": sample_rate,
        "byte_rate": byte_rate,
        "block_align": block_align,
        "bits_per_sample": bits_per_sample,
        "data_chunk_id": data_id.decode("ascii", errors="replace"),
        "data_size": data_size,
    }
