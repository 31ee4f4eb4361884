"""Audio capture, accumulation and WAV encoding."""

from .capture import AudioCapture
from .buffer import PCMAccumulator
from .playback import AudioPlayer
from .wav_encoder import encode_wav, read_wav_header

__all__ = [
    'AudioCapture',
    'AudioPlayer',
    'PCMAccumulator',
    'encode_wav',
    'read_wav_header',
]
