"""PCM accumulator collecting float frames for the duration of one recording."""

import logging
import threading
from typing import List, Optional

import numpy as np

from ..models.audio import DrainedAudio

logger = logging.getLogger(__name__)


class PCMAccumulator:
    """Ordered store of captured float32 frames with a running sample count."""

    def __init__(self, sample_rate: int = 16000):
        """Initialize an empty, closed accumulator.

        Args:
            sample_rate: Sample rate reported by drain() until open() sets another one
        """
        self.sample_rate = sample_rate
        self.frames: List[np.ndarray] = []
        self.total_samples = 0
        self.is_open = False
        self.lock = threading.Lock()

    def reset(self) -> None:
        """Drop all collected frames."""
        with self.lock:
            self.frames = []
            self.total_samples = 0

    def open(self, sample_rate: int) -> None:
        """Start a new recording buffer that accepts frames.

        Args:
            sample_rate: Sample rate of the capture stream feeding this buffer
        """
        with self.lock:
            self.frames = []
            self.total_samples = 0
            self.sample_rate = sample_rate
            self.is_open = True
        logger.debug(f"PCM accumulator opened at {sample_rate}Hz")

    def close(self) -> None:
        """Stop accepting frames; collected data stays until drain()."""
        with self.lock:
            self.is_open = False

    def append(self, frame: np.ndarray) -> None:
        """Append a copy of a captured frame.

        Runs on the capture callback path, so it only copies and appends.
        The audio backend reuses its buffers between callbacks, hence the copy.
        """
        with self.lock:
            if not self.is_open:
                return
            samples = np.array(frame, dtype=np.float32, copy=True).reshape(-1)
            self.frames.append(samples)
            self.total_samples += samples.shape[0]

    def drain(self) -> Optional[DrainedAudio]:
        """Merge all frames in arrival order and empty the accumulator.

        Returns:
            DrainedAudio, or None when no samples were captured
        """
        with self.lock:
            frames = self.frames
            total = self.total_samples
            self.frames = []
            self.total_samples = 0

        if total == 0:
            logger.debug("Drain requested on an empty accumulator")
            return None

        merged = np.concatenate(frames) if len(frames) > 1 else frames[0]
        logger.debug(f"Drained {len(frames)} frames, {total} samples")
        return DrainedAudio(samples=merged, sample_rate=self.sample_rate, total_samples=total)

    @property
    def frame_count(self) -> int:
        with self.lock:
            return len(self.frames)
