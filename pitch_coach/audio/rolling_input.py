"""Base class for audio inputs that keep only the most recent frame."""

from __future__ import annotations
import threading
from abc import ABC, abstractmethod

import numpy as np

from ..core.interfaces import IAudioInput


class RollingAudioInput(IAudioInput, ABC):
    """Audio input holding the latest ``frame_size`` mono samples.

    Capture threads write chunks of any length with ``_write``; the render
    tick reads a consistent copy with ``read_frame``.
    """

    def __init__(self, sample_rate: int, frame_size: int) -> None:
        if frame_size <= 0:
            raise ValueError(f"frame_size must be positive, got {frame_size!r}")
        self._sample_rate = int(sample_rate)
        self._frame_size = int(frame_size)
        self._frame = np.zeros(self._frame_size, dtype=np.float32)
        self._frame_lock = threading.Lock()
        self._running = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def frame_size(self) -> int:
        return self._frame_size

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running

    def read_frame(self) -> np.ndarray:
        with self._frame_lock:
            return self._frame.copy()

    def _write(self, chunk: np.ndarray) -> None:
        """Append a chunk of samples, mixing multi-channel input down to mono."""
        chunk = np.asarray(chunk, dtype=np.float32)
        if chunk.ndim > 1:
            chunk = chunk.mean(axis=1)
        n = len(chunk)
        if n == 0:
            return
        with self._frame_lock:
            if n >= self._frame_size:
                self._frame[:] = chunk[-self._frame_size:]
            else:
                self._frame[:-n] = self._frame[n:]
                self._frame[-n:] = chunk

    def _clear(self) -> None:
        with self._frame_lock:
            self._frame[:] = 0.0

    @abstractmethod
    def start(self) -> bool:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass
