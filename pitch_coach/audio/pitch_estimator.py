"""Single-frame pitch estimation backed by aubio."""

from __future__ import annotations
import numpy as np
import aubio
from typing import ClassVar, Optional

from ..core.interfaces import IPitchEstimator
from ..logger import get_logger
from ..note_types import PitchEstimate

logger = get_logger(__name__)


class AubioPitchEstimator(IPitchEstimator):
    """Estimate the fundamental frequency of one fixed-size audio frame.

    aubio's confidence is reported as the clarity of the estimate. The
    estimator applies no gating of its own; see ``PitchGate``.
    """

    SUPPORTED_METHODS: ClassVar[tuple] = ("yin", "yinfft", "yinfast", "mcomb", "schmitt", "fcomb")

    def __init__(
        self,
        sample_rate: int = 44100,
        frame_size: int = 2048,
        method: str = "yin",
        tolerance: Optional[float] = None,
        silence_db: float = -60.0,
    ) -> None:
        """Initialize the estimator.

        Args:
            sample_rate: Audio sample rate in Hz
            frame_size: Samples per frame passed to ``estimate``
            method: aubio pitch method
            tolerance: aubio pitch tolerance, or None for the method's default
            silence_db: Frames quieter than this yield no pitch
        """
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Unsupported pitch method {method!r}")

        self._sample_rate = sample_rate
        self._frame_size = frame_size
        self._method = method

        # Initialize aubio pitch detection
        self._pitch_detector = aubio.pitch(method, frame_size, frame_size, sample_rate)
        self._pitch_detector.set_unit("Hz")
        self._pitch_detector.set_silence(silence_db)
        if tolerance is not None:
            self._pitch_detector.set_tolerance(tolerance)

        logger.info(
            f"Pitch estimator initialized: method={method}, sample_rate={sample_rate}, frame_size={frame_size}"
        )

    @property
    def frame_size(self) -> int:
        return self._frame_size

    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        """Estimate pitch and clarity for one frame.

        Args:
            frame: Mono samples; resized to the configured frame size

        Returns:
            PitchEstimate with frequency None when aubio finds no pitch
        """
        frame = np.asarray(frame, dtype=np.float32)
        if frame.ndim > 1:
            frame = frame.mean(axis=1).astype(np.float32)

        # Check if audio data size matches expected frame size
        if len(frame) > self._frame_size:
            frame = frame[-self._frame_size:]
        elif len(frame) < self._frame_size:
            padding = np.zeros(self._frame_size - len(frame), dtype=np.float32)
            frame = np.concatenate((padding, frame))

        pitch = float(self._pitch_detector(np.ascontiguousarray(frame))[0])
        clarity = float(self._pitch_detector.get_confidence())

        if not np.isfinite(pitch) or pitch <= 0:
            return PitchEstimate(None, clarity)
        return PitchEstimate(pitch, clarity)
