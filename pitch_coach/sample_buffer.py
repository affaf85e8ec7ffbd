"""Time-windowed buffer of pitch samples feeding the scrolling trace."""

import math
import time
from collections import deque
from typing import Callable, Deque, Iterator, Optional, Tuple

from .errors import SampleOrderError
from .logger import get_logger
from .note_types import Sample
from .note_utils import validate_frequency

logger = get_logger(__name__)


class SampleBuffer:
    """Append-only, time-ordered samples with eviction of old entries.

    Timestamps are seconds since the buffer origin, which ``reset`` moves to
    "now". Samples without a pitch are kept like any other sample so the trace
    breaks where the singer is silent; only age ever evicts a sample.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        """Initialize the buffer.

        Args:
            clock: Monotonic clock returning seconds, injectable for tests
        """
        self._clock = clock
        self._samples: Deque[Sample] = deque()
        self._origin = clock()

    def reset(self, now: Optional[float] = None) -> None:
        """Drop all samples and restart elapsed time at 0 from ``now``."""
        self._samples.clear()
        self._origin = self._clock() if now is None else now
        logger.debug(f"Sample buffer reset (origin={self._origin:.3f})")

    def clear(self) -> None:
        """Drop all samples but keep the current time origin."""
        self._samples.clear()

    def elapsed(self, now: Optional[float] = None) -> float:
        """Seconds since the origin according to the buffer's clock."""
        return (self._clock() if now is None else now) - self._origin

    def push(self, elapsed_seconds: float, frequency: Optional[float] = None) -> Sample:
        """Append a sample at the tail.

        Args:
            elapsed_seconds: Seconds since the origin, never less than the last push
            frequency: Detected pitch in Hz, or None when no pitch was detected

        Raises:
            SampleOrderError: If the timestamp is negative or goes backwards
            InvalidFrequencyError: If a frequency is given but is not positive and finite
        """
        if not math.isfinite(elapsed_seconds) or elapsed_seconds < 0:
            raise SampleOrderError(f"Invalid sample timestamp: {elapsed_seconds!r}")
        if self._samples and elapsed_seconds < self._samples[-1].timestamp:
            raise SampleOrderError(
                f"Sample timestamp {elapsed_seconds:.6f} is older than the last one "
                f"({self._samples[-1].timestamp:.6f})"
            )
        if frequency is not None:
            frequency = validate_frequency(frequency)

        sample = Sample(float(elapsed_seconds), frequency)
        self._samples.append(sample)
        return sample

    def prune(self, window_seconds: float) -> int:
        """Evict samples older than ``window_seconds`` before the latest one.

        A sample exactly ``window_seconds`` old is kept.

        Returns:
            Number of samples removed
        """
        if not math.isfinite(window_seconds) or window_seconds < 0:
            raise ValueError(f"Window must be a non-negative duration, got {window_seconds!r}")
        if not self._samples:
            return 0

        cutoff = self._samples[-1].timestamp - window_seconds
        removed = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            removed += 1
        return removed

    def record(
        self, elapsed_seconds: float, frequency: Optional[float], window_seconds: float
    ) -> Sample:
        """Push one sample and prune to the window, as every tick must."""
        sample = self.push(elapsed_seconds, frequency)
        self.prune(window_seconds)
        return sample

    def snapshot(self) -> Tuple[Sample, ...]:
        """Immutable copy of the retained samples, oldest first."""
        return tuple(self._samples)

    @property
    def latest(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    @property
    def is_empty(self) -> bool:
        return not self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.snapshot())
