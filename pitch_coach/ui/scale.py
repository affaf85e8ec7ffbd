"""Screen geometry for the scrolling pitch graph."""

import math
from dataclasses import dataclass
from typing import Optional

from ..note_types import ToleranceStatus
from ..tolerance import meter_position


@dataclass(frozen=True)
class LogFrequencyScale:
    """Maps frequencies to screen rows on a logarithmic axis, high notes on top."""

    min_hz: float
    max_hz: float
    top: float
    height: float

    def __post_init__(self):
        if self.min_hz <= 0 or self.max_hz <= self.min_hz:
            raise ValueError(f"Invalid frequency axis {self.min_hz!r}-{self.max_hz!r}")

    def contains(self, frequency: Optional[float]) -> bool:
        return frequency is not None and self.min_hz <= frequency <= self.max_hz

    def clamp(self, frequency: float) -> float:
        return min(self.max_hz, max(self.min_hz, frequency))

    def to_y(self, frequency: float) -> float:
        span = math.log(self.max_hz / self.min_hz)
        fraction = math.log(frequency / self.min_hz) / span
        return self.top + (1.0 - fraction) * self.height


@dataclass(frozen=True)
class TimeScale:
    """Maps sample timestamps to screen columns with "now" at the center.

    The visible span is ``window`` seconds either side of ``now``: history
    scrolls out on the left while the right half stays empty.
    """

    now: float
    window: float
    left: float
    width: float

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    def to_x(self, timestamp: float) -> float:
        start = self.now - self.window
        return self.left + (timestamp - start) / (2 * self.window) * self.width


@dataclass(frozen=True)
class MeterScale:
    """Maps a deviation in cents to a needle column on a horizontal tuning meter."""

    left: float
    width: float
    span: float = 50.0

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    def to_x(self, cents: float) -> float:
        return self.left + meter_position(cents, self.span) * self.width


STATUS_COLORS = {
    ToleranceStatus.PERFECT: (34, 197, 94),
    ToleranceStatus.CLOSE: (234, 179, 8),
    ToleranceStatus.FAR: (239, 68, 68),
}
