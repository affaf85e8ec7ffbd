from typing import Iterable, Optional, Union

from .core.interfaces import IPitchSource
from .note_types import PitchEstimate


class ScriptedPitchSource(IPitchSource):
    """A pitch source for unit tests that replays a fixed list of readings.

    Each entry is a frequency, a PitchEstimate, or None for silence. Once the
    script runs out every read is silent.
    """

    def __init__(self, readings: Iterable[Union[float, PitchEstimate, None]] = ()):
        self._readings = list(readings)
        self._position = 0
        self.is_running = False
        self.start_calls = 0

    def start(self):
        self.start_calls += 1
        self.is_running = True
        return True

    def stop(self):
        self.is_running = False

    def read(self) -> PitchEstimate:
        if self._position >= len(self._readings):
            return PitchEstimate(None, 0.0)
        reading: Optional[Union[float, PitchEstimate]] = self._readings[self._position]
        self._position += 1
        if isinstance(reading, PitchEstimate):
            return reading
        if reading is None:
            return PitchEstimate(None, 0.0)
        return PitchEstimate(float(reading), 1.0)
