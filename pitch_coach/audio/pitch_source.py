"""Per-tick pitch readings: audio input, estimator and gating combined."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..core.interfaces import IAudioInput, IPitchEstimator, IPitchSource
from ..logger import get_logger
from ..note_types import PitchEstimate

logger = get_logger(__name__)


@dataclass(frozen=True)
class PitchGate:
    """Drop estimates that are not confident or not in the singing range.

    A rejected estimate keeps its clarity but loses its frequency, which the
    session treats as "no signal".
    """

    min_clarity: float = 0.9
    min_frequency: float = 60.0
    max_frequency: float = 1000.0

    def accepts(self, estimate: PitchEstimate) -> bool:
        return (
            estimate.frequency is not None
            and estimate.clarity > self.min_clarity
            and self.min_frequency < estimate.frequency < self.max_frequency
        )

    def apply(self, estimate: PitchEstimate) -> PitchEstimate:
        if self.accepts(estimate):
            return estimate
        if estimate.frequency is not None:
            logger.debug(
                f"Gated out {estimate.frequency:.1f}Hz (clarity {estimate.clarity:.2f})"
            )
        return PitchEstimate(None, estimate.clarity)


class PitchSource(IPitchSource):
    """Reads the latest audio frame on each tick and estimates its pitch.

    This class acts as a facade for the audio input, the estimator and the
    gate, so the render loop only ever calls ``read``.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        estimator: Optional[IPitchEstimator] = None,
        gate: Optional[PitchGate] = None,
    ) -> None:
        """Initialize the pitch source.

        Args:
            audio_input: Audio input to pull frames from
            estimator: Pitch estimator, or None for an aubio estimator matching the input
            gate: Gating thresholds, or None for the defaults
        """
        self._audio_input = audio_input
        if estimator is None:
            # aubio is only loaded when no estimator is supplied
            from .pitch_estimator import AubioPitchEstimator

            estimator = AubioPitchEstimator(sample_rate=audio_input.sample_rate)
        self._estimator = estimator
        self._gate = gate or PitchGate()

    @property
    def estimator(self) -> IPitchEstimator:
        return self._estimator

    @property
    def gate(self) -> PitchGate:
        return self._gate

    def start(self) -> bool:
        if self._audio_input.is_running():
            return True
        started = self._audio_input.start()
        if not started:
            logger.error("Failed to start audio input")
        return started

    def stop(self) -> None:
        if self._audio_input.is_running():
            self._audio_input.stop()

    def is_running(self) -> bool:
        return self._audio_input.is_running()

    def read(self) -> PitchEstimate:
        if not self._audio_input.is_running():
            return PitchEstimate(None, 0.0)
        estimate = self._estimator.estimate(self._audio_input.read_frame())
        return self._gate.apply(estimate)
