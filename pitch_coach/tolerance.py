"""Classification of a sung pitch against a target note."""

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Union

from .errors import InvalidToleranceError
from .logger import get_logger
from .note_types import ToleranceStatus
from .note_utils import (
    CENTS_PER_OCTAVE,
    cents_between,
    is_real_number,
    round_half_up,
    validate_frequency,
)

logger = get_logger(__name__)

MIN_TOLERANCE_CENTS = 5.0
MAX_TOLERANCE_CENTS = 50.0
DEFAULT_TOLERANCE_CENTS = 10.0


@dataclass(frozen=True)
class ToleranceConfig:
    """A single tolerance unit in cents from which the three tiers are derived.

    A deviation up to ``unit`` is perfect, up to ``2 * unit`` is close; the far
    band drawn around the target extends to ``3 * unit``.
    """

    unit: float = DEFAULT_TOLERANCE_CENTS

    def __post_init__(self):
        if not is_real_number(self.unit):
            raise InvalidToleranceError(f"Tolerance unit must be a number, got {self.unit!r}")
        object.__setattr__(self, "unit", float(self.unit))
        if not math.isfinite(self.unit) or self.unit <= 0:
            raise InvalidToleranceError(
                f"Tolerance unit must be positive and finite, got {self.unit!r}"
            )

    @classmethod
    def clamped(cls, unit: float) -> "ToleranceConfig":
        """Build a config with ``unit`` limited to the range offered to users."""
        return cls(min(MAX_TOLERANCE_CENTS, max(MIN_TOLERANCE_CENTS, float(unit))))

    @property
    def perfect(self) -> float:
        return self.unit

    @property
    def close(self) -> float:
        return 2 * self.unit

    @property
    def far(self) -> float:
        return 3 * self.unit

    def widened(self, step: float) -> "ToleranceConfig":
        """Return a clamped config ``step`` cents wider (negative narrows)."""
        return ToleranceConfig.clamped(self.unit + step)


class Classification(NamedTuple):
    """Signed deviation in whole cents and the tolerance tier it falls in."""

    cents: int
    status: ToleranceStatus

    @property
    def direction(self) -> str:
        if self.status is ToleranceStatus.PERFECT:
            return "in tune"
        return "sharp" if self.cents > 0 else "flat"

    @property
    def label(self) -> str:
        """Short feedback text for the singer."""
        if self.status is ToleranceStatus.PERFECT:
            return "Perfect!"
        if self.status is ToleranceStatus.CLOSE:
            return "A little high" if self.cents > 0 else "A little low"
        return "Too high" if self.cents > 0 else "Too low"


def _as_config(tolerance: Union[ToleranceConfig, float]) -> ToleranceConfig:
    if isinstance(tolerance, ToleranceConfig):
        return tolerance
    return ToleranceConfig(tolerance)


def classify(
    measured: float, target: float, tolerance: Union[ToleranceConfig, float]
) -> Classification:
    """Classify a measured frequency against a target frequency.

    The deviation is ``1200 * log2(measured / target)`` rounded to the nearest
    cent. A deviation of exactly ``unit`` is still perfect and exactly
    ``2 * unit`` is still close: ties go to the stricter tier.

    Callers must not classify a missing pitch; absence is handled upstream as
    a "no signal" state.

    Args:
        measured: Detected frequency in Hz
        target: Target note frequency in Hz
        tolerance: A ToleranceConfig or a unit in cents

    Returns:
        Classification: ``(cents, status)``

    Raises:
        InvalidFrequencyError: If either frequency is not positive and finite
        InvalidToleranceError: If the unit is not positive and finite
    """
    config = _as_config(tolerance)
    cents = round_half_up(cents_between(measured, target))
    deviation = abs(cents)

    if deviation <= config.perfect:
        status = ToleranceStatus.PERFECT
    elif deviation <= config.close:
        status = ToleranceStatus.CLOSE
    else:
        status = ToleranceStatus.FAR

    logger.debug(f"Classified {measured:.2f}Hz vs {target:.2f}Hz: {cents:+d} cents ({status.value})")
    return Classification(cents, status)


class ToleranceBand(NamedTuple):
    status: ToleranceStatus
    lower: float
    upper: float


def tolerance_bands(
    target: float, tolerance: Union[ToleranceConfig, float]
) -> List[ToleranceBand]:
    """Frequency bands around the target for the overlay, outermost first."""
    target = validate_frequency(target, "target frequency")
    config = _as_config(tolerance)
    bands = []
    for status, cents in (
        (ToleranceStatus.FAR, config.far),
        (ToleranceStatus.CLOSE, config.close),
        (ToleranceStatus.PERFECT, config.perfect),
    ):
        ratio = 2.0 ** (cents / CENTS_PER_OCTAVE)
        bands.append(ToleranceBand(status, target / ratio, target * ratio))
    return bands


def meter_position(cents: float, span: float = 50.0) -> float:
    """Map a deviation to a needle position in [0, 1], 0.5 meaning in tune."""
    clamped = max(-span, min(span, cents))
    return (clamped + span) / (2 * span)
