"""Type definitions for the Pitch Coach project."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Dict, List, NamedTuple, Optional, Tuple

from .errors import InvalidNoteError

# Twelve-tone equal temperament anchored on A4
PITCH_CLASS_COUNT = 12
REFERENCE_CLASS_INDEX = 9  # A / La
REFERENCE_OCTAVE = 4
A4_FREQUENCY = 440.0

SOLFEGE_NAMES: Tuple[str, ...] = (
    "Do",
    "Do#",
    "Re",
    "Re#",
    "Mi",
    "Fa",
    "Fa#",
    "Sol",
    "Sol#",
    "La",
    "La#",
    "Si",
)

LETTER_NAMES: Tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

NAMING_SYSTEMS: Dict[str, Tuple[str, ...]] = {
    "solfege": SOLFEGE_NAMES,
    "letter": LETTER_NAMES,
}
DEFAULT_NAMING = "solfege"

# Positions of the black keys within the C-based cycle
ACCIDENTAL_CLASSES = frozenset({1, 3, 6, 8, 10})


def names_for(naming: str) -> Tuple[str, ...]:
    """Return the twelve pitch-class names of a naming system."""
    try:
        return NAMING_SYSTEMS[naming]
    except KeyError:
        raise InvalidNoteError(
            f"Unknown naming system {naming!r}; expected one of {sorted(NAMING_SYSTEMS)}"
        ) from None


class ToleranceStatus(str, Enum):
    """Tolerance tier of a measured pitch relative to its target."""

    PERFECT = "perfect"
    CLOSE = "close"
    FAR = "far"


@total_ordering
@dataclass(frozen=True)
class Note:
    """An equal-tempered note: pitch class (0 = C/Do) and octave in SPN."""

    pitch_class: int
    octave: int

    def __post_init__(self):
        if not isinstance(self.pitch_class, int) or not 0 <= self.pitch_class < PITCH_CLASS_COUNT:
            raise InvalidNoteError(f"Pitch class out of range: {self.pitch_class!r}")
        if not isinstance(self.octave, int):
            raise InvalidNoteError(f"Octave must be an integer: {self.octave!r}")

    @classmethod
    def from_semitones(cls, semitones: int) -> Note:
        """Decode a signed semitone distance from A4 into a note."""
        octave_offset, pitch_class = divmod(semitones + REFERENCE_CLASS_INDEX, PITCH_CLASS_COUNT)
        return cls(pitch_class, REFERENCE_OCTAVE + octave_offset)

    @classmethod
    def from_name(cls, name: str, octave: int) -> Note:
        """Build a note from a canonical pitch-class name in any naming system."""
        for names in NAMING_SYSTEMS.values():
            if name in names:
                return cls(names.index(name), octave)
        raise InvalidNoteError(f"Unknown note name: {name!r}")

    @property
    def semitones(self) -> int:
        """Signed semitone distance from A4."""
        return (self.octave - REFERENCE_OCTAVE) * PITCH_CLASS_COUNT + (
            self.pitch_class - REFERENCE_CLASS_INDEX
        )

    @property
    def is_accidental(self) -> bool:
        return self.pitch_class in ACCIDENTAL_CLASSES

    def name(self, naming: str = DEFAULT_NAMING) -> str:
        return names_for(naming)[self.pitch_class]

    def label(self, naming: str = DEFAULT_NAMING) -> str:
        """Note name with octave, e.g. 'La4' or 'A4'."""
        return f"{self.name(naming)}{self.octave}"

    def transpose(self, semitones: int) -> Note:
        return Note.from_semitones(self.semitones + semitones)

    def __lt__(self, other):
        if not isinstance(other, Note):
            return NotImplemented
        return self.semitones < other.semitones

    def __str__(self):
        return self.label()


class NoteReading(NamedTuple):
    """Nearest note to a measured frequency and the offset from it in cents."""

    name: str
    octave: int
    cents: int

    @property
    def note(self) -> Note:
        return Note.from_name(self.name, self.octave)

    @property
    def label(self) -> str:
        return f"{self.name}{self.octave}"


@dataclass(frozen=True)
class GridEntry:
    """One semitone row of the piano-roll overlay."""

    note: Note
    frequency: float
    is_accidental: bool

    @property
    def lower_edge(self) -> float:
        """Geometric mid-point to the semitone below."""
        return self.frequency * 2.0 ** (-1.0 / 24.0)

    @property
    def upper_edge(self) -> float:
        """Geometric mid-point to the semitone above."""
        return self.frequency * 2.0 ** (1.0 / 24.0)


@dataclass(frozen=True)
class Sample:
    """A single trace point: seconds since session start and the pitch, if any."""

    timestamp: float
    frequency: Optional[float] = None

    @property
    def has_pitch(self) -> bool:
        return self.frequency is not None


@dataclass(frozen=True)
class PitchEstimate:
    """Output of the pitch estimator for one audio frame."""

    frequency: Optional[float]  # Hz, None when no pitch was detected
    clarity: float = 0.0  # Detector confidence (0-1)

    @property
    def has_pitch(self) -> bool:
        return self.frequency is not None


def segments(samples) -> List[List[Sample]]:
    """Split samples into runs of consecutive voiced samples.

    Every absent-pitch sample ends the current run, so a renderer drawing one
    polyline per run shows a visible break wherever no pitch was detected.
    """
    runs: List[List[Sample]] = []
    current: List[Sample] = []
    for sample in samples:
        if sample.has_pitch:
            current.append(sample)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs
