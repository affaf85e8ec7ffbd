"""Utility functions for working with musical notes and frequencies."""

import math
import re
from typing import List, Optional, Union

import numpy as np

from .errors import InvalidFrequencyError, InvalidNoteError
from .logger import get_logger
from .note_types import (
    A4_FREQUENCY,
    DEFAULT_NAMING,
    LETTER_NAMES,
    PITCH_CLASS_COUNT,
    SOLFEGE_NAMES,
    Note,
    NoteReading,
)

# Get logger for this module
logger = get_logger(__name__)

CENTS_PER_SEMITONE = 100
CENTS_PER_OCTAVE = 1200

# Compile regex to extract note name, accidental and octave
# This pattern matches:
# - Solfege syllable (Do..Si, case insensitive) or letter name (A-G)
# - Optional accidental (#, ##, b, bb or the unicode signs)
# - Octave number, possibly negative
NOTE_PATTERN = re.compile(
    r"^(?P<name>(?i:do|re|mi|fa|sol|la|si)|[A-Ga-g])(?P<accidental>##|#|bb|b|♯|♭)?(?P<octave>-?\d+)$"
)

ACCIDENTAL_OFFSETS = {
    None: 0,
    "#": 1,
    "♯": 1,
    "##": 2,
    "b": -1,
    "♭": -1,
    "bb": -2,
}

Number = Union[int, float, np.integer, np.floating]


def is_real_number(value) -> bool:
    """True for Python and numpy ints and floats, but not for bools."""
    return not isinstance(value, (bool, np.bool_)) and isinstance(
        value, (int, float, np.integer, np.floating)
    )


def validate_frequency(value, what: str = "frequency") -> float:
    """Return ``value`` as a float, or raise if it is not a usable frequency.

    Raises:
        InvalidFrequencyError: If the value is not a positive, finite real number
    """
    if not is_real_number(value):
        raise InvalidFrequencyError(f"{what} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidFrequencyError(f"{what} must be positive and finite, got {value!r}")
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going up (toward +inf)."""
    return int(math.floor(value + 0.5))


def semitones_between(frequency: Number, reference: Number = A4_FREQUENCY) -> float:
    """Fractional equal-tempered semitone distance from ``reference`` to ``frequency``."""
    frequency = validate_frequency(frequency)
    reference = validate_frequency(reference, "reference")
    return float(PITCH_CLASS_COUNT * np.log2(frequency / reference))


def cents_between(measured: Number, target: Number) -> float:
    """Signed distance in cents from ``target`` to ``measured``; positive is sharp."""
    measured = validate_frequency(measured, "measured frequency")
    target = validate_frequency(target, "target frequency")
    return float(CENTS_PER_OCTAVE * np.log2(measured / target))


def semitone_frequency(semitones: int, reference: Number = A4_FREQUENCY) -> float:
    """Frequency of the equal-tempered semitone ``semitones`` steps from A4."""
    reference = validate_frequency(reference, "reference")
    return reference * 2.0 ** (semitones / PITCH_CLASS_COUNT)


def frequency_to_note(
    frequency: Number,
    reference: Number = A4_FREQUENCY,
    naming: str = DEFAULT_NAMING,
) -> NoteReading:
    """Convert a frequency in Hz to the nearest note and its offset in cents.

    The nearest note is chosen by rounding the semitone distance from A4, so
    the returned offset always lies in [-50, 50] cents. Octave numbers follow
    Scientific Pitch Notation: A4 is the reference and octaves change between
    B and C (Si3 -> Do4).

    Args:
        frequency: The frequency in Hz to convert
        reference: Frequency of A4 in Hz
        naming: 'solfege' (Do, Re, ...) or 'letter' (C, D, ...)

    Returns:
        NoteReading: ``(name, octave, cents)``, e.g. ``('La', 4, 0)`` for 440 Hz

    Raises:
        InvalidFrequencyError: If frequency or reference is not a positive number
    """
    semitones = semitones_between(frequency, reference)
    nearest = round_half_up(semitones)
    cents = round_half_up((semitones - nearest) * CENTS_PER_SEMITONE)
    note = Note.from_semitones(nearest)
    return NoteReading(note.name(naming), note.octave, cents)


def nearest_note(frequency: Number, reference: Number = A4_FREQUENCY) -> Note:
    """Return the equal-tempered note closest to ``frequency``."""
    return Note.from_semitones(round_half_up(semitones_between(frequency, reference)))


def parse_note(label: Union[str, Note]) -> Note:
    """Parse a note label such as 'Sol4', 'G4', 'Gb4' or 'B#3'.

    Flats and double accidentals are resolved to the equivalent equal-tempered
    note, carrying into the neighbouring octave where needed (B#3 is Do4).

    Raises:
        InvalidNoteError: If the label cannot be parsed
    """
    if isinstance(label, Note):
        return label
    if not isinstance(label, str):
        raise InvalidNoteError(f"Note label must be a string, got {label!r}")

    match = NOTE_PATTERN.match(label.strip())
    if not match:
        raise InvalidNoteError(f"Invalid note label: {label!r}")

    name = match.group("name")
    if len(name) == 1:
        pitch_class = LETTER_NAMES.index(name.upper())
    else:
        pitch_class = SOLFEGE_NAMES.index(name.capitalize())

    base = Note(pitch_class, int(match.group("octave")))
    return base.transpose(ACCIDENTAL_OFFSETS[match.group("accidental")])


def note_to_frequency(
    note: Union[str, Note],
    octave: Optional[int] = None,
    reference: Number = A4_FREQUENCY,
) -> float:
    """Frequency of a note at zero cents offset.

    Accepts a ``Note``, a full label (``'La4'``), or a pitch-class name together
    with an octave (``'La', 4``).

    Raises:
        InvalidNoteError: If the note cannot be resolved
        InvalidFrequencyError: If reference is not a positive number
    """
    if octave is not None:
        if isinstance(note, Note):
            raise InvalidNoteError("Pass either a Note or a name with an octave, not both")
        note = parse_note(f"{note}{octave}")
    else:
        note = parse_note(note)
    return semitone_frequency(note.semitones, reference)


def note_range(low: Union[str, Note], high: Union[str, Note]) -> List[Note]:
    """All notes from ``low`` to ``high`` inclusive, ascending. Empty if low > high."""
    low = parse_note(low)
    high = parse_note(high)
    return [Note.from_semitones(n) for n in range(low.semitones, high.semitones + 1)]


def get_note_name(
    freq: Number, naming: str = DEFAULT_NAMING, reference: Number = A4_FREQUENCY
) -> str:
    """Label of the nearest note, or '---' when there is no usable pitch.

    Display helper: unlike ``frequency_to_note`` it treats missing or
    non-positive input as "no note" instead of rejecting it.
    """
    if freq is None:
        return "---"
    try:
        return frequency_to_note(freq, reference, naming).label
    except InvalidFrequencyError:
        logger.debug(f"No note for frequency {freq!r}")
        return "---"


def convert_note_notation(label: str, naming: str = DEFAULT_NAMING) -> str:
    """Render a note label in another naming system.

    Examples:
        >>> convert_note_notation('Gb4', 'letter')
        'F#4'
        >>> convert_note_notation('A4', 'solfege')
        'La4'
    """
    return parse_note(label).label(naming)
