"""Semitone grid for the piano-roll overlay."""

import math
from typing import Tuple, Union

from .note_types import A4_FREQUENCY, GridEntry, Note
from .note_utils import (
    Number,
    note_to_frequency,
    semitone_frequency,
    semitones_between,
    validate_frequency,
)


def generate_grid(
    min_freq: Number, max_freq: Number, reference: Number = A4_FREQUENCY
) -> Tuple[GridEntry, ...]:
    """Every equal-tempered semitone with ``min_freq <= f <= max_freq``, ascending.

    The grid is always rebuilt from scratch; it is a few dozen entries for a
    vocal range. An inverted range (``min_freq > max_freq``) gives an empty
    grid.

    Raises:
        InvalidFrequencyError: If a bound or the reference is not a positive number
    """
    reference = validate_frequency(reference, "reference")
    min_freq = validate_frequency(min_freq, "min_freq")
    max_freq = validate_frequency(max_freq, "max_freq")
    if min_freq > max_freq:
        return ()

    # One semitone of slack either side, then filter on the exact frequencies
    # so that a bound equal to a note's own frequency includes that note.
    first = math.floor(semitones_between(min_freq, reference)) - 1
    last = math.ceil(semitones_between(max_freq, reference)) + 1

    entries = []
    for semitones in range(first, last + 1):
        frequency = semitone_frequency(semitones, reference)
        if min_freq <= frequency <= max_freq:
            note = Note.from_semitones(semitones)
            entries.append(GridEntry(note, frequency, note.is_accidental))
    return tuple(entries)


def grid_for_notes(
    low: Union[str, Note], high: Union[str, Note], reference: Number = A4_FREQUENCY
) -> Tuple[GridEntry, ...]:
    """Grid for a visible range given as two notes, both included."""
    return generate_grid(
        note_to_frequency(low, reference=reference),
        note_to_frequency(high, reference=reference),
        reference,
    )
