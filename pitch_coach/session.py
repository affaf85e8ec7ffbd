"""Practice session state: target note, tolerance, visible range and the trace."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .core.events import SessionEvents
from .errors import InvalidNoteError, SessionStateError
from .grid import generate_grid
from .logger import get_logger
from .note_types import (
    A4_FREQUENCY,
    DEFAULT_NAMING,
    GridEntry,
    Note,
    NoteReading,
    PitchEstimate,
    Sample,
    names_for,
)
from .note_utils import frequency_to_note, note_range, note_to_frequency, parse_note, validate_frequency
from .sample_buffer import SampleBuffer
from .tolerance import Classification, ToleranceBand, ToleranceConfig, classify, tolerance_bands

logger = get_logger(__name__)

# A simple scale for beginners
DEFAULT_EXERCISE: Tuple[str, ...] = ("Do4", "Re4", "Mi4", "Fa4", "Sol4", "La4", "Si4", "Do5")

# Notes offered for free target selection
SELECTABLE_LOW = "Do2"
SELECTABLE_HIGH = "Do6"

DEFAULT_WINDOW_SECONDS = 3.0


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class SessionConfig:
    """Everything a tick reads from the session, swapped as one value."""

    target: Note = field(default_factory=lambda: parse_note(DEFAULT_EXERCISE[0]))
    tolerance: ToleranceConfig = field(default_factory=ToleranceConfig)
    min_note: Note = field(default_factory=lambda: parse_note("Si2"))
    max_note: Note = field(default_factory=lambda: parse_note("Re5"))
    window_seconds: float = DEFAULT_WINDOW_SECONDS  # Trailing history kept in the buffer
    reference: float = A4_FREQUENCY
    naming: str = DEFAULT_NAMING
    clear_on_target_change: bool = True

    def __post_init__(self):
        for name in ("target", "min_note", "max_note"):
            if not isinstance(getattr(self, name), Note):
                object.__setattr__(self, name, parse_note(getattr(self, name)))
        if not isinstance(self.tolerance, ToleranceConfig):
            object.__setattr__(self, "tolerance", ToleranceConfig(self.tolerance))
        if not math.isfinite(self.window_seconds) or self.window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {self.window_seconds!r}")
        object.__setattr__(self, "reference", validate_frequency(self.reference, "reference"))
        names_for(self.naming)

    @property
    def target_frequency(self) -> float:
        return note_to_frequency(self.target, reference=self.reference)

    @property
    def frequency_range(self) -> Tuple[float, float]:
        """Visible (min, max) frequencies in Hz."""
        return (
            note_to_frequency(self.min_note, reference=self.reference),
            note_to_frequency(self.max_note, reference=self.reference),
        )


@dataclass(frozen=True)
class FeedbackFrame:
    """Everything the renderer needs for one tick."""

    elapsed: float
    samples: Tuple[Sample, ...]
    grid: Tuple[GridEntry, ...]
    config: SessionConfig
    target_frequency: float
    bands: Sequence[ToleranceBand]
    classification: Optional[Classification] = None  # None means no signal
    detected: Optional[NoteReading] = None
    clarity: float = 0.0

    @property
    def has_signal(self) -> bool:
        return self.classification is not None

    @property
    def cents(self) -> int:
        """Deviation of the latest sample, 0 while there is no signal."""
        return self.classification.cents if self.classification else 0

    @property
    def frequency(self) -> Optional[float]:
        return self.samples[-1].frequency if self.samples else None


class Exercise:
    """Ordered target notes with an optional free choice of target."""

    def __init__(
        self,
        notes: Optional[Iterable[Union[str, Note]]] = None,
        selectable: Optional[Iterable[Union[str, Note]]] = None,
    ) -> None:
        if notes is None:
            notes = DEFAULT_EXERCISE
        self._notes: List[Note] = [parse_note(n) for n in notes]
        if not self._notes:
            raise InvalidNoteError("An exercise needs at least one note")
        if selectable is None:
            self._selectable = tuple(note_range(SELECTABLE_LOW, SELECTABLE_HIGH))
        else:
            self._selectable = tuple(parse_note(n) for n in selectable)
        self._index = 0
        self._free_target: Optional[Note] = None

    @property
    def notes(self) -> Tuple[Note, ...]:
        return tuple(self._notes)

    @property
    def selectable_notes(self) -> Tuple[Note, ...]:
        return self._selectable

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Note:
        if self._free_target is not None:
            return self._free_target
        return self._notes[self._index]

    @property
    def can_go_next(self) -> bool:
        return self._index < len(self._notes) - 1

    @property
    def can_go_previous(self) -> bool:
        return self._index > 0

    def next(self) -> Note:
        self._free_target = None
        if self.can_go_next:
            self._index += 1
        return self.current

    def previous(self) -> Note:
        self._free_target = None
        if self.can_go_previous:
            self._index -= 1
        return self.current

    def select(self, note: Union[str, Note]) -> Note:
        """Make ``note`` the target, jumping to it if it is part of the exercise."""
        note = parse_note(note)
        if note in self._notes:
            self._index = self._notes.index(note)
            self._free_target = None
        elif note in self._selectable:
            self._free_target = note
        else:
            raise InvalidNoteError(f"{note.label()} is outside the selectable range")
        return self.current

    def __len__(self) -> int:
        return len(self._notes)


class PracticeSession:
    """Owns the sample buffer and configuration for one singer.

    The session is driven by a periodic tick. Configuration setters may be
    called from another thread: they stage a new ``SessionConfig`` that the
    next tick installs before doing anything else, so a tick never mixes old
    and new settings.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        exercise: Optional[Exercise] = None,
        clock: Callable[[], float] = time.perf_counter,
        events: Optional[SessionEvents] = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Initial configuration; the exercise moves to its target.
                Defaults to a configuration targeting the exercise's first note
            exercise: Exercise to navigate, or None for the default scale
            clock: Monotonic clock in seconds, injectable for tests
            events: Event hub to publish to, or None to create one

        Raises:
            InvalidNoteError: If the target is outside the exercise's selectable range
        """
        self._exercise = exercise or Exercise()
        if config is None:
            config = SessionConfig(target=self._exercise.current)
        else:
            self._exercise.select(config.target)
        self._config = config
        self._pending: Optional[SessionConfig] = None
        self._lock = threading.Lock()
        self._buffer = SampleBuffer(clock)
        self._state = SessionState.IDLE
        self._events = events or SessionEvents()
        self._grid = self._build_grid(config)
        self._last_classification: Optional[Classification] = None

        logger.info(
            f"Practice session created: target={config.target.label(config.naming)}, "
            f"tolerance={config.tolerance.unit:g} cents"
        )

    # State

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def config(self) -> SessionConfig:
        """The configuration the last tick used."""
        return self._config

    @property
    def exercise(self) -> Exercise:
        return self._exercise

    @property
    def events(self) -> SessionEvents:
        return self._events

    @property
    def grid(self) -> Tuple[GridEntry, ...]:
        return self._grid

    @property
    def last_classification(self) -> Optional[Classification]:
        """Most recent classification, kept while the signal is absent."""
        return self._last_classification

    def snapshot(self) -> Tuple[Sample, ...]:
        return self._buffer.snapshot()

    def start(self, now: Optional[float] = None) -> bool:
        """Move from idle to active with an empty trace. No-op when active.

        Returns:
            True if the session was started, False if it was already active
        """
        if self.is_active:
            logger.debug("Session already active")
            return False
        self._apply_pending()
        self._buffer.reset(now)
        self._last_classification = None
        self._state = SessionState.ACTIVE
        logger.info("Session started")
        self._events.emit_started()
        return True

    def stop(self) -> bool:
        """Move from active to idle and discard the trace. No-op when idle.

        Returns:
            True if the session was stopped, False if it was already idle
        """
        if not self.is_active:
            logger.debug("Session already idle")
            return False
        self._state = SessionState.IDLE
        self._buffer.reset()
        self._last_classification = None
        logger.info("Session stopped")
        self._events.emit_stopped()
        return True

    def tick(
        self,
        reading: Union[PitchEstimate, float, None],
        now: Optional[float] = None,
    ) -> FeedbackFrame:
        """Record one detector reading and return the frame to render.

        Args:
            reading: A PitchEstimate, a bare frequency, or None for no pitch
            now: Clock time of the tick, or None to read the session clock

        Raises:
            SessionStateError: If the session is not active
            SampleOrderError: If ``now`` goes backwards
        """
        if not self.is_active:
            raise SessionStateError("Tick delivered to a session that is not active")

        self._apply_pending()
        config = self._config

        if isinstance(reading, PitchEstimate):
            frequency, clarity = reading.frequency, reading.clarity
        else:
            frequency, clarity = reading, (0.0 if reading is None else 1.0)

        elapsed = self._buffer.elapsed(now)
        self._buffer.record(elapsed, frequency, config.window_seconds)

        target_frequency = config.target_frequency
        classification = None
        detected = None
        if frequency is not None:
            classification = classify(frequency, target_frequency, config.tolerance)
            detected = frequency_to_note(frequency, config.reference, config.naming)
            self._last_classification = classification

        frame = FeedbackFrame(
            elapsed=elapsed,
            samples=self._buffer.snapshot(),
            grid=self._grid,
            config=config,
            target_frequency=target_frequency,
            bands=tolerance_bands(target_frequency, config.tolerance),
            classification=classification,
            detected=detected,
            clarity=clarity,
        )
        self._events.emit_feedback(frame)
        return frame

    # Configuration

    def set_target(self, target: Union[str, Note]) -> None:
        self._stage(target=parse_note(target))

    def set_tolerance(self, tolerance: Union[ToleranceConfig, float]) -> None:
        if not isinstance(tolerance, ToleranceConfig):
            tolerance = ToleranceConfig(tolerance)
        self._stage(tolerance=tolerance)

    def set_visible_range(self, min_note: Union[str, Note], max_note: Union[str, Note]) -> None:
        self._stage(min_note=parse_note(min_note), max_note=parse_note(max_note))

    def set_reference(self, reference: float) -> None:
        self._stage(reference=validate_frequency(reference, "reference"))

    def update(self, **changes) -> None:
        """Stage several configuration changes to take effect together."""
        self._stage(**changes)

    def next_target(self) -> Note:
        note = self._exercise.next()
        self.set_target(note)
        return note

    def previous_target(self) -> Note:
        note = self._exercise.previous()
        self.set_target(note)
        return note

    def select_target(self, note: Union[str, Note]) -> Note:
        note = self._exercise.select(note)
        self.set_target(note)
        return note

    def _stage(self, **changes) -> None:
        with self._lock:
            base = self._pending or self._config
            self._pending = replace(base, **changes)
        if not self.is_active:
            self._apply_pending()

    def _apply_pending(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is None or pending == self._config:
            return

        old = self._config
        self._config = pending
        if (
            pending.min_note != old.min_note
            or pending.max_note != old.max_note
            or pending.reference != old.reference
        ):
            self._grid = self._build_grid(pending)

        logger.info(
            f"Configuration applied: target={pending.target.label(pending.naming)}, "
            f"tolerance={pending.tolerance.unit:g} cents, "
            f"range={pending.min_note.label(pending.naming)}-{pending.max_note.label(pending.naming)}"
        )

        if pending.target != old.target:
            if pending.clear_on_target_change and self.is_active:
                self._buffer.clear()
            self._last_classification = None
            self._events.emit_target_changed(pending.target, old.target)

    @staticmethod
    def _build_grid(config: SessionConfig) -> Tuple[GridEntry, ...]:
        min_freq, max_freq = config.frequency_range
        grid = generate_grid(min_freq, max_freq, config.reference)
        logger.debug(f"Grid rebuilt with {len(grid)} semitones")
        return grid
