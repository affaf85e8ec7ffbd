"""Publish/subscribe hub for practice session events."""

from collections import defaultdict
from enum import Enum, auto
from typing import Any, Callable, DefaultDict, List

from ..logger import get_logger

logger = get_logger(__name__)


class SessionEventType(Enum):
    """Event types emitted by a practice session."""

    STARTED = auto()
    STOPPED = auto()
    TARGET_CHANGED = auto()
    FEEDBACK = auto()


class EventEmitter:
    """Calls registered listeners synchronously, in registration order."""

    def __init__(self):
        self._listeners: DefaultDict[Any, List[Callable]] = defaultdict(list)

    def on(self, event_type: Any, callback: Callable) -> None:
        """Subscribe ``callback`` to ``event_type``; subscribing twice is a no-op."""
        listeners = self._listeners[event_type]
        if callback not in listeners:
            listeners.append(callback)
            logger.debug(f"Listener added for {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Unsubscribe ``callback``; unknown callbacks are ignored."""
        listeners = self._listeners.get(event_type)
        if listeners and callback in listeners:
            listeners.remove(callback)
            logger.debug(f"Listener removed for {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Call every listener of ``event_type`` with the given arguments.

        A listener that raises is logged and skipped, so one faulty
        subscriber cannot break a session tick.
        """
        for callback in tuple(self._listeners.get(event_type, ())):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Listener for {event_type} failed: {e}", exc_info=True)

    def clear(self) -> None:
        self._listeners.clear()
        logger.debug("All listeners removed")


class SessionEvents:
    """Typed subscribe/emit helpers over an ``EventEmitter``."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_started(self, callback: Callable[[], None]) -> None:
        self._emitter.on(SessionEventType.STARTED, callback)

    def on_stopped(self, callback: Callable[[], None]) -> None:
        self._emitter.on(SessionEventType.STOPPED, callback)

    def on_target_changed(self, callback: Callable) -> None:
        """Register a callback receiving ``(new_target, old_target)`` notes."""
        self._emitter.on(SessionEventType.TARGET_CHANGED, callback)

    def on_feedback(self, callback: Callable) -> None:
        """Register a callback receiving the FeedbackFrame of every tick."""
        self._emitter.on(SessionEventType.FEEDBACK, callback)

    def emit_started(self) -> None:
        self._emitter.emit(SessionEventType.STARTED)

    def emit_stopped(self) -> None:
        self._emitter.emit(SessionEventType.STOPPED)

    def emit_target_changed(self, new_target, old_target) -> None:
        self._emitter.emit(SessionEventType.TARGET_CHANGED, new_target, old_target)

    def emit_feedback(self, frame) -> None:
        self._emitter.emit(SessionEventType.FEEDBACK, frame)

    def clear(self) -> None:
        self._emitter.clear()
