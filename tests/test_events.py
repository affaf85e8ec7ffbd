import unittest

from pitch_coach.core.events import EventEmitter, SessionEvents, SessionEventType


class TestEventEmitter(unittest.TestCase):
    def setUp(self):
        self.emitter = EventEmitter()
        self.received = []

    def listener(self, *args, **kwargs):
        self.received.append((args, kwargs))

    def test_emit_passes_arguments(self):
        self.emitter.on(SessionEventType.FEEDBACK, self.listener)
        self.emitter.emit(SessionEventType.FEEDBACK, 1, key="value")
        self.assertEqual(self.received, [((1,), {"key": "value"})])

    def test_duplicate_listener_registered_once(self):
        self.emitter.on(SessionEventType.STARTED, self.listener)
        self.emitter.on(SessionEventType.STARTED, self.listener)
        self.emitter.emit(SessionEventType.STARTED)
        self.assertEqual(len(self.received), 1)

    def test_off(self):
        self.emitter.on(SessionEventType.STARTED, self.listener)
        self.emitter.off(SessionEventType.STARTED, self.listener)
        self.emitter.off(SessionEventType.STOPPED, self.listener)
        self.emitter.emit(SessionEventType.STARTED)
        self.assertEqual(self.received, [])

    def test_failing_listener_does_not_stop_others(self):
        def broken():
            raise RuntimeError("boom")

        self.emitter.on(SessionEventType.STOPPED, broken)
        self.emitter.on(SessionEventType.STOPPED, self.listener)
        self.emitter.emit(SessionEventType.STOPPED)
        self.assertEqual(len(self.received), 1)

    def test_clear(self):
        self.emitter.on(SessionEventType.STARTED, self.listener)
        self.emitter.clear()
        self.emitter.emit(SessionEventType.STARTED)
        self.assertEqual(self.received, [])

    def test_emit_without_listeners(self):
        self.emitter.emit(SessionEventType.TARGET_CHANGED, "a", "b")


class TestSessionEvents(unittest.TestCase):
    def test_target_changed_arguments(self):
        events = SessionEvents()
        changes = []
        events.on_target_changed(lambda new, old: changes.append((new, old)))
        events.emit_target_changed("Re4", "Do4")
        self.assertEqual(changes, [("Re4", "Do4")])

    def test_clear(self):
        events = SessionEvents()
        frames = []
        events.on_feedback(frames.append)
        events.clear()
        events.emit_feedback(object())
        self.assertEqual(frames, [])


if __name__ == "__main__":
    unittest.main()
