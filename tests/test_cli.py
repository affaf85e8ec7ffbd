import tempfile
import unittest

from pitch_coach.cli.main import build_parser, build_session, main, session_overrides
from pitch_coach.cli.monitor import run_monitor
from pitch_coach.core.config import ConfigManager
from pitch_coach.errors import InvalidNoteError
from pitch_coach.mock_pitch_source import ScriptedPitchSource
from pitch_coach.note_utils import parse_note


class TestParser(unittest.TestCase):
    def test_gui_options(self):
        args = build_parser().parse_args(
            ["gui", "--tolerance", "20", "--target", "Sol4", "--naming", "letter"]
        )
        self.assertEqual(args.command, "gui")
        self.assertEqual(args.tolerance, 20.0)
        self.assertEqual(args.target, "Sol4")
        self.assertEqual(args.naming, "letter")
        self.assertIsNone(args.device)

    def test_monitor_duration(self):
        args = build_parser().parse_args(["monitor", "--duration", "2.5", "--wav", "voice.wav"])
        self.assertEqual(args.duration, 2.5)
        self.assertEqual(args.wav, "voice.wav")

    def test_overrides_skip_unset(self):
        args = build_parser().parse_args(["gui", "--min-note", "Do3"])
        self.assertEqual(session_overrides(args), {"min_note": "Do3"})

    def test_no_command(self):
        self.assertEqual(main([]), 1)


class TestBuildSession(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.manager = ConfigManager(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def parse(self, *argv):
        return build_parser().parse_args(["gui", *argv])

    def test_saved_settings(self):
        self.manager.update_config("session", {"tolerance_cents": 15})
        session = build_session(self.parse(), self.manager)
        self.assertEqual(session.config.tolerance.unit, 15)
        self.assertEqual(session.config.target, parse_note("Do4"))
        self.assertFalse(session.is_active)

    def test_command_line_wins(self):
        self.manager.update_config("session", {"tolerance_cents": 15})
        session = build_session(self.parse("--tolerance", "30", "--target", "Mi4"), self.manager)
        self.assertEqual(session.config.tolerance.unit, 30)
        self.assertEqual(session.config.target, parse_note("Mi4"))
        self.assertEqual(session.exercise.current, parse_note("Mi4"))

    def test_free_target(self):
        session = build_session(self.parse("--target", "La2"), self.manager)
        self.assertEqual(session.exercise.current, parse_note("La2"))

    def test_target_outside_range(self):
        with self.assertRaises(InvalidNoteError):
            build_session(self.parse("--target", "Do8"), self.manager)

    def test_invalid_target_exit_code(self):
        self.assertEqual(
            main(["monitor", "--target", "Xx4", "--config-dir", self._tmp.name]), 2
        )


class TestMonitor(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        manager = ConfigManager(self._tmp.name)
        args = build_parser().parse_args(["monitor", "--target", "La4"])
        self.session = build_session(args, manager)

    def tearDown(self):
        self._tmp.cleanup()

    def test_prints_voiced_ticks(self):
        source = ScriptedPitchSource([440.0, None, 445.0])
        lines = []
        counts = run_monitor(
            self.session,
            source,
            duration=60.0,
            output=lines.append,
            sleep=lambda seconds: None,
            max_ticks=3,
        )
        self.assertEqual(counts, {"perfect": 1, "silent": 1, "close": 1})
        self.assertEqual(len(lines), 2)
        self.assertIn("La4", lines[0])
        self.assertIn("+20 cents", lines[1])
        self.assertFalse(self.session.is_active)
        self.assertFalse(source.is_running)


if __name__ == "__main__":
    unittest.main()
