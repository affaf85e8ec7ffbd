import json
import tempfile
import unittest
from pathlib import Path

from pitch_coach.core.config import (
    DEFAULT_CONFIGS,
    ConfigManager,
    exercise_from_dict,
    session_config_from_dict,
)
from pitch_coach.errors import InvalidNoteError
from pitch_coach.note_utils import parse_note


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config_dir = Path(self._tmp.name) / "pitch_coach"

    def tearDown(self):
        self._tmp.cleanup()

    def test_creates_default_files(self):
        manager = ConfigManager(str(self.config_dir))
        self.assertTrue((self.config_dir / "session.json").exists())
        self.assertTrue((self.config_dir / "audio.json").exists())
        self.assertEqual(manager.get_config("session"), DEFAULT_CONFIGS["session"])
        self.assertEqual(manager.get_config("audio")["frame_size"], 2048)

    def test_update_persists(self):
        manager = ConfigManager(str(self.config_dir))
        self.assertTrue(manager.update_config("session", {"tolerance_cents": 25}))

        reloaded = ConfigManager(str(self.config_dir))
        self.assertEqual(reloaded.get_config("session")["tolerance_cents"], 25)

    def test_get_config_returns_copy(self):
        manager = ConfigManager(str(self.config_dir))
        manager.get_config("session")["naming"] = "letter"
        self.assertEqual(manager.get_config("session")["naming"], "solfege")

    def test_update_unknown(self):
        manager = ConfigManager(str(self.config_dir))
        self.assertFalse(manager.update_config("history", {"a": 1}))
        self.assertFalse(manager.reset_config("history"))
        self.assertEqual(manager.get_config("history"), {})

    def test_update_rejects_invalid_session(self):
        manager = ConfigManager(str(self.config_dir))
        with self.assertRaises(InvalidNoteError):
            manager.update_config("session", {"min_note": "Q9"})
        self.assertEqual(manager.get_config("session")["min_note"], "Si2")

    def test_reset(self):
        manager = ConfigManager(str(self.config_dir))
        manager.update_config("audio", {"sample_rate": 22050})
        self.assertTrue(manager.reset_config("audio"))
        self.assertEqual(manager.get_config("audio")["sample_rate"], 44100)

    def test_missing_keys_filled_from_defaults(self):
        self.config_dir.mkdir(parents=True)
        (self.config_dir / "session.json").write_text(json.dumps({"naming": "letter"}))
        section = ConfigManager(str(self.config_dir)).get_config("session")
        self.assertEqual(section["naming"], "letter")
        self.assertEqual(section["window_seconds"], 3.0)

    def test_malformed_file_uses_defaults(self):
        self.config_dir.mkdir(parents=True)
        (self.config_dir / "session.json").write_text("{not json")
        (self.config_dir / "audio.json").write_text("[1, 2]")
        manager = ConfigManager(str(self.config_dir))
        self.assertEqual(manager.get_config("session"), DEFAULT_CONFIGS["session"])
        self.assertEqual(manager.get_config("audio"), DEFAULT_CONFIGS["audio"])

    def test_defaults_are_not_shared(self):
        manager = ConfigManager(str(self.config_dir))
        manager.configs["session"]["exercise"].append("Re5")
        self.assertNotIn("Re5", DEFAULT_CONFIGS["session"]["exercise"])


class TestSessionConfigFromDict(unittest.TestCase):
    def test_defaults(self):
        config = session_config_from_dict({})
        self.assertEqual(config.target, parse_note("Do4"))
        self.assertEqual(config.tolerance.unit, 10)
        self.assertEqual(config.min_note, parse_note("Si2"))
        self.assertEqual(config.max_note, parse_note("Re5"))

    def test_overrides(self):
        config = session_config_from_dict(
            {"tolerance_cents": 100, "naming": "letter", "exercise": ["Mi4", "Fa4"]}
        )
        self.assertEqual(config.tolerance.unit, 50)
        self.assertEqual(config.naming, "letter")
        self.assertEqual(config.target, parse_note("Mi4"))

    def test_explicit_target(self):
        config = session_config_from_dict({}, target="G4")
        self.assertEqual(config.target, parse_note("Sol4"))

    def test_invalid_note(self):
        with self.assertRaises(InvalidNoteError):
            session_config_from_dict({"min_note": "nope"})

    def test_exercise(self):
        exercise = exercise_from_dict({"exercise": ["La4", "Si4"]})
        self.assertEqual(len(exercise), 2)
        self.assertEqual(exercise.current, parse_note("La4"))
        self.assertEqual(len(exercise_from_dict({})), 8)


if __name__ == "__main__":
    unittest.main()
