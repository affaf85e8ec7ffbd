"""Check that the hardware-free modules import cleanly."""

import importlib
import unittest

MODULES = [
    "pitch_coach",
    "pitch_coach.errors",
    "pitch_coach.logger",
    "pitch_coach.logging_config",
    "pitch_coach.note_types",
    "pitch_coach.note_utils",
    "pitch_coach.tolerance",
    "pitch_coach.grid",
    "pitch_coach.sample_buffer",
    "pitch_coach.session",
    "pitch_coach.mock_pitch_source",
    "pitch_coach.core",
    "pitch_coach.core.config",
    "pitch_coach.core.events",
    "pitch_coach.core.interfaces",
    "pitch_coach.audio.rolling_input",
    "pitch_coach.ui.scale",
    "pitch_coach.cli",
    "pitch_coach.cli.monitor",
]


class TestImports(unittest.TestCase):
    def test_imports(self):
        for name in MODULES:
            with self.subTest(module=name):
                self.assertIsNotNone(importlib.import_module(name))

    def test_version(self):
        import pitch_coach

        self.assertTrue(pitch_coach.__version__)


if __name__ == "__main__":
    unittest.main()
