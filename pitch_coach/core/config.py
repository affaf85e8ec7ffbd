"""Configuration management for Pitch Coach components."""

from typing import Dict, Any, Optional
import copy
import json
from pathlib import Path

from ..logger import get_logger
from ..note_utils import parse_note
from ..session import DEFAULT_EXERCISE, DEFAULT_WINDOW_SECONDS, Exercise, SessionConfig
from ..tolerance import DEFAULT_TOLERANCE_CENTS, ToleranceConfig

logger = get_logger(__name__)


DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "session": {
        "tolerance_cents": DEFAULT_TOLERANCE_CENTS,
        "window_seconds": DEFAULT_WINDOW_SECONDS,
        "min_note": "Si2",
        "max_note": "Re5",
        "reference": 440.0,
        "naming": "solfege",
        "exercise": list(DEFAULT_EXERCISE),
        "clear_on_target_change": True,
    },
    "audio": {
        "sample_rate": 44100,
        "frame_size": 2048,
        "channels": 1,
        "method": "yin",
        "min_clarity": 0.9,
        "min_frequency": 60.0,
        "max_frequency": 1000.0,
    },
}


class ConfigManager:
    """Reads and writes the JSON settings files, one per section.

    Only settings live here; practice history is never stored. A file that
    is missing is created from the defaults, and a file that cannot be read
    is ignored in favour of them.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """Load every section from ``config_dir``.

        Args:
            config_dir: Settings directory, or None for ~/.config/pitch_coach
        """
        self.config_dir = (
            Path(config_dir) if config_dir is not None else Path.home() / ".config" / "pitch_coach"
        )
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)
        self.configs = {
            name: self.load_config(name, defaults) for name, defaults in self.default_configs.items()
        }

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Return section ``name`` with any key it lacks taken from ``default_config``."""
        path = self._path(name)
        if not path.exists():
            config = copy.deepcopy(default_config)
            self.save_config(name, config)
            return config

        try:
            stored = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read {path}, using defaults: {e}")
            return copy.deepcopy(default_config)

        if not isinstance(stored, dict):
            logger.error(f"{path} does not hold a JSON object, using defaults")
            return copy.deepcopy(default_config)

        logger.info(f"Loaded {name} settings from {path}")
        return {**copy.deepcopy(default_config), **stored}

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write section ``name``; False if the file could not be written."""
        path = self._path(name)
        try:
            path.write_text(json.dumps(config, indent=2))
        except OSError as e:
            logger.error(f"Could not write {path}: {e}")
            return False
        logger.debug(f"Saved {name} settings to {path}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """Copy of section ``name``, empty for an unknown section."""
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Merge ``updates`` into section ``name`` and persist it.

        Session settings are checked before anything is written.

        Returns:
            False for an unknown section or a failed write

        Raises:
            InvalidNoteError: If a session note label is malformed
            InvalidToleranceError: If the session tolerance is not a positive number
        """
        if name not in self.configs:
            logger.error(f"Unknown settings section: {name}")
            return False

        merged = {**self.configs[name], **updates}
        if name == "session":
            session_config_from_dict(merged)
        self.configs[name] = merged
        return self.save_config(name, merged)

    def reset_config(self, name: str) -> bool:
        """Restore section ``name`` to its defaults and persist it."""
        if name not in self.default_configs:
            logger.error(f"Unknown settings section: {name}")
            return False

        self.configs[name] = copy.deepcopy(self.default_configs[name])
        return self.save_config(name, self.configs[name])


def exercise_from_dict(section: Dict[str, Any]) -> Exercise:
    """Build the exercise described by a 'session' configuration section."""
    return Exercise(section.get("exercise") or DEFAULT_EXERCISE)


def session_config_from_dict(
    section: Dict[str, Any], target: Optional[str] = None
) -> SessionConfig:
    """Build a validated SessionConfig from a 'session' configuration section.

    Args:
        section: The 'session' configuration dictionary
        target: Target note label, or None to use the first exercise note

    Raises:
        InvalidNoteError: If a note label is malformed
        InvalidToleranceError: If the tolerance is not a positive number
    """
    defaults = DEFAULT_CONFIGS["session"]
    values = {**defaults, **section}
    exercise = values.get("exercise") or defaults["exercise"]

    return SessionConfig(
        target=parse_note(target if target is not None else exercise[0]),
        tolerance=ToleranceConfig.clamped(values["tolerance_cents"]),
        min_note=parse_note(values["min_note"]),
        max_note=parse_note(values["max_note"]),
        window_seconds=float(values["window_seconds"]),
        reference=float(values["reference"]),
        naming=values["naming"],
        clear_on_target_change=bool(values["clear_on_target_change"]),
    )
