"""Logging setup shared by the CLI and the pygame front end.

Every module gets its logger through ``pitch_coach.logger.get_logger``; this
module decides levels and where the records go.
"""

import logging
import sys
from typing import Dict, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-logger levels, applied by setup_logging
MODULE_LOG_LEVELS: Dict[str, int] = {
    "pitch_coach": logging.INFO,
    "pitch_coach.session": logging.INFO,
    "pitch_coach.sample_buffer": logging.INFO,  # DEBUG traces every push/prune
    "pitch_coach.core": logging.INFO,
    "pitch_coach.audio": logging.INFO,
    "pitch_coach.ui": logging.WARNING,  # one record per frame is too chatty
    "pitch_coach.cli": logging.INFO,
    "pitch_coach.logger": logging.WARNING,
    # Third-party
    "aubio": logging.ERROR,
    "PIL": logging.ERROR,
    # Root
    "": logging.ERROR,
}

_handler: Optional[logging.Handler] = None


def _console_handler() -> logging.Handler:
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return _handler


def _resolve_level(level: Union[str, int, None]) -> Optional[int]:
    if level is None or isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        logging.getLogger(__name__).error(f"Invalid log level: {level}")
        return None
    return resolved


def setup_logging(level: Union[str, int, None] = None) -> None:
    """Attach the shared stdout handler and apply ``MODULE_LOG_LEVELS``.

    Safe to call more than once; each call replaces the handlers it installed
    before.

    Args:
        level: Optional level ("DEBUG", logging.DEBUG, ...) forced on every
            pitch_coach logger; third-party levels are left alone
    """
    handler = _console_handler()
    override = _resolve_level(level)

    for name, module_level in MODULE_LOG_LEVELS.items():
        if override is not None and name.startswith("pitch_coach"):
            module_level = override

        target = logging.getLogger(name)
        target.setLevel(module_level)
        target.handlers = [handler]
        target.propagate = False

    logging.getLogger("pitch_coach").debug("Logging configured")
