"""Lazily cached loggers for Pitch Coach modules."""

import logging
from typing import Dict

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (normally a module's ``__name__``).

    Levels and handlers are applied separately by
    ``logging_config.setup_logging``.
    """
    try:
        return _loggers[name]
    except KeyError:
        return _loggers.setdefault(name, logging.getLogger(name))
