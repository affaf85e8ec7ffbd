"""Pitch Coach: real-time pitch matching feedback for singers."""

__version__ = "0.1.0"
