"""Command-line interface for Pitch Coach."""

from .main import build_parser, build_session, main

__all__ = ["build_parser", "build_session", "main"]
