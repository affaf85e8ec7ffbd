"""Core components for the Pitch Coach application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    IPitchEstimator,
    IPitchSource,
)

__all__ = ["IAudioInput", "IPitchEstimator", "IPitchSource"]
