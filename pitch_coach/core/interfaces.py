"""Defines the collaborator interfaces for the Pitch Coach application."""

from __future__ import annotations
from abc import ABC, abstractmethod

import numpy as np

from ..note_types import PitchEstimate


class IAudioInput(ABC):
    """Interface for audio capture that exposes the most recent frame."""

    @abstractmethod
    def start(self) -> bool:
        """Begin capturing; False if the device could not be opened."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Release the device. Safe to call when already stopped."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """True while frames are being captured."""
        pass

    @abstractmethod
    def read_frame(self) -> np.ndarray:
        """Return a copy of the latest fixed-size mono frame."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Capture rate in Hz."""
        pass


class IPitchEstimator(ABC):
    """Interface for single-frame pitch estimation algorithms."""

    @abstractmethod
    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        """Estimate the fundamental frequency and clarity of one frame."""
        pass


class IPitchSource(ABC):
    """Interface for the per-tick provider of gated pitch estimates."""

    @abstractmethod
    def start(self) -> bool:
        """Start producing estimates."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop producing estimates."""
        pass

    @abstractmethod
    def read(self) -> PitchEstimate:
        """Return the estimate for the current tick."""
        pass
