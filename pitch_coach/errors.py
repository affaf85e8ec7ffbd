"""Exception types raised by Pitch Coach.

Missing pitch is never an error: it travels through the pipeline as ``None``.
Everything here signals a broken calling contract.
"""


class PitchCoachError(Exception):
    """Base class for all Pitch Coach errors."""


class InvalidFrequencyError(PitchCoachError, ValueError):
    """A frequency was non-positive, non-finite or not a number."""


class InvalidNoteError(PitchCoachError, ValueError):
    """A note label or pitch class could not be resolved."""


class InvalidToleranceError(PitchCoachError, ValueError):
    """A tolerance unit was not a positive, finite number of cents."""


class SampleOrderError(PitchCoachError, RuntimeError):
    """A sample was pushed with a timestamp older than the previous one."""


class SessionStateError(PitchCoachError, RuntimeError):
    """An operation was delivered to a session in the wrong state."""


class AudioDeviceError(PitchCoachError, RuntimeError):
    """The audio input device could not be opened."""
