"""Exception types raised by Fret Recall components.

Only invalid configuration or malformed input raises. Ordinary "nothing
found" outcomes (silence, weak correlation, no target in tolerance) are
returned as ``None`` or ``False`` instead.
"""


class FretRecallError(Exception):
    """Base class for all Fret Recall errors."""


class InvalidConfigurationError(FretRecallError, ValueError):
    """A string number, fret count, tolerance or similar setting is out of bounds."""


class OctaveOutOfRangeError(InvalidConfigurationError):
    """An octave number falls outside the supported 0-9 span."""


class InvalidNoteError(InvalidConfigurationError):
    """A note name could not be parsed."""


class InvalidAudioBufferError(FretRecallError, ValueError):
    """An audio buffer or sample rate cannot be processed at all."""


class AudioSourceError(FretRecallError):
    """A sound file or input device could not be opened."""
