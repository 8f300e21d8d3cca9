"""Fret Recall: guitar pitch detection and fretboard note model."""

from .audio.pitch_detector import PitchDetector
from .exceptions import (
    AudioSourceError,
    FretRecallError,
    InvalidAudioBufferError,
    InvalidConfigurationError,
    InvalidNoteError,
    OctaveOutOfRangeError,
)
from .fretboard import (
    STANDARD_TUNINGS,
    FretboardLayoutBuilder,
    build_standard_layouts,
    find_note_on_fretboard,
    find_note_on_string,
    notes_on_string,
)
from .note_matcher import FrequencyMatcher
from .note_types import (
    DetectedPitch,
    FrequencyRange,
    NotePosition,
    PitchClass,
    PitchedNote,
    StringLayout,
)
from .services.frequency import NoteFrequencyTable, cents_between

__all__ = [
    "AudioSourceError",
    "DetectedPitch",
    "FrequencyMatcher",
    "FrequencyRange",
    "FretRecallError",
    "FretboardLayoutBuilder",
    "InvalidAudioBufferError",
    "InvalidConfigurationError",
    "InvalidNoteError",
    "NoteFrequencyTable",
    "NotePosition",
    "OctaveOutOfRangeError",
    "PitchClass",
    "PitchDetector",
    "PitchedNote",
    "STANDARD_TUNINGS",
    "StringLayout",
    "build_standard_layouts",
    "cents_between",
    "find_note_on_fretboard",
    "find_note_on_string",
    "notes_on_string",
]
