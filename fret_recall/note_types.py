"""Type definitions for the Fret Recall project."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .exceptions import InvalidNoteError, OctaveOutOfRangeError

NOTES_PER_OCTAVE = 12
MIN_OCTAVE = 0
MAX_OCTAVE = 9

SHARP_NAMES: Tuple[str, ...] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)
FLAT_NAMES: Tuple[str, ...] = (
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
)
DISPLAY_NAMES: Tuple[str, ...] = (
    "C", "C♯/D♭", "D", "D♯/E♭", "E", "F", "F♯/G♭", "G", "G♯/A♭", "A", "A♯/B♭", "B",
)

# Spellings that belong to a neighbouring pitch class
_ENHARMONIC_SPELLINGS = {"B#": 0, "E#": 5, "Cb": 11, "Fb": 4}

# Note letter, optional accidental (#, b, or the unicode signs), optional octave
NOTE_PATTERN = re.compile(r"^([A-Ga-g])([#b♯♭]?)(-?[0-9]*)$")


class PitchClass(Enum):
    """The 12 chromatic pitch classes in fixed cyclic order.

    The member value is the ordinal (C = 0 ... B = 11). It is used both for
    modular stepping around the octave and as an index into frequency tables.
    """

    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self.value]

    @property
    def sharp_name(self) -> str:
        return SHARP_NAMES[self.value]

    @property
    def flat_name(self) -> str:
        return FLAT_NAMES[self.value]

    def __str__(self) -> str:
        return self.sharp_name

    def step(self, semitones: int) -> "PitchClass":
        """Return the pitch class ``semitones`` steps away, wrapping around the octave."""
        return PitchClass((self.value + semitones) % NOTES_PER_OCTAVE)

    def ordered_from(self) -> List["PitchClass"]:
        """Return all 12 pitch classes starting from this one.

        Example:
            >>> [str(p) for p in PitchClass.A.ordered_from()][:4]
            ['A', 'A#', 'B', 'C']
        """
        return [self.step(i) for i in range(NOTES_PER_OCTAVE)]

    @classmethod
    def parse(cls, text: str) -> "PitchClass":
        """Parse a pitch class name such as 'C#', 'Db', 'D♭' or 'C♯/D♭'.

        Raises:
            InvalidNoteError: If the text is not a recognised spelling
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidNoteError(f"Invalid pitch class: {text!r}")

        name = text.strip()
        if name in DISPLAY_NAMES:
            return cls(DISPLAY_NAMES.index(name))

        name = name.replace("♯", "#").replace("♭", "b")
        name = name[0].upper() + name[1:]
        if name in SHARP_NAMES:
            return cls(SHARP_NAMES.index(name))
        if name in FLAT_NAMES:
            return cls(FLAT_NAMES.index(name))
        if name in _ENHARMONIC_SPELLINGS:
            return cls(_ENHARMONIC_SPELLINGS[name])
        raise InvalidNoteError(f"Invalid pitch class: {text!r}")


@dataclass(frozen=True)
class PitchedNote:
    """One specific audible note, e.g. A in octave 4."""

    octave: int
    pitch_class: PitchClass

    def __post_init__(self):
        if not isinstance(self.pitch_class, PitchClass):
            raise InvalidNoteError(f"Not a pitch class: {self.pitch_class!r}")
        if (
            isinstance(self.octave, bool)
            or not isinstance(self.octave, int)
            or not MIN_OCTAVE <= self.octave <= MAX_OCTAVE
        ):
            raise OctaveOutOfRangeError(
                f"Octave {self.octave!r} outside supported range {MIN_OCTAVE}-{MAX_OCTAVE}"
            )

    def __str__(self):
        return f"{self.pitch_class.sharp_name}{self.octave}"

    @property
    def semitone_index(self) -> int:
        """Semitones above C0."""
        return self.octave * NOTES_PER_OCTAVE + self.pitch_class.value

    @classmethod
    def from_semitone_index(cls, index: int) -> "PitchedNote":
        octave, ordinal = divmod(index, NOTES_PER_OCTAVE)
        return cls(octave, PitchClass(ordinal))

    def transpose(self, semitones: int) -> "PitchedNote":
        """Return the note ``semitones`` above (or below, if negative) this one.

        Raises:
            OctaveOutOfRangeError: If the result leaves the 0-9 octave span
        """
        return PitchedNote.from_semitone_index(self.semitone_index + semitones)

    @classmethod
    def parse(cls, text: str) -> "PitchedNote":
        """Parse scientific pitch notation such as 'A4', 'C#3' or 'Bb2'.

        B#3 is read as C4 and Cb4 as B3, following the sounding pitch.

        Raises:
            InvalidNoteError: If the text is not a note name with an octave
            OctaveOutOfRangeError: If the octave is outside 0-9
        """
        match = NOTE_PATTERN.match(text.strip()) if isinstance(text, str) else None
        if not match or not match.group(3):
            raise InvalidNoteError(f"Invalid note: {text!r}")

        letter, accidental, octave_text = match.groups()
        spelling = letter.upper() + accidental
        pitch_class = PitchClass.parse(spelling)
        octave = int(octave_text)

        # B# and Cb cross the octave boundary
        normalized = spelling.replace("♯", "#").replace("♭", "b")
        if normalized == "B#":
            octave += 1
        elif normalized == "Cb":
            octave -= 1
        return cls(octave, pitch_class)


@dataclass(frozen=True)
class FrequencyRange:
    """The lowest and highest notes playable on a string."""

    low: PitchedNote
    high: PitchedNote


@dataclass(frozen=True)
class NotePosition:
    """Represents a position on the guitar fretboard."""

    string: int  # String number (1 is the thinnest string)
    fret: int  # Fret number (0 for open string)

    def __str__(self):
        return f"S{self.string}F{self.fret}"


@dataclass(frozen=True)
class StringLayout:
    """The full pitch map of one physical string.

    ``frets`` holds frets 1..N; the open string is kept separately in
    ``open_note``.
    """

    string_number: int
    open_note: PitchedNote
    frets: Tuple[PitchedNote, ...]
    name: Optional[str] = None

    @property
    def fret_count(self) -> int:
        return len(self.frets)

    @property
    def frequency_range(self) -> FrequencyRange:
        return FrequencyRange(self.open_note, self.frets[-1])

    def note_at(self, fret: int) -> PitchedNote:
        """Return the note at ``fret``, where fret 0 is the open string."""
        if fret == 0:
            return self.open_note
        if not 1 <= fret <= len(self.frets):
            raise IndexError(f"Fret {fret} not on string {self.string_number}")
        return self.frets[fret - 1]

    def frets_of(self, pitch_class: PitchClass) -> List[int]:
        """Return every fret number (including 0) sounding ``pitch_class``."""
        frets = [0] if self.open_note.pitch_class == pitch_class else []
        frets.extend(
            number
            for number, note in enumerate(self.frets, start=1)
            if note.pitch_class == pitch_class
        )
        return frets

    def __str__(self):
        label = self.name or f"String {self.string_number}"
        return f"{label} ({self.open_note}): " + " ".join(str(n) for n in self.frets)


@dataclass(frozen=True)
class DetectedPitch:
    """Result of one successful pitch estimate."""

    frequency: float  # Frequency in Hz
    confidence: float  # Normalised autocorrelation peak (0-1)
