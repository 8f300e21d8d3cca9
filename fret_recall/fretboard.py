"""Fretboard layouts: the pitch of every fret on every string.

The octave counter follows scientific pitch notation: it advances on the
step that lands on the first entry of the pitch-class cycle (C for the
natural cycle). Fret ``k`` therefore always sounds ``k`` semitones above the
open string, and fret 12 is the open pitch class one octave up.
"""

import numbers
from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Optional, Sequence, Set, Tuple

from .exceptions import InvalidConfigurationError
from .logger import get_logger
from .note_types import (
    NOTES_PER_OCTAVE,
    NotePosition,
    PitchClass,
    PitchedNote,
    StringLayout,
)

logger = get_logger(__name__)

MIN_STRING_NUMBER = 1
MAX_STRING_NUMBER = 8
MIN_STRING_COUNT = 6
MAX_STRING_COUNT = 8
MIN_FRET_COUNT = 12
MAX_FRET_COUNT = 36
DEFAULT_STRING_COUNT = 6
DEFAULT_FRET_COUNT = 24


def _is_count(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class StringTuning:
    """Open-string data for one string of the standard tuning table."""

    string_number: int
    name: str
    open_note: PitchedNote


STANDARD_TUNINGS: Tuple[StringTuning, ...] = (
    StringTuning(1, "High E", PitchedNote(4, PitchClass.E)),
    StringTuning(2, "B", PitchedNote(3, PitchClass.B)),
    StringTuning(3, "G", PitchedNote(3, PitchClass.G)),
    StringTuning(4, "D", PitchedNote(3, PitchClass.D)),
    StringTuning(5, "A", PitchedNote(2, PitchClass.A)),
    StringTuning(6, "Low E", PitchedNote(2, PitchClass.E)),
    StringTuning(7, "Low B", PitchedNote(1, PitchClass.B)),  # 7-string guitars
    StringTuning(8, "Low G", PitchedNote(1, PitchClass.G)),  # 8-string guitars
)


class FretboardLayoutBuilder:
    """Builds the chromatic note sequence for a string.

    Args:
        pitch_classes: The pitch-class cycle to step through. Defaults to the
            natural order C, C#, ... B. Must hold exactly 12 distinct entries.
    """

    NATURAL_CYCLE: ClassVar[Tuple[PitchClass, ...]] = tuple(PitchClass)

    def __init__(self, pitch_classes: Optional[Sequence[PitchClass]] = None) -> None:
        cycle = tuple(self.NATURAL_CYCLE if pitch_classes is None else pitch_classes)
        if len(cycle) != NOTES_PER_OCTAVE or len(set(cycle)) != NOTES_PER_OCTAVE:
            raise InvalidConfigurationError(
                f"Expected {NOTES_PER_OCTAVE} distinct pitch classes. Found: {len(set(cycle))} of {len(cycle)}"
            )
        if not all(isinstance(p, PitchClass) for p in cycle):
            raise InvalidConfigurationError("Pitch-class cycle contains non PitchClass entries")
        self._cycle = cycle

    @staticmethod
    def validate_string_number(string_number: int) -> None:
        if not _is_count(string_number) or not MIN_STRING_NUMBER <= string_number <= MAX_STRING_NUMBER:
            raise InvalidConfigurationError(f"Invalid string number provided: {string_number!r}")

    @staticmethod
    def validate_fret_count(fret_count: int) -> None:
        if not _is_count(fret_count) or not MIN_FRET_COUNT <= fret_count <= MAX_FRET_COUNT:
            raise InvalidConfigurationError(f"Invalid fret count provided: {fret_count!r}")

    def build_frets(self, open_note: PitchedNote, fret_count: int) -> Tuple[PitchedNote, ...]:
        """Return the notes for frets 1..``fret_count`` above ``open_note``."""
        self.validate_fret_count(fret_count)

        position = self._cycle.index(open_note.pitch_class)
        octave = open_note.octave
        frets = []
        for _ in range(fret_count):
            position += 1
            if position == NOTES_PER_OCTAVE:
                position = 0
                octave += 1
            frets.append(PitchedNote(octave, self._cycle[position]))
        return tuple(frets)

    def build(
        self,
        string_number: int,
        open_note: PitchedNote,
        fret_count: int,
        name: Optional[str] = None,
    ) -> StringLayout:
        """Build the layout for one string.

        Args:
            string_number: String number, 1 (thinnest) to 8
            open_note: The note of the open string (fret 0)
            fret_count: Number of frets, 12 to 36

        Returns:
            StringLayout with ``fret_count`` fretted notes

        Raises:
            InvalidConfigurationError: If the string number or fret count is out of bounds
            OctaveOutOfRangeError: If the highest fret would leave octave 9
        """
        self.validate_string_number(string_number)
        frets = self.build_frets(open_note, fret_count)
        logger.debug(
            f"Built string {string_number} from {open_note}: {frets[0]}..{frets[-1]}"
        )
        return StringLayout(string_number, open_note, frets, name)

    def build_from_tunings(
        self, tunings: Iterable[StringTuning], fret_count: int
    ) -> List[StringLayout]:
        """Build one layout per tuning entry, ordered by string number."""
        layouts = [
            self.build(t.string_number, t.open_note, fret_count, t.name) for t in tunings
        ]
        layouts.sort(key=lambda layout: layout.string_number)
        return layouts


def build_standard_layouts(
    string_count: int = DEFAULT_STRING_COUNT,
    fret_count: int = DEFAULT_FRET_COUNT,
    builder: Optional[FretboardLayoutBuilder] = None,
) -> List[StringLayout]:
    """Build the standard-tuning layouts for a 6, 7 or 8 string guitar.

    Raises:
        InvalidConfigurationError: If the string or fret count is unsupported
    """
    if not _is_count(string_count) or not MIN_STRING_COUNT <= string_count <= MAX_STRING_COUNT:
        raise InvalidConfigurationError(f"Invalid string count provided: {string_count!r}")
    builder = builder or FretboardLayoutBuilder()
    layouts = builder.build_from_tunings(STANDARD_TUNINGS[:string_count], fret_count)
    logger.info(f"Built {len(layouts)} strings with {fret_count} frets")
    return layouts


def find_note_on_string(pitch_class: PitchClass, layout: StringLayout) -> Set[NotePosition]:
    """Find every position of ``pitch_class`` on one string, open string included."""
    return {NotePosition(layout.string_number, fret) for fret in layout.frets_of(pitch_class)}


def find_note_on_fretboard(
    pitch_class: PitchClass, layouts: Iterable[StringLayout]
) -> Set[NotePosition]:
    """Find every position of ``pitch_class`` across all strings."""
    positions: Set[NotePosition] = set()
    for layout in layouts:
        positions |= find_note_on_string(pitch_class, layout)
    return positions


def notes_on_string(pitch_class: PitchClass, layout: StringLayout) -> Set[PitchedNote]:
    """Return the distinct pitched notes of ``pitch_class`` on a string.

    These are the octave targets a player has to find on that string.
    """
    return {layout.note_at(fret) for fret in layout.frets_of(pitch_class)}
