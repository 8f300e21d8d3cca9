"""Reference frequencies for every note in the supported octave span."""

import math
import numbers
from typing import ClassVar, Iterable, Optional, Tuple, TypeAlias

from ..exceptions import OctaveOutOfRangeError
from ..logger import get_logger
from ..note_types import MAX_OCTAVE, MIN_OCTAVE, PitchClass, PitchedNote

logger = get_logger(__name__)

Frequency: TypeAlias = float

CENTS_PER_OCTAVE = 1200.0


def cents_between(detected_hz: float, target_hz: float) -> float:
    """Interval from ``target_hz`` to ``detected_hz`` in cents.

    Positive when the detected frequency is sharp of the target.
    100 cents = 1 semitone, 1200 cents = 1 octave.
    """
    return CENTS_PER_OCTAVE * math.log2(detected_hz / target_hz)


class NoteFrequencyTable:
    """Immutable lookup from (pitch class, octave) to Hz.

    Values are the published 12-tone equal temperament table anchored at
    A4 = 440 Hz, rounded to three decimals. They are stored as literals rather
    than derived from 440 * 2 ** (n / 12) so that lookups match the reference
    chart exactly.
    """

    # One row per octave, columns ordered C, C#, D, ... B
    REFERENCE_TABLE: ClassVar[Tuple[Tuple[Frequency, ...], ...]] = (
        (16.351, 17.324, 18.354, 19.445, 20.601, 21.827,
         23.124, 24.499, 25.956, 27.5, 29.135, 30.868),
        (32.703, 34.648, 36.708, 38.891, 41.203, 43.654,
         46.249, 48.999, 51.913, 55.0, 58.27, 61.735),
        (65.406, 69.296, 73.416, 77.782, 82.407, 87.307,
         92.499, 97.999, 103.826, 110.0, 116.541, 123.471),
        (130.813, 138.591, 146.832, 155.563, 164.814, 174.614,
         184.997, 195.998, 207.652, 220.0, 233.082, 246.942),
        (261.626, 277.183, 293.665, 311.127, 329.628, 349.228,
         369.994, 391.995, 415.305, 440.0, 466.164, 493.883),
        (523.251, 554.365, 587.33, 622.254, 659.255, 698.456,
         739.989, 783.991, 830.609, 880.0, 932.328, 987.767),
        (1046.502, 1108.731, 1174.659, 1244.508, 1318.51, 1396.913,
         1479.978, 1567.982, 1661.219, 1760.0, 1864.655, 1975.533),
        (2093.005, 2217.461, 2349.318, 2489.016, 2637.021, 2793.826,
         2959.955, 3135.964, 3322.438, 3520.0, 3729.31, 3951.066),
        (4186.009, 4434.922, 4698.636, 4978.032, 5274.042, 5587.652,
         5919.91, 6271.928, 6644.876, 7040.0, 7458.62, 7902.132),
        (8372.018, 8869.844, 9397.272, 9956.064, 10548.084, 11175.304,
         11839.82, 12543.856, 13289.752, 14080.0, 14917.24, 15804.264),
    )

    def __init__(self) -> None:
        # Flattened by semitone index (octave * 12 + ordinal)
        self._frequencies: Tuple[Frequency, ...] = tuple(
            hz for row in self.REFERENCE_TABLE for hz in row
        )

    def frequency(self, pitch_class: PitchClass, octave: int) -> Frequency:
        """Return the reference frequency for ``pitch_class`` in ``octave``.

        Raises:
            OctaveOutOfRangeError: If the octave is outside 0-9
        """
        if isinstance(octave, bool) or not isinstance(octave, int) or not (
            MIN_OCTAVE <= octave <= MAX_OCTAVE
        ):
            raise OctaveOutOfRangeError(f"Invalid octave number provided: {octave!r}")
        return self.REFERENCE_TABLE[octave][pitch_class.value]

    def lookup(self, note: PitchedNote) -> Frequency:
        """Return the reference frequency in Hz for ``note``."""
        return self.frequency(note.pitch_class, note.octave)

    def notes(self) -> Iterable[PitchedNote]:
        """Iterate over every note in the table from C0 to B9."""
        for index in range(len(self._frequencies)):
            yield PitchedNote.from_semitone_index(index)

    def nearest_note(self, frequency: float) -> Optional[PitchedNote]:
        """Return the table note closest to ``frequency`` in cents.

        Args:
            frequency: The frequency in Hz to name

        Returns:
            The closest note, or None if the frequency is not a positive finite
            number or lies more than half a semitone outside the table.
        """
        if (
            isinstance(frequency, bool)
            or not isinstance(frequency, numbers.Real)
            or not math.isfinite(frequency)
            or frequency <= 0
        ):
            logger.debug(f"Cannot name non-positive or non-finite frequency: {frequency}")
            return None

        # Semitones above C0, measured against the table's own A4
        a4 = self.frequency(PitchClass.A, 4)
        index = round(12 * math.log2(frequency / a4)) + PitchedNote(4, PitchClass.A).semitone_index
        if index < 0 or index >= len(self._frequencies):
            logger.debug(f"Frequency {frequency:.3f}Hz outside the note table")
            return None

        # Rounding can land one semitone off near the table's rounding edges
        candidates = [i for i in (index - 1, index, index + 1) if 0 <= i < len(self._frequencies)]
        best = min(candidates, key=lambda i: abs(cents_between(frequency, self._frequencies[i])))
        if abs(cents_between(frequency, self._frequencies[best])) > 50.0:
            return None
        return PitchedNote.from_semitone_index(best)
