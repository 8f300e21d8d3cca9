"""Random pitch-class selection for practice drills."""

import random
from typing import List, Optional

from .note_types import PitchClass


class RandomNoteGenerator:
    """Picks random pitch classes.

    Pass a seeded ``random.Random`` to get a reproducible sequence.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def generate_unique_notes(self, count: int) -> List[PitchClass]:
        """Return up to ``count`` distinct pitch classes in random order.

        Asking for more than 12 returns all 12, shuffled.
        """
        notes = list(PitchClass)
        self._rng.shuffle(notes)
        return notes[: max(0, min(count, len(notes)))]

    def generate_single_note(self) -> PitchClass:
        return self._rng.choice(list(PitchClass))

    def generate_notes(self, count: int) -> List[PitchClass]:
        """Return ``count`` random pitch classes; repeats are allowed."""
        notes = list(PitchClass)
        return [self._rng.choice(notes) for _ in range(count)]
