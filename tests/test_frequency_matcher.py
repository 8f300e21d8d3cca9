import math
import unittest

import numpy as np

from fret_recall.exceptions import InvalidConfigurationError
from fret_recall.fretboard import build_standard_layouts, notes_on_string
from fret_recall.note_matcher import FrequencyMatcher
from fret_recall.note_types import PitchClass, PitchedNote
from fret_recall.services.frequency import NoteFrequencyTable

A4 = PitchedNote(4, PitchClass.A)
A_SHARP_4 = PitchedNote(4, PitchClass.A_SHARP)


class TestFrequencyMatcher(unittest.TestCase):
    def setUp(self):
        self.matcher = FrequencyMatcher(NoteFrequencyTable())

    def test_exact_match(self):
        self.assertTrue(self.matcher.is_match(440.0, A4, 50))
        self.assertTrue(self.matcher.is_match(440.0, A4))

    def test_semitone_away_does_not_match(self):
        # A#4 is ~100 cents above A4
        self.assertFalse(self.matcher.is_match(466.0, A4, 50))

    def test_tolerance_edges(self):
        self.assertTrue(self.matcher.is_match(452.0, A4))  # ~+47 cents
        self.assertFalse(self.matcher.is_match(454.0, A4))  # ~+54 cents
        self.assertTrue(self.matcher.is_match(428.0, A4))  # ~-48 cents
        self.assertTrue(self.matcher.is_match(454.0, A4, tolerance_cents=60))

    def test_tolerance_is_logarithmic(self):
        low_e = PitchedNote(2, PitchClass.E)
        # 3Hz off is almost a semitone at 82Hz but only ~12 cents at 440Hz
        self.assertFalse(self.matcher.is_match(82.407 + 3.0, low_e))
        self.assertTrue(self.matcher.is_match(443.0, A4))

    def test_find_match_returns_matching_target(self):
        targets = {PitchedNote(3, PitchClass.A), A4, PitchedNote(5, PitchClass.A)}
        self.assertEqual(self.matcher.find_match(441.0, targets), A4)
        self.assertEqual(self.matcher.find_match(219.0, targets), PitchedNote(3, PitchClass.A))

    def test_find_match_no_target_in_tolerance(self):
        self.assertIsNone(self.matcher.find_match(300.0, {A4, A_SHARP_4}))

    def test_find_match_prefers_nearest_target(self):
        # 453Hz is ~50.4 cents above A4 and ~49.6 cents below A#4
        for targets in ([A4, A_SHARP_4], [A_SHARP_4, A4], {A4, A_SHARP_4}):
            with self.subTest(targets=targets):
                self.assertEqual(
                    self.matcher.find_match(453.0, targets, tolerance_cents=100), A_SHARP_4
                )

    def test_invalid_frequency_never_matches(self):
        for frequency in (0.0, -440.0, math.nan, math.inf, -math.inf):
            with self.subTest(frequency=frequency):
                self.assertIsNone(self.matcher.find_match(frequency, {A4}))
                self.assertFalse(self.matcher.is_match(frequency, A4))

    def test_empty_or_missing_targets(self):
        self.assertIsNone(self.matcher.find_match(440.0, set()))
        self.assertIsNone(self.matcher.find_match(440.0, None))
        self.assertFalse(self.matcher.is_match(440.0, None))

    def test_negative_tolerance_raises(self):
        with self.assertRaises(InvalidConfigurationError):
            FrequencyMatcher(NoteFrequencyTable(), tolerance_cents=-1)
        with self.assertRaises(InvalidConfigurationError):
            self.matcher.find_match(440.0, {A4}, tolerance_cents=-5)

    def test_numpy_frequencies_match(self):
        a4 = PitchedNote(4, PitchClass.A)
        self.assertTrue(self.matcher.is_match(np.float32(440.0), a4))
        self.assertTrue(self.matcher.is_match(np.float64(441.0), a4))
        a3 = PitchedNote(3, PitchClass.A)
        self.assertEqual(self.matcher.find_match(np.float32(221.0), [a4, a3]), a3)
        self.assertTrue(self.matcher.is_match(440.0, a4, tolerance_cents=np.float32(10.0)))

    def test_non_numeric_tolerance_raises(self):
        with self.assertRaises(InvalidConfigurationError):
            FrequencyMatcher(NoteFrequencyTable(), tolerance_cents="50")
        with self.assertRaises(InvalidConfigurationError):
            FrequencyMatcher(NoteFrequencyTable(), tolerance_cents=True)

    def test_cents_from(self):
        self.assertAlmostEqual(self.matcher.cents_from(880.0, A4), 1200.0)
        self.assertAlmostEqual(self.matcher.cents_from(440.0, A4), 0.0)

    def test_matches_octave_targets_from_a_string_layout(self):
        low_e = build_standard_layouts()[5]
        targets = notes_on_string(PitchClass.E, low_e)
        self.assertEqual(self.matcher.find_match(164.5, targets), PitchedNote(3, PitchClass.E))
        self.assertEqual(self.matcher.find_match(82.6, targets), PitchedNote(2, PitchClass.E))
        self.assertIsNone(self.matcher.find_match(174.6, targets))


if __name__ == "__main__":
    unittest.main()
