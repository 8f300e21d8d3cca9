import unittest

import numpy as np

from fret_recall.exceptions import InvalidConfigurationError, OctaveOutOfRangeError
from fret_recall.fretboard import (
    STANDARD_TUNINGS,
    FretboardLayoutBuilder,
    build_standard_layouts,
    find_note_on_fretboard,
    find_note_on_string,
    notes_on_string,
)
from fret_recall.note_types import NotePosition, PitchClass, PitchedNote


class TestFretboardLayoutBuilder(unittest.TestCase):
    def setUp(self):
        self.builder = FretboardLayoutBuilder()

    def test_fret_count_and_octave_at_twelfth_fret(self):
        for pitch_class in PitchClass:
            for octave in (1, 2, 3, 4):
                open_note = PitchedNote(octave, pitch_class)
                for fret_count in (12, 24, 36):
                    with self.subTest(open_note=str(open_note), frets=fret_count):
                        layout = self.builder.build(1, open_note, fret_count)
                        self.assertEqual(layout.fret_count, fret_count)
                        self.assertEqual(layout.note_at(12), PitchedNote(octave + 1, pitch_class))

    def test_each_fret_is_one_semitone_higher(self):
        open_note = PitchedNote(2, PitchClass.E)
        layout = self.builder.build(6, open_note, 24)
        previous = open_note
        for note in layout.frets:
            self.assertEqual(note.semitone_index, previous.semitone_index + 1)
            previous = note

    def test_open_string_is_not_a_fret(self):
        open_note = PitchedNote(3, PitchClass.G)
        layout = self.builder.build(3, open_note, 12)
        self.assertEqual(layout.open_note, open_note)
        self.assertEqual(layout.frets[0], PitchedNote(3, PitchClass.G_SHARP))

    def test_octave_advances_when_landing_on_c(self):
        # First fret of a B string is already in the next octave
        layout = self.builder.build(2, PitchedNote(3, PitchClass.B), 12)
        self.assertEqual(layout.note_at(1), PitchedNote(4, PitchClass.C))
        self.assertEqual(layout.note_at(12), PitchedNote(4, PitchClass.B))

        # A C string only advances again at fret 12
        layout = self.builder.build(2, PitchedNote(3, PitchClass.C), 12)
        self.assertEqual(layout.note_at(11), PitchedNote(3, PitchClass.B))
        self.assertEqual(layout.note_at(12), PitchedNote(4, PitchClass.C))

    def test_high_e_range_on_36_frets(self):
        layout = self.builder.build(1, PitchedNote(4, PitchClass.E), 36)
        frequency_range = layout.frequency_range
        self.assertEqual(frequency_range.low, layout.open_note)
        self.assertEqual(frequency_range.high, PitchedNote(7, PitchClass.E))

    def test_invalid_fret_count(self):
        for fret_count in (0, 11, 37, 39):
            with self.assertRaises(InvalidConfigurationError):
                self.builder.build(4, PitchedNote(3, PitchClass.D), fret_count)

    def test_invalid_string_number(self):
        for string_number in (0, 9, -1):
            with self.assertRaises(InvalidConfigurationError):
                self.builder.build(string_number, PitchedNote(3, PitchClass.D), 24)

    def test_boolean_string_number_is_rejected(self):
        with self.assertRaises(InvalidConfigurationError):
            self.builder.build(True, PitchedNote(4, PitchClass.E), 24)
        with self.assertRaises(InvalidConfigurationError):
            self.builder.build("1", PitchedNote(4, PitchClass.E), 24)

    def test_malformed_pitch_class_cycle(self):
        with self.assertRaises(InvalidConfigurationError):
            FretboardLayoutBuilder(list(PitchClass)[:11])
        with self.assertRaises(InvalidConfigurationError):
            FretboardLayoutBuilder(list(PitchClass)[:11] + [PitchClass.C])
        with self.assertRaises(InvalidConfigurationError):
            FretboardLayoutBuilder(list(PitchClass) + [PitchClass.C])

    def test_rotated_cycle_is_accepted(self):
        builder = FretboardLayoutBuilder(PitchClass.A.ordered_from())
        layout = builder.build(5, PitchedNote(2, PitchClass.A), 12)
        self.assertEqual(layout.note_at(12), PitchedNote(3, PitchClass.A))

    def test_frets_beyond_octave_nine_raise(self):
        with self.assertRaises(OctaveOutOfRangeError):
            self.builder.build(1, PitchedNote(9, PitchClass.A), 12)

    def test_layouts_are_rebuilt_not_mutated(self):
        first = self.builder.build(1, PitchedNote(4, PitchClass.E), 12)
        second = self.builder.build(1, PitchedNote(4, PitchClass.E), 24)
        self.assertEqual(first.fret_count, 12)
        self.assertEqual(second.fret_count, 24)
        self.assertEqual(first, self.builder.build(1, PitchedNote(4, PitchClass.E), 12))


class TestStandardLayouts(unittest.TestCase):
    def test_standard_6_string_guitar(self):
        layouts = build_standard_layouts()
        self.assertEqual([l.string_number for l in layouts], [1, 2, 3, 4, 5, 6])
        self.assertEqual(
            [str(l.open_note) for l in layouts], ["E4", "B3", "G3", "D3", "A2", "E2"]
        )
        for layout in layouts:
            self.assertEqual(layout.fret_count, 24)

    def test_7_string_guitar(self):
        layouts = build_standard_layouts(7)
        self.assertEqual(len(layouts), 7)
        self.assertEqual(layouts[6].open_note, PitchedNote(1, PitchClass.B))
        self.assertEqual(layouts[6].name, "Low B")

    def test_8_string_guitar(self):
        layouts = build_standard_layouts(8, 36)
        self.assertEqual(len(layouts), 8)
        self.assertEqual(layouts[7].open_note, PitchedNote(1, PitchClass.G))
        for layout in layouts:
            self.assertEqual(layout.fret_count, 36)

    def test_invalid_counts(self):
        for string_count in (5, 9):
            with self.assertRaises(InvalidConfigurationError):
                build_standard_layouts(string_count)
        with self.assertRaises(InvalidConfigurationError):
            build_standard_layouts(6, 40)

    def test_wrongly_typed_counts_raise(self):
        for string_count in ("7", True, 6.0, None):
            with self.subTest(string_count=string_count):
                with self.assertRaises(InvalidConfigurationError):
                    build_standard_layouts(string_count)
        for fret_count in ("24", 24.0, False):
            with self.subTest(fret_count=fret_count):
                with self.assertRaises(InvalidConfigurationError):
                    build_standard_layouts(6, fret_count)

    def test_numpy_integer_counts_are_accepted(self):
        layouts = build_standard_layouts(np.int64(7), np.int64(12))
        self.assertEqual(len(layouts), 7)
        self.assertEqual(layouts[0].fret_count, 12)

    def test_tuning_table_is_ordered_by_string_number(self):
        self.assertEqual([t.string_number for t in STANDARD_TUNINGS], list(range(1, 9)))


class TestNoteFinder(unittest.TestCase):
    def setUp(self):
        self.layouts = build_standard_layouts(6, 24)

    def test_every_e_on_standard_6_string(self):
        expected = {
            NotePosition(1, 0), NotePosition(1, 12), NotePosition(1, 24),
            NotePosition(2, 5), NotePosition(2, 17),
            NotePosition(3, 9), NotePosition(3, 21),
            NotePosition(4, 2), NotePosition(4, 14),
            NotePosition(5, 7), NotePosition(5, 19),
            NotePosition(6, 0), NotePosition(6, 12), NotePosition(6, 24),
        }
        self.assertEqual(find_note_on_fretboard(PitchClass.E, self.layouts), expected)

    def test_find_note_on_string(self):
        a_string = self.layouts[4]
        self.assertEqual(
            find_note_on_string(PitchClass.C, a_string),
            {NotePosition(5, 3), NotePosition(5, 15)},
        )

    def test_notes_on_string(self):
        low_e = self.layouts[5]
        self.assertEqual(
            notes_on_string(PitchClass.E, low_e),
            {PitchedNote(2, PitchClass.E), PitchedNote(3, PitchClass.E), PitchedNote(4, PitchClass.E)},
        )
        self.assertEqual(
            notes_on_string(PitchClass.C, low_e),
            {PitchedNote(3, PitchClass.C), PitchedNote(4, PitchClass.C)},
        )


if __name__ == "__main__":
    unittest.main()
