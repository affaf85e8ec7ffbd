import unittest

from pitch_coach.errors import InvalidFrequencyError
from pitch_coach.grid import generate_grid, grid_for_notes
from pitch_coach.note_utils import note_to_frequency


class TestGenerateGrid(unittest.TestCase):
    def test_one_octave_inclusive(self):
        grid = grid_for_notes("Do4", "Do5")
        self.assertEqual(len(grid), 13)
        self.assertEqual(grid[0].note.label(), "Do4")
        self.assertEqual(grid[-1].note.label(), "Do5")
        self.assertEqual(sum(1 for entry in grid if entry.is_accidental), 5)

    def test_ascending(self):
        grid = generate_grid(100.0, 1000.0)
        frequencies = [entry.frequency for entry in grid]
        self.assertEqual(frequencies, sorted(frequencies))
        for a, b in zip(grid, grid[1:]):
            self.assertEqual(b.note.semitones - a.note.semitones, 1)

    def test_semitone_ratio_and_accidental_cycle(self):
        grid = generate_grid(130.0, 520.0)
        for a, b in zip(grid, grid[1:]):
            self.assertAlmostEqual(b.frequency / a.frequency, 2.0 ** (1.0 / 12.0))
        flags = [entry.is_accidental for entry in grid]
        for i in range(len(flags) - 12):
            self.assertEqual(flags[i], flags[i + 12])

    def test_bounds_equal_to_note(self):
        grid = generate_grid(440.0, 440.0)
        self.assertEqual(len(grid), 1)
        self.assertEqual(grid[0].note.label(), "La4")
        self.assertAlmostEqual(grid[0].frequency, 440.0)

    def test_bounds_between_notes(self):
        grid = generate_grid(100.0, 105.0)
        self.assertEqual([entry.note.label() for entry in grid], ["Sol#2"])
        self.assertEqual(generate_grid(100.0, 101.0), ())

    def test_entries_within_bounds(self):
        grid = generate_grid(123.0, 588.0)
        self.assertTrue(all(123.0 <= entry.frequency <= 588.0 for entry in grid))
        self.assertEqual(grid[0].note.label(), "Si2")
        self.assertEqual(grid[-1].note.label(), "Re5")

    def test_accidentals(self):
        grid = grid_for_notes("La3", "Si3")
        self.assertEqual([entry.is_accidental for entry in grid], [False, True, False])

    def test_inverted_range_is_empty(self):
        self.assertEqual(generate_grid(500.0, 200.0), ())

    def test_reference(self):
        grid = grid_for_notes("La4", "La4", reference=432.0)
        self.assertAlmostEqual(grid[0].frequency, 432.0)

    def test_stripe_edges(self):
        entry = grid_for_notes("La4", "La4")[0]
        self.assertAlmostEqual(entry.upper_edge / entry.lower_edge, 2.0 ** (1.0 / 12.0))
        below = note_to_frequency("Sol#4")
        self.assertAlmostEqual(entry.lower_edge, (below * 440.0) ** 0.5)

    def test_invalid_bounds(self):
        with self.assertRaises(InvalidFrequencyError):
            generate_grid(0, 440.0)
        with self.assertRaises(InvalidFrequencyError):
            generate_grid(100.0, float("inf"))
        with self.assertRaises(InvalidFrequencyError):
            generate_grid(100.0, 200.0, reference=-440.0)


if __name__ == "__main__":
    unittest.main()
