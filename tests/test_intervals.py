import unittest

import beatgrid.chords
import beatgrid.intervals


class IntervalTests (unittest.TestCase):

	"""
	Tests for scale definitions and degree resolution.
	"""

	def test_get_intervals (self) -> None:

		"""
		Interval lookup should return a known definition.
		"""

		self.assertEqual(beatgrid.intervals.get_intervals("natural_minor"), [0, 2, 3, 5, 7, 8, 10])


	def test_get_intervals_unknown (self) -> None:

		"""
		An unknown scale name raises.
		"""

		with self.assertRaises(ValueError):
			beatgrid.intervals.get_intervals("not_a_scale")


	def test_resolve_wraps_degrees (self) -> None:

		"""
		Degrees beyond the scale carry into the octave, in both directions.
		"""

		minor = beatgrid.intervals.get_intervals("natural_minor")

		self.assertEqual(beatgrid.intervals.resolve_scale_note("C#", 4, minor, 0), "C#4")
		self.assertEqual(beatgrid.intervals.resolve_scale_note("C#", 4, minor, 7), "C#5")
		self.assertEqual(beatgrid.intervals.resolve_scale_note("C#", 4, minor, -1), "B3")
		self.assertEqual(beatgrid.intervals.resolve_scale_note("C#", 4, minor, -7), "C#3")


	def test_degree_and_octave_shift_agree (self) -> None:

		"""
		Degree d + len(scale) is degree d one octave up.
		"""

		scale = beatgrid.intervals.get_intervals("harmonic_minor")

		for degree in range(-10, 10):
			low = beatgrid.chords.note_number(beatgrid.intervals.resolve_scale_note("A", 3, scale, degree))
			high = beatgrid.chords.note_number(beatgrid.intervals.resolve_scale_note("A", 3, scale, degree + len(scale)))
			self.assertEqual(high - low, 12)


	def test_chord_tones_use_fixed_quality_offsets (self) -> None:

		"""
		The chord root comes from the scale, the other tones from the quality.
		"""

		minor = beatgrid.intervals.get_intervals("natural_minor")

		self.assertEqual(beatgrid.intervals.chord_tones("C", 4, minor, beatgrid.chords.m(0)), ["C4", "D#4", "G4"])
		self.assertEqual(beatgrid.intervals.chord_tones("C", 4, minor, beatgrid.chords.M(2)), ["D#4", "G4", "A#4"])
		self.assertEqual(beatgrid.intervals.chord_tones("C", 4, minor, beatgrid.chords.dim(1)), ["D4", "F4", "G#4"])


	def test_register_scale (self) -> None:

		"""
		A registered scale is available by name; malformed ones are refused.
		"""

		beatgrid.intervals.register_scale("test_hirajoshi", [0, 2, 3, 7, 8])

		self.assertEqual(beatgrid.intervals.get_intervals("test_hirajoshi"), [0, 2, 3, 7, 8])

		with self.assertRaises(ValueError):
			beatgrid.intervals.register_scale("bad_start", [1, 3, 5])

		with self.assertRaises(ValueError):
			beatgrid.intervals.register_scale("bad_order", [0, 5, 3])

		with self.assertRaises(ValueError):
			beatgrid.intervals.register_scale("bad_range", [0, 7, 12])


class PitchTests (unittest.TestCase):

	"""
	Tests for pitch name parsing and conversion.
	"""

	def test_note_number_round_trip (self) -> None:

		"""
		Flats parse to the same number as their sharp spelling.
		"""

		self.assertEqual(beatgrid.chords.note_number("Bb3"), beatgrid.chords.note_number("A#3"))
		self.assertEqual(beatgrid.chords.note_name(beatgrid.chords.note_number("Bb3")), "A#3")


	def test_midi_and_frequency (self) -> None:

		"""
		C4 is MIDI 60 and A4 is 440 Hz.
		"""

		self.assertEqual(beatgrid.chords.note_to_midi("C4"), 60)
		self.assertAlmostEqual(beatgrid.chords.note_to_frequency("A4"), 440.0)
		self.assertAlmostEqual(beatgrid.chords.note_to_frequency("A5"), 880.0)


	def test_invalid_pitch (self) -> None:

		"""
		Garbage names raise ValueError.
		"""

		with self.assertRaises(ValueError):
			beatgrid.chords.note_number("H2")

		with self.assertRaises(ValueError):
			beatgrid.chords.key_name_to_pc("X")
