import unittest

import beatgrid.constants
import beatgrid.swing


class SwingTests (unittest.TestCase):

	"""
	Tests for swung step timing.
	"""

	def test_straight_steps_are_equal (self) -> None:

		"""
		At swing 0.5 every step lasts one straight 16th.
		"""

		for step in range(4):
			self.assertAlmostEqual(beatgrid.swing.step_advance(step, 120, 0.5), 0.125)


	def test_pair_always_spans_an_eighth (self) -> None:

		"""
		Swing moves the split inside each pair but never the pair length.
		"""

		for swing in (0.5, 0.52, 0.6, 0.75):
			pair = beatgrid.swing.step_advance(0, 155, swing) + beatgrid.swing.step_advance(1, 155, swing)
			self.assertAlmostEqual(pair, 2 * beatgrid.swing.seconds_per_step(155))


	def test_even_steps_shrink_as_swing_grows (self) -> None:

		"""
		At 0.75 the on-beat step takes a quarter of the eighth, the off-beat three quarters.
		"""

		eighth = 2 * beatgrid.swing.seconds_per_step(120)

		self.assertAlmostEqual(beatgrid.swing.step_advance(0, 120, 0.75), eighth * 0.25)
		self.assertAlmostEqual(beatgrid.swing.step_advance(1, 120, 0.75), eighth * 0.75)


	def test_default_swing_lengthens_the_off_beat (self) -> None:

		"""
		The default swing is the share of each eighth given to its odd 16th.
		"""

		eighth = 2 * beatgrid.swing.seconds_per_step(155)
		swing = beatgrid.constants.DEFAULT_SWING

		self.assertAlmostEqual(beatgrid.swing.step_advance(1, 155, swing), eighth * swing)
		self.assertGreater(beatgrid.swing.step_advance(1, 155, swing), beatgrid.swing.step_advance(0, 155, swing))


	def test_sixteen_steps_make_a_bar (self) -> None:

		"""
		A bar at 120 BPM lasts two seconds whatever the swing.
		"""

		total = sum(beatgrid.swing.step_advance(step, 120, 0.6) for step in range(16))

		self.assertAlmostEqual(total, 2.0)


	def test_validation (self) -> None:

		"""
		Out-of-range swing and non-positive tempo raise.
		"""

		with self.assertRaises(ValueError):
			beatgrid.swing.validate_swing(0.4)

		with self.assertRaises(ValueError):
			beatgrid.swing.validate_swing(0.8)

		with self.assertRaises(ValueError):
			beatgrid.swing.seconds_per_step(0)

		self.assertEqual(beatgrid.swing.validate_swing(0.75), 0.75)
