from __future__ import annotations

import random
import typing

import beatgrid.sequence_utils
import beatgrid.styles
from beatgrid.chords import M, m

if typing.TYPE_CHECKING:
	import beatgrid.generator


Variation = beatgrid.styles.Variation


class Cinematic (beatgrid.styles.StyleProfile):

	"""Sparse, heavy hits for trailer-style tension.

	The sparse variation is a single kick and snare per bar; the dense one
	adds a second kick, a late backbeat and tension percussion. The lead
	answers on the last half of the bar.
	"""

	style = beatgrid.styles.Style.CINEMATIC
	tempo = 130
	progressions = {
		Variation.A: (
			(m(0), M(5), m(4), M(3)),
		),
		Variation.B: (
			(m(0), M(3), M(2), M(5)),
		),
	}

	lead_rhythm = (0, 8, 12)

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		builder.hit("kick", bar_start, 1.0)

		if variation == Variation.B:
			builder.hit("kick", bar_start + 8, 0.85)
			if beatgrid.sequence_utils.chance(0.6, rng):
				builder.hit("kick", bar_start + 10, 0.9)

		builder.hit("snare", bar_start + 4, 1.0)

		if variation == Variation.B:
			builder.hit("snare", bar_start + 12, 0.95)

		builder.hit_steps("hat", range(bar_start, bar_start + 16, 4), 0.5)

		if variation == Variation.B and beatgrid.sequence_utils.chance(0.5, rng):
			builder.hit("perc", bar_start + 14, 0.7)
