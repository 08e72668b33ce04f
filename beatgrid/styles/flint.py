from __future__ import annotations

import random
import typing

import beatgrid.sequence_utils
import beatgrid.styles
from beatgrid.chords import M, dim, m

if typing.TYPE_CHECKING:
	import beatgrid.generator


Variation = beatgrid.styles.Variation

KICKS = {
	Variation.A: (0, 9, 13),
	Variation.B: (0, 5, 7, 11, 14),
}


class Flint (beatgrid.styles.StyleProfile):

	"""Syncopated Flint bounce.

	Fixed off-grid kick figures, a call-and-response backbeat, and hats in
	threes against the four-on-the-floor grid.
	"""

	style = beatgrid.styles.Style.FLINT
	tempo = 165
	progressions = {
		Variation.A: (
			(m(0), M(3), m(4), m(0)),
			(m(0), M(5), M(3), m(4)),
			(m(0), M(6), M(5), m(4)),
		),
		Variation.B: (
			(m(0), M(5), dim(1), m(4)),
			(M(3), m(4), m(0), M(5)),
			(m(0), M(2), M(3), M(6)),
		),
	}

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		builder.hit_steps("kick", [bar_start + step for step in KICKS[variation]], 1.0)

		builder.hit("snare", bar_start + 4, 1.0)
		builder.hit("snare", bar_start + 12, 0.9)

		if variation == Variation.B and beatgrid.sequence_utils.chance(0.7, rng):
			builder.hit("clap", bar_start + 6, 0.5)
			builder.hit("clap", bar_start + 10, 0.5)

		hats = beatgrid.sequence_utils.generate_polyrhythm(16, 3)

		for step in beatgrid.sequence_utils.sequence_to_indices(hats):
			builder.hit("hat", bar_start + step, 0.7)

		builder.hit("perc", bar_start + beatgrid.sequence_utils.choice((3, 7, 11), rng), 0.8)
