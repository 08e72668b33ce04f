from __future__ import annotations

import random
import typing

import beatgrid.sequence_utils
import beatgrid.styles
from beatgrid.chords import M, m

if typing.TYPE_CHECKING:
	import beatgrid.generator


Variation = beatgrid.styles.Variation


class Detroit (beatgrid.styles.StyleProfile):

	"""Fast, relentless Detroit groove.

	Five or seven Euclidean kicks per bar under a steady hat line, with a
	backbeat snare and occasional ghost notes.
	"""

	style = beatgrid.styles.Style.DETROIT
	tempo = 185
	progressions = {
		Variation.A: (
			(m(0), M(5), M(6), m(0)),
			(m(0), M(3), M(6), M(5)),
			(m(0), M(6), M(3), M(5)),
		),
		Variation.B: (
			(m(0), m(4), M(5), M(3)),
			(M(6), M(5), M(3), m(0)),
			(m(0), M(2), M(6), M(5)),
		),
	}

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		pulses = 5 if variation == Variation.A else 7
		kicks = beatgrid.sequence_utils.generate_euclidean_sequence(16, pulses)

		for step in beatgrid.sequence_utils.sequence_to_indices(kicks):
			builder.hit("kick", bar_start + step, 1.0)

		hat_spacing = 1 if variation == Variation.B else 2

		for step in range(0, 16, hat_spacing):
			builder.hit("hat", bar_start + step, 0.8 if step % 4 == 0 else 0.6)

		builder.hit("snare", bar_start + 4, 1.0)
		builder.hit("snare", bar_start + 12, 0.95)

		# Ghost snare.
		if beatgrid.sequence_utils.chance(0.2, rng):
			builder.hit("snare", bar_start + beatgrid.sequence_utils.choice((7, 15), rng), 0.25)

		if variation == Variation.B:

			if beatgrid.sequence_utils.chance(0.5, rng):
				builder.hit("openhat", bar_start + 14, 0.7)

			if beatgrid.sequence_utils.chance(0.4, rng):
				builder.hit("perc", bar_start + beatgrid.sequence_utils.choice((2, 6, 10), rng), 0.5)
