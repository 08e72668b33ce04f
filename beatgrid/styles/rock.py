from __future__ import annotations

import random
import typing

import beatgrid.sequence_utils
import beatgrid.styles
from beatgrid.chords import M, m

if typing.TYPE_CHECKING:
	import beatgrid.generator


Variation = beatgrid.styles.Variation


class Rock (beatgrid.styles.StyleProfile):

	"""Straight rock beat in E minor with eighth-note hats."""

	style = beatgrid.styles.Style.ROCK
	tempo = 128
	key = "E"
	progressions = {
		Variation.A: (
			(m(0), M(5), M(3), M(4)),
			(M(0), M(3), M(4), M(0)),
		),
		Variation.B: (
			(m(0), M(2), M(5), M(4)),
			(M(3), M(5), m(0), M(4)),
		),
	}

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		kicks = [0, 8] if variation == Variation.A else [0, 8, 6, 14]

		builder.hit_steps("kick", [bar_start + step for step in kicks], 1.0)
		builder.hit_steps("snare", [bar_start + 4, bar_start + 12], 1.0)
		builder.hit_steps("hat", range(bar_start, bar_start + 16, 2), 0.7)

		if beatgrid.sequence_utils.chance(0.4, rng):
			builder.hit("openhat", bar_start + 14, 0.75)
