from __future__ import annotations

import random
import typing

import beatgrid.styles
from beatgrid.chords import M, dim, m

if typing.TYPE_CHECKING:
	import beatgrid.chords
	import beatgrid.generator


Variation = beatgrid.styles.Variation


class Mafia (beatgrid.styles.StyleProfile):

	"""Brushed oom-pah in A harmonic minor.

	Drums stay almost silent (kick, a soft snare, and quarter-note hats in
	the dense variation) while the bass carries the waltz: root on the
	downbeat, fifth on the next two beats.
	"""

	style = beatgrid.styles.Style.MAFIA
	tempo = 140
	key = "A"
	scale = "harmonic_minor"
	progressions = {
		Variation.A: (
			(m(0), M(4), m(0), dim(6)),
			(m(0), M(3), M(4), dim(6)),
		),
		Variation.B: (
			(m(0), dim(6), M(2), M(4)),
			(M(3), dim(6), m(0), M(4)),
		),
	}

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		builder.hit("kick", bar_start, 1.0)
		builder.hit("snare", bar_start + 4, 0.4)

		if variation == Variation.B:
			builder.hit_steps("hat", range(bar_start, bar_start + 16, 4), 0.3)

	def bass (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, chord: beatgrid.chords.Chord, variation: Variation, rng: random.Random) -> None:

		"""Root, then the fifth twice."""

		root = self.note(beatgrid.styles.BASS_OCTAVE, chord.degree)
		fifth = self.note(beatgrid.styles.PAD_OCTAVE, chord.degree + 4)

		builder.hit("bass", bar_start, 1.0, root)
		builder.hit("bass", bar_start + 4, 0.8, fifth)
		builder.hit("bass", bar_start + 8, 0.8, fifth)
