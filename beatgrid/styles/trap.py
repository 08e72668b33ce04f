from __future__ import annotations

import random
import typing

import beatgrid.sequence_utils
import beatgrid.styles
from beatgrid.chords import M, m

if typing.TYPE_CHECKING:
	import beatgrid.chords
	import beatgrid.generator


Variation = beatgrid.styles.Variation

ROLL_STARTS = (10, 12, 13)
ROLL_INTERVALS = (1, 1, 2, 3)


class Trap (beatgrid.styles.StyleProfile):

	"""Half-time trap in C# harmonic minor.

	Euclidean kicks, eighth-note hats with accelerating rolls on every other
	bar, and a snare on the half-bar. The bass plays a fixed 808 rhythm on
	the chord root instead of following the kick, and sparse sections leave
	out pads and strings.
	"""

	style = beatgrid.styles.Style.TRAP
	tempo = 140
	key = "C#"
	scale = "harmonic_minor"
	progressions = {
		Variation.A: (
			(m(0), M(5), M(6), M(3)),
			(m(0), M(3), M(6), M(6)),
		),
		Variation.B: (
			(m(0), m(0), M(5), M(6)),
			(m(0), M(2), M(5), M(6)),
		),
	}

	arp_rhythm = (0, 4, 7, 10, 14)
	melody_rhythms = ((0, 3, 6, 9, 12),)
	sparse_harmony = False

	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		"""Euclidean kick, hats with rolls, snare on the half-bar."""

		pulses = 3 if variation == Variation.A else 5
		kicks = beatgrid.sequence_utils.generate_euclidean_sequence(16, pulses)

		for step in beatgrid.sequence_utils.sequence_to_indices(kicks):
			builder.hit("kick", bar_start + step, 1.0)

		for step in range(0, 16, 2):
			base = 0.7 if step % 4 == 0 else 0.5
			builder.hit("hat", bar_start + step, rng.uniform(base - 0.1, base + 0.1))

		# Rolls land on odd bars only.
		if bar % 2 == 1 and beatgrid.sequence_utils.chance(0.8, rng):

			position = beatgrid.sequence_utils.choice(ROLL_STARTS, rng)

			for interval in ROLL_INTERVALS:
				if position < 16:
					builder.hit("hat", bar_start + position, rng.uniform(0.4, 0.6))
				position += interval

		builder.hit("snare", bar_start + 8, 1.0)

		if variation == Variation.B and beatgrid.sequence_utils.chance(0.6, rng):
			builder.hit("snare", bar_start + 7, 0.3)

		if beatgrid.sequence_utils.chance(0.3, rng):
			builder.hit("clap", bar_start + 8, 0.8)

		if beatgrid.sequence_utils.chance(0.3, rng):
			builder.hit("openhat", bar_start + beatgrid.sequence_utils.choice((6, 14), rng), 0.6)

	def bass (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, chord: beatgrid.chords.Chord, variation: Variation, rng: random.Random) -> None:

		"""Fixed 808 rhythm on the chord root."""

		rhythm = (0, 8) if variation == Variation.A else (0, 6, 9, 14)
		root = self.note(beatgrid.styles.BASS_OCTAVE, chord.degree)

		for step in rhythm:
			builder.hit("bass", bar_start + step, 1.0, root)
