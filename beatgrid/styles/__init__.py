"""
Style profiles for the pattern generator.

Each style is a :class:`StyleProfile` subclass in its own module. The
profile carries the style's tempo, key, scale and chord progressions as
plain data, writes its drum grooves in :meth:`StyleProfile.drums`, and may
override the bass line. Harmony and melody layers are driven by the
generator from the rhythm tables declared here.
"""

from __future__ import annotations

import abc
import enum
import random
import typing

import beatgrid.chords
import beatgrid.constants
import beatgrid.intervals
import beatgrid.sequence_utils

if typing.TYPE_CHECKING:
	import beatgrid.generator


class Style (str, enum.Enum):

	"""Genre templates the generator knows."""

	TRAP = "TRAP"
	DETROIT = "DETROIT"
	FLINT = "FLINT"
	CINEMATIC = "CINEMATIC"
	ROCK = "ROCK"
	MAFIA = "MAFIA"


class Variation (str, enum.Enum):

	"""Section density: ``A`` is sparse (verses, intros), ``B`` is dense (choruses)."""

	A = "A"
	B = "B"


Progression = typing.Tuple[beatgrid.chords.Chord, ...]

# Octaves used by the harmony and melody layers.
BASS_OCTAVE = 2
PAD_OCTAVE = 3
CHORD_OCTAVE = 4
MELODY_OCTAVE = 4
HIGH_OCTAVE = 5

# Chance the bass doubles a kick on each step of the bar: always the
# downbeat, sometimes a syncopated hit, never the rest.
BASS_FOLLOW = [1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.35, 0.0, 0.0, 0.0, 0.35, 0.0, 0.0, 0.35, 0.35, 0.0]


class StyleProfile (abc.ABC):

	"""Abstract base for a generator style."""

	style: Style
	tempo: int
	key: str = "C#"
	scale: str = "natural_minor"
	progressions: typing.Dict[Variation, typing.Tuple[Progression, ...]]

	# Per-bar rhythms for the melodic layers (steps within the bar).
	arp_rhythm: typing.Tuple[int, ...] = (0, 4, 8, 12)
	melody_rhythms: typing.Tuple[typing.Tuple[int, ...], ...] = (
		(0, 6, 10),
		(0, 3, 7, 13),
		(0, 2, 4, 6, 8, 10, 12, 14),
	)
	lead_rhythm: typing.Tuple[int, ...] = (0, 6, 10)

	# Whether pads and strings play in sparse (A) sections.
	sparse_harmony: bool = True

	def scale_intervals (self) -> typing.List[int]:

		"""Return the semitone offsets of this style's scale."""

		return beatgrid.intervals.get_intervals(self.scale)

	def note (self, octave: int, degree: int) -> str:

		"""Return the pitch of a scale degree in this style's key."""

		return beatgrid.intervals.resolve_scale_note(self.key, octave, self.scale_intervals(), degree)

	def chord_notes (self, octave: int, chord: beatgrid.chords.Chord) -> typing.List[str]:

		"""Return the pitches of a chord in this style's key."""

		return beatgrid.intervals.chord_tones(self.key, octave, self.scale_intervals(), chord)

	def pick_progression (self, variation: Variation, rng: random.Random) -> Progression:

		"""Choose one of the style's progressions for a variation."""

		return beatgrid.sequence_utils.choice(self.progressions[variation], rng)

	@abc.abstractmethod
	def drums (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, bar: int, variation: Variation, rng: random.Random) -> None:

		"""Write one bar of drums starting at ``bar_start``."""

		...

	def bass (self, builder: beatgrid.generator.PatternBuilder, bar_start: int, chord: beatgrid.chords.Chord, variation: Variation, rng: random.Random) -> None:

		"""Write one bar of bass. The default doubles a gated subset of the kick with the chord root."""

		root = self.note(BASS_OCTAVE, chord.degree)

		kicks = [1 if builder.is_active("kick", bar_start + i) else 0 for i in range(beatgrid.constants.STEPS_PER_BAR)]
		gated = beatgrid.sequence_utils.probability_gate(kicks, BASS_FOLLOW, rng)

		for i in beatgrid.sequence_utils.sequence_to_indices(gated):
			builder.hit("bass", bar_start + i, 1.0 if i == 0 else 0.9, root)
