"""Procedural multi-track pattern generation.

``generate()`` fills a whole section's pattern from a style template in
layers:

1. **Chord plan** - one progression from the style's table, assigned to
   bars cyclically.
2. **Drums** - the style profile's per-bar groove.
3. **Bass** - chord roots, either following the kick or on a fixed rhythm.
4. **Harmony** - a sustained pad/strings hit on every downbeat.
5. **Melody** - an arpeggio in sparse sections, or a contoured melody and
   a counter-line in dense ones, each note gated by chance.
6. **Velocity humanization** - accents keyed to the metric position.

Later layers can read what earlier layers wrote (the bass looks at the
kick), so the order matters.

Example:
	```python
	tracks = beatgrid.constants.instruments.initial_tracks()

	pattern = beatgrid.generator.generate(
		beatgrid.styles.Style.DETROIT,
		bars = 8,
		tracks = tracks,
		variation = beatgrid.styles.Variation.B
	)
	```
"""

import enum
import logging
import math
import random
import typing

import beatgrid.chords
import beatgrid.constants
import beatgrid.constants.velocity
import beatgrid.intervals
import beatgrid.sequence_utils
import beatgrid.song
import beatgrid.styles
import beatgrid.styles.cinematic
import beatgrid.styles.detroit
import beatgrid.styles.flint
import beatgrid.styles.mafia
import beatgrid.styles.rock
import beatgrid.styles.trap


logger = logging.getLogger(__name__)

Style = beatgrid.styles.Style
Variation = beatgrid.styles.Variation


STYLE_PROFILES: typing.Dict[Style, beatgrid.styles.StyleProfile] = {
	Style.TRAP: beatgrid.styles.trap.Trap(),
	Style.DETROIT: beatgrid.styles.detroit.Detroit(),
	Style.FLINT: beatgrid.styles.flint.Flint(),
	Style.CINEMATIC: beatgrid.styles.cinematic.Cinematic(),
	Style.ROCK: beatgrid.styles.rock.Rock(),
	Style.MAFIA: beatgrid.styles.mafia.Mafia(),
}


class Contour (str, enum.Enum):

	"""Shape of a melodic phrase over its length."""

	ASCENDING = "ascending"
	DESCENDING = "descending"
	ARCH = "arch"
	VALLEY = "valley"
	RANDOM = "random"


MELODY_CONTOURS = (Contour.ARCH, Contour.VALLEY, Contour.ASCENDING, Contour.DESCENDING)


def contour_degree (contour: Contour, progress: float, span: int, rng: random.Random) -> int:

	"""Map a position in the phrase (0.0-1.0) to a scale degree in ``[0, span]``."""

	if contour == Contour.ASCENDING:
		return math.floor(progress * span)

	if contour == Contour.DESCENDING:
		return math.floor((1.0 - progress) * span)

	if contour == Contour.ARCH:
		return math.floor(math.sin(progress * math.pi) * span)

	if contour == Contour.VALLEY:
		return math.floor((1.0 - math.sin(progress * math.pi)) * span)

	return math.floor(rng.random() * span)


def generate_melodic_line (
	length: int,
	chord_notes: typing.Sequence[str],
	root: str,
	octave: int,
	scale: typing.Sequence[int],
	contour: Contour = Contour.ARCH,
	rng: typing.Optional[random.Random] = None
) -> typing.List[str]:

	"""Return ``length`` pitches following a melodic contour.

	The phrase spans the chord size plus three scale degrees above the key
	root at ``octave``, so lines reach a little past the chord tones.
	"""

	if rng is None:
		rng = random.Random()

	span = len(chord_notes) + 3
	melody: typing.List[str] = []

	for i in range(length):
		progress = i / (length - 1) if length > 1 else 0.0
		degree = contour_degree(contour, progress, span, rng)
		melody.append(beatgrid.intervals.resolve_scale_note(root, octave, scale, degree))

	return melody


def humanize_velocity (velocity: float, step: int, rng: random.Random) -> float:

	"""Scale a velocity by a random accent for its metric position.

	Half-bar downbeats are pushed up (x1.0-1.15), other beats stay near the
	written level (x0.95-1.05), and off-beats are pulled down (x0.85-0.95).
	The result is clamped to the playable velocity range.
	"""

	if step % 8 == 0:
		velocity *= rng.uniform(1.0, 1.15)
	elif step % 4 == 0:
		velocity *= rng.uniform(0.95, 1.05)
	else:
		velocity *= rng.uniform(0.85, 0.95)

	return min(beatgrid.constants.velocity.MAX_VELOCITY, max(beatgrid.constants.velocity.MIN_VELOCITY, velocity))


class PatternBuilder:

	"""A writable step grid addressed by track id.

	Writes to tracks that are not in the roster, or outside the grid, are
	ignored, so a style can describe every layer without knowing which
	tracks the song actually has.
	"""

	def __init__ (self, tracks: typing.Sequence[beatgrid.song.Track], bars: int) -> None:

		self.steps = bars * beatgrid.constants.STEPS_PER_BAR
		self._rows: typing.Dict[str, int] = {track.id: i for i, track in enumerate(tracks)}
		self._grid: typing.List[typing.List[beatgrid.song.Step]] = [
			[beatgrid.song.EMPTY_STEP] * self.steps for _ in tracks
		]

	def hit (self, track_id: str, step: int, velocity: float = beatgrid.constants.velocity.DEFAULT_VELOCITY, note: typing.Optional[str] = None) -> None:

		"""Activate one step."""

		row = self._rows.get(track_id)

		if row is None or not 0 <= step < self.steps:
			return

		self._grid[row][step] = beatgrid.song.Step(note=note, velocity=velocity, is_active=True)

	def hit_steps (self, track_id: str, steps: typing.Iterable[int], velocity: float = beatgrid.constants.velocity.DEFAULT_VELOCITY, note: typing.Optional[str] = None) -> None:

		"""Activate several steps with the same velocity and note."""

		for step in steps:
			self.hit(track_id, step, velocity, note)

	def is_active (self, track_id: str, step: int) -> bool:

		"""Return True if a step has already been written."""

		row = self._rows.get(track_id)

		if row is None or not 0 <= step < self.steps:
			return False

		return self._grid[row][step].is_active

	def humanize (self, rng: random.Random) -> None:

		"""Apply accent-aware velocity jitter to every written step."""

		for row in self._grid:
			for step, cell in enumerate(row):
				if cell.is_active:
					row[step] = beatgrid.song.Step(
						note = cell.note,
						velocity = humanize_velocity(cell.velocity, step, rng),
						is_active = True
					)

	def build (self) -> beatgrid.song.Pattern:

		"""Freeze the grid into an immutable pattern."""

		return tuple(tuple(row) for row in self._grid)


def _harmony_and_melody (
	builder: PatternBuilder,
	profile: beatgrid.styles.StyleProfile,
	bar_start: int,
	chord: beatgrid.chords.Chord,
	variation: Variation,
	rng: random.Random
) -> None:

	profile.bass(builder, bar_start, chord, variation, rng)

	if profile.sparse_harmony or variation == Variation.B:
		pad_note = profile.note(beatgrid.styles.PAD_OCTAVE, chord.degree)
		builder.hit("pad", bar_start, 0.6, pad_note)
		builder.hit("strings", bar_start, 0.7, pad_note)

	if variation == Variation.A:

		arp_notes = profile.chord_notes(beatgrid.styles.HIGH_OCTAVE, chord)

		for index, step in enumerate(profile.arp_rhythm):
			if beatgrid.sequence_utils.chance(0.75, rng):
				builder.hit("arp", bar_start + step, 0.7, arp_notes[index % len(arp_notes)])

		return

	chord_notes = profile.chord_notes(beatgrid.styles.CHORD_OCTAVE, chord)
	scale = profile.scale_intervals()

	rhythm = beatgrid.sequence_utils.choice(profile.melody_rhythms, rng)
	contour = beatgrid.sequence_utils.choice(MELODY_CONTOURS, rng)
	melody = generate_melodic_line(len(rhythm), chord_notes, profile.key, beatgrid.styles.MELODY_OCTAVE, scale, contour, rng)

	for step, note in zip(rhythm, melody):
		if beatgrid.sequence_utils.chance(0.85, rng):
			builder.hit("melody", bar_start + step, 0.8, note)

	# Counter-line moves against the melody.
	lead_contour = Contour.DESCENDING if contour == Contour.ASCENDING else Contour.ASCENDING
	lead = generate_melodic_line(len(profile.lead_rhythm), chord_notes, profile.key, beatgrid.styles.HIGH_OCTAVE, scale, lead_contour, rng)

	for step, note in zip(profile.lead_rhythm, lead):
		if beatgrid.sequence_utils.chance(0.7, rng):
			builder.hit("lead", bar_start + step, 0.9, note)


def generate (
	style: typing.Union[Style, str],
	bars: int,
	tracks: typing.Sequence[beatgrid.song.Track],
	variation: typing.Union[Variation, str] = Variation.A,
	rng: typing.Optional[random.Random] = None
) -> beatgrid.song.Pattern:

	"""Generate a complete pattern for one section.

	Parameters:
		style: A ``Style`` or its name. Unknown names give an empty pattern.
		bars: Section length in bars (at least one).
		tracks: The song's track roster; rows follow its order.
		variation: ``A`` for sparse sections, ``B`` for dense ones.
		rng: Random source (a fresh ``random.Random`` if omitted).

	Returns:
		A ``len(tracks) x bars * 16`` pattern.
	"""

	if bars < 1:
		raise ValueError(f"Bars must be at least 1, got {bars}")

	if rng is None:
		rng = random.Random()

	variation = Variation(variation)

	try:
		profile = STYLE_PROFILES[Style(style)]
	except (ValueError, KeyError):
		logger.warning(f"Unknown style {style!r} - generating an empty pattern")
		return beatgrid.song.create_empty_pattern(len(tracks), bars * beatgrid.constants.STEPS_PER_BAR)

	builder = PatternBuilder(tracks, bars)

	progression = profile.pick_progression(variation, rng)
	bar_chords = [progression[bar % len(progression)] for bar in range(bars)]

	for bar in range(bars):
		profile.drums(builder, bar * beatgrid.constants.STEPS_PER_BAR, bar, variation, rng)

	for bar, chord in enumerate(bar_chords):
		_harmony_and_melody(builder, profile, bar * beatgrid.constants.STEPS_PER_BAR, chord, variation, rng)

	builder.humanize(rng)

	logger.debug(f"Generated {profile.style.value}/{variation.value} pattern: {bars} bars, {len(tracks)} tracks")

	return builder.build()
