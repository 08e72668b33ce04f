import random
import typing

import pytest

import beatgrid.chords
import beatgrid.constants.velocity
import beatgrid.generator
import beatgrid.intervals
import beatgrid.song
import beatgrid.styles


Style = beatgrid.styles.Style
Variation = beatgrid.styles.Variation


def _row (pattern: beatgrid.song.Pattern, tracks: typing.Sequence[beatgrid.song.Track], track_id: str) -> typing.Tuple[beatgrid.song.Step, ...]:

	index = [track.id for track in tracks].index(track_id)

	return pattern[index]


def _active (row: typing.Sequence[beatgrid.song.Step]) -> typing.List[int]:

	return [i for i, step in enumerate(row) if step.is_active]


@pytest.mark.parametrize("style", list(Style))
@pytest.mark.parametrize("variation", list(Variation))
def test_every_style_fills_the_grid (style: Style, variation: Variation, tracks: tuple) -> None:

	"""Each style and variation yields a full-size pattern with drums and bass."""

	pattern = beatgrid.generator.generate(style, 4, tracks, variation, rng=random.Random(11))

	assert len(pattern) == len(tracks)
	assert all(len(row) == 64 for row in pattern)
	assert _active(_row(pattern, tracks, "kick"))
	assert _active(_row(pattern, tracks, "bass"))


@pytest.mark.parametrize("style", list(Style))
def test_velocities_stay_in_range (style: Style, tracks: tuple) -> None:

	"""Humanized velocities never leave the playable range."""

	pattern = beatgrid.generator.generate(style, 8, tracks, Variation.B, rng=random.Random(5))

	for row in pattern:
		for step in row:
			if step.is_active:
				assert beatgrid.constants.velocity.MIN_VELOCITY <= step.velocity <= beatgrid.constants.velocity.MAX_VELOCITY


def test_same_seed_same_pattern (tracks: tuple) -> None:

	"""Generation is reproducible from the random source."""

	first = beatgrid.generator.generate(Style.DETROIT, 8, tracks, Variation.B, rng=random.Random(42))
	second = beatgrid.generator.generate(Style.DETROIT, 8, tracks, Variation.B, rng=random.Random(42))

	assert first == second


def test_style_names_are_accepted (tracks: tuple) -> None:

	"""A style may be passed by name."""

	by_name = beatgrid.generator.generate("FLINT", 2, tracks, "A", rng=random.Random(3))
	by_enum = beatgrid.generator.generate(Style.FLINT, 2, tracks, Variation.A, rng=random.Random(3))

	assert by_name == by_enum


def test_unknown_style_gives_empty_pattern (tracks: tuple) -> None:

	"""An unknown style produces silence of the right size."""

	pattern = beatgrid.generator.generate("POLKA", 2, tracks)

	assert len(pattern) == len(tracks)
	assert all(len(row) == 32 for row in pattern)
	assert not any(step.is_active for row in pattern for step in row)


def test_zero_bars_is_an_error (tracks: tuple) -> None:

	"""A section needs at least one bar."""

	with pytest.raises(ValueError):
		beatgrid.generator.generate(Style.TRAP, 0, tracks)


def test_trap_sparse_bar_layout (tracks: tuple) -> None:

	"""Sparse trap: snare on every half-bar, 808 on beats one and three, no pads."""

	pattern = beatgrid.generator.generate(Style.TRAP, 4, tracks, Variation.A, rng=random.Random(9))

	kick = _active(_row(pattern, tracks, "kick"))
	snare = _active(_row(pattern, tracks, "snare"))
	bass_row = _row(pattern, tracks, "bass")

	for bar in range(4):
		assert any(bar * 16 <= step < (bar + 1) * 16 for step in kick)
		assert bar * 16 + 8 in snare
		assert bass_row[bar * 16].is_active
		assert bass_row[bar * 16 + 8].is_active

	# Every trap progression opens on the tonic.
	assert bass_row[0].note == "C#2"

	assert _active(_row(pattern, tracks, "pad")) == []
	assert _active(_row(pattern, tracks, "strings")) == []


@pytest.mark.parametrize("style", [Style.DETROIT, Style.FLINT, Style.ROCK, Style.CINEMATIC])
def test_bass_follows_a_subset_of_the_kick (style: Style, tracks: tuple) -> None:

	"""Kick-following bass only lands on kicks and always takes the downbeat."""

	pattern = beatgrid.generator.generate(style, 8, tracks, Variation.B, rng=random.Random(6))

	kick = set(_active(_row(pattern, tracks, "kick")))
	bass = _active(_row(pattern, tracks, "bass"))

	assert set(bass) <= kick
	assert all(bar * 16 in bass for bar in range(8))


def test_sparse_sections_arpeggiate (tracks: tuple) -> None:

	"""Variation A writes the arp only; melody and lead stay empty."""

	pattern = beatgrid.generator.generate(Style.CINEMATIC, 8, tracks, Variation.A, rng=random.Random(1))

	arp_row = _row(pattern, tracks, "arp")

	assert _active(arp_row)
	assert all(arp_row[i].note.endswith("5") or arp_row[i].note.endswith("6") for i in _active(arp_row))
	assert _active(_row(pattern, tracks, "melody")) == []
	assert _active(_row(pattern, tracks, "lead")) == []


def test_dense_sections_carry_melody_and_pads (tracks: tuple) -> None:

	"""Variation B has melody and pads on every bar, and no arp."""

	pattern = beatgrid.generator.generate(Style.DETROIT, 8, tracks, Variation.B, rng=random.Random(2))

	pad_row = _row(pattern, tracks, "pad")

	assert _active(_row(pattern, tracks, "melody"))
	assert _active(_row(pattern, tracks, "arp")) == []
	assert _active(pad_row) == [bar * 16 for bar in range(8)]
	assert all(pad_row[bar * 16].note.endswith("3") for bar in range(8))


def test_drum_steps_have_no_pitch (tracks: tuple) -> None:

	"""Drum tracks never receive a note name."""

	pattern = beatgrid.generator.generate(Style.MAFIA, 4, tracks, Variation.B, rng=random.Random(4))

	for track_id in ("kick", "snare", "clap", "hat", "openhat", "perc"):
		row = _row(pattern, tracks, track_id)
		assert all(row[i].note is None for i in _active(row))


def test_missing_tracks_are_skipped () -> None:

	"""A roster without melodic tracks still generates its drums."""

	roster = (
		beatgrid.song.Track(id="hat", name="Hat"),
		beatgrid.song.Track(id="kick", name="Kick"),
	)

	pattern = beatgrid.generator.generate(Style.DETROIT, 2, roster, rng=random.Random(0))

	assert len(pattern) == 2
	assert _active(pattern[1])


def test_melodic_line_contours () -> None:

	"""Ascending lines never fall and descending lines never rise."""

	scale = beatgrid.intervals.get_intervals("natural_minor")
	chord = ["C4", "D#4", "G4"]
	rng = random.Random(0)

	up = beatgrid.generator.generate_melodic_line(8, chord, "C", 4, scale, beatgrid.generator.Contour.ASCENDING, rng)
	down = beatgrid.generator.generate_melodic_line(8, chord, "C", 4, scale, beatgrid.generator.Contour.DESCENDING, rng)

	up_numbers = [beatgrid.chords.note_number(n) for n in up]
	down_numbers = [beatgrid.chords.note_number(n) for n in down]

	assert up_numbers == sorted(up_numbers)
	assert down_numbers == sorted(down_numbers, reverse=True)
	assert up[0] == "C4"
	assert down[-1] == "C4"


def test_single_note_line_starts_on_root () -> None:

	"""A one-note phrase sits at the start of its contour."""

	scale = beatgrid.intervals.get_intervals("major")

	line = beatgrid.generator.generate_melodic_line(1, ["C4", "E4", "G4"], "C", 4, scale, beatgrid.generator.Contour.ARCH)

	assert line == ["C4"]


def test_humanize_velocity_accents () -> None:

	"""Downbeats are pushed up, off-beats pulled down, both clamped."""

	rng = random.Random(8)

	for _ in range(50):
		assert 1.0 <= beatgrid.generator.humanize_velocity(1.0, 0, rng) <= 1.15
		assert 0.85 <= beatgrid.generator.humanize_velocity(1.0, 3, rng) <= 0.95
		assert beatgrid.generator.humanize_velocity(1.2, 8, rng) <= beatgrid.constants.velocity.MAX_VELOCITY
		assert beatgrid.generator.humanize_velocity(0.05, 1, rng) >= beatgrid.constants.velocity.MIN_VELOCITY


def test_pattern_builder_ignores_out_of_range (tracks: tuple) -> None:

	"""Writes to unknown tracks or outside the grid are dropped."""

	builder = beatgrid.generator.PatternBuilder(tracks, 1)

	builder.hit("cowbell", 0)
	builder.hit("kick", 16)
	builder.hit("kick", -1)
	builder.hit("kick", 4, 0.5)

	pattern = builder.build()

	assert _active(_row(pattern, tracks, "kick")) == [4]
	assert builder.is_active("kick", 4)
	assert not builder.is_active("cowbell", 4)
	assert sum(len(_active(row)) for row in pattern) == 1
