"""Song presets, sound kits and the default song.

A preset turns a style into a complete four-section song: an intro and a
verse in the sparse variation, a second verse and a chorus in the dense
one, arranged as::

	intro, verse A, chorus, verse B, chorus, chorus

A sound kit switches several tracks to matching instruments at once.
Tracks that do not offer the kit's instrument keep their current one.
"""

import dataclasses
import logging
import random
import typing

import beatgrid.constants
import beatgrid.constants.instruments as instruments
import beatgrid.generator
import beatgrid.song
import beatgrid.styles


logger = logging.getLogger(__name__)

Style = beatgrid.styles.Style
Variation = beatgrid.styles.Variation


@dataclasses.dataclass(frozen=True)
class Preset:

	"""A named starting point for a song in one style."""

	id: str
	title: str
	style: Style


@dataclasses.dataclass(frozen=True)
class SoundKit:

	"""Instrument choices keyed by track id."""

	id: str
	name: str
	instruments: typing.Dict[str, str]


PRESETS: typing.Dict[str, Preset] = {
	preset.id: preset for preset in (
		Preset("trap_banger_140", "Trap – Menace Banger", Style.TRAP),
		Preset("detroit_drive_185", "Detroit – Relentless Drive", Style.DETROIT),
		Preset("flint_talk_165", "Flint – Conversational Groove", Style.FLINT),
		Preset("cinematic_tension_130", "Cinematic – Gotham Tension", Style.CINEMATIC),
		Preset("mafia_waltz_140", "Mafia – Alley Waltz", Style.MAFIA),
		Preset("rock_anthem_128", "Rock – Garage Anthem", Style.ROCK),
	)
}

SOUND_KITS: typing.Dict[str, SoundKit] = {
	kit.id: kit for kit in (
		SoundKit("heavy_trap", "Heavy Trap", {
			"kick": instruments.KICK_TRAP.id,
			"snare": instruments.SNARE_TRAP.id,
			"hat": instruments.HAT_TRAP.id,
			"bass": instruments.BASS_808_SAMPLED.id,
			"melody": instruments.PIANO_GRAND.id,
			"pad": instruments.CHOIR_SAMPLED.id,
		}),
		SoundKit("classic_808", "Classic 808", {
			"kick": instruments.KICK_808.id,
			"snare": instruments.SNARE_808.id,
			"hat": instruments.HAT_CLOSED.id,
			"bass": instruments.BASS_808.id,
			"melody": instruments.MELODY_TRIANGLE.id,
			"lead": instruments.LEAD_SAW.id,
		}),
		SoundKit("detroit_grit", "Detroit Grit", {
			"kick": instruments.KICK_GRIT.id,
			"snare": instruments.SNARE_NOISY.id,
			"hat": instruments.HAT_GRIT.id,
			"bass": instruments.BASS_SAW.id,
			"melody": instruments.MELODY_SAW.id,
			"lead": instruments.LEAD_SQUARE.id,
		}),
	)
}

DEFAULT_PRESET_ID = "trap_banger_140"
DEFAULT_KIT_ID = "heavy_trap"

# (id, name, bars, variation) for each generated section.
PRESET_SECTIONS = (
	("intro", "Intro", 4, Variation.A),
	("verseA", "Verse A", 8, Variation.A),
	("verseB", "Verse B", 8, Variation.B),
	("chorus", "Chorus", 8, Variation.B),
)

PRESET_ARRANGEMENT = ("intro", "verseA", "chorus", "verseB", "chorus", "chorus")

INITIAL_SECTIONS = (
	("intro", "Intro", 4),
	("verse", "Verse", 8),
	("chorus", "Chorus", 8),
)

INITIAL_ARRANGEMENT = ("intro", "verse", "chorus", "verse", "chorus", "chorus")


def initial_song () -> beatgrid.song.SongState:

	"""Return a fresh song: default roster, empty intro/verse/chorus sections."""

	tracks = instruments.initial_tracks()

	sections = [
		beatgrid.song.SongSection(
			id = section_id,
			name = name,
			bars = bars,
			pattern = beatgrid.song.create_empty_pattern(len(tracks), bars * beatgrid.constants.STEPS_PER_BAR)
		)
		for section_id, name, bars in INITIAL_SECTIONS
	]

	state = beatgrid.song.SongState(
		tracks = tracks,
		sections = sections,
		arrangement = INITIAL_ARRANGEMENT,
		tempo = beatgrid.constants.DEFAULT_TEMPO,
		swing = beatgrid.constants.DEFAULT_SWING
	)
	state.active_kit_id = DEFAULT_KIT_ID

	return state


def apply_preset (state: beatgrid.song.SongState, preset_id: str, rng: typing.Optional[random.Random] = None) -> bool:

	"""Replace the song with freshly generated sections in a preset's style.

	The tempo switches to the style's own tempo. Returns False, leaving the
	song untouched, if the preset id is unknown.
	"""

	preset = PRESETS.get(preset_id)

	if preset is None:
		logger.warning(f"Unknown preset {preset_id!r}")
		return False

	if rng is None:
		rng = random.Random()

	sections = [
		beatgrid.song.SongSection(
			id = section_id,
			name = name,
			bars = bars,
			pattern = beatgrid.generator.generate(preset.style, bars, state.tracks, variation, rng=rng)
		)
		for section_id, name, bars, variation in PRESET_SECTIONS
	]

	tempo = beatgrid.generator.STYLE_PROFILES[preset.style].tempo

	state.replace_song(sections, PRESET_ARRANGEMENT, tempo=tempo)

	logger.info(f"Applied preset '{preset.title}' at {tempo} BPM")

	return True


def apply_sound_kit (state: beatgrid.song.SongState, kit_id: str) -> bool:

	"""Switch tracks to a kit's instruments where the track offers them.

	Returns False for an unknown kit id.
	"""

	kit = SOUND_KITS.get(kit_id)

	if kit is None:
		logger.warning(f"Unknown sound kit {kit_id!r}")
		return False

	for index, track in enumerate(state.tracks):
		instrument_id = kit.instruments.get(track.id)
		if instrument_id is not None and track.offers(instrument_id):
			state.set_track_instrument(index, instrument_id)

	state.active_kit_id = kit_id

	logger.info(f"Applied sound kit '{kit.name}'")

	return True
