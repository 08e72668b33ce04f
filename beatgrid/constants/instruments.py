"""Instrument catalogue and default track roster.

Every instrument is addressed by a stable string id. The sound engine maps
those ids to synthesis recipes (``beatgrid.synth.RECIPES``) or to loaded
samples; an id with neither is simply silent.

Drum tracks carry General MIDI note numbers so they can also drive a drum
machine through ``beatgrid.midi.MidiTrigger``::

    import beatgrid.constants.instruments as instruments

    tracks = instruments.initial_tracks()
    kick = tracks[0]
    kick.midi_note  # -> 36
"""

import typing

import beatgrid.song


Instrument = beatgrid.song.Instrument


# ─── Drums (synthesized) ─────────────────────────────────────────────

KICK_808 = Instrument("kick_808", "808 Kick")
KICK_GRIT = Instrument("kick_grit", "Grit Kick")
SNARE_808 = Instrument("snare_808", "808 Snare")
SNARE_NOISY = Instrument("snare_noisy", "Noisy Snare")
CLAP_808 = Instrument("clap_808", "808 Clap")
HAT_CLOSED = Instrument("hat_closed", "Closed Hat")
HAT_GRIT = Instrument("hat_grit", "Grit Hat")
HAT_OPEN = Instrument("hat_open", "Open Hat")
PERC_HIT = Instrument("perc_hit", "High Tom")

# ─── Drums (sample-backed) ───────────────────────────────────────────

KICK_TRAP = Instrument("kick_trap", "Trap Kick")
SNARE_TRAP = Instrument("snare_trap", "Trap Snare")
HAT_TRAP = Instrument("hat_trap", "Trap Hat")

# ─── Bass ────────────────────────────────────────────────────────────

BASS_808 = Instrument("bass_808", "808 Bass")
BASS_SAW = Instrument("bass_saw", "Grit Bass")
BASS_SUB = Instrument("bass_sub", "Sub Bass")
BASS_808_SAMPLED = Instrument("bass_808_sampled", "Sampled 808")

# ─── Melodic ─────────────────────────────────────────────────────────

MELODY_TRIANGLE = Instrument("melody_triangle", "Triangle Lead")
MELODY_SAW = Instrument("melody_saw", "Saw Lead")
MELODY_SQUARE = Instrument("melody_square", "Square Lead")
PIANO_GRAND = Instrument("piano_grand", "Grand Piano")
STRINGS_LEGATO = Instrument("strings_legato", "Legato Strings")
STRINGS_PIZZICATO = Instrument("strings_pizzicato", "Pizzicato Strings")
VIOLIN_SECTION = Instrument("violin_section", "Violin Section")
PAD_SINE = Instrument("pad_sine", "Sine Pad")
OPERA_VOCAL = Instrument("opera_vocal", "Opera Vocal (Synth)")
ARP_TRIANGLE = Instrument("arp_triangle", "Triangle Arp")
LEAD_SAW = Instrument("lead_saw", "Saw Lead")
LEAD_SQUARE = Instrument("lead_square", "Square Lead")

# ─── Genre and expressive ────────────────────────────────────────────

KICK_ROCK = Instrument("kick_rock", "Rock Kick")
SNARE_ROCK = Instrument("snare_rock", "Rock Snare")
GUITAR_DISTORTED = Instrument("guitar_distorted", "Distorted Guitar")
MANDOLIN_TREMOLO = Instrument("mandolin_tremolo", "Mandolin")
ACCORDION = Instrument("accordion", "Accordion")
ORCH_HIT = Instrument("orch_hit", "Orchestral Hit")
TIMPANI = Instrument("timpani", "Timpani")
HARPSICHORD = Instrument("harpsichord", "Harpsichord")
FRENCH_HORN = Instrument("french_horn", "French Horn")
CHOIR_AAHS = Instrument("choir_aahs", "Choir Aahs (Synth)")
FILTER_SWEEP_PAD = Instrument("filter_sweep_pad", "Filter Sweep Pad")
CHOIR_SAMPLED = Instrument("choir_sampled", "Sampled Choir")
OPERA_SAMPLED = Instrument("opera_sampled", "Sampled Opera")


# ─── GM drum notes for the drum tracks ───────────────────────────────

GM_KICK = 36
GM_SNARE = 38
GM_CLAP = 39
GM_CLOSED_HAT = 42
GM_LOW_TOM = 45
GM_OPEN_HAT = 46


def _track (
	track_id: str,
	name: str,
	volume: float,
	instruments: typing.Sequence[Instrument],
	pan: float = 0.0,
	midi_note: typing.Optional[int] = None
) -> beatgrid.song.Track:

	"""Build a track whose first instrument is active."""

	return beatgrid.song.Track(
		id = track_id,
		name = name,
		volume = volume,
		pan = pan,
		instruments = tuple(instruments),
		active_instrument_id = instruments[0].id,
		midi_note = midi_note
	)


def initial_tracks () -> typing.Tuple[beatgrid.song.Track, ...]:

	"""Return the default 12-track roster.

	Track ids are the names the style generators write to (``"kick"``,
	``"bass"``, ``"arp"`` ...). A roster may drop or reorder tracks; the
	generator addresses them by id, never by position.
	"""

	return (
		_track("kick", "Kick", 1.0, [KICK_808, KICK_GRIT, KICK_ROCK, KICK_TRAP], midi_note=GM_KICK),
		_track("snare", "Snare", 0.9, [SNARE_808, SNARE_NOISY, SNARE_ROCK, SNARE_TRAP], midi_note=GM_SNARE),
		_track("clap", "Clap", 0.8, [CLAP_808, ORCH_HIT], midi_note=GM_CLAP),
		_track("hat", "Hi-Hat", 0.7, [HAT_CLOSED, HAT_GRIT, HAT_TRAP], midi_note=GM_CLOSED_HAT),
		_track("openhat", "Open Hat", 0.7, [HAT_OPEN], midi_note=GM_OPEN_HAT),
		_track("perc", "Perc", 0.8, [PERC_HIT, TIMPANI], pan=0.2, midi_note=GM_LOW_TOM),
		_track("bass", "808 Bass", 1.0, [BASS_808, BASS_SAW, BASS_SUB, BASS_808_SAMPLED]),
		_track("melody", "Melody", 0.7, [MELODY_TRIANGLE, MELODY_SAW, PIANO_GRAND, MANDOLIN_TREMOLO, HARPSICHORD, MELODY_SQUARE, ACCORDION], pan=-0.1),
		_track("strings", "Strings", 0.6, [STRINGS_LEGATO, VIOLIN_SECTION, FRENCH_HORN, STRINGS_PIZZICATO]),
		_track("pad", "Pad", 0.5, [PAD_SINE, OPERA_VOCAL, CHOIR_AAHS, FILTER_SWEEP_PAD, CHOIR_SAMPLED, OPERA_SAMPLED], pan=0.1),
		_track("arp", "Arp", 0.6, [ARP_TRIANGLE], pan=-0.2),
		_track("lead", "Lead", 0.7, [LEAD_SAW, LEAD_SQUARE, GUITAR_DISTORTED]),
	)
