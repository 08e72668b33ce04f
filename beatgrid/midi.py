"""MIDI output: live triggering and Standard MIDI File export.

Drum tracks carry a General MIDI note (``Track.midi_note``) and play on the
drum channel; melodic steps use their own pitch on the melodic channel.
Steps with neither are skipped.
"""

import asyncio
import logging
import typing

import mido

import beatgrid.chords
import beatgrid.constants.velocity
import beatgrid.render
import beatgrid.scheduler
import beatgrid.song


logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480
DRUM_CHANNEL = 9


def midi_velocity (volume: float) -> int:

	"""Map a trigger volume (0-1.2) to a MIDI velocity (1-127)."""

	scaled = round(volume * beatgrid.constants.velocity.MIDI_MAX_VELOCITY / beatgrid.constants.velocity.MAX_VELOCITY)

	return max(beatgrid.constants.velocity.MIDI_MIN_VELOCITY, min(beatgrid.constants.velocity.MIDI_MAX_VELOCITY, int(scaled)))


def midi_pitch (track: beatgrid.song.Track, note: typing.Optional[str]) -> typing.Optional[int]:

	"""Return the MIDI note for a trigger, or None if the track has no pitch."""

	if note is not None:
		return beatgrid.chords.note_to_midi(note)

	return track.midi_note


class MidiTrigger:

	"""
	A scheduler trigger that plays steps on a MIDI output port.

	Notes are sent when their scheduled time arrives (``loop.call_later``)
	and released ``gate`` seconds later.

	Example:
		```python
		name, port = beatgrid.midi_utils.select_output_device()
		clock = beatgrid.scheduler.MonotonicClock()

		trigger = beatgrid.midi.MidiTrigger(port, clock)
		scheduler = beatgrid.scheduler.TransportScheduler(state, trigger, clock=clock)
		```
	"""

	def __init__ (
		self,
		port: typing.Any,
		clock: beatgrid.scheduler.AudioClock,
		channel: int = DRUM_CHANNEL,
		melodic_channel: int = 0,
		gate: float = 0.1
	) -> None:

		if not 0 <= channel <= 15 or not 0 <= melodic_channel <= 15:
			raise ValueError("MIDI channels must be between 0 and 15")

		if gate <= 0:
			raise ValueError("Gate must be positive")

		self.port = port
		self.clock = clock
		self.channel = channel
		self.melodic_channel = melodic_channel
		self.gate = gate

	def __call__ (self, track: beatgrid.song.Track, when: float, volume: float, note: typing.Optional[str]) -> None:

		pitch = midi_pitch(track, note)

		if pitch is None:
			return

		channel = self.melodic_channel if note is not None else self.channel
		delay = max(0.0, when - self.clock.now())
		loop = asyncio.get_running_loop()

		loop.call_later(delay, self._send, "note_on", channel, pitch, midi_velocity(volume))
		loop.call_later(delay + self.gate, self._send, "note_off", channel, pitch, 0)

	def _send (self, message_type: str, channel: int, note: int, velocity: int) -> None:

		try:
			self.port.send(mido.Message(message_type, channel=channel, note=note, velocity=velocity))
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")

	def close (self) -> None:

		"""Silence and close the port."""

		if hasattr(self.port, "panic"):
			self.port.panic()

		self.port.close()


def export_midi (
	state: beatgrid.song.SongState,
	filename: typing.Optional[str] = None,
	channel: int = DRUM_CHANNEL,
	melodic_channel: int = 0,
	gate_beats: float = 0.25
) -> mido.MidiFile:

	"""Write one pass of the arrangement as a Type 1 MIDI file.

	Track 0 holds the tempo; each song track that sounds gets its own MIDI
	track. Swing is baked into the note positions. Pass ``filename=None`` to
	only build the file.
	"""

	song = state.snapshot()
	tempo = mido.bpm2tempo(song.tempo)
	gate_ticks = max(1, int(round(gate_beats * TICKS_PER_BEAT)))

	timed: typing.Dict[int, typing.List[typing.Tuple[int, int, mido.Message]]] = {}

	for _, event in beatgrid.render.trigger_events(song):

		pitch = midi_pitch(event.track, event.note)

		if pitch is None:
			continue

		index = event.track_index
		midi_channel = melodic_channel if event.note is not None else channel
		tick = int(round(mido.second2tick(event.time, TICKS_PER_BEAT, tempo)))

		# Note-offs sort ahead of note-ons on the same tick.
		timed.setdefault(index, []).append((tick, 1, mido.Message("note_on", channel=midi_channel, note=pitch, velocity=midi_velocity(event.volume))))
		timed.setdefault(index, []).append((tick + gate_ticks, 0, mido.Message("note_off", channel=midi_channel, note=pitch, velocity=0)))

	mid = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)

	conductor = mido.MidiTrack()
	conductor.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))
	conductor.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
	mid.tracks.append(conductor)

	for index in sorted(timed):

		track = mido.MidiTrack()
		track.append(mido.MetaMessage("track_name", name=song.tracks[index].name, time=0))

		last_tick = 0

		for tick, _, message in sorted(timed[index], key=lambda item: (item[0], item[1])):
			track.append(message.copy(time=tick - last_tick))
			last_tick = tick

		mid.tracks.append(track)

	if filename is not None:
		mid.save(filename)
		logger.info(f"Saved {filename} ({len(mid.tracks) - 1} tracks)")

	return mid
