"""Voice synthesis for offline rendering.

Every instrument id maps to a :class:`Recipe`: how long one hit lasts and
a function that draws it as a mono numpy array. The shapes are simple
(oscillators, filtered noise, exponential decays); they give exports a
recognisable kit rather than modelling any particular hardware.

Instruments can also be backed by recorded samples. A :class:`SoundEngine`
built with ``samples={"kick_trap": array, ...}`` plays those arrays in
place of the recipe; ids with neither a sample nor a recipe are silent.
"""

import dataclasses
import logging
import math
import typing

import numpy
import scipy.signal

import beatgrid.chords
import beatgrid.song


logger = logging.getLogger(__name__)

# voice(t, frequency, sample_rate, rng) -> mono samples, len(t) long
Voice = typing.Callable[[numpy.ndarray, float, int, numpy.random.Generator], numpy.ndarray]

# Pitched samples are recorded at this note and resampled to the step note.
SAMPLE_BASE_NOTES: typing.Dict[str, str] = {
	"bass_808_sampled": "C2",
}

DEFAULT_NOTE = "C4"


@dataclasses.dataclass(frozen=True)
class Recipe:

	"""How to synthesize one instrument.

	Attributes:
		duration: Length of a hit, in seconds, or in beats when ``in_beats`` is set.
		voice: Function drawing the hit.
		pitched: Pitched voices stay silent on steps without a note.
		in_beats: Scale ``duration`` by the song tempo (sustained instruments).
	"""

	duration: float
	voice: Voice
	pitched: bool = False
	in_beats: bool = False

	def seconds (self, tempo: float) -> float:

		"""Return the hit length in seconds at a tempo."""

		if self.in_beats:
			return self.duration * 60.0 / tempo

		return self.duration


# ─── Building blocks ─────────────────────────────────────────────────

def _decay (t: numpy.ndarray, length: float, floor: float = 0.01) -> numpy.ndarray:

	"""Exponential fall from 1.0 to ``floor`` over ``length`` seconds."""

	return numpy.power(floor, t / length)


def _sweep_phase (t: numpy.ndarray, start: float, end: float, length: float, sample_rate: int) -> numpy.ndarray:

	"""Phase (in cycles) of an exponential pitch glide from ``start`` to ``end`` Hz."""

	frequency = start * numpy.power(end / start, numpy.minimum(t / length, 1.0))

	return numpy.cumsum(frequency) / sample_rate


def _sine (phase: numpy.ndarray) -> numpy.ndarray:
	return numpy.sin(2.0 * numpy.pi * phase)


def _saw (phase: numpy.ndarray) -> numpy.ndarray:
	return 2.0 * (phase % 1.0) - 1.0


def _square (phase: numpy.ndarray) -> numpy.ndarray:
	return numpy.where(phase % 1.0 < 0.5, 1.0, -1.0)


def _triangle (phase: numpy.ndarray) -> numpy.ndarray:
	return 2.0 * numpy.abs(2.0 * (phase % 1.0) - 1.0) - 1.0


def _filtered_noise (n: int, sample_rate: int, rng: numpy.random.Generator, btype: str, cutoff: typing.Union[float, typing.Tuple[float, float]]) -> numpy.ndarray:

	"""White noise through a Butterworth filter."""

	noise = rng.uniform(-1.0, 1.0, n)

	if n == 0:
		return noise

	nyquist = sample_rate / 2.0

	if isinstance(cutoff, tuple):
		low, high = cutoff
		upper = min(high / nyquist, 0.99)
		lower = min(max(low / nyquist, 1e-4), upper * 0.9)
		sos = scipy.signal.butter(2, [lower, upper], btype="bandpass", output="sos")
	else:
		sos = scipy.signal.butter(4, min(cutoff / nyquist, 0.99), btype=btype, output="sos")

	return scipy.signal.sosfilt(sos, noise)


def _lowpass (signal: numpy.ndarray, sample_rate: int, cutoff: float) -> numpy.ndarray:

	if len(signal) == 0:
		return signal

	sos = scipy.signal.butter(2, min(cutoff / (sample_rate / 2.0), 0.99), btype="lowpass", output="sos")

	return scipy.signal.sosfilt(sos, signal)


def _attack_release (t: numpy.ndarray, length: float, attack: float, release: float) -> numpy.ndarray:

	"""Linear fade in over ``attack`` and out over the final ``release`` seconds."""

	rise = numpy.clip(t / attack, 0.0, 1.0) if attack > 0 else numpy.ones_like(t)
	fall = numpy.clip((length - t) / release, 0.0, 1.0) if release > 0 else numpy.ones_like(t)

	return rise * fall


def _length (t: numpy.ndarray, sample_rate: int) -> float:
	return max(len(t) / sample_rate, 1.0 / sample_rate)


# ─── Drums ───────────────────────────────────────────────────────────

def _kick (start: float, end: float, click: float = 0.0, grit: float = 0.0) -> Voice:

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		length = _length(t, sample_rate)
		body = _sine(_sweep_phase(t, start, end, length, sample_rate)) * _decay(t, length)

		if grit:
			body += grit * _square(_sweep_phase(t, start, 20.0, length * 0.7, sample_rate)) * _decay(t, length * 0.7)

		if click:
			body += click * _filtered_noise(len(t), sample_rate, rng, "highpass", 5000.0) * _decay(t, 0.02, 0.001)

		return body

	return voice


def _snare (tone: float, noise_level: float, band: typing.Union[float, typing.Tuple[float, float]]) -> Voice:

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		length = _length(t, sample_rate)
		body = _sine(_sweep_phase(t, tone, tone / 2.0, length, sample_rate)) * _decay(t, length)
		noise = _filtered_noise(len(t), sample_rate, rng, "highpass", band) * _decay(t, length)

		return body + noise_level * noise

	return voice


def _noise_hit (btype: str, cutoff: typing.Union[float, typing.Tuple[float, float]], level: float = 0.8) -> Voice:

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		return level * _filtered_noise(len(t), sample_rate, rng, btype, cutoff) * _decay(t, _length(t, sample_rate))

	return voice


def _clap (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	noise = _filtered_noise(len(t), sample_rate, rng, "bandpass", (1000.0, 2500.0))

	# Three quick bursts, then the tail.
	bursts = numpy.zeros_like(t)
	for offset in (0.0, 0.01, 0.02):
		bursts = numpy.maximum(bursts, numpy.where(t >= offset, _decay(numpy.maximum(t - offset, 0.0), 0.03, 0.05), 0.0))

	return noise * bursts * _decay(t, _length(t, sample_rate), 0.1)


def _perc (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)

	return _triangle(_sweep_phase(t, 880.0, 440.0, length, sample_rate)) * _decay(t, length)


def _timpani (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)

	return _sine(_sweep_phase(t, frequency * 1.02, frequency, length, sample_rate)) * _decay(t, length, 0.001)


def _orch_hit (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	base = beatgrid.chords.note_to_frequency(DEFAULT_NOTE)
	stack = numpy.zeros_like(t)

	for harmonic in range(1, 7):
		detune = 1.0 + (rng.random() - 0.5) * 0.05
		stack += 0.5 * _saw(base * detune * harmonic * 0.5 * t)

	return stack / 6.0 * _decay(t, _length(t, sample_rate), 0.001)


# ─── Pitched ─────────────────────────────────────────────────────────

def _tone (wave: typing.Callable[[numpy.ndarray], numpy.ndarray], attack: float = 0.005, cutoff: typing.Optional[float] = None, vibrato: float = 0.0) -> Voice:

	"""A single oscillator with a linear attack and release."""

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		length = _length(t, sample_rate)
		phase = frequency * t

		if vibrato:
			phase = phase + vibrato * numpy.sin(2.0 * numpy.pi * 5.0 * t) / (2.0 * numpy.pi * 5.0) * frequency

		signal = wave(phase)

		if cutoff is not None:
			signal = _lowpass(signal, sample_rate, frequency * cutoff)

		return signal * _attack_release(t, length, attack, length * 0.8)

	return voice


def _plucked (wave: typing.Callable[[numpy.ndarray], numpy.ndarray], floor: float = 0.001) -> Voice:

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		return wave(frequency * t) * _decay(t, _length(t, sample_rate), floor)

	return voice


def _piano (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)
	signal = numpy.zeros_like(t)

	for harmonic, level in ((1, 1.0), (2, 0.5), (3, 0.25), (4, 0.12)):
		signal += level * _sine(frequency * harmonic * t) * _decay(t, length / harmonic, 0.001)

	return signal / 1.87


def _ensemble (detune_cents: float, voices: int, attack: float, cutoff: float) -> Voice:

	"""Detuned saw stack for strings and horns."""

	def voice (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

		length = _length(t, sample_rate)
		signal = numpy.zeros_like(t)

		for index in range(voices):
			cents = (index - (voices - 1) / 2.0) * detune_cents
			signal += _saw(frequency * 2.0 ** (cents / 1200.0) * t + rng.random())

		signal = _lowpass(signal / voices, sample_rate, cutoff)

		return signal * _attack_release(t, length, attack, length * 0.3)

	return voice


def _vocal (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)
	vibrato = 0.006 * numpy.sin(2.0 * numpy.pi * 5.5 * t)
	phase = numpy.cumsum(frequency * (1.0 + vibrato)) / sample_rate
	signal = _sine(phase) + 0.3 * _sine(2.0 * phase) + 0.15 * _sine(3.0 * phase)

	return signal / 1.45 * _attack_release(t, length, 0.3, length * 0.4)


def _pad (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)
	signal = _sine(frequency * t) + 0.5 * _sine(frequency * 1.003 * t)

	return signal / 1.5 * _attack_release(t, length, length * 0.25, length * 0.5)


def _sweep_pad (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)
	signal = _saw(frequency * t)

	# Two filter settings crossfaded over the note stand in for a moving cutoff.
	dark = _lowpass(signal, sample_rate, frequency * 1.5)
	bright = _lowpass(signal, sample_rate, frequency * 8.0)
	blend = numpy.clip(t / length, 0.0, 1.0)

	return (dark * (1.0 - blend) + bright * blend) * _attack_release(t, length, length * 0.3, length * 0.3)


def _guitar (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	signal = _saw(frequency * t) + _saw(frequency * 1.5 * t)

	return numpy.tanh(4.0 * signal) * _decay(t, _length(t, sample_rate), 0.05) * 0.7


def _mandolin (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)
	tremolo = 0.5 + 0.5 * numpy.abs(numpy.sin(2.0 * numpy.pi * 8.0 * t))

	return _triangle(frequency * t) * tremolo * _attack_release(t, length, 0.01, length * 0.3)


def _bass_808 (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)

	return _sine(frequency * t) * numpy.clip(1.0 - t / length, 0.0, 1.0)


def _bass_saw (t: numpy.ndarray, frequency: float, sample_rate: int, rng: numpy.random.Generator) -> numpy.ndarray:

	length = _length(t, sample_rate)

	return _lowpass(_saw(frequency * t), sample_rate, frequency * 2.5) * numpy.clip(1.0 - t / length, 0.0, 1.0)


RECIPES: typing.Dict[str, Recipe] = {
	# Drums
	"kick_808": Recipe(0.15, _kick(150.0, 40.0)),
	"kick_grit": Recipe(0.15, _kick(150.0, 40.0, grit=0.3)),
	"kick_rock": Recipe(0.15, _kick(120.0, 45.0, click=0.2)),
	"kick_trap": Recipe(0.25, _kick(160.0, 35.0, click=0.1)),
	"snare_808": Recipe(0.1, _snare(440.0, 0.8, 1000.0)),
	"snare_noisy": Recipe(0.1, _snare(440.0, 1.0, 1500.0)),
	"snare_rock": Recipe(0.18, _snare(250.0, 1.0, (1500.0, 2500.0))),
	"snare_trap": Recipe(0.15, _snare(300.0, 0.9, 1800.0)),
	"clap_808": Recipe(0.12, _clap),
	"orch_hit": Recipe(1.0, _orch_hit),
	"hat_closed": Recipe(0.05, _noise_hit("highpass", 7000.0)),
	"hat_grit": Recipe(0.05, _noise_hit("bandpass", (9000.0, 11000.0))),
	"hat_trap": Recipe(0.05, _noise_hit("highpass", 8000.0, 0.7)),
	"hat_open": Recipe(0.4, _noise_hit("highpass", 7000.0)),
	"perc_hit": Recipe(0.1, _perc),
	"timpani": Recipe(1.0, _timpani, pitched=True),
	# Bass
	"bass_808": Recipe(0.3, _bass_808, pitched=True),
	"bass_sub": Recipe(0.3, _bass_808, pitched=True),
	"bass_saw": Recipe(0.3, _bass_saw, pitched=True),
	"bass_808_sampled": Recipe(0.5, _bass_808, pitched=True),
	# Melodic
	"melody_triangle": Recipe(0.3, _tone(_triangle), pitched=True),
	"melody_saw": Recipe(0.3, _tone(_saw), pitched=True),
	"melody_square": Recipe(0.3, _tone(_square), pitched=True),
	"piano_grand": Recipe(1.5, _piano, pitched=True),
	"harpsichord": Recipe(0.5, _plucked(_saw, 0.01), pitched=True),
	"arp_triangle": Recipe(0.15, _tone(_triangle, attack=0.002), pitched=True),
	"lead_saw": Recipe(0.4, _tone(_saw, cutoff=6.0), pitched=True),
	"lead_square": Recipe(0.4, _tone(_square, cutoff=6.0), pitched=True),
	"guitar_distorted": Recipe(0.8, _guitar, pitched=True),
	"strings_pizzicato": Recipe(0.2, _plucked(_triangle), pitched=True),
	"mandolin_tremolo": Recipe(2.0, _mandolin, pitched=True, in_beats=True),
	"french_horn": Recipe(2.0, _ensemble(4.0, 2, 0.08, 1200.0), pitched=True, in_beats=True),
	"accordion": Recipe(4.0, _tone(_square, attack=0.05, cutoff=4.0, vibrato=0.004), pitched=True, in_beats=True),
	"strings_legato": Recipe(4.0, _ensemble(8.0, 3, 0.2, 3000.0), pitched=True, in_beats=True),
	"violin_section": Recipe(4.0, _ensemble(12.0, 4, 0.15, 4000.0), pitched=True, in_beats=True),
	"pad_sine": Recipe(4.0, _pad, pitched=True, in_beats=True),
	"filter_sweep_pad": Recipe(4.0, _sweep_pad, pitched=True, in_beats=True),
	"choir_aahs": Recipe(4.0, _vocal, pitched=True, in_beats=True),
	"opera_vocal": Recipe(4.0, _vocal, pitched=True, in_beats=True),
	"choir_sampled": Recipe(4.0, _vocal, pitched=True, in_beats=True),
	"opera_sampled": Recipe(4.0, _vocal, pitched=True, in_beats=True),
}


def equal_power_pan (mono: numpy.ndarray, pan: float) -> numpy.ndarray:

	"""Spread a mono signal to ``(2, n)`` with constant-power panning."""

	angle = (max(-1.0, min(1.0, pan)) + 1.0) * 0.25 * math.pi

	return numpy.vstack([mono * math.cos(angle), mono * math.sin(angle)])


class SoundEngine:

	"""Renders individual voices for the offline render graph.

	Parameters:
		sample_rate: Output rate in Hz.
		samples: Optional mono sample arrays keyed by instrument id. They
			take precedence over the synthesis recipes.
		seed: Seed for the noise generator.
	"""

	def __init__ (self, sample_rate: int, samples: typing.Optional[typing.Dict[str, numpy.ndarray]] = None, seed: typing.Optional[int] = None) -> None:

		if sample_rate <= 0:
			raise ValueError("Sample rate must be positive")

		self.sample_rate = sample_rate
		self.samples: typing.Dict[str, numpy.ndarray] = {
			instrument_id: numpy.asarray(data, dtype=numpy.float64).reshape(-1)
			for instrument_id, data in (samples or {}).items()
		}
		self.rng = numpy.random.default_rng(seed)

	def is_sampled (self, instrument_id: str) -> bool:

		"""Return True if the instrument plays a loaded sample."""

		return instrument_id in self.samples

	def voice_duration (self, instrument_id: str, tempo: float) -> float:

		"""Return how long one hit of an instrument lasts in seconds (0 if silent)."""

		if self.is_sampled(instrument_id):
			return len(self.samples[instrument_id]) / self.sample_rate

		recipe = RECIPES.get(instrument_id)

		if recipe is None:
			return 0.0

		return recipe.seconds(tempo)

	def _play_sample (self, instrument_id: str, note: typing.Optional[str]) -> numpy.ndarray:

		data = self.samples[instrument_id]
		base = SAMPLE_BASE_NOTES.get(instrument_id)

		if base is None or note is None or len(data) == 0:
			return data

		ratio = 2.0 ** ((beatgrid.chords.note_to_midi(note) - beatgrid.chords.note_to_midi(base)) / 12.0)
		positions = numpy.arange(0.0, len(data) - 1, ratio)

		return numpy.interp(positions, numpy.arange(len(data)), data)

	def render_mono (self, instrument_id: str, note: typing.Optional[str], tempo: float) -> numpy.ndarray:

		"""Draw one hit of an instrument at unit gain."""

		if self.is_sampled(instrument_id):
			return self._play_sample(instrument_id, note)

		recipe = RECIPES.get(instrument_id)

		if recipe is None or (recipe.pitched and note is None):
			return numpy.zeros(0)

		frames = int(round(recipe.seconds(tempo) * self.sample_rate))
		t = numpy.arange(frames) / self.sample_rate
		frequency = beatgrid.chords.note_to_frequency(note or DEFAULT_NOTE)

		return numpy.asarray(recipe.voice(t, frequency, self.sample_rate, self.rng), dtype=numpy.float64)

	def render_voice (self, track: beatgrid.song.Track, volume: float, note: typing.Optional[str], tempo: float) -> numpy.ndarray:

		"""Return a track's hit as a ``(2, n)`` stereo array, scaled and panned."""

		mono = self.render_mono(track.active_instrument_id, note, tempo)

		return equal_power_pan(mono * volume, track.pan)


def longest_decay (tracks: typing.Iterable[beatgrid.song.Track], tempo: float, engine: typing.Optional[SoundEngine] = None) -> float:

	"""Return the longest hit among the tracks' active instruments, in seconds."""

	longest = 0.0

	for track in tracks:

		if engine is not None:
			length = engine.voice_duration(track.active_instrument_id, tempo)
		else:
			recipe = RECIPES.get(track.active_instrument_id)
			length = recipe.seconds(tempo) if recipe is not None else 0.0

		longest = max(longest, length)

	return longest
