"""Offline (faster than real time) export of a song to WAV.

The renderer walks the arrangement once from the first step to the last,
making exactly the same decisions as the real-time scheduler: the same
section lookup and mute/solo filtering (``SongState.triggers_at``) and the
same swing timing (``beatgrid.swing.step_advance``). Only the random
timing offsets are left out, so an export is the tightest possible take
of what the transport plays.

Example:
	```python
	state = beatgrid.presets.initial_song()
	beatgrid.presets.apply_preset(state, "trap_banger_140")

	renderer = beatgrid.render.OfflineRenderer()
	data = await renderer.render(state, on_progress=lambda p: print(f"{p:.0f}%"))

	with open("song.wav", "wb") as f:
		f.write(data)
	```
"""

import logging
import math
import typing

import numpy

import beatgrid.constants
import beatgrid.render_graph
import beatgrid.song
import beatgrid.swing
import beatgrid.synth
import beatgrid.wav


logger = logging.getLogger(__name__)

TriggerEvent = beatgrid.render_graph.TriggerEvent

ProgressCallback = typing.Callable[[float], typing.Any]
GraphFactory = typing.Callable[..., beatgrid.render_graph.OfflineRenderGraph]

# Progress milestones (percent).
PROGRESS_SETUP = 5.0
PROGRESS_SCHEDULED = 40.0
PROGRESS_RENDERED = 85.0
PROGRESS_NORMALIZED = 95.0
PROGRESS_DONE = 100.0


def trigger_events (state: beatgrid.song.SongState) -> typing.Iterator[typing.Tuple[int, TriggerEvent]]:

	"""Yield ``(step, event)`` for every sounding step of one pass through the song.

	Times start at zero and advance with the song's tempo and swing.
	"""

	time = 0.0

	for step in range(state.total_steps()):

		for trigger in state.triggers_at(step) or []:
			yield step, TriggerEvent(track_index=trigger.track_index, track=trigger.track, time=time, volume=trigger.volume, note=trigger.note)

		time += beatgrid.swing.step_advance(step, state.tempo, state.swing)


def normalize (buffer: numpy.ndarray, target_db: float = beatgrid.constants.DEFAULT_TARGET_DB) -> numpy.ndarray:

	"""Scale a buffer so its peak sits at ``target_db`` dBFS.

	Silent buffers are returned unchanged.
	"""

	peak = float(numpy.max(numpy.abs(buffer))) if buffer.size else 0.0

	if peak == 0.0:
		return buffer

	target_gain = 10.0 ** (target_db / 20.0)

	return buffer * (target_gain / peak)


class _Progress:

	"""Forwards progress to a callback, never letting it go backwards."""

	def __init__ (self, callback: typing.Optional[ProgressCallback]) -> None:

		self.callback = callback
		self.value = -1.0

	def __call__ (self, percent: float) -> None:

		percent = min(PROGRESS_DONE, percent)

		if percent <= self.value:
			return

		self.value = percent

		if self.callback is not None:
			self.callback(percent)


class OfflineRenderer:

	"""Renders a whole song to WAV bytes.

	Parameters:
		engine: Sound engine for the voices (a synthesis-only engine if omitted).
		sample_rate: Output rate in Hz.
		channels: Output channel count (mono or stereo).
		target_db: Peak level after normalization (dBFS).
		tail_seconds: Silence kept after the last step. When omitted it is
			the longer of two seconds and the longest hit among the tracks'
			active instruments.
		graph_factory: Builds the render graph; takes the same arguments as
			``OfflineRenderGraph``.
	"""

	def __init__ (
		self,
		engine: typing.Optional[beatgrid.synth.SoundEngine] = None,
		sample_rate: int = beatgrid.constants.DEFAULT_SAMPLE_RATE,
		channels: int = beatgrid.constants.DEFAULT_CHANNELS,
		target_db: float = beatgrid.constants.DEFAULT_TARGET_DB,
		tail_seconds: typing.Optional[float] = None,
		graph_factory: typing.Optional[GraphFactory] = None
	) -> None:

		if sample_rate <= 0:
			raise ValueError("Sample rate must be positive")

		if not 1 <= channels <= beatgrid.wav.MAX_CHANNELS:
			raise ValueError(f"Render supports 1 to {beatgrid.wav.MAX_CHANNELS} channels, got {channels}")

		if tail_seconds is not None and tail_seconds < 0:
			raise ValueError("Tail cannot be negative")

		self.engine = engine if engine is not None else beatgrid.synth.SoundEngine(sample_rate)
		self.sample_rate = sample_rate
		self.channels = channels
		self.target_db = target_db
		self.tail_seconds = tail_seconds
		self.graph_factory: GraphFactory = graph_factory or beatgrid.render_graph.OfflineRenderGraph

	def tail_for (self, state: beatgrid.song.SongState) -> float:

		"""Return the tail length used for a song."""

		if self.tail_seconds is not None:
			return self.tail_seconds

		return max(beatgrid.constants.DEFAULT_TAIL_SECONDS, beatgrid.synth.longest_decay(state.tracks, state.tempo, self.engine))

	async def render (self, state: beatgrid.song.SongState, on_progress: typing.Optional[ProgressCallback] = None) -> bytes:

		"""Render the song and return a complete WAV file.

		An arrangement with no steps gives a header-only WAV. Failures from
		the render graph propagate unchanged.
		"""

		progress = _Progress(on_progress)
		progress(0.0)

		song = state.snapshot()
		total = song.total_steps()

		progress(PROGRESS_SETUP)

		if total == 0:
			logger.warning("Arrangement has no steps - exporting an empty WAV")
			progress(PROGRESS_NORMALIZED)
			data = beatgrid.wav.encode_wav(numpy.zeros((self.channels, 0)), self.sample_rate)
			progress(PROGRESS_DONE)
			return data

		duration = total * beatgrid.swing.seconds_per_step(song.tempo) + self.tail_for(song)
		frames = int(math.ceil(duration * self.sample_rate))

		graph = self.graph_factory(self.sample_rate, self.channels, frames, song.tempo, self.engine)

		span = PROGRESS_SCHEDULED - PROGRESS_SETUP
		count = 0

		for step, event in trigger_events(song):
			graph.schedule(event)
			count += 1
			progress(PROGRESS_SETUP + span * step / total)

		progress(PROGRESS_SCHEDULED)

		buffer = await graph.render()

		progress(PROGRESS_RENDERED)

		buffer = normalize(buffer, self.target_db)

		progress(PROGRESS_NORMALIZED)

		data = beatgrid.wav.encode_wav(buffer, self.sample_rate)

		progress(PROGRESS_DONE)

		logger.info(f"Rendered {total} steps ({count} events, {duration:.1f}s) to {len(data)} bytes")

		return data
