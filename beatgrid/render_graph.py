"""Non-real-time mixing of scheduled voices into one buffer."""

import asyncio
import dataclasses
import logging
import typing

import numpy

import beatgrid.song
import beatgrid.synth


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class TriggerEvent:

	"""One voice to place in the render, at ``time`` seconds from the start.

	``track_index`` is the track's position in the song roster.
	"""

	track_index: int
	track: beatgrid.song.Track
	time: float
	volume: float
	note: typing.Optional[str] = None


class OfflineRenderGraph:

	"""Collects trigger events, then mixes them all at once.

	Mono renders use the dry voice; stereo (and wider) renders place the
	panned voice on the first two channels.
	"""

	def __init__ (
		self,
		sample_rate: int,
		channels: int,
		frames: int,
		tempo: float,
		engine: typing.Optional[beatgrid.synth.SoundEngine] = None
	) -> None:

		if channels < 1:
			raise ValueError("Render needs at least one channel")

		if frames < 0:
			raise ValueError("Frame count cannot be negative")

		self.sample_rate = sample_rate
		self.channels = channels
		self.frames = frames
		self.tempo = tempo
		self.engine = engine if engine is not None else beatgrid.synth.SoundEngine(sample_rate)
		self.events: typing.List[TriggerEvent] = []

	def schedule (self, event: TriggerEvent) -> None:

		"""Queue a voice for the mix."""

		if event.time < 0:
			raise ValueError("Events cannot start before the render")

		self.events.append(event)

	async def render (self) -> numpy.ndarray:

		"""Mix every scheduled voice into a ``(channels, frames)`` buffer.

		The mixing runs in a worker thread so the event loop stays free.
		"""

		return await asyncio.to_thread(self.mix)

	def mix (self) -> numpy.ndarray:

		"""Mix synchronously. ``render()`` is the usual entry point."""

		buffer = numpy.zeros((self.channels, self.frames), dtype=numpy.float64)

		for event in self.events:

			start = int(round(event.time * self.sample_rate))

			if start >= self.frames:
				continue

			if self.channels == 1:
				voice = self.engine.render_mono(event.track.active_instrument_id, event.note, self.tempo)[numpy.newaxis, :] * event.volume
			else:
				voice = self.engine.render_voice(event.track, event.volume, event.note, self.tempo)

			length = min(voice.shape[1], self.frames - start)

			if length <= 0:
				continue

			buffer[:voice.shape[0], start:start + length] += voice[:, :length]

		logger.debug(f"Mixed {len(self.events)} events into {self.frames} frames")

		return buffer
