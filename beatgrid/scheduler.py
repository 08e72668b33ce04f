"""Real-time lookahead scheduler.

The scheduler never waits for a step to be due before acting on it. A
coarse control tick (every ``tick_interval`` seconds) looks ``lookahead``
seconds ahead of the audio clock and hands every step that falls inside
that window to the trigger with its exact start time. The sound engine
then plays it sample-accurately, so tick jitter never reaches the audio.

A second, independent frame loop tells observers which step is audible
right now (``"step"`` events), so a UI playhead follows the sound rather
than the scheduling.

Example:
	```python
	state = beatgrid.presets.initial_song()
	beatgrid.presets.apply_preset(state, "detroit_drive_185")

	def trigger (track, when, volume, note):
		print(f"{when:.3f} {track.name} {volume:.2f} {note}")

	scheduler = beatgrid.scheduler.TransportScheduler(state, trigger)
	scheduler.events.on("step", lambda step: None)

	await scheduler.start()
	await asyncio.sleep(4)
	await scheduler.stop()
	```
"""

import asyncio
import collections
import logging
import random
import time
import typing

import beatgrid.constants
import beatgrid.event_emitter
import beatgrid.song
import beatgrid.swing


logger = logging.getLogger(__name__)

# trigger(track, absolute_time, volume, note_or_none)
Trigger = typing.Callable[[beatgrid.song.Track, float, float, typing.Optional[str]], typing.Any]


class AudioClock (typing.Protocol):

	"""The time base that trigger times are expressed in."""

	def now (self) -> float:
		...


class MonotonicClock:

	"""Seconds since construction, from ``time.perf_counter()``."""

	def __init__ (self) -> None:

		self._origin = time.perf_counter()

	def now (self) -> float:

		"""Return the elapsed time in seconds."""

		return time.perf_counter() - self._origin


class TransportScheduler:

	"""
	Drives a ``SongState`` in real time, handing timed triggers to the sound engine.
	"""

	def __init__ (
		self,
		state: beatgrid.song.SongState,
		trigger: Trigger,
		clock: typing.Optional[AudioClock] = None,
		lookahead: float = beatgrid.constants.DEFAULT_LOOKAHEAD,
		tick_interval: float = beatgrid.constants.DEFAULT_TICK_INTERVAL,
		max_steps_per_tick: int = beatgrid.constants.MAX_STEPS_PER_TICK,
		humanize: float = beatgrid.constants.DEFAULT_HUMANIZE,
		frame_interval: float = beatgrid.constants.DEFAULT_FRAME_INTERVAL,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""Create a stopped scheduler.

		Parameters:
			state: The song to play. It is read live, so edits apply from
				the next scheduled step.
			trigger: Called as ``trigger(track, time, volume, note)`` for
				every sounding step, ahead of time.
			clock: Time base for trigger times (defaults to ``MonotonicClock``).
			lookahead: How far ahead of the clock steps are scheduled (seconds).
			tick_interval: How often the scheduling loop runs (seconds).
			max_steps_per_tick: Cap on steps scheduled by a single tick; any
				backlog is worked off on later ticks.
			humanize: Maximum random timing offset per trigger (seconds).
			frame_interval: How often ``"step"`` events are emitted (seconds).
			rng: Random source for the timing offsets.
		"""

		if lookahead <= 0 or tick_interval <= 0 or frame_interval <= 0:
			raise ValueError("Lookahead, tick interval and frame interval must be positive")

		if max_steps_per_tick < 1:
			raise ValueError("max_steps_per_tick must be at least 1")

		self.state = state
		self.trigger = trigger
		self.clock: AudioClock = clock if clock is not None else MonotonicClock()
		self.lookahead = lookahead
		self.tick_interval = tick_interval
		self.max_steps_per_tick = max_steps_per_tick
		self.humanize = humanize
		self.frame_interval = frame_interval
		self.rng = rng or random.Random()

		self.events = beatgrid.event_emitter.EventEmitter()

		self.running = False
		self.task: typing.Optional[asyncio.Task] = None
		self.frame_task: typing.Optional[asyncio.Task] = None

		# Next step to schedule (absolute, wrapped) and when it starts.
		self.position: int = 0
		self.next_step_time: float = 0.0

		# Last step whose start time has passed.
		self.current_step: int = 0

		self._pending: typing.Deque[typing.Tuple[float, int]] = collections.deque()
		self._halted = False


	def reset (self) -> None:

		"""Prepare the scheduling position from the song's last known step."""

		total = self.state.total_steps()

		self.position = self.state.current_step % total if total > 0 else 0
		self.current_step = self.position
		self.next_step_time = self.clock.now()
		self._pending.clear()
		self._halted = False


	def tick (self) -> int:

		"""Schedule every step that starts inside the lookahead window.

		Returns the number of steps scheduled. If the arrangement has no
		steps, playback is halted instead.
		"""

		now = self.clock.now()
		horizon = now + self.lookahead
		scheduled = 0

		while self.next_step_time < horizon and scheduled < self.max_steps_per_tick:

			total = self.state.total_steps()
			triggers = self.state.triggers_at(self.position % total) if total > 0 else None

			if triggers is None:
				self._halt()
				break

			step = self.position % total

			for item in triggers:
				offset = (self.rng.random() - 0.5) * 2.0 * self.humanize
				self.trigger(item.track, max(self.next_step_time + offset, now), item.volume, item.note)

			self._pending.append((self.next_step_time, step))

			self.next_step_time += beatgrid.swing.step_advance(step, self.state.tempo, self.state.swing)
			self.position = (step + 1) % total
			scheduled += 1

		if scheduled:
			logger.debug(f"Scheduled {scheduled} steps up to {self.next_step_time:.3f}s")

		return scheduled


	def _halt (self) -> None:

		if self.running or not self._halted:
			logger.warning("Arrangement has no steps - stopping playback")

		self.running = False
		self._halted = True


	def audible_step (self) -> int:

		"""Return the most recent step whose start time has passed."""

		now = self.clock.now()

		while self._pending and self._pending[0][0] <= now:
			self.current_step = self._pending.popleft()[1]

		return self.current_step


	async def start (self) -> None:

		"""Start playback from the song's last known step."""

		if self.running:
			return

		self.reset()
		self.running = True

		self.task = asyncio.create_task(self._run_loop())
		self.frame_task = asyncio.create_task(self._frame_loop())

		logger.info(f"Transport started at step {self.position} ({self.state.tempo} BPM)")

		await self.events.emit("start")


	async def stop (self) -> None:

		"""Stop scheduling. Triggers already handed out still play."""

		if self.task is None:
			return

		self.running = False

		task, frame_task = self.task, self.frame_task
		self.task = None
		self.frame_task = None

		current = asyncio.current_task()

		for pending in (task, frame_task):
			if pending is not None and pending is not current:
				await pending

		self.state.current_step = self.position
		self._pending.clear()

		logger.info(f"Transport stopped at step {self.position}")

		await self.events.emit("stop")


	async def _run_loop (self) -> None:

		while self.running:

			self.tick()

			if not self.running:
				break

			await asyncio.sleep(self.tick_interval)

		if self._halted:
			await self.stop()


	async def _frame_loop (self) -> None:

		while self.running:

			step = self.audible_step()
			self.state.current_step = step

			await self.events.emit("step", step)
			await asyncio.sleep(self.frame_interval)
