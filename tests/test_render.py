import io
import typing
import wave

import numpy
import pytest

import beatgrid.render
import beatgrid.render_graph
import beatgrid.song
import beatgrid.synth

import conftest


SAMPLE_RATE = 8000


def _decode (data: bytes) -> typing.Tuple[wave.Wave_read, numpy.ndarray]:

	reader = wave.open(io.BytesIO(data), "rb")
	samples = numpy.frombuffer(reader.readframes(reader.getnframes()), dtype="<i2")

	return reader, samples


def _kick_song () -> beatgrid.song.SongState:

	state = conftest.one_bar_song(track_count=1, tempo=120, swing=0.5)
	state.set_step(state.arrangement[0], 0, 0, beatgrid.song.Step(is_active=True))

	return state


class RecordingGraph:

	"""Render graph stand-in that keeps its arguments and events."""

	instances: typing.List["RecordingGraph"] = []

	def __init__ (self, sample_rate: int, channels: int, frames: int, tempo: float, engine: typing.Any) -> None:

		self.args = (sample_rate, channels, frames, tempo, engine)
		self.channels = channels
		self.frames = frames
		self.events: typing.List[beatgrid.render_graph.TriggerEvent] = []
		RecordingGraph.instances.append(self)

	def schedule (self, event: beatgrid.render_graph.TriggerEvent) -> None:

		self.events.append(event)

	async def render (self) -> numpy.ndarray:

		return numpy.zeros((self.channels, self.frames))


class FailingGraph (RecordingGraph):

	async def render (self) -> numpy.ndarray:

		raise RuntimeError("render failed")


@pytest.fixture(autouse=True)
def clear_graphs () -> None:

	"""Forget graphs from earlier tests."""

	RecordingGraph.instances.clear()


def test_trigger_events_follow_swing () -> None:

	"""Event times accumulate the same swung step lengths as the transport."""

	state = conftest.one_bar_song(track_count=1, tempo=120, swing=0.75)

	for step in (0, 1, 2, 3):
		state.set_step(state.arrangement[0], 0, step, beatgrid.song.Step(is_active=True))

	events = list(beatgrid.render.trigger_events(state))

	assert [step for step, _ in events] == [0, 1, 2, 3]
	assert [event.time for _, event in events] == pytest.approx([0.0, 0.0625, 0.25, 0.3125])


def test_trigger_events_skip_muted_tracks () -> None:

	"""Muted tracks never reach the render."""

	state = conftest.one_bar_song(track_count=2)

	for track_index in range(2):
		state.set_step(state.arrangement[0], track_index, 0, beatgrid.song.Step(is_active=True))

	state.toggle_track_mute(0)

	events = [event for _, event in beatgrid.render.trigger_events(state)]

	assert [event.track.id for event in events] == ["t1"]
	assert [event.track_index for event in events] == [1]


def test_normalize_hits_target_peak () -> None:

	"""The loudest sample lands on the target level."""

	buffer = numpy.array([[0.1, -0.5, 0.25]])

	result = beatgrid.render.normalize(buffer, -6.0)

	assert numpy.max(numpy.abs(result)) == pytest.approx(10 ** (-6.0 / 20.0))


def test_normalize_leaves_silence () -> None:

	"""A silent buffer is not divided by zero."""

	buffer = numpy.zeros((2, 10))

	assert numpy.array_equal(beatgrid.render.normalize(buffer), buffer)


@pytest.mark.asyncio
async def test_render_length_and_peak () -> None:

	"""One bar plus the tail, normalized just under full scale."""

	renderer = beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE, tail_seconds=0.5)

	data = await renderer.render(_kick_song())

	# 16 steps at 120 BPM is two seconds.
	frames = int(2.5 * SAMPLE_RATE)

	assert len(data) == 44 + frames * 2 * 2

	reader, samples = _decode(data)

	assert reader.getnchannels() == 2
	assert reader.getframerate() == SAMPLE_RATE
	assert reader.getsampwidth() == 2
	assert reader.getnframes() == frames
	assert numpy.max(numpy.abs(samples.astype(numpy.int32))) == pytest.approx(10 ** (-0.1 / 20.0) * 32767, abs=3)


@pytest.mark.asyncio
async def test_render_mono () -> None:

	"""A single-channel render writes one sample per frame."""

	renderer = beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE, channels=1, tail_seconds=0.0)

	data = await renderer.render(_kick_song())
	reader, samples = _decode(data)

	assert reader.getnchannels() == 1
	assert len(samples) == 2 * SAMPLE_RATE
	assert numpy.any(samples != 0)


@pytest.mark.asyncio
async def test_empty_arrangement_gives_header_only () -> None:

	"""No steps means a valid 44-byte WAV and progress still reaches 100."""

	state = beatgrid.song.SongState(tracks=[beatgrid.song.Track(id="a", name="A")])
	progress: typing.List[float] = []

	data = await beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE).render(state, on_progress=progress.append)

	assert len(data) == 44
	assert data[:4] == b"RIFF"
	assert progress[-1] == 100.0


@pytest.mark.asyncio
async def test_progress_is_monotonic () -> None:

	"""Progress only moves forward and finishes at 100."""

	progress: typing.List[float] = []
	renderer = beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE, tail_seconds=0.1)

	await renderer.render(_kick_song(), on_progress=progress.append)

	assert progress == sorted(progress)
	assert len(set(progress)) == len(progress)
	assert progress[0] == 0.0
	assert progress[-1] == 100.0
	assert beatgrid.render.PROGRESS_RENDERED in progress


@pytest.mark.asyncio
async def test_graph_factory_receives_render_settings () -> None:

	"""The graph is built once with rate, channels, frames, tempo and engine."""

	engine = beatgrid.synth.SoundEngine(SAMPLE_RATE)
	renderer = beatgrid.render.OfflineRenderer(engine=engine, sample_rate=SAMPLE_RATE, tail_seconds=1.0, graph_factory=RecordingGraph)

	data = await renderer.render(_kick_song())

	assert len(RecordingGraph.instances) == 1

	graph = RecordingGraph.instances[0]

	assert graph.args == (SAMPLE_RATE, 2, 3 * SAMPLE_RATE, 120, engine)
	assert [event.time for event in graph.events] == [0.0]

	# A silent mix stays silent.
	_, samples = _decode(data)
	assert not numpy.any(samples)


@pytest.mark.asyncio
async def test_graph_failure_propagates () -> None:

	"""Errors from the render graph reach the caller."""

	renderer = beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE, graph_factory=FailingGraph)

	with pytest.raises(RuntimeError):
		await renderer.render(_kick_song())


def test_default_tail_covers_longest_voice () -> None:

	"""The tail is at least two seconds and stretches for long instruments."""

	renderer = beatgrid.render.OfflineRenderer(sample_rate=SAMPLE_RATE)

	fast = _kick_song()
	assert renderer.tail_for(fast) == 2.0

	slow = beatgrid.song.SongState(
		tracks = [beatgrid.song.Track(id="pad", name="Pad", active_instrument_id="pad_sine")],
		tempo = 60
	)
	assert renderer.tail_for(slow) == pytest.approx(4.0)


def test_invalid_renderer_settings () -> None:

	"""Bad rates, channel counts and tails are refused."""

	with pytest.raises(ValueError):
		beatgrid.render.OfflineRenderer(sample_rate=0)

	with pytest.raises(ValueError):
		beatgrid.render.OfflineRenderer(channels=0)

	with pytest.raises(ValueError):
		beatgrid.render.OfflineRenderer(channels=3)

	with pytest.raises(ValueError):
		beatgrid.render.OfflineRenderer(tail_seconds=-1.0)
