import typing

import mido
import pytest

import beatgrid.constants.instruments
import beatgrid.presets
import beatgrid.song


class FakeMidiOut:

	"""MIDI output stub that remembers what was sent."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False
		self.panicked = False

	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


	def panic (self) -> None:

		"""Mark that all-notes-off was requested."""

		self.panicked = True


class FakeClock:

	"""An audio clock that only moves when told to."""

	def __init__ (self, start: float = 0.0) -> None:

		self.time = start

	def now (self) -> float:

		"""Return the current fake time."""

		return self.time

	def advance (self, seconds: float) -> None:

		"""Move time forward."""

		self.time += seconds


# Module-level reference so tests can inspect the most recently opened port.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> typing.List[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	_current_fake_output = FakeMidiOut()
	return _current_fake_output


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for tests that open ports."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def tracks () -> typing.Tuple[beatgrid.song.Track, ...]:

	"""The default 12-track roster."""

	return beatgrid.constants.instruments.initial_tracks()


@pytest.fixture
def song () -> beatgrid.song.SongState:

	"""A fresh default song with empty sections."""

	return beatgrid.presets.initial_song()


@pytest.fixture
def clock () -> FakeClock:

	"""A manually advanced audio clock starting at zero."""

	return FakeClock()


def one_bar_song (track_count: int = 2, tempo: float = 120, swing: float = 0.5) -> beatgrid.song.SongState:

	"""Build a minimal song: plain tracks and a single one-bar section."""

	song_tracks = [
		beatgrid.song.Track(id=f"t{i}", name=f"Track {i}", volume=1.0, active_instrument_id="kick_808", midi_note=36 + i)
		for i in range(track_count)
	]

	state = beatgrid.song.SongState(tracks=song_tracks, tempo=tempo, swing=swing)
	state.add_section("Loop", 1)

	return state
