"""Song data model - steps, tracks, sections and the arrangement.

Defines the immutable value types (:class:`Step`, :class:`Instrument`,
:class:`Track`, :class:`SongSection`) and :class:`SongState`, the mutable
song that the scheduler, the offline renderer and the editors share.

Sections live in an id-keyed arena (``SongState.sections``). The
arrangement is an ordered list of section ids that may repeat; it never owns
the sections, so an id that has been deleted from the arena is simply
skipped when steps are resolved.

Mutations never edit a pattern in place. Every operation builds a new
``Track`` or ``SongSection`` and swaps it into the state, which keeps any
``snapshot()`` taken earlier stable while the song keeps changing.
"""

import copy
import dataclasses
import itertools
import logging
import typing

import beatgrid.constants
import beatgrid.constants.velocity
import beatgrid.swing


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Step:

	"""
	One cell of the step grid.

	Attributes:
		note: Pitch name with octave (``"C#4"``) for melodic tracks, ``None`` for drums.
		velocity: Gain multiplier applied on top of the track volume (~0.1-1.2).
		is_active: Whether the step fires.
	"""

	note: typing.Optional[str] = None
	velocity: float = beatgrid.constants.velocity.DEFAULT_VELOCITY
	is_active: bool = False


EMPTY_STEP = Step()

Pattern = typing.Tuple[typing.Tuple[Step, ...], ...]


@dataclasses.dataclass(frozen=True)
class Instrument:

	"""A selectable sound for a track, addressed by a stable id."""

	id: str
	name: str


@dataclasses.dataclass(frozen=True)
class Track:

	"""
	A mixer channel and the row of the step grid it plays.

	``active_instrument_id`` is looked up by the sound engine; an id it does
	not know plays silence rather than failing.
	"""

	id: str
	name: str
	volume: float = 1.0
	pan: float = 0.0
	mute: bool = False
	solo: bool = False
	instruments: typing.Tuple[Instrument, ...] = ()
	active_instrument_id: str = ""
	midi_note: typing.Optional[int] = None

	def offers (self, instrument_id: str) -> bool:

		"""Return True if the instrument is one of this track's choices."""

		return any(instrument.id == instrument_id for instrument in self.instruments)


@dataclasses.dataclass(frozen=True)
class SongSection:

	"""A named block of bars with its own pattern."""

	id: str
	name: str
	bars: int
	pattern: Pattern

	@property
	def steps (self) -> int:

		"""Return the section length in steps."""

		return self.bars * beatgrid.constants.STEPS_PER_BAR


@dataclasses.dataclass(frozen=True)
class StepLocation:

	"""
	Where an absolute step lands inside the arrangement.

	Attributes:
		section: The section that owns the step.
		slot: Index into the arrangement list (sections may repeat).
		step: Step index inside the section.
	"""

	section: SongSection
	slot: int
	step: int

	@property
	def bar (self) -> int:

		"""Return the bar inside the section (0-indexed)."""

		return self.step // beatgrid.constants.STEPS_PER_BAR


@dataclasses.dataclass(frozen=True)
class StepTrigger:

	"""A decision to sound one track at one step."""

	track_index: int
	track: Track
	volume: float
	note: typing.Optional[str]


def create_empty_pattern (track_count: int, steps: int) -> Pattern:

	"""Return a ``track_count x steps`` grid of inactive steps."""

	return tuple(tuple(EMPTY_STEP for _ in range(steps)) for _ in range(track_count))


def resize_pattern (pattern: Pattern, track_count: int, steps: int) -> Pattern:

	"""Return ``pattern`` reshaped to ``track_count x steps``.

	Cells inside both the old and the new dimensions are kept; everything
	else is filled with inactive steps. Shrinking and growing back therefore
	loses the cut columns.
	"""

	rows: typing.List[typing.Tuple[Step, ...]] = []

	for track_index in range(track_count):

		old_row = pattern[track_index] if track_index < len(pattern) else ()
		kept = tuple(old_row[:steps])

		rows.append(kept + tuple(EMPTY_STEP for _ in range(steps - len(kept))))

	return tuple(rows)


def is_audible (track: Track, any_solo: bool) -> bool:

	"""Return True if a track should sound given the current solo state.

	Mute always wins: a muted track stays silent even while soloed.
	"""

	if track.mute:
		return False

	if any_solo and not track.solo:
		return False

	return True


def _validate_bars (bars: int) -> int:

	if bars < 1:
		raise ValueError(f"Section must have at least one bar, got {bars}")

	return bars


class SongState:

	"""The mutable song shared by the editors, the scheduler and the renderer.

	Example:
		```python
		state = beatgrid.presets.initial_song()

		state.set_tempo(140)
		state.toggle_step(0, 0)

		for trigger in state.triggers_at(0) or []:
			print(trigger.track.name, trigger.volume)
		```
	"""

	def __init__ (
		self,
		tracks: typing.Sequence[Track],
		sections: typing.Optional[typing.Sequence[SongSection]] = None,
		arrangement: typing.Optional[typing.Sequence[str]] = None,
		tempo: float = beatgrid.constants.DEFAULT_TEMPO,
		swing: float = beatgrid.constants.DEFAULT_SWING
	) -> None:

		"""Create a song from a track roster and (optionally) its sections."""

		self.tracks: typing.Tuple[Track, ...] = tuple(tracks)
		self.sections: typing.Dict[str, SongSection] = {}
		self.arrangement: typing.List[str] = []
		self.active_section_id: typing.Optional[str] = None
		self.active_kit_id: typing.Optional[str] = None
		self.current_step: int = 0

		self.tempo: float = beatgrid.constants.DEFAULT_TEMPO
		self.swing: float = beatgrid.constants.DEFAULT_SWING

		self._ids = itertools.count(1)

		self.set_tempo(tempo)
		self.set_swing(swing)

		if sections is not None:
			self.replace_song(sections, arrangement if arrangement is not None else [s.id for s in sections])

	# ─── Transport ───────────────────────────────────────────────────

	def set_tempo (self, bpm: float) -> None:

		"""Set the tempo in beats per minute."""

		if bpm <= 0:
			raise ValueError("Tempo must be positive")

		self.tempo = bpm
		logger.info(f"Tempo set to {bpm} BPM")

	def set_swing (self, swing: float) -> None:

		"""Set the swing amount (0.5 straight to 0.75)."""

		self.swing = beatgrid.swing.validate_swing(swing)

	# ─── Sections ────────────────────────────────────────────────────

	def _new_section_id (self) -> str:

		while True:
			section_id = f"section-{next(self._ids)}"
			if section_id not in self.sections:
				return section_id

	def section (self, section_id: typing.Optional[str]) -> typing.Optional[SongSection]:

		"""Return the section with this id, or None if it is not in the arena."""

		if section_id is None:
			return None

		return self.sections.get(section_id)

	@property
	def active_section (self) -> typing.Optional[SongSection]:

		"""The section being edited, or None if the active id is stale."""

		return self.section(self.active_section_id)

	def set_active_section (self, section_id: str) -> None:

		"""Select the section that step edits apply to."""

		if section_id not in self.sections:
			raise ValueError(f"Unknown section: {section_id}")

		self.active_section_id = section_id

	def add_section (self, name: str, bars: int) -> str:

		"""Create an empty section, append it to the arrangement and return its id."""

		_validate_bars(bars)

		section_id = self._new_section_id()

		self.sections[section_id] = SongSection(
			id = section_id,
			name = name,
			bars = bars,
			pattern = create_empty_pattern(len(self.tracks), bars * beatgrid.constants.STEPS_PER_BAR)
		)
		self.arrangement.append(section_id)

		return section_id

	def duplicate_section (self, section_id: str) -> typing.Optional[str]:

		"""Copy a section and insert it after the source's last arrangement slot.

		Returns the new id, or None if the source does not exist.
		"""

		source = self.section(section_id)

		if source is None:
			logger.warning(f"Cannot duplicate unknown section {section_id!r}")
			return None

		new_id = self._new_section_id()

		self.sections[new_id] = dataclasses.replace(source, id=new_id, name=f"{source.name} Copy")

		if section_id in self.arrangement:
			insert_at = len(self.arrangement) - self.arrangement[::-1].index(section_id)
		else:
			insert_at = 0

		self.arrangement.insert(insert_at, new_id)

		return new_id

	def delete_section (self, section_id: str) -> None:

		"""Remove a section from the arena and from every arrangement slot."""

		self.sections.pop(section_id, None)
		self.arrangement = [slot for slot in self.arrangement if slot != section_id]

		if self.active_section_id == section_id:
			self.active_section_id = self.arrangement[0] if self.arrangement else None

	def set_section_bars (self, section_id: str, bars: int) -> None:

		"""Change a section's length, keeping the steps that still fit."""

		_validate_bars(bars)

		source = self.section(section_id)

		if source is None:
			raise ValueError(f"Unknown section: {section_id}")

		self.sections[section_id] = dataclasses.replace(
			source,
			bars = bars,
			pattern = resize_pattern(source.pattern, len(self.tracks), bars * beatgrid.constants.STEPS_PER_BAR)
		)

	def replace_song (
		self,
		sections: typing.Sequence[SongSection],
		arrangement: typing.Sequence[str],
		tempo: typing.Optional[float] = None
	) -> None:

		"""Swap in a whole new set of sections and arrangement.

		The first arrangement entry becomes the active section.
		"""

		arena: typing.Dict[str, SongSection] = {}

		for section in sections:
			_validate_bars(section.bars)
			arena[section.id] = dataclasses.replace(
				section,
				pattern = resize_pattern(section.pattern, len(self.tracks), section.steps)
			)

		self.sections = arena
		self.arrangement = list(arrangement)
		self.active_section_id = self.arrangement[0] if self.arrangement else None

		if tempo is not None:
			self.set_tempo(tempo)

	# ─── Step editing ────────────────────────────────────────────────

	def _replace_step (self, section: SongSection, track_index: int, step_index: int, step: Step) -> None:

		if not 0 <= track_index < len(section.pattern):
			raise IndexError(f"Track index {track_index} out of range")

		row = section.pattern[track_index]

		if not 0 <= step_index < len(row):
			raise IndexError(f"Step index {step_index} out of range")

		new_row = row[:step_index] + (step,) + row[step_index + 1:]
		pattern = section.pattern[:track_index] + (new_row,) + section.pattern[track_index + 1:]

		self.sections[section.id] = dataclasses.replace(section, pattern=pattern)

	def toggle_step (self, track_index: int, step_index: int) -> None:

		"""Flip one step of the active section on or off."""

		section = self.active_section

		if section is None:
			return

		current = section.pattern[track_index][step_index]

		self._replace_step(section, track_index, step_index, dataclasses.replace(current, is_active=not current.is_active))

	def set_step (self, section_id: str, track_index: int, step_index: int, step: Step) -> None:

		"""Overwrite one step of a section."""

		section = self.section(section_id)

		if section is None:
			raise ValueError(f"Unknown section: {section_id}")

		self._replace_step(section, track_index, step_index, step)

	def clear_active_pattern (self) -> None:

		"""Deactivate every step of the active section."""

		section = self.active_section

		if section is None:
			return

		self.sections[section.id] = dataclasses.replace(
			section,
			pattern = create_empty_pattern(len(self.tracks), section.steps)
		)

	# ─── Mixer ───────────────────────────────────────────────────────

	def _replace_track (self, track_index: int, **changes: typing.Any) -> None:

		track = self.tracks[track_index]
		self.tracks = self.tracks[:track_index] + (dataclasses.replace(track, **changes),) + self.tracks[track_index + 1:]

	def set_track_volume (self, track_index: int, volume: float) -> None:

		"""Set a track's volume (0-1)."""

		if not 0.0 <= volume <= 1.0:
			raise ValueError("Volume must be between 0 and 1")

		self._replace_track(track_index, volume=volume)

	def set_track_pan (self, track_index: int, pan: float) -> None:

		"""Set a track's stereo position (-1 left to 1 right)."""

		if not -1.0 <= pan <= 1.0:
			raise ValueError("Pan must be between -1 and 1")

		self._replace_track(track_index, pan=pan)

	def set_track_instrument (self, track_index: int, instrument_id: str) -> None:

		"""Select the instrument a track plays."""

		self._replace_track(track_index, active_instrument_id=instrument_id)

	def toggle_track_mute (self, track_index: int) -> None:

		"""Mute or unmute a track."""

		self._replace_track(track_index, mute=not self.tracks[track_index].mute)

	def toggle_track_solo (self, track_index: int) -> None:

		"""Solo a track exclusively, or clear its solo."""

		soloed = not self.tracks[track_index].solo

		self.tracks = tuple(
			dataclasses.replace(track, solo=(soloed if i == track_index else False))
			for i, track in enumerate(self.tracks)
		)

	# ─── Arrangement resolution ──────────────────────────────────────

	def total_steps (self) -> int:

		"""Return the number of steps in the whole arrangement."""

		return sum(section.steps for section in self._arranged_sections())

	def _arranged_sections (self) -> typing.Iterator[SongSection]:

		for section_id in self.arrangement:
			section = self.sections.get(section_id)
			if section is not None:
				yield section

	def resolve_step (self, global_step: int) -> typing.Optional[StepLocation]:

		"""Find the section and local step that an absolute step falls in.

		Walks the cumulative section lengths in arrangement order. Returns
		None when the step lies outside the arrangement.
		"""

		if global_step < 0:
			return None

		offset = 0

		for slot, section_id in enumerate(self.arrangement):

			section = self.sections.get(section_id)

			if section is None:
				continue

			if global_step < offset + section.steps:
				return StepLocation(section=section, slot=slot, step=global_step - offset)

			offset += section.steps

		return None

	def triggers_at (self, global_step: int) -> typing.Optional[typing.List[StepTrigger]]:

		"""Return what should sound at an absolute step.

		Muted tracks, and non-soloed tracks while any track is soloed, are
		skipped. Each trigger's volume is the step velocity times the track
		volume. Returns None if the step cannot be resolved.
		"""

		location = self.resolve_step(global_step)

		if location is None:
			return None

		any_solo = any(track.solo for track in self.tracks)
		pattern = location.section.pattern
		triggers: typing.List[StepTrigger] = []

		for track_index, track in enumerate(self.tracks):

			if track_index >= len(pattern) or not is_audible(track, any_solo):
				continue

			step = pattern[track_index][location.step]

			if not step.is_active:
				continue

			triggers.append(StepTrigger(
				track_index = track_index,
				track = track,
				volume = step.velocity * track.volume,
				note = step.note
			))

		return triggers

	def snapshot (self) -> "SongState":

		"""Return an independent copy that later edits will not touch."""

		clone = copy.copy(self)
		clone.sections = dict(self.sections)
		clone.arrangement = list(self.arrangement)
		clone._ids = itertools.count(len(self.sections) + 1)

		return clone
