"""Chord definitions and pitch name utilities.

This module provides chord quality definitions, pitch class mappings, and the
`Chord` class used by style progression tables.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to (sharp) note names
- `CHORD_TONES`: Maps each `ChordQuality` to its semitone offsets from the root

Pitches are written as a note name plus octave (``"C#4"``). Internally a
pitch is also handled as a *note number* ``octave * 12 + pitch_class``, so
``"C0"`` is 0 and ``"C4"`` is 48. ``note_to_midi()`` converts to the MIDI
numbering where C4 is 60.
"""

import dataclasses
import enum
import re
import typing


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

_PITCH_PATTERN = re.compile(r"^([A-G][#b]?)(-?\d+)$")


def key_name_to_pc (key_name: str) -> int:

	"""Validate a key name and return its pitch class (0-11).

	Raises:
		ValueError: If the key name is not recognised.

	Example:
		```python
		key_name_to_pc("C")   # -> 0
		key_name_to_pc("C#")  # -> 1
		```
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


def note_name (number: int) -> str:

	"""Return the pitch name for a note number (``octave * 12 + pc``)."""

	return f"{PC_TO_NOTE_NAME[number % 12]}{number // 12}"


def note_number (name: str) -> int:

	"""Parse a pitch name such as ``"A#3"`` into ``octave * 12 + pc``.

	Raises:
		ValueError: If the string is not a note name followed by an octave.
	"""

	match = _PITCH_PATTERN.match(name)

	if match is None:
		raise ValueError(f"Invalid pitch name: {name!r}")

	return int(match.group(2)) * 12 + key_name_to_pc(match.group(1))


def note_to_midi (name: str) -> int:

	"""Convert a pitch name to a MIDI note number (C4 = 60)."""

	return note_number(name) + 12


def note_to_frequency (name: str) -> float:

	"""Convert a pitch name to an equal-tempered frequency (A4 = 440 Hz)."""

	return 440.0 * 2.0 ** ((note_to_midi(name) - 69) / 12.0)


class ChordQuality (str, enum.Enum):

	"""Triad qualities used by the progression tables."""

	MINOR = "m"
	MAJOR = "M"
	DIMINISHED = "dim"
	AUGMENTED = "aug"


CHORD_TONES: typing.Dict[ChordQuality, typing.Tuple[int, ...]] = {
	ChordQuality.MINOR: (0, 3, 7),
	ChordQuality.MAJOR: (0, 4, 7),
	ChordQuality.DIMINISHED: (0, 3, 6),
	ChordQuality.AUGMENTED: (0, 4, 8),
}


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	A chord placed by scale degree rather than by absolute root.

	``degree`` is the zero-based scale degree of the root within the song key
	(``0`` is the tonic, ``5`` the sixth degree); ``quality`` picks the
	fixed semitone shape stacked on top of it.
	"""

	degree: int
	quality: ChordQuality


	def intervals (self) -> typing.Tuple[int, ...]:

		"""
		Return the semitone offsets for this chord quality.
		"""

		return CHORD_TONES[self.quality]


def m (degree: int) -> Chord:

	"""Shorthand for a minor chord on ``degree``."""

	return Chord(degree, ChordQuality.MINOR)


def M (degree: int) -> Chord:

	"""Shorthand for a major chord on ``degree``."""

	return Chord(degree, ChordQuality.MAJOR)


def dim (degree: int) -> Chord:

	"""Shorthand for a diminished chord on ``degree``."""

	return Chord(degree, ChordQuality.DIMINISHED)


def aug (degree: int) -> Chord:

	"""Shorthand for an augmented chord on ``degree``."""

	return Chord(degree, ChordQuality.AUGMENTED)
