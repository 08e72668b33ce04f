"""Scale definitions and scale-degree resolution.

Scales are lists of semitone offsets from the key root. Degrees are signed
and unbounded: ``resolve_scale_note()`` wraps any degree into the scale and
carries the overflow into the octave, so degree arithmetic never fails.

Example:
	```python
	minor = beatgrid.intervals.get_intervals("natural_minor")

	beatgrid.intervals.resolve_scale_note("C#", 4, minor, 0)   # -> "C#4"
	beatgrid.intervals.resolve_scale_note("C#", 4, minor, 7)   # -> "C#5"
	beatgrid.intervals.resolve_scale_note("C#", 4, minor, -1)  # -> "B3"
	```
"""

import typing

import beatgrid.chords


INTERVAL_DEFINITIONS: typing.Dict[str, typing.List[int]] = {
	"blues_scale": [0, 3, 5, 6, 7, 10],
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
	"dorian_mode": [0, 2, 3, 5, 7, 9, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"major": [0, 2, 4, 5, 7, 9, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"phrygian_mode": [0, 1, 3, 5, 7, 8, 10],
}


def get_intervals (name: str) -> typing.List[int]:

	"""
	Return a named scale from the registry.
	"""

	if name not in INTERVAL_DEFINITIONS:
		raise ValueError(f"Unknown interval set: {name}")

	return list(INTERVAL_DEFINITIONS[name])


def register_scale (name: str, intervals: typing.Sequence[int]) -> None:

	"""Add a custom scale to the registry.

	Parameters:
		name: Registry key used by ``get_intervals()`` and style profiles.
		intervals: Ascending semitone offsets starting at 0, all below 12.

	Example:
		```python
		beatgrid.register_scale("hirajoshi", [0, 2, 3, 7, 8])
		```
	"""

	values = list(intervals)

	if not values or values[0] != 0:
		raise ValueError("Scale intervals must start at 0")

	if any(b <= a for a, b in zip(values, values[1:])):
		raise ValueError("Scale intervals must be strictly ascending")

	if values[-1] >= 12:
		raise ValueError("Scale intervals must stay within one octave")

	INTERVAL_DEFINITIONS[name] = values


def resolve_scale_note (root: str, octave: int, scale: typing.Sequence[int], degree: int) -> str:

	"""Map a signed scale degree to a concrete pitch name.

	The degree is split into an octave shift (floor division by the scale
	length) and a position inside the scale, so degree ``d`` and
	``d + len(scale)`` always give the same pitch class one octave apart.

	Parameters:
		root: Key root name (``"C#"``).
		octave: Octave of degree 0.
		scale: Semitone offsets of the scale.
		degree: Zero-based, possibly negative, scale degree.
	"""

	if not scale:
		raise ValueError("Scale cannot be empty")

	root_pc = beatgrid.chords.key_name_to_pc(root)
	degree_octave, scale_index = divmod(degree, len(scale))

	number = root_pc + (octave + degree_octave) * 12 + scale[scale_index]

	return beatgrid.chords.note_name(number)


def chord_tones (root: str, octave: int, scale: typing.Sequence[int], chord: beatgrid.chords.Chord) -> typing.List[str]:

	"""Return the pitch names of a chord built on a scale degree.

	The chord root is the scale note at ``chord.degree``; the remaining tones
	are the quality's fixed semitone offsets above it (minor 0/3/7, major
	0/4/7, diminished 0/3/6, augmented 0/4/8), regardless of the scale.
	"""

	chord_root = beatgrid.chords.note_number(resolve_scale_note(root, octave, scale, chord.degree))

	return [beatgrid.chords.note_name(chord_root + offset) for offset in chord.intervals()]
