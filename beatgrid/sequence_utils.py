import random
import typing

T = typing.TypeVar("T")


def generate_euclidean_sequence (steps: int, pulses: int) -> typing.List[int]:

	"""
	Distribute ``pulses`` hits as evenly as possible over ``steps`` slots.

	Each index ``i`` falls into bucket ``floor(i * pulses / steps)``; a hit is
	placed wherever the bucket changes from the previous index, and on index
	0. That gives exactly ``pulses`` hits, always starting on the downbeat,
	with gaps that differ by at most one slot.
	"""

	if steps <= 0:
		raise ValueError("Steps must be positive")

	if pulses < 0:
		raise ValueError("Pulses cannot be negative")

	if pulses > steps:
		raise ValueError(f"Pulses ({pulses}) cannot be greater than steps ({steps})")

	if pulses == 0:
		return [0] * steps

	buckets = [(i * pulses) // steps for i in range(steps)]

	return [1 if i == 0 or buckets[i] != buckets[i - 1] else 0 for i in range(steps)]


def generate_polyrhythm (steps: int, ratio: float) -> typing.List[int]:

	"""
	Place a hit every ``ratio`` steps (rounded down), e.g. ratio 3 over 16
	steps gives a three-against-four feel.
	"""

	if ratio <= 0:
		raise ValueError("Ratio must be positive")

	sequence = [0] * steps

	for i in range(int(steps // ratio)):
		index = int(i * ratio)
		if index < steps:
			sequence[index] = 1

	return sequence


def sequence_to_indices (sequence: typing.List[int]) -> typing.List[int]:

	"""Extract step indices where hits occur in a binary sequence."""

	return [i for i, v in enumerate(sequence) if v]


def chance (probability: float, rng: random.Random) -> bool:

	"""Return True with the given probability (0.0-1.0)."""

	return rng.random() < probability


def choice (options: typing.Sequence[T], rng: random.Random) -> T:

	"""Pick one item uniformly from a non-empty sequence."""

	if not options:
		raise ValueError("Options cannot be empty")

	return options[int(rng.random() * len(options))]


def probability_gate (sequence: typing.List[int], probability: typing.Union[float, typing.List[float]], rng: random.Random) -> typing.List[int]:

	"""Filter a binary sequence by probability.

	Each active step (value > 0) is kept with the given probability.
	Inactive steps (value == 0) are never promoted.

	Parameters:
		sequence: Binary sequence (0s and 1s)
		probability: Chance of keeping each hit (0.0-1.0). A single float applies
			uniformly; a list assigns per-step probability.
		rng: Random number generator instance

	Example:
		```python
		kicks = [1, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0, 0, 0, 1, 0]
		bass = beatgrid.sequence_utils.probability_gate(kicks, [1.0] + [0.5] * 15, rng)
		```
	"""

	result: typing.List[int] = []

	for i, value in enumerate(sequence):

		if value == 0:
			result.append(0)
			continue

		if isinstance(probability, list):
			p = probability[i] if i < len(probability) else 1.0
		else:
			p = probability

		result.append(value if rng.random() < p else 0)

	return result
