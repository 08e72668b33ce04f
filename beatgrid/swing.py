import beatgrid.constants


def seconds_per_step (tempo: float) -> float:

	"""
	Return the straight (unswung) length of one 16th-note step in seconds.
	"""

	if tempo <= 0:
		raise ValueError("Tempo must be positive")

	return 60.0 / tempo / beatgrid.constants.STEPS_PER_BEAT


def validate_swing (swing: float) -> float:

	"""
	Return ``swing`` unchanged, or raise if it is outside the playable range.
	"""

	if not beatgrid.constants.MIN_SWING <= swing <= beatgrid.constants.MAX_SWING:
		raise ValueError(
			f"Swing must be between {beatgrid.constants.MIN_SWING} and {beatgrid.constants.MAX_SWING}, got {swing}"
		)

	return swing


def step_advance (step: int, tempo: float, swing: float) -> float:

	"""
	Return how far the clock moves after playing ``step``.

	Steps are paired into eighth notes. The even (on-beat) step of each pair
	advances by ``2 * (1 - swing)`` straight steps and the odd step by
	``2 * swing``, so each pair always spans exactly one eighth note and only
	the split inside the pair changes.

	The scheduler and the offline renderer both advance time with this
	function; their timings only match while they share it.
	"""

	eighth = seconds_per_step(tempo) * 2

	if step % 2 != 0:
		return eighth * swing

	return eighth * (1.0 - swing)
