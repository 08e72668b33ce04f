"""16-bit PCM WAV encoding for rendered buffers."""

import io

import numpy
import soundfile


MAX_CHANNELS = 2


def to_pcm16 (buffer: numpy.ndarray) -> numpy.ndarray:

	"""Convert float samples to int16.

	Samples are clamped to [-1, 1]; negative values scale by 32768 and
	non-negative values by 32767, then truncate toward zero.
	"""

	clipped = numpy.clip(buffer, -1.0, 1.0)
	scaled = numpy.where(clipped < 0, clipped * 32768.0, clipped * 32767.0)

	return numpy.trunc(scaled).astype("<i2")


def encode_wav (buffer: numpy.ndarray, sample_rate: int) -> bytes:

	"""Serialize a ``(channels, frames)`` float buffer as a RIFF/WAVE file.

	Mono and stereo only, so the result is always the plain 44-byte PCM
	header followed by ``frames * channels * 2`` bytes of samples. An empty
	buffer produces a valid header-only file.

	Example:
		```python
		buffer = numpy.zeros((2, 44100))
		data = beatgrid.wav.encode_wav(buffer, 44100)
		len(data)  # -> 176444
		```
	"""

	if buffer.ndim != 2:
		raise ValueError("Buffer must be shaped (channels, frames)")

	channels = buffer.shape[0]

	if not 1 <= channels <= MAX_CHANNELS:
		raise ValueError(f"Buffer must have 1 to {MAX_CHANNELS} channels, got {channels}")

	if sample_rate <= 0:
		raise ValueError("Sample rate must be positive")

	out = io.BytesIO()

	# soundfile wants frames on the first axis.
	soundfile.write(out, to_pcm16(buffer).T, sample_rate, format="WAV", subtype="PCM_16")

	return out.getvalue()
