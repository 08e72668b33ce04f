import io
import struct
import wave

import numpy
import pytest
import soundfile

import beatgrid.wav


def test_header_fields () -> None:

	"""The RIFF header describes 16-bit PCM at the given rate and width."""

	data = beatgrid.wav.encode_wav(numpy.zeros((2, 100)), 22050)

	assert len(data) == 44 + 100 * 2 * 2
	assert data[0:4] == b"RIFF"
	assert data[8:16] == b"WAVEfmt "
	assert data[36:40] == b"data"
	assert struct.unpack("<I", data[4:8])[0] == len(data) - 8
	assert struct.unpack("<HHIIHH", data[20:36]) == (1, 2, 22050, 22050 * 4, 4, 16)
	assert struct.unpack("<I", data[40:44])[0] == 400


def test_stdlib_reader_accepts_output () -> None:

	"""The standard wave module reads back the channels and frame count."""

	buffer = numpy.vstack([numpy.linspace(-1.0, 1.0, 50), numpy.zeros(50)])

	reader = wave.open(io.BytesIO(beatgrid.wav.encode_wav(buffer, 8000)), "rb")

	assert reader.getnchannels() == 2
	assert reader.getsampwidth() == 2
	assert reader.getframerate() == 8000
	assert reader.getnframes() == 50


def test_channels_are_interleaved () -> None:

	"""Samples are written frame by frame, left then right."""

	buffer = numpy.array([[0.5, -0.5], [0.25, 1.0]])

	data = beatgrid.wav.encode_wav(buffer, 44100)
	samples = numpy.frombuffer(data[44:], dtype="<i2")

	assert samples.tolist() == [16383, 8191, -16384, 32767]


def test_pcm_conversion_clamps_and_truncates () -> None:

	"""Out-of-range values clip; negatives use 32768 and positives 32767."""

	pcm = beatgrid.wav.to_pcm16(numpy.array([-2.0, -1.0, 0.0, 0.99999, 1.0, 3.0]))

	assert pcm.tolist() == [-32768, -32768, 0, 32766, 32767, 32767]


def test_empty_buffer_is_header_only () -> None:

	"""Zero frames still produce a valid file."""

	data = beatgrid.wav.encode_wav(numpy.zeros((2, 0)), 44100)

	assert len(data) == 44
	assert struct.unpack("<I", data[40:44])[0] == 0


def test_invalid_input () -> None:

	"""One-dimensional buffers and bad rates are refused."""

	with pytest.raises(ValueError):
		beatgrid.wav.encode_wav(numpy.zeros(10), 44100)

	with pytest.raises(ValueError):
		beatgrid.wav.encode_wav(numpy.zeros((1, 10)), 0)


def test_more_than_stereo_is_refused () -> None:

	"""Only mono and stereo buffers are encoded."""

	with pytest.raises(ValueError):
		beatgrid.wav.encode_wav(numpy.zeros((3, 10)), 44100)

	with pytest.raises(ValueError):
		beatgrid.wav.encode_wav(numpy.zeros((0, 10)), 44100)


def test_soundfile_reads_samples_back () -> None:

	"""soundfile decodes exactly the int16 samples that were written."""

	rng = numpy.random.default_rng(3)
	buffer = rng.uniform(-1.0, 1.0, size=(2, 500))

	data = beatgrid.wav.encode_wav(buffer, 44100)
	decoded, rate = soundfile.read(io.BytesIO(data), dtype="int16")

	assert rate == 44100
	assert len(data) == 44 + 500 * 2 * 2
	assert decoded.shape == (500, 2)
	assert (decoded == beatgrid.wav.to_pcm16(buffer).T).all()
