import typing

import pytest

import beatgrid.__main__
import beatgrid.presets


def test_missing_config_gives_defaults (tmp_path: typing.Any) -> None:

	"""A config path that does not exist yields an empty config."""

	assert beatgrid.__main__.load_config(str(tmp_path / "missing.yaml")) == {}


def test_load_config (tmp_path: typing.Any) -> None:

	"""YAML settings are read as nested dictionaries."""

	path = tmp_path / "config.yaml"
	path.write_text("song:\n  preset: rock_anthem_128\n  seed: 3\nrender:\n  sample_rate: 22050\n")

	config = beatgrid.__main__.load_config(str(path))

	assert config["song"]["preset"] == "rock_anthem_128"
	assert config["render"]["sample_rate"] == 22050


def test_empty_config_file (tmp_path: typing.Any) -> None:

	"""An empty YAML file is an empty config."""

	path = tmp_path / "config.yaml"
	path.write_text("")

	assert beatgrid.__main__.load_config(str(path)) == {}


def test_build_song_from_config () -> None:

	"""Preset, kit and tempo come from the song section."""

	config = {"song": {"preset": "detroit_drive_185", "kit": "classic_808", "tempo": 170, "seed": 1}}

	state = beatgrid.__main__.build_song(config)

	assert state.tempo == 170
	assert state.active_kit_id == "classic_808"
	assert set(state.sections) == {"intro", "verseA", "verseB", "chorus"}


def test_build_song_overrides () -> None:

	"""Command-line preset and kit win over the config."""

	state = beatgrid.__main__.build_song({"song": {"preset": "detroit_drive_185"}}, preset_id="flint_talk_165", kit_id="detroit_grit", seed=2)

	assert state.tempo == 165
	assert state.active_kit_id == "detroit_grit"


def test_build_song_is_seeded () -> None:

	"""The same seed gives the same song."""

	first = beatgrid.__main__.build_song({}, seed=4)
	second = beatgrid.__main__.build_song({}, seed=4)

	assert first.sections == second.sections
	assert first.tempo == 140


def test_build_song_unknown_ids () -> None:

	"""Unknown presets and kits stop the program."""

	with pytest.raises(SystemExit):
		beatgrid.__main__.build_song({}, preset_id="polka_party_99")

	with pytest.raises(SystemExit):
		beatgrid.__main__.build_song({}, kit_id="kazoo_kit")


def test_midi_command_writes_file (tmp_path: typing.Any) -> None:

	"""The midi subcommand exports the generated song."""

	output = tmp_path / "song.mid"

	beatgrid.__main__.main(["--config", str(tmp_path / "none.yaml"), "--seed", "1", "midi", str(output)])

	assert output.exists()
	assert output.stat().st_size > 0
