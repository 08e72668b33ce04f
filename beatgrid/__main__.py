import argparse
import asyncio
import logging
import os
import random
import typing

import yaml

import beatgrid.constants
import beatgrid.midi
import beatgrid.midi_utils
import beatgrid.presets
import beatgrid.render
import beatgrid.scheduler
import beatgrid.song
import beatgrid.web_ui


logger = logging.getLogger(__name__)


def load_config (config_path: typing.Optional[str] = "config.yaml") -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file. A missing file gives an empty config.
	"""

	if config_path is None or not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, "r") as f:
		return yaml.safe_load(f) or {}


def build_song (config: typing.Dict[str, typing.Any], preset_id: typing.Optional[str] = None, kit_id: typing.Optional[str] = None, seed: typing.Optional[int] = None) -> beatgrid.song.SongState:

	"""Create a song from the ``song`` config section, with command-line overrides."""

	song_config = config.get("song", {}) or {}

	state = beatgrid.presets.initial_song()
	rng = random.Random(seed if seed is not None else song_config.get("seed"))

	preset = preset_id or song_config.get("preset", beatgrid.presets.DEFAULT_PRESET_ID)
	kit = kit_id or song_config.get("kit", beatgrid.presets.DEFAULT_KIT_ID)

	if not beatgrid.presets.apply_preset(state, preset, rng=rng):
		raise SystemExit(f"Unknown preset: {preset}")

	if not beatgrid.presets.apply_sound_kit(state, kit):
		raise SystemExit(f"Unknown sound kit: {kit}")

	# Explicit tempo/swing settings override the preset's own.
	if "tempo" in song_config:
		state.set_tempo(song_config["tempo"])

	if "swing" in song_config:
		state.set_swing(song_config["swing"])

	return state


async def render_command (state: beatgrid.song.SongState, config: typing.Dict[str, typing.Any], output: str) -> None:

	render_config = config.get("render", {}) or {}

	renderer = beatgrid.render.OfflineRenderer(
		sample_rate = render_config.get("sample_rate", beatgrid.constants.DEFAULT_SAMPLE_RATE),
		channels = render_config.get("channels", beatgrid.constants.DEFAULT_CHANNELS),
		target_db = render_config.get("target_db", beatgrid.constants.DEFAULT_TARGET_DB),
		tail_seconds = render_config.get("tail_seconds")
	)

	last_reported = [-10.0]

	def report (percent: float) -> None:
		if percent - last_reported[0] >= 10 or percent >= 100:
			logger.info(f"Rendering... {percent:.0f}%")
			last_reported[0] = percent

	data = await renderer.render(state, on_progress=report)

	with open(output, "wb") as f:
		f.write(data)

	logger.info(f"Wrote {output}")


async def play_command (state: beatgrid.song.SongState, config: typing.Dict[str, typing.Any], seconds: typing.Optional[float]) -> None:

	device_name = (config.get("midi", {}) or {}).get("device_name")
	name, port = beatgrid.midi_utils.select_output_device(device_name)

	if port is None:
		raise SystemExit("No MIDI output available")

	clock = beatgrid.scheduler.MonotonicClock()
	trigger = beatgrid.midi.MidiTrigger(port, clock)
	scheduler = beatgrid.scheduler.TransportScheduler(state, trigger, clock=clock)

	web_config = config.get("web_ui")
	web_ui: typing.Optional[beatgrid.web_ui.WebUI] = None

	if web_config:
		web_ui = beatgrid.web_ui.WebUI(state, scheduler, ws_port=web_config.get("port", 8765))
		await web_ui.start()

	await scheduler.start()

	try:
		if seconds is not None:
			await asyncio.sleep(seconds)
		elif scheduler.task is not None:
			await scheduler.task
	finally:
		await scheduler.stop()
		if web_ui is not None:
			await web_ui.stop()
		trigger.close()


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Command-line entry point: ``python -m beatgrid {render,play,midi}``.
	"""

	logging.basicConfig(level=logging.INFO)

	parser = argparse.ArgumentParser(prog="beatgrid", description="Generate, play and export step-sequenced songs")
	parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
	parser.add_argument("--preset", help="Preset id (default from config, else trap_banger_140)")
	parser.add_argument("--kit", help="Sound kit id")
	parser.add_argument("--seed", type=int, help="Random seed for pattern generation")

	commands = parser.add_subparsers(dest="command", required=True)

	render_parser = commands.add_parser("render", help="Render the song to a WAV file")
	render_parser.add_argument("output", help="Output .wav path")

	play_parser = commands.add_parser("play", help="Play the song on a MIDI output")
	play_parser.add_argument("--seconds", type=float, help="Stop after this many seconds")

	midi_parser = commands.add_parser("midi", help="Export the song as a MIDI file")
	midi_parser.add_argument("output", help="Output .mid path")

	args = parser.parse_args(argv)

	config = load_config(args.config)
	state = build_song(config, args.preset, args.kit, args.seed)

	if args.command == "render":
		asyncio.run(render_command(state, config, args.output))

	elif args.command == "play":
		try:
			asyncio.run(play_command(state, config, args.seconds))
		except KeyboardInterrupt:
			logger.info("Stopping...")

	elif args.command == "midi":
		beatgrid.midi.export_midi(state, args.output)


if __name__ == "__main__":
	main()
