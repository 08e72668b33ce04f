import asyncio
import logging

import beatgrid
import beatgrid.midi
import beatgrid.midi_utils
import beatgrid.scheduler
import beatgrid.web_ui


logging.basicConfig(level=logging.INFO)

state = beatgrid.initial_song()
beatgrid.apply_preset(state, "trap_banger_140")

# "step" fires once per frame; only report when the bar changes.
last_bar = [-1]


def on_step (step: int) -> None:

	"""Log the section and bar as the playhead enters each bar."""

	bar = step // 16

	if bar == last_bar[0]:
		return

	last_bar[0] = bar
	location = state.resolve_step(step)

	if location is not None:
		logging.info(f"{location.section.name} bar {location.bar + 1}")


async def main () -> None:

	name, port = beatgrid.midi_utils.select_output_device()

	if port is None:
		return

	clock = beatgrid.scheduler.MonotonicClock()
	trigger = beatgrid.midi.MidiTrigger(port, clock)
	scheduler = beatgrid.TransportScheduler(state, trigger, clock=clock)
	scheduler.events.on("step", on_step)

	web_ui = beatgrid.web_ui.WebUI(state, scheduler)
	await web_ui.start()

	await scheduler.start()

	try:
		await asyncio.sleep(60)
	finally:
		await scheduler.stop()
		await web_ui.stop()
		trigger.close()


# ─── Play ────────────────────────────────────────────────────────────

if __name__ == "__main__":

	asyncio.run(main())
