import asyncio
import logging
import random

import beatgrid
import beatgrid.render
import beatgrid.song


logging.basicConfig(level=logging.INFO)

PRESET = "detroit_drive_185"
OUTPUT = "detroit.wav"

state = beatgrid.initial_song()

beatgrid.apply_preset(state, PRESET, rng=random.Random(7))
beatgrid.apply_sound_kit(state, "detroit_grit")

# Push the swing a little past the default and pull the pad back.
state.set_swing(0.56)
state.set_track_volume([track.id for track in state.tracks].index("pad"), 0.35)

# A hand-written fill on the last bar of the intro.
snare = [track.id for track in state.tracks].index("snare")

for step in (56, 58, 60, 61, 62, 63):
	state.set_step("intro", snare, step, beatgrid.song.Step(velocity=0.5 + (step - 56) * 0.08, is_active=True))


def report (percent: float) -> None:

	logging.info(f"{percent:5.1f}%")


# ─── Render ──────────────────────────────────────────────────────────

if __name__ == "__main__":

	renderer = beatgrid.render.OfflineRenderer(sample_rate=44100)
	data = asyncio.run(renderer.render(state, on_progress=report))

	with open(OUTPUT, "wb") as f:
		f.write(data)

	logging.info(f"{len(state.arrangement)} sections, {state.total_steps()} steps at {state.tempo} BPM -> {OUTPUT}")
