"""
beatgrid - a step sequencer that writes, plays and exports beats.

A song is a grid of 16th-note steps: a roster of tracks (kick, snare,
hats, bass, pads, melody ...) against a set of sections, strung together
by an arrangement that may repeat sections freely. The same song feeds
three engines that all read it the same way:

- **Pattern generator.** ``generate()`` fills a section from a genre
  template (trap, Detroit, Flint, cinematic, rock, mafia waltz) in
  layers: a chord progression, drums built from Euclidean rhythms and
  probability-gated fills, bass locked to the kick or the chords, pads,
  and contour-shaped melodies, finished with accent-aware velocity
  humanization.
- **Real-time scheduler.** ``TransportScheduler`` looks a short window
  ahead of the audio clock and hands out precisely timed triggers, with
  swing and a few milliseconds of human timing. Observers follow the
  audible step through ``"step"`` events.
- **Offline renderer.** ``OfflineRenderer`` walks the arrangement once,
  mixes every voice with numpy/scipy synthesis or your own samples,
  normalizes, and returns a 16-bit WAV.

Around them:

- **Presets and kits.** ``apply_preset()`` builds a four-section song in
  a style at that style's tempo; ``apply_sound_kit()`` swaps instruments
  across tracks in one go.
- **MIDI.** ``MidiTrigger`` plays the transport on any MIDI port (drums
  on General MIDI notes), and ``export_midi()`` writes a Type 1 file.
- **Status WebSocket.** ``WebUI`` broadcasts the transport state to
  browser clients ten times a second.
- **Command line.** ``python -m beatgrid render song.wav --preset
  detroit_drive_185`` (also ``play`` and ``midi``), configured from a
  YAML file.

Minimal example:

    ```python
    import asyncio
    import beatgrid

    state = beatgrid.initial_song()
    beatgrid.apply_preset(state, "flint_talk_165")

    data = asyncio.run(beatgrid.OfflineRenderer().render(state))

    with open("flint.wav", "wb") as f:
        f.write(data)
    ```

Package-level exports: ``SongState``, ``Style``, ``Variation``, ``generate``,
``TransportScheduler``, ``OfflineRenderer``, ``initial_song``,
``apply_preset``, ``apply_sound_kit``, ``register_scale``.
"""

import beatgrid.generator
import beatgrid.intervals
import beatgrid.presets
import beatgrid.render
import beatgrid.scheduler
import beatgrid.song
import beatgrid.styles


SongState = beatgrid.song.SongState
Style = beatgrid.styles.Style
Variation = beatgrid.styles.Variation
generate = beatgrid.generator.generate
TransportScheduler = beatgrid.scheduler.TransportScheduler
OfflineRenderer = beatgrid.render.OfflineRenderer
initial_song = beatgrid.presets.initial_song
apply_preset = beatgrid.presets.apply_preset
apply_sound_kit = beatgrid.presets.apply_sound_kit
register_scale = beatgrid.intervals.register_scale
