"""Step-grid timing constants.

The sequencer works in **16th-note steps**. Sixteen steps make one 4/4 bar,
and every pattern column is one step.

- `STEPS_PER_BAR = 16` - one bar of 16th notes
- `STEPS_PER_BEAT = 4` - one quarter note
- `DEFAULT_TEMPO = 155` - BPM of a freshly created song
- `DEFAULT_SWING = 0.52` - slight off-beat lengthening for bounce

Swing is the fraction of an eighth note taken by its second (odd) 16th; the
first takes the rest (see `beatgrid.swing.step_advance`). ``0.5`` is
straight time; ``0.75`` is the hardest shuffle the transport accepts.
"""

STEPS_PER_BAR = 16
STEPS_PER_BEAT = 4
DEFAULT_BARS = 4

DEFAULT_TEMPO = 155
DEFAULT_SWING = 0.52

MIN_SWING = 0.5
MAX_SWING = 0.75

# Real-time scheduling (seconds)
DEFAULT_LOOKAHEAD = 0.1
DEFAULT_TICK_INTERVAL = 0.025
DEFAULT_FRAME_INTERVAL = 1.0 / 60.0
DEFAULT_HUMANIZE = 0.005
MAX_STEPS_PER_TICK = 50

# Offline export
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 2
DEFAULT_TAIL_SECONDS = 2.0
DEFAULT_TARGET_DB = -0.1
