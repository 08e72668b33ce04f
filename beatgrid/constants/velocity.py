"""Step velocity constants.

Step velocity is a float gain applied on top of the track volume. Generated
patterns keep velocities inside ``[MIN_VELOCITY, MAX_VELOCITY]`` so accents
can push slightly past unity without runaway levels.
"""

DEFAULT_VELOCITY = 1.0

MIN_VELOCITY = 0.1
MAX_VELOCITY = 1.2

# MIDI standard range, used when triggers are sent as MIDI notes
MIDI_MIN_VELOCITY = 1
MIDI_MAX_VELOCITY = 127
