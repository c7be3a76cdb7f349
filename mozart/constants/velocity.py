"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). Notes store velocity internally
as a float in [0, 1]; these constants are in the 1-127 integer range used at
the edges of the engine.
"""

import math


DEFAULT_VELOCITY = 80           # Notes added without an explicit velocity

# MIDI standard range
MIN_VELOCITY = 1
MAX_VELOCITY = 127


def to_unit (velocity: int) -> float:

	"""Scale a 0-127 MIDI velocity to the internal [0, 1] range."""

	return velocity / MAX_VELOCITY


def to_midi (velocity: float) -> int:

	"""Scale an internal [0, 1] velocity to the integer MIDI range."""

	return int(math.floor(velocity * MAX_VELOCITY + 0.5))
