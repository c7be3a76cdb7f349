"""Constants for Mozart.

- ``mozart.constants.velocity`` - MIDI velocity defaults and range
- ``mozart.constants.instruments`` - General MIDI program names

Document defaults are defined here so that new documents, the config layer
and the tests all agree on them.
"""

DEFAULT_BPM = 120.0
DEFAULT_NUMERATOR = 4
DEFAULT_DENOMINATOR = 4
DEFAULT_PPQ = 480

# Search results are truncated to this many notes after sorting.
SEARCH_RESULT_LIMIT = 200

MIN_PITCH = 0
MAX_PITCH = 127

MIDI_CHANNELS = 16

# General MIDI reserves channel 10 (zero-based 9) for percussion.
PERCUSSION_CHANNEL = 9
