"""Pitch name codec.

Converts between scientific pitch notation and MIDI note numbers, with
**C4 = 60** (Middle C). Output names always use sharps (``"C#4"``, never
``"Db4"``); input names accept either accidental.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps natural letters to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to sharps-only note names
"""

import re
import typing

import mozart.constants
import mozart.errors


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

# Letter, a run of one accidental kind (never mixed), then a signed octave.
_NOTE_NAME_RE = re.compile(r"^([A-Ga-g])(#*|b*)(-?\d+)$")
_PITCH_CLASS_RE = re.compile(r"^([A-Ga-g])(#*|b*)$")


def _accidental_offset (accidental: str) -> int:

	return accidental.count("#") - accidental.count("b")


def pitch_to_name (pitch: int) -> str:

	"""Return the sharps-only name of a MIDI note number.

	Example:
		```python
		pitch_to_name(60)  # → "C4"
		pitch_to_name(61)  # → "C#4"
		```
	"""

	octave = pitch // 12 - 1

	return f"{PC_TO_NOTE_NAME[pitch % 12]}{octave}"


def pitch_class_name (pitch: int) -> str:

	"""Return the octave-free name of a MIDI note number (e.g. ``"F#"``)."""

	return PC_TO_NOTE_NAME[pitch % 12]


def name_to_pitch (name: str) -> int:

	"""Parse a note name like ``"C4"``, ``"F#3"`` or ``"Bb5"`` into a MIDI note number.

	Parameters:
		name: Letter A-G (any case), zero or more ``#`` or ``b`` accidentals,
			and an integer octave (may be negative).

	Returns:
		MIDI note number in 0-127.

	Raises:
		InvalidArgumentError: If the name does not parse or lands outside 0-127.
	"""

	match = _NOTE_NAME_RE.match(name.strip())

	if match is None:
		raise mozart.errors.InvalidArgumentError(
			f"Invalid note name: \"{name}\". Use format like C4, F#3, Bb5."
		)

	letter, accidental, octave_text = match.groups()

	pitch = (int(octave_text) + 1) * 12 + NOTE_NAME_TO_PC[letter.upper()] + _accidental_offset(accidental)

	if not mozart.constants.MIN_PITCH <= pitch <= mozart.constants.MAX_PITCH:
		raise mozart.errors.InvalidArgumentError(
			f"Note \"{name}\" results in MIDI number {pitch}, out of range 0-127."
		)

	return pitch


def name_to_pitch_class (name: str) -> int:

	"""Parse an octave-free note name (``"C#"``, ``"bb"``) into a pitch class (0-11).

	Enharmonic spellings resolve to the same class, so ``"Bb"`` and ``"A#"``
	both return 10.
	"""

	match = _PITCH_CLASS_RE.match(name.strip())

	if match is None:
		raise mozart.errors.InvalidArgumentError(
			f"Invalid pitch class: \"{name}\". Use a letter with optional accidentals, like C, F# or Bb."
		)

	letter, accidental = match.groups()

	return (NOTE_NAME_TO_PC[letter.upper()] + _accidental_offset(accidental)) % 12
