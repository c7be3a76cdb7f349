import pytest

import mozart.errors
import mozart.pitch


def test_middle_c_is_c4 () -> None:

	"""Pitch 60 encodes as C4 and C4 decodes as 60."""

	assert mozart.pitch.pitch_to_name(60) == "C4"
	assert mozart.pitch.name_to_pitch("C4") == 60


def test_names_use_sharps_only () -> None:

	"""Black keys are always spelled with sharps on output."""

	assert mozart.pitch.pitch_to_name(61) == "C#4"
	assert mozart.pitch.pitch_to_name(70) == "A#4"
	assert mozart.pitch.pitch_class_name(70) == "A#"


def test_range_extremes () -> None:

	"""The lowest and highest MIDI notes sit in octaves -1 and 9."""

	assert mozart.pitch.pitch_to_name(0) == "C-1"
	assert mozart.pitch.pitch_to_name(127) == "G9"
	assert mozart.pitch.name_to_pitch("C-1") == 0
	assert mozart.pitch.name_to_pitch("G9") == 127


@pytest.mark.parametrize("name, expected", [
	("F#3", 54),
	("Bb5", 82),
	("bb5", 82),
	("c4", 60),
	("C##4", 62),
	("Cb4", 59),
	("Ebb4", 62),
])
def test_name_to_pitch_accidentals (name: str, expected: int) -> None:

	"""Letters are case-insensitive and each accidental shifts by a semitone."""

	assert mozart.pitch.name_to_pitch(name) == expected


@pytest.mark.parametrize("name", ["H2", "C", "C#b4", "4C", "", "C4.5"])
def test_malformed_names_raise (name: str) -> None:

	"""Names that do not parse raise InvalidArgumentError."""

	with pytest.raises(mozart.errors.InvalidArgumentError):
		mozart.pitch.name_to_pitch(name)


def test_out_of_range_name_raises () -> None:

	"""A well-formed name outside 0-127 is rejected."""

	with pytest.raises(mozart.errors.InvalidArgumentError):
		mozart.pitch.name_to_pitch("G#9")

	with pytest.raises(ValueError):
		mozart.pitch.name_to_pitch("Cb-1")


def test_pitch_class_resolves_enharmonics () -> None:

	"""Flat and sharp spellings of the same class compare equal."""

	assert mozart.pitch.name_to_pitch_class("Bb") == 10
	assert mozart.pitch.name_to_pitch_class("a#") == 10
	assert mozart.pitch.name_to_pitch_class("Cb") == 11
	assert mozart.pitch.name_to_pitch_class("B#") == 0


def test_pitch_class_rejects_octaves () -> None:

	"""Pitch class filters take no octave number."""

	with pytest.raises(mozart.errors.InvalidArgumentError):
		mozart.pitch.name_to_pitch_class("C4")
