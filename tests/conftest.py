import pytest

import mozart.editor
import mozart.registry


@pytest.fixture
def registry () -> mozart.registry.DocumentRegistry:

	"""A fresh, empty registry for each test."""

	return mozart.registry.DocumentRegistry()


@pytest.fixture
def song (registry: mozart.registry.DocumentRegistry) -> str:

	"""
	Create a 120 BPM, 4/4, 480 PPQ document with one piano track and return its alias.

	Measure 1 holds a C major arpeggio (C4 E4 G4 C5, one beat each), measure 2
	a held A3 and an F4 on beat 3.
	"""

	registry.create("song", mozart.registry.CreateOptions(bpm=120, numerator=4, denominator=4, ppq=480))
	mozart.editor.add_track(registry, "song", name="Piano")

	mozart.editor.add_notes(registry, "song", 0, [
		mozart.editor.NoteInput(measure=1, beat=1, note_name="C4", duration_beats=1),
		mozart.editor.NoteInput(measure=1, beat=2, note_name="E4", duration_beats=1),
		mozart.editor.NoteInput(measure=1, beat=3, note_name="G4", duration_beats=1),
		mozart.editor.NoteInput(measure=1, beat=4, note_name="C5", duration_beats=1, velocity=90),
		mozart.editor.NoteInput(measure=2, beat=1, note_name="A3", duration_beats=4),
		mozart.editor.NoteInput(measure=2, beat=3, note_name="F4", duration_beats=0.5),
	])

	return "song"
