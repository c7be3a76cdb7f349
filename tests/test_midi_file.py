import io

import mido
import pytest

import mozart.document
import mozart.errors
import mozart.midi_file


def _encode (midi_file: mido.MidiFile) -> bytes:

	"""Serialize a mido file to bytes."""

	buffer = io.BytesIO()
	midi_file.save(file=buffer)

	return buffer.getvalue()


def _build_document () -> mozart.document.Document:

	"""A two-track document with tempo and meter changes."""

	document = mozart.document.Document(ppq=480, name="Sketch")
	document.temporal_map.set_tempo(0, 120)
	document.temporal_map.set_tempo(1920, 90)
	document.temporal_map.set_time_signature(0, 4, 4)
	document.temporal_map.set_time_signature(3840, 3, 4)

	piano = document.add_track(name="Piano", program=0)
	piano.notes.append(mozart.document.Note(pitch=60, start_tick=0, duration_ticks=480, velocity=100 / 127))
	piano.notes.append(mozart.document.Note(pitch=64, start_tick=480, duration_ticks=960, velocity=64 / 127))

	document.add_track(name="Bass", program=33)

	return document


def test_round_trip_preserves_notes_and_maps () -> None:

	"""serialize then parse keeps tracks, notes, tempos and time signatures."""

	document = mozart.midi_file.parse(mozart.midi_file.serialize(_build_document()))

	assert document.ppq == 480
	assert document.name == "Sketch"
	assert document.midi_format == 1

	assert [(event.tick, event.bpm) for event in document.temporal_map.tempo_events] == [
		(0, pytest.approx(120)),
		(1920, pytest.approx(90, abs=0.001)),
	]
	assert [(event.tick, event.signature) for event in document.temporal_map.time_signature_events] == [(0, "4/4"), (3840, "3/4")]

	assert [track.name for track in document.tracks] == ["Piano", "Bass"]
	assert [track.program for track in document.tracks] == [0, 33]
	assert [track.channel for track in document.tracks] == [0, 1]

	piano = document.tracks[0]
	assert [(note.pitch, note.start_tick, note.duration_ticks, note.midi_velocity) for note in piano.notes] == [
		(60, 0, 480, 100),
		(64, 480, 960, 64),
	]


def test_empty_track_survives_round_trip () -> None:

	"""A track without notes is still written and read back."""

	document = mozart.midi_file.parse(mozart.midi_file.serialize(_build_document()))

	assert document.tracks[1].notes == []


def test_serialize_writes_conductor_track_first () -> None:

	"""The first track holds only meta events."""

	midi_file = mido.MidiFile(file=io.BytesIO(mozart.midi_file.serialize(_build_document())))

	assert midi_file.type == 1
	assert len(midi_file.tracks) == 3
	assert all(message.is_meta for message in midi_file.tracks[0])


def test_serialize_rejects_unwritable_time_signature () -> None:

	"""Denominators that are not powers of two cannot be stored in a MIDI file."""

	document = _build_document()
	document.temporal_map.set_time_signature(0, 5, 6)

	with pytest.raises(mozart.errors.InvalidArgumentError):
		mozart.midi_file.serialize(document)


def test_parse_note_on_zero_velocity_ends_note () -> None:

	"""note_on with velocity 0 is treated as note_off."""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=96)
	track = mido.MidiTrack()
	track.append(mido.Message('note_on', channel=2, note=50, velocity=70, time=0))
	track.append(mido.Message('note_on', channel=2, note=50, velocity=0, time=96))
	midi_file.tracks.append(track)

	document = mozart.midi_file.parse(_encode(midi_file))

	assert document.ppq == 96
	assert document.tracks[0].channel == 2
	assert [(note.pitch, note.start_tick, note.duration_ticks, note.midi_velocity) for note in document.tracks[0].notes] == [(50, 0, 96, 70)]


def test_parse_pairs_overlapping_notes_in_order () -> None:

	"""Two overlapping notes of the same pitch close first-in, first-out."""

	midi_file = mido.MidiFile(type=0, ticks_per_beat=480)
	track = mido.MidiTrack()
	track.append(mido.Message('note_on', note=60, velocity=100, time=0))
	track.append(mido.Message('note_on', note=60, velocity=50, time=240))
	track.append(mido.Message('note_off', note=60, velocity=0, time=240))
	track.append(mido.Message('note_off', note=60, velocity=0, time=480))
	midi_file.tracks.append(track)

	notes = mozart.midi_file.parse(_encode(midi_file)).tracks[0].notes

	assert [(note.start_tick, note.duration_ticks, note.midi_velocity) for note in notes] == [(0, 480, 100), (240, 720, 50)]


def test_parse_conductor_track_feeds_the_document () -> None:

	"""A meta-only track sets the name and maps but is not a note track."""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=480)

	conductor = mido.MidiTrack()
	conductor.append(mido.MetaMessage('track_name', name="Nocturne", time=0))
	conductor.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(60), time=0))
	conductor.append(mido.MetaMessage('time_signature', numerator=6, denominator=8, time=0))
	midi_file.tracks.append(conductor)

	melody = mido.MidiTrack()
	melody.append(mido.MetaMessage('track_name', name="Flute", time=0))
	melody.append(mido.Message('program_change', channel=0, program=73, time=0))
	melody.append(mido.Message('note_on', note=72, velocity=90, time=0))
	melody.append(mido.Message('note_off', note=72, velocity=0, time=240))
	midi_file.tracks.append(melody)

	document = mozart.midi_file.parse(_encode(midi_file))

	assert document.name == "Nocturne"
	assert len(document.tracks) == 1
	assert document.tracks[0].name == "Flute"
	assert document.tracks[0].instrument_name == "flute"
	assert document.temporal_map.tempo_at(0) == pytest.approx(60)
	assert document.temporal_map.time_signature_at(0) == (6, 8)


def test_parse_garbage_raises_format_error () -> None:

	"""Bytes that are not a MIDI file raise FormatError."""

	with pytest.raises(mozart.errors.FormatError):
		mozart.midi_file.parse(b"this is not a midi file")

	with pytest.raises(mozart.errors.FormatError):
		mozart.midi_file.parse(b"")


def test_saved_tracks_stay_off_the_percussion_channel () -> None:

	"""A tenth melodic track is not written on channel 9."""

	document = mozart.document.Document()

	for _ in range(10):
		track = document.add_track(program=40)
		track.notes.append(mozart.document.Note(pitch=67, start_tick=0, duration_ticks=480, velocity=0.5))

	midi_file = mido.MidiFile(file=io.BytesIO(mozart.midi_file.serialize(document)))

	channels = {
		message.channel
		for track in midi_file.tracks
		for message in track
		if hasattr(message, 'channel')
	}

	assert 9 not in channels
	assert len(channels) == 10
