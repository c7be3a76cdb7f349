"""Standard MIDI file codec built on mido.

``parse()`` turns file bytes into a ``Document`` and ``serialize()`` turns a
``Document`` back into type 1 file bytes.

Reading rules:

- Tracks with no channel messages (tempo maps, markers) are conductor
  tracks. Their tempo, time signature and name meta events feed the
  document; they do not become ``Track`` objects.
- A track's channel and program come from its first channel message and
  its first ``program_change``.
- ``note_on`` with velocity 0 ends a note. Overlapping notes on the same
  channel and pitch are closed in the order they started.

Writing produces one conductor track followed by one track per ``Track``.
"""

import collections
import io
import logging
import typing

import mido

import mozart.constants.velocity
import mozart.document
import mozart.errors


logger = logging.getLogger(__name__)

# Exceptions mido raises on truncated or corrupt input.
_PARSE_ERRORS = (OSError, EOFError, ValueError, KeyError, IndexError, TypeError)


def parse (data: bytes) -> mozart.document.Document:

	"""
	Decode MIDI file bytes into a document.

	Raises:
		FormatError: If the bytes are not a readable MIDI file.
	"""

	try:
		midi_file = mido.MidiFile(file=io.BytesIO(data))
	except _PARSE_ERRORS as exc:
		raise mozart.errors.FormatError(f"Not a valid MIDI file: {exc}") from exc

	if midi_file.type == 2:
		raise mozart.errors.FormatError("Type 2 (asynchronous) MIDI files are not supported")

	try:
		document = mozart.document.Document(ppq=midi_file.ticks_per_beat, midi_format=midi_file.type)

		for midi_track in midi_file.tracks:
			_read_track(document, midi_track)
	except (ZeroDivisionError, mozart.errors.InvalidArgumentError) as exc:
		raise mozart.errors.FormatError(f"Invalid header, tempo or time signature: {exc}") from exc

	logger.debug(f"Parsed {len(data)} bytes: {len(document.tracks)} tracks, ppq {document.ppq}")

	return document


def _read_track (document: mozart.document.Document, midi_track: mido.MidiTrack) -> None:

	"""Read one MIDI track into the document, as a conductor track or a note track."""

	track = mozart.document.Track()
	has_channel_messages = False
	track_name: typing.Optional[str] = None

	open_notes: typing.Dict[typing.Tuple[int, int], typing.Deque[typing.Tuple[int, float]]] = collections.defaultdict(collections.deque)

	tick = 0

	for message in midi_track:

		tick += message.time

		if message.is_meta:

			if message.type == 'set_tempo':
				document.temporal_map.set_tempo(tick, mido.tempo2bpm(message.tempo))

			elif message.type == 'time_signature':
				document.temporal_map.set_time_signature(tick, message.numerator, message.denominator)

			elif message.type == 'track_name' and track_name is None:
				track_name = message.name

			continue

		if not hasattr(message, 'channel'):
			continue

		if not has_channel_messages:
			track.channel = message.channel
			has_channel_messages = True

		if message.type == 'program_change' and track.program is None:
			track.program = message.program

		elif message.type == 'note_on' and message.velocity > 0:
			open_notes[(message.channel, message.note)].append((tick, message.velocity / mozart.constants.velocity.MAX_VELOCITY))

		elif message.type in ('note_off', 'note_on'):

			pending = open_notes.get((message.channel, message.note))

			if not pending:
				continue

			start_tick, velocity = pending.popleft()

			track.notes.append(mozart.document.Note(
				pitch = message.note,
				start_tick = start_tick,
				duration_ticks = max(1, tick - start_tick),
				velocity = velocity
			))

	unterminated = sum(len(pending) for pending in open_notes.values())

	if unterminated:
		logger.debug(f"Dropped {unterminated} notes with no note-off in track '{track_name}'")

	if not has_channel_messages:
		if document.name is None and track_name:
			document.name = track_name
		return

	track.name = track_name or ""
	track.notes.sort(key=lambda note: (note.start_tick, note.pitch))
	document.tracks.append(track)


def serialize (document: mozart.document.Document) -> bytes:

	"""
	Encode a document as type 1 MIDI file bytes.

	Raises:
		InvalidArgumentError: If a time signature denominator is not a power of
			two, which the MIDI file format cannot store.
	"""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=document.ppq)
	midi_file.tracks.append(_conductor_track(document))

	for track in document.tracks:
		midi_file.tracks.append(_note_track(track))

	buffer = io.BytesIO()
	midi_file.save(file=buffer)

	return buffer.getvalue()


def _conductor_track (document: mozart.document.Document) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, mido.MetaMessage]] = []

	if document.name:
		events.append((0, 0, mido.MetaMessage('track_name', name=document.name)))

	for signature in document.temporal_map.time_signature_events:

		denominator = signature.denominator

		if denominator & (denominator - 1):
			raise mozart.errors.InvalidArgumentError(
				f"Time signature {signature.signature} at tick {signature.tick} cannot be written to a MIDI file (denominator must be a power of two)"
			)

		events.append((signature.tick, 1, mido.MetaMessage('time_signature', numerator=signature.numerator, denominator=denominator)))

	for tempo in document.temporal_map.tempo_events:
		events.append((tempo.tick, 2, mido.MetaMessage('set_tempo', tempo=int(mido.bpm2tempo(tempo.bpm)))))

	return _to_midi_track(events)


def _note_track (track: mozart.document.Track) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, typing.Union[mido.Message, mido.MetaMessage]]] = []

	if track.name:
		events.append((0, 0, mido.MetaMessage('track_name', name=track.name)))

	events.append((0, 1, mido.Message('program_change', channel=track.channel, program=track.program or 0)))

	for note in track.notes:

		velocity = max(mozart.constants.velocity.MIN_VELOCITY, min(mozart.constants.velocity.MAX_VELOCITY, note.midi_velocity))

		# note_off sorts before note_on at the same tick so repeated pitches re-trigger.
		events.append((note.end_tick, 2, mido.Message('note_off', channel=track.channel, note=note.pitch, velocity=0)))
		events.append((note.start_tick, 3, mido.Message('note_on', channel=track.channel, note=note.pitch, velocity=velocity)))

	return _to_midi_track(events)


def _to_midi_track (events: typing.List[typing.Tuple[int, int, typing.Any]]) -> mido.MidiTrack:

	"""Sort absolute-tick events and convert them to delta times."""

	midi_track = mido.MidiTrack()
	events.sort(key=lambda event: (event[0], event[1]))

	last_tick = 0

	for tick, _, message in events:
		midi_track.append(message.copy(time=tick - last_tick))
		last_tick = tick

	return midi_track
