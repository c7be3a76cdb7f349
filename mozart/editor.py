"""Note queries and edits in measures and beats.

Every function takes the ``DocumentRegistry`` and an alias, converts musical
coordinates to ticks through the document's ``MeasureGrid`` and, for edits,
marks the document dirty.

Measure attribution is by onset: a note belongs to the measure its
``start_tick`` falls in, no matter how far it sustains. Range filters for
delete, transpose and quantize follow the same rule, so a note that starts
before a range and rings into it is never touched.

Edits validate their inputs before changing anything, so a failed call
leaves the document as it was.
"""

import dataclasses
import logging
import math
import typing

import mozart.constants
import mozart.constants.velocity
import mozart.document
import mozart.errors
import mozart.pitch
import mozart.registry
import mozart.timing


logger = logging.getLogger(__name__)


# ── Inputs ──────────────────────────────────────────────────────────────────


@dataclasses.dataclass
class SearchFilters:

	"""
	Optional constraints for ``search_notes``. ``None`` means no constraint.

	``pitch_class`` is an octave-free name such as ``"C#"`` or ``"Bb"``;
	enharmonic spellings match the same notes.
	"""

	pitch_min: typing.Optional[int] = None
	pitch_max: typing.Optional[int] = None
	pitch_class: typing.Optional[str] = None
	track_index: typing.Optional[int] = None
	measure_start: typing.Optional[int] = None
	measure_end: typing.Optional[int] = None


@dataclasses.dataclass
class NoteInput:

	"""A note to add, positioned by measure and beat (both 1-based)."""

	measure: int
	beat: float
	note_name: str
	duration_beats: float
	velocity: typing.Optional[int] = None


# ── Results ─────────────────────────────────────────────────────────────────


@dataclasses.dataclass
class NoteMatch:

	track: int
	measure: int
	beat: float
	name: str
	midi: int
	velocity: int
	duration_ticks: int


@dataclasses.dataclass
class SearchResult:

	"""Matches sorted by position. ``count`` is the number of matches before truncation."""

	count: int
	notes: typing.List[NoteMatch]


@dataclasses.dataclass
class MeasureNote:

	track: int
	beat: float
	name: str
	midi: int
	velocity: int
	duration_beats: float


@dataclasses.dataclass
class MeasureView:

	measure: int
	time_signature: str
	tempo: float
	notes: typing.List[MeasureNote]


@dataclasses.dataclass
class MeasureRange:

	start_measure: int
	end_measure: int
	total_measures: int
	measures: typing.List[MeasureView]


@dataclasses.dataclass
class AddedNote:

	name: str
	midi: int
	measure: int
	beat: float
	duration_beats: float
	velocity: int


@dataclasses.dataclass
class AddResult:

	track_index: int
	added: typing.List[AddedNote]
	total_notes_in_track: int


@dataclasses.dataclass
class DeleteResult:

	track_index: int
	removed_count: int
	remaining_notes: int


@dataclasses.dataclass
class TransposeResult:

	track_index: int
	semitones: int
	transposed_count: int


@dataclasses.dataclass
class QuantizeResult:

	track_index: int
	grid_beats: float
	quantized_count: int


# ── Helpers ─────────────────────────────────────────────────────────────────


def _track (document: mozart.document.Document, track_index: int) -> mozart.document.Track:

	if not 0 <= track_index < len(document.tracks):
		raise mozart.errors.NotFoundError(f"Track {track_index} does not exist.")

	return document.tracks[track_index]


def _selected_tracks (document: mozart.document.Document, track_index: typing.Optional[int]) -> typing.List[typing.Tuple[int, mozart.document.Track]]:

	if track_index is None:
		return list(enumerate(document.tracks))

	return [(track_index, _track(document, track_index))]


def _tick_window (document: mozart.document.Document, measure_start: typing.Optional[int], measure_end: typing.Optional[int]) -> typing.Tuple[float, float]:

	"""Resolve an optional inclusive measure range to a ``[start, end)`` tick window."""

	start = 0.0
	end = math.inf

	if measure_start is not None:
		start = document.grid.measure_start(measure_start)

	if measure_end is not None:
		_, end = document.grid.measure_to_tick_range(measure_end)

	return start, end


# ── Queries ─────────────────────────────────────────────────────────────────


def describe (registry: mozart.registry.DocumentRegistry, alias: str) -> typing.Dict[str, typing.Any]:

	"""Return document metadata: tempo map, time signatures and per-track details."""

	entry = registry.get(alias)
	document = entry.document

	tracks = []

	for index, track in enumerate(document.tracks):

		pitch_range = track.pitch_range()

		tracks.append({
			"index": index,
			"name": track.name or f"Track {index}",
			"channel": track.channel,
			"instrument": track.instrument_name,
			"instrument_number": track.program,
			"note_count": len(track.notes),
			"pitch_range": {
				"low": mozart.pitch.pitch_to_name(pitch_range[0]),
				"high": mozart.pitch.pitch_to_name(pitch_range[1]),
			} if pitch_range else None,
		})

	return {
		"alias": alias,
		"file_path": entry.path,
		"name": document.name or "(untitled)",
		"format": document.midi_format,
		"ppq": document.ppq,
		"duration": mozart.timing.round_to(document.duration_seconds, 2),
		"total_measures": document.total_measures(),
		"tempos": mozart.registry.tempo_list(document, with_time=True),
		"time_signatures": mozart.registry.time_signature_list(document),
		"tracks": tracks,
	}


def get_measures (registry: mozart.registry.DocumentRegistry, alias: str, start_measure: int, end_measure: int, track_index: typing.Optional[int] = None) -> MeasureRange:

	"""
	List notes measure by measure.

	``start_measure`` is raised to 1 and ``end_measure`` lowered to the
	document's total measure count. Each measure reports the tempo and time
	signature in effect at its first tick, and its notes sorted by beat then
	pitch. Durations are given in beats of the measure's time signature.
	"""

	document = registry.document(alias)
	total = document.total_measures()

	start_measure = max(1, start_measure)
	end_measure = min(total, end_measure)

	tracks = _selected_tracks(document, track_index)
	measures = []

	for measure in range(start_measure, end_measure + 1):

		start, end = document.grid.measure_to_tick_range(measure)
		numerator, denominator = document.temporal_map.time_signature_at(start)
		ticks_per_beat = document.grid.ticks_per_beat(start)

		found: typing.List[typing.Tuple[float, MeasureNote]] = []

		for index, track in tracks:
			for note in track.notes:

				if not start <= note.start_tick < end:
					continue

				beat = 1 + (note.start_tick - start) / ticks_per_beat

				found.append((beat, MeasureNote(
					track = index,
					beat = mozart.timing.round_to(beat, 2),
					name = note.name,
					midi = note.pitch,
					velocity = note.midi_velocity,
					duration_beats = mozart.timing.round_to(note.duration_ticks / document.ppq * (denominator / 4), 2)
				)))

		found.sort(key=lambda item: (item[0], item[1].midi))

		measures.append(MeasureView(
			measure = measure,
			time_signature = f"{numerator}/{denominator}",
			tempo = mozart.timing.round_to(document.temporal_map.tempo_at(start), 1),
			notes = [note for _, note in found]
		))

	return MeasureRange(
		start_measure = start_measure,
		end_measure = end_measure,
		total_measures = total,
		measures = measures
	)


def search_notes (registry: mozart.registry.DocumentRegistry, alias: str, filters: typing.Optional[SearchFilters] = None, limit: int = mozart.constants.SEARCH_RESULT_LIMIT) -> SearchResult:

	"""
	Find notes matching every supplied filter.

	Matches are sorted by measure, beat and pitch, then truncated to
	``limit``. The reported count is taken before truncation.
	"""

	document = registry.document(alias)
	filters = filters or SearchFilters()

	pitch_class = mozart.pitch.name_to_pitch_class(filters.pitch_class) if filters.pitch_class else None

	found: typing.List[typing.Tuple[int, float, NoteMatch]] = []

	for index, track in _selected_tracks(document, filters.track_index):
		for note in track.notes:

			if filters.pitch_min is not None and note.pitch < filters.pitch_min:
				continue

			if filters.pitch_max is not None and note.pitch > filters.pitch_max:
				continue

			if pitch_class is not None and note.pitch % 12 != pitch_class:
				continue

			measure, beat = document.grid.tick_to_measure_beat(note.start_tick)

			if filters.measure_start is not None and measure < filters.measure_start:
				continue

			if filters.measure_end is not None and measure > filters.measure_end:
				continue

			found.append((measure, beat, NoteMatch(
				track = index,
				measure = measure,
				beat = mozart.timing.round_to(beat, 2),
				name = note.name,
				midi = note.pitch,
				velocity = note.midi_velocity,
				duration_ticks = note.duration_ticks
			)))

	found.sort(key=lambda item: (item[0], item[1], item[2].midi))

	return SearchResult(count=len(found), notes=[match for _, _, match in found[:limit]])


# ── Edits ───────────────────────────────────────────────────────────────────


def add_notes (registry: mozart.registry.DocumentRegistry, alias: str, track_index: int, notes: typing.Sequence[NoteInput]) -> AddResult:

	"""
	Insert notes at measure/beat positions.

	Positions and durations are measured in beats of the time signature in
	effect at the start of each note's measure. All notes are validated
	before any is added.

	Raises:
		NotFoundError: If the alias or track does not exist.
		InvalidArgumentError: If a note name, position, duration or velocity is invalid.
	"""

	entry = registry.get(alias)
	document = entry.document
	track = _track(document, track_index)

	new_notes: typing.List[mozart.document.Note] = []
	added: typing.List[AddedNote] = []

	for item in notes:

		if item.measure < 1:
			raise mozart.errors.InvalidArgumentError("Measure numbers start at 1")

		if item.beat < 1:
			raise mozart.errors.InvalidArgumentError("Beats start at 1")

		if item.duration_beats <= 0:
			raise mozart.errors.InvalidArgumentError("Beat duration must be positive")

		velocity = item.velocity if item.velocity is not None else mozart.constants.velocity.DEFAULT_VELOCITY

		if not mozart.constants.velocity.MIN_VELOCITY <= velocity <= mozart.constants.velocity.MAX_VELOCITY:
			raise mozart.errors.InvalidArgumentError(f"Velocity must be between 1 and 127, got {velocity}")

		pitch = mozart.pitch.name_to_pitch(item.note_name)

		measure_start = document.grid.measure_start(item.measure)
		ticks_per_beat = document.grid.ticks_per_beat(measure_start)

		start_tick = mozart.timing.round_half_up(measure_start) + mozart.timing.round_half_up((item.beat - 1) * ticks_per_beat)
		duration_ticks = mozart.timing.round_half_up(item.duration_beats * ticks_per_beat)

		if duration_ticks <= 0:
			raise mozart.errors.InvalidArgumentError("Beat duration must be at least one tick")

		new_notes.append(mozart.document.Note(
			pitch = pitch,
			start_tick = start_tick,
			duration_ticks = duration_ticks,
			velocity = mozart.constants.velocity.to_unit(velocity)
		))

		added.append(AddedNote(
			name = item.note_name,
			midi = pitch,
			measure = item.measure,
			beat = item.beat,
			duration_beats = item.duration_beats,
			velocity = velocity
		))

	track.notes.extend(new_notes)
	registry.mark_dirty(alias)

	logger.debug(f"Added {len(new_notes)} notes to track {track_index} of '{alias}'")

	return AddResult(track_index=track_index, added=added, total_notes_in_track=len(track.notes))


def delete_notes (registry: mozart.registry.DocumentRegistry, alias: str, track_index: int, measure_start: int, measure_end: int, pitch_min: typing.Optional[int] = None, pitch_max: typing.Optional[int] = None) -> DeleteResult:

	"""
	Remove notes whose onset lies in measures ``measure_start`` to ``measure_end`` (inclusive).

	An optional pitch range narrows the deletion further.
	"""

	entry = registry.get(alias)
	document = entry.document
	track = _track(document, track_index)

	start = document.grid.measure_start(measure_start)
	_, end = document.grid.measure_to_tick_range(measure_end)

	def doomed (note: mozart.document.Note) -> bool:

		if not start <= note.start_tick < end:
			return False

		if pitch_min is not None and note.pitch < pitch_min:
			return False

		if pitch_max is not None and note.pitch > pitch_max:
			return False

		return True

	before = len(track.notes)
	track.notes = [note for note in track.notes if not doomed(note)]
	removed = before - len(track.notes)

	registry.mark_dirty(alias)

	logger.debug(f"Removed {removed} notes from track {track_index} of '{alias}'")

	return DeleteResult(track_index=track_index, removed_count=removed, remaining_notes=len(track.notes))


def transpose (registry: mozart.registry.DocumentRegistry, alias: str, track_index: int, semitones: int, measure_start: typing.Optional[int] = None, measure_end: typing.Optional[int] = None) -> TransposeResult:

	"""
	Shift pitches by ``semitones`` for notes starting in the range (whole track by default).

	Results outside 0-127 are clamped to the nearest limit rather than dropped.
	"""

	entry = registry.get(alias)
	document = entry.document
	track = _track(document, track_index)

	start, end = _tick_window(document, measure_start, measure_end)

	count = 0
	clamped = 0

	for note in track.notes:

		if not start <= note.start_tick < end:
			continue

		shifted = note.pitch + semitones
		note.pitch = max(mozart.constants.MIN_PITCH, min(mozart.constants.MAX_PITCH, shifted))

		if note.pitch != shifted:
			clamped += 1

		count += 1

	registry.mark_dirty(alias)

	if clamped:
		logger.warning(f"Transpose by {semitones} clamped {clamped} notes to the 0-127 range")

	logger.debug(f"Transposed {count} notes in track {track_index} of '{alias}' by {semitones}")

	return TransposeResult(track_index=track_index, semitones=semitones, transposed_count=count)


def quantize (registry: mozart.registry.DocumentRegistry, alias: str, track_index: int, grid_beats: float, measure_start: typing.Optional[int] = None, measure_end: typing.Optional[int] = None) -> QuantizeResult:

	"""
	Snap note onsets to the nearest multiple of ``grid_beats`` quarter notes.

	Ties snap to the later grid line. Durations are unchanged, and a snapped
	note may land outside the requested measure range.

	Raises:
		InvalidArgumentError: If the grid rounds to zero ticks or less.
	"""

	entry = registry.get(alias)
	document = entry.document
	track = _track(document, track_index)

	grid_ticks = mozart.timing.round_half_up(document.ppq * grid_beats)

	if grid_ticks <= 0:
		raise mozart.errors.InvalidArgumentError("Grid size must be positive.")

	start, end = _tick_window(document, measure_start, measure_end)

	count = 0

	for note in track.notes:

		if not start <= note.start_tick < end:
			continue

		note.start_tick = mozart.timing.round_half_up(note.start_tick / grid_ticks) * grid_ticks
		count += 1

	registry.mark_dirty(alias)

	logger.debug(f"Quantized {count} notes in track {track_index} of '{alias}' to {grid_ticks} ticks")

	return QuantizeResult(track_index=track_index, grid_beats=grid_beats, quantized_count=count)


def set_tempo (registry: mozart.registry.DocumentRegistry, alias: str, bpm: float, at_tick: int = 0) -> typing.Dict[str, typing.Any]:

	"""Set the tempo at a tick, replacing any tempo already there."""

	entry = registry.get(alias)
	entry.document.temporal_map.set_tempo(at_tick, bpm)
	registry.mark_dirty(alias)

	return {
		"bpm": bpm,
		"at_tick": at_tick,
		"all_tempos": [{"bpm": event.bpm, "ticks": event.tick} for event in entry.document.temporal_map.tempo_events],
	}


def set_time_signature (registry: mozart.registry.DocumentRegistry, alias: str, numerator: int, denominator: int, at_tick: int = 0) -> typing.Dict[str, typing.Any]:

	"""Set the time signature at a tick, replacing any signature already there."""

	entry = registry.get(alias)
	entry.document.temporal_map.set_time_signature(at_tick, numerator, denominator)
	registry.mark_dirty(alias)

	return {
		"signature": f"{numerator}/{denominator}",
		"at_tick": at_tick,
		"all_signatures": mozart.registry.time_signature_list(entry.document),
	}


def _check_program (program: int) -> None:

	if not 0 <= program <= 127:
		raise mozart.errors.InvalidArgumentError(f"Instrument number must be between 0 and 127, got {program}")


def add_track (registry: mozart.registry.DocumentRegistry, alias: str, name: typing.Optional[str] = None, program: typing.Optional[int] = None) -> typing.Dict[str, typing.Any]:

	"""Append an empty track. The instrument defaults to GM program 0 (acoustic grand piano)."""

	entry = registry.get(alias)

	if program is not None:
		_check_program(program)

	track = entry.document.add_track(name=name, program=program if program is not None else 0)
	registry.mark_dirty(alias)

	return {
		"track_index": len(entry.document.tracks) - 1,
		"name": track.name,
		"instrument": track.instrument_name,
	}


def set_instrument (registry: mozart.registry.DocumentRegistry, alias: str, track_index: int, program: int) -> typing.Dict[str, typing.Any]:

	"""Change a track's GM program."""

	entry = registry.get(alias)
	track = _track(entry.document, track_index)

	_check_program(program)

	track.program = program
	registry.mark_dirty(alias)

	return {"track_index": track_index, "instrument": track.instrument_name, "instrument_number": program}
