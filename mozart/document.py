"""In-memory model of a MIDI document.

A ``Document`` owns its tracks, its tempo and time signature map and a fixed
resolution (``ppq``, ticks per quarter note). Tracks are addressed by their
0-based position; they can be appended but never removed or reordered.

All note positions are absolute ticks from the start of the document.
"""

import dataclasses
import typing

import mozart.constants
import mozart.constants.instruments
import mozart.constants.velocity
import mozart.errors
import mozart.pitch
import mozart.temporal_map
import mozart.timing


@dataclasses.dataclass
class Note:

	"""
	A single note owned by one track.

	``velocity`` is stored in [0, 1]; ``midi_velocity`` gives the 1-127 value.
	"""

	pitch: int
	start_tick: int
	duration_ticks: int
	velocity: float

	@property
	def end_tick (self) -> int:
		return self.start_tick + self.duration_ticks

	@property
	def name (self) -> str:
		return mozart.pitch.pitch_to_name(self.pitch)

	@property
	def midi_velocity (self) -> int:
		return mozart.constants.velocity.to_midi(self.velocity)


@dataclasses.dataclass
class Track:

	"""An instrument part: a channel, a GM program and its notes."""

	name: str = ""
	channel: int = 0
	program: typing.Optional[int] = None
	notes: typing.List[Note] = dataclasses.field(default_factory=list)

	@property
	def instrument_name (self) -> str:
		return mozart.constants.instruments.program_name(self.program)


	def pitch_range (self) -> typing.Optional[typing.Tuple[int, int]]:

		"""Return the lowest and highest pitch in the track, or None if it is empty."""

		if not self.notes:
			return None

		pitches = [note.pitch for note in self.notes]

		return min(pitches), max(pitches)


class Document:

	"""
	One editable MIDI sequence.
	"""

	def __init__ (self, ppq: int = mozart.constants.DEFAULT_PPQ, name: typing.Optional[str] = None, midi_format: int = 1) -> None:

		if ppq <= 0:
			raise mozart.errors.InvalidArgumentError("PPQ must be positive")

		self.ppq = ppq
		self.name = name
		self.midi_format = midi_format
		self.temporal_map = mozart.temporal_map.TemporalMap()
		self.tracks: typing.List[Track] = []

		# Measure boundary lookups, cached against the temporal map revision.
		self.grid = mozart.timing.MeasureGrid(self.ppq, self.temporal_map)


	def add_track (self, name: typing.Optional[str] = None, program: typing.Optional[int] = None) -> Track:

		"""Append a new empty track, naming it ``"Track {index}"`` when no name is given."""

		index = len(self.tracks)

		track = Track(
			name = name or f"Track {index}",
			channel = self._free_channel(),
			program = program
		)

		self.tracks.append(track)

		return track


	def _free_channel (self) -> int:

		"""Lowest melodic channel no track uses yet, sharing by rotation once all are taken."""

		melodic = [
			channel for channel in range(mozart.constants.MIDI_CHANNELS)
			if channel != mozart.constants.PERCUSSION_CHANNEL
		]

		used = {track.channel for track in self.tracks}

		for channel in melodic:
			if channel not in used:
				return channel

		return melodic[len(self.tracks) % len(melodic)]


	def iter_notes (self) -> typing.Iterator[typing.Tuple[int, Note]]:

		"""Yield ``(track_index, note)`` for every note in the document."""

		for index, track in enumerate(self.tracks):
			for note in track.notes:
				yield index, note


	@property
	def end_tick (self) -> int:

		"""The tick at which the last note ends, or 0 for a document without notes."""

		return max((note.end_tick for _, note in self.iter_notes()), default=0)


	@property
	def duration_seconds (self) -> float:
		return mozart.timing.tick_to_seconds(self.temporal_map, self.ppq, self.end_tick)


	def total_measures (self) -> int:

		"""Number of measures needed to cover every note (0 when there are none)."""

		return self.grid.measures_covering(self.end_tick)
