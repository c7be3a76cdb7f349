"""FastMCP app factory and tool registration.

Each tool is a thin wrapper: it maps snake_case tool parameters onto
``mozart.editor`` / ``mozart.registry`` calls and returns a JSON-friendly
dict. Validation of domain rules (track existence, pitch names, grid size)
happens in the engine; errors propagate and FastMCP reports them to the
client as tool errors.
"""

import dataclasses
import typing

from mcp.server.fastmcp import FastMCP

import mozart.config
import mozart.editor
import mozart.errors
import mozart.registry


def create_mcp_app (registry: mozart.registry.DocumentRegistry, config: typing.Optional[mozart.config.Config] = None) -> FastMCP:

	"""Create and configure MCP tools operating on ``registry``."""

	config = config or mozart.config.Config()
	mcp = FastMCP(config.server_name)

	@mcp.tool()
	async def load_midi (file_path: str, alias: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
		"""Load and parse a MIDI file (.mid/.midi). Returns tempo, time signatures, tracks and measure count.

		alias is a short name to reference the file later; it defaults to the absolute file path.
		"""
		return await registry.load(file_path, alias)

	@mcp.tool()
	def midi_info (alias: str) -> typing.Dict[str, typing.Any]:
		"""Get metadata for a loaded MIDI file: tempo map, time signatures and per-track instrument, note count and pitch range."""
		return mozart.editor.describe(registry, alias)

	@mcp.tool()
	def get_measures (alias: str, start_measure: int, end_measure: int, track: typing.Optional[int] = None) -> typing.Dict[str, typing.Any]:
		"""Get notes organized by measure (1-based, inclusive). Time-signature and tempo aware.

		Returns note names, beats, velocities and durations in beats. Omit track for all tracks.
		"""
		result = mozart.editor.get_measures(registry, alias, start_measure, end_measure, track)
		return dataclasses.asdict(result)

	@mcp.tool()
	def search_notes (
		alias: str,
		note_name: typing.Optional[str] = None,
		pitch_min: typing.Optional[int] = None,
		pitch_max: typing.Optional[int] = None,
		track: typing.Optional[int] = None,
		measure_start: typing.Optional[int] = None,
		measure_end: typing.Optional[int] = None,
	) -> typing.Dict[str, typing.Any]:
		"""Search for notes by pitch range, pitch class, track or measure range.

		note_name filters by pitch class ignoring octave (e.g. "C#", "Bb").
		Results are sorted by position; at most the configured limit is returned, count is the full total.
		"""
		filters = mozart.editor.SearchFilters(
			pitch_min = pitch_min,
			pitch_max = pitch_max,
			pitch_class = note_name,
			track_index = track,
			measure_start = measure_start,
			measure_end = measure_end
		)
		result = mozart.editor.search_notes(registry, alias, filters, limit=config.search_limit)
		return dataclasses.asdict(result)

	@mcp.tool()
	def add_notes (alias: str, track: int, notes: typing.List[typing.Dict[str, typing.Any]]) -> typing.Dict[str, typing.Any]:
		"""Insert notes into a track at measure/beat positions.

		Each note is an object with:
		- measure:        measure number (1-based)
		- beat:           beat within the measure (1-based, may be fractional)
		- note_name:      e.g. "C4", "F#3", "Bb5"
		- duration_beats: duration in beats
		- velocity:       1-127, default 80
		"""
		for position, note in enumerate(notes):
			for field in ("measure", "beat", "note_name", "duration_beats"):
				if note.get(field) is None:
					raise mozart.errors.InvalidArgumentError(f"Note {position} is missing '{field}'")

		inputs = [
			mozart.editor.NoteInput(
				measure = int(note["measure"]),
				beat = float(note["beat"]),
				note_name = str(note["note_name"]),
				duration_beats = float(note["duration_beats"]),
				velocity = int(note["velocity"]) if note.get("velocity") is not None else None
			)
			for note in notes
		]
		result = mozart.editor.add_notes(registry, alias, track, inputs)
		return dataclasses.asdict(result)

	@mcp.tool()
	def delete_notes (
		alias: str,
		track: int,
		measure_start: int,
		measure_end: int,
		pitch_min: typing.Optional[int] = None,
		pitch_max: typing.Optional[int] = None,
	) -> typing.Dict[str, typing.Any]:
		"""Delete notes starting within a measure range of a track. Optionally limit to a pitch range."""
		result = mozart.editor.delete_notes(registry, alias, track, measure_start, measure_end, pitch_min, pitch_max)
		return dataclasses.asdict(result)

	@mcp.tool()
	def transpose (
		alias: str,
		track: int,
		semitones: int,
		measure_start: typing.Optional[int] = None,
		measure_end: typing.Optional[int] = None,
	) -> typing.Dict[str, typing.Any]:
		"""Transpose notes in a track by semitones (positive = up). Omit the measure range for the whole track."""
		result = mozart.editor.transpose(registry, alias, track, semitones, measure_start, measure_end)
		return dataclasses.asdict(result)

	@mcp.tool()
	def quantize (
		alias: str,
		track: int,
		grid_beats: float,
		measure_start: typing.Optional[int] = None,
		measure_end: typing.Optional[int] = None,
	) -> typing.Dict[str, typing.Any]:
		"""Snap note start times to a grid in beats (0.25 = 16th, 0.5 = 8th, 1 = quarter)."""
		result = mozart.editor.quantize(registry, alias, track, grid_beats, measure_start, measure_end)
		return dataclasses.asdict(result)

	@mcp.tool()
	def set_tempo (alias: str, bpm: float, at_tick: int = 0) -> typing.Dict[str, typing.Any]:
		"""Set or change the tempo (BPM) at a tick position. Use tick 0 for the initial tempo."""
		return mozart.editor.set_tempo(registry, alias, bpm, at_tick)

	@mcp.tool()
	def set_time_signature (alias: str, numerator: int, denominator: int, at_tick: int = 0) -> typing.Dict[str, typing.Any]:
		"""Set or change the time signature at a tick position. Use tick 0 for the initial signature."""
		return mozart.editor.set_time_signature(registry, alias, numerator, denominator, at_tick)

	@mcp.tool()
	def add_track (alias: str, name: typing.Optional[str] = None, instrument: typing.Optional[int] = None) -> typing.Dict[str, typing.Any]:
		"""Add a new empty track. instrument is a General MIDI program number (0-127)."""
		return mozart.editor.add_track(registry, alias, name, instrument)

	@mcp.tool()
	def set_instrument (alias: str, track: int, instrument: int) -> typing.Dict[str, typing.Any]:
		"""Change the instrument (program) on a track, using General MIDI numbering (0-127)."""
		return mozart.editor.set_instrument(registry, alias, track, instrument)

	@mcp.tool()
	def create_midi (
		alias: str,
		name: typing.Optional[str] = None,
		bpm: typing.Optional[float] = None,
		numerator: typing.Optional[int] = None,
		denominator: typing.Optional[int] = None,
		ppq: typing.Optional[int] = None,
		file_path: typing.Optional[str] = None,
	) -> typing.Dict[str, typing.Any]:
		"""Create a new empty MIDI file in memory with an initial tempo, time signature and name.

		file_path sets the default save location.
		"""
		options = mozart.registry.CreateOptions(
			name = name,
			bpm = bpm,
			numerator = numerator,
			denominator = denominator,
			ppq = ppq,
			path = file_path
		)
		return registry.create(alias, options)

	@mcp.tool()
	async def save_midi (alias: str, output_path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
		"""Save a MIDI file to disk. Uses the stored path unless output_path is given."""
		return await registry.save(alias, output_path)

	@mcp.tool()
	def list_loaded () -> typing.List[typing.Dict[str, typing.Any]]:
		"""List all loaded MIDI files and whether they have unsaved changes."""
		return [dataclasses.asdict(info) for info in registry.list()]

	@mcp.tool()
	def unload_midi (alias: str) -> typing.Dict[str, typing.Any]:
		"""Unload a MIDI file from memory. Reports whether it had unsaved changes."""
		return registry.unload(alias)

	return mcp
