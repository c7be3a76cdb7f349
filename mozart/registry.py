"""Registry of open documents, keyed by alias.

A ``DocumentRegistry`` is owned by whoever serves requests (one per MCP
server session, one per test). It is not thread-safe: operations on the
same alias must be issued one at a time.

Loading and saving are coroutines because they touch the filesystem; file
reads and writes run in a worker thread via ``asyncio.to_thread`` so the
event loop stays responsive. Everything else is synchronous.
"""

import asyncio
import dataclasses
import logging
import os
import typing

import mozart.constants
import mozart.document
import mozart.errors
import mozart.midi_file
import mozart.timing


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RegistryEntry:

	"""An open document, where it lives on disk and whether it has unsaved edits."""

	document: mozart.document.Document
	path: typing.Optional[str]
	dirty: bool = False


@dataclasses.dataclass
class CreateOptions:

	"""Settings for a new document. Omitted values fall back to the registry defaults."""

	name: typing.Optional[str] = None
	bpm: typing.Optional[float] = None
	numerator: typing.Optional[int] = None
	denominator: typing.Optional[int] = None
	ppq: typing.Optional[int] = None
	path: typing.Optional[str] = None


@dataclasses.dataclass
class Defaults:

	"""Values used by ``create`` when ``CreateOptions`` leaves them out."""

	bpm: float = mozart.constants.DEFAULT_BPM
	numerator: int = mozart.constants.DEFAULT_NUMERATOR
	denominator: int = mozart.constants.DEFAULT_DENOMINATOR
	ppq: int = mozart.constants.DEFAULT_PPQ


@dataclasses.dataclass
class LoadedInfo:

	"""One row of ``DocumentRegistry.list()``."""

	alias: str
	path: typing.Optional[str]
	dirty: bool
	track_count: int
	duration: float


def tempo_list (document: mozart.document.Document, with_time: bool = False) -> typing.List[typing.Dict[str, typing.Any]]:

	"""Describe the tempo events of a document, BPM rounded to one decimal."""

	tempos = []

	for event in document.temporal_map.tempo_events:

		item: typing.Dict[str, typing.Any] = {"bpm": mozart.timing.round_to(event.bpm, 1), "ticks": event.tick}

		if with_time:
			seconds = mozart.timing.tick_to_seconds(document.temporal_map, document.ppq, event.tick)
			item["time"] = mozart.timing.round_to(seconds, 2)

		tempos.append(item)

	return tempos


def time_signature_list (document: mozart.document.Document) -> typing.List[typing.Dict[str, typing.Any]]:

	return [
		{"signature": event.signature, "ticks": event.tick}
		for event in document.temporal_map.time_signature_events
	]


class DocumentRegistry:

	"""
	Open documents keyed by alias.

	Loading or creating with an alias that is already in use replaces the
	previous entry; nothing is merged.
	"""

	def __init__ (self, defaults: typing.Optional[Defaults] = None) -> None:

		self.defaults = defaults or Defaults()
		self._entries: typing.Dict[str, RegistryEntry] = {}


	def __contains__ (self, alias: str) -> bool:
		return alias in self._entries


	def __len__ (self) -> int:
		return len(self._entries)


	def get (self, alias: str) -> RegistryEntry:

		"""
		Return the entry for ``alias``.

		Raises:
			NotFoundError: If no document is open under that alias.
		"""

		entry = self._entries.get(alias)

		if entry is None:
			raise mozart.errors.NotFoundError(f"No MIDI loaded with alias \"{alias}\". Use load_midi first.")

		return entry


	def document (self, alias: str) -> mozart.document.Document:
		return self.get(alias).document


	def mark_dirty (self, alias: str) -> None:
		self.get(alias).dirty = True


	async def load (self, path: str, alias: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:

		"""
		Read and parse a MIDI file and register it.

		Parameters:
			path: File to read; stored in absolute form.
			alias: Name to register under. Defaults to the absolute path.

		Returns:
			A summary of the loaded document.

		Raises:
			IOFailureError: If the file cannot be read.
			FormatError: If the file is not valid MIDI.
		"""

		abs_path = os.path.abspath(path)

		try:
			data = await asyncio.to_thread(_read_bytes, abs_path)
		except OSError as exc:
			raise mozart.errors.IOFailureError(f"Failed to read {abs_path}: {exc}") from exc

		document = mozart.midi_file.parse(data)
		alias = alias or abs_path

		self._replace(alias, RegistryEntry(document=document, path=abs_path, dirty=False))

		logger.info(f"Loaded {abs_path} as '{alias}' ({len(document.tracks)} tracks)")

		return {
			"alias": alias,
			"file_path": abs_path,
			"name": document.name or "(untitled)",
			"format": document.midi_format,
			"ppq": document.ppq,
			"duration": mozart.timing.round_to(document.duration_seconds, 2),
			"track_count": len(document.tracks),
			"tempos": tempo_list(document),
			"time_signatures": time_signature_list(document),
			"total_measures": document.total_measures(),
		}


	def create (self, alias: str, options: typing.Optional[CreateOptions] = None) -> typing.Dict[str, typing.Any]:

		"""
		Register a new empty document with one tempo and one time signature at tick 0.

		The new document starts dirty because it has never been saved.
		"""

		options = options or CreateOptions()

		bpm = options.bpm if options.bpm is not None else self.defaults.bpm
		numerator = options.numerator if options.numerator is not None else self.defaults.numerator
		denominator = options.denominator if options.denominator is not None else self.defaults.denominator
		ppq = options.ppq if options.ppq is not None else self.defaults.ppq

		document = mozart.document.Document(ppq=ppq, name=options.name)
		document.temporal_map.set_tempo(0, bpm)
		document.temporal_map.set_time_signature(0, numerator, denominator)

		path = os.path.abspath(options.path) if options.path else None

		self._replace(alias, RegistryEntry(document=document, path=path, dirty=True))

		logger.info(f"Created '{alias}' at {bpm} BPM, {numerator}/{denominator}, ppq {ppq}")

		return {
			"alias": alias,
			"file_path": path,
			"name": document.name or "(untitled)",
			"ppq": document.ppq,
			"tempo": bpm,
			"time_signature": f"{numerator}/{denominator}",
			"track_count": len(document.tracks),
		}


	async def save (self, alias: str, output_path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:

		"""
		Write a document to disk and clear its dirty flag.

		The document is written to ``output_path`` if given (which then becomes
		its stored path), otherwise to the path it was loaded from or created with.

		Raises:
			NotFoundError: If the alias is not open.
			InvalidArgumentError: If no path is given and none is stored.
			IOFailureError: If the file cannot be written.
		"""

		entry = self.get(alias)
		target = os.path.abspath(output_path) if output_path else entry.path

		if not target:
			raise mozart.errors.InvalidArgumentError("No file path specified and none stored. Provide an output_path.")

		data = mozart.midi_file.serialize(entry.document)

		try:
			await asyncio.to_thread(_write_bytes, target, data)
		except OSError as exc:
			raise mozart.errors.IOFailureError(f"Failed to write {target}: {exc}") from exc

		entry.path = target
		entry.dirty = False

		logger.info(f"Saved '{alias}' to {target} ({len(data)} bytes)")

		return {
			"alias": alias,
			"file_path": target,
			"size": len(data),
			"track_count": len(entry.document.tracks),
			"total_measures": entry.document.total_measures(),
		}


	def unload (self, alias: str) -> typing.Dict[str, typing.Any]:

		"""Close a document, reporting whether it had unsaved changes."""

		entry = self.get(alias)
		del self._entries[alias]

		if entry.dirty:
			logger.warning(f"Unloaded '{alias}' with unsaved changes")
		else:
			logger.info(f"Unloaded '{alias}'")

		return {"alias": alias, "unloaded": True, "had_unsaved_changes": entry.dirty}


	def list (self) -> typing.Iterator[LoadedInfo]:

		"""
		Yield a summary of every open document.

		Each call starts a fresh pass over the current entries, so the result
		always reflects the registry at the time it is consumed.
		"""

		for alias, entry in list(self._entries.items()):
			yield LoadedInfo(
				alias = alias,
				path = entry.path,
				dirty = entry.dirty,
				track_count = len(entry.document.tracks),
				duration = mozart.timing.round_to(entry.document.duration_seconds, 2)
			)


	def _replace (self, alias: str, entry: RegistryEntry) -> None:

		previous = self._entries.get(alias)

		if previous is not None and previous.dirty:
			logger.warning(f"Replacing '{alias}', which had unsaved changes")

		self._entries[alias] = entry


def _read_bytes (path: str) -> bytes:

	with open(path, 'rb') as f:
		return f.read()


def _write_bytes (path: str, data: bytes) -> None:

	with open(path, 'wb') as f:
		f.write(data)
