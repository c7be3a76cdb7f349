"""Error kinds raised by the document engine.

Every error derives from ``MozartError`` and from the closest built-in
exception, so callers can catch either ``mozart.errors.NotFoundError`` or a
plain ``LookupError`` / ``ValueError`` / ``OSError``.

- ``NotFoundError`` - an alias or track index does not exist.
- ``InvalidArgumentError`` - a value is malformed or outside its domain
  (pitch names, grid sizes, save paths, time signatures).
- ``IOFailureError`` - reading or writing a file failed.
- ``FormatError`` - the bytes of a MIDI file could not be parsed.
"""


class MozartError (Exception):

	"""Base class for all engine errors."""


class NotFoundError (MozartError, LookupError):

	"""An alias or track index does not exist."""


class InvalidArgumentError (MozartError, ValueError):

	"""An argument is malformed or outside its allowed range."""


class IOFailureError (MozartError, OSError):

	"""A filesystem read or write failed."""


class FormatError (MozartError, ValueError):

	"""MIDI file bytes could not be decoded."""
