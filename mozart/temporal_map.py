"""Piecewise-constant tempo and time signature maps over the tick axis.

Both maps are right-continuous step functions: the value in effect at tick
``T`` is that of the last event with ``tick <= T``. Before the first event
(or when there are no events at all) the MIDI defaults apply: 120 BPM and
4/4.

Events are kept sorted by tick with at most one event per tick; writing at
an existing tick replaces the previous event.
"""

import dataclasses
import logging
import typing

import mozart.constants
import mozart.errors


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class TempoEvent:

	"""A tempo change at an absolute tick."""

	tick: int
	bpm: float


@dataclasses.dataclass
class TimeSignatureEvent:

	"""A time signature change at an absolute tick."""

	tick: int
	numerator: int
	denominator: int

	@property
	def signature (self) -> str:
		return f"{self.numerator}/{self.denominator}"


class TemporalMap:

	"""
	Tempo and time signature events for one document.

	``revision`` increases on every change so that derived data (such as the
	measure boundaries cached by ``mozart.timing.MeasureGrid``) can tell when
	it is stale.
	"""

	def __init__ (self) -> None:

		self.tempo_events: typing.List[TempoEvent] = []
		self.time_signature_events: typing.List[TimeSignatureEvent] = []
		self.revision = 0


	def tempo_at (self, tick: float) -> float:

		"""Return the BPM in effect at ``tick``."""

		bpm = mozart.constants.DEFAULT_BPM

		for event in self.tempo_events:
			if event.tick > tick:
				break
			bpm = event.bpm

		return bpm


	def time_signature_at (self, tick: float) -> typing.Tuple[int, int]:

		"""Return the ``(numerator, denominator)`` in effect at ``tick``."""

		signature = (mozart.constants.DEFAULT_NUMERATOR, mozart.constants.DEFAULT_DENOMINATOR)

		for event in self.time_signature_events:
			if event.tick > tick:
				break
			signature = (event.numerator, event.denominator)

		return signature


	def set_tempo (self, tick: int, bpm: float) -> None:

		"""
		Insert or replace the tempo event at ``tick``.

		Raises:
			InvalidArgumentError: If ``tick`` is negative or ``bpm`` is not positive.
		"""

		_check_tick(tick)

		if bpm <= 0:
			raise mozart.errors.InvalidArgumentError("BPM must be positive")

		self.tempo_events = [event for event in self.tempo_events if event.tick != tick]
		self.tempo_events.append(TempoEvent(tick=tick, bpm=bpm))
		self.tempo_events.sort(key=lambda event: event.tick)
		self.revision += 1

		logger.debug(f"Tempo {bpm} BPM set at tick {tick}")


	def set_time_signature (self, tick: int, numerator: int, denominator: int) -> None:

		"""
		Insert or replace the time signature event at ``tick``.

		Any positive denominator is accepted; whether it can be written to a
		MIDI file is checked when the document is saved.

		Raises:
			InvalidArgumentError: If ``tick`` is negative or either value is not positive.
		"""

		_check_tick(tick)

		if numerator <= 0 or denominator <= 0:
			raise mozart.errors.InvalidArgumentError("Time signature numerator and denominator must be positive")

		self.time_signature_events = [event for event in self.time_signature_events if event.tick != tick]
		self.time_signature_events.append(TimeSignatureEvent(tick=tick, numerator=numerator, denominator=denominator))
		self.time_signature_events.sort(key=lambda event: event.tick)
		self.revision += 1

		logger.debug(f"Time signature {numerator}/{denominator} set at tick {tick}")


def _check_tick (tick: int) -> None:

	if tick < 0:
		raise mozart.errors.InvalidArgumentError("Tick position cannot be negative")
