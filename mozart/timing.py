"""Conversions between ticks and musical coordinates.

Measure boundaries are found by walking forward from tick 0, one measure at
a time, using the time signature in effect at the start of each measure. A
closed-form formula breaks as soon as the time signature changes anywhere
after tick 0, so every conversion here is built on that walk.

``MeasureGrid`` caches the boundaries it has walked so far. The cache is
dropped whenever the temporal map's revision changes, and it extends the
walk with exactly the same arithmetic, so cached and uncached boundaries
are identical.

Measures and beats are 1-based throughout.
"""

import bisect
import logging
import math
import typing

import mozart.errors
import mozart.temporal_map


logger = logging.getLogger(__name__)


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, with ties going to the larger value."""

	return int(math.floor(value + 0.5))


def round_to (value: float, places: int) -> float:

	"""Round half-up to a number of decimal places, for reporting."""

	scale = 10 ** places

	return math.floor(value * scale + 0.5) / scale


class MeasureGrid:

	"""
	Measure boundaries of a document, derived from its time signatures.

	Boundary ticks are floats: a denominator that is not a power of two
	(e.g. 3/6) can put a boundary between two ticks. Callers round when they
	turn a boundary into a note position.
	"""

	def __init__ (self, ppq: int, temporal_map: mozart.temporal_map.TemporalMap) -> None:

		self.ppq = ppq
		self.temporal_map = temporal_map

		self._starts: typing.List[float] = [0.0]
		self._revision = temporal_map.revision


	def ticks_per_measure (self, tick: float) -> float:

		"""Length of a measure that starts at ``tick``."""

		numerator, denominator = self.temporal_map.time_signature_at(tick)

		return self.ppq * numerator * 4 / denominator


	def ticks_per_beat (self, tick: float) -> float:

		"""Length of one beat (one denominator unit) at ``tick``."""

		_, denominator = self.temporal_map.time_signature_at(tick)

		return self.ppq * 4 / denominator


	def measure_to_tick_range (self, measure: int) -> typing.Tuple[float, float]:

		"""
		Return the ``[start, end)`` tick interval of a 1-based measure.

		Measure numbers below 1 are treated as measure 1.
		"""

		measure = max(1, measure)

		self._sync()

		while len(self._starts) < measure:
			self._extend()

		start = self._starts[measure - 1]

		return start, start + self._step(start)


	def measure_start (self, measure: int) -> float:

		start, _ = self.measure_to_tick_range(measure)

		return start


	def tick_to_measure_beat (self, tick: float) -> typing.Tuple[int, float]:

		"""
		Return the ``(measure, beat)`` position of ``tick``.

		The beat is fractional, at least 1 and less than the numerator + 1.
		"""

		self._sync()

		while self._starts[-1] + self._step(self._starts[-1]) <= tick:
			self._extend()

		index = max(0, bisect.bisect_right(self._starts, tick) - 1)
		start = self._starts[index]
		beat = 1 + (tick - start) / self.ticks_per_beat(start)

		return index + 1, beat


	def measures_covering (self, tick: float) -> int:

		"""Number of whole measures needed to reach ``tick`` (0 for tick 0)."""

		if tick <= 0:
			return 0

		measure, _ = self.tick_to_measure_beat(tick)
		start = self._starts[measure - 1]

		# A tick exactly on a boundary is covered by the measures before it.
		return measure if tick > start else measure - 1


	def _step (self, start: float) -> float:

		ticks = self.ticks_per_measure(start)

		if ticks <= 0:
			raise mozart.errors.InvalidArgumentError(
				f"Measure starting at tick {start} has non-positive length {ticks}"
			)

		return ticks


	def _extend (self) -> None:

		last = self._starts[-1]
		self._starts.append(last + self._step(last))


	def _sync (self) -> None:

		if self._revision == self.temporal_map.revision:
			return

		logger.debug(f"Temporal map changed (revision {self.temporal_map.revision}); dropping {len(self._starts)} cached measure boundaries")

		self._starts = [0.0]
		self._revision = self.temporal_map.revision


def tick_to_seconds (temporal_map: mozart.temporal_map.TemporalMap, ppq: int, tick: float) -> float:

	"""
	Convert an absolute tick to seconds by integrating the tempo map.

	Ticks before the first tempo event run at the default tempo.
	"""

	seconds = 0.0
	position = 0.0
	bpm = temporal_map.tempo_at(0)

	for event in temporal_map.tempo_events:

		if event.tick <= position:
			bpm = event.bpm
			continue

		if event.tick >= tick:
			break

		seconds += (event.tick - position) * 60.0 / (bpm * ppq)
		position = event.tick
		bpm = event.bpm

	seconds += (tick - position) * 60.0 / (bpm * ppq)

	return seconds
