import pytest

import mozart.document
import mozart.errors
import mozart.temporal_map
import mozart.timing


def _document (numerator: int = 4, denominator: int = 4, ppq: int = 480) -> mozart.document.Document:

	"""Build a document with a single time signature at tick 0."""

	document = mozart.document.Document(ppq=ppq)
	document.temporal_map.set_tempo(0, 120)
	document.temporal_map.set_time_signature(0, numerator, denominator)

	return document


def test_ticks_per_measure_and_beat () -> None:

	"""Measure and beat lengths follow ppq and the time signature."""

	assert _document(4, 4).grid.ticks_per_measure(0) == 1920
	assert _document(4, 4).grid.ticks_per_beat(0) == 480
	assert _document(3, 4).grid.ticks_per_measure(0) == 1440
	assert _document(6, 8).grid.ticks_per_measure(0) == 1440
	assert _document(6, 8).grid.ticks_per_beat(0) == 240


def test_measure_ranges_in_common_time () -> None:

	"""Measures are consecutive half-open intervals from tick 0."""

	grid = _document().grid

	assert grid.measure_to_tick_range(1) == (0, 1920)
	assert grid.measure_to_tick_range(3) == (3840, 5760)


def test_measure_below_one_is_measure_one () -> None:

	"""Measure 0 and negative measures resolve to the first measure."""

	grid = _document().grid

	assert grid.measure_to_tick_range(0) == grid.measure_to_tick_range(1)
	assert grid.measure_to_tick_range(-3) == grid.measure_to_tick_range(1)


def test_three_four_measure_three_starts_after_two_measures () -> None:

	"""In 3/4 from tick 0, measure 3 starts at 2 x ppq x 3."""

	grid = _document(3, 4).grid

	start, end = grid.measure_to_tick_range(3)

	assert start == 2 * 480 * 3
	assert end - start == 1440


def test_time_signature_change_moves_later_boundaries () -> None:

	"""A change at the start of measure 3 only affects measures from 3 on."""

	document = _document()
	document.temporal_map.set_time_signature(3840, 3, 4)

	assert document.grid.measure_to_tick_range(2) == (1920, 3840)
	assert document.grid.measure_to_tick_range(3) == (3840, 5280)
	assert document.grid.measure_to_tick_range(4) == (5280, 6720)


def test_measure_start_maps_back_to_beat_one () -> None:

	"""Every measure start converts back to (measure, 1) under mixed signatures."""

	document = _document()
	document.temporal_map.set_time_signature(3840, 3, 4)
	document.temporal_map.set_time_signature(6720, 7, 8)
	document.temporal_map.set_time_signature(10080, 5, 4)

	for measure in range(1, 12):
		start, _ = document.grid.measure_to_tick_range(measure)
		assert document.grid.tick_to_measure_beat(start) == (measure, 1.0)


def test_tick_to_measure_beat_fractional () -> None:

	"""Ticks between beats give fractional beats."""

	grid = _document().grid

	assert grid.tick_to_measure_beat(720) == (1, 2.5)
	assert grid.tick_to_measure_beat(1919) == (1, pytest.approx(4.998, abs=0.001))
	assert grid.tick_to_measure_beat(1920) == (2, 1.0)


def test_beats_follow_the_denominator () -> None:

	"""In 6/8 a beat is an eighth note."""

	grid = _document(6, 8).grid

	measure, beat = grid.tick_to_measure_beat(1440 + 720)

	assert measure == 2
	assert beat == 4.0


def test_non_power_of_two_denominator_gives_fractional_boundaries () -> None:

	"""Denominators like 3 still compute, with boundaries between ticks."""

	grid = _document(1, 3, ppq=100).grid

	start, end = grid.measure_to_tick_range(2)

	assert start == pytest.approx(400 / 3)
	assert end == pytest.approx(800 / 3)


def test_cached_boundaries_follow_time_signature_changes () -> None:

	"""Changing the time signature invalidates boundaries computed earlier."""

	document = _document()

	assert document.grid.measure_start(10) == 9 * 1920

	document.temporal_map.set_time_signature(0, 3, 4)

	assert document.grid.measure_start(10) == 9 * 1440
	assert document.grid.tick_to_measure_beat(9 * 1440) == (10, 1.0)


def test_cached_and_fresh_grids_agree () -> None:

	"""A grid that walked far ahead returns the same boundaries as a new one."""

	document = _document()
	document.temporal_map.set_time_signature(1920, 5, 8)
	document.temporal_map.set_time_signature(4320, 3, 4)

	document.grid.measure_start(50)

	fresh = mozart.timing.MeasureGrid(document.ppq, document.temporal_map)

	for measure in range(1, 50):
		assert document.grid.measure_to_tick_range(measure) == fresh.measure_to_tick_range(measure)


def test_non_advancing_walk_fails_fast () -> None:

	"""A zero-length measure raises instead of looping forever."""

	document = _document()
	document.temporal_map.time_signature_events = [mozart.temporal_map.TimeSignatureEvent(tick=0, numerator=0, denominator=4)]
	document.temporal_map.revision += 1

	with pytest.raises(mozart.errors.InvalidArgumentError):
		document.grid.measure_to_tick_range(2)

	with pytest.raises(mozart.errors.InvalidArgumentError):
		document.grid.tick_to_measure_beat(100)


@pytest.mark.parametrize("end_tick, expected", [
	(0, 0),
	(1, 1),
	(1920, 1),
	(1921, 2),
	(3840, 2),
])
def test_measures_covering (end_tick: int, expected: int) -> None:

	"""A tick on a boundary is covered by the measures before it."""

	assert _document().grid.measures_covering(end_tick) == expected


def test_total_measures_without_notes_is_zero () -> None:

	"""Empty documents have no measures."""

	document = _document()
	document.add_track()

	assert document.total_measures() == 0


def test_tick_to_seconds_integrates_tempo_changes () -> None:

	"""Seconds accumulate segment by segment through the tempo map."""

	document = _document()
	document.temporal_map.set_tempo(960, 60)

	assert mozart.timing.tick_to_seconds(document.temporal_map, 480, 960) == pytest.approx(1.0)
	assert mozart.timing.tick_to_seconds(document.temporal_map, 480, 1440) == pytest.approx(2.0)


def test_rounding_helpers_round_half_up () -> None:

	"""Ties go to the larger value, unlike Python's round()."""

	assert mozart.timing.round_half_up(2.5) == 3
	assert mozart.timing.round_half_up(3.5) == 4
	assert mozart.timing.round_half_up(2.49) == 2
	assert mozart.timing.round_to(1.25, 1) == 1.3
