import pytest

import statshouse.bounds
import statshouse.data
import statshouse.errors


def test_detect_cadence (minimal_sample_y: statshouse.data.Dataset, sample_gen_m: statshouse.data.Dataset, sample_daily: statshouse.data.Dataset) -> None:

	"""Date length gives the cadence."""

	assert statshouse.bounds.detect_cadence(minimal_sample_y) == statshouse.bounds.Cadence.YEARLY
	assert statshouse.bounds.detect_cadence(sample_gen_m) == statshouse.bounds.Cadence.MONTHLY
	assert statshouse.bounds.detect_cadence(sample_daily) == statshouse.bounds.Cadence.DAILY


def test_detect_cadence_empty_and_unknown () -> None:

	"""No rows is yearly; an odd date is an error."""

	assert statshouse.bounds.detect_cadence(statshouse.data.Dataset()) == statshouse.bounds.Cadence.YEARLY

	with pytest.raises(statshouse.errors.FormatError):
		statshouse.bounds.detect_cadence(statshouse.data.read_csv("20091,meter,1,2\n"))


def test_cadence_properties () -> None:

	"""Only monthly and daily data can be aligned."""

	assert statshouse.bounds.Cadence.YEARLY.notes_per_bar == 4
	assert statshouse.bounds.Cadence.MONTHLY.notes_per_bar == 12
	assert statshouse.bounds.Cadence.DAILY.notes_per_bar == 32
	assert not statshouse.bounds.Cadence.YEARLY.can_align
	assert statshouse.bounds.Cadence.MONTHLY.can_align
	assert statshouse.bounds.Cadence.DAILY.bars_cycle == 12


def test_bounds_monthly (sample_gen_m: statshouse.data.Dataset) -> None:

	"""Three streams, the first empty; meter is busiest and peaks at 161."""

	bounds = statshouse.bounds.compute_bounds(sample_gen_m)

	assert bounds.streams == 3
	assert bounds.main_stream == 2
	assert bounds.max_val == 161


def test_bounds_yearly (sample_gen_y: statshouse.data.Dataset) -> None:

	"""The peak may come from a stream other than the busiest."""

	bounds = statshouse.bounds.compute_bounds(sample_gen_y)

	assert bounds.streams == 3
	assert bounds.main_stream == 2
	assert bounds.max_val == 4084.42
	assert bounds.is_main_stream(2)
	assert not bounds.is_main_stream(1)


def test_bounds_empty () -> None:

	"""No data gives zero everything."""

	bounds = statshouse.bounds.compute_bounds(statshouse.data.Dataset())

	assert bounds == statshouse.bounds.DataBounds(0, 0, 0.0)


def test_bounds_cap_streams () -> None:

	"""At most four streams are used."""

	dataset = statshouse.data.read_csv("2009" + ",s,1,1" * 6 + "\n")

	assert statshouse.bounds.count_streams(dataset) == 6
	assert statshouse.bounds.compute_bounds(dataset).streams == 4


def test_main_stream_is_a_rendered_stream () -> None:

	"""A busier fifth stream cannot be the main stream."""

	dataset = statshouse.data.read_csv("2009,a,1,1,b,1,,c,1,,d,1,,e,1,5\n2010,a,1,,b,1,2,c,1,,d,1,,e,1,6\n2011,a,1,1,b,1,,c,1,,d,1,,e,1,7\n")

	assert statshouse.bounds.busiest_stream(dataset) == 5
	assert statshouse.bounds.busiest_stream(dataset, 4) == 1
	assert statshouse.bounds.compute_bounds(dataset).main_stream == 1


def test_data_bounds_validation () -> None:

	"""Bounds keep to their ranges."""

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.bounds.DataBounds(5, 1, 1.0)

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.bounds.DataBounds(1, 1, float("inf"))

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.bounds.DataBounds(2, 3, 1.0)
