"""Cadence detection and whole-dataset bounds.

The cadence (yearly, monthly, daily) is read from the shape of the first
date. Bounds summarise the dataset for note scaling: how many streams there
are, which one is busiest, and the largest value seen.
"""

import dataclasses
import enum
import logging
import math
import typing

import statshouse.constants
import statshouse.data
import statshouse.errors


logger = logging.getLogger(__name__)


class Cadence (enum.Enum):

	"""Sampling period of a dataset.

	Each member carries ``(date_length, notes_per_bar, cycle, bars_cycle)``:

	- ``notes_per_bar``: data rows per proto-bar.
	- ``cycle``: alignment cycle length in rows, 0 if the cadence has no
	  natural cycle (yearly data cannot be calendar-aligned).
	- ``bars_cycle``: natural section length in bars, 0 if none.
	"""

	YEARLY = (4, 4, 0, 0)
	MONTHLY = (7, 12, 12, 0)
	DAILY = (10, 32, 32, 12)

	def __init__ (self, date_length: int, notes_per_bar: int, cycle: int, bars_cycle: int) -> None:

		self.date_length = date_length
		self.notes_per_bar = notes_per_bar
		self.cycle = cycle
		self.bars_cycle = bars_cycle

	@property
	def can_align (self) -> bool:

		return self.cycle != 0


def detect_cadence (dataset: statshouse.data.Dataset) -> Cadence:

	"""Detect the cadence from the length of the first row's date field.

	An empty dataset is treated as yearly.
	"""

	row = dataset.first_row()

	if row is None:
		return Cadence.YEARLY

	date_length = len(row[0])

	for cadence in Cadence:
		if cadence.date_length == date_length:
			return cadence

	raise statshouse.errors.FormatError(f"Cannot determine cadence from date '{row[0]}'")


@dataclasses.dataclass(frozen=True)
class DataBounds:

	"""Summary bounds over a whole dataset.

	``main_stream`` is 1-based, 0 if there is no data at all.
	"""

	streams: int
	main_stream: int
	max_val: float

	def __post_init__ (self) -> None:

		if not 0 <= self.streams <= statshouse.constants.MAX_DATA_STREAMS:
			raise statshouse.errors.InvalidArgument(f"Stream count out of range: {self.streams}")

		if not 0 <= self.main_stream <= self.streams:
			raise statshouse.errors.InvalidArgument(f"Main stream out of range 0-{self.streams}: {self.main_stream}")

		if not math.isfinite(self.max_val) or self.max_val < 0:
			raise statshouse.errors.InvalidArgument(f"Maximum value must be finite and non-negative: {self.max_val}")

	def is_main_stream (self, stream: int) -> bool:

		return stream == self.main_stream


def count_streams (dataset: statshouse.data.Dataset) -> int:

	"""Count streams from the first row alone."""

	row = dataset.first_row()

	if row is None:
		return 0

	return (len(row) - 1) // statshouse.data.FIELDS_PER_STREAM


def max_value (dataset: statshouse.data.Dataset) -> float:

	"""Largest finite positive value in any stream, or 0."""

	result = 0.0

	for row in dataset.data_rows():
		for j in range(statshouse.data.FIELDS_PER_STREAM, len(row), statshouse.data.FIELDS_PER_STREAM):
			v = statshouse.data.parse_float(row[j])
			if v is not None and math.isfinite(v) and v > result:
				result = v

	return result


def busiest_stream (dataset: statshouse.data.Dataset, limit: typing.Optional[int] = None) -> int:

	"""1-based stream with the most non-empty values; lowest wins ties; 0 if none.

	Only streams up to ``limit`` are considered when it is given, so that the
	result is always a stream that will be rendered.
	"""

	counts: typing.Dict[int, int] = {}

	for row in dataset.data_rows():
		for j in range(statshouse.data.FIELDS_PER_STREAM, len(row), statshouse.data.FIELDS_PER_STREAM):
			stream = j // statshouse.data.FIELDS_PER_STREAM
			if row[j] and (limit is None or stream <= limit):
				counts[stream] = counts.get(stream, 0) + 1

	best_stream = 0
	best_count = 0

	for stream in sorted(counts):
		if counts[stream] > best_count:
			best_stream = stream
			best_count = counts[stream]

	return best_stream


def compute_bounds (dataset: statshouse.data.Dataset) -> DataBounds:

	"""Compute stream count (capped), busiest stream and peak value."""

	streams = count_streams(dataset)

	if streams > statshouse.constants.MAX_DATA_STREAMS:
		logger.warning(f"{streams} data streams, only the first {statshouse.constants.MAX_DATA_STREAMS} will be used")
		streams = statshouse.constants.MAX_DATA_STREAMS

	bounds = DataBounds(
		streams = streams,
		main_stream = busiest_stream(dataset, streams),
		max_val = max_value(dataset)
	)

	logger.debug(f"Data bounds: {bounds}")

	return bounds
