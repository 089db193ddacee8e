"""Tabular input data: rows, datasets and per-stream data points.

A consolidated data row looks like::

	2008-02,,,,meter,1,4,SunnyBeam,0.142857,3.54

Field 0 is the date (``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``). After that
each data stream has three fields: source name, coverage (fraction of the
period the source was reporting) and value. Stream numbers are 1-based.
"""

import dataclasses
import logging
import math
import os
import typing

import statshouse.errors


logger = logging.getLogger(__name__)


Row = typing.Tuple[str, ...]

FIELDS_PER_STREAM = 3


class Padding:

	"""Marker for a padding slot in a proto-bar or dataset.

	A padding slot is a position with no data row at all, as distinct from a
	row whose stream fields are empty.
	"""

	_instance: typing.Optional["Padding"] = None

	def __new__ (cls) -> "Padding":

		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __repr__ (self) -> str:

		return "PADDING"


PADDING = Padding()

Slot = typing.Union[Row, Padding]


def is_padding (slot: typing.Any) -> bool:

	"""True if the slot is the padding marker."""

	return slot is PADDING


@dataclasses.dataclass(frozen=True)
class Dataset:

	"""An ordered, immutable sequence of data rows.

	Rows are stored as tuples of strings. Padding markers are allowed so that
	intermediate results (eg proto-bars flattened back out) can be held in
	the same container.
	"""

	rows: typing.Tuple[Slot, ...] = ()

	def __post_init__ (self) -> None:

		rows = tuple(r if is_padding(r) else tuple(r) for r in self.rows)

		for row in rows:
			if is_padding(row):
				continue
			if not all(isinstance(field, str) for field in row):
				raise statshouse.errors.InvalidArgument("Row fields must be strings")

		object.__setattr__(self, "rows", rows)

	def __len__ (self) -> int:

		return len(self.rows)

	def __iter__ (self) -> typing.Iterator[Slot]:

		return iter(self.rows)

	def __getitem__ (self, index: int) -> Slot:

		return self.rows[index]

	def first_row (self) -> typing.Optional[Row]:

		"""Return the first real (non-padding) row, or None if there is none."""

		for row in self.rows:
			if not is_padding(row):
				return typing.cast(Row, row)
		return None

	def data_rows (self) -> typing.Iterator[Row]:

		"""Iterate over real rows, skipping padding."""

		for row in self.rows:
			if not is_padding(row):
				yield typing.cast(Row, row)


def parse_float (text: str) -> typing.Optional[float]:

	"""Parse a numeric field, returning None if it is not a number.

	The result may be non-finite (``"NaN"``, ``"Infinity"``); callers decide
	what to do with those.
	"""

	text = text.strip()

	if not text or "_" in text:
		return None

	if text in ("Infinity", "+Infinity"):
		return math.inf
	if text == "-Infinity":
		return -math.inf

	try:
		return float(text)
	except ValueError:
		return None


@dataclasses.dataclass(frozen=True)
class Datum:

	"""One stream's data point from one row.

	Any part may be missing. A present source name is never empty, a present
	coverage is finite and non-negative, and a present value is finite.
	"""

	source: typing.Optional[str] = None
	coverage: typing.Optional[float] = None
	value: typing.Optional[float] = None

	EMPTY: typing.ClassVar["Datum"]

	def __post_init__ (self) -> None:

		if self.source is not None and self.source == "":
			raise statshouse.errors.InvalidArgument("Source name must not be empty; use None")

		if self.coverage is not None and (not math.isfinite(self.coverage) or self.coverage < 0):
			raise statshouse.errors.InvalidArgument(f"Coverage must be finite and non-negative: {self.coverage}")

		if self.value is not None and not math.isfinite(self.value):
			raise statshouse.errors.InvalidArgument(f"Value must be finite: {self.value}")

	@property
	def is_empty (self) -> bool:

		return self.source is None and self.coverage is None and self.value is None


Datum.EMPTY = Datum()


def extract_datum (stream: int, row: typing.Optional[Slot]) -> Datum:

	"""Extract the data point for a 1-based stream from a row.

	Missing fields, unparseable numbers, negative or non-finite coverage and
	non-finite values all come back as None parts. Padding, a missing row,
	or a stream beyond the end of the row give ``Datum.EMPTY``.
	"""

	if row is None or is_padding(row) or stream < 1:
		return Datum.EMPTY

	row = typing.cast(Row, row)
	value_index = stream * FIELDS_PER_STREAM

	if value_index >= len(row):
		return Datum.EMPTY

	source: typing.Optional[str] = row[value_index - 2] or None

	coverage = parse_float(row[value_index - 1])
	if coverage is not None and (not math.isfinite(coverage) or coverage < 0):
		coverage = None

	value = parse_float(row[value_index])
	if value is not None and not math.isfinite(value):
		value = None

	if source is None and coverage is None and value is None:
		return Datum.EMPTY

	return Datum(source=source, coverage=coverage, value=value)


def extract_source_name (dataset: Dataset, stream: int) -> typing.Optional[str]:

	"""Return the first non-empty source name for a stream, or None."""

	if stream < 1:
		raise statshouse.errors.InvalidArgument(f"Stream must be >= 1: {stream}")

	field_number = stream * FIELDS_PER_STREAM - 2

	for row in dataset.data_rows():
		if field_number < len(row) and row[field_number]:
			return row[field_number]

	return None


# ---------------------------------------------------------------------------
# CSV input
# ---------------------------------------------------------------------------

def read_csv (source: typing.Union[str, typing.Iterable[str]]) -> Dataset:

	"""Parse consolidated CSV text into a dataset.

	Blank lines and lines starting with ``#`` are skipped. Fields are split
	on plain commas (no quoting). A row with an empty date field is a
	``FormatError``.
	"""

	lines = source.splitlines() if isinstance(source, str) else source
	rows: typing.List[Row] = []

	for line_number, line in enumerate(lines, start=1):

		line = line.rstrip("\r\n")

		if not line or line.startswith("#"):
			continue

		fields = tuple(line.split(","))

		if not fields[0]:
			raise statshouse.errors.FormatError(f"Line {line_number}: empty date field")

		rows.append(fields)

	logger.debug(f"Read {len(rows)} data rows")

	return Dataset(rows=tuple(rows))


def load_csv (path: typing.Union[str, os.PathLike]) -> Dataset:

	"""Read consolidated CSV data from a file."""

	with open(path, "r", encoding="utf-8") as f:
		dataset = read_csv(f)

	logger.info(f"Loaded {len(dataset)} rows from {path}")

	return dataset
