"""Chopping data rows into fixed-size proto-bars.

A proto-bar holds exactly ``notes_per_bar`` slots, each a data row or the
padding marker. Unaligned chopping just cuts the rows into consecutive
windows. Aligned chopping puts each row at its calendar position within the
cycle, so that (for example) every bar of monthly data starts in January.
"""

import dataclasses
import logging
import typing

import statshouse.bounds
import statshouse.constants
import statshouse.data
import statshouse.errors
import statshouse.params
import statshouse.progression


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ProtoBar:

	"""A fixed-length window of data rows (or padding) destined for one bar."""

	notes_per_bar: int
	slots: typing.Tuple[statshouse.data.Slot, ...]

	def __post_init__ (self) -> None:

		if self.notes_per_bar < 1:
			raise statshouse.errors.InvalidArgument(f"Notes per bar must be positive: {self.notes_per_bar}")

		slots = tuple(self.slots)

		if len(slots) != self.notes_per_bar:
			raise statshouse.errors.InvalidArgument(f"Proto-bar has {len(slots)} slots, expected {self.notes_per_bar}")

		object.__setattr__(self, "slots", slots)

	def __len__ (self) -> int:

		return self.notes_per_bar

	def __iter__ (self) -> typing.Iterator[statshouse.data.Slot]:

		return iter(self.slots)

	@property
	def padding_count (self) -> int:

		return sum(1 for s in self.slots if statshouse.data.is_padding(s))

	@property
	def is_full (self) -> bool:

		"""True if every slot holds a row."""

		return self.padding_count == 0

	def rows (self) -> typing.List[statshouse.data.Row]:

		"""The real rows in this bar, in order."""

		return [typing.cast(statshouse.data.Row, s) for s in self.slots if not statshouse.data.is_padding(s)]

	@classmethod
	def padded (cls, notes_per_bar: int, slots: typing.Sequence[statshouse.data.Slot]) -> "ProtoBar":

		"""Build a bar from up to ``notes_per_bar`` slots, right-padding the rest."""

		return cls(notes_per_bar, tuple(slots) + (statshouse.data.PADDING,) * (notes_per_bar - len(slots)))

	@classmethod
	def empty (cls, notes_per_bar: int) -> "ProtoBar":

		return cls.padded(notes_per_bar, ())


def chop_simple (notes_per_bar: int, dataset: statshouse.data.Dataset) -> typing.List[ProtoBar]:

	"""Cut rows into consecutive bars, padding the final one."""

	if notes_per_bar < 1:
		raise statshouse.errors.InvalidArgument(f"Notes per bar must be positive: {notes_per_bar}")

	rows = dataset.rows

	return [
		ProtoBar.padded(notes_per_bar, rows[i:i + notes_per_bar])
		for i in range(0, len(rows), notes_per_bar)
	]


def _cycle_position (date: str, notes_per_bar: int) -> int:

	"""1-based position of a date within its cycle (month of year, day of month)."""

	_, dash, last = date.rpartition("-")

	if not dash:
		raise statshouse.errors.FormatError(f"Malformed date (missing '-'): {date}")

	if not last.isdigit():
		raise statshouse.errors.FormatError(f"Malformed date: {date}")

	position = int(last)

	if position < 1:
		raise statshouse.errors.FormatError(f"Malformed date (position < 1): {date}")

	if position > notes_per_bar:
		raise statshouse.errors.FormatError(f"Malformed date (position too high): {date}")

	return position


def chop_aligned (notes_per_bar: int, dataset: statshouse.data.Dataset) -> typing.List[ProtoBar]:

	"""
	Chop rows so that each row sits at its calendar position in the bar.

	Rows are expected in date order with no gaps. The first bar is left-padded
	up to the first row's position. A row whose position is before the
	current slot must be position 1 (the start of the next cycle), which
	closes the current bar. A row beyond the current slot pads forward to it.
	"""

	result: typing.List[ProtoBar] = []
	bar: typing.List[statshouse.data.Slot] = []

	for row in dataset.data_rows():

		current = len(bar) + 1
		position = _cycle_position(row[0], notes_per_bar)

		if position < current:
			if position != 1:
				raise statshouse.errors.FormatError(
					f"Malformed date or missing data: {row[0]}; position={position}, expected={current}"
				)
			result.append(ProtoBar.padded(notes_per_bar, bar))
			bar = []

		elif position > current:
			bar.extend([statshouse.data.PADDING] * (position - current))

		bar.append(row)

		if len(bar) == notes_per_bar:
			result.append(ProtoBar(notes_per_bar, tuple(bar)))
			bar = []

	if bar:
		result.append(ProtoBar.padded(notes_per_bar, bar))

	return result


def chop (
	cadence: statshouse.bounds.Cadence,
	dataset: statshouse.data.Dataset,
	align: bool = False
) -> typing.List[ProtoBar]:

	"""
	Chop a dataset into proto-bars of the cadence's natural size.

	Rows are never reordered or dropped, so the real rows of the result, in
	order, are exactly the rows of the dataset.
	"""

	if align and not cadence.can_align:
		raise statshouse.errors.InvalidArgument(f"Cannot align {cadence.name.lower()} data")

	if align:
		return chop_aligned(cadence.notes_per_bar, dataset)

	return chop_simple(cadence.notes_per_bar, dataset)


def should_align (cadence: statshouse.bounds.Cadence, params: statshouse.params.GenerationParameters) -> bool:

	"""Align calendar data for any produced (non-plain) style."""

	return cadence.can_align and params.style.level > statshouse.params.ProductionLevel.NONE


def split_and_align (
	params: statshouse.params.GenerationParameters,
	dataset: statshouse.data.Dataset
) -> typing.List[ProtoBar]:

	"""
	Split the data into verse proto-bars for a tune.

	Aligns where :func:`should_align` says so. For danceable styles with
	plenty of bars, a mostly-empty final and then first bar may be dropped
	so the tune does not start or end on a near-silent bar.
	"""

	cadence = statshouse.bounds.detect_cadence(dataset)
	align = should_align(cadence, params)
	bars = chop(cadence, dataset, align)

	if params.style.level == statshouse.params.ProductionLevel.DANCEABLE and len(bars) > statshouse.constants.MIN_SECTION_BARS + 1:

		# Trim on a coin flip; always trim with no randomness.
		rng = statshouse.progression.ProgressionGroup(params, "split").rng(len(dataset))
		trim = params.no_randomness or statshouse.progression.next_boolean(rng)

		if trim:
			max_missing = cadence.notes_per_bar // 4

			if bars[-1].padding_count > max_missing:
				logger.debug("Dropping partial final bar")
				bars = bars[:-1]

			if bars[0].padding_count > max_missing:
				logger.debug("Dropping partial first bar")
				bars = bars[1:]

	logger.debug(f"Split {len(dataset)} rows into {len(bars)} bars of {cadence.notes_per_bar} (aligned={align})")

	return bars
