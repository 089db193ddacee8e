"""Errors raised by the statshouse pipeline.

Every stage either returns a complete, valid result or raises one of these.
Bad individual data values are not errors: they become missing data or
rests where they are read.
"""


class StatsHouseError (Exception):

	"""Base class for all statshouse errors."""


class InvalidArgument (StatsHouseError, ValueError):

	"""A required input is missing or a constructor value is out of range."""


class FormatError (StatsHouseError, ValueError):

	"""Input data has an unrecognised or inconsistent shape."""


class StructuralInconsistency (StatsHouseError, ValueError):

	"""Tracks, bars or the section plan disagree about the shape of a tune."""


class Unimplemented (StatsHouseError, NotImplementedError):

	"""A named generation variant exists but has no algorithm behind it."""
