"""Mapping data points to notes.

Two mappings are used:

- **Scaled** (:func:`to_note`, :func:`datum_to_note`): the value is turned
  into a number of scale steps, so the peak value lands ``octaves`` octaves
  above the root and everything is quantised to the scale.
- **Linear** (:func:`datum_to_linear_note`): the value is turned straight
  into semitones above the root; used by the plain and gentle styles.

In both, a missing value, missing or zero coverage gives a rest (``None``).
Partial coverage makes the note quieter.
"""

import dataclasses
import math
import typing

import statshouse.constants
import statshouse.constants.midi
import statshouse.data
import statshouse.errors
import statshouse.scale


PRIMARY_VELOCITY = statshouse.constants.MAX_MELODY_VELOCITY
SECONDARY_VELOCITY = (2 * statshouse.constants.MAX_MELODY_VELOCITY) // 3

LINEAR_PRIMARY_VELOCITY = statshouse.constants.DEFAULT_MELODY_VELOCITY
LINEAR_SECONDARY_VELOCITY = (2 * statshouse.constants.DEFAULT_MELODY_VELOCITY) // 3

# Semitone span of the linear mapping, from the root up.
LINEAR_RANGE = 2 * statshouse.scale.SEMITONES_PER_OCTAVE - 1


@dataclasses.dataclass(frozen=True)
class NoteAndVelocity:

	"""A sounding note. Rests are represented by ``None``, never by this."""

	note: int
	velocity: int

	def __post_init__ (self) -> None:

		if not 0 <= self.note <= statshouse.constants.midi.MAX_DATA_BYTE:
			raise statshouse.errors.InvalidArgument(f"Note out of range: {self.note}")

		if not 0 <= self.velocity <= statshouse.constants.midi.MAX_DATA_BYTE:
			raise statshouse.errors.InvalidArgument(f"Velocity out of range: {self.velocity}")


def round_half_up (x: float) -> int:

	"""Round to nearest, halves upwards (2.5 → 3, -2.5 → -2)."""

	return math.floor(x + 0.5)


def _clamp_note (note: float) -> int:

	return int(max(0, min(statshouse.constants.midi.MAX_DATA_BYTE, note)))


def _velocity (base: int, coverage: float) -> int:

	"""Scale a velocity down for partial coverage; never below 1."""

	if coverage < 1:
		return int(max(1, min(statshouse.constants.midi.MAX_DATA_BYTE, base * coverage)))

	return base


def _sounds (datum: statshouse.data.Datum) -> bool:

	return datum.value is not None and datum.coverage is not None and datum.coverage > 0


def to_note (
	datum: statshouse.data.Datum,
	is_primary: bool,
	scale: statshouse.scale.Scale,
	octave_offset: int,
	scale_position: float
) -> typing.Optional[NoteAndVelocity]:

	"""
	Quantise a scale position to a note in the given scale.

	Parameters:
		datum: The data point; supplies coverage and decides rests.
		is_primary: True for a main (or heterogeneous) stream, which plays
		            louder.
		scale: Scale to quantise to.
		octave_offset: Whole octaves added above the root.
		scale_position: Number of scale steps above the root, usually the
		                value times a scaling factor from the data bounds.

	Returns:
		The note, or None for a rest (empty datum, missing or negative value,
		missing or non-positive coverage).
	"""

	if not _sounds(datum) or datum.value < 0:
		return None

	steps = max(0, round_half_up(scale_position))
	offset = scale.note_offset(steps) + statshouse.scale.SEMITONES_PER_OCTAVE * octave_offset
	note = _clamp_note(statshouse.constants.ROOT_NOTE + offset)

	base = PRIMARY_VELOCITY if is_primary else SECONDARY_VELOCITY

	return NoteAndVelocity(note=note, velocity=_velocity(base, datum.coverage))


def _position (value: float, mult: float, span: float, max_val: float) -> float:

	if math.isfinite(mult):
		return value * mult

	# A subnormal maximum overflows the factor; divide first instead.
	return value / max_val * span


def scaling_factor (scale: statshouse.scale.Scale, octaves: int, max_val: float) -> float:

	"""Scale steps per unit value so that ``max_val`` spans ``octaves`` octaves."""

	if octaves < 1:
		raise statshouse.errors.InvalidArgument(f"Octaves must be at least 1: {octaves}")

	if not math.isfinite(max_val) or max_val < 0:
		raise statshouse.errors.InvalidArgument(f"Maximum value must be finite and non-negative: {max_val}")

	return (octaves * len(scale)) / (max_val if max_val > 0 else 1)


def datum_to_note (
	datum: statshouse.data.Datum,
	is_primary: bool,
	scale: statshouse.scale.Scale,
	octaves: int,
	max_val: float
) -> typing.Optional[NoteAndVelocity]:

	"""
	Map a data point into ``octaves`` octaves of the scale above the root.

	Example:
		```python
		d = Datum(coverage=1, value=1)
		datum_to_note(d, True, CHROMATIC, 2, 4)  # → note 66
		datum_to_note(d, True, MAJOR, 2, 4)      # → note 67
		```
	"""

	mult = scaling_factor(scale, octaves, max_val)

	if datum.value is None:
		return None

	return to_note(datum, is_primary, scale, 0, _position(datum.value, mult, octaves * len(scale), max_val))


def linear_scaling_factor (max_val: float) -> float:

	"""Semitones per unit value for the linear mapping."""

	return LINEAR_RANGE / max_val if max_val > 0 else 1


def linear_position (value: float, max_val: float) -> float:

	"""Semitones above the root for ``value``; ``max_val`` maps to the top of the range."""

	return _position(value, linear_scaling_factor(max_val), LINEAR_RANGE, max_val)


def datum_to_linear_note (
	datum: statshouse.data.Datum,
	is_primary: bool,
	max_val: float
) -> typing.Optional[NoteAndVelocity]:

	"""Map a data point linearly to semitones above the root, clamped to MIDI range."""

	if not _sounds(datum):
		return None

	note = _clamp_note(statshouse.constants.ROOT_NOTE + linear_position(datum.value, max_val))
	base = LINEAR_PRIMARY_VELOCITY if is_primary else LINEAR_SECONDARY_VELOCITY

	return NoteAndVelocity(note=note, velocity=_velocity(base, datum.coverage))
