import pytest

import statshouse.data
import statshouse.errors
import statshouse.notes
import statshouse.scale


def _datum (value: float, coverage: float = 1) -> statshouse.data.Datum:

	return statshouse.data.Datum(coverage=coverage, value=value)


def _note (value: float, scale: statshouse.scale.Scale, octaves: int, max_val: float) -> int:

	return statshouse.notes.datum_to_note(_datum(value), True, scale, octaves, max_val).note


def test_datum_to_note_known_mappings () -> None:

	"""Values map into whole octaves above middle C."""

	assert _note(0, statshouse.scale.CHROMATIC, 1, 0) == 60
	assert _note(1, statshouse.scale.CHROMATIC, 1, 1) == 72
	assert _note(1, statshouse.scale.CHROMATIC, 2, 1) == 84
	assert _note(1, statshouse.scale.MAJOR, 2, 1) == 84


def test_datum_to_note_quantises_to_scale () -> None:

	"""A quarter of two octaves: six semitones, or (rounded up) four major steps."""

	assert _note(1, statshouse.scale.CHROMATIC, 2, 4) == 66
	assert _note(1, statshouse.scale.MAJOR, 2, 4) == 67


def test_datum_to_note_rests () -> None:

	"""Negative, missing or uncovered values are rests."""

	assert statshouse.notes.datum_to_note(_datum(-1), True, statshouse.scale.CHROMATIC, 1, 1) is None
	assert statshouse.notes.datum_to_note(statshouse.data.Datum.EMPTY, True, statshouse.scale.CHROMATIC, 1, 1) is None
	assert statshouse.notes.datum_to_note(_datum(1, coverage=0), True, statshouse.scale.CHROMATIC, 1, 1) is None


def test_datum_to_note_is_deterministic () -> None:

	"""The same input always gives the same note."""

	results = {statshouse.notes.datum_to_note(_datum(3.3, 0.9), False, statshouse.scale.DORIAN, 2, 10) for _ in range(5)}

	assert len(results) == 1


def test_velocity_follows_coverage () -> None:

	"""Secondary streams are quieter; partial coverage quieter still."""

	full = statshouse.notes.datum_to_note(_datum(1), True, statshouse.scale.CHROMATIC, 1, 1)
	secondary = statshouse.notes.datum_to_note(_datum(1), False, statshouse.scale.CHROMATIC, 1, 1)
	partial = statshouse.notes.datum_to_note(_datum(1, coverage=0.5), True, statshouse.scale.CHROMATIC, 1, 1)

	assert full.velocity == statshouse.notes.PRIMARY_VELOCITY
	assert secondary.velocity == statshouse.notes.SECONDARY_VELOCITY
	assert partial.velocity == statshouse.notes.PRIMARY_VELOCITY // 2


def test_notes_clamp_to_midi_range () -> None:

	"""Notes never leave 0-127."""

	nv = statshouse.notes.to_note(_datum(1), True, statshouse.scale.CHROMATIC, 10, 0)

	assert nv.note == 127


def test_round_half_up () -> None:

	"""Halves round towards positive infinity."""

	assert statshouse.notes.round_half_up(2.5) == 3
	assert statshouse.notes.round_half_up(2.49) == 2
	assert statshouse.notes.round_half_up(-2.5) == -2


def test_scaling_factor_validation () -> None:

	"""At least one octave, and a sane maximum."""

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.notes.scaling_factor(statshouse.scale.MAJOR, 0, 1)

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.notes.scaling_factor(statshouse.scale.MAJOR, 1, -1)


def test_linear_notes () -> None:

	"""The linear mapping spans 23 semitones up to the maximum."""

	assert statshouse.notes.datum_to_linear_note(_datum(4), True, 4).note == 83
	assert statshouse.notes.datum_to_linear_note(_datum(0), True, 4).note == 60
	assert statshouse.notes.datum_to_linear_note(_datum(1), True, 4).velocity == statshouse.notes.LINEAR_PRIMARY_VELOCITY
	assert statshouse.notes.datum_to_linear_note(statshouse.data.Datum.EMPTY, True, 4) is None


def test_tiny_maximum () -> None:

	"""A subnormal peak still maps to the top of the range."""

	assert _note(1e-320, statshouse.scale.CHROMATIC, 2, 1e-320) == 84
	assert _note(5e-321, statshouse.scale.CHROMATIC, 2, 1e-320) == 72
	assert _note(0, statshouse.scale.CHROMATIC, 2, 1e-320) == 60

	assert statshouse.notes.datum_to_linear_note(_datum(1e-320), True, 1e-320).note == 83
	assert statshouse.notes.datum_to_linear_note(_datum(0), True, 1e-320).note == 60
