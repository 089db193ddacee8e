import mido
import pytest

import statshouse
import statshouse.arrange
import statshouse.data
import statshouse.errors
import statshouse.events
import statshouse.notes
import statshouse.params
import statshouse.tune


def _house (dataset: statshouse.data.Dataset, seed: int = 0) -> statshouse.tune.Tune:

	return statshouse.generate_tune(statshouse.params.GenerationParameters(seed=seed, style=statshouse.params.Style.HOUSE), dataset)


def test_event_sequence_layout (sample_gen_y: statshouse.data.Dataset) -> None:

	"""Support tracks first, numbered from 2, all ending together."""

	tune = _house(sample_gen_y)
	sequence = statshouse.events.to_event_sequence(tune)

	assert sequence.ticks_per_beat == 480
	assert sequence.tempo == 500000
	assert sequence.track_count == 1 + len(tune.support) + len(tune.melody)
	assert [t.number for t in sequence.tracks] == list(range(2, sequence.track_count + 1))
	assert sequence.tracks[0].name == "percussion: house"
	assert all(t.end_clock == tune.bar_count * 1920 for t in sequence.tracks)


def test_events_are_in_clock_order (sample_gen_y: statshouse.data.Dataset) -> None:

	"""Clocks never go backwards within a track."""

	sequence = statshouse.events.to_event_sequence(_house(sample_gen_y, seed=5))

	for track in sequence.tracks:
		clocks = [e.clock for e in track.events]
		assert clocks == sorted(clocks)
		assert clocks[-1] < track.end_clock


def test_no_program_change_on_percussion (sample_gen_y: statshouse.data.Dataset) -> None:

	"""The percussion channel has fixed sounds."""

	sequence = statshouse.events.to_event_sequence(_house(sample_gen_y))

	percussion = [e for e in sequence.tracks[0].events if e.message_type == statshouse.events.PROGRAM_CHANGE]
	bass = [e for e in sequence.tracks[1].events if e.message_type == statshouse.events.PROGRAM_CHANGE]

	assert percussion == []
	assert len(bass) == 1 and bass[0].clock == 0


def test_notes_are_paired (sample_gen_y: statshouse.data.Dataset) -> None:

	"""Every note-on has a note-off for the same note."""

	for track in statshouse.events.to_event_sequence(_house(sample_gen_y)).tracks:
		ons = sorted(e.note for e in track.events if e.message_type == statshouse.events.NOTE_ON)
		offs = sorted(e.note for e in track.events if e.message_type == statshouse.events.NOTE_OFF)
		assert ons == offs


def test_controls_follow_fades () -> None:

	"""Fades appear as expression changes unless controls are turned off."""

	nv = statshouse.notes.NoteAndVelocity(note=60, velocity=100)
	bars = statshouse.arrange.fade_in_out([statshouse.tune.MelodyBar((nv, nv, nv, nv))] * 4, True, False)
	tune = statshouse.tune.Tune(melody=(statshouse.tune.MelodyTrack(statshouse.tune.TrackSetup(channel=0, pan=20), 4, tuple(bars)),))

	events = statshouse.events.to_event_sequence(tune, controls=True).tracks[0].events
	controls = [(e.clock, e.control, e.value) for e in events if e.message_type == statshouse.events.CONTROL_CHANGE]

	assert controls[:3] == [(0, 7, 100), (0, 11, 127), (0, 10, 20)]
	assert (0, 11, 0) in controls
	assert (480, 11, 31) in controls

	plain = statshouse.events.to_event_sequence(tune, controls=False).tracks[0].events
	assert all(e.message_type != statshouse.events.CONTROL_CHANGE for e in plain)


def test_invalid_tune_is_rejected () -> None:

	"""Tunes are validated before rendering."""

	track = statshouse.tune.MelodyTrack(statshouse.tune.TrackSetup(channel=9), 4, (statshouse.tune.MelodyBar.rests(4),))

	with pytest.raises(statshouse.errors.StructuralInconsistency):
		statshouse.events.to_event_sequence(statshouse.tune.Tune(melody=(track,)))


def test_minimal_melody_sequence (sample_gen_y: statshouse.data.Dataset) -> None:

	"""One quarter note per row on channel 2."""

	sequence = statshouse.events.minimal_melody_sequence(sample_gen_y)
	events = sequence.tracks[0].events

	assert sequence.track_count == 2
	assert events[0].program == 80
	assert len([e for e in events if e.message_type == statshouse.events.NOTE_ON]) == 16
	assert sequence.tracks[0].end_clock == 16 * 480


def test_save_midi (tmp_path, sample_gen_y: statshouse.data.Dataset) -> None:

	"""A saved file reads back with mido at 480 ticks per beat, fades and notes included."""

	tune = _house(sample_gen_y)
	sequence = statshouse.events.to_event_sequence(tune, name="Solar")
	path = tmp_path / "solar.mid"

	statshouse.save_midi(sequence, path)

	mid = mido.MidiFile(path)

	assert mid.type == 1
	assert mid.ticks_per_beat == 480
	assert len(mid.tracks) == sequence.track_count

	meta = {msg.type: msg for msg in mid.tracks[0] if msg.is_meta}
	assert meta["set_tempo"].tempo == 500000
	assert meta["time_signature"].numerator == 4
	assert meta["track_name"].name == "Solar"
	assert meta["copyright"].text == statshouse.events.COPYRIGHT_NOTICE

	texts = [msg.text for msg in mid.tracks[0] if msg.type == "text"]
	assert texts[0].startswith("generated: ")
	assert texts[1].startswith("params: ")
	assert texts[2] == "date range: 2008/2023"

	assert any(msg.type == "control_change" and msg.control == 11 for track in mid.tracks[1:] for msg in track)

	for event_track, midi_track in zip(sequence.tracks, mid.tracks[1:]):
		assert sum(msg.time for msg in midi_track) == event_track.end_clock
		notes_on = [msg for msg in midi_track if msg.type == "note_on"]
		assert len(notes_on) == len([e for e in event_track.events if e.message_type == statshouse.events.NOTE_ON])


def test_tune_name_titles_the_sequence (sample_gen_y: statshouse.data.Dataset) -> None:

	"""The generation name is the default title; an explicit name wins."""

	params = statshouse.params.GenerationParameters(style=statshouse.params.Style.GENTLE, name="Solar PV")
	tune = statshouse.generate_tune(params, sample_gen_y)

	assert tune.name == "Solar PV"
	assert statshouse.events.to_event_sequence(tune).name == "Solar PV"
	assert statshouse.events.to_event_sequence(tune, name="Other").name == "Other"
	assert statshouse.events.to_event_sequence(tune).texts == list(tune.texts)
