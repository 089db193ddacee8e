"""MIDICSV text output.

MIDICSV is a line-per-event text rendering of a Standard MIDI File, read by
``csvmidi`` and similar tools. Rows are ``track, clock, type, args...``
separated by ``", "`` and terminated by ``"\\n"``. Consumers parse this text,
so the exact spacing and row order matter.

Row writers append to any text stream with a ``write`` method (an open file
or ``io.StringIO``).
"""

import io
import logging
import typing

import statshouse.constants
import statshouse.data
import statshouse.errors
import statshouse.events
import statshouse.tune


logger = logging.getLogger(__name__)


def write_header (w: typing.TextIO, track_count: int, clocks_per_quarter: int = statshouse.constants.CLOCKS_PER_QUARTER) -> None:

	"""File header for a format 1 file; ``track_count`` includes the tempo track."""

	w.write(f"0, 0, Header, 1, {track_count}, {clocks_per_quarter}\n")


def write_footer (w: typing.TextIO) -> None:

	w.write("0, 0, End_of_file\n")


def write_start_track (w: typing.TextIO, track: int) -> None:

	w.write(f"{track}, 0, Start_track\n")


def write_end_track (w: typing.TextIO, track: int, clock: int) -> None:

	w.write(f"{track}, {clock}, End_track\n")


def write_minimal_tempo_track (w: typing.TextIO, tempo: int = statshouse.constants.DEFAULT_TEMPO) -> None:

	"""Track 1: tempo in microseconds per quarter note, and 4/4 time."""

	track = statshouse.events.TEMPO_TRACK_NUMBER

	write_start_track(w, track)
	w.write(f"{track}, 0, Tempo, {tempo}\n")
	w.write(f"{track}, 0, Time_signature, 4, 2, 24, 8\n")
	write_end_track(w, track, 0)


def write_program_change (w: typing.TextIO, track: int, clock: int, channel: int, program: int) -> None:

	w.write(f"{track}, {clock}, Program_c, {channel}, {program}\n")


def write_note_on (w: typing.TextIO, track: int, clock: int, channel: int, note: int, velocity: int) -> None:

	w.write(f"{track}, {clock}, Note_on_c, {channel}, {note}, {velocity}\n")


def write_note_off (w: typing.TextIO, track: int, clock: int, channel: int, note: int) -> None:

	"""Written with release velocity 0."""

	w.write(f"{track}, {clock}, Note_off_c, {channel}, {note}, 0\n")


def write_control_change (w: typing.TextIO, track: int, clock: int, channel: int, control: int, value: int) -> None:

	w.write(f"{track}, {clock}, Control_c, {channel}, {control}, {value}\n")


# ---------------------------------------------------------------------------
# Whole sequences
# ---------------------------------------------------------------------------

def write_event (w: typing.TextIO, track: int, event: statshouse.events.MidiEvent) -> None:

	"""Write one event as its MIDICSV row."""

	if event.message_type == statshouse.events.NOTE_ON:
		write_note_on(w, track, event.clock, event.channel, event.note, event.velocity)

	elif event.message_type == statshouse.events.NOTE_OFF:
		write_note_off(w, track, event.clock, event.channel, event.note)

	elif event.message_type == statshouse.events.PROGRAM_CHANGE:
		write_program_change(w, track, event.clock, event.channel, event.program)

	elif event.message_type == statshouse.events.CONTROL_CHANGE:
		write_control_change(w, track, event.clock, event.channel, event.control, event.value)

	else:
		raise statshouse.errors.InvalidArgument(f"Unknown event type: {event.message_type}")


def write_event_sequence (w: typing.TextIO, sequence: statshouse.events.EventSequence) -> None:

	"""Write a complete file: header, tempo track, each track, footer."""

	write_header(w, sequence.track_count, sequence.ticks_per_beat)
	write_minimal_tempo_track(w, sequence.tempo)

	for track in sequence.tracks:

		write_start_track(w, track.number)

		for event in track.events:
			write_event(w, track.number, event)

		write_end_track(w, track.number, track.end_clock)

	write_footer(w)


def event_sequence_to_text (sequence: statshouse.events.EventSequence) -> str:

	w = io.StringIO()
	write_event_sequence(w, sequence)

	return w.getvalue()


def tune_to_text (tune: statshouse.tune.Tune, controls: bool = False) -> str:

	"""
	Render a tune as MIDICSV text.

	The same as rendering :func:`statshouse.events.to_event_sequence` of the
	tune, so the text and any ``.mid`` made from the sequence agree on timing.
	"""

	return event_sequence_to_text(statshouse.events.to_event_sequence(tune, controls=controls))


def generate_minimal_melody_text (dataset: statshouse.data.Dataset) -> str:

	"""MIDICSV text for :func:`statshouse.events.minimal_melody_sequence`."""

	sequence = statshouse.events.minimal_melody_sequence(dataset)

	logger.info(f"Minimal melody: {sum(1 for e in sequence.tracks[0].events if e.message_type == statshouse.events.NOTE_ON)} notes")

	return event_sequence_to_text(sequence)
