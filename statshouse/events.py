"""Rendering tunes to timed MIDI event sequences and Standard MIDI Files.

An :class:`EventSequence` is the tune flattened to per-track lists of events
at absolute clock ticks (480 per quarter note, 1920 per bar). Track 1 is
always the tempo track; tune tracks are numbered from 2, support tracks
first. The same sequence feeds both the MIDICSV text writer and ``mido``.
"""

import dataclasses
import datetime
import logging
import os
import typing

import mido

import statshouse.bounds
import statshouse.chop
import statshouse.constants
import statshouse.constants.instruments
import statshouse.constants.midi
import statshouse.data
import statshouse.errors
import statshouse.notes
import statshouse.tune


logger = logging.getLogger(__name__)


TEMPO_TRACK_NUMBER = 1

PROGRAM_CHANGE = "program_change"
NOTE_ON = "note_on"
NOTE_OFF = "note_off"
CONTROL_CHANGE = "control_change"

COPYRIGHT_NOTICE = "autogenerated output released as CC0 / public domain."


@dataclasses.dataclass(order=True)
class MidiEvent:

	"""
	Represents a MIDI event at an absolute clock tick.
	"""

	clock: int
	message_type: str = dataclasses.field(compare=False)
	channel: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False, default=0)
	velocity: int = dataclasses.field(compare=False, default=0)
	program: int = dataclasses.field(compare=False, default=0)
	control: int = dataclasses.field(compare=False, default=0)
	value: int = dataclasses.field(compare=False, default=0)


@dataclasses.dataclass
class EventTrack:

	"""One track's events in clock order, and the clock at which it ends."""

	number: int
	events: typing.List[MidiEvent]
	end_clock: int
	name: typing.Optional[str] = None


@dataclasses.dataclass
class EventSequence:

	"""
	A complete tune as timed events.

	``tracks`` excludes the tempo track, which is implied by ``tempo``. The
	name, copyright notice and texts become tempo track meta messages in a
	MIDI file; MIDICSV text leaves them out.
	"""

	tracks: typing.List[EventTrack]
	ticks_per_beat: int = statshouse.constants.CLOCKS_PER_QUARTER
	tempo: int = statshouse.constants.DEFAULT_TEMPO
	name: typing.Optional[str] = None
	copyright: typing.Optional[str] = COPYRIGHT_NOTICE
	texts: typing.List[str] = dataclasses.field(default_factory=list)

	@property
	def track_count (self) -> int:

		"""Tracks in the file, including the tempo track."""

		return len(self.tracks) + 1


# ---------------------------------------------------------------------------
# Tune to events
# ---------------------------------------------------------------------------

def _setup_events (setup: statshouse.tune.TrackSetup, controls: bool) -> typing.List[MidiEvent]:

	events: typing.List[MidiEvent] = []

	# No program change on the fixed percussion channel.
	if setup.channel != statshouse.constants.midi.GM1_PERCUSSION_CHANNEL:
		events.append(MidiEvent(clock=0, message_type=PROGRAM_CHANGE, channel=setup.channel, program=setup.instrument))

	if controls:
		events.append(MidiEvent(0, CONTROL_CHANGE, setup.channel, control=statshouse.constants.midi.CC_VOLUME, value=setup.volume))
		events.append(MidiEvent(0, CONTROL_CHANGE, setup.channel, control=statshouse.constants.midi.CC_EXPRESSION, value=statshouse.constants.midi.DEFAULT_EXPRESSION))
		if setup.pan != statshouse.constants.midi.DEFAULT_PAN:
			events.append(MidiEvent(0, CONTROL_CHANGE, setup.channel, control=statshouse.constants.midi.CC_PAN, value=setup.pan))

	return events


def _melody_events (track: statshouse.tune.MelodyTrack, controls: bool) -> typing.List[MidiEvent]:

	channel = track.setup.channel
	events = _setup_events(track.setup, controls)
	expression = statshouse.constants.midi.DEFAULT_EXPRESSION

	for number, bar in enumerate(track.bars):

		clock = number * statshouse.constants.CLOCKS_PER_BAR
		clocks_per_note = statshouse.constants.CLOCKS_PER_BAR // len(bar)

		target = bar.expression_start
		delta = int((bar.expression_end - bar.expression_start) / len(bar))

		for slot, nv in enumerate(bar.notes):

			sub_clock = clock + slot * clocks_per_note

			if nv is not None and nv.velocity != 0:

				if controls and expression != target:
					expression = target
					events.append(MidiEvent(sub_clock, CONTROL_CHANGE, channel, control=statshouse.constants.midi.CC_EXPRESSION, value=expression))

				events.append(MidiEvent(sub_clock, NOTE_ON, channel, note=nv.note, velocity=nv.velocity))
				events.append(MidiEvent(sub_clock + clocks_per_note - 1, NOTE_OFF, channel, note=nv.note))

			target += delta

	return events


def _support_events (track: statshouse.tune.SupportTrack, controls: bool) -> typing.List[MidiEvent]:

	channel = track.setup.channel
	events = _setup_events(track.setup, controls)
	expression = statshouse.constants.midi.DEFAULT_EXPRESSION

	for number, bar in enumerate(track.bars):

		clock = number * statshouse.constants.CLOCKS_PER_BAR
		flat = bar.expression_start == bar.expression_end
		per_clock = (bar.expression_end - bar.expression_start) / statshouse.constants.CLOCKS_PER_BAR

		for n in bar.notes:

			start = clock + n.start
			end = start + max(0, n.duration - 1)

			target = bar.expression_start
			if not flat:
				target = max(0, min(statshouse.constants.midi.MAX_DATA_BYTE, statshouse.notes.round_half_up(bar.expression_start + n.start * per_clock)))

			if controls and expression != target:
				expression = target
				events.append(MidiEvent(start, CONTROL_CHANGE, channel, control=statshouse.constants.midi.CC_EXPRESSION, value=expression))

			events.append(MidiEvent(start, NOTE_ON, channel, note=n.note, velocity=n.velocity))
			events.append(MidiEvent(end, NOTE_OFF, channel, note=n.note))

	# Notes may overlap bar boundaries or each other; sort keeps ties in order.
	events.sort()

	return events


def to_event_sequence (
	tune: statshouse.tune.Tune,
	controls: bool = True,
	name: typing.Optional[str] = None
) -> EventSequence:

	"""
	Flatten a tune into timed events.

	Parameters:
		tune: The tune; validated first.
		controls: Emit volume, pan and expression control changes
		          (including fades). Turn off to keep to program changes
		          and notes.
		name: Title for the tempo track; defaults to the tune's name.
	"""

	statshouse.tune.validate_tune(tune)

	end_clock = tune.bar_count * statshouse.constants.CLOCKS_PER_BAR
	tracks: typing.List[EventTrack] = []

	for support in tune.support:
		tracks.append(EventTrack(len(tracks) + 2, _support_events(support, controls), end_clock, support.setup.name))

	for melody in tune.melody:
		tracks.append(EventTrack(len(tracks) + 2, _melody_events(melody, controls), end_clock, melody.setup.name))

	return EventSequence(tracks=tracks, name=name or tune.name, texts=list(tune.texts))


# ---------------------------------------------------------------------------
# Minimal melody
# ---------------------------------------------------------------------------

MINIMAL_NOTES_PER_BAR = 4
MINIMAL_CHANNEL = 2
MINIMAL_VELOCITY = statshouse.constants.DEFAULT_MELODY_VELOCITY


def minimal_melody_sequence (dataset: statshouse.data.Dataset) -> EventSequence:

	"""
	The simplest possible sonification: the busiest stream, one note per row.

	Each row gets a quarter note (four per bar, no alignment), on channel 2
	with a square lead. Values map linearly to two octaves above middle C.
	Empty, unparseable and out-of-range values are rests.
	"""

	main_stream = statshouse.bounds.busiest_stream(dataset)
	max_val = statshouse.bounds.max_value(dataset)
	step = statshouse.constants.CLOCKS_PER_QUARTER

	events = [MidiEvent(0, PROGRAM_CHANGE, MINIMAL_CHANNEL, program=statshouse.constants.instruments.LEAD_1_SQUARE_WAVE)]
	clock = 0

	if main_stream >= 1:

		field = main_stream * statshouse.data.FIELDS_PER_STREAM

		for proto_bar in statshouse.chop.chop_simple(MINIMAL_NOTES_PER_BAR, dataset):
			for slot in proto_bar:

				row_clock = clock
				clock += step

				if statshouse.data.is_padding(slot) or field >= len(slot):
					continue

				value = statshouse.data.parse_float(typing.cast(statshouse.data.Row, slot)[field])
				if value is None or value != value or value in (float("inf"), float("-inf")):
					continue

				fnote = statshouse.constants.ROOT_NOTE + statshouse.notes.linear_position(value, max_val)
				if not 0 <= fnote <= statshouse.constants.midi.MAX_DATA_BYTE:
					continue

				note = int(fnote)
				events.append(MidiEvent(row_clock, NOTE_ON, MINIMAL_CHANNEL, note=note, velocity=MINIMAL_VELOCITY))
				events.append(MidiEvent(row_clock + step - 1, NOTE_OFF, MINIMAL_CHANNEL, note=note))

	return EventSequence(tracks=[EventTrack(2, events, clock)])


# ---------------------------------------------------------------------------
# Standard MIDI File via mido
# ---------------------------------------------------------------------------

def _to_message (event: MidiEvent, time: int) -> mido.Message:

	if event.message_type == NOTE_ON:
		return mido.Message("note_on", channel=event.channel, note=event.note, velocity=event.velocity, time=time)

	if event.message_type == NOTE_OFF:
		return mido.Message("note_off", channel=event.channel, note=event.note, velocity=0, time=time)

	if event.message_type == PROGRAM_CHANGE:
		return mido.Message("program_change", channel=event.channel, program=event.program, time=time)

	if event.message_type == CONTROL_CHANGE:
		return mido.Message("control_change", channel=event.channel, control=event.control, value=event.value, time=time)

	raise statshouse.errors.InvalidArgument(f"Unknown event type: {event.message_type}")


def to_midi_file (sequence: EventSequence) -> mido.MidiFile:

	"""Convert an event sequence to a type 1 ``mido.MidiFile``."""

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = sequence.ticks_per_beat

	tempo_track = mido.MidiTrack()
	mid.tracks.append(tempo_track)

	if sequence.name:
		tempo_track.append(mido.MetaMessage("track_name", name=sequence.name, time=0))

	if sequence.copyright:
		tempo_track.append(mido.MetaMessage("copyright", text=sequence.copyright, time=0))

	tempo_track.append(mido.MetaMessage("text", text=f"generated: {datetime.datetime.now().isoformat(timespec='seconds')}", time=0))

	for text in sequence.texts:
		tempo_track.append(mido.MetaMessage("text", text=text, time=0))

	tempo_track.append(mido.MetaMessage("set_tempo", tempo=sequence.tempo, time=0))
	tempo_track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, clocks_per_click=24, notated_32nd_notes_per_beat=8, time=0))
	tempo_track.append(mido.MetaMessage("end_of_track", time=0))

	for event_track in sequence.tracks:

		track = mido.MidiTrack()
		mid.tracks.append(track)

		if event_track.name:
			track.append(mido.MetaMessage("track_name", name=event_track.name, time=0))

		last_clock = 0

		for event in event_track.events:
			track.append(_to_message(event, event.clock - last_clock))
			last_clock = event.clock

		track.append(mido.MetaMessage("end_of_track", time=max(0, event_track.end_clock - last_clock)))

	return mid


def save_midi (sequence: EventSequence, filename: typing.Union[str, os.PathLike]) -> None:

	"""Write an event sequence as a Standard MIDI File."""

	mid = to_midi_file(sequence)

	logger.info(f"Saving MIDI ({len(sequence.tracks)} tracks) to {filename}...")

	mid.save(filename)

	logger.info(f"Saved {filename}")
