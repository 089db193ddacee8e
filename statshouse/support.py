"""Support bars: percussion and bass patterns that sit under the data melody."""

import typing

import statshouse.constants
import statshouse.constants.gm_drums
import statshouse.constants.midi
import statshouse.progression
import statshouse.tune


QUARTER = statshouse.constants.CLOCKS_PER_QUARTER
EIGHTH = QUARTER // 2

# Bass sits two octaves below the melody root.
BASS_ROOT_NOTE = statshouse.constants.ROOT_NOTE - 24


def gentle_percussion_bar () -> statshouse.tune.SupportBar:

	"""A single soft hand clap at the start of the bar."""

	return statshouse.tune.SupportBar((
		statshouse.tune.SupportNote(
			start = 0,
			note = statshouse.constants.gm_drums.HAND_CLAP,
			velocity = (2 * statshouse.constants.DEFAULT_MELODY_VELOCITY) // 3,
			duration = statshouse.constants.CLOCKS_PER_BAR // 16
		),
	))


def house_percussion_bar (prog: statshouse.progression.ProgressionGroup, final: bool) -> statshouse.tune.SupportBar:

	"""
	Four-on-the-floor: kick on every beat, hats on the off-beats, claps on 2 and 4.

	The final bar of a section usually gets an extra off-beat kick on beat 1
	(a normal bar occasionally does) and a full-velocity last hat. With no
	randomness the extra kick goes in the normal bars instead.
	"""

	rng = prog.rng(1 if final else 42)
	velocity = statshouse.constants.MAX_MELODY_VELOCITY

	drum = statshouse.progression.pick_one(rng, statshouse.progression.pick_square, (
		statshouse.constants.gm_drums.ACOUSTIC_BASS_DRUM,
		statshouse.constants.gm_drums.ELECTRIC_BASS_DRUM,
	))
	hat = statshouse.progression.pick_one(rng, statshouse.progression.pick_square, (
		statshouse.constants.gm_drums.CLOSED_HI_HAT,
		statshouse.constants.gm_drums.OPEN_HI_HAT,
	))
	clap = statshouse.constants.gm_drums.HAND_CLAP

	notes: typing.List[statshouse.tune.SupportNote] = []

	for beat in range(statshouse.constants.BEATS_PER_BAR):

		start = beat * QUARTER

		notes.append(statshouse.tune.SupportNote(start=start, note=drum, velocity=velocity, duration=EIGHTH - 1))

		if beat in (1, 3):
			notes.append(statshouse.tune.SupportNote(start=start, note=clap, velocity=velocity, duration=EIGHTH))

		last_hat = final and beat == statshouse.constants.BEATS_PER_BAR - 1
		hat_velocity = statshouse.constants.midi.MAX_DATA_BYTE if last_hat else velocity
		notes.append(statshouse.tune.SupportNote(start=start + EIGHTH, note=hat, velocity=hat_velocity, duration=EIGHTH))

		if beat == 0:
			extra = statshouse.progression.next_boolean(rng) or statshouse.progression.next_boolean(rng)
			if final == extra:
				notes.append(statshouse.tune.SupportNote(start=start + EIGHTH, note=drum, velocity=velocity, duration=EIGHTH))

	return statshouse.tune.SupportBar(tuple(notes))


def house_bass_bar (
	section: statshouse.tune.TuneSection,
	prog: statshouse.progression.ProgressionGroup,
	section_number: int
) -> statshouse.tune.SupportBar:

	"""
	A bass note on each beat, with a per-section delay and length.

	In a chorus the first note of the bar may jump up an octave.
	"""

	rng = prog.rng(section_number, list(statshouse.tune.TuneSection).index(section))
	velocity = statshouse.constants.MAX_MELODY_VELOCITY

	first_note = BASS_ROOT_NOTE
	if section == statshouse.tune.TuneSection.CHORUS:
		first_note = statshouse.progression.pick_one(rng, statshouse.progression.pick_square, (BASS_ROOT_NOTE + 12, BASS_ROOT_NOTE))

	delay = statshouse.progression.pick_one(rng, statshouse.progression.pick_square, (QUARTER // 8, 0, QUARTER // 4))
	duration = statshouse.progression.pick_one(rng, statshouse.progression.pick_square, (QUARTER // 2, QUARTER // 4))

	return statshouse.tune.SupportBar(tuple(
		statshouse.tune.SupportNote(
			start = beat * QUARTER + delay,
			note = first_note if beat == 0 else BASS_ROOT_NOTE,
			velocity = velocity,
			duration = duration
		)
		for beat in range(statshouse.constants.BEATS_PER_BAR)
	))
