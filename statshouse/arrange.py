"""Arranging data into complete tunes.

Three styles are supported:

- **plain**: the data as a melody, nothing else. One verse of all the data,
  with silent intro and outro bars if asked for.
- **gentle**: as plain, with calendar alignment where the data allows and a
  soft clap at the start of each bar to mark it.
- **house**: verse/chorus sections over a four-on-the-floor beat and a bass
  line. Verses play the data (with ghost notes filling gaps and fades at the
  edges), choruses repeat one representative bar as a hook.

Arrangement choices (scale, bass voice, drum sounds, ...) come from
progression groups, so the same seed always gives the same tune.
"""

import dataclasses
import enum
import logging
import typing

import statshouse.bounds
import statshouse.chop
import statshouse.constants
import statshouse.constants.instruments
import statshouse.constants.midi
import statshouse.data
import statshouse.errors
import statshouse.notes
import statshouse.params
import statshouse.progression
import statshouse.scale
import statshouse.support
import statshouse.tune


logger = logging.getLogger(__name__)

Bar = typing.TypeVar("Bar", statshouse.tune.MelodyBar, statshouse.tune.SupportBar)

TuneSection = statshouse.tune.TuneSection

# Maximum velocity of a filled-in ghost note.
GHOST_VELOCITY = statshouse.constants.DEFAULT_MELODY_VELOCITY // 2

HOUSE_SCALES = (
	statshouse.scale.NATURAL_MINOR,
	statshouse.scale.HARMONIC_MINOR,
	statshouse.scale.DORIAN,
	statshouse.scale.MAJOR,
	statshouse.scale.CHROMATIC,
)

HOUSE_BASS_INSTRUMENTS = (
	statshouse.constants.instruments.SYNTH_BASS_2,
	statshouse.constants.instruments.SYNTH_BASS_1,
	statshouse.constants.instruments.ELECTRIC_BASS_FINGER,
)


# ---------------------------------------------------------------------------
# Track setup
# ---------------------------------------------------------------------------

def melody_track_setup (
	stream: int,
	params: statshouse.params.GenerationParameters,
	bounds: statshouse.bounds.DataBounds,
	name: typing.Optional[str] = None
) -> statshouse.tune.TrackSetup:

	"""
	Track setup for a data stream (1-based); its channel is ``stream - 1``.

	Major streams (the main stream, or every stream when heterogeneous) get
	the lead voice at full volume; the rest get a softer secondary voice.
	Danceable styles turn all the melody down to leave room for the beat.
	"""

	is_house = params.style == statshouse.params.Style.HOUSE
	is_major = params.hetero or bounds.is_main_stream(stream)

	if is_major:
		instrument = statshouse.constants.instruments.LEAD_2_SAWTOOTH_WAVE if is_house else statshouse.constants.instruments.TENOR_SAX
	else:
		instrument = statshouse.constants.instruments.SYNTH_BRASS_1 if is_house else statshouse.constants.instruments.OCARINA

	volume = statshouse.constants.midi.DEFAULT_VOLUME if is_major else (2 * statshouse.constants.midi.DEFAULT_VOLUME) // 3
	if params.style.level == statshouse.params.ProductionLevel.DANCEABLE:
		volume = (2 * volume) // 3

	spread = max(1, bounds.streams - 1)

	if params.hetero:
		# Spread equal streams across the stereo field.
		pan = (127 // spread) * (stream - 1)
	elif bounds.is_main_stream(stream):
		pan = 80
	else:
		# Secondary streams to the other side.
		pan = (63 // spread) * (stream - 1)

	return statshouse.tune.TrackSetup(
		channel = max(0, stream - 1),
		instrument = instrument,
		volume = volume,
		pan = pan,
		name = name
	)


def _melody_setups (
	params: statshouse.params.GenerationParameters,
	bounds: statshouse.bounds.DataBounds,
	dataset: statshouse.data.Dataset
) -> typing.List[statshouse.tune.TrackSetup]:

	setups = []

	for stream in range(1, bounds.streams + 1):
		source = statshouse.data.extract_source_name(dataset, stream)
		setups.append(melody_track_setup(stream, params, bounds, f"source: {source}" if source else None))

	return setups


# ---------------------------------------------------------------------------
# Bar transformations
# ---------------------------------------------------------------------------

def fill_in_missing_notes (bars: typing.Sequence[statshouse.tune.MelodyBar]) -> typing.List[statshouse.tune.MelodyBar]:

	"""
	Fill rests with quiet copies of notes from the same slot in other bars.

	Each rest takes the latest note in that slot from an earlier bar (which
	may itself have been filled), else the earliest from a later bar, at no
	more than ``GHOST_VELOCITY``. Echo the recent past, else foreshadow the
	near future.
	"""

	result = list(bars)

	for i, bar in enumerate(result):

		notes = list(bar.notes)

		for slot in range(len(notes)):

			if notes[slot] is not None:
				continue

			donor = None

			for k in range(i - 1, -1, -1):
				if slot < len(result[k]) and result[k].notes[slot] is not None:
					donor = result[k].notes[slot]
					break

			if donor is None:
				for k in range(i + 1, len(result)):
					if slot < len(result[k]) and result[k].notes[slot] is not None:
						donor = result[k].notes[slot]
						break

			if donor is not None:
				notes[slot] = statshouse.notes.NoteAndVelocity(note=donor.note, velocity=min(GHOST_VELOCITY, donor.velocity))

		result[i] = dataclasses.replace(bar, notes=tuple(notes))

	return result


def fade_in_out (bars: typing.Sequence[Bar], fade_in: bool, fade_out: bool) -> typing.List[Bar]:

	"""
	Fade expression up over the first bars and/or down over the last bars.

	Fades last a quarter of the section, between 1 and 4 bars. A one-bar
	section asked to fade both ways only fades out.
	"""

	count = len(bars)
	result = list(bars)

	if count == 0:
		return result

	do_fade_in = fade_in and not (fade_out and count == 1)
	fade_bars = max(1, min(4, count // 4))
	per_bar = (statshouse.constants.midi.DEFAULT_EXPRESSION + 1) // fade_bars

	if do_fade_in:
		expression = 0
		for i in range(fade_bars):
			new_expression = statshouse.constants.midi.DEFAULT_EXPRESSION if i == fade_bars - 1 else expression + per_bar
			result[i] = dataclasses.replace(result[i], expression_start=expression, expression_end=new_expression)
			expression = new_expression

	if fade_out:
		expression = statshouse.constants.midi.DEFAULT_EXPRESSION
		for i in range(count - fade_bars, count):
			new_expression = 0 if i == count - 1 else expression - per_bar
			result[i] = dataclasses.replace(result[i], expression_start=expression, expression_end=new_expression)
			expression = new_expression

	return result


def warm_up_to_drop (bars: typing.Sequence[Bar]) -> typing.List[Bar]:

	"""Sag expression slowly over the section, then surge back on the last bar."""

	count = len(bars)
	result = list(bars)

	if count == 0:
		return result

	total_fade = (statshouse.constants.midi.DEFAULT_EXPRESSION + 1) // 3
	per_bar = total_fade // max(1, count - 1)

	expression = statshouse.constants.midi.DEFAULT_EXPRESSION
	for i in range(count - 1):
		result[i] = dataclasses.replace(result[i], expression_start=expression, expression_end=expression - per_bar)
		expression -= per_bar

	result[-1] = dataclasses.replace(result[-1], expression_start=expression, expression_end=statshouse.constants.midi.DEFAULT_EXPRESSION)

	return result


@dataclasses.dataclass(frozen=True)
class Transitions:

	"""How a section meets its neighbours."""

	fade_in: bool
	fade_out: bool
	followed_by_drop: bool


def transitions (plan: statshouse.tune.TuneSectionPlan, index: int) -> Transitions:

	"""Fade in after an intro (or at the start), out before an outro (or at the end).

	A section followed by a chorus or drop can warm up to it instead.
	"""

	previous = plan[index - 1].section if index > 0 else None
	following = plan[index + 1].section if index + 1 < len(plan) else None

	return Transitions(
		fade_in = previous is None or previous == TuneSection.INTRO,
		fade_out = following is None or following == TuneSection.OUTRO,
		followed_by_drop = following in (TuneSection.DROP, TuneSection.CHORUS)
	)


def _shape (bars: typing.Sequence[Bar], edges: Transitions, warm_up_allowed: bool, force_fades: bool = False) -> typing.List[Bar]:

	if warm_up_allowed and not edges.fade_in and not edges.fade_out and edges.followed_by_drop:
		return warm_up_to_drop(bars)

	return fade_in_out(bars, edges.fade_in or force_fades, edges.fade_out or force_fades)


# ---------------------------------------------------------------------------
# Chorus
# ---------------------------------------------------------------------------

class ChorusStyle (enum.Enum):

	"""Ways of building a chorus hook bar from the data."""

	FIRST_DATA_BAR = "first_data_bar"
	FIRST_FULL_DATA_BAR = "first_full_data_bar"
	FIRST_FULLEST_DATA_BAR = "first_fullest_data_bar"
	SYNTHETIC_REPRESENTATIVE_DATA_BAR = "synthetic_representative_data_bar"
	SYNTHETIC_REPRESENTATIVE_DATA_BAR_PLUS_COUNTERPOINT = "synthetic_representative_data_bar_plus_counterpoint"
	MEANS_PLUS_SYNTHETIC_REPRESENTATIVE_DATA_BAR = "means_plus_synthetic_representative_data_bar"
	MEANS_PLUS_SYNTHETIC_REPRESENTATIVE_DATA_BAR_PLUS_COUNTERPOINT = "means_plus_synthetic_representative_data_bar_plus_counterpoint"

	@property
	def implemented (self) -> bool:

		return self in (ChorusStyle.FIRST_DATA_BAR, ChorusStyle.FIRST_FULL_DATA_BAR)


def _first_full_bar (
	proto_bars: typing.Sequence[statshouse.chop.ProtoBar],
	stream: int,
	scale: statshouse.scale.Scale,
	octaves: int,
	max_val: float
) -> typing.Optional[statshouse.tune.MelodyBar]:

	for proto_bar in proto_bars:

		notes = []

		for slot in proto_bar:
			datum = statshouse.data.extract_datum(stream, slot)
			if datum.value is None or not datum.coverage:
				break
			note = statshouse.notes.datum_to_note(datum, True, scale, octaves, max_val)
			if note is None or note.velocity == 0:
				break
			notes.append(note)

		else:
			return statshouse.tune.MelodyBar(tuple(notes))

	return None


def chorus_bars (
	style: ChorusStyle,
	stream: int,
	section: statshouse.tune.SectionMetadata,
	params: statshouse.params.GenerationParameters,
	bounds: statshouse.bounds.DataBounds,
	proto_bars: typing.Sequence[statshouse.chop.ProtoBar],
	scale: statshouse.scale.Scale,
	notes_per_bar: int
) -> typing.List[statshouse.tune.MelodyBar]:

	"""
	Build a chorus section for one stream by repeating a single hook bar.

	Secondary streams rest unless streams are heterogeneous. The first full
	bar style falls back to the first bar when no bar is full.
	"""

	if stream < 1:
		raise statshouse.errors.InvalidArgument(f"Stream must be >= 1: {stream}")

	if not style.implemented:
		raise statshouse.errors.Unimplemented(f"Chorus style {style.value} is not implemented")

	rests = [statshouse.tune.MelodyBar.rests(notes_per_bar)] * section.bars

	if not bounds.is_main_stream(stream) and not params.hetero:
		return rests

	if not proto_bars:
		return rests

	octaves = statshouse.constants.RANGE_OCTAVES
	bar = None

	if style == ChorusStyle.FIRST_FULL_DATA_BAR:
		bar = _first_full_bar(proto_bars, stream, scale, octaves, bounds.max_val)

	if bar is None:
		bar = statshouse.tune.MelodyBar(tuple(
			statshouse.notes.datum_to_note(statshouse.data.extract_datum(stream, slot), True, scale, octaves, bounds.max_val)
			for slot in proto_bars[0]
		))

	return [bar] * section.bars


# ---------------------------------------------------------------------------
# Plain and gentle
# ---------------------------------------------------------------------------

def _intro_outro (plan: typing.List[statshouse.tune.SectionMetadata], bars: int) -> typing.List[statshouse.tune.SectionMetadata]:

	return (
		[statshouse.tune.SectionMetadata(bars, TuneSection.INTRO)]
		+ plan
		+ [statshouse.tune.SectionMetadata(bars, TuneSection.OUTRO)]
	)


def generate_plain_gentle (
	params: statshouse.params.GenerationParameters,
	bounds: statshouse.bounds.DataBounds,
	dataset: statshouse.data.Dataset
) -> statshouse.tune.Tune:

	"""Generate a plain or gentle tune: all the data, once, as a linear melody."""

	if params.style not in (statshouse.params.Style.PLAIN, statshouse.params.Style.GENTLE):
		raise statshouse.errors.InvalidArgument(f"Not a plain or gentle style: {params.style.value}")

	proto_bars = statshouse.chop.split_and_align(params, dataset)

	if not proto_bars:
		return statshouse.tune.Tune()

	notes_per_bar = proto_bars[0].notes_per_bar

	sections = [statshouse.tune.SectionMetadata(len(proto_bars), TuneSection.VERSE)]
	if params.intro_fixed_length:
		sections = _intro_outro(sections, params.intro_bars)
	plan = statshouse.tune.TuneSectionPlan(tuple(sections))

	def melody (index: int, section: statshouse.tune.SectionMetadata, stream: int) -> typing.List[statshouse.tune.MelodyBar]:

		if section.section != TuneSection.VERSE:
			return [statshouse.tune.MelodyBar.rests(notes_per_bar)] * section.bars

		primary = params.hetero or bounds.is_main_stream(stream)

		return [
			statshouse.tune.MelodyBar(tuple(
				statshouse.notes.datum_to_linear_note(statshouse.data.extract_datum(stream, slot), primary, bounds.max_val)
				for slot in proto_bar
			))
			for proto_bar in proto_bars
		]

	support: typing.List[typing.Tuple[statshouse.tune.TrackSetup, statshouse.tune.SupportGenerator]] = []

	if params.style == statshouse.params.Style.GENTLE:
		clap = statshouse.support.gentle_percussion_bar()
		setup = statshouse.tune.TrackSetup(
			channel = statshouse.constants.midi.GM1_PERCUSSION_CHANNEL,
			name = "percussion: gentle"
		)
		support.append((setup, lambda index, section: [clap] * section.bars))

	return statshouse.tune.assemble_tune(
		plan,
		_melody_setups(params, bounds, dataset),
		notes_per_bar,
		melody,
		support
	)


# ---------------------------------------------------------------------------
# House
# ---------------------------------------------------------------------------

def house_section_bars (
	params: statshouse.params.GenerationParameters,
	cadence: statshouse.bounds.Cadence,
	data_bars: int
) -> int:

	"""Section length: the fixed intro length, else the cadence's cycle, else 16 or 8."""

	if params.intro_fixed_length:
		return params.intro_bars

	if cadence.bars_cycle:
		return cadence.bars_cycle

	if data_bars >= statshouse.constants.DEFAULT_SECTION_BARS:
		return statshouse.constants.DEFAULT_SECTION_BARS

	return statshouse.constants.MIN_SECTION_BARS


def house_plan (
	params: statshouse.params.GenerationParameters,
	section_bars: int,
	verse_sections: int
) -> statshouse.tune.TuneSectionPlan:

	"""Verse/chorus pairs until the core is half a typical radio tune, plus intro/outro."""

	sections: typing.List[statshouse.tune.SectionMetadata] = []

	while True:
		for _ in range(verse_sections):
			sections.append(statshouse.tune.SectionMetadata(section_bars, TuneSection.VERSE))
			sections.append(statshouse.tune.SectionMetadata(section_bars, TuneSection.CHORUS))
		if len(sections) * section_bars >= statshouse.constants.TYPICAL_RADIO_TUNE_BARS // 2:
			break

	if params.intro_requested:
		sections = _intro_outro(sections, section_bars)

	return statshouse.tune.TuneSectionPlan(tuple(sections))


def generate_house (
	params: statshouse.params.GenerationParameters,
	bounds: statshouse.bounds.DataBounds,
	dataset: statshouse.data.Dataset
) -> statshouse.tune.Tune:

	"""Generate a house tune: verses and choruses over percussion and bass."""

	if params.style != statshouse.params.Style.HOUSE:
		raise statshouse.errors.InvalidArgument(f"Not the house style: {params.style.value}")

	prog = statshouse.progression.ProgressionGroup(params, "house")

	verse_bars = statshouse.chop.split_and_align(params, dataset)

	if not verse_bars:
		return statshouse.tune.Tune()

	notes_per_bar = verse_bars[0].notes_per_bar
	cadence = statshouse.bounds.detect_cadence(dataset)

	# A narrower range than plain, to let the beat stand out.
	octaves = max(1, statshouse.constants.RANGE_OCTAVES // 2)
	scale = prog.pick_one_no_progression(statshouse.progression.pick_square, HOUSE_SCALES)

	# Stretch up to a quarter of a section, else truncate.
	section_bars = house_section_bars(params, cadence, len(verse_bars))
	available = max(1, (len(verse_bars) + section_bars // 4) // section_bars)
	verse_sections = min(statshouse.constants.MAX_VERSE_SECTIONS, available)

	plan = house_plan(params, section_bars, verse_sections)

	logger.info(
		f"House: {len(verse_bars)} data bars, {verse_sections} verse sections of {section_bars} bars, "
		f"{plan.total_bars} bars in all, scale {scale.steps}"
	)

	empty_proto_bar = statshouse.chop.ProtoBar.empty(notes_per_bar)

	def verse_proto_bars (verse_count: int) -> typing.List[statshouse.chop.ProtoBar]:

		# Alternate repeats drop early rather than late bars when truncating,
		# so the first verse set carries the latest data.
		discard_early = (verse_count // verse_sections) % 2 == 0
		excess = len(verse_bars) - verse_sections * section_bars
		start = (verse_count % verse_sections) * section_bars + (max(0, excess) if discard_early else 0)

		return [verse_bars[i] if i < len(verse_bars) else empty_proto_bar for i in range(start, start + section_bars)]

	def melody (index: int, section: statshouse.tune.SectionMetadata, stream: int) -> typing.List[statshouse.tune.MelodyBar]:

		edges = transitions(plan, index)

		if section.section == TuneSection.VERSE:

			primary = params.hetero or bounds.is_main_stream(stream)

			bars = [
				statshouse.tune.MelodyBar(tuple(
					statshouse.notes.datum_to_note(statshouse.data.extract_datum(stream, slot), primary, scale, octaves, bounds.max_val)
					for slot in proto_bar
				))
				for proto_bar in verse_proto_bars(plan.count_before(index, TuneSection.VERSE))
			]

			return _shape(fill_in_missing_notes(bars), edges, warm_up_allowed=primary, force_fades=not primary)

		if section.section == TuneSection.CHORUS:

			bars = chorus_bars(ChorusStyle.FIRST_FULL_DATA_BAR, stream, section, params, bounds, verse_bars, scale, notes_per_bar)

			return fade_in_out(bars, edges.fade_in, edges.fade_out)

		return [statshouse.tune.MelodyBar.rests(notes_per_bar)] * section.bars

	def percussion (index: int, section: statshouse.tune.SectionMetadata) -> typing.List[statshouse.tune.SupportBar]:

		bar = statshouse.support.house_percussion_bar(prog, False)
		final = statshouse.support.house_percussion_bar(prog, True)

		return [bar] * (section.bars - 1) + [final]

	def bass (index: int, section: statshouse.tune.SectionMetadata) -> typing.List[statshouse.tune.SupportBar]:

		bar = statshouse.support.house_bass_bar(section.section, prog, index)

		return _shape([bar] * section.bars, transitions(plan, index), warm_up_allowed=True)

	silent: statshouse.tune.SupportGenerator = lambda index, section: [statshouse.tune.EMPTY_SUPPORT_BAR] * section.bars

	percussion_setup = statshouse.tune.TrackSetup(
		channel = statshouse.constants.midi.GM1_PERCUSSION_CHANNEL,
		name = "percussion: house"
	)
	bass_setup = statshouse.tune.TrackSetup(
		channel = statshouse.constants.midi.GM1_PERCUSSION_CHANNEL + 1,
		instrument = prog.pick_one_no_progression(statshouse.progression.pick_square, HOUSE_BASS_INSTRUMENTS),
		volume = (2 * statshouse.constants.midi.DEFAULT_VOLUME) // 3,
		pan = statshouse.constants.midi.DEFAULT_PAN + 1,
		name = "bass: house"
	)

	return statshouse.tune.assemble_tune(
		plan,
		_melody_setups(params, bounds, dataset),
		notes_per_bar,
		melody,
		[
			(percussion_setup, statshouse.tune.by_section({
				TuneSection.DROP: silent,
				TuneSection.BREAKDOWN: silent,
			}, default=percussion)),
			(bass_setup, statshouse.tune.by_section({
				TuneSection.VERSE: bass,
				TuneSection.CHORUS: bass,
			})),
		]
	)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

_GENERATORS: typing.Dict[statshouse.params.Style, typing.Callable[..., statshouse.tune.Tune]] = {
	statshouse.params.Style.PLAIN: generate_plain_gentle,
	statshouse.params.Style.GENTLE: generate_plain_gentle,
	statshouse.params.Style.HOUSE: generate_house,
}


def _describe (params: statshouse.params.GenerationParameters, dataset: statshouse.data.Dataset) -> typing.Tuple[str, ...]:

	"""Notes on how a tune was made: its parameters and the dates it covers."""

	texts = [f"params: {params}"]
	rows = list(dataset.data_rows())

	if rows:
		texts.append(f"date range: {rows[0][0]}/{rows[-1][0]}")

	return tuple(texts)


def generate_tune (
	params: statshouse.params.GenerationParameters,
	dataset: statshouse.data.Dataset
) -> statshouse.tune.Tune:

	"""
	Generate a complete, validated tune from a dataset.

	An empty dataset gives an empty tune. The special seeds (-1 for a new
	seed each run, 1 for a seed derived from the data) are resolved first.

	Example:
		```python
		params = GenerationParameters(seed=0, style=Style.GENTLE)
		tune = generate_tune(params, load_csv("gen.csv"))
		```
	"""

	params = params.with_resolved_seed(dataset)
	bounds = statshouse.bounds.compute_bounds(dataset)

	logger.info(f"Generating {params.style.value} tune from {len(dataset)} rows, {bounds.streams} streams")

	tune = _GENERATORS[params.style](params, bounds, dataset)
	tune = dataclasses.replace(tune, name=params.name, texts=_describe(params, dataset))

	logger.info(f"Generated {len(tune.melody)} melody and {len(tune.support)} support tracks, {tune.bar_count} bars")

	return tune
