"""Tune structure: track setups, bars, tracks, section plans and assembly.

A tune has melody tracks (one per data stream, a fixed number of note slots
per bar) and support tracks (percussion, bass: freely timed notes within each
bar), laid over a section plan (intro, verse, chorus, ...). Every track has
the same number of bars and every bar is one 4/4 measure.
"""

import dataclasses
import enum
import logging
import typing

import statshouse.constants
import statshouse.constants.midi
import statshouse.errors
import statshouse.notes


logger = logging.getLogger(__name__)


def _check_byte (name: str, value: int, limit: int = statshouse.constants.midi.MAX_DATA_BYTE) -> None:

	if not 0 <= value <= limit:
		raise statshouse.errors.InvalidArgument(f"{name} out of range 0-{limit}: {value}")


@dataclasses.dataclass(frozen=True)
class TrackSetup:

	"""Channel, instrument and mix settings for one track."""

	channel: int
	instrument: int = 0
	volume: int = statshouse.constants.midi.DEFAULT_VOLUME
	pan: int = statshouse.constants.midi.DEFAULT_PAN
	name: typing.Optional[str] = None

	def __post_init__ (self) -> None:

		_check_byte("Channel", self.channel, statshouse.constants.midi.MAX_CHANNEL)
		_check_byte("Instrument", self.instrument)
		_check_byte("Volume", self.volume)
		_check_byte("Pan", self.pan)


# ---------------------------------------------------------------------------
# Bars
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class MelodyBar:

	"""
	One bar of evenly spaced note slots; ``None`` slots are rests.

	Expression (CC 11) is set at the start of the bar and ramps linearly to
	``expression_end`` over the bar, for fades.
	"""

	notes: typing.Tuple[typing.Optional[statshouse.notes.NoteAndVelocity], ...]
	expression_start: int = statshouse.constants.midi.DEFAULT_EXPRESSION
	expression_end: int = statshouse.constants.midi.DEFAULT_EXPRESSION

	def __post_init__ (self) -> None:

		object.__setattr__(self, "notes", tuple(self.notes))

		if not self.notes:
			raise statshouse.errors.InvalidArgument("Melody bar must have at least one slot")

		_check_byte("Expression", self.expression_start)
		_check_byte("Expression", self.expression_end)

	def __len__ (self) -> int:

		return len(self.notes)

	@property
	def is_silent (self) -> bool:

		return all(n is None for n in self.notes)

	@classmethod
	def rests (cls, notes_per_bar: int) -> "MelodyBar":

		"""A bar of ``notes_per_bar`` rests."""

		return cls((None,) * notes_per_bar)


@dataclasses.dataclass(frozen=True)
class SupportNote:

	"""A note at ``start`` clocks into the bar, lasting ``duration`` clocks."""

	start: int
	note: int
	velocity: int
	duration: int

	def __post_init__ (self) -> None:

		if not 0 <= self.start < statshouse.constants.CLOCKS_PER_BAR:
			raise statshouse.errors.InvalidArgument(f"Note start must be within the bar: {self.start}")

		if self.duration < 1:
			raise statshouse.errors.InvalidArgument(f"Note duration must be positive: {self.duration}")

		_check_byte("Note", self.note)
		_check_byte("Velocity", self.velocity)


@dataclasses.dataclass(frozen=True)
class SupportBar:

	"""One bar of freely timed support notes, kept in start order.

	Expression works as for :class:`MelodyBar`.
	"""

	notes: typing.Tuple[SupportNote, ...] = ()
	expression_start: int = statshouse.constants.midi.DEFAULT_EXPRESSION
	expression_end: int = statshouse.constants.midi.DEFAULT_EXPRESSION

	def __post_init__ (self) -> None:

		object.__setattr__(self, "notes", tuple(sorted(self.notes, key=lambda n: n.start)))

		_check_byte("Expression", self.expression_start)
		_check_byte("Expression", self.expression_end)


EMPTY_SUPPORT_BAR = SupportBar()


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class MelodyTrack:

	"""A data melody track: setup, declared slots per bar, and bars."""

	setup: TrackSetup
	notes_per_bar: int
	bars: typing.Tuple[MelodyBar, ...] = ()

	def __post_init__ (self) -> None:

		if self.notes_per_bar < 1:
			raise statshouse.errors.InvalidArgument(f"Notes per bar must be positive: {self.notes_per_bar}")

		object.__setattr__(self, "bars", tuple(self.bars))


@dataclasses.dataclass(frozen=True)
class SupportTrack:

	"""A support track (percussion, bass): setup and bars."""

	setup: TrackSetup
	bars: typing.Tuple[SupportBar, ...] = ()

	def __post_init__ (self) -> None:

		object.__setattr__(self, "bars", tuple(self.bars))


# ---------------------------------------------------------------------------
# Section plan
# ---------------------------------------------------------------------------

class TuneSection (enum.Enum):

	"""Kinds of section in a tune."""

	INTRO = "intro"
	VERSE = "verse"
	CHORUS = "chorus"
	BREAKDOWN = "breakdown"
	DROP = "drop"
	OUTRO = "outro"


@dataclasses.dataclass(frozen=True)
class SectionMetadata:

	"""A section of the plan: its length in bars and its kind."""

	bars: int
	section: TuneSection = TuneSection.VERSE

	def __post_init__ (self) -> None:

		if self.bars < 1:
			raise statshouse.errors.InvalidArgument(f"Section must have at least one bar: {self.bars}")


@dataclasses.dataclass(frozen=True)
class TuneSectionPlan:

	"""Ordered, non-empty list of sections."""

	sections: typing.Tuple[SectionMetadata, ...]

	def __post_init__ (self) -> None:

		sections = tuple(self.sections)

		if not sections:
			raise statshouse.errors.InvalidArgument("Section plan cannot be empty")

		object.__setattr__(self, "sections", sections)

	def __len__ (self) -> int:

		return len(self.sections)

	def __iter__ (self) -> typing.Iterator[SectionMetadata]:

		return iter(self.sections)

	def __getitem__ (self, index: int) -> SectionMetadata:

		return self.sections[index]

	@property
	def total_bars (self) -> int:

		return sum(s.bars for s in self.sections)

	def count_before (self, index: int, kind: TuneSection) -> int:

		"""Number of sections of ``kind`` before position ``index``."""

		return sum(1 for s in self.sections[:index] if s.section == kind)


@dataclasses.dataclass(frozen=True)
class Tune:

	"""A complete tune: melody tracks, support tracks and an optional plan.

	``name`` is the title and ``texts`` are free-text notes on how the tune
	was made; both end up as meta messages in a MIDI file.
	"""

	melody: typing.Tuple[MelodyTrack, ...] = ()
	support: typing.Tuple[SupportTrack, ...] = ()
	plan: typing.Optional[TuneSectionPlan] = None
	name: typing.Optional[str] = None
	texts: typing.Tuple[str, ...] = ()

	def __post_init__ (self) -> None:

		object.__setattr__(self, "melody", tuple(self.melody))
		object.__setattr__(self, "support", tuple(self.support))
		object.__setattr__(self, "texts", tuple(self.texts))

	@property
	def bar_count (self) -> int:

		"""Bars in the longest track (all tracks are equal in a valid tune)."""

		counts = [len(t.bars) for t in self.melody] + [len(t.bars) for t in self.support]
		return max(counts, default=0)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

# (section index, section, 1-based stream) -> exactly section.bars bars
MelodyGenerator = typing.Callable[[int, SectionMetadata, int], typing.Sequence[MelodyBar]]

# (section index, section) -> exactly section.bars bars
SupportGenerator = typing.Callable[[int, SectionMetadata], typing.Sequence[SupportBar]]


def by_section (
	generators: typing.Mapping[TuneSection, SupportGenerator],
	default: typing.Optional[SupportGenerator] = None
) -> SupportGenerator:

	"""Build a support generator that dispatches on the section kind.

	Sections with no entry use ``default``, or silent bars if there is none.
	"""

	def generate (index: int, section: SectionMetadata) -> typing.Sequence[SupportBar]:

		generator = generators.get(section.section, default)

		if generator is None:
			return [EMPTY_SUPPORT_BAR] * section.bars

		return generator(index, section)

	return generate


def _checked (bars: typing.Sequence[typing.Any], section: SectionMetadata, what: str) -> typing.Sequence[typing.Any]:

	if len(bars) != section.bars:
		raise statshouse.errors.StructuralInconsistency(
			f"{what} generator produced {len(bars)} bars for a {section.bars}-bar {section.section.value}"
		)

	return bars


def assemble_tune (
	plan: TuneSectionPlan,
	melody_setups: typing.Sequence[TrackSetup],
	notes_per_bar: int,
	melody_generator: MelodyGenerator,
	support: typing.Sequence[typing.Tuple[TrackSetup, SupportGenerator]] = ()
) -> Tune:

	"""
	Assemble a tune section by section.

	Stream ``i`` (1-based) gets ``melody_setups[i - 1]``. Each generator must
	return exactly ``section.bars`` bars for every section, or
	``StructuralInconsistency`` is raised.
	"""

	melody_bars: typing.List[typing.List[MelodyBar]] = [[] for _ in melody_setups]
	support_bars: typing.List[typing.List[SupportBar]] = [[] for _ in support]

	for index, section in enumerate(plan):

		logger.debug(f"Section {index}: {section.section.value} ({section.bars} bars)")

		for s in range(len(melody_setups)):
			melody_bars[s].extend(_checked(melody_generator(index, section, s + 1), section, "Melody"))

		for t, (_, generator) in enumerate(support):
			support_bars[t].extend(_checked(generator(index, section), section, "Support"))

	tune = Tune(
		melody = tuple(MelodyTrack(setup, notes_per_bar, tuple(bars)) for setup, bars in zip(melody_setups, melody_bars)),
		support = tuple(SupportTrack(setup, tuple(bars)) for (setup, _), bars in zip(support, support_bars)),
		plan = plan
	)

	validate_tune(tune)

	return tune


def validate_tune (tune: Tune) -> None:

	"""
	Check the structural consistency of a tune.

	- No melody track is on the GM percussion channel.
	- No two tracks share a channel.
	- All tracks have the same number of bars.
	- With a plan, melody tracks have exactly the plan's total bars.
	- Every melody bar has the track's declared number of slots.

	Raises ``StructuralInconsistency`` on the first failure.
	"""

	for track in tune.melody:
		if track.setup.channel == statshouse.constants.midi.GM1_PERCUSSION_CHANNEL:
			raise statshouse.errors.StructuralInconsistency(f"Melody track {track.setup.name!r} is on the percussion channel")

	channels = [t.setup.channel for t in tune.melody] + [t.setup.channel for t in tune.support]

	if len(set(channels)) != len(channels):
		raise statshouse.errors.StructuralInconsistency(f"Tracks share a channel: {channels}")

	lengths = {len(t.bars) for t in tune.melody} | {len(t.bars) for t in tune.support}

	if len(lengths) > 1:
		raise statshouse.errors.StructuralInconsistency(f"Tracks differ in length: {sorted(lengths)} bars")

	if tune.plan is not None:
		for track in tune.melody:
			if len(track.bars) != tune.plan.total_bars:
				raise statshouse.errors.StructuralInconsistency(
					f"Melody track has {len(track.bars)} bars, plan has {tune.plan.total_bars}"
				)

	for track in tune.melody:
		for number, bar in enumerate(track.bars):
			if len(bar) != track.notes_per_bar:
				raise statshouse.errors.StructuralInconsistency(
					f"Bar {number} has {len(bar)} slots, track declares {track.notes_per_bar}"
				)
