"""Generation parameters and their YAML configuration.

A configuration file looks like::

	generation:
	  seed: 0          # 0 = no randomness, -1 = new each run, 1 = from the data
	  style: house     # plain, gentle or house
	  intro_bars: auto # auto, 0 for none, or a bar count
	  hetero: false    # treat all streams as equals
	  name: Solar PV
"""

import dataclasses
import enum
import logging
import os
import random
import typing

import yaml

import statshouse.data
import statshouse.errors
import statshouse.progression


logger = logging.getLogger(__name__)


# Special seed values, resolved before generation.
SEED_NO_RANDOMNESS = 0
SEED_FROM_DATA = 1

# Special intro bar count: let the arrangement choose.
INTRO_BARS_AUTO = -1


class ProductionLevel (enum.IntEnum):

	"""How heavily the data is produced into music."""

	NONE = 0
	GENTLE = 1
	DANCEABLE = 2


class Style (enum.Enum):

	"""Arrangement style; each implies a production level."""

	PLAIN = "plain"
	GENTLE = "gentle"
	HOUSE = "house"

	@property
	def level (self) -> ProductionLevel:

		return _STYLE_LEVELS[self]


_STYLE_LEVELS: typing.Dict[Style, ProductionLevel] = {
	Style.PLAIN: ProductionLevel.NONE,
	Style.GENTLE: ProductionLevel.GENTLE,
	Style.HOUSE: ProductionLevel.DANCEABLE,
}


@dataclasses.dataclass(frozen=True)
class GenerationParameters:

	"""Parameters for generating one tune.

	Parameters:
		seed: 0 for no randomness (always take the best choice); any other
		      value seeds every progression group. Use
		      :meth:`with_resolved_seed` to turn the special -1 (new each
		      run) and 1 (from the data) values into a concrete seed.
		style: Arrangement style.
		intro_bars: Bars of intro and outro; 0 for none, -1 for automatic.
		hetero: True if all streams are equally important.
		name: Optional tune name.
	"""

	seed: int = SEED_NO_RANDOMNESS
	style: Style = Style.PLAIN
	intro_bars: int = 0
	hetero: bool = False
	name: typing.Optional[str] = None

	def __post_init__ (self) -> None:

		if not isinstance(self.style, Style):
			raise statshouse.errors.InvalidArgument(f"Unknown style: {self.style}")

		if self.intro_bars < INTRO_BARS_AUTO:
			raise statshouse.errors.InvalidArgument(f"Intro bars must be >= {INTRO_BARS_AUTO}: {self.intro_bars}")

	@property
	def no_randomness (self) -> bool:

		return self.seed == SEED_NO_RANDOMNESS

	@property
	def intro_requested (self) -> bool:

		return self.intro_bars != 0

	@property
	def intro_fixed_length (self) -> bool:

		return self.intro_bars > 0

	@property
	def intro_auto (self) -> bool:

		return self.intro_bars == INTRO_BARS_AUTO

	def with_resolved_seed (self, dataset: typing.Optional[statshouse.data.Dataset] = None) -> "GenerationParameters":

		"""Return parameters with a negative or data-based seed made concrete.

		A negative seed becomes a fresh seed for this run. A seed of 1 becomes a
		stable hash of the dataset, so the same data always gives the same tune.
		"""

		if self.seed < 0:
			seed = random.SystemRandom().randrange(2, 1 << 31)
		elif self.seed == SEED_FROM_DATA:
			if dataset is None:
				raise statshouse.errors.InvalidArgument("A dataset is needed to derive the seed from the data")
			seed = _dataset_seed(dataset)
		else:
			return self

		logger.info(f"Resolved seed {self.seed} to {seed}")

		return dataclasses.replace(self, seed=seed)

	@classmethod
	def from_config (cls, config: typing.Mapping[str, typing.Any]) -> "GenerationParameters":

		"""Build parameters from a configuration mapping.

		Accepts either the ``generation`` section itself or a whole config
		containing one. Missing keys take their defaults.
		"""

		section = config.get("generation", config) or {}

		intro = section.get("intro_bars", 0)
		if isinstance(intro, str):
			if intro.strip().lower() != "auto":
				raise statshouse.errors.InvalidArgument(f"Intro bars must be 'auto' or a number: {intro}")
			intro = INTRO_BARS_AUTO

		style_name = str(section.get("style", Style.PLAIN.value)).lower()
		try:
			style = Style(style_name)
		except ValueError as e:
			raise statshouse.errors.InvalidArgument(f"Unknown style: {style_name}") from e

		return cls(
			seed = int(section.get("seed", SEED_NO_RANDOMNESS)),
			style = style,
			intro_bars = int(intro),
			hetero = bool(section.get("hetero", False)),
			name = section.get("name")
		)


def _dataset_seed (dataset: statshouse.data.Dataset) -> int:

	h = 0
	for row in dataset.data_rows():
		h = statshouse.progression.ints_hash((h, statshouse.progression.string_hash(",".join(row))))

	# Keep clear of the special values.
	return h if h not in (SEED_NO_RANDOMNESS, SEED_FROM_DATA) and h > 0 else (abs(h) + 2)


def load_config (config_path: typing.Union[str, os.PathLike] = "statshouse.yaml") -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, "r") as f:
		return yaml.safe_load(f) or {}


def load_parameters (config_path: typing.Union[str, os.PathLike] = "statshouse.yaml") -> GenerationParameters:

	"""Load generation parameters from a YAML config file."""

	return GenerationParameters.from_config(load_config(config_path))
