"""Reproducible, independent sources of randomness for arrangement choices.

Each arrangement decision belongs to a *progression group*, named by a
unique id ("split", "house", "bass", ...). A group folds the tune seed, its
own id and any *progression* integers (section number, bar number, ...) into
a 64-bit seed, so two decisions never share entropy unless they share a
group id and progression values, and the same inputs always make the same
choice.

When the tune seed is 0 (no randomness) every pick takes the first, "best",
option.

Hashes here are stable across processes and platforms; Python's own
``hash()`` is salted per process and would break reproducibility.
"""

import math
import random
import typing

import statshouse.errors

if typing.TYPE_CHECKING:
	import statshouse.params


T = typing.TypeVar("T")

_MASK_32 = 0xFFFFFFFF
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _to_signed_32 (value: int) -> int:

	value &= _MASK_32
	return value - (1 << 32) if value & 0x80000000 else value


def string_hash (text: str) -> int:

	"""Stable signed 32-bit hash of a string (polynomial, base 31)."""

	h = 0
	for ch in text:
		h = (31 * h + ord(ch)) & _MASK_32
	return _to_signed_32(h)


def ints_hash (values: typing.Sequence[int]) -> int:

	"""Stable signed 32-bit hash of a sequence of integers."""

	h = 1
	for v in values:
		h = (31 * h + _to_signed_32(v)) & _MASK_32
	return _to_signed_32(h)


def derive_seed (tune_seed: int, group_id: int, *progression: int) -> int:

	"""Fold tune seed, group id and progression values into a 64-bit seed."""

	seed = (
		tune_seed
		^ (tune_seed << 13)
		^ (group_id << 3)
		^ (group_id << 32)
		^ (ints_hash(progression) << 17)
	)

	return seed & _MASK_64


class ZeroRandom (random.Random):

	"""A random source that always returns its lowest possible value.

	Used when the tune has no randomness, so that code drawing several values
	from one source still takes the first option every time.
	"""

	def random (self) -> float:

		return 0.0

	def getrandbits (self, k: int) -> int:

		return 0


def next_boolean (rng: random.Random) -> bool:

	"""Draw a fair coin flip; always False from a ``ZeroRandom``."""

	return rng.getrandbits(1) == 1


# ---------------------------------------------------------------------------
# Distributions: choose an index in [0, n) given a random source.
# ---------------------------------------------------------------------------

Distribution = typing.Callable[[random.Random, int], int]


def pick_zero (rng: random.Random, n: int) -> int:

	"""Always the first option; for tests and fixed choices."""

	return 0


def pick_uniform (rng: random.Random, n: int) -> int:

	"""Every option equally likely."""

	return rng.randrange(n)


def pick_square (rng: random.Random, n: int) -> int:

	"""Biased towards the first options (product of two uniform draws)."""

	return min(n - 1, math.floor(rng.random() * rng.random() * n))


def pick_one (rng: random.Random, distribution: Distribution, choices: typing.Sequence[T]) -> T:

	"""Pick one of the choices from an existing random source."""

	if not choices:
		raise statshouse.errors.InvalidArgument("Choices cannot be empty")

	return choices[distribution(rng, len(choices))]


class ProgressionGroup:

	"""A named scope of reproducible randomness within one tune."""

	def __init__ (self, params: "statshouse.params.GenerationParameters", unique_id: typing.Union[str, int]) -> None:

		"""Create a group for the given generation parameters.

		Parameters:
			params: Generation parameters; supplies the tune seed.
			unique_id: Group name or number; strings are hashed stably.
		"""

		self.params = params
		self.unique_id = unique_id
		self._id = string_hash(unique_id) if isinstance(unique_id, str) else int(unique_id)

	@property
	def no_randomness (self) -> bool:

		return self.params.no_randomness

	def seed (self, *progression: int) -> int:

		"""The derived 64-bit seed for this group and progression values."""

		return derive_seed(self.params.seed, self._id, *progression)

	def rng (self, *progression: int) -> random.Random:

		"""A fresh random source for this group and progression values.

		Returns a ``ZeroRandom`` when the tune has no randomness.
		"""

		if self.no_randomness:
			return ZeroRandom()

		return random.Random(self.seed(*progression))

	def pick_one (self, distribution: Distribution, choices: typing.Sequence[T], *progression: int) -> T:

		"""Pick one of the choices for the given progression values.

		With no randomness this is always ``choices[0]`` and no random source
		is built.
		"""

		if not choices:
			raise statshouse.errors.InvalidArgument("Choices cannot be empty")

		if self.no_randomness:
			return choices[0]

		return pick_one(self.rng(*progression), distribution, choices)

	def pick_one_no_progression (self, distribution: Distribution, choices: typing.Sequence[T]) -> T:

		"""Pick one of the choices keyed only by the number of choices."""

		return self.pick_one(distribution, choices, len(choices))

	def __repr__ (self) -> str:

		return f"ProgressionGroup({self.unique_id!r})"
