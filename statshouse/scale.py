"""Musical scales as semitone step patterns.

A scale is an ordered list of positive semitone steps summing to one octave
(12). Walking ``n`` scale steps up from the root gives a semitone offset;
negative ``n`` walks down.
"""

import dataclasses
import typing

import statshouse.errors


SEMITONES_PER_OCTAVE = 12


@dataclasses.dataclass(frozen=True)
class Scale:

	"""A scale given by its semitone steps."""

	steps: typing.Tuple[int, ...]

	def __post_init__ (self) -> None:

		steps = tuple(int(s) for s in self.steps)

		if not steps:
			raise statshouse.errors.InvalidArgument("Scale must have at least one step")

		if any(s <= 0 for s in steps):
			raise statshouse.errors.InvalidArgument("Scale steps must be positive")

		if sum(steps) != SEMITONES_PER_OCTAVE:
			raise statshouse.errors.InvalidArgument(f"Scale steps must sum to {SEMITONES_PER_OCTAVE}: {steps}")

		object.__setattr__(self, "steps", steps)

	def __len__ (self) -> int:

		return len(self.steps)

	def note_offset (self, scale_steps: int) -> int:

		"""
		Semitone offset from the root after walking ``scale_steps`` steps.

		Example:
			```python
			MAJOR.note_offset(7)   # → 12
			MAJOR.note_offset(2)   # → 4
			MAJOR.note_offset(-1)  # → -1
			```
		"""

		n = len(self.steps)
		octaves = scale_steps // n
		residue = scale_steps % n

		return SEMITONES_PER_OCTAVE * octaves + sum(self.steps[:residue])


MAJOR = Scale((2, 2, 1, 2, 2, 2, 1))
NATURAL_MINOR = Scale((2, 1, 2, 2, 1, 2, 2))
HARMONIC_MINOR = Scale((2, 1, 2, 2, 1, 3, 1))
MELODIC_MINOR = Scale((2, 1, 2, 2, 2, 2, 1))
DORIAN = Scale((2, 1, 2, 2, 2, 1, 2))
MINOR_PENTATONIC = Scale((3, 2, 2, 3, 2))
MAJOR_PENTATONIC = Scale((2, 2, 3, 2, 3))
CHROMATIC = Scale((1,) * SEMITONES_PER_OCTAVE)


SCALES: typing.Dict[str, Scale] = {
	"major": MAJOR,
	"natural_minor": NATURAL_MINOR,
	"harmonic_minor": HARMONIC_MINOR,
	"melodic_minor": MELODIC_MINOR,
	"dorian": DORIAN,
	"minor_pentatonic": MINOR_PENTATONIC,
	"major_pentatonic": MAJOR_PENTATONIC,
	"chromatic": CHROMATIC,
}


def get_scale (name: str) -> Scale:

	"""
	Return a named scale.
	"""

	if name not in SCALES:
		raise statshouse.errors.InvalidArgument(f"Unknown scale: {name}")

	return SCALES[name]
