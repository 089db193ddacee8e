import logging

import pytest

import statshouse.data
import statshouse.errors
import statshouse.params


def test_defaults () -> None:

	"""Plain, no randomness, no intro."""

	params = statshouse.params.GenerationParameters()

	assert params.no_randomness
	assert params.style == statshouse.params.Style.PLAIN
	assert not params.intro_requested


def test_style_levels () -> None:

	"""Each style implies a production level."""

	assert statshouse.params.Style.PLAIN.level == statshouse.params.ProductionLevel.NONE
	assert statshouse.params.Style.GENTLE.level == statshouse.params.ProductionLevel.GENTLE
	assert statshouse.params.Style.HOUSE.level == statshouse.params.ProductionLevel.DANCEABLE


def test_intro_bars () -> None:

	"""-1 is automatic, positive is fixed, below -1 is invalid."""

	auto = statshouse.params.GenerationParameters(intro_bars=statshouse.params.INTRO_BARS_AUTO)
	fixed = statshouse.params.GenerationParameters(intro_bars=4)

	assert auto.intro_auto and auto.intro_requested and not auto.intro_fixed_length
	assert fixed.intro_fixed_length and not fixed.intro_auto

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.params.GenerationParameters(intro_bars=-2)


def test_resolved_seed_from_data (sample_gen_y: statshouse.data.Dataset) -> None:

	"""Seed 1 becomes a stable, non-special hash of the data."""

	params = statshouse.params.GenerationParameters(seed=statshouse.params.SEED_FROM_DATA)

	first = params.with_resolved_seed(sample_gen_y)
	second = params.with_resolved_seed(sample_gen_y)

	assert first.seed == second.seed
	assert first.seed > statshouse.params.SEED_FROM_DATA

	with pytest.raises(statshouse.errors.InvalidArgument):
		params.with_resolved_seed()


def test_resolved_seed_per_run () -> None:

	"""A negative seed becomes a concrete positive one; others are kept."""

	resolved = statshouse.params.GenerationParameters(seed=-1).with_resolved_seed()

	assert resolved.seed > statshouse.params.SEED_FROM_DATA
	assert statshouse.params.GenerationParameters(seed=77).with_resolved_seed().seed == 77
	assert statshouse.params.GenerationParameters(seed=0).with_resolved_seed().no_randomness


def test_from_config () -> None:

	"""A generation section builds validated parameters."""

	params = statshouse.params.GenerationParameters.from_config({
		"generation": {"seed": 3, "style": "House", "intro_bars": "auto", "hetero": True, "name": "PV"}
	})

	assert params == statshouse.params.GenerationParameters(
		seed = 3,
		style = statshouse.params.Style.HOUSE,
		intro_bars = statshouse.params.INTRO_BARS_AUTO,
		hetero = True,
		name = "PV"
	)


def test_from_config_rejects_bad_values () -> None:

	"""Unknown styles and intro words are errors."""

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.params.GenerationParameters.from_config({"style": "techno"})

	with pytest.raises(statshouse.errors.InvalidArgument):
		statshouse.params.GenerationParameters.from_config({"intro_bars": "some"})


def test_load_parameters_from_yaml (tmp_path) -> None:

	"""Parameters load from a YAML file."""

	path = tmp_path / "statshouse.yaml"
	path.write_text("generation:\n  seed: 9\n  style: gentle\n  intro_bars: 2\n")

	params = statshouse.params.load_parameters(path)

	assert params.seed == 9
	assert params.style == statshouse.params.Style.GENTLE
	assert params.intro_bars == 2


def test_load_config_missing_file (tmp_path, caplog: pytest.LogCaptureFixture) -> None:

	"""A missing file gives defaults and a warning."""

	with caplog.at_level(logging.WARNING):
		config = statshouse.params.load_config(tmp_path / "absent.yaml")

	assert config == {}
	assert "not found" in caplog.text
	assert statshouse.params.GenerationParameters.from_config(config) == statshouse.params.GenerationParameters()
