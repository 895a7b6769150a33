import random

import pytest

from noguess import PRESETS, GeneratorConfig


def test_defaults():
    config = GeneratorConfig(size=8, mine_divisor=5)
    assert config.max_attempts == 10_000
    assert config.endgame_slot_limit == 8
    assert config.allow_fallback
    assert config.mine_count == 12


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_presets(name):
    config = GeneratorConfig.from_preset(name)
    assert (config.size, config.mine_divisor) == PRESETS[name]


def test_preset_overrides():
    config = GeneratorConfig.from_preset("advanced", seed=3, max_attempts=None)
    assert config.size == 16
    assert config.seed == 3
    assert config.max_attempts is None


def test_unknown_preset():
    with pytest.raises(ValueError):
        GeneratorConfig.from_preset("expert")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"size": 0, "mine_divisor": 5},
        {"size": 8, "mine_divisor": 0},
        {"size": 8, "mine_divisor": 5, "max_attempts": 0},
        {"size": 8, "mine_divisor": 5, "endgame_slot_limit": -1},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        GeneratorConfig(**kwargs)


def test_seeded_rng_repeats():
    config = GeneratorConfig(size=8, mine_divisor=5, seed=42)
    assert isinstance(config.rng(), random.Random)
    assert config.rng().random() == config.rng().random()
