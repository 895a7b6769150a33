import random

import pytest

from noguess import (
    GeneratorConfig,
    Grid,
    LayoutUnreachable,
    generate_from_config,
    generate_layout_report,
    generate_solvable_layout,
    verify_layout,
)


@pytest.mark.parametrize("size, divisor, first", [(6, 6, 14), (8, 8, 27), (8, 6, 0)])
def test_layout_replays_without_fallback(size, divisor, first):
    rng = random.Random(size + divisor + first)
    for _ in range(3):
        layout = generate_solvable_layout(size, divisor, first, rng=rng)
        engine = verify_layout(size, divisor, layout, first, allow_fallback=False)
        assert engine.grid.mines_remaining_total == 0
        assert not engine.fallback_used


def test_layout_avoids_safe_zone():
    rng = random.Random(4)
    grid = Grid(8, 6)
    safe = set(grid.neighbors(9)) | {9}
    for _ in range(5):
        layout = generate_solvable_layout(8, 6, 9, rng=rng)
        assert not layout & safe
        assert all(0 <= i < 64 for i in layout)


def test_report_fields():
    report = generate_layout_report(8, 8, 27, rng=random.Random(1))

    assert report.attempts >= 1
    assert report.sampled_mines == 8
    assert len(report.layout) <= report.sampled_mines
    assert report.elapsed >= 0.0
    assert report.steps == sum(report.rule_counts.values())
    if not report.fallback_used:
        assert len(report.layout) == report.sampled_mines


def test_dense_small_board_is_reachable():
    # 8 mines in 12 eligible cells; only a few layouts survive
    layout = generate_solvable_layout(4, 2, 0, max_attempts=20000, rng=random.Random(0))
    assert not layout & {0, 1, 4, 5}
    engine = verify_layout(4, 2, layout, 0, allow_fallback=False)
    assert engine.grid.mines_remaining_total == 0


def test_reduced_layout_from_fallback_is_solvable():
    sampled = {3, 7, 8, 9, 11, 12, 13, 15}
    engine = verify_layout(4, 2, sampled, 0)
    assert engine.fallback_used
    assert engine.grid.mines < frozenset(sampled)

    replay = verify_layout(4, 2, engine.grid.mines, 0, allow_fallback=False)
    assert replay.grid.mines_remaining_total == 0


def test_gives_up_after_max_attempts(monkeypatch):
    monkeypatch.setattr(
        Grid, "sample_mine_set", lambda self, exclude_id, rng=None: frozenset({0})
    )
    with pytest.raises(LayoutUnreachable) as excinfo:
        generate_layout_report(3, 9, 4, max_attempts=5)
    assert excinfo.value.attempts == 5
    assert excinfo.value.size == 3


def test_board_too_small_for_safe_zone():
    with pytest.raises(ValueError):
        generate_solvable_layout(3, 9, 4, max_attempts=1)


def test_same_seed_gives_same_layout():
    config = GeneratorConfig(size=8, mine_divisor=6, seed=7)
    first = generate_from_config(config, 27)
    second = generate_from_config(config, 27)
    assert first.layout == second.layout
    assert first.attempts == second.attempts


def test_generate_from_config_honours_settings():
    config = GeneratorConfig(size=6, mine_divisor=6, seed=3, allow_fallback=False)
    report = generate_from_config(config, 0)
    assert not report.fallback_used
    assert len(report.layout) == config.mine_count
