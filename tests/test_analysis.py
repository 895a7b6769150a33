import random

import matplotlib.pyplot as plt
import pytest

from noguess import (
    Grid,
    format_grid,
    run_generation_level_analysis,
    run_generation_many_tests,
    run_generation_single_test,
    summarize_rule_mix,
)
from noguess import analysis


def test_format_grid():
    grid = Grid(3, 9)
    grid.assign_mines({8})
    grid.reveal(4)
    grid.toggle_flag(8)

    plain = format_grid(grid, show_coords=False)
    assert plain.splitlines() == [" .  .  .", " .  1  .", " .  .  F"]

    labelled = format_grid(grid).splitlines()
    assert labelled[0] == "    0  1  2"
    assert labelled[3].startswith(" 1 |")


def test_single_test_reports_solved(capsys):
    out = run_generation_single_test(6, 6, show_boards=True, rng=random.Random(5))

    assert out["outcome"] == "solved"
    assert out["mines_left"] == 0
    assert out["attempts"] >= 1
    assert out["sampled_mines"] == 6
    assert "Accepted after" in capsys.readouterr().out


def test_many_tests_aggregates():
    out = run_generation_many_tests(6, 6, 4, rng=random.Random(8))

    assert out["success_rate"] == 1.0
    assert out["avg_attempts"] >= 1.0
    assert out["median_attempts"] <= out["p90_attempts"]
    assert 0.0 <= out["fallback_rate"] <= 1.0
    assert out["avg_mines"] + out["avg_mines_dropped"] == pytest.approx(6.0)
    assert "avg_single_candidate_count" in out


def test_many_tests_counts_failures(monkeypatch):
    # a corner mine seen from the center is never located
    monkeypatch.setattr(
        Grid, "sample_mine_set", lambda self, exclude_id, rng=None: frozenset({0})
    )
    out = run_generation_many_tests(3, 9, 2, exclude_id=4, max_attempts=3)
    assert out == {"success_rate": 0.0}


def test_many_tests_rejects_zero_runs():
    with pytest.raises(ValueError):
        run_generation_many_tests(6, 6, 0)


def test_level_analysis_over_presets(monkeypatch):
    monkeypatch.setattr(analysis, "PRESETS", {"tiny": (6, 6), "small": (8, 8)})
    monkeypatch.setattr(plt, "show", lambda *a, **k: None)

    results = run_generation_level_analysis(2, rng=random.Random(1))
    assert set(results) == {"tiny", "small"}
    assert all(r["success_rate"] == 1.0 for r in results.values())

    mix = summarize_rule_mix(results, level="small")
    fractions = [v for k, v in mix.items() if k.endswith("_frac")]
    assert sum(fractions) == pytest.approx(1.0)
    assert mix["total_deductions"] > 0
    plt.close("all")


def test_rule_mix_errors():
    with pytest.raises(KeyError):
        summarize_rule_mix({}, level="advanced")
    with pytest.raises(KeyError):
        summarize_rule_mix({"advanced": {"success_rate": 1.0}})

    zeros = {
        f"avg_{rule}_count": 0.0
        for rule in ("single_candidate", "zero_remaining",
                     "universal_membership", "universal_absence")
    }
    with pytest.raises(ZeroDivisionError):
        summarize_rule_mix({"advanced": zeros})
