"""Analysis and benchmarking tools for the no-guess layout generator."""

import random
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .config import DEFAULT_MAX_ATTEMPTS, PRESETS
from .engine import Rule
from .errors import LayoutUnreachable
from .generator import generate_layout_report, verify_layout
from .grid import Grid

DEDUCTION_RULES = (
    Rule.SINGLE_CANDIDATE,
    Rule.ZERO_REMAINING,
    Rule.UNIVERSAL_MEMBERSHIP,
    Rule.UNIVERSAL_ABSENCE,
)


def format_grid(grid: Grid, *, show_coords: bool = True) -> str:
    """
    Format a grid's visible state as a human-readable string.

    Args:
        grid: Grid whose cells will be displayed.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where unknown cells are '.', flags 'F', revealed mines '*'
        and revealed cells their number.
    """
    n = grid.size
    visible = grid.snapshot()

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{col:2d}" for col in range(n))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * n - 1))

    for row in range(n):
        cells = " ".join(f" {visible[row * n + col]}" for col in range(n))
        lines.append(f"{row:2d} |" + cells if show_coords else cells)

    return "\n".join(lines)


def run_generation_single_test(
    size: int,
    mine_divisor: int,
    exclude_id: Optional[int] = None,
    *,
    show_boards: bool = False,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> Dict[str, object]:
    """
    Generate one layout and replay it to collect the trial's metrics.

    Args:
        size: Board side length.
        mine_divisor: Mine density divisor.
        exclude_id: First revealed cell; the board center if None.
        show_boards: If True, print the final trial board of the replay.
        max_attempts: Attempt budget for the generator.
        rng: Random generator for sampling.

    Returns:
        The replay engine's summary plus "attempts", "elapsed", "mines",
        "sampled_mines" and "outcome".
    """
    if exclude_id is None:
        exclude_id = (size // 2) * size + size // 2

    report = generate_layout_report(
        size, mine_divisor, exclude_id, max_attempts=max_attempts, rng=rng
    )
    engine = verify_layout(size, mine_divisor, report.layout, exclude_id)

    if show_boards:
        print(f"Board {size}x{size}, divisor {mine_divisor}, first cell {exclude_id}")
        print(f"Accepted after {report.attempts} attempts ({report.elapsed:.3f}s)")
        print(format_grid(engine.grid, show_coords=True))

    out = dict(engine.summary())
    out["attempts"] = report.attempts
    out["elapsed"] = report.elapsed
    out["mines"] = len(report.layout)
    out["sampled_mines"] = report.sampled_mines
    out["outcome"] = "solved" if engine.grid.mines_remaining_total == 0 else "unsolved"
    return out


def run_generation_many_tests(
    size: int,
    mine_divisor: int,
    runs: int,
    *,
    exclude_id: Optional[int] = None,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> Dict[str, float]:
    """
    Generate many layouts and return averaged metrics.

    Args:
        size: Board side length.
        mine_divisor: Mine density divisor.
        runs: Number of independent generations.
        exclude_id: First revealed cell; the board center if None.
        max_attempts: Attempt budget per generation.
        rng: Random generator shared by all runs.

    Returns:
        Dict with:
        - success_rate: share of runs that found a layout within budget
        - avg_attempts, median_attempts, p90_attempts
        - avg_elapsed
        - fallback_rate
        - avg_mines, avg_mines_dropped
        - avg_<rule>_count for each rule
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")
    if exclude_id is None:
        exclude_id = (size // 2) * size + size // 2

    attempts: List[int] = []
    elapsed: List[float] = []
    mines: List[int] = []
    dropped: List[int] = []
    fallbacks: List[bool] = []
    rule_totals: Dict[str, List[int]] = {rule.value: [] for rule in Rule}
    failures = 0

    for _ in range(runs):
        try:
            report = generate_layout_report(
                size, mine_divisor, exclude_id, max_attempts=max_attempts, rng=rng
            )
        except LayoutUnreachable:
            failures += 1
            continue

        attempts.append(report.attempts)
        elapsed.append(report.elapsed)
        mines.append(len(report.layout))
        dropped.append(report.sampled_mines - len(report.layout))
        fallbacks.append(report.fallback_used)
        for rule, count in report.rule_counts.items():
            rule_totals[rule].append(count)

    out: Dict[str, float] = {"success_rate": (runs - failures) / runs}
    if not attempts:
        return out

    attempts_arr = np.asarray(attempts, dtype=float)
    out["avg_attempts"] = float(attempts_arr.mean())
    out["median_attempts"] = float(np.median(attempts_arr))
    out["p90_attempts"] = float(np.percentile(attempts_arr, 90))
    out["avg_elapsed"] = float(np.mean(elapsed))
    out["fallback_rate"] = float(np.mean(fallbacks))
    out["avg_mines"] = float(np.mean(mines))
    out["avg_mines_dropped"] = float(np.mean(dropped))
    for rule, counts in rule_totals.items():
        out[f"avg_{rule}_count"] = float(np.mean(counts)) if counts else 0.0

    return out


def run_generation_level_analysis(
    runs: int,
    *,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated generation tests on the preset board sizes and plot summaries.

    Args:
        runs: Number of generations per preset.
        max_attempts: Attempt budget per generation.
        rng: Random generator shared by all runs.
        show_plots: If True, draw and show the summary figures.

    Returns:
        Mapping from preset name to statistics dict returned by
        run_generation_many_tests().
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (size, divisor) in PRESETS.items():
        results[level] = run_generation_many_tests(
            size, divisor, runs, max_attempts=max_attempts, rng=rng
        )

    if not show_plots:
        return results

    level_names = list(PRESETS.keys())
    x = np.arange(len(level_names))

    # 1) Deductions made (by rule)
    bar_w = 0.2
    plt.figure()  # type: ignore[misc]
    for offset, rule in enumerate(DEDUCTION_RULES):
        values = [results[n].get(f"avg_{rule.value}_count", 0.0) for n in level_names]
        plt.bar(x + (offset - 1.5) * bar_w, values, width=bar_w, label=rule.value)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average deductions per accepted layout")  # type: ignore[misc]
    plt.title("Deductions by rule")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Attempts needed
    avg_attempts = [results[n].get("avg_attempts", 0.0) for n in level_names]
    p90_attempts = [results[n].get("p90_attempts", 0.0) for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, avg_attempts, width=bar_w, label="mean")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, p90_attempts, width=bar_w, label="p90")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Sampled layouts")  # type: ignore[misc]
    plt.title("Attempts per accepted layout")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 3) Fallback rate by level
    fallback_rates = [results[n].get("fallback_rate", 0.0) for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, fallback_rates)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Fallback rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Layouts accepted through the endgame fallback")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results


def summarize_rule_mix(
    results: Dict[str, Dict[str, float]],
    *,
    level: str = "advanced",
) -> Dict[str, float]:
    """
    Compute the share of each deduction rule for one level.

    Args:
        results: Dict[level_name -> metrics_dict] from run_generation_level_analysis().
        level: Which level to summarize.

    Returns:
        Dict with "<rule>_frac" for each deduction rule and "total_deductions".
    """
    if level not in results:
        raise KeyError(f"Level {level!r} not found in results.")
    m = results[level]

    counts: Dict[str, float] = {}
    for rule in DEDUCTION_RULES:
        key = f"avg_{rule.value}_count"
        if key not in m:
            raise KeyError(f"Missing key {key!r} in metrics for level {level!r}.")
        counts[rule.value] = float(m[key])

    total = sum(counts.values())
    if total == 0.0:
        raise ZeroDivisionError("No deductions recorded; cannot compute fractions.")

    out = {f"{rule}_frac": count / total for rule, count in counts.items()}
    out["total_deductions"] = total
    return out
