"""
Quickstart example for no-guess Minesweeper.

This script demonstrates basic usage of the generator.
"""

import random

from noguess import (
    Game,
    format_grid,
    generate_layout_report,
    run_generation_many_tests,
    verify_layout,
)


def main():
    print("=" * 60)
    print("No-guess Minesweeper - Quickstart Example")
    print("=" * 60)

    rng = random.Random(7)

    # Example 1: Generate a single layout
    print("\n1. Generating a 10x10 layout (1 mine per 6 cells), first cell (5, 5)...")
    print("-" * 60)

    size, divisor = 10, 6
    first = 5 * size + 5
    report = generate_layout_report(size, divisor, first, rng=rng)

    print(f"Attempts: {report.attempts}")
    print(f"Time: {report.elapsed:.3f}s")
    print(f"Mines: {len(report.layout)} (sampled {report.sampled_mines})")
    print(f"Endgame fallback used: {report.fallback_used}")
    for rule, count in report.rule_counts.items():
        print(f"  {rule}: {count}")

    # Example 2: Show the trial board after replaying the deductions
    print("\n2. Trial board after deduction:")
    print("-" * 60)
    engine = verify_layout(size, divisor, report.layout, first)
    print(format_grid(engine.grid))

    # Example 3: Start a real game from the same first cell
    print("\n3. Opening a game at the same cell:")
    print("-" * 60)
    game = Game(size, divisor, rng=rng)
    status, changes = game.reveal(first)
    print(f"Status: {status.value}, cells revealed: {len(changes)}")
    print(game.format_board(color=False))

    # Example 4: Generation cost by density
    print("\n4. Attempts per layout by density (10 boards each)...")
    print("-" * 60)

    for divisor in (8, 6, 5):
        results = run_generation_many_tests(size, divisor, runs=10, rng=rng)
        print(
            f"1/{divisor} mines: {results.get('avg_attempts', float('nan')):7.1f} "
            f"attempts, success {results['success_rate'] * 100:5.1f}%"
        )

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
