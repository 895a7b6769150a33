import random

import pytest

from noguess import ConstraintEngine, Grid, InvariantViolation, Outcome, Rule, verify_layout


def trial(size, divisor, mines, first):
    grid = Grid(size, divisor)
    grid.assign_mines(mines)
    grid.reveal(first)
    return grid


def test_engine_requires_mines():
    with pytest.raises(ValueError):
        ConstraintEngine(Grid(3, 9))


def test_active_cells_hold_candidate_patterns():
    grid = trial(3, 9, {5}, 0)
    engine = ConstraintEngine(grid)
    active = engine.recompute_active_cells()

    # revealed: 0, 1, 3, 4, 6, 7; open: 2, 5, 8
    assert set(active) == {1, 4, 7}
    assert active[1] == [frozenset({2}), frozenset({5})]
    assert active[4] == [frozenset({2}), frozenset({5}), frozenset({8})]
    assert active[7] == [frozenset({5}), frozenset({8})]


def test_zero_remaining_cell_has_no_candidates():
    grid = trial(3, 9, {8}, 4)
    grid.toggle_flag(8)
    active = ConstraintEngine(grid).recompute_active_cells()
    assert active == {4: []}


@pytest.mark.parametrize("mine, rule", [
    (2, Rule.SINGLE_CANDIDATE),
    (6, Rule.SINGLE_CANDIDATE),
    (8, Rule.SINGLE_CANDIDATE),
    (5, Rule.UNIVERSAL_MEMBERSHIP),
    (7, Rule.UNIVERSAL_MEMBERSHIP),
])
def test_single_mine_from_corner_is_located(mine, rule):
    engine = verify_layout(3, 9, {mine}, 0)

    assert engine.grid.mines_remaining_total == 0
    assert engine.grid.cells[mine].flagged
    assert not engine.fallback_used
    assert engine.rule_counts[rule.value] == 1


def test_single_candidate_step_flags_whole_pattern():
    grid = trial(3, 9, {8}, 0)
    engine = ConstraintEngine(grid, record_steps=True)
    engine.recompute_active_cells()

    assert engine.step() is Outcome.ADVANCED
    deduction = engine.history[-1]
    assert deduction.rule is Rule.SINGLE_CANDIDATE
    assert deduction.source == 4
    assert deduction.flagged == (8,)
    assert deduction.snapshot is not None and deduction.snapshot[8] == "F"


def test_zero_remaining_step_reveals_open_neighbors():
    grid = trial(3, 9, {8}, 4)
    grid.toggle_flag(8)
    engine = ConstraintEngine(grid, record_steps=True)
    engine.recompute_active_cells()

    assert engine.step() is Outcome.ADVANCED
    assert engine.history[-1].rule is Rule.ZERO_REMAINING
    assert grid.open_cells() == []
    assert grid.revealed_count == 8


def test_universal_absence_step_reveals_cell():
    grid = trial(3, 9, {8}, 4)
    engine = ConstraintEngine(grid, record_steps=True)
    engine.recompute_active_cells()
    engine.active_cells[4] = [frozenset({8}), frozenset({7})]

    assert engine.step() is Outcome.ADVANCED
    deduction = engine.history[-1]
    assert deduction.rule is Rule.UNIVERSAL_ABSENCE
    assert deduction.source == 4
    assert deduction.revealed[0] == 0
    assert grid.cells[0].revealed


def test_remove_impossibles_prunes_and_is_idempotent():
    grid = trial(3, 9, {5}, 0)
    engine = ConstraintEngine(grid)
    engine.recompute_active_cells()

    assert engine.remove_impossibles() == 2
    once = {i: list(p) for i, p in engine.active_cells.items()}
    assert once[4] == [frozenset({5})]

    assert engine.remove_impossibles() == 0
    assert engine.active_cells == once


def test_remove_impossibles_keeps_true_arrangement():
    rng = random.Random(3)
    for _ in range(20):
        grid = Grid(6, 5)
        mines = grid.sample_mine_set(14, rng)
        grid.assign_mines(mines)
        grid.reveal(14)
        engine = ConstraintEngine(grid)
        engine.recompute_active_cells()
        engine.remove_impossibles()

        for i, patterns in engine.active_cells.items():
            if not patterns:
                continue
            truth = frozenset(n for n in grid.open_neighbors[i] if n in mines)
            assert truth in patterns


def test_remove_impossibles_is_idempotent_through_whole_runs():
    rng = random.Random(17)
    for _ in range(40):
        grid = Grid(8, 5)
        mines = grid.sample_mine_set(27, rng)
        grid.assign_mines(mines)
        grid.reveal(27)
        engine = ConstraintEngine(grid, allow_fallback=False)

        while grid.mines_remaining_total > 0:
            engine.recompute_active_cells()
            engine.remove_impossibles()
            pruned = {i: list(p) for i, p in engine.active_cells.items()}
            assert engine.remove_impossibles() == 0
            assert engine.active_cells == pruned
            if engine.step() is Outcome.STUCK:
                break


def test_stuck_when_nothing_applies():
    grid = trial(3, 9, {0}, 4)
    engine = ConstraintEngine(grid)
    engine.recompute_active_cells()
    assert engine.step() is Outcome.STUCK


def test_center_start_on_three_by_three_is_unsolved():
    # eight open cells plus one mine is above the fallback threshold
    engine = verify_layout(3, 9, {0}, 4)
    assert engine.grid.mines_remaining_total == 1
    assert not engine.fallback_used
    assert engine.run() is Outcome.UNSOLVED


def test_fallback_clears_residual_mines():
    engine = verify_layout(3, 9, {0}, 4, endgame_slot_limit=10)

    assert engine.fallback_used
    assert engine.grid.mines_remaining_total == 0
    assert engine.grid.mines == frozenset()
    assert engine.rule_counts[Rule.ENDGAME_FALLBACK.value] == 1


def test_fallback_can_be_disabled():
    engine = verify_layout(3, 9, {0}, 4, endgame_slot_limit=10, allow_fallback=False)
    assert not engine.fallback_used
    assert engine.grid.mines == frozenset({0})


def test_flagging_a_safe_cell_is_an_invariant_violation():
    grid = trial(3, 9, {8}, 4)
    engine = ConstraintEngine(grid)
    engine.recompute_active_cells()
    engine.active_cells[4] = [frozenset({0})]

    with pytest.raises(InvariantViolation) as excinfo:
        engine.step()
    assert excinfo.value.rule == Rule.SINGLE_CANDIDATE.value
    assert excinfo.value.target == 0


def test_revealing_a_mine_is_an_invariant_violation():
    grid = trial(3, 9, {2}, 4)
    engine = ConstraintEngine(grid)
    engine.recompute_active_cells()
    engine.active_cells[4] = [frozenset({0}), frozenset({1})]

    with pytest.raises(InvariantViolation) as excinfo:
        engine.step()
    assert excinfo.value.rule == Rule.UNIVERSAL_ABSENCE.value
    assert excinfo.value.target == 2


@pytest.mark.parametrize("size", [4, 6, 8, 10, 12, 16])
@pytest.mark.parametrize("divisor", [4, 6, 8, 10])
def test_rules_never_break_on_random_boards(size, divisor):
    rng = random.Random(size * 100 + divisor)
    first = (size // 2) * size + size // 2
    for _ in range(3):
        grid = Grid(size, divisor)
        mines = grid.sample_mine_set(first, rng)
        engine = verify_layout(size, divisor, mines, first, allow_fallback=False)

        # every flag the engine placed sits on a mine
        for i, cell in enumerate(engine.grid.cells):
            if cell.flagged:
                assert i in mines
            if cell.revealed:
                assert i not in mines


def test_summary_payload():
    engine = verify_layout(3, 9, {8}, 0)
    summary = engine.summary()
    assert summary["steps"] == 1
    assert summary["mines_left"] == 0
    assert summary["single_candidate_count"] == 1
    assert summary["fallback_used"] is False
