"""Constraint-propagation engine that plays a hidden trial grid by deduction only."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .errors import InvariantViolation
from .grid import Grid
from .patterns import k_subsets

logger = logging.getLogger(__name__)

# Fallback fires when open cells plus unflagged mines drop below this.
DEFAULT_ENDGAME_SLOT_LIMIT = 8


class Rule(str, Enum):
    """Deduction rules, in the order the engine tries them."""

    SINGLE_CANDIDATE = "single_candidate"
    ZERO_REMAINING = "zero_remaining"
    UNIVERSAL_MEMBERSHIP = "universal_membership"
    UNIVERSAL_ABSENCE = "universal_absence"
    ENDGAME_FALLBACK = "endgame_fallback"


class Outcome(str, Enum):
    """Result of a single step (ADVANCED/STUCK) or of a full run (SOLVED/UNSOLVED)."""

    ADVANCED = "advanced"
    STUCK = "stuck"
    SOLVED = "solved"
    UNSOLVED = "unsolved"


@dataclass(frozen=True)
class Deduction:
    """One applied inference."""

    rule: Rule
    source: Optional[int]
    flagged: Tuple[int, ...] = ()
    revealed: Tuple[int, ...] = ()
    snapshot: Optional[Tuple[str, ...]] = None


class ConstraintEngine:
    """
    Deduction engine bound to a single grid.

    Each revealed cell with open neighbors is an "active cell"; its candidate
    list holds every way its remaining mines could sit among those neighbors.
    The engine applies four rules over these lists:

    1. Single candidate: only one arrangement is possible, so flag all of it.
    2. Zero remaining: the cell's mines are all flagged, so reveal the rest.
    3. Universal membership: after pruning, a cell is mined in every
       arrangement, so flag it.
    4. Universal absence: after pruning, a cell is mined in no arrangement,
       so reveal it.

    When nothing applies and the residue is small, the endgame fallback
    declares every open cell safe instead of searching further.
    """

    def __init__(
        self,
        grid: Grid,
        *,
        endgame_slot_limit: int = DEFAULT_ENDGAME_SLOT_LIMIT,
        allow_fallback: bool = True,
        record_steps: bool = False,
    ) -> None:
        """
        Initialize an engine for a grid that already has its mines assigned.

        Args:
            grid: Trial grid to play on. The engine mutates it.
            endgame_slot_limit: The fallback fires when open cells plus
                unflagged mines is below this value.
            allow_fallback: If False, a stuck run ends UNSOLVED.
            record_steps: If True, keep a Deduction with a board snapshot per
                step for replay.

        Raises:
            ValueError: If the grid has no mines assigned or the limit is negative.
        """
        if not grid.mines_assigned:
            raise ValueError("Mines must be assigned before running the engine.")
        if endgame_slot_limit < 0:
            raise ValueError("endgame_slot_limit must be non-negative.")

        self.grid: Grid = grid
        self.endgame_slot_limit: int = endgame_slot_limit
        self.allow_fallback: bool = allow_fallback
        self.record_steps: bool = record_steps

        # active_cells[i] = candidate mine subsets of open_neighbors[i]
        self.active_cells: Dict[int, List[FrozenSet[int]]] = {}

        # Metrics (for analysis)
        self.steps: int = 0
        self.rule_counts: Dict[str, int] = {rule.value: 0 for rule in Rule}
        self.pruned_patterns_count: int = 0
        self.fallback_used: bool = False
        self.history: List[Deduction] = []

    # -------------------------------------------------------------------------
    # Candidate bookkeeping
    # -------------------------------------------------------------------------

    def recompute_active_cells(self) -> Dict[int, List[FrozenSet[int]]]:
        """Rebuild the candidate lists of every revealed cell with open neighbors."""
        grid = self.grid
        active: Dict[int, List[FrozenSet[int]]] = {}
        for i, cell in enumerate(grid.cells):
            if not cell.revealed:
                continue
            open_nbrs = grid.open_neighbors[i]
            if open_nbrs:
                active[i] = k_subsets(sorted(open_nbrs), cell.mines_remaining)

        self.active_cells = active
        return active

    def _miscounts(
        self, pattern: FrozenSet[int], frame: Set[int], affected: Iterable[int]
    ) -> bool:
        """
        Check a pattern against every revealed cell touching its frame.

        Mining exactly the pattern within frame must neither exceed a cell's
        remaining budget nor leave more mines than the cell's open neighbors
        outside the frame could hold.
        """
        grid = self.grid
        for n in affected:
            required = grid.cells[n].mines_remaining
            hypothetical = len(pattern & grid.open_neighbors[n])
            if hypothetical > required:
                return True

            unaccounted = len(grid.open_neighbors[n] - frame)
            if required - unaccounted > hypothetical:
                return True
        return False

    def remove_impossibles(self) -> int:
        """
        Drop candidates that conflict with an overlapping revealed cell.

        Returns:
            Number of candidates removed.
        """
        grid = self.grid
        removed = 0
        for i in list(self.active_cells):
            frame = grid.open_neighbors[i]
            affected: Set[int] = set()
            for n in frame:
                affected |= grid.revealed_neighbors[n]

            patterns = self.active_cells[i]
            kept = [p for p in patterns if not self._miscounts(p, frame, affected)]
            removed += len(patterns) - len(kept)
            self.active_cells[i] = kept

        self.pruned_patterns_count += removed
        return removed

    # -------------------------------------------------------------------------
    # Board moves with safety checks
    # -------------------------------------------------------------------------

    def _flag(self, rule: Rule, source: Optional[int], ids: Iterable[int]) -> Tuple[int, ...]:
        flagged: List[int] = []
        for i in ids:
            if not self.grid.cells[i].mined:
                raise InvariantViolation(
                    rule.value, source, i, "tried to flag a cell without a mine"
                )
            self.grid.place_flag(i)
            flagged.append(i)
        return tuple(flagged)

    def _reveal(self, rule: Rule, source: Optional[int], ids: Iterable[int]) -> Tuple[int, ...]:
        revealed: List[int] = []
        for i in ids:
            if self.grid.cells[i].mined:
                raise InvariantViolation(
                    rule.value, source, i, "tried to reveal a mined cell"
                )
            revealed.extend(self.grid.reveal(i))
        return tuple(revealed)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _single_candidate(self) -> Optional[Deduction]:
        for i, patterns in self.active_cells.items():
            if len(patterns) == 1:
                rule = Rule.SINGLE_CANDIDATE
                return Deduction(rule, i, flagged=self._flag(rule, i, sorted(patterns[0])))
        return None

    def _zero_remaining(self) -> Optional[Deduction]:
        grid = self.grid
        for i in self.active_cells:
            open_nbrs = grid.open_neighbors[i]
            if open_nbrs and grid.cells[i].mines_remaining == 0:
                rule = Rule.ZERO_REMAINING
                return Deduction(rule, i, revealed=self._reveal(rule, i, sorted(open_nbrs)))
        return None

    def _universal_membership(self) -> Optional[Deduction]:
        for i, patterns in self.active_cells.items():
            if not patterns:
                continue
            first, rest = patterns[0], patterns[1:]
            for m in sorted(first):
                if all(m in p for p in rest):
                    rule = Rule.UNIVERSAL_MEMBERSHIP
                    return Deduction(rule, i, flagged=self._flag(rule, i, (m,)))
        return None

    def _universal_absence(self) -> Optional[Deduction]:
        for i, patterns in self.active_cells.items():
            if not patterns:
                continue
            for n in sorted(self.grid.open_neighbors[i]):
                if not any(n in p for p in patterns):
                    rule = Rule.UNIVERSAL_ABSENCE
                    return Deduction(rule, i, revealed=self._reveal(rule, i, (n,)))
        return None

    def _record(self, deduction: Deduction) -> None:
        self.steps += 1
        self.rule_counts[deduction.rule.value] += 1
        logger.debug(
            "%s from cell %s: flagged %s, revealed %s",
            deduction.rule.value,
            deduction.source,
            list(deduction.flagged),
            list(deduction.revealed),
        )
        if self.record_steps:
            self.history.append(
                Deduction(
                    deduction.rule,
                    deduction.source,
                    deduction.flagged,
                    deduction.revealed,
                    tuple(self.grid.snapshot()),
                )
            )

    def step(self) -> Outcome:
        """
        Apply the first rule that fires, and only that one inference.

        Active cells must be current; call recompute_active_cells() first.

        Returns:
            Outcome.ADVANCED if a rule fired, Outcome.STUCK otherwise.

        Raises:
            InvariantViolation: If a rule would flag a safe cell or reveal a mine.
        """
        early: Tuple[Callable[[], Optional[Deduction]], ...] = (
            self._single_candidate,
            self._zero_remaining,
        )
        for rule_fn in early:
            deduction = rule_fn()
            if deduction is not None:
                self._record(deduction)
                return Outcome.ADVANCED

        self.remove_impossibles()

        late: Tuple[Callable[[], Optional[Deduction]], ...] = (
            self._universal_membership,
            self._universal_absence,
        )
        for rule_fn in late:
            deduction = rule_fn()
            if deduction is not None:
                self._record(deduction)
                return Outcome.ADVANCED

        return Outcome.STUCK

    # -------------------------------------------------------------------------
    # Driver
    # -------------------------------------------------------------------------

    def apply_endgame_fallback(self) -> bool:
        """
        Declare every open cell safe when the unresolved residue is small.

        The mines still hidden among those cells are removed from the grid and
        the mine counter drops to zero. This trades completeness for a bounded
        running time; it does not search the residue.

        Returns:
            True if the fallback fired.
        """
        grid = self.grid
        open_cells = grid.open_cells()
        if len(open_cells) + grid.mines_remaining_total >= self.endgame_slot_limit:
            return False

        grid.clear_mines(open_cells)
        grid.mines_remaining_total = 0
        self.fallback_used = True
        self._record(Deduction(Rule.ENDGAME_FALLBACK, None))
        return True

    def run(self) -> Outcome:
        """
        Step until every mine is flagged or no rule applies.

        Returns:
            Outcome.SOLVED if the mine counter reached zero, else Outcome.UNSOLVED.
        """
        grid = self.grid
        while grid.mines_remaining_total > 0:
            self.recompute_active_cells()
            if self.step() is Outcome.ADVANCED:
                continue
            if not (self.allow_fallback and self.apply_endgame_fallback()):
                break

        outcome = Outcome.SOLVED if grid.mines_remaining_total == 0 else Outcome.UNSOLVED
        logger.debug(
            "Trial finished %s after %d steps (%d mines left)",
            outcome.value,
            self.steps,
            grid.mines_remaining_total,
        )
        return outcome

    def summary(self) -> Dict[str, object]:
        """Return the engine's metrics as a flat payload."""
        return {
            "steps": self.steps,
            "fallback_used": self.fallback_used,
            "pruned_patterns_count": self.pruned_patterns_count,
            "revealed_cells_count": self.grid.revealed_count,
            "mines_left": self.grid.mines_remaining_total,
            **{f"{rule}_count": count for rule, count in self.rule_counts.items()},
        }
