"""Exception types raised by the no-guess board generator."""

from typing import Optional


class InvalidArityError(ValueError):
    """Raised when a subset size is outside ``0 <= k <= len(items)``."""

    def __init__(self, k: int, n: int) -> None:
        super().__init__(
            f"Cannot choose subsets of size {k} from {n} items; "
            f"k must be between 0 and {n}."
        )
        self.k = k
        self.n = n


class InvariantViolation(RuntimeError):
    """
    Raised when a deduction rule tries to flag a safe cell or reveal a mine.

    This signals a defect in the constraint engine itself, never an ordinary
    "stuck" outcome, so nothing in the package catches it.
    """

    def __init__(self, rule: str, source: Optional[int], target: int, reason: str) -> None:
        super().__init__(
            f"Rule {rule!r} from cell {source} {reason} (cell {target})."
        )
        self.rule = rule
        self.source = source
        self.target = target


class LayoutUnreachable(RuntimeError):
    """Raised when no solvable layout was found within the attempt budget."""

    def __init__(self, size: int, mine_divisor: int, exclude_id: int, attempts: int) -> None:
        super().__init__(
            f"No solvable layout for a {size}x{size} board (divisor {mine_divisor}, "
            f"first cell {exclude_id}) after {attempts} attempts."
        )
        self.size = size
        self.mine_divisor = mine_divisor
        self.exclude_id = exclude_id
        self.attempts = attempts
