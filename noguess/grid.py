"""Square Minesweeper grid with incremental open/revealed neighbor indices."""

import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .utils import get_neighborhoods


@dataclass
class Cell:
    """State of a single cell."""

    mined: bool = False
    flagged: bool = False
    revealed: bool = False
    number: int = 0
    # Neighboring mines not yet accounted for by a flag.
    mines_remaining: int = 0


class Grid:
    """
    An n x n board whose cells are addressed by dense row-major ids.

    Besides the cells and the adjacency, the grid keeps the bookkeeping a
    deduction engine needs and updates it on every reveal or flag:

    - ``open_neighbors[i]``: neighbors of i that are neither flagged nor revealed
    - ``revealed_neighbors[i]``: neighbors of i that are revealed
    - ``mines_remaining_total``: mines on the board not yet flagged
    """

    def __init__(self, size: int, mine_divisor: int) -> None:
        """
        Build the cells and adjacency for a board. No mines are placed yet.

        Args:
            size: Number of cells along each side, must be > 0.
            mine_divisor: One cell in every ``mine_divisor`` holds a mine,
                must be > 0.

        Raises:
            ValueError: If size or mine_divisor is not positive.
        """
        if size <= 0:
            raise ValueError("size must be positive.")
        if mine_divisor <= 0:
            raise ValueError("mine_divisor must be positive.")

        self.size: int = size
        self.mine_divisor: int = mine_divisor
        self.cells: List[Cell] = [Cell() for _ in range(size * size)]
        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(size)

        self.mines: FrozenSet[int] = frozenset()
        self.mines_assigned: bool = False
        self.mines_remaining_total: int = 0
        self.revealed_count: int = 0
        self.exploded: Optional[int] = None

        self.open_neighbors: Dict[int, Set[int]] = {
            i: set(nbrs) for i, nbrs in enumerate(self._neighborhoods)
        }
        self.revealed_neighbors: Dict[int, Set[int]] = {
            i: set() for i in range(len(self.cells))
        }

    # -------------------------------------------------------------------------
    # Topology
    # -------------------------------------------------------------------------

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    @property
    def mine_count(self) -> int:
        """Number of mines a layout for this board holds."""
        return self.cell_count // self.mine_divisor

    def neighbors(self, i: int) -> Tuple[int, ...]:
        """Return precomputed neighbor ids for a cell."""
        self._check_id(i)
        return self._neighborhoods[i]

    def cell(self, i: int) -> Cell:
        self._check_id(i)
        return self.cells[i]

    def cell_id(self, row: int, col: int) -> int:
        """Convert (row, col) to a cell id."""
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise ValueError("Cell coordinates are outside the board.")
        return row * self.size + col

    def coords(self, i: int) -> Tuple[int, int]:
        """Convert a cell id to (row, col)."""
        self._check_id(i)
        return divmod(i, self.size)

    def _check_id(self, i: int) -> None:
        if not 0 <= i < self.cell_count:
            raise ValueError(f"Cell id {i} is outside the board.")

    # -------------------------------------------------------------------------
    # Mine placement
    # -------------------------------------------------------------------------

    def sample_mine_set(
        self, exclude_id: int, rng: Optional[random.Random] = None
    ) -> FrozenSet[int]:
        """
        Draw a random mine layout that keeps exclude_id and its neighbors clear.

        Args:
            exclude_id: The first revealed cell.
            rng: Random generator to draw from; the module-level one if None.

        Returns:
            ``mine_count`` distinct ids sampled uniformly without replacement.

        Raises:
            ValueError: If exclude_id is out of range or the safe zone leaves
                too few cells for the mines.
        """
        self._check_id(exclude_id)

        safe: Set[int] = set(self.neighbors(exclude_id)) | {exclude_id}
        eligible: List[int] = [i for i in range(self.cell_count) if i not in safe]

        if self.mine_count > len(eligible):
            raise ValueError(
                f"Cannot place {self.mine_count} mines outside the safe zone of "
                f"cell {exclude_id}; only {len(eligible)} cells are eligible."
            )

        sampler = rng if rng is not None else random
        return frozenset(sampler.sample(eligible, self.mine_count))

    def assign_mines(self, ids: Iterable[int]) -> None:
        """
        Place mines on exactly the given cells and compute every cell's number.

        Args:
            ids: Cell ids holding a mine.

        Raises:
            ValueError: If mines were already assigned or an id is out of range.
        """
        if self.mines_assigned:
            raise ValueError("Mines are already assigned to this grid.")

        mines = frozenset(ids)
        for i in mines:
            self._check_id(i)

        for i, cell in enumerate(self.cells):
            cell.mined = i in mines

        for i, cell in enumerate(self.cells):
            cell.number = sum(1 for n in self._neighborhoods[i] if self.cells[n].mined)
            cell.mines_remaining = cell.number

        self.mines = mines
        self.mines_assigned = True
        self.mines_remaining_total = len(mines)

    def clear_mines(self, ids: Iterable[int]) -> None:
        """
        Remove mines from cells that have been declared safe.

        Only the mine set changes; cell numbers keep the values they were
        assigned with.
        """
        cleared = frozenset(ids) & self.mines
        for i in cleared:
            self.cells[i].mined = False
        self.mines = self.mines - cleared

    # -------------------------------------------------------------------------
    # Play
    # -------------------------------------------------------------------------

    def open_cells(self) -> List[int]:
        """Return ids of cells that are neither flagged nor revealed."""
        return [
            i for i, c in enumerate(self.cells) if not c.flagged and not c.revealed
        ]

    def _mark_revealed(self, i: int) -> None:
        self.cells[i].revealed = True
        self.revealed_count += 1
        for n in self._neighborhoods[i]:
            self.open_neighbors[n].discard(i)
            self.revealed_neighbors[n].add(i)

    def reveal(self, i: int) -> List[int]:
        """
        Reveal a cell, flooding through cells with no neighboring mines.

        Flagged and already revealed cells are left alone. Revealing a mine
        marks it revealed and records it in ``exploded``.

        Args:
            i: Id of the cell to reveal.

        Returns:
            Ids of newly revealed cells, in reveal order.
        """
        self._check_id(i)
        cell = self.cells[i]
        if cell.revealed or cell.flagged:
            return []

        if cell.mined:
            self._mark_revealed(i)
            self.exploded = i
            return [i]

        frontier: Deque[int] = deque([i])
        visited: Set[int] = {i}
        revealed: List[int] = []

        while frontier:
            current = frontier.popleft()
            if self.cells[current].revealed:
                continue

            self._mark_revealed(current)
            revealed.append(current)

            if self.cells[current].number == 0:
                for n in self._neighborhoods[current]:
                    nc = self.cells[n]
                    if n in visited or nc.revealed or nc.flagged:
                        continue
                    visited.add(n)
                    frontier.append(n)

        return revealed

    def toggle_flag(self, i: int) -> bool:
        """
        Flag an unrevealed cell, or remove its flag if it has one.

        Returns:
            The new flagged state. Revealed cells are unchanged and return False.
        """
        self._check_id(i)
        cell = self.cells[i]
        if cell.revealed:
            return False

        if not cell.flagged:
            cell.flagged = True
            self.mines_remaining_total -= 1
            for n in self._neighborhoods[i]:
                self.cells[n].mines_remaining -= 1
                self.open_neighbors[n].discard(i)
        else:
            cell.flagged = False
            self.mines_remaining_total += 1
            for n in self._neighborhoods[i]:
                self.cells[n].mines_remaining += 1
                self.open_neighbors[n].add(i)

        return cell.flagged

    def place_flag(self, i: int) -> None:
        """Flag a cell if it is not flagged yet."""
        if not self.cells[i].flagged:
            self.toggle_flag(i)

    def snapshot(self) -> List[str]:
        """
        Return the visible state of every cell as a single character.

        ``"."`` unknown, ``"F"`` flagged, ``"0"``..``"8"`` revealed number,
        ``"*"`` revealed mine.
        """
        out: List[str] = []
        for c in self.cells:
            if c.flagged:
                out.append("F")
            elif not c.revealed:
                out.append(".")
            elif c.mined:
                out.append("*")
            else:
                out.append(str(c.number))
        return out
