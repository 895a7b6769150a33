"""Playable game session backed by a no-guess layout."""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .config import GeneratorConfig
from .errors import LayoutUnreachable
from .generator import GenerationReport, generate_from_config
from .grid import Grid

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    """Possible game states."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    WON = "WON"
    LOST = "LOST"


@dataclass(frozen=True)
class CellChange:
    """Visible state of one cell after a move, for a renderer to draw."""

    id: int
    revealed: bool
    flagged: bool
    number: int
    mined: bool


class Game:
    """
    One game on a real grid.

    Mines are placed on the first reveal: with ``no_guessing`` the layout comes
    from the no-guess generator, otherwise it is a plain random sample that
    only keeps the first cell and its neighbors clear.
    """

    def __init__(
        self,
        size: int,
        mine_divisor: int,
        *,
        no_guessing: bool = True,
        config: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize a game.

        Args:
            size: Board side length, must be > 0.
            mine_divisor: One cell in every mine_divisor holds a mine, must be > 0.
            no_guessing: Generate a layout solvable without guessing.
            config: Generator settings; size and mine_divisor must match.
            rng: Random generator for mine placement.

        Raises:
            ValueError: If dimensions are invalid or config does not match.
        """
        if config is None:
            config = GeneratorConfig(size=size, mine_divisor=mine_divisor)
        elif (config.size, config.mine_divisor) != (size, mine_divisor):
            raise ValueError("config size and mine_divisor must match the game.")

        self.config: GeneratorConfig = config
        self.no_guessing: bool = no_guessing
        self.rng: random.Random = rng if rng is not None else config.rng()
        self.grid: Grid = Grid(size, mine_divisor)
        self.status: GameStatus = GameStatus.NOT_STARTED
        self.report: Optional[GenerationReport] = None

    @property
    def size(self) -> int:
        return self.grid.size

    @property
    def mines_left(self) -> int:
        """Mine counter display: mines on the board minus flags placed."""
        return self.grid.mines_remaining_total

    @property
    def unmined_cell_count(self) -> int:
        return self.grid.cell_count - len(self.grid.mines)

    def _changes(self, ids: Iterable[int]) -> List[CellChange]:
        out: List[CellChange] = []
        for i in ids:
            c = self.grid.cells[i]
            out.append(CellChange(i, c.revealed, c.flagged, c.number, c.mined))
        return out

    def first_move(self, i: int) -> List[int]:
        """
        Place mines around the first revealed cell, then reveal it.

        Returns:
            Ids revealed by the first move.
        """
        if self.status is not GameStatus.NOT_STARTED:
            raise ValueError("The game has already started.")

        if self.no_guessing:
            self.report = generate_from_config(self.config, i, self.rng)
            layout = self.report.layout
        else:
            layout = self.grid.sample_mine_set(i, self.rng)

        return self.commit_layout(layout, i)

    def commit_layout(self, layout: Iterable[int], i: int) -> List[int]:
        """
        Place a known layout on the real grid and reveal the first cell.

        Returns:
            Ids revealed by the first move.
        """
        if self.status is not GameStatus.NOT_STARTED:
            raise ValueError("The game has already started.")

        layout = frozenset(layout)
        if i in layout:
            raise ValueError("The first revealed cell cannot hold a mine.")

        self.grid.assign_mines(layout)
        self.status = GameStatus.IN_PROGRESS
        logger.info("Game started at cell %d with %d mines", i, len(self.grid.mines))
        return self._reveal_safe(i)

    def _reveal_safe(self, i: int) -> List[int]:
        revealed = self.grid.reveal(i)
        if self.grid.revealed_count == self.unmined_cell_count:
            self.status = GameStatus.WON
        return revealed

    def _lose(self, hit: List[int]) -> Tuple[GameStatus, List[CellChange]]:
        """End the game after a mine was revealed and expose every other mine."""
        logger.info("Mine hit at cell %s", hit[0] if hit else None)
        self.status = GameStatus.LOST
        shown: List[int] = list(hit)
        for m in sorted(self.grid.mines):
            cell = self.grid.cells[m]
            if not cell.revealed:
                cell.revealed = True
                shown.append(m)
        return self.status, self._changes(shown)

    def reveal(self, i: int) -> Tuple[GameStatus, List[CellChange]]:
        """
        Reveal a cell.

        Revealing a flagged cell removes its flag instead. Hitting a mine loses
        the game and reveals every mine.

        Returns:
            Tuple of (status after the move, changed cells).
        """
        if self.status in (GameStatus.WON, GameStatus.LOST):
            return self.status, []

        if self.status is GameStatus.NOT_STARTED:
            changes = self._changes(self.first_move(i))
            return self.status, changes

        cell = self.grid.cell(i)
        if cell.flagged:
            return self.toggle_flag(i)
        if cell.revealed:
            return self.status, []

        if cell.mined:
            hit = self.grid.reveal(i)
            return self._lose(hit)

        changes = self._changes(self._reveal_safe(i))
        return self.status, changes

    def toggle_flag(self, i: int) -> Tuple[GameStatus, List[CellChange]]:
        """Flag or unflag an unrevealed cell once the game is in progress."""
        if self.status is not GameStatus.IN_PROGRESS:
            return self.status, []
        if self.grid.cell(i).revealed:
            return self.status, []

        self.grid.toggle_flag(i)
        return self.status, self._changes([i])

    def chord(self, i: int) -> Tuple[GameStatus, List[CellChange]]:
        """
        Reveal a cell together with all of its unflagged neighbors.

        An unflagged mine among them (or the cell itself) ends the game.
        """
        if self.status is not GameStatus.IN_PROGRESS:
            return self.status, []

        grid = self.grid
        if grid.cell(i).mined and not grid.cell(i).flagged:
            return self._lose(grid.reveal(i))

        for n in grid.neighbors(i):
            nc = grid.cells[n]
            if nc.mined and not nc.flagged:
                return self._lose(grid.reveal(n))

        revealed: List[int] = []
        for j in (i,) + grid.neighbors(i):
            if not grid.cells[j].flagged:
                revealed.extend(self._reveal_safe(j))
        return self.status, self._changes(revealed)

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying numbers.
            color: If False, emit plain text without ANSI codes.

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """
        n = self.size
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(i: int) -> str:
            cell = self.grid.cells[i]
            if cell.flagged and not reveal_all:
                return "F"
            if reveal_all or cell.revealed:
                return m("M") if cell.mined else str(cell.number)
            return "."

        header_cells = " ".join(f"{col:2d}" for col in range(n))
        out = [c("   ") + c(header_cells)]
        out.append(c("   " + "-" * (3 * n - 1)))

        for row in range(n):
            row_cells = " ".join(f" {cell_str(row * n + col)}" for col in range(n))
            out.append(c(f"{row:2d} ") + c("|") + row_cells)

        return "\n".join(out)


def play_cli(game: Game) -> None:
    """
    Run a simple terminal UI for playing a game.

    Args:
        game: A Game instance to play.
    """
    print(
        "No-guess Minesweeper (enter: row col, 'f row col' to flag, "
        "'c row col' to chord). Coordinates are 0-based. Type 'q' to quit.\n"
    )
    print(game.format_board())

    actions = {"r": game.reveal, "f": game.toggle_flag, "c": game.chord}

    while True:
        s = input(f"\nMines left: {game.mines_left}. Move: ").strip().lower()
        if s in {"q", "quit", "exit"}:
            print("Quit.")
            return

        parts = s.replace(",", " ").split()
        action = "r"
        if parts and parts[0] in actions:
            action = parts.pop(0)
        if len(parts) != 2:
            print("Invalid input. Example: 3 5  or  f 3 5")
            continue

        try:
            i = game.grid.cell_id(int(parts[0]), int(parts[1]))
        except ValueError:
            print("Invalid input. Coordinates must be integers on the board.")
            continue

        try:
            status, _ = actions[action](i)
        except (ValueError, LayoutUnreachable) as exc:
            print(f"Could not place the mines: {exc}")
            return
        print()
        print(game.format_board())

        if status is GameStatus.LOST:
            print("\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(game.format_board(reveal_all=True))
            return

        if status is GameStatus.WON:
            print("\nYou revealed all safe cells. You won!")
            print("\nFull board:")
            print(game.format_board(reveal_all=True))
            return
