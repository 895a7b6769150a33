"""Repeated trial placement until a layout is solvable without guessing."""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional

from .config import DEFAULT_MAX_ATTEMPTS, GeneratorConfig
from .engine import DEFAULT_ENDGAME_SLOT_LIMIT, ConstraintEngine, Outcome
from .errors import LayoutUnreachable
from .grid import Grid

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """Accepted layout plus what it took to find it."""

    layout: FrozenSet[int]
    attempts: int
    sampled_mines: int
    fallback_used: bool
    elapsed: float
    rule_counts: Dict[str, int] = field(default_factory=dict)
    steps: int = 0


def verify_layout(
    size: int,
    mine_divisor: int,
    layout: Iterable[int],
    exclude_id: int,
    *,
    endgame_slot_limit: int = DEFAULT_ENDGAME_SLOT_LIMIT,
    allow_fallback: bool = True,
    record_steps: bool = False,
) -> ConstraintEngine:
    """
    Play a layout on a disposable trial grid and return the finished engine.

    Args:
        size: Board side length.
        mine_divisor: Mine density divisor of the board.
        layout: Mine ids to test.
        exclude_id: First revealed cell.
        endgame_slot_limit: Threshold for the engine's endgame fallback.
        allow_fallback: Whether the engine may use the endgame fallback.
        record_steps: Keep per-step snapshots on the engine.

    Returns:
        The engine after run(); its ``grid`` is the trial grid and
        ``grid.mines_remaining_total == 0`` means the layout was solved.
    """
    trial = Grid(size, mine_divisor)
    trial.assign_mines(layout)
    trial.reveal(exclude_id)

    engine = ConstraintEngine(
        trial,
        endgame_slot_limit=endgame_slot_limit,
        allow_fallback=allow_fallback,
        record_steps=record_steps,
    )
    engine.run()
    return engine


def generate_layout_report(
    size: int,
    mine_divisor: int,
    exclude_id: int,
    *,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
    endgame_slot_limit: int = DEFAULT_ENDGAME_SLOT_LIMIT,
    allow_fallback: bool = True,
) -> GenerationReport:
    """
    Sample layouts until one is solvable by deduction from exclude_id.

    A layout that is only solved through the endgame fallback loses the mines
    hidden in the unresolved residue. That reduced layout is kept only if a
    replay without the fallback solves it as well, so any layout returned here
    replays to SOLVED.

    Args:
        size: Board side length.
        mine_divisor: Mine density divisor of the board.
        exclude_id: First revealed cell; it and its neighbors stay mine-free.
        max_attempts: Sampled layouts to try; None retries without limit.
        rng: Random generator for sampling; the module-level one if None.
        endgame_slot_limit: Threshold for the engine's endgame fallback.
        allow_fallback: Whether the engine may use the endgame fallback.

    Returns:
        A GenerationReport with the accepted layout.

    Raises:
        LayoutUnreachable: If max_attempts layouts were rejected.
        ValueError: If the board cannot hold its mines outside the safe zone.
    """
    sampler = Grid(size, mine_divisor)
    start = time.perf_counter()
    attempts = 0

    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        sampled = sampler.sample_mine_set(exclude_id, rng)

        engine = verify_layout(
            size,
            mine_divisor,
            sampled,
            exclude_id,
            endgame_slot_limit=endgame_slot_limit,
            allow_fallback=allow_fallback,
        )
        if engine.grid.mines_remaining_total > 0:
            logger.debug("Attempt %d rejected after %d steps", attempts, engine.steps)
            continue

        layout = engine.grid.mines
        if engine.fallback_used:
            replay = verify_layout(
                size, mine_divisor, layout, exclude_id, allow_fallback=False
            )
            if replay.grid.mines_remaining_total > 0:
                logger.debug(
                    "Attempt %d rejected: reduced layout needs the fallback", attempts
                )
                continue

        elapsed = time.perf_counter() - start
        logger.info(
            "Accepted %dx%d layout with %d mines after %d attempts (%.3fs)",
            size,
            size,
            len(layout),
            attempts,
            elapsed,
        )
        return GenerationReport(
            layout=layout,
            attempts=attempts,
            sampled_mines=len(sampled),
            fallback_used=engine.fallback_used,
            elapsed=elapsed,
            rule_counts=dict(engine.rule_counts),
            steps=engine.steps,
        )

    logger.warning(
        "Gave up on a %dx%d board (divisor %d) after %d attempts",
        size,
        size,
        mine_divisor,
        attempts,
    )
    raise LayoutUnreachable(size, mine_divisor, exclude_id, attempts)


def generate_solvable_layout(
    size: int,
    mine_divisor: int,
    exclude_id: int,
    *,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
    endgame_slot_limit: int = DEFAULT_ENDGAME_SLOT_LIMIT,
    allow_fallback: bool = True,
) -> FrozenSet[int]:
    """Return a mine layout solvable by deduction from exclude_id."""
    return generate_layout_report(
        size,
        mine_divisor,
        exclude_id,
        max_attempts=max_attempts,
        rng=rng,
        endgame_slot_limit=endgame_slot_limit,
        allow_fallback=allow_fallback,
    ).layout


def generate_from_config(
    config: GeneratorConfig,
    exclude_id: int,
    rng: Optional[random.Random] = None,
) -> GenerationReport:
    """Run generate_layout_report with the settings of a GeneratorConfig."""
    return generate_layout_report(
        config.size,
        config.mine_divisor,
        exclude_id,
        max_attempts=config.max_attempts,
        rng=rng if rng is not None else config.rng(),
        endgame_slot_limit=config.endgame_slot_limit,
        allow_fallback=config.allow_fallback,
    )
