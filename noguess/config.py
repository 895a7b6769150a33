"""Configuration for layout generation."""

import random
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .engine import DEFAULT_ENDGAME_SLOT_LIMIT

DEFAULT_MAX_ATTEMPTS = 10_000

# name -> (size, mine_divisor)
PRESETS: Dict[str, Tuple[int, int]] = {
    "beginner": (8, 8),
    "intermediate": (12, 6),
    "advanced": (16, 5),
}


@dataclass
class GeneratorConfig:
    """
    Settings for one board and the search for its no-guess layout.

    Attributes:
        size: Cells along each side of the board.
        mine_divisor: One cell in every mine_divisor holds a mine.
        max_attempts: Layouts to try before giving up; None retries forever.
        endgame_slot_limit: Threshold for the engine's endgame fallback.
        allow_fallback: Whether the engine may use the endgame fallback.
        seed: Seed for a dedicated random generator; None uses fresh entropy.
    """

    size: int
    mine_divisor: int
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS
    endgame_slot_limit: int = DEFAULT_ENDGAME_SLOT_LIMIT
    allow_fallback: bool = True
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("size must be positive.")
        if self.mine_divisor <= 0:
            raise ValueError("mine_divisor must be positive.")
        if self.max_attempts is not None and self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive or None.")
        if self.endgame_slot_limit < 0:
            raise ValueError("endgame_slot_limit must be non-negative.")

    @classmethod
    def from_preset(cls, name: str, **overrides: object) -> "GeneratorConfig":
        """Build a config from a named preset, e.g. ``"beginner"``."""
        if name not in PRESETS:
            raise ValueError(
                f"Unknown preset {name!r}; expected one of {sorted(PRESETS)}."
            )
        size, mine_divisor = PRESETS[name]
        return cls(size=size, mine_divisor=mine_divisor, **overrides)  # type: ignore[arg-type]

    @property
    def mine_count(self) -> int:
        return (self.size * self.size) // self.mine_divisor

    def rng(self) -> random.Random:
        """Return a random generator seeded from this config."""
        return random.Random(self.seed)
