"""
No-guess Minesweeper

Generates square Minesweeper boards that can be cleared from the first cell
by deduction alone:
- Pattern enumeration: every arrangement of a cell's remaining mines
- Constraint engine: four deduction rules plus pruning, run to a fixpoint
- Layout generator: resample until a hidden trial board is fully solved
"""

from .analysis import (
    format_grid,
    run_generation_level_analysis,
    run_generation_many_tests,
    run_generation_single_test,
    summarize_rule_mix,
)
from .config import PRESETS, GeneratorConfig
from .engine import ConstraintEngine, Deduction, Outcome, Rule
from .errors import InvalidArityError, InvariantViolation, LayoutUnreachable
from .game import CellChange, Game, GameStatus, play_cli
from .generator import (
    GenerationReport,
    generate_from_config,
    generate_layout_report,
    generate_solvable_layout,
    verify_layout,
)
from .grid import Cell, Grid
from .patterns import k_subsets

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Cell",
    "Grid",
    "ConstraintEngine",
    "Deduction",
    "Outcome",
    "Rule",
    "Game",
    "GameStatus",
    "CellChange",
    "GeneratorConfig",
    "GenerationReport",
    "PRESETS",
    # Core functions
    "k_subsets",
    "generate_solvable_layout",
    "generate_layout_report",
    "generate_from_config",
    "verify_layout",
    # Errors
    "InvalidArityError",
    "InvariantViolation",
    "LayoutUnreachable",
    # CLI
    "play_cli",
    # Analysis functions
    "format_grid",
    "run_generation_single_test",
    "run_generation_many_tests",
    "run_generation_level_analysis",
    "summarize_rule_mix",
]
