"""Command line entry point: ``python -m noguess play|bench``."""

import argparse
import logging
from typing import List, Optional

from .analysis import run_generation_many_tests
from .config import PRESETS, GeneratorConfig
from .game import Game, play_cli


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="noguess",
        description="Minesweeper boards that never require a guess.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    commands = {}
    for name, help_text in (
        ("play", "Play a game in the terminal."),
        ("bench", "Benchmark layout generation."),
    ):
        p = sub.add_parser(name, help=help_text)
        commands[name] = p
        p.add_argument("--preset", choices=sorted(PRESETS), default=None)
        p.add_argument("--size", type=int, default=8)
        p.add_argument("--divisor", type=int, default=5)
        p.add_argument("--seed", type=int, default=None)
        p.add_argument(
            "--max-attempts",
            type=int,
            default=None,
            help="Layouts to sample before giving up (default: 10000).",
        )

    commands["play"].add_argument(
        "--allow-guessing",
        action="store_true",
        help="Use a plain random layout instead of a no-guess one.",
    )
    commands["bench"].add_argument("--runs", type=int, default=20)
    return parser


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """Build a GeneratorConfig from parsed arguments."""
    overrides = {"seed": args.seed}
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    if args.preset is not None:
        return GeneratorConfig.from_preset(args.preset, **overrides)
    return GeneratorConfig(size=args.size, mine_divisor=args.divisor, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    config = config_from_args(args)

    if args.command == "play":
        game = Game(
            config.size,
            config.mine_divisor,
            no_guessing=not args.allow_guessing,
            config=config,
        )
        play_cli(game)
        return 0

    results = run_generation_many_tests(
        config.size,
        config.mine_divisor,
        args.runs,
        max_attempts=config.max_attempts,
        rng=config.rng(),
    )
    for key in sorted(results):
        print(f"{key:32s} {results[key]:10.3f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
