import argparse
import os
import subprocess
import sys
import time
from pathlib import Path

import numpy as np
from loguru import logger

from .config import Config, load_config
from .errors import GolError
from .grid import Grid
from .simulator import advance
from .verify import COLS, GENERATIONS, ROWS, SEED, verify

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

COMMANDS = ("run", "verify")
GLOBAL_OPTIONS = ("--config", "-c", "--log-level")


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=level)
    if log_file is not None:
        logger.add(log_file, rotation="10 MB", retention="30 days", level="DEBUG")
    logger.enable("lifegrid")


def clock_seed() -> int:
    """Milliseconds since the epoch, folded into numpy's 32-bit seed range."""
    return (time.time_ns() // 1_000_000) % 2**32


def wait_ms(ms: int) -> bool:
    """Sleep for ``ms`` milliseconds; False if the wait was interrupted."""
    try:
        time.sleep(ms / 1000)
    except KeyboardInterrupt:
        return False
    return True


def clear_console() -> None:
    subprocess.run("cls" if os.name == "nt" else "clear", shell=True, check=False)


def run_display(grid: Grid, config: Config, generations: int | None = None) -> int:
    """
    Print the grid, wait, advance, clear; repeat.

    Stops when the wait is interrupted or, if given, after ``generations``
    advances. Returns the number of generations advanced.
    """
    display = config.display
    generation = 0

    while True:
        print(grid.render(display.alive, display.dead), flush=True)

        if generations is not None and generation >= generations:
            break

        # if the wait is unsuccessful, then stop
        if not wait_ms(display.interval_ms):
            logger.info("Wait interrupted, stopping")
            break

        advance(grid)
        generation += 1

        if display.clear:
            clear_console()

    return generation


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    board = config.board
    seed = board.seed if board.seed is not None else clock_seed()
    np.random.seed(seed)
    logger.info(f"Starting {board.rows}×{board.cols} grid, seed={seed}")

    try:
        with Grid(board.rows, board.cols) as grid:
            grid.randomize()
            generation = run_display(grid, config, args.generations)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
        return EXIT_SUCCESS
    except GolError as e:
        logger.error(f"{e}")
        return EXIT_FAILURE

    logger.info(f"Stopped after {generation} generations")
    return EXIT_SUCCESS


def cmd_verify(args: argparse.Namespace, config: Config) -> int:
    try:
        result = verify(args.rows, args.cols, args.generations, args.seed)
    except GolError as e:
        logger.error(f"{e}")
        return EXIT_FAILURE

    print(f"Simulator: {result.simulator_fingerprint}")
    print(f"Reference: {result.reference_fingerprint}")
    if result.matched:
        print("✓ Simulator matches reference")
        return EXIT_SUCCESS
    print("✗ MISMATCH")
    return EXIT_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifegrid",
        description="Conway's Game of Life on a fixed-size terminal grid",
    )
    parser.add_argument("--config", "-c", type=Path, help="TOML config file (default: ./lifegrid.toml)")
    parser.add_argument("--log-level", help="Log level for stderr (default: from config, INFO)")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Animate a random grid in the terminal")
    run_parser.add_argument("--rows", type=int, help="Grid rows (default: 30)")
    run_parser.add_argument("--cols", type=int, help="Grid columns (default: 120)")
    run_parser.add_argument("--seed", type=int, help="Random seed (default: current time in ms)")
    run_parser.add_argument("--interval-ms", type=int, help="Pause between generations (default: 100)")
    run_parser.add_argument("--alive", help="Character for live cells (default: 'X')")
    run_parser.add_argument("--dead", help="Character for dead cells (default: ' ')")
    run_parser.add_argument(
        "--no-clear",
        dest="clear",
        action="store_const",
        const=False,
        help="Do not clear the console between generations",
    )
    run_parser.add_argument("--generations", "-g", type=int, help="Stop after this many generations")
    run_parser.set_defaults(func=cmd_run)

    verify_parser = subparsers.add_parser("verify", help="Check the simulator against the numpy reference")
    verify_parser.add_argument("--rows", type=int, default=ROWS, help=f"Grid rows (default: {ROWS})")
    verify_parser.add_argument("--cols", type=int, default=COLS, help=f"Grid columns (default: {COLS})")
    verify_parser.add_argument(
        "--generations", "-g", type=int, default=GENERATIONS, help=f"Number of generations (default: {GENERATIONS})"
    )
    verify_parser.add_argument("--seed", type=int, default=SEED, help=f"Random seed (default: {SEED})")
    verify_parser.set_defaults(func=cmd_verify)

    return parser


def default_to_run(argv: list[str]) -> list[str]:
    """Insert the ``run`` command after the global options when no command is given."""
    if any(arg in COMMANDS or arg in ("-h", "--help") for arg in argv):
        return argv

    i = 0
    while i < len(argv):
        option, has_value, _ = argv[i].partition("=")
        if option not in GLOBAL_OPTIONS:
            break
        i += 1 if has_value else 2
    return [*argv[:i], "run", *argv[i:]]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(default_to_run(sys.argv[1:] if argv is None else argv))

    if args.generations is not None and args.generations < 0:
        parser.error("--generations must be non-negative")
    if args.command == "verify" and (args.rows < 0 or args.cols < 0):
        parser.error("--rows and --cols must be non-negative")

    try:
        config = load_config(args.config)
        if args.command == "run":
            config = config.override(
                board_rows=args.rows,
                board_cols=args.cols,
                board_seed=args.seed,
                display_interval_ms=args.interval_ms,
                display_alive=args.alive,
                display_dead=args.dead,
                display_clear=args.clear,
            )
        config = config.override(logging_level=args.log_level and args.log_level.upper())
    except (OSError, ValueError) as e:
        parser.error(str(e))

    configure_logging(config.logging.level, config.logging.file)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
