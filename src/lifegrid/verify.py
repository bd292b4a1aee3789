"""
Simulator correctness verification.

Runs the cell-by-cell simulator and the vectorised numpy reference on the
same seeded starting board and compares SHA-256 fingerprints of the final
boards.
"""

import hashlib
from dataclasses import dataclass

import numpy as np
from loguru import logger

from .grid import Grid
from .reference import next_generation
from .simulator import run

ROWS = 64
COLS = 64
GENERATIONS = 100
SEED = 42


@dataclass(frozen=True)
class VerificationResult:
    rows: int
    cols: int
    generations: int
    seed: int
    simulator_fingerprint: str
    reference_fingerprint: str

    @property
    def matched(self) -> bool:
        return self.simulator_fingerprint == self.reference_fingerprint


def board_fingerprint(board: np.ndarray) -> str:
    flat_str = "".join("1" if cell else "0" for cell in board.flat)
    return hashlib.sha256(flat_str.encode("utf-8")).hexdigest()


def verify(
    rows: int = ROWS,
    cols: int = COLS,
    generations: int = GENERATIONS,
    seed: int = SEED,
) -> VerificationResult:
    logger.info(f"Verifying {rows}×{cols} grid over {generations} generations, seed={seed}")

    with Grid(rows, cols) as grid:
        grid.randomize(np.random.default_rng(seed))
        board = grid.cells.reshape(rows, cols).copy()

        run(grid, generations)
        for _ in range(generations):
            board = next_generation(board)

        result = VerificationResult(
            rows=rows,
            cols=cols,
            generations=generations,
            seed=seed,
            simulator_fingerprint=grid.fingerprint(),
            reference_fingerprint=board_fingerprint(board),
        )

    if result.matched:
        logger.info("Correctness verification passed")
    else:
        logger.error("Correctness verification failed: fingerprint mismatch")
    return result
