import numpy as np


def next_generation(board: np.ndarray) -> np.ndarray:
    """
    Vectorised next generation of a 2-D board.

    The board is padded with a ring of dead cells, so edges see fewer
    neighbours instead of wrapping round. Used to cross-check the
    cell-by-cell simulator.
    """
    board = np.asarray(board, dtype=bool)
    padded = np.pad(board.astype(np.uint8), 1, mode="constant")

    neighbors = (
        padded[:-2, :-2] + padded[:-2, 1:-1] + padded[:-2, 2:]  # row above
        + padded[1:-1, :-2] + padded[1:-1, 2:]                  # current row (skip center)
        + padded[2:, :-2] + padded[2:, 1:-1] + padded[2:, 2:]    # row below
    )

    survive = board & ((neighbors == 2) | (neighbors == 3))
    born = ~board & (neighbors == 3)
    return survive | born
