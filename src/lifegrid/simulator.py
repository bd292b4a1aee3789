from loguru import logger

from .grid import Grid


def next_state(is_alive: bool, live_neighbors: int) -> bool:
    """Standard B3/S23 rule."""
    if is_alive:
        return live_neighbors in (2, 3)
    return live_neighbors == 3


def advance(grid: Grid) -> None:
    """
    Move ``grid`` forward one generation, in place.

    Neighbour counts are read from a snapshot of the previous generation,
    never from the grid being written, so the scan order has no effect on
    the result. If the snapshot cannot be allocated the ``NoMemoryError``
    propagates and the grid is left untouched.
    """
    snapshot = grid.duplicate()
    try:
        for y in range(grid.rows):
            for x in range(grid.cols):
                is_alive = grid[x, y]
                live_neighbors = snapshot.count_live_neighbors(x, y)
                grid[x, y] = next_state(is_alive, live_neighbors)
    finally:
        snapshot.destroy()

    logger.debug(f"Advanced grid {grid.rows}×{grid.cols}, alive={grid.live_count()}")


def run(grid: Grid, generations: int) -> Grid:
    for _ in range(generations):
        advance(grid)
    return grid
