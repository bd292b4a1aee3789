import hashlib
from typing import Self, Sequence

import numpy as np
from loguru import logger

from .errors import NoMemoryError, NotInitializedError

# (dx, dy) offsets of the Moore neighbourhood
NEIGHBOR_OFFSETS = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

DEFAULT_ALIVE = "X"
DEFAULT_DEAD = "O"


def _allocate(size: int) -> np.ndarray:
    return np.zeros(size, dtype=bool)


def _clone(cells: np.ndarray) -> np.ndarray:
    return cells.copy()


def _format(board: np.ndarray, alive: str, dead: str) -> str:
    return "\n".join("".join(row) for row in np.where(board, alive, dead))


class Grid:
    """
    Fixed-size rectangular board of boolean cells.

    Cells live in one flat row-major buffer; ``(x, y)`` is column ``x`` of
    row ``y`` and sits at index ``y * cols + x``. ``Grid()`` without
    dimensions is an uninitialized grid, as is any grid after ``destroy()``.
    Every operation other than construction and ``destroy()`` raises
    ``NotInitializedError`` on such a grid.
    """

    def __init__(self, rows: int | None = None, cols: int | None = None):
        self.rows = 0
        self.cols = 0
        self._cells: np.ndarray | None = None
        if rows is None and cols is None:
            return

        rows, cols = int(rows or 0), int(cols or 0)
        size = rows * cols
        try:
            cells = _allocate(size)
        except MemoryError as e:
            raise NoMemoryError("create", size) from e

        self.rows = rows
        self.cols = cols
        self._cells = cells
        logger.debug(f"Created grid {rows}×{cols}")

    @classmethod
    def from_rows(cls, data: Sequence[Sequence[bool | int]]) -> Self:
        """Build a grid from a list of equal-length rows (truthy = alive)."""
        rows = len(data)
        cols = len(data[0]) if rows else 0
        if any(len(row) != cols for row in data):
            raise ValueError("all rows must have the same length")

        grid = cls(rows, cols)
        for y, row in enumerate(data):
            for x, cell in enumerate(row):
                grid._cells[y * cols + x] = bool(cell)
        return grid

    # --- lifecycle -------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._cells is not None

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the flat cell buffer."""
        cells = self._require("cells")
        view = cells.view()
        view.flags.writeable = False
        return view

    def destroy(self) -> None:
        if self._cells is not None:
            logger.debug(f"Destroyed grid {self.rows}×{self.cols}")
        self._cells = None
        self.rows = 0
        self.cols = 0

    def duplicate(self) -> Self:
        """Return a new grid with the same dimensions and its own copy of the cells."""
        cells = self._require("duplicate")
        try:
            copied = _clone(cells)
        except MemoryError as e:
            raise NoMemoryError("duplicate", cells.size) from e

        clone = type(self)()
        clone.rows = self.rows
        clone.cols = self.cols
        clone._cells = copied
        return clone

    def randomize(self, rng: np.random.Generator | None = None) -> None:
        """
        Set every cell alive or dead with equal probability.

        Draws from ``rng`` when given, otherwise from numpy's global random
        state. Seeding is up to the caller.
        """
        cells = self._require("randomize")
        if rng is None:
            values = np.random.randint(0, 2, size=cells.size)
        else:
            values = rng.integers(0, 2, size=cells.size)
        cells[:] = values.astype(bool)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.destroy()

    # --- cells -----------------------------------------------------------

    def _require(self, operation: str) -> np.ndarray:
        if self._cells is None:
            raise NotInitializedError(operation)
        return self._cells

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.cols and 0 <= y < self.rows):
            raise IndexError(f"({x}, {y}) is outside a {self.rows}×{self.cols} grid")
        return y * self.cols + x

    def __getitem__(self, pos: tuple[int, int]) -> bool:
        cells = self._require("get")
        x, y = pos
        return bool(cells[self._index(x, y)])

    def __setitem__(self, pos: tuple[int, int], alive: bool) -> None:
        cells = self._require("set")
        x, y = pos
        cells[self._index(x, y)] = bool(alive)

    def count_live_neighbors(self, x: int, y: int) -> int:
        """Live cells among the up to 8 neighbours of (x, y); off-board neighbours are skipped."""
        cells = self._require("count_live_neighbors")
        self._index(x, y)

        count = 0
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if nx < 0 or nx >= self.cols or ny < 0 or ny >= self.rows:
                continue
            count += int(cells[ny * self.cols + nx])
        return count

    def live_count(self) -> int:
        return int(np.count_nonzero(self._require("live_count")))

    # --- output ----------------------------------------------------------

    def render(self, alive: str = DEFAULT_ALIVE, dead: str = DEFAULT_DEAD) -> str:
        """One line per row, one character per cell, no trailing newline."""
        cells = self._require("render")
        if len(alive) != 1 or len(dead) != 1:
            raise ValueError("alive and dead must be single characters")

        size = (self.cols + 1) * self.rows
        try:
            return _format(cells.reshape(self.rows, self.cols), alive, dead)
        except MemoryError as e:
            raise NoMemoryError("render", size) from e

    def fingerprint(self) -> str:
        """Return SHA-256 hex digest of the grid as a flat string of 0s and 1s"""
        cells = self._require("fingerprint")
        flat_str = "".join("1" if cell else "0" for cell in cells)
        return hashlib.sha256(flat_str.encode("utf-8")).hexdigest()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        if self._cells is None or other._cells is None:
            return self._cells is None and other._cells is None
        return (
            self.rows == other.rows
            and self.cols == other.cols
            and bool(np.array_equal(self._cells, other._cells))
        )

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        if self._cells is None:
            return "Grid(uninitialized)"
        return f"Grid({self.rows}×{self.cols}, alive={self.live_count()})"
