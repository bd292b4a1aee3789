from loguru import logger

from .errors import GolError, NoMemoryError, NotInitializedError
from .grid import Grid
from .simulator import advance, next_state, run

__version__ = "0.1.0"

# Library stays quiet unless an application opts in (the CLI does).
logger.disable("lifegrid")

__all__ = [
    "GolError",
    "Grid",
    "NoMemoryError",
    "NotInitializedError",
    "advance",
    "next_state",
    "run",
]
