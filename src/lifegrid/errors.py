class GolError(Exception):
    """Base class for every error raised by lifegrid."""


class NotInitializedError(GolError):
    """The grid has no backing buffer (never created, or destroyed)."""

    def __init__(self, operation: str):
        super().__init__(f"{operation}: grid is not initialized")
        self.operation = operation


class NoMemoryError(GolError, MemoryError):
    """A cell or output buffer could not be allocated."""

    def __init__(self, operation: str, size: int):
        super().__init__(f"{operation}: could not allocate {size} elements")
        self.operation = operation
        self.size = size
