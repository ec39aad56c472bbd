"""Exception taxonomy for terrain editing and persistence."""


class TerrainError(Exception):
    """Base class for every error raised by py_terrain."""


class OutOfBounds(TerrainError, IndexError):
    """A grid coordinate lies outside the grid extent."""

    def __init__(self, x: int, y: int, shape):
        self.x = x
        self.y = y
        self.shape = tuple(shape)
        super().__init__(f"Cell ({x}, {y}) is outside grid of shape {self.shape[:2]}")


class InvalidLayer(TerrainError, IndexError):
    """A weight layer index is outside [0, layer_count)."""

    def __init__(self, layer: int, layer_count: int):
        self.layer = layer
        self.layer_count = layer_count
        super().__init__(f"Layer {layer} is outside [0, {layer_count})")


class InvariantViolation(TerrainError, AssertionError):
    """Per-cell weights no longer sum to one."""


class DimensionMismatch(TerrainError, ValueError):
    """Persisted grid dimensions differ from the live terrain."""

    def __init__(self, kind: str, expected, actual):
        self.kind = kind
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(f"{kind} dimensions {self.actual} do not match {self.expected}")


class SourceUnavailable(TerrainError, LookupError):
    """A clone source or active terrain is missing or empty."""


class PersistenceIOError(TerrainError, OSError):
    """The backing store could not be read or written."""


class CorruptArtifact(PersistenceIOError):
    """A persisted artifact exists but cannot be decoded."""
