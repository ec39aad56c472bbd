"""
Dense elevation and material-weight grids.

Both grids share one axis convention: the first array axis is grid-x
(world X) and the second is grid-z (world Z). ``world_to_grid`` is the
only place where world coordinates are turned into grid coordinates.
"""

from typing import Sequence, Tuple

import numpy as np

from .errors import InvalidLayer, InvariantViolation, OutOfBounds

WEIGHT_TOLERANCE = 1e-4

Vector3 = Tuple[float, float, float]


def world_to_grid(
    point: Sequence[float],
    origin: Sequence[float],
    size: Sequence[float],
    resolution: Tuple[int, int],
) -> Tuple[float, float]:
    """
    Map a world-space point onto fractional grid coordinates.

    Args:
        point: World position (x, y, z); y is ignored
        origin: World position of the terrain corner
        size: World extent of the terrain (x, y, z)
        resolution: Grid resolution along (x, z)

    Returns:
        Fractional (gx, gz); callers decide how to snap to a cell
    """
    relative_x = (point[0] - origin[0]) / size[0]
    relative_z = (point[2] - origin[2]) / size[2]
    return relative_x * resolution[0], relative_z * resolution[1]


def grid_to_world(
    gx: float,
    gz: float,
    origin: Sequence[float],
    size: Sequence[float],
    resolution: Tuple[int, int],
) -> Tuple[float, float]:
    """Inverse of ``world_to_grid`` for the horizontal axes."""
    return (
        origin[0] + gx / resolution[0] * size[0],
        origin[2] + gz / resolution[1] * size[2],
    )


class ElevationGrid:
    """Normalized heightmap; every cell stays within [0, 1]."""

    def __init__(self, width: int, height: int, fill: float = 0.0):
        if width < 0 or height < 0:
            raise ValueError("Grid dimensions must be non-negative")
        if not np.isfinite(fill):
            raise ValueError(f"Elevation fill must be finite, got {fill}")
        self.values = np.full((width, height), np.clip(fill, 0.0, 1.0), dtype=np.float64)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "ElevationGrid":
        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 2:
            raise ValueError(f"Elevation data must be 2D, got {array.ndim}D")
        if not np.all(np.isfinite(array)):
            raise ValueError("Elevation data contains non-finite values")
        grid = cls(0, 0)
        grid.values = np.clip(array, 0.0, 1.0)
        return grid

    @property
    def width(self) -> int:
        return self.values.shape[0]

    @property
    def height(self) -> int:
        return self.values.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(x, y, self.shape)

    def get(self, x: int, y: int) -> float:
        self._check(x, y)
        return float(self.values[x, y])

    def set_elevation(self, x: int, y: int, value: float) -> None:
        """Set one cell, clamping the value into [0, 1]."""
        self._check(x, y)
        if not np.isfinite(value):
            raise ValueError(f"Elevation must be finite, got {value}")
        self.values[x, y] = min(max(float(value), 0.0), 1.0)

    def copy(self) -> "ElevationGrid":
        return ElevationGrid.from_array(self.values.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ElevationGrid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.values, other.values)


class WeightGrid:
    """
    Per-cell blend weights over a fixed set of material layers.

    For every cell the layer weights sum to one (within
    ``WEIGHT_TOLERANCE``) whenever at least one layer exists.
    """

    def __init__(self, width: int, height: int, layers: int, base_layer: int = 0):
        if width < 0 or height < 0 or layers < 0:
            raise ValueError("Grid dimensions must be non-negative")
        self.values = np.zeros((width, height, layers), dtype=np.float64)
        if layers:
            if not 0 <= base_layer < layers:
                raise InvalidLayer(base_layer, layers)
            self.values[:, :, base_layer] = 1.0

    @classmethod
    def from_array(cls, values: np.ndarray, tolerance: float = WEIGHT_TOLERANCE) -> "WeightGrid":
        array = np.asarray(values, dtype=np.float64)
        if array.ndim != 3:
            raise ValueError(f"Weight data must be 3D, got {array.ndim}D")
        grid = cls(0, 0, 0)
        grid.values = array.copy()
        grid.validate(tolerance)
        return grid

    @property
    def width(self) -> int:
        return self.values.shape[0]

    @property
    def height(self) -> int:
        return self.values.shape[1]

    @property
    def layer_count(self) -> int:
        return self.values.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.values.shape

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(x, y, self.shape)

    def check_layer(self, layer: int) -> None:
        if not 0 <= layer < self.layer_count:
            raise InvalidLayer(layer, self.layer_count)

    def get_weights(self, x: int, y: int) -> np.ndarray:
        self._check(x, y)
        return self.values[x, y].copy()

    def set_weights(self, x: int, y: int, weights: Sequence[float],
                    tolerance: float = WEIGHT_TOLERANCE) -> None:
        """Store pre-normalized weights for one cell."""
        self._check(x, y)
        cell = np.asarray(weights, dtype=np.float64)
        if cell.shape != (self.layer_count,):
            raise ValueError(f"Expected {self.layer_count} weights, got {cell.shape[0] if cell.ndim else 0}")
        if self.layer_count and not abs(cell.sum() - 1.0) <= tolerance:
            raise InvariantViolation(f"Weights at ({x}, {y}) sum to {cell.sum():.6f}")
        self.values[x, y] = cell

    def validate(self, tolerance: float = WEIGHT_TOLERANCE) -> None:
        """Raise InvariantViolation if any cell drifted from sum-to-one."""
        if self.layer_count == 0 or self.values.size == 0:
            return
        drift = np.abs(self.values.sum(axis=2) - 1.0)
        if not np.all(drift <= tolerance):
            worst = np.where(np.isnan(drift), np.inf, drift)
            x, y = np.unravel_index(int(np.argmax(worst)), drift.shape)
            raise InvariantViolation(
                f"Weights at ({x}, {y}) sum to {self.values[x, y].sum():.6f}"
            )

    def copy(self) -> "WeightGrid":
        grid = WeightGrid(0, 0, 0)
        grid.values = self.values.copy()
        return grid

    def __eq__(self, other) -> bool:
        if not isinstance(other, WeightGrid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.values, other.values)
