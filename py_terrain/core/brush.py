"""
Brush shapes and the per-cell contribution kernel.

The kernel works on a window around the stroke center, clipped to the
grid. Offsets are measured from the truncated half-width of the clipped
window, so a window cut by the grid edge is centered away from the
stroke cell.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class BrushShape(str, Enum):
    """Brush footprints available to the editor."""

    CIRCLE = "circle"
    SQUARE = "square"
    ERASER = "eraser"


@dataclass(frozen=True)
class BrushSpec:
    """One stroke's brush configuration."""

    shape: BrushShape
    radius: float
    strength: float

    def __post_init__(self):
        if not self.radius > 0:
            raise ValueError(f"Brush radius must be positive, got {self.radius}")

    @property
    def half_extent(self) -> int:
        """Cells covered on each side of the center (size is the diameter)."""
        return int(round(self.radius * 2)) // 2


@dataclass
class BrushWindow:
    """Kernel output over the clipped bounding window."""

    x0: int
    z0: int
    contributions: np.ndarray  # shape (window_w, window_h)
    touched: np.ndarray        # bool mask of cells inside the brush shape

    @property
    def slices(self) -> Tuple[slice, slice]:
        w, h = self.contributions.shape
        return slice(self.x0, self.x0 + w), slice(self.z0, self.z0 + h)

    @property
    def touched_count(self) -> int:
        return int(self.touched.sum())


def _clip_axis(center: int, half: int, size: int) -> Tuple[int, int]:
    start = min(max(center - half, 0), size - 1)
    end = min(max(center + half, 0), size - 1)
    return start, end - start + 1


def compute_brush_window(spec: BrushSpec, cx: int, cz: int,
                         bounds: Tuple[int, int]) -> BrushWindow:
    """
    Compute brush contributions around a grid cell.

    Args:
        spec: Brush shape, radius and strength
        cx: Center cell along grid-x
        cz: Center cell along grid-z
        bounds: Grid size along (x, z)

    Returns:
        BrushWindow with one contribution per window cell; cells outside
        the brush shape contribute 0 and are not marked touched
    """
    width, height = bounds
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot paint on an empty grid {bounds}")

    half = spec.half_extent
    x0, window_w = _clip_axis(cx, half, width)
    z0, window_h = _clip_axis(cz, half, height)

    dx = (np.arange(window_w) - window_w // 2).astype(np.float64)[:, None]
    dz = (np.arange(window_h) - window_h // 2).astype(np.float64)[None, :]
    distance = np.sqrt(dx * dx + dz * dz)
    r = float(spec.radius)

    if spec.shape == BrushShape.SQUARE:
        touched = np.maximum(np.abs(dx), np.abs(dz)) <= r
        magnitude = np.full(touched.shape, spec.strength, dtype=np.float64)
    else:
        touched = distance <= r
        magnitude = spec.strength * (1.0 - distance / r)
        if spec.shape == BrushShape.ERASER:
            magnitude = -magnitude

    contributions = np.where(touched, magnitude, 0.0)
    return BrushWindow(x0=x0, z0=z0, contributions=contributions, touched=touched)
