"""
Brush application onto the active terrain.

``apply_elevation`` and ``apply_weights`` perform one stroke on a
terrain. ``BrushApplicator`` drives them from a continuous gesture:
the gesture layer reports ticks, and strokes are applied at most once
per ``step_of_draw`` seconds.
"""

from enum import Enum
from typing import Optional, Sequence

import numpy as np
import structlog

from .brush import BrushShape, BrushSpec, BrushWindow, compute_brush_window
from .errors import InvariantViolation
from .grid import WEIGHT_TOLERANCE
from .terrain import ActiveTerrain, Terrain

logger = structlog.get_logger()


class EditMode(str, Enum):
    """What a stroke modifies."""

    SCULPT = "sculpt"
    PAINT = "paint"


def apply_elevation(terrain: Terrain, point: Sequence[float], spec: BrushSpec) -> BrushWindow:
    """
    Raise or lower elevation around a world point.

    Each touched cell receives its kernel contribution and is clamped
    to [0, 1].
    """
    cx, cz = terrain.elevation_cell(point)
    window = compute_brush_window(spec, cx, cz, terrain.heightmap_resolution)

    block = terrain.elevation.values[window.slices]
    touched = window.touched
    block[touched] = np.clip(block[touched] + window.contributions[touched], 0.0, 1.0)

    logger.debug("Elevation stroke applied", center=(cx, cz), cells=window.touched_count)
    return window


def apply_weights(
    terrain: Terrain,
    point: Sequence[float],
    spec: BrushSpec,
    target_layer: int,
    tolerance: float = WEIGHT_TOLERANCE,
) -> BrushWindow:
    """
    Paint a material layer around a world point.

    The target layer gains the kernel contribution, the other layers
    lose an equal share of it, every layer is clamped to [0, 1] and the
    cell is renormalized to sum to one. Single-layer terrains are always
    fully painted.

    Raises:
        InvalidLayer: If ``target_layer`` is not a layer of the terrain
        InvariantViolation: If renormalization failed; the grid is left
            untouched in that case
    """
    weights = terrain.weights
    weights.check_layer(target_layer)

    cx, cz = terrain.weight_cell(point)
    window = compute_brush_window(spec, cx, cz, terrain.alphamap_resolution)

    if spec.shape == BrushShape.ERASER:
        logger.warning("Eraser brush does not paint materials", layer=target_layer)
        window.touched[:] = False
        window.contributions[:] = 0.0
        return window

    block = weights.values[window.slices]
    touched = window.touched
    layer_count = weights.layer_count

    if layer_count == 1:
        block[touched] = 1.0
        return window

    cells = block[touched]
    contribution = window.contributions[touched][:, None]
    delta = np.repeat(-contribution / (layer_count - 1), layer_count, axis=1)
    delta[:, target_layer] = contribution[:, 0]

    painted = np.clip(cells + delta, 0.0, 1.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        painted /= painted.sum(axis=1, keepdims=True)

    drift = np.abs(painted.sum(axis=1) - 1.0)
    if not np.all(drift <= tolerance):
        raise InvariantViolation(
            f"Renormalized weights drifted from one in {int(np.count_nonzero(~(drift <= tolerance)))} cells"
        )

    block[touched] = painted
    logger.debug("Weight stroke applied", center=(cx, cz), layer=target_layer,
                 cells=window.touched_count)
    return window


class StrokeThrottle:
    """
    Rate limiter over a held-down stroke.

    Time accumulates through ``advance``; a stroke may be applied when
    the accumulated time reaches ``step_of_draw``. Starting a stroke
    makes the first application immediate.
    """

    def __init__(self, step_of_draw: float):
        if step_of_draw <= 0:
            raise ValueError(f"step_of_draw must be positive, got {step_of_draw}")
        self.step_of_draw = step_of_draw
        self.active = False
        self.elapsed = 0.0

    def begin(self) -> None:
        self.active = True
        self.elapsed = self.step_of_draw

    def end(self) -> None:
        self.active = False
        self.elapsed = 0.0

    def advance(self, elapsed: float) -> None:
        self.elapsed += max(elapsed, 0.0)

    @property
    def ready(self) -> bool:
        return self.active and self.elapsed >= self.step_of_draw

    def consume(self) -> None:
        self.elapsed = 0.0


class BrushApplicator:
    """Applies the current brush to whichever terrain is active."""

    def __init__(
        self,
        active: ActiveTerrain,
        brush: BrushSpec,
        target_layer: int = 0,
        step_of_draw: float = 0.1,
        tolerance: float = WEIGHT_TOLERANCE,
    ):
        self.active = active
        self.brush = brush
        self.target_layer = target_layer
        self.throttle = StrokeThrottle(step_of_draw)
        self.tolerance = tolerance

    @property
    def ready_to_paint(self) -> bool:
        return self.throttle.ready

    def start_stroke(self) -> None:
        self.throttle.begin()

    def stop_stroke(self) -> None:
        self.throttle.end()

    def apply(self, point: Sequence[float], mode: EditMode) -> BrushWindow:
        """Apply one stroke immediately, bypassing the throttle."""
        terrain = self.active.terrain
        if mode == EditMode.SCULPT:
            return apply_elevation(terrain, point, self.brush)
        return apply_weights(terrain, point, self.brush, self.target_layer, self.tolerance)

    def on_stroke_tick(
        self,
        point: Optional[Sequence[float]],
        elapsed: float,
        mode: EditMode,
    ) -> Optional[BrushWindow]:
        """
        Advance the stroke clock and paint if the throttle allows.

        Args:
            point: World point under the pointer, or None when the
                pointer is not over the terrain
            elapsed: Seconds since the previous tick
            mode: Sculpt elevation or paint materials

        Returns:
            The applied window, or None when nothing was painted
        """
        self.throttle.advance(elapsed)
        if point is None or not self.throttle.ready:
            return None
        self.throttle.consume()
        return self.apply(point, mode)
