"""
Terrain aggregate, cloning, and the active-terrain handle.

A Terrain owns its elevation and weight grids, its material layer ids,
opaque decorative data (detail layers, tree instances) and the list of
placed objects. Exactly one terrain is active at a time, held by an
``ActiveTerrain`` handle that editing and persistence code share.
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .errors import SourceUnavailable
from .grid import ElevationGrid, Vector3, WeightGrid, grid_to_world, world_to_grid
from .objects import PlacedObject

logger = structlog.get_logger()


@dataclass(frozen=True)
class TerrainTransform:
    """World placement of a terrain: corner position and extent."""

    origin: Vector3 = (0.0, 0.0, 0.0)
    size: Vector3 = (1000.0, 600.0, 1000.0)

    def __post_init__(self):
        if len(self.origin) != 3 or len(self.size) != 3:
            raise ValueError("Origin and size need three components")
        if any(s <= 0 for s in self.size):
            raise ValueError(f"Terrain size must be positive, got {self.size}")


@dataclass
class DetailLayer:
    """Opaque detail (grass, props) density layer, copied but never edited."""

    prototype: str
    density: np.ndarray

    def copy(self) -> "DetailLayer":
        return DetailLayer(self.prototype, np.array(self.density, copy=True))


@dataclass
class Terrain:
    """Editable terrain state."""

    elevation: ElevationGrid
    weights: WeightGrid
    layer_ids: List[str]
    transform: TerrainTransform = field(default_factory=TerrainTransform)
    detail_layers: List[DetailLayer] = field(default_factory=list)
    tree_instances: List[Dict[str, Any]] = field(default_factory=list)
    objects: List[PlacedObject] = field(default_factory=list)

    def __post_init__(self):
        if len(self.layer_ids) != self.weights.layer_count:
            raise ValueError(
                f"{len(self.layer_ids)} layer ids for {self.weights.layer_count} weight layers"
            )

    @property
    def heightmap_resolution(self) -> Tuple[int, int]:
        return self.elevation.shape

    @property
    def alphamap_resolution(self) -> Tuple[int, int]:
        return self.weights.shape[:2]

    @property
    def layer_count(self) -> int:
        return self.weights.layer_count

    def elevation_cell(self, point: Sequence[float]) -> Tuple[int, int]:
        """Heightmap cell nearest to a world point (rounded)."""
        gx, gz = world_to_grid(point, self.transform.origin, self.transform.size,
                               self.heightmap_resolution)
        return int(round(gx)), int(round(gz))

    def weight_cell(self, point: Sequence[float]) -> Tuple[int, int]:
        """Alphamap cell containing a world point (floored)."""
        gx, gz = world_to_grid(point, self.transform.origin, self.transform.size,
                               self.alphamap_resolution)
        return math.floor(gx), math.floor(gz)

    def cell_to_world(self, cell: Tuple[int, int],
                      resolution: Tuple[int, int]) -> Tuple[float, float]:
        """World (x, z) of a cell corner on a grid of the given resolution."""
        return grid_to_world(cell[0], cell[1], self.transform.origin, self.transform.size,
                             resolution)

    def place_object(self, prefab: str, position: Sequence[float],
                     rotation_y: float = 0.0) -> PlacedObject:
        if not prefab:
            raise ValueError("Prefab identifier cannot be empty")
        placed = PlacedObject(prefab=prefab, position=tuple(position), rotation_y=rotation_y)
        self.objects.append(placed)
        logger.debug("Object placed", prefab=prefab, position=placed.position)
        return placed

    def set_object_rotation(self, index: int, degrees: float) -> PlacedObject:
        if not 0 <= index < len(self.objects):
            raise IndexError(f"No placed object at index {index}")
        if not 0.0 <= degrees <= 360.0:
            raise ValueError(f"Rotation must be within [0, 360], got {degrees}")
        self.objects[index].rotation_y = float(degrees)
        return self.objects[index]

    def clear_objects(self) -> None:
        self.objects.clear()


def create_default_terrain(
    heightmap_resolution: int,
    alphamap_resolution: int,
    layer_ids: Sequence[str],
    transform: Optional[TerrainTransform] = None,
    elevation: float = 0.0,
) -> Terrain:
    """Build a flat terrain painted entirely with its first layer."""
    return Terrain(
        elevation=ElevationGrid(heightmap_resolution, heightmap_resolution, fill=elevation),
        weights=WeightGrid(alphamap_resolution, alphamap_resolution, len(layer_ids)),
        layer_ids=list(layer_ids),
        transform=transform or TerrainTransform(),
    )


def clone_terrain(source: Optional[Terrain], copy_objects: bool = False) -> Terrain:
    """
    Deep-copy a terrain into an independent instance.

    Args:
        source: Terrain (or template) to copy
        copy_objects: Also copy the placed-object list; otherwise the
            clone starts with no objects

    Returns:
        New Terrain sharing no mutable state with ``source``

    Raises:
        SourceUnavailable: If the source is missing or has zero resolution
    """
    if source is None:
        raise SourceUnavailable("No source terrain to clone")
    if 0 in source.heightmap_resolution:
        raise SourceUnavailable(
            f"Source terrain has zero resolution {source.heightmap_resolution}"
        )

    return Terrain(
        elevation=source.elevation.copy(),
        weights=source.weights.copy(),
        layer_ids=list(source.layer_ids),
        transform=source.transform,
        detail_layers=[layer.copy() for layer in source.detail_layers],
        tree_instances=copy.deepcopy(source.tree_instances),
        objects=copy.deepcopy(source.objects) if copy_objects else [],
    )


class ActiveTerrain:
    """Handle on the single terrain currently being edited or played."""

    def __init__(self, terrain: Optional[Terrain] = None):
        self._terrain = terrain

    @property
    def terrain(self) -> Terrain:
        if self._terrain is None:
            raise SourceUnavailable("No active terrain")
        return self._terrain

    @property
    def is_active(self) -> bool:
        return self._terrain is not None

    def replace(self, terrain: Terrain) -> Optional[Terrain]:
        """Make ``terrain`` active, returning the instance it replaced."""
        previous, self._terrain = self._terrain, terrain
        if previous is not None:
            logger.debug("Active terrain replaced")
        return previous
