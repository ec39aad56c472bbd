"""
Core terrain editing functionality.
"""

from .errors import (
    TerrainError, OutOfBounds, InvalidLayer, InvariantViolation,
    DimensionMismatch, SourceUnavailable, PersistenceIOError, CorruptArtifact,
)
from .grid import ElevationGrid, WeightGrid, world_to_grid, grid_to_world, WEIGHT_TOLERANCE
from .brush import BrushShape, BrushSpec, BrushWindow, compute_brush_window
from .objects import PlacedObject, ObjectCatalog
from .terrain import (
    Terrain, TerrainTransform, DetailLayer, ActiveTerrain,
    clone_terrain, create_default_terrain,
)
from .applicator import EditMode, StrokeThrottle, BrushApplicator, apply_elevation, apply_weights

__all__ = ['TerrainError', 'OutOfBounds', 'InvalidLayer', 'InvariantViolation',
           'DimensionMismatch', 'SourceUnavailable', 'PersistenceIOError', 'CorruptArtifact',
           'ElevationGrid', 'WeightGrid', 'world_to_grid', 'grid_to_world', 'WEIGHT_TOLERANCE',
           'BrushShape', 'BrushSpec', 'BrushWindow', 'compute_brush_window',
           'PlacedObject', 'ObjectCatalog',
           'Terrain', 'TerrainTransform', 'DetailLayer', 'ActiveTerrain',
           'clone_terrain', 'create_default_terrain',
           'EditMode', 'StrokeThrottle', 'BrushApplicator', 'apply_elevation', 'apply_weights']
