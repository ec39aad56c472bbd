#!/usr/bin/env python3
"""
Simple demo script showing sculpting, painting and save slots.
"""

import numpy as np
from py_terrain.config import Settings
from py_terrain.core import BrushShape, BrushSpec, EditMode, BrushApplicator
from py_terrain.storage import MemoryStore, TerrainManager


def main():
    """Demonstrate a few brush strokes on a small terrain."""
    print("Py-Terrain Brush Demo")
    print("=" * 40)

    settings = Settings(
        heightmap_resolution=33,
        alphamap_resolution=32,
        terrain_size=(64.0, 20.0, 64.0),
    )
    store = MemoryStore()
    manager = TerrainManager.from_settings(settings, store=store)
    terrain = manager.create()
    print(f"\nCreated terrain {terrain.heightmap_resolution} with layers {terrain.layer_ids}")

    applicator = BrushApplicator(manager.active, BrushSpec(BrushShape.CIRCLE, 4.0, 0.2))

    # Simulate a held pointer dragging across the terrain at 60 fps
    applicator.start_stroke()
    strokes = 0
    for i in range(120):
        point = (10.0 + i * 0.35, 0.0, 32.0)
        if applicator.on_stroke_tick(point, 1 / 60, EditMode.SCULPT) is not None:
            strokes += 1
    applicator.stop_stroke()

    heights = terrain.elevation.values
    print(f"\nSculpt: {strokes} strokes applied in 2 seconds")
    print(f"  Height range: {heights.min():.3f}-{heights.max():.3f}")
    print(f"  Raised cells: {np.count_nonzero(heights)}")

    applicator.brush = BrushSpec(BrushShape.SQUARE, 3.0, 0.6)
    applicator.target_layer = 2
    applicator.apply((32.0, 0.0, 32.0), EditMode.PAINT)

    weights = terrain.weights.values
    print(f"\nPaint: layer '{terrain.layer_ids[2]}' covers {np.sum(weights[:, :, 2] > 0.5)} cells")
    print(f"  Max weight sum drift: {np.abs(weights.sum(axis=2) - 1.0).max():.2e}")

    manager.save("Demo")
    manager.create()
    loaded = manager.load("Demo")
    print(f"\nSaved slots: {manager.registry.menu_entries()}")
    print(f"Reloaded max height: {loaded.elevation.values.max():.3f}")


if __name__ == "__main__":
    main()
