"""Editor state shared by the HTTP endpoints."""

from typing import Optional

import structlog
from fastapi import Request

from ..config.config import Settings
from ..config.editor_settings import BrushSettings
from ..core.applicator import BrushApplicator
from ..core.brush import BrushShape
from ..core.errors import PersistenceIOError
from ..core.objects import ObjectCatalog
from ..core.terrain import ActiveTerrain
from ..storage.preferences import load_brush_settings, save_brush_settings
from ..storage.slots import TerrainManager
from ..storage.store import BackingStore, FileSystemStore

logger = structlog.get_logger()


class EditorContext:
    """Active terrain, slot manager and brush tool for one editing session."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[BackingStore] = None,
        catalog: Optional[ObjectCatalog] = None,
    ):
        self.settings = settings
        self.store = store if store is not None else FileSystemStore(settings.data_dir)
        self.active = ActiveTerrain()
        self.manager = TerrainManager.from_settings(settings, self.active, self.store, catalog)
        self.manager.create()

        self.brush_settings = load_brush_settings(self.store)
        self.brush_shape = BrushShape.CIRCLE
        target = self.brush_settings.selected_texture_index
        if target >= self.active.terrain.layer_count:
            target = 0
        self.applicator = BrushApplicator(
            self.active,
            self.brush_settings.to_brush_spec(self.brush_shape),
            target_layer=target,
            step_of_draw=self.brush_settings.step_of_draw,
            tolerance=settings.weight_tolerance,
        )

    def update_brush(self, brush_settings: BrushSettings, shape: BrushShape) -> None:
        """Apply new brush settings and persist them."""
        self.active.terrain.weights.check_layer(brush_settings.selected_texture_index)

        self.brush_settings = brush_settings
        self.brush_shape = shape
        self.applicator.brush = brush_settings.to_brush_spec(shape)
        self.applicator.target_layer = brush_settings.selected_texture_index
        self.applicator.throttle.step_of_draw = brush_settings.step_of_draw

        try:
            save_brush_settings(self.store, brush_settings)
        except PersistenceIOError as e:
            logger.warning("Brush settings not saved", error=str(e))


def get_context(request: Request) -> EditorContext:
    return request.app.state.context
