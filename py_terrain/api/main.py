"""FastAPI application exposing the terrain editor."""

from contextlib import asynccontextmanager
from typing import List, Optional

import numpy as np
import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config.config import get_settings
from ..core.errors import (
    DimensionMismatch,
    InvalidLayer,
    InvariantViolation,
    OutOfBounds,
    PersistenceIOError,
    SourceUnavailable,
    TerrainError,
)
from ..core.terrain import Terrain
from ..utils.log_config import configure_logging
from .context import EditorContext, get_context
from .editor import router as editor_router

logger = structlog.get_logger()

ERROR_STATUS = (
    (OutOfBounds, 400),
    (InvalidLayer, 400),
    (DimensionMismatch, 409),
    (SourceUnavailable, 404),
    (PersistenceIOError, 503),
    (InvariantViolation, 500),
)


class TerrainSummary(BaseModel):
    """Shape and statistics of the active terrain."""

    heightmap_resolution: List[int]
    alphamap_resolution: List[int]
    layer_ids: List[str]
    object_count: int
    min_elevation: float
    max_elevation: float
    mean_elevation: float


class SlotList(BaseModel):
    slots: List[str]


class SlotResponse(BaseModel):
    slot: str


class SlotSelection(BaseModel):
    name: str = Field(min_length=1, description="Save slot to start game mode with")


def summarize(terrain: Terrain) -> TerrainSummary:
    values = terrain.elevation.values
    return TerrainSummary(
        heightmap_resolution=list(terrain.heightmap_resolution),
        alphamap_resolution=list(terrain.alphamap_resolution),
        layer_ids=terrain.layer_ids,
        object_count=len(terrain.objects),
        min_elevation=float(np.min(values)),
        max_elevation=float(np.max(values)),
        mean_elevation=float(np.mean(values)),
    )


def create_app(context: Optional[EditorContext] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        context: Pre-built editor session; when omitted one is created at
            startup from the environment settings
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "context", None) is None:
            settings = get_settings()
            configure_logging(settings.log_level, settings.log_format)
            app.state.context = EditorContext(settings)
        logger.info("API startup complete")
        yield
        logger.info("API shutdown")

    app = FastAPI(
        title="Terrain Editor API",
        description="Heightfield and material-weight terrain editing with named save slots",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = context

    @app.exception_handler(TerrainError)
    async def terrain_error_handler(request: Request, exc: TerrainError):
        status = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500)
        logger.warning("Request failed", path=request.url.path, error=str(exc), status=status)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    @app.get("/health")
    def health(ctx: EditorContext = Depends(get_context)):
        return {"status": "healthy", "active_terrain": ctx.active.is_active}

    @app.get("/terrain", response_model=TerrainSummary)
    def get_terrain(ctx: EditorContext = Depends(get_context)):
        return summarize(ctx.active.terrain)

    @app.post("/terrain/new", response_model=TerrainSummary)
    def new_terrain(ctx: EditorContext = Depends(get_context)):
        return summarize(ctx.manager.create())

    @app.get("/slots", response_model=SlotList)
    def list_slots(menu: bool = False, ctx: EditorContext = Depends(get_context)):
        registry = ctx.manager.registry
        names = registry.menu_entries() if menu else sorted(registry.list_slots())
        return SlotList(slots=names)

    @app.post("/slots/{name}", response_model=SlotResponse)
    def save_slot(name: str, ctx: EditorContext = Depends(get_context)):
        try:
            slot = ctx.manager.save(name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return SlotResponse(slot=slot)

    @app.post("/slots/{name}/load", response_model=TerrainSummary)
    def load_slot(name: str, ctx: EditorContext = Depends(get_context)):
        return summarize(ctx.manager.load(name))

    @app.post("/game/select", response_model=SlotResponse)
    def select_slot(selection: SlotSelection, ctx: EditorContext = Depends(get_context)):
        try:
            slot = ctx.manager.select_slot(selection.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return SlotResponse(slot=slot)

    @app.post("/game/start", response_model=TerrainSummary)
    def start_game(ctx: EditorContext = Depends(get_context)):
        return summarize(ctx.manager.load_selected())

    app.include_router(editor_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
