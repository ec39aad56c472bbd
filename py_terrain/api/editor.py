"""
Terrain editing endpoints.

Stand-ins for the interactive editor: brush configuration, stroke ticks
from a pointer gesture, and object placement on the active terrain.
"""

from typing import List, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..config.editor_settings import BrushSettings
from ..core.applicator import EditMode
from ..core.brush import BrushShape
from .context import EditorContext, get_context

logger = structlog.get_logger()

router = APIRouter(prefix="/edit", tags=["Terrain Editor"])


class BrushState(BrushSettings):
    """Brush settings plus the selected brush shape."""

    shape: BrushShape = Field(default=BrushShape.CIRCLE, description="Brush footprint")


class StrokeTick(BaseModel):
    """One tick of a pointer gesture."""

    phase: Literal["begin", "move", "end"] = Field(default="move", description="Gesture phase")
    point: Optional[List[float]] = Field(
        default=None, min_length=3, max_length=3,
        description="World point under the pointer, omitted when off the terrain",
    )
    elapsed: float = Field(default=0.0, ge=0.0, description="Seconds since the previous tick")
    mode: EditMode = Field(default=EditMode.SCULPT, description="Sculpt elevation or paint materials")


class StrokeResult(BaseModel):
    applied: bool
    touched_cells: int = 0
    ready_to_paint: bool
    center: Optional[List[float]] = Field(
        default=None, description="World (x, z) of the painted center cell corner"
    )


class ObjectPlacement(BaseModel):
    prefab: str = Field(min_length=1, description="Prefab identifier")
    position: List[float] = Field(min_length=3, max_length=3, description="World position")
    rotation_y: float = Field(default=0.0, ge=0.0, le=360.0, description="Yaw in degrees")


class ObjectRotation(BaseModel):
    rotation_y: float = Field(ge=0.0, le=360.0, description="Yaw in degrees")


class PlacedObjectResponse(BaseModel):
    index: int
    prefab: str
    position: List[float]
    rotation_y: float


@router.get("/brush", response_model=BrushState)
def get_brush(ctx: EditorContext = Depends(get_context)):
    return BrushState(**ctx.brush_settings.model_dump(), shape=ctx.brush_shape)


@router.put("/brush", response_model=BrushState)
def update_brush(state: BrushState, ctx: EditorContext = Depends(get_context)):
    settings = BrushSettings(**state.model_dump(exclude={"shape"}))
    ctx.update_brush(settings, state.shape)
    logger.info("Brush updated", shape=state.shape.value, size=settings.brush_size,
                strength=settings.brush_strength)
    return state


@router.post("/stroke", response_model=StrokeResult)
def stroke(tick: StrokeTick, ctx: EditorContext = Depends(get_context)):
    """
    Feed one gesture tick to the brush applicator.

    ``begin`` starts a stroke (the first tick paints immediately), ``move``
    paints whenever ``step_of_draw`` seconds have accumulated, and ``end``
    stops the stroke.
    """
    applicator = ctx.applicator
    if tick.phase == "end":
        applicator.stop_stroke()
        return StrokeResult(applied=False, ready_to_paint=False)
    if tick.phase == "begin":
        applicator.start_stroke()

    window = applicator.on_stroke_tick(tick.point, tick.elapsed, tick.mode)
    if window is None:
        return StrokeResult(applied=False, ready_to_paint=applicator.ready_to_paint)

    terrain = ctx.active.terrain
    if tick.mode == EditMode.SCULPT:
        cell, resolution = terrain.elevation_cell(tick.point), terrain.heightmap_resolution
    else:
        cell, resolution = terrain.weight_cell(tick.point), terrain.alphamap_resolution
    return StrokeResult(
        applied=True,
        touched_cells=window.touched_count,
        ready_to_paint=applicator.ready_to_paint,
        center=list(terrain.cell_to_world(cell, resolution)),
    )


def _object_response(index: int, obj) -> PlacedObjectResponse:
    return PlacedObjectResponse(index=index, prefab=obj.prefab,
                                position=list(obj.position), rotation_y=obj.rotation_y)


@router.post("/objects", response_model=PlacedObjectResponse)
def place_object(placement: ObjectPlacement, ctx: EditorContext = Depends(get_context)):
    if placement.prefab not in ctx.manager.catalog:
        raise HTTPException(status_code=400, detail=f"Unknown prefab '{placement.prefab}'")
    terrain = ctx.active.terrain
    obj = terrain.place_object(placement.prefab, placement.position, placement.rotation_y)
    return _object_response(len(terrain.objects) - 1, obj)


@router.patch("/objects/{index}", response_model=PlacedObjectResponse)
def rotate_object(index: int, rotation: ObjectRotation, ctx: EditorContext = Depends(get_context)):
    terrain = ctx.active.terrain
    try:
        obj = terrain.set_object_rotation(index, rotation.rotation_y)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"No placed object at index {index}")
    return _object_response(index, obj)
