"""
Settings for the terrain editor tools.

This module defines the user-adjustable brush configuration and the
game-mode terrain selection, together with their limits and defaults.
Both are persisted as small JSON documents next to the saved terrains.
"""

from pydantic import BaseModel, Field

from ..core.brush import BrushShape, BrushSpec


BRUSH_SETTINGS_NAME = "TerrainEditorSettings.json"
GAME_SETTINGS_NAME = "GameSettings.json"


class BrushSettings(BaseModel):
    """Brush tool settings exposed through the editor sliders."""

    brush_strength: float = Field(default=0.1, ge=0.01, le=5.0, description="Contribution at the brush center")
    brush_size: float = Field(default=5.0, ge=1.0, le=30.0, description="Brush diameter in cells")
    step_of_draw: float = Field(default=0.1, ge=0.01, le=5.0, description="Seconds between strokes while held")
    selected_texture_index: int = Field(default=0, ge=0, description="Material layer painted in paint mode")

    def to_brush_spec(self, shape: BrushShape = BrushShape.CIRCLE) -> BrushSpec:
        """Brush spec for one stroke; the radius is half the brush size."""
        return BrushSpec(shape=shape, radius=self.brush_size / 2.0, strength=self.brush_strength)


class GameSettings(BaseModel):
    """Terrain chosen in the main menu for game mode."""

    selected_terrain_name: str = Field(default="", description="Save slot to load when the game starts")
