"""
Configuration for terrain editing and persistence.
"""

from .config import Settings, get_settings
from .editor_settings import BrushSettings, GameSettings, BRUSH_SETTINGS_NAME, GAME_SETTINGS_NAME

__all__ = ['Settings', 'get_settings', 'BrushSettings', 'GameSettings',
           'BRUSH_SETTINGS_NAME', 'GAME_SETTINGS_NAME']
