"""
Persistence of terrains, save slots and preferences.
"""

from .store import BackingStore, FileSystemStore, MemoryStore
from .codec import (
    HeightArtifact, WeightArtifact, ObjectListArtifact,
    encode_elevation, decode_elevation, encode_weights, decode_weights,
    encode_objects, decode_objects, dumps, loads,
)
from .slots import SlotRegistry, TerrainManager, artifact_names
from .preferences import load_brush_settings, save_brush_settings, load_game_settings, save_game_settings

__all__ = ['BackingStore', 'FileSystemStore', 'MemoryStore',
           'HeightArtifact', 'WeightArtifact', 'ObjectListArtifact',
           'encode_elevation', 'decode_elevation', 'encode_weights', 'decode_weights',
           'encode_objects', 'decode_objects', 'dumps', 'loads',
           'SlotRegistry', 'TerrainManager', 'artifact_names',
           'load_brush_settings', 'save_brush_settings', 'load_game_settings', 'save_game_settings']
