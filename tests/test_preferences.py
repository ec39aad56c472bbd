"""Tests for brush/game preferences and application settings."""

import json

import pytest
from pydantic import ValidationError

from py_terrain.config import BrushSettings, GameSettings, Settings
from py_terrain.config.editor_settings import BRUSH_SETTINGS_NAME, GAME_SETTINGS_NAME
from py_terrain.core import BrushShape, PersistenceIOError
from py_terrain.storage import (
    FileSystemStore, MemoryStore, load_brush_settings, load_game_settings,
    save_brush_settings, save_game_settings,
)


class FailingStore(MemoryStore):
    """Store whose writes always fail."""

    def write_all(self, name, data):
        raise PersistenceIOError(f"read-only: {name}")


class TestBrushSettingsModel:

    def test_defaults(self):
        settings = BrushSettings()
        assert settings.brush_strength == 0.1
        assert settings.brush_size == 5.0
        assert settings.step_of_draw == 0.1
        assert settings.selected_texture_index == 0

    @pytest.mark.parametrize("field,value", [
        ("brush_strength", 0.0),
        ("brush_strength", 5.5),
        ("brush_size", 0.5),
        ("brush_size", 31.0),
        ("step_of_draw", 0.0),
        ("selected_texture_index", -1),
    ])
    def test_limits(self, field, value):
        with pytest.raises(ValidationError):
            BrushSettings(**{field: value})

    def test_brush_spec_uses_half_size(self):
        spec = BrushSettings(brush_size=6.0, brush_strength=0.4).to_brush_spec(BrushShape.SQUARE)
        assert spec.shape is BrushShape.SQUARE
        assert spec.radius == 3.0
        assert spec.strength == 0.4


class TestPreferencesStore:

    def test_missing_file_creates_defaults(self):
        store = MemoryStore()
        assert load_brush_settings(store) == BrushSettings()
        assert store.exists(BRUSH_SETTINGS_NAME)

    def test_round_trip(self, tmp_path):
        store = FileSystemStore(tmp_path)
        settings = BrushSettings(brush_strength=0.7, brush_size=12, step_of_draw=0.25,
                                 selected_texture_index=2)
        save_brush_settings(store, settings)
        assert load_brush_settings(store) == settings

        document = json.loads((tmp_path / BRUSH_SETTINGS_NAME).read_text())
        assert document["brush_size"] == 12.0

    def test_corrupt_file_falls_back(self):
        store = MemoryStore({BRUSH_SETTINGS_NAME: b"{not json"})
        assert load_brush_settings(store) == BrushSettings()
        assert json.loads(store.read_all(BRUSH_SETTINGS_NAME)) == BrushSettings().model_dump()

    def test_out_of_range_file_falls_back(self):
        store = MemoryStore({BRUSH_SETTINGS_NAME: b'{"brush_size": 100}'})
        assert load_brush_settings(store).brush_size == 5.0

    def test_write_failure_is_not_raised(self):
        assert load_brush_settings(FailingStore()) == BrushSettings()

    def test_game_settings(self):
        store = MemoryStore()
        assert load_game_settings(store).selected_terrain_name == ""
        save_game_settings(store, GameSettings(selected_terrain_name="Arena"))
        assert load_game_settings(store).selected_terrain_name == "Arena"
        assert store.exists(GAME_SETTINGS_NAME)


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.default_slot_name == "Default"
        assert settings.heightmap_resolution == 513
        assert settings.alphamap_resolution == 512

    @pytest.mark.parametrize("resolution", [1, 2, 33, 64, 129, 1025])
    def test_valid_resolutions(self, resolution):
        assert Settings(heightmap_resolution=resolution).heightmap_resolution == resolution

    @pytest.mark.parametrize("resolution", [0, 100, 500])
    def test_invalid_resolutions(self, resolution):
        with pytest.raises(ValidationError):
            Settings(alphamap_resolution=resolution)

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TERRAIN_HEIGHTMAP_RESOLUTION", "257")
        monkeypatch.setenv("TERRAIN_LOG_FORMAT", "plain")
        settings = Settings()
        assert settings.heightmap_resolution == 257
        assert settings.log_format == "plain"

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            Settings(log_format="xml")
