"""Persistence of editor and game preferences with create-if-missing fallback."""

from typing import Type, TypeVar

import structlog
from pydantic import BaseModel

from ..config.editor_settings import (
    BRUSH_SETTINGS_NAME,
    GAME_SETTINGS_NAME,
    BrushSettings,
    GameSettings,
)
from ..core.errors import PersistenceIOError
from .codec import loads
from .store import BackingStore

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _save_model(store: BackingStore, name: str, model: BaseModel) -> None:
    store.write_all(name, model.model_dump_json(indent=2).encode("utf-8"))


def _load_model(store: BackingStore, name: str, model: Type[ModelT]) -> ModelT:
    """
    Read a preferences document, falling back to defaults.

    A missing or unreadable document is replaced by the model defaults,
    which are written back immediately. A failure of that write is
    logged and otherwise ignored so editing can continue.
    """
    if store.exists(name):
        try:
            return loads(model, store.read_all(name))
        except PersistenceIOError as e:
            logger.warning("Preferences unreadable, using defaults", name=name, error=str(e))
    else:
        logger.info("Preferences missing, creating defaults", name=name)

    defaults = model()
    try:
        _save_model(store, name, defaults)
    except PersistenceIOError as e:
        logger.warning("Could not write default preferences", name=name, error=str(e))
    return defaults


def load_brush_settings(store: BackingStore) -> BrushSettings:
    return _load_model(store, BRUSH_SETTINGS_NAME, BrushSettings)


def save_brush_settings(store: BackingStore, settings: BrushSettings) -> None:
    _save_model(store, BRUSH_SETTINGS_NAME, settings)


def load_game_settings(store: BackingStore) -> GameSettings:
    return _load_model(store, GAME_SETTINGS_NAME, GameSettings)


def save_game_settings(store: BackingStore, settings: GameSettings) -> None:
    _save_model(store, GAME_SETTINGS_NAME, settings)
