"""
Named save slots: discovery, save and load of complete terrains.

A slot ``name`` is stored as three artifacts: ``<name>_heights.json``,
``<name>_textures.json`` and ``<name>_objects.json``. Only the heights
artifact is required for a slot to exist.
"""

from typing import List, Optional, Set, Tuple

import structlog

from ..config.config import Settings
from ..config.editor_settings import GameSettings
from ..core.errors import DimensionMismatch, PersistenceIOError, SourceUnavailable, TerrainError
from ..core.objects import ObjectCatalog
from ..core.terrain import (
    ActiveTerrain,
    Terrain,
    TerrainTransform,
    clone_terrain,
    create_default_terrain,
)
from . import codec
from .preferences import load_game_settings, save_game_settings
from .store import BackingStore, FileSystemStore

logger = structlog.get_logger()

HEIGHTS_SUFFIX = "_heights.json"
TEXTURES_SUFFIX = "_textures.json"
OBJECTS_SUFFIX = "_objects.json"


def artifact_names(slot: str) -> Tuple[str, str, str]:
    """Heights, textures and objects artifact names for a slot."""
    return slot + HEIGHTS_SUFFIX, slot + TEXTURES_SUFFIX, slot + OBJECTS_SUFFIX


class SlotRegistry:
    """Enumerates saved terrains by scanning the store for heights artifacts."""

    def __init__(self, store: BackingStore, reserved_name: str = "Default"):
        self.store = store
        self.reserved_name = reserved_name

    def list_slots(self, include_default: bool = False) -> Set[str]:
        names = {
            artifact[: -len(HEIGHTS_SUFFIX)]
            for artifact in self.store.list_names("*" + HEIGHTS_SUFFIX)
        }
        names.discard("")
        names.discard(self.reserved_name)
        if include_default:
            names.add(self.reserved_name)
        return names

    def menu_entries(self) -> List[str]:
        """Slot names for the terrain picker, built-in terrain first."""
        return [self.reserved_name] + sorted(self.list_slots())

    def exists(self, name: str) -> bool:
        return self.store.exists(name + HEIGHTS_SUFFIX)


class TerrainManager:
    """
    Creates, saves and loads the active terrain.

    Every new terrain starts as a clone of the template; loading a slot
    overlays its persisted grids and objects on that clone and only
    then swaps it into the active handle.
    """

    def __init__(
        self,
        active: ActiveTerrain,
        store: BackingStore,
        template: Optional[Terrain],
        reserved_name: str = "Default",
        catalog: Optional[ObjectCatalog] = None,
    ):
        self.active = active
        self.store = store
        self.template = template
        self.registry = SlotRegistry(store, reserved_name)
        self.catalog = catalog or ObjectCatalog()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        active: Optional[ActiveTerrain] = None,
        store: Optional[BackingStore] = None,
        catalog: Optional[ObjectCatalog] = None,
    ) -> "TerrainManager":
        template = create_default_terrain(
            settings.heightmap_resolution,
            settings.alphamap_resolution,
            settings.layer_ids,
            TerrainTransform(origin=settings.terrain_origin, size=settings.terrain_size),
            elevation=settings.default_elevation,
        )
        return cls(
            active or ActiveTerrain(),
            store if store is not None else FileSystemStore(settings.data_dir),
            template,
            reserved_name=settings.default_slot_name,
            catalog=catalog,
        )

    @property
    def reserved_name(self) -> str:
        return self.registry.reserved_name

    def create(self) -> Terrain:
        """Replace the active terrain with a fresh copy of the template."""
        terrain = clone_terrain(self.template)
        self.active.replace(terrain)
        logger.info("Default terrain created", resolution=terrain.heightmap_resolution)
        return terrain

    def _check_name(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("Terrain name cannot be empty")
        if name == self.reserved_name:
            raise ValueError(f"'{name}' is reserved for the built-in terrain")
        if any(sep in name for sep in ("/", "\\")):
            raise ValueError(f"Terrain name cannot contain path separators: {name!r}")
        return name

    def save(self, name: str) -> str:
        """
        Persist the active terrain under ``name``, replacing any earlier save.

        All documents are encoded before anything is written, and the
        heights artifact goes last, so a new slot is only listed once its
        textures and objects are in place.

        Returns:
            The normalized slot name
        """
        name = self._check_name(name)
        terrain = self.active.terrain
        heights_name, textures_name, objects_name = artifact_names(name)

        heights = codec.dumps(codec.encode_elevation(terrain.elevation))
        textures = codec.dumps(codec.encode_weights(terrain.weights))
        objects = codec.dumps(codec.encode_objects(terrain.objects))

        self.store.write_all(textures_name, textures)
        self.store.write_all(objects_name, objects)
        self.store.write_all(heights_name, heights)

        logger.info("Terrain saved", slot=name, objects=len(terrain.objects))
        return name

    def load(self, name: str) -> Terrain:
        """
        Make the terrain saved under ``name`` active.

        The reserved name loads the built-in terrain. Missing textures or
        objects artifacts leave the template weights and an empty object
        list. On any error the current active terrain is kept.

        Raises:
            SourceUnavailable: If no heights artifact exists for ``name``
            DimensionMismatch: If a saved grid does not fit the template
            PersistenceIOError: If an artifact cannot be read or decoded
        """
        name = (name or "").strip()
        if not name or name == self.reserved_name:
            return self.create()
        if not self.registry.exists(name):
            raise SourceUnavailable(f"No saved terrain named '{name}'")

        heights_name, textures_name, objects_name = artifact_names(name)
        terrain = clone_terrain(self.template)
        try:
            artifact = codec.loads(codec.HeightArtifact, self.store.read_all(heights_name))
            terrain.elevation = codec.decode_elevation(
                artifact, expected_shape=terrain.heightmap_resolution
            )

            if self.store.exists(textures_name):
                artifact = codec.loads(codec.WeightArtifact, self.store.read_all(textures_name))
                terrain.weights = codec.decode_weights(
                    artifact, expected_shape=terrain.weights.shape
                )

            if self.store.exists(objects_name):
                artifact = codec.loads(codec.ObjectListArtifact, self.store.read_all(objects_name))
                terrain.objects = self.catalog.restore(codec.decode_objects(artifact))
        except TerrainError as e:
            logger.warning("Terrain load rejected, keeping current terrain", slot=name, error=str(e))
            raise

        self.active.replace(terrain)
        logger.info("Terrain loaded", slot=name, objects=len(terrain.objects))
        return terrain

    def select_slot(self, name: str) -> str:
        """Remember the terrain that game mode should start with."""
        name = (name or "").strip()
        if not name:
            raise ValueError("Terrain name cannot be empty")
        if name != self.reserved_name and not self.registry.exists(name):
            raise SourceUnavailable(f"No saved terrain named '{name}'")
        save_game_settings(self.store, GameSettings(selected_terrain_name=name))
        return name

    def load_selected(self) -> Terrain:
        """
        Load the terrain chosen in the menu, or the built-in one.

        A missing, unreadable or mismatched slot falls back to the built-in
        terrain so game mode always starts.
        """
        selected = load_game_settings(self.store).selected_terrain_name
        try:
            return self.load(selected)
        except (SourceUnavailable, PersistenceIOError, DimensionMismatch) as e:
            logger.warning("Selected terrain unusable, using built-in terrain",
                           slot=selected, error=str(e))
            return self.create()
