"""Placed decorative objects and the prefab catalog used to restore them."""

from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Tuple

import structlog

logger = structlog.get_logger()


@dataclass
class PlacedObject:
    """A prefab instance placed on the terrain."""

    prefab: str
    position: Tuple[float, float, float]
    rotation_y: float = 0.0

    def __post_init__(self):
        self.position = tuple(float(c) for c in self.position)
        if len(self.position) != 3:
            raise ValueError(f"Position needs 3 components, got {len(self.position)}")
        self.rotation_y = float(self.rotation_y)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["position"] = list(self.position)
        return data


@dataclass
class ObjectCatalog:
    """Prefab names that can be instantiated on a terrain."""

    prefabs: List[str] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        return not self.prefabs or name in self.prefabs

    def restore(self, records: Iterable[PlacedObject]) -> List[PlacedObject]:
        """Keep records whose prefab is known, warning about the rest."""
        restored = []
        for record in records:
            if record.prefab in self:
                restored.append(record)
            else:
                logger.warning("Prefab not found, skipping object", prefab=record.prefab)
        return restored

