"""
Flat JSON encoding of terrain grids and placed objects.

Grids are flattened in row-major order of their (x, z[, layer]) arrays:
elevation cell (i, j) lives at ``i*height + j`` and weight (i, j, k) at
``i*height*layers + j*layers + k``. Decoding reverses the same index
arithmetic, so a grid survives a round trip bit for bit.
"""

from typing import List, Optional, Sequence, Type, TypeVar

import numpy as np
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import CorruptArtifact, DimensionMismatch, InvariantViolation
from ..core.grid import ElevationGrid, WeightGrid
from ..core.objects import PlacedObject

ArtifactT = TypeVar("ArtifactT", bound=BaseModel)


class HeightArtifact(BaseModel):
    """Persisted elevation grid."""

    heights: List[float]
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class WeightArtifact(BaseModel):
    """Persisted material weight grid."""

    weights: List[float] = Field(validation_alias=AliasChoices("weights", "alphamaps"))
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    layers: int = Field(ge=0)


class Vec3(BaseModel):
    x: float
    y: float
    z: float


class ObjectRecord(BaseModel):
    """One placed object as stored on disk."""

    model_config = ConfigDict(populate_by_name=True)

    prefab_identifier: str = Field(
        alias="prefabIdentifier",
        validation_alias=AliasChoices("prefabIdentifier", "prefabName", "prefab_identifier"),
    )
    position: Vec3
    rotation_y: float = Field(
        default=0.0, alias="rotationY", validation_alias=AliasChoices("rotationY", "rotation_y")
    )


class ObjectListArtifact(BaseModel):
    """Persisted list of placed objects."""

    objects: List[ObjectRecord] = Field(default_factory=list)


def _check_shape(kind: str, expected: Optional[Sequence[int]], actual: Sequence[int]) -> None:
    if expected is not None and tuple(expected) != tuple(actual):
        raise DimensionMismatch(kind, expected, actual)


def encode_elevation(grid: ElevationGrid) -> HeightArtifact:
    return HeightArtifact(
        heights=grid.values.ravel(order="C").tolist(),
        width=grid.width,
        height=grid.height,
    )


def decode_elevation(artifact: HeightArtifact,
                     expected_shape: Optional[Sequence[int]] = None) -> ElevationGrid:
    """
    Rebuild an elevation grid.

    Raises:
        DimensionMismatch: If the data length disagrees with the declared
            size, or the declared size differs from ``expected_shape``
        CorruptArtifact: If the stored heights are not finite numbers
    """
    shape = (artifact.width, artifact.height)
    _check_shape("elevation", expected_shape, shape)
    if len(artifact.heights) != artifact.width * artifact.height:
        raise DimensionMismatch("elevation data", (artifact.width * artifact.height,),
                                (len(artifact.heights),))
    values = np.asarray(artifact.heights, dtype=np.float64).reshape(shape)
    try:
        return ElevationGrid.from_array(values)
    except ValueError as e:
        raise CorruptArtifact(f"Stored heights are invalid: {e}") from e


def encode_weights(grid: WeightGrid) -> WeightArtifact:
    return WeightArtifact(
        weights=grid.values.ravel(order="C").tolist(),
        width=grid.width,
        height=grid.height,
        layers=grid.layer_count,
    )


def decode_weights(artifact: WeightArtifact,
                   expected_shape: Optional[Sequence[int]] = None) -> WeightGrid:
    """
    Rebuild a weight grid.

    Raises:
        DimensionMismatch: If sizes disagree (see ``decode_elevation``)
        CorruptArtifact: If the stored weights do not sum to one per cell
            (non-finite weights never do)
    """
    shape = (artifact.width, artifact.height, artifact.layers)
    _check_shape("weights", expected_shape, shape)
    expected_len = artifact.width * artifact.height * artifact.layers
    if len(artifact.weights) != expected_len:
        raise DimensionMismatch("weight data", (expected_len,), (len(artifact.weights),))
    values = np.asarray(artifact.weights, dtype=np.float64).reshape(shape)
    try:
        return WeightGrid.from_array(values)
    except InvariantViolation as e:
        raise CorruptArtifact(f"Stored weights are not normalized: {e}") from e


def encode_objects(objects: Sequence[PlacedObject]) -> ObjectListArtifact:
    return ObjectListArtifact(objects=[
        ObjectRecord(
            prefab_identifier=obj.prefab,
            position=Vec3(x=obj.position[0], y=obj.position[1], z=obj.position[2]),
            rotation_y=obj.rotation_y,
        )
        for obj in objects
    ])


def decode_objects(artifact: ObjectListArtifact) -> List[PlacedObject]:
    return [
        PlacedObject(
            prefab=record.prefab_identifier,
            position=(record.position.x, record.position.y, record.position.z),
            rotation_y=record.rotation_y,
        )
        for record in artifact.objects
    ]


def dumps(artifact: BaseModel) -> bytes:
    """Serialize an artifact to JSON bytes."""
    return artifact.model_dump_json(by_alias=True).encode("utf-8")


def loads(model: Type[ArtifactT], data: bytes) -> ArtifactT:
    """Parse JSON bytes into an artifact model."""
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        raise CorruptArtifact(f"Invalid {model.__name__}: {e.error_count()} errors") from e
