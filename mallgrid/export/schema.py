"""Canonical JSON schema for scene.3d.v1 export documents."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from mallgrid.geometry.contract import SCENE_3D_SCHEMA, SCENE_SCHEMA

TileCoord = Tuple[Annotated[int, Field(strict=True, ge=0)], Annotated[int, Field(strict=True, ge=0)]]
# edges may sit left of / above the floor content after normalization
EdgeCoord = Tuple[Annotated[int, Field(strict=True)], Annotated[int, Field(strict=True)]]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class Vec3(_Frozen):
    x: float
    y: float
    z: float


class Parity(_Frozen):
    """Counts for cross-checking against the consuming renderer."""
    tiles: int = Field(..., ge=0)
    edgesH: int = Field(..., ge=0)
    edgesV: int = Field(..., ge=0)
    floorArea: int = Field(..., ge=0, description="Floor area in grid units")
    edgeLenH: int = Field(..., ge=0, description="Horizontal wall length in grid units")
    edgeLenV: int = Field(..., ge=0, description="Vertical wall length in grid units")

    @property
    def tile_count(self) -> int:
        return self.tiles

    @property
    def horizontal_edge_count(self) -> int:
        return self.edgesH

    @property
    def vertical_edge_count(self) -> int:
        return self.edgesV


class SimLimits(_Frozen):
    maxTilesX: int = Field(..., ge=1)
    maxTilesY: int = Field(..., ge=1)


class Meta(_Frozen):
    schema_: Literal["scene.3d.v1"] = Field(SCENE_3D_SCHEMA, alias="schema")
    version: str = "1.0"
    sourceSchema: str = SCENE_SCHEMA
    created: Optional[str] = None
    name: str = "scene"
    axes: str = Field(..., pattern=r"^[XYZ]_up_[XYZ]{2}_ground$")
    parity: Parity
    offsetFormat: str = "xy_standard"
    simLimits: Optional[SimLimits] = None
    digest: str = Field(..., pattern=r"^[0-9a-f]{8}$")


class Units(_Frozen):
    cellMeters: float = Field(..., gt=0.0)
    wallHeightMeters: float = Field(..., gt=0.0)
    wallThicknessMeters: float = Field(..., gt=0.0)
    floorThicknessMeters: float = Field(..., gt=0.0)
    lengthUnit: str = "meters"
    coordinateSystem: str


class Bounds(_Frozen):
    min: Vec3
    max: Vec3
    center: Vec3


class Tiles(_Frozen):
    floor: Tuple[TileCoord, ...] = ()


class Edges(_Frozen):
    horizontal: Tuple[EdgeCoord, ...] = ()
    vertical: Tuple[EdgeCoord, ...] = ()


class OriginOffset(_Frozen):
    x: int
    y: int


class Scene3DDocument(_Frozen):
    """Canonical scene.3d.v1 export."""
    meta: Meta
    units: Units
    bounds: Bounds
    tiles: Tiles
    edges: Edges
    originOffset: OriginOffset

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
