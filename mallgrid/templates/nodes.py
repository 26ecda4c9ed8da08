"""Normalized template DTOs.

Template kinds form a closed variant: every loaded document becomes exactly
one of :class:`MallNode`, :class:`UnitNode`, :class:`RoomNode` or
:class:`SceneNode`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from mallgrid.spatial.rect import Rect


class TemplateKind(str, Enum):
    MALL = "mall"
    UNIT = "unit"
    ROOM = "room"
    SCENE = "scene"


@dataclass(frozen=True)
class ChildRect:
    id: str
    rect: Rect


@dataclass(frozen=True)
class GridSize:
    width: int
    height: int


@dataclass(frozen=True)
class MallNode:
    id: str
    rect: Rect | None = None
    units: tuple[ChildRect, ...] = ()
    grid_size: GridSize | None = None
    kind: TemplateKind = field(default=TemplateKind.MALL, init=False)

    @property
    def parent_id(self) -> None:
        return None


@dataclass(frozen=True)
class UnitNode:
    id: str
    rect: Rect | None = None
    children: tuple[ChildRect, ...] = ()
    parent_id: str | None = None
    kind: TemplateKind = field(default=TemplateKind.UNIT, init=False)


@dataclass(frozen=True)
class RoomNode:
    id: str
    rect: Rect | None = None
    children: tuple[ChildRect, ...] = ()
    parent_id: str | None = None
    kind: TemplateKind = field(default=TemplateKind.ROOM, init=False)


@dataclass(frozen=True)
class SceneNode:
    id: str = "scene"
    instances: tuple[dict[str, Any], ...] = ()
    kind: TemplateKind = field(default=TemplateKind.SCENE, init=False)

    @property
    def parent_id(self) -> None:
        return None


TemplateNode = Union[MallNode, UnitNode, RoomNode, SceneNode]
