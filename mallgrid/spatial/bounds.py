"""Containment predicates for template constraints.

``make_bounds`` turns a template node into a :class:`Containment` whose
``is_inside(x, y)`` gates edits. Absence of a constraint means unrestricted.

Mall precedence, first match wins:

1. the mall's own ``rect`` (children ignored)
2. union of the unit rects
3. the full ``grid_size`` rectangle
4. unrestricted
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from mallgrid.grid.model import Edge
from mallgrid.spatial.rect import Number, Rect, bounding_rect, union_area
from mallgrid.templates.nodes import MallNode, RoomNode, SceneNode, TemplateNode, UnitNode


@dataclass(frozen=True)
class Containment:
    """Containment predicate plus a description of where it came from."""

    source: str
    rects: tuple[Rect, ...] = ()
    unrestricted: bool = False

    def is_inside(self, x: Number, y: Number) -> bool:
        if self.unrestricted:
            return True
        return any(rect.contains(x, y) for rect in self.rects)

    __call__ = is_inside

    @property
    def extent(self) -> Rect | None:
        """Bounding rect of the allowed region; None when unrestricted."""
        if self.unrestricted:
            return None
        return bounding_rect(self.rects)

    @property
    def area(self) -> float | None:
        if self.unrestricted:
            return None
        return union_area(self.rects)


UNRESTRICTED = Containment(source="unrestricted", unrestricted=True)


def rect_bounds(rect: Rect | None, source: str = "rect") -> Containment:
    if rect is None:
        return UNRESTRICTED
    return Containment(source=source, rects=(rect,))


def _mall_bounds(node: MallNode) -> Containment:
    if node.rect is not None:
        return rect_bounds(node.rect, source=f"mall:{node.id}:rect")
    if node.units:
        return Containment(source=f"mall:{node.id}:units", rects=tuple(unit.rect for unit in node.units))
    if node.grid_size is not None and node.grid_size.width > 0 and node.grid_size.height > 0:
        grid = Rect(0, 0, node.grid_size.width, node.grid_size.height)
        return Containment(source=f"mall:{node.id}:grid", rects=(grid,))
    return UNRESTRICTED


def make_bounds(node: TemplateNode | None) -> Containment:
    """Build the containment predicate for a template node."""
    if isinstance(node, MallNode):
        return _mall_bounds(node)
    if isinstance(node, UnitNode):
        return rect_bounds(node.rect, source=f"unit:{node.id}")
    if isinstance(node, RoomNode):
        return rect_bounds(node.rect, source=f"room:{node.id}")
    if isinstance(node, SceneNode) or node is None:
        return UNRESTRICTED
    logger.warning(f"Unknown template node type {type(node).__name__}; treating as unrestricted")
    return UNRESTRICTED


InsidePredicate = Callable[[int, int], bool]


def edge_is_inside(bounds: Containment | InsidePredicate | None, edge: Edge) -> bool:
    """An edge is permitted when either tile it separates is inside."""
    if bounds is None:
        return True
    check = bounds.is_inside if isinstance(bounds, Containment) else bounds
    (ax, ay), (bx, by) = edge.adjacent_tiles()
    return check(ax, ay) or check(bx, by)


def tile_is_inside(bounds: Containment | InsidePredicate | None, x: int, y: int) -> bool:
    if bounds is None:
        return True
    check = bounds.is_inside if isinstance(bounds, Containment) else bounds
    return check(x, y)
