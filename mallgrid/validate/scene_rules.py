"""Advisory layout rules.

Rule A (``unenclosed-floors``) flags floor tiles with an exposed side that
has no wall edge. Rule B (``oob-content``) flags floor tiles and edges
outside the active containment. Both return human-readable warning
strings and never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from mallgrid.geometry.contract import MAX_WARNING_EXAMPLES
from mallgrid.grid.model import Edge, Layout, Orientation, TileKind
from mallgrid.spatial.bounds import Containment, InsidePredicate, edge_is_inside, tile_is_inside
from mallgrid.validate.switchboard import OOB_CONTENT, UNENCLOSED_FLOORS, RulesSwitchboard

Bounds = Optional[Union[Containment, InsidePredicate]]


@dataclass(frozen=True)
class UnenclosedFloor:
    x: int
    y: int
    missing: tuple[str, ...]

    def __str__(self) -> str:
        return f"({self.x},{self.y})[{'|'.join(self.missing)}]"


def _missing_sides(layout: Layout, x: int, y: int) -> tuple[str, ...]:
    floor = TileKind.FLOOR
    # (tag, neighbor, covering edge); off-grid neighbors read as EMPTY
    sides = (
        ("N", (x, y - 1), Edge.h(x, y)),
        ("S", (x, y + 1), Edge.h(x, y + 1)),
        ("W", (x - 1, y), Edge.v(x, y)),
        ("E", (x + 1, y), Edge.v(x + 1, y)),
    )
    return tuple(
        tag for tag, (nx, ny), edge in sides if layout.tile(nx, ny) is not floor and not layout.has_edge(edge)
    )


def find_unenclosed_floors(layout: Layout) -> list[UnenclosedFloor]:
    """Floor tiles with at least one exposed side lacking a wall, row-major."""
    found = []
    for x, y in layout.floor_tiles():
        missing = _missing_sides(layout, x, y)
        if missing:
            found.append(UnenclosedFloor(x, y, missing))
    return found


def check_unenclosed_floors(layout: Layout, max_examples: int = MAX_WARNING_EXAMPLES) -> list[str]:
    unenclosed = find_unenclosed_floors(layout)
    if not unenclosed:
        return []
    examples = ", ".join(str(item) for item in unenclosed[:max_examples])
    more = f" and {len(unenclosed) - max_examples} more" if len(unenclosed) > max_examples else ""
    return [f"Unenclosed floors: {examples}{more} - missing perimeter walls"]


def find_out_of_bounds(layout: Layout, bounds: Bounds) -> tuple[list[tuple[int, int]], list[Edge]]:
    """Floor tiles and edges outside ``bounds``; edges count as inside when either side is."""
    if bounds is None or (isinstance(bounds, Containment) and bounds.unrestricted):
        return [], []
    tiles = [(x, y) for x, y in layout.floor_tiles() if not tile_is_inside(bounds, x, y)]
    edges = [edge for edge in layout.iter_edges() if not edge_is_inside(bounds, edge)]
    return tiles, edges


def _edge_label(edge: Edge) -> str:
    prefix = "h" if edge.orientation is Orientation.HORIZONTAL else "v"
    return f"{prefix}edge({edge.x},{edge.y})"


def check_out_of_bounds_content(layout: Layout, bounds: Bounds, max_examples: int = MAX_WARNING_EXAMPLES) -> list[str]:
    tiles, edges = find_out_of_bounds(layout, bounds)
    total = len(tiles) + len(edges)
    if not total:
        return []
    # up to two of each kind, then cut to max_examples
    examples = [f"tile({x},{y})" for x, y in tiles[:2]] + [_edge_label(edge) for edge in edges[:2]]
    example_text = ", ".join(examples[:max_examples])
    more = f" and {total - max_examples} more" if total > max_examples else ""
    return [f"Out-of-bounds content: {len(tiles)} tiles, {len(edges)} edges - {example_text}{more}"]


def evaluate_rules(
    layout: Layout,
    bounds: Bounds = None,
    switchboard: RulesSwitchboard | None = None,
) -> dict[str, list[str]]:
    """Warnings per enabled rule id, Rule A first. Disabled rules are absent."""
    switchboard = switchboard or RulesSwitchboard()
    max_examples = switchboard.max_examples
    results: dict[str, list[str]] = {}
    if switchboard.is_enabled(UNENCLOSED_FLOORS):
        results[UNENCLOSED_FLOORS] = check_unenclosed_floors(layout, max_examples)
    if switchboard.is_enabled(OOB_CONTENT):
        results[OOB_CONTENT] = check_out_of_bounds_content(layout, bounds, max_examples)
    return results


def collect_warnings(
    layout: Layout,
    bounds: Bounds = None,
    switchboard: RulesSwitchboard | None = None,
) -> list[str]:
    """Run every enabled rule and concatenate their warnings."""
    warnings = [message for messages in evaluate_rules(layout, bounds, switchboard).values() for message in messages]
    for message in warnings:
        logger.warning(f"[RULES] {message}")
    logger.debug(f"[RULES] {len(warnings)} warning(s) for {layout!r}")
    return warnings
