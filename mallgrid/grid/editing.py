"""Containment-gated edits on a layout.

These are the only operations that mutate a caller's ``Layout``. Each checks
the active containment before writing and reports whether the edit was
applied. Callers serialize their own edits; nothing here locks.
"""

from __future__ import annotations

from collections import deque

from loguru import logger

from mallgrid.exceptions import ContractViolationError
from mallgrid.grid.model import Edge, Layout, TileKind
from mallgrid.spatial.bounds import Containment, edge_is_inside, tile_is_inside

PAINTABLE_TILES = (TileKind.EMPTY, TileKind.FLOOR)


def _paintable(kind: TileKind | str) -> TileKind:
    kind = TileKind.parse(kind)
    if kind not in PAINTABLE_TILES:
        raise ContractViolationError(
            f"Cannot paint {kind.name} tiles; walls are edges",
            {"kind": kind.name},
        )
    return kind


def paint_tile(layout: Layout, x: int, y: int, kind: TileKind | str, bounds: Containment | None = None) -> bool:
    """Set one tile if (x, y) is on the grid and inside ``bounds``.

    Returns True when the tile changed.
    """
    kind = _paintable(kind)
    if not layout.in_bounds(x, y):
        return False
    if not tile_is_inside(bounds, x, y):
        logger.debug(f"Tile edit at ({x},{y}) blocked by {bounds.source if bounds else 'bounds'}")
        return False
    if layout.tile(x, y) is kind:
        return False
    layout.set_tile(x, y, kind)
    return True


def paint_edge(layout: Layout, edge: Edge, present: bool = True, bounds: Containment | None = None) -> bool:
    """Add or erase one edge; allowed when either adjacent tile is inside ``bounds``."""
    if not layout.edge_in_bounds(edge):
        return False
    if not edge_is_inside(bounds, edge):
        logger.debug(f"Edge edit {edge} blocked by {bounds.source if bounds else 'bounds'}")
        return False
    if layout.has_edge(edge) == present:
        return False
    layout.set_edge(edge, present)
    return True


def flood_fill(layout: Layout, x: int, y: int, kind: TileKind | str, bounds: Containment | None = None) -> int:
    """4-connected fill from (x, y) over tiles of the start tile's kind.

    Tiles outside ``bounds`` stop the fill. Returns the number of tiles changed.
    """
    kind = _paintable(kind)
    if not layout.in_bounds(x, y) or not tile_is_inside(bounds, x, y):
        return 0
    target = layout.tile(x, y)
    if target is kind:
        return 0

    changed = 0
    queue = deque([(x, y)])
    seen = {(x, y)}
    while queue:
        cx, cy = queue.popleft()
        layout.set_tile(cx, cy, kind)
        changed += 1
        for nx, ny in ((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1)):
            if (nx, ny) in seen or not layout.in_bounds(nx, ny):
                continue
            if layout.tile(nx, ny) is not target or not tile_is_inside(bounds, nx, ny):
                continue
            seen.add((nx, ny))
            queue.append((nx, ny))
    return changed


def count_tiles(layout: Layout) -> dict[str, int]:
    return {kind.name.lower(): int(layout.mask(kind).sum()) for kind in TileKind}
