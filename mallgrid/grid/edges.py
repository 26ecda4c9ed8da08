"""Wall edge extraction and rasterization.

``extract_edges`` derives the minimal wall edge set from tile adjacency.
``rasterize_edges`` projects edges back onto wall tiles for consumers that
only understand solid wall tiles. The projection is one-sided (an edge marks
the tile above/left of it) and is not an inverse of extraction.
``reconstruct_edges_from_walls`` is the best-effort legacy import path for
wall-tile-only documents.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

import numpy as np
from loguru import logger

from mallgrid.grid.model import Edge, Layout, Orientation, TileKind


class SolidRule(str, Enum):
    """Which tile kind counts as solid when extracting edges."""

    WALL = "wall"  # canonical: runtime loader emits edges around wall tiles
    FLOOR = "floor"  # compatibility: editor grids that only hold floor tiles


def sort_edges(edges: Iterable[Edge]) -> list[Edge]:
    """Horizontal before vertical, then ``(y, x)`` ascending."""
    return sorted(edges, key=lambda edge: edge.sort_key)


def _solid_mask(layout: Layout, solid: SolidRule) -> np.ndarray:
    kind = TileKind.WALL if solid is SolidRule.WALL else TileKind.FLOOR
    return layout.mask(kind)


def edges_from_mask(mask: np.ndarray) -> list[Edge]:
    """Edges around every True cell whose neighbor is False or off-grid."""
    mask = np.asarray(mask, dtype=bool)
    if mask.size == 0:
        return []
    height, width = mask.shape
    edge_set: set[Edge] = set()

    for y, x in np.argwhere(mask):
        x, y = int(x), int(y)
        if y == 0 or not mask[y - 1, x]:
            edge_set.add(Edge.h(x, y))
        if y == height - 1 or not mask[y + 1, x]:
            edge_set.add(Edge.h(x, y + 1))
        if x == 0 or not mask[y, x - 1]:
            edge_set.add(Edge.v(x, y))
        if x == width - 1 or not mask[y, x + 1]:
            edge_set.add(Edge.v(x + 1, y))

    return sort_edges(edge_set)


def extract_edges(layout: Layout, solid: SolidRule = SolidRule.WALL) -> list[Edge]:
    """Extract the wall edges of a tile layout.

    An edge is emitted on every side of a solid tile that borders a
    non-solid tile or the grid boundary. The result is deduplicated and
    sorted so identical input always yields the identical list.
    """
    edges = edges_from_mask(_solid_mask(layout, solid))
    logger.debug(f"Extracted {len(edges)} edges from {layout!r} (solid={solid.value})")
    return edges


def split_edges(edges: Iterable[Edge]) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
    """Split an edge list into ``(horizontal, vertical)`` coordinate lists."""
    horizontal: list[tuple[int, int]] = []
    vertical: list[tuple[int, int]] = []
    for edge in edges:
        target = horizontal if edge.orientation is Orientation.HORIZONTAL else vertical
        target.append((edge.x, edge.y))
    return horizontal, vertical


def rasterize_edges(
    horizontal: np.ndarray | Iterable[tuple[int, int]],
    vertical: np.ndarray | Iterable[tuple[int, int]],
    width: int,
    height: int,
) -> np.ndarray:
    """Mark wall tiles implied by an edge set.

    ``H(x, y)`` marks tile ``(x, y-1)`` and ``V(x, y)`` marks tile
    ``(x-1, y)``. Edges whose implied tile falls outside the grid are
    dropped, so edges on the top/left grid boundary leave no trace.

    Both edge arguments accept either boolean arrays (layout shape) or
    iterables of ``(x, y)`` coordinates.
    """
    walls = np.zeros((height, width), dtype=bool)

    for x, y in _coords(horizontal):
        tx, ty = x, y - 1
        if 0 <= ty < height and 0 <= tx < width:
            walls[ty, tx] = True

    for x, y in _coords(vertical):
        tx, ty = x - 1, y
        if 0 <= tx < width and 0 <= ty < height:
            walls[ty, tx] = True

    return walls


def rasterize_layout(layout: Layout) -> np.ndarray:
    return rasterize_edges(layout.horizontal_edges, layout.vertical_edges, layout.width, layout.height)


def reconstruct_edges_from_walls(wall_mask: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Heuristically rebuild edge arrays from legacy wall tiles.

    Every wall tile gets an edge on each side whose neighbor is not also a
    wall tile (or lies outside the grid). Thick walls therefore produce two
    parallel edge lines and runs of wall tiles lose their interior; this is
    an approximation and the result should be reviewed by the user.
    """
    wall_mask = np.asarray(wall_mask, dtype=bool)
    height, width = wall_mask.shape if wall_mask.ndim == 2 else (0, 0)
    horizontal = np.zeros((height + 1, width), dtype=bool)
    vertical = np.zeros((height, width + 1), dtype=bool)

    for edge in edges_from_mask(wall_mask):
        target = horizontal if edge.orientation is Orientation.HORIZONTAL else vertical
        target[edge.y, edge.x] = True

    logger.info(
        f"Reconstructed {int(horizontal.sum())} horizontal / {int(vertical.sum())} vertical edges "
        f"from {int(wall_mask.sum())} wall tiles (heuristic)"
    )
    return horizontal, vertical


def _coords(source: np.ndarray | Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    if isinstance(source, np.ndarray):
        return [(int(x), int(y)) for y, x in np.argwhere(source)]
    return [(int(x), int(y)) for x, y in source]
