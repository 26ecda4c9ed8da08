"""Conversion between ``Layout`` and the scene.v1 / legacy instance documents."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np
from loguru import logger

from mallgrid.exceptions import CoordinateError, MalformedDocumentError
from mallgrid.geometry.contract import (
    DEFAULT_CELL_SIZE_PX,
    DEFAULT_GRID_HEIGHT,
    DEFAULT_GRID_WIDTH,
    INSTANCE_CELL_SIZE,
    INSTANCE_WALL_HEIGHT,
)
from mallgrid.grid.edges import rasterize_layout, reconstruct_edges_from_walls
from mallgrid.grid.model import Edge, Layout, TileKind
from mallgrid.templates.builders import build_scene_v1

FLOOR_INSTANCE = "lobbyFloor"
WALL_INSTANCE = "lobbyWall"
WALL_INSTANCE_TYPES = frozenset(
    {"lobbyWall", "lobbyNorthWall", "lobbySouthWall", "lobbyEastWall", "lobbyWestWall"}
)


@dataclass
class LoadedScene:
    layout: Layout
    cell_size: int
    name: str = "scene"


def _as_coord(raw: Any, what: str) -> tuple[int, int]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise CoordinateError(f"Malformed {what} coordinate: {raw!r}", {"value": repr(raw)})
    x, y = raw
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not float(value).is_integer():
            raise CoordinateError(f"Non-integer {what} coordinate: [{x}, {y}]", {"value": repr(raw)})
    return int(x), int(y)


def _section(document: dict[str, Any], name: str) -> dict[str, Any]:
    value = document.get(name, {})
    if not isinstance(value, dict):
        raise MalformedDocumentError(f"Scene '{name}' must be an object")
    return value


def _coords(section: dict[str, Any], key: str, what: str) -> list[tuple[int, int]]:
    raw = section.get(key, [])
    if not isinstance(raw, list):
        raise MalformedDocumentError(f"Scene {what} list must be an array")
    return [_as_coord(item, what) for item in raw]


def layout_from_scene(document: dict[str, Any]) -> LoadedScene:
    """Build a layout from a scene.v1 document.

    Raises:
        MalformedDocumentError: Missing or malformed ``grid``/``tiles``/``edges``.
        CoordinateError: Non-integer or out-of-grid coordinates.
    """
    if not isinstance(document, dict):
        raise MalformedDocumentError("Scene document must be a JSON object")
    grid = document.get("grid")
    if not isinstance(grid, dict):
        raise MalformedDocumentError("Scene document is missing the 'grid' object")
    try:
        width = int(grid["width"])
        height = int(grid["height"])
        cell_size = int(grid.get("cellSize") or DEFAULT_CELL_SIZE_PX)
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        raise MalformedDocumentError(f"Scene grid needs integer width/height/cellSize: {grid!r}") from exc

    layout = Layout(width, height)
    for x, y in _coords(_section(document, "tiles"), "floor", "tile"):
        layout.set_tile(x, y, TileKind.FLOOR)

    edges = _section(document, "edges")
    for x, y in _coords(edges, "horizontal", "horizontal edge"):
        layout.set_edge(Edge.h(x, y))
    for x, y in _coords(edges, "vertical", "vertical edge"):
        layout.set_edge(Edge.v(x, y))

    meta = document.get("meta") if isinstance(document.get("meta"), dict) else {}
    name = str(meta.get("name") or document.get("id") or "scene")
    logger.debug(f"Loaded scene '{name}' as {layout!r}")
    return LoadedScene(layout=layout, cell_size=cell_size, name=name)


def layout_to_scene(layout: Layout, *, cell_size: int = DEFAULT_CELL_SIZE_PX, created: str | None = None) -> dict[str, Any]:
    return build_scene_v1(
        grid_width=layout.width,
        grid_height=layout.height,
        cell_size=cell_size,
        floor_tiles=layout.floor_tiles(),
        horizontal_edges=layout.horizontal_edge_coords(),
        vertical_edges=layout.vertical_edge_coords(),
        created=created,
    )


def _grid_position(instance: dict[str, Any], cell: float) -> tuple[int, int] | None:
    position = instance.get("position")
    if not isinstance(position, (list, tuple)) or len(position) < 3:
        return None
    world_x, _, world_z = position[:3]
    for value in (world_x, world_z):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
    return math.floor(world_x / cell), math.floor(world_z / cell)


def is_wall_instance(instance_type: str) -> bool:
    return instance_type in WALL_INSTANCE_TYPES


def layout_from_instances(
    instances: Iterable[dict[str, Any]],
    *,
    width: int = DEFAULT_GRID_WIDTH,
    height: int = DEFAULT_GRID_HEIGHT,
    cell: float = INSTANCE_CELL_SIZE,
) -> Layout:
    """Import a legacy instance list (best effort).

    Floor instances become floor tiles. Wall instances are not kept as tiles;
    their positions feed :func:`reconstruct_edges_from_walls`, so the
    resulting edges only approximate the source walls. Instances outside
    the ``width × height`` grid or without a finite numeric position are
    skipped.
    """
    layout = Layout(width, height)
    walls = np.zeros((height, width), dtype=bool)
    skipped = 0
    malformed = 0

    for instance in instances:
        if not isinstance(instance, dict) or not instance.get("type"):
            continue
        pos = _grid_position(instance, cell)
        if pos is None:
            malformed += 1
            continue
        x, y = pos
        if not layout.in_bounds(x, y):
            skipped += 1
            continue
        if instance["type"] == FLOOR_INSTANCE:
            layout.set_tile(x, y, TileKind.FLOOR)
        elif is_wall_instance(instance["type"]):
            walls[y, x] = True

    horizontal, vertical = reconstruct_edges_from_walls(walls)
    layout.horizontal_edges[:, :] = horizontal
    layout.vertical_edges[:, :] = vertical

    if skipped:
        logger.warning(f"Skipped {skipped} instance(s) outside the {width}×{height} grid")
    if malformed:
        logger.warning(f"Skipped {malformed} instance(s) without a numeric position")
    return layout


def layout_to_instances(
    layout: Layout,
    *,
    cell: float = INSTANCE_CELL_SIZE,
    floor_height: float = 0.0,
    wall_height: float = INSTANCE_WALL_HEIGHT,
    include_reference_pole: bool = True,
) -> list[dict[str, Any]]:
    """Export floors plus rasterized edge walls as a legacy instance list."""
    instances: list[dict[str, Any]] = []
    if include_reference_pole:
        instances.append({"type": "referencePole", "position": [0, 0.5, 0]})

    wall_tiles = rasterize_layout(layout)
    for y in range(layout.height):
        for x in range(layout.width):
            world_x, world_z = x * cell, y * cell
            if layout.tile(x, y) is TileKind.FLOOR:
                instances.append(
                    {
                        "type": FLOOR_INSTANCE,
                        "position": [world_x, floor_height, world_z],
                        "rotation": [-math.pi / 2, 0, 0],
                    }
                )
            elif wall_tiles[y, x]:
                instances.append(
                    {
                        "type": WALL_INSTANCE,
                        "position": [world_x, wall_height, world_z],
                        "rotation": [0, 0, 0],
                    }
                )
    return instances
