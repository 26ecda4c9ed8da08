"""Template and scene document builders.

Pure functions producing the JSON documents the editor saves. Timestamps
default to "now" but can be pinned for reproducible output.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from mallgrid.geometry.contract import (
    MALL_TEMPLATE_SCHEMA,
    ROOM_TEMPLATE_SCHEMA,
    SCENE_SCHEMA,
    UNIT_TEMPLATE_SCHEMA,
)
from mallgrid.spatial.rect import Rect


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _rect_dict(rect: Rect | dict[str, Any]) -> dict[str, Any]:
    if isinstance(rect, Rect):
        return rect.to_dict()
    return dict(rect)


def build_mall_template(
    *,
    grid_width: int,
    grid_height: int,
    cell_size: int,
    units: Iterable[dict[str, Any]],
    mall_id: str | None = None,
    created: str | None = None,
) -> dict[str, Any]:
    created = created or _now()
    if not mall_id:
        stamp = created.replace("-", "").replace(":", "")[:15]
        mall_id = f"mall-{stamp}"
    return {
        "meta": {
            "schema": MALL_TEMPLATE_SCHEMA,
            "version": "1.0",
            "name": "Generated Mall Template",
        },
        "id": mall_id,
        "grid": {"width": grid_width, "height": grid_height, "cellSize": cell_size},
        "units": [{"id": unit["id"], "rect": _rect_dict(unit["rect"])} for unit in units],
        "created": created,
    }


def build_unit_template(
    *,
    unit_id: str,
    rect: Rect | dict[str, Any],
    rooms: Iterable[dict[str, Any]] = (),
    parent_mall_id: str | None = None,
    created: str | None = None,
) -> dict[str, Any]:
    template: dict[str, Any] = {
        "meta": {
            "schema": UNIT_TEMPLATE_SCHEMA,
            "version": "1.0",
            "name": f"Unit Template {unit_id}",
        },
        "id": unit_id,
        "rect": _rect_dict(rect),
        "rooms": [{"id": room["id"], "gridRect": _rect_dict(room["gridRect"])} for room in rooms],
        "created": created or _now(),
    }
    if parent_mall_id:
        template["meta"]["parent"] = {"schema": MALL_TEMPLATE_SCHEMA, "id": parent_mall_id}
    return template


def build_room_template(
    *,
    room_id: str,
    rect: Rect | dict[str, Any],
    zones: Iterable[dict[str, Any]] = (),
    parent_unit_id: str | None = None,
    created: str | None = None,
) -> dict[str, Any]:
    template: dict[str, Any] = {
        "meta": {"schema": ROOM_TEMPLATE_SCHEMA, "version": "1.0"},
        "id": room_id,
        "rect": _rect_dict(rect),
        "zones": [dict(zone) for zone in zones],
        "created": created or _now(),
    }
    if parent_unit_id:
        template["meta"]["parent"] = {"schema": UNIT_TEMPLATE_SCHEMA, "id": parent_unit_id}
    return template


def build_scene_v1(
    *,
    grid_width: int,
    grid_height: int,
    cell_size: int,
    floor_tiles: Sequence[Sequence[int]],
    horizontal_edges: Sequence[Sequence[int]],
    vertical_edges: Sequence[Sequence[int]],
    created: str | None = None,
) -> dict[str, Any]:
    now = created or _now()
    return {
        "meta": {"schema": SCENE_SCHEMA, "version": "1.0", "created": now, "modified": now},
        "grid": {"width": grid_width, "height": grid_height, "cellSize": cell_size},
        "tiles": {"floor": [list(tile) for tile in floor_tiles]},
        "edges": {
            "horizontal": [list(edge) for edge in horizontal_edges],
            "vertical": [list(edge) for edge in vertical_edges],
        },
    }
