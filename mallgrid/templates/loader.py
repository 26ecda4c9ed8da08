"""Template loading and normalization.

Raw template documents come in several historical shapes. All legacy field
names are resolved here, once, through the tables below; code past this
boundary only sees the canonical DTOs from :mod:`mallgrid.templates.nodes`.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from mallgrid.exceptions import InvalidRectError, MalformedDocumentError, UnsupportedSchemaError
from mallgrid.spatial.rect import Rect
from mallgrid.templates.nodes import (
    ChildRect,
    GridSize,
    MallNode,
    RoomNode,
    SceneNode,
    TemplateKind,
    TemplateNode,
    UnitNode,
)
from mallgrid.templates.registry import detect_schema

# Canonical field → legacy names, in lookup order. Dotted names walk nested dicts.
RECT_FIELDS: tuple[str, ...] = ("rect", "bounds", "gridRect")
GRID_SIZE_FIELDS: tuple[str, ...] = ("gridSize", "grid")
CHILDREN_FIELDS: dict[TemplateKind, tuple[str, ...]] = {
    TemplateKind.MALL: ("units",),
    TemplateKind.UNIT: ("children", "rooms"),
    TemplateKind.ROOM: ("children", "zones", "features.floorZones"),
}
PARENT_FIELDS: dict[TemplateKind, tuple[str, ...]] = {
    TemplateKind.UNIT: ("meta.parent.id", "parentMallId"),
    TemplateKind.ROOM: ("meta.parent.id", "parentUnitId", "parentGalleryId"),
}
CHILD_ID_PREFIX: dict[TemplateKind, str] = {
    TemplateKind.MALL: "unit",
    TemplateKind.UNIT: "room",
    TemplateKind.ROOM: "zone",
}
DEFAULT_IDS: dict[TemplateKind, str] = {
    TemplateKind.MALL: "mall",
    TemplateKind.UNIT: "unit",
    TemplateKind.ROOM: "room",
    TemplateKind.SCENE: "scene",
}


def _lookup(document: dict[str, Any], dotted: str) -> Any:
    current: Any = document
    for part in dotted.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _first(document: dict[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = _lookup(document, name)
        if value:
            return value
    return None


def normalize_rect(raw: Any) -> Rect | None:
    """Coerce ``{x,y,w,h}`` / ``{left,top,width,height}`` / ``{left,top,right,bottom}``.

    Returns None for anything that is not a valid rect.
    """
    if not isinstance(raw, dict):
        return None
    x = _pick(raw, "x", "left", default=0)
    y = _pick(raw, "y", "top", default=0)
    w = _pick(raw, "w", "width")
    h = _pick(raw, "h", "height")
    if w is None and _numeric(raw.get("right")) and _numeric(raw.get("left")):
        w = raw["right"] - raw["left"]
    if h is None and _numeric(raw.get("bottom")) and _numeric(raw.get("top")):
        h = raw["bottom"] - raw["top"]
    try:
        return Rect(x, y, w, h)
    except InvalidRectError as exc:
        logger.warning(f"Ignoring invalid rect {raw!r}: {exc.message}")
        return None


def _pick(raw: dict[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if raw.get(name) is not None:
            return raw[name]
    return default


def _numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _normalize_grid_size(document: dict[str, Any]) -> GridSize | None:
    for name in GRID_SIZE_FIELDS:
        raw = document.get(name)
        if isinstance(raw, dict) and _numeric(raw.get("width")) and _numeric(raw.get("height")):
            return GridSize(int(raw["width"]), int(raw["height"]))
    return None


def _normalize_children(document: dict[str, Any], kind: TemplateKind) -> tuple[ChildRect, ...]:
    raw_children = None
    for name in CHILDREN_FIELDS[kind]:
        value = _lookup(document, name)
        if isinstance(value, list):
            raw_children = value
            break
    if not raw_children:
        return ()

    children: list[ChildRect] = []
    prefix = CHILD_ID_PREFIX[kind]
    for index, child in enumerate(raw_children):
        if not isinstance(child, dict):
            continue
        rect = normalize_rect(_first(child, RECT_FIELDS))
        if rect is None:
            # excluded from containment, not fatal
            logger.debug(f"Dropping {prefix} #{index} without a valid rect")
            continue
        children.append(ChildRect(id=str(child.get("id") or f"{prefix}-{index}"), rect=rect))
    return tuple(children)


def _parent_id(document: dict[str, Any], kind: TemplateKind) -> str | None:
    value = _first(document, PARENT_FIELDS.get(kind, ()))
    return str(value) if value else None


def _normalize_mall(document: dict[str, Any]) -> MallNode:
    return MallNode(
        id=str(document.get("id") or DEFAULT_IDS[TemplateKind.MALL]),
        rect=normalize_rect(_first(document, RECT_FIELDS)),
        units=_normalize_children(document, TemplateKind.MALL),
        grid_size=_normalize_grid_size(document),
    )


def _normalize_unit(document: dict[str, Any]) -> UnitNode:
    return UnitNode(
        id=str(document.get("id") or DEFAULT_IDS[TemplateKind.UNIT]),
        rect=normalize_rect(_first(document, RECT_FIELDS)),
        children=_normalize_children(document, TemplateKind.UNIT),
        parent_id=_parent_id(document, TemplateKind.UNIT),
    )


def _normalize_room(document: dict[str, Any]) -> RoomNode:
    return RoomNode(
        id=str(document.get("id") or DEFAULT_IDS[TemplateKind.ROOM]),
        rect=normalize_rect(_first(document, RECT_FIELDS)),
        children=_normalize_children(document, TemplateKind.ROOM),
        parent_id=_parent_id(document, TemplateKind.ROOM),
    )


def _normalize_scene(document: dict[str, Any]) -> SceneNode:
    instances = document.get("instances")
    return SceneNode(
        id=str(document.get("id") or _lookup(document, "meta.name") or DEFAULT_IDS[TemplateKind.SCENE]),
        instances=tuple(instances) if isinstance(instances, list) else (),
    )


def load_template(document: Any) -> TemplateNode:
    """Detect and normalize a template document.

    Raises:
        MalformedDocumentError: If the document is not a JSON object.
        UnsupportedSchemaError: If the schema kind is not mall/unit/room/scene.
    """
    if not isinstance(document, dict):
        raise MalformedDocumentError(
            f"Template document must be a JSON object, got {type(document).__name__}"
        )

    detected = detect_schema(document)
    if detected.kind is TemplateKind.MALL:
        node: TemplateNode = _normalize_mall(document)
    elif detected.kind is TemplateKind.UNIT:
        node = _normalize_unit(document)
    elif detected.kind is TemplateKind.ROOM:
        node = _normalize_room(document)
    elif detected.kind is TemplateKind.SCENE:
        node = _normalize_scene(document)
    else:
        raise UnsupportedSchemaError(
            f"Unsupported format: {detected.schema or 'unknown'} (version: {detected.version or '-'})",
            {"schema": detected.schema, "version": detected.version},
        )

    logger.debug(f"Loaded {node.kind.value} template '{node.id}'")
    return node
