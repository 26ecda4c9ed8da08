"""scene.3d.v1 export.

Turns a layout into the canonical document read by the 3-D runtime:

1. validate coordinates (integers, non-negative)
2. dedup
3. sort (tiles and horizontal edges by y then x, vertical edges by x then y)
4. normalize to the floor-tile bounding box
5. enforce the simulation tile limits
6. parity counts and content digest

The digest covers only the sorted, normalized tile and edge lists, so two
exports of the same content compare equal even when ``created`` differs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from loguru import logger

from mallgrid.exceptions import ContentLimitError, CoordinateError, ExportError
from mallgrid.export.schema import (
    Bounds,
    Edges,
    Meta,
    OriginOffset,
    Parity,
    Scene3DDocument,
    SimLimits,
    Tiles,
    Units,
    Vec3,
)
from mallgrid.geometry.contract import (
    DEFAULT_CELL_SIZE_PX,
    MAX_WARNING_EXAMPLES,
    SCENE_3D_SCHEMA,
    SCENE_3D_VERSION,
    SCENE_SCHEMA,
    cell_meters,
    tiles_to_meters,
)
from mallgrid.grid.model import Layout
from mallgrid.settings import ExportSettings

Coord = tuple[int, int]


@dataclass(frozen=True)
class ContentBounds:
    """Floor-tile bounding box before normalization (inclusive max)."""

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0
    width_tiles: int = 0
    height_tiles: int = 0

    @property
    def empty(self) -> bool:
        return self.width_tiles == 0 and self.height_tiles == 0


@dataclass(frozen=True)
class CanonicalContent:
    tiles: tuple[Coord, ...]
    horizontal: tuple[Coord, ...]
    vertical: tuple[Coord, ...]
    bounds: ContentBounds
    parity: Parity
    digest: str
    warnings: tuple[str, ...] = field(default_factory=tuple)


def _check_coord(raw: Any, what: str, index: int, *, allow_negative: bool = False) -> Coord:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise CoordinateError(f"Malformed {what}[{index}]: {raw!r}", {"index": str(index)})
    x, y = raw
    for value in (x, y):
        # accept 3.0 but not 3.5 / "3"
        integral = isinstance(value, int) or (isinstance(value, float) and value.is_integer())
        if isinstance(value, bool) or not integral:
            raise CoordinateError(
                f"Invalid {what}[{index}]: [{x}, {y}] - coordinates must be integers",
                {"index": str(index), "value": repr(raw)},
            )
        if value < 0 and not allow_negative:
            raise CoordinateError(
                f"Invalid {what}[{index}]: [{x}, {y}] - coordinates must be non-negative",
                {"index": str(index), "value": repr(raw)},
            )
    return int(x), int(y)


def validate_coordinates(coords: Iterable[Any], what: str, *, allow_negative: bool = False) -> list[Coord]:
    """Return ``coords`` as integer tuples or raise :class:`CoordinateError`."""
    return [_check_coord(raw, what, index, allow_negative=allow_negative) for index, raw in enumerate(coords)]


def compute_bounds(tiles: Sequence[Coord]) -> ContentBounds:
    """Bounding box of floor tiles only; all-zero when there are none."""
    if not tiles:
        return ContentBounds()
    xs = [x for x, _ in tiles]
    ys = [y for _, y in tiles]
    min_x, max_x, min_y, max_y = min(xs), max(xs), min(ys), max(ys)
    return ContentBounds(min_x, min_y, max_x, max_y, max_x - min_x + 1, max_y - min_y + 1)


def js_string_hash(text: str) -> str:
    """32-bit string hash, hex encoded.

    Bit-compatible with the runtime's ``(h << 5) - h + charCode`` hash so
    both sides produce the same digest for the same content.
    """
    value = 0
    for char in text:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x").rjust(8, "0") if text else "0"


def compute_digest(tiles: Sequence[Coord], horizontal: Sequence[Coord], vertical: Sequence[Coord]) -> str:
    payload = {
        "tiles": [list(tile) for tile in tiles],
        "edges": {
            "horizontal": [list(edge) for edge in horizontal],
            "vertical": [list(edge) for edge in vertical],
        },
    }
    return js_string_hash(json.dumps(payload, separators=(",", ":")))


def compute_parity(tiles: Sequence[Coord], horizontal: Sequence[Coord], vertical: Sequence[Coord]) -> Parity:
    # every edge is one grid unit long and every tile one unit square
    return Parity(
        tiles=len(tiles),
        edgesH=len(horizontal),
        edgesV=len(vertical),
        floorArea=len(tiles),
        edgeLenH=len(horizontal),
        edgeLenV=len(vertical),
    )


def diagnose_content(
    tiles: Sequence[Coord],
    horizontal: Sequence[Coord],
    vertical: Sequence[Coord],
    *,
    max_examples: int = MAX_WARNING_EXAMPLES,
) -> list[str]:
    """Advisory checks on export content: islands and perimeter gaps.

    Results are logged as warnings and returned; they never fail an export.
    """
    floor = set(tiles)
    h_set = set(horizontal)
    v_set = set(vertical)
    warnings: list[str] = []

    islands = [
        (x, y)
        for x, y in tiles
        if not any(n in floor for n in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)))
    ]
    if islands:
        sample = ", ".join(f"({x},{y})" for x, y in islands[:max_examples])
        more = f" and {len(islands) - max_examples} more" if len(islands) > max_examples else ""
        warnings.append(f"Isolated floor tiles: {len(islands)} - {sample}{more}")

    gaps: list[str] = []
    for x, y in tiles:
        if (x, y - 1) not in floor and (x, y) not in h_set:
            gaps.append(f"top of ({x},{y})")
        if (x, y + 1) not in floor and (x, y + 1) not in h_set:
            gaps.append(f"bottom of ({x},{y})")
        if (x - 1, y) not in floor and (x, y) not in v_set:
            gaps.append(f"left of ({x},{y})")
        if (x + 1, y) not in floor and (x + 1, y) not in v_set:
            gaps.append(f"right of ({x},{y})")
    if gaps:
        more = f" and {len(gaps) - max_examples} more" if len(gaps) > max_examples else ""
        warnings.append(f"Perimeter gaps: {len(gaps)} - {', '.join(gaps[:max_examples])}{more}")

    for message in warnings:
        logger.warning(f"[EXPORT:3d] {message}")
    return warnings


def canonicalize_content(
    tiles: Iterable[Any],
    horizontal: Iterable[Any],
    vertical: Iterable[Any],
    *,
    max_tiles_x: int,
    max_tiles_y: int,
    allow_negative_edges: bool = False,
    max_examples: int = MAX_WARNING_EXAMPLES,
) -> CanonicalContent:
    """Validate, dedup, sort, normalize and fingerprint raw content.

    Raises:
        CoordinateError: A coordinate is not a non-negative integer.
        ContentLimitError: The normalized floor extent exceeds the limits.
    """
    tile_list = validate_coordinates(tiles, "tiles.floor")
    h_list = validate_coordinates(horizontal, "edges.horizontal", allow_negative=allow_negative_edges)
    v_list = validate_coordinates(vertical, "edges.vertical", allow_negative=allow_negative_edges)

    tile_list = sorted(set(tile_list), key=lambda c: (c[1], c[0]))
    h_list = sorted(set(h_list), key=lambda c: (c[1], c[0]))
    v_list = sorted(set(v_list), key=lambda c: (c[0], c[1]))

    warnings = diagnose_content(tile_list, h_list, v_list, max_examples=max_examples)

    bounds = compute_bounds(tile_list)
    if bounds.width_tiles > max_tiles_x or bounds.height_tiles > max_tiles_y:
        raise ContentLimitError(
            f"Content {bounds.width_tiles}×{bounds.height_tiles} tiles exceeds "
            f"the {max_tiles_x}×{max_tiles_y} limit",
            {
                "width_tiles": str(bounds.width_tiles),
                "height_tiles": str(bounds.height_tiles),
                "max_tiles_x": str(max_tiles_x),
                "max_tiles_y": str(max_tiles_y),
            },
        )

    dx, dy = bounds.min_x, bounds.min_y
    if dx or dy:
        # translation keeps relative order, no re-sort needed
        tile_list = [(x - dx, y - dy) for x, y in tile_list]
        h_list = [(x - dx, y - dy) for x, y in h_list]
        v_list = [(x - dx, y - dy) for x, y in v_list]
        logger.info(
            f"[EXPORT:3d] Normalized coordinates: offset=(-{dx},-{dy}), "
            f"content={bounds.width_tiles}×{bounds.height_tiles}"
        )

    parity = compute_parity(tile_list, h_list, v_list)
    digest = compute_digest(tile_list, h_list, v_list)
    return CanonicalContent(
        tiles=tuple(tile_list),
        horizontal=tuple(h_list),
        vertical=tuple(v_list),
        bounds=bounds,
        parity=parity,
        digest=digest,
        warnings=tuple(warnings),
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _scene_bounds(content: CanonicalContent, units: Units) -> Bounds:
    width_m = tiles_to_meters(content.bounds.width_tiles, units.cellMeters)
    depth_m = tiles_to_meters(content.bounds.height_tiles, units.cellMeters)
    height_m = units.wallHeightMeters if not content.bounds.empty else 0.0
    return Bounds(
        min=Vec3(x=0.0, y=0.0, z=0.0),
        max=Vec3(x=width_m, y=height_m, z=depth_m),
        center=Vec3(x=width_m / 2, y=height_m / 2, z=depth_m / 2),
    )


def _assemble(
    content: CanonicalContent,
    *,
    units: Units,
    name: str,
    created: str | None,
    axes: str,
    offset_format: str,
    sim_limits: SimLimits,
    origin_offset: OriginOffset,
    source_schema: str = SCENE_SCHEMA,
) -> Scene3DDocument:
    meta = Meta(
        schema=SCENE_3D_SCHEMA,
        version=SCENE_3D_VERSION,
        sourceSchema=source_schema,
        created=created or _now(),
        name=name,
        axes=axes,
        parity=content.parity,
        offsetFormat=offset_format,
        simLimits=sim_limits,
        digest=content.digest,
    )
    return Scene3DDocument(
        meta=meta,
        units=units,
        bounds=_scene_bounds(content, units),
        tiles=Tiles(floor=content.tiles),
        edges=Edges(horizontal=content.horizontal, vertical=content.vertical),
        originOffset=origin_offset,
    )


def build_scene3d(
    layout: Layout,
    *,
    cell_size: float = DEFAULT_CELL_SIZE_PX,
    name: str = "scene",
    settings: ExportSettings | None = None,
    created: str | None = None,
    max_examples: int = MAX_WARNING_EXAMPLES,
) -> Scene3DDocument:
    """Build the canonical scene.3d.v1 document for ``layout``.

    The layout is only read. ``created`` can be pinned for reproducible
    output; everything else is a pure function of layout content, cell
    size and export settings.

    Raises:
        ExportError: ``cell_size`` converts to a non-positive cell length.
        CoordinateError: Invalid tile or edge coordinates.
        ContentLimitError: Normalized content exceeds the tile limits.
    """
    settings = settings or ExportSettings()
    cell_m = cell_meters(cell_size, settings.meters_per_pixel)
    if cell_m <= 0:
        raise ExportError(f"Cell size must be positive, got {cell_size}px", {"cell_size": str(cell_size)})

    logger.info(f"[EXPORT:3d] Building {SCENE_3D_SCHEMA} '{name}' from {layout!r}")
    content = canonicalize_content(
        layout.floor_tiles(),
        layout.horizontal_edge_coords(),
        layout.vertical_edge_coords(),
        max_tiles_x=settings.max_tiles_x,
        max_tiles_y=settings.max_tiles_y,
        max_examples=max_examples,
    )

    units = Units(
        cellMeters=cell_m,
        wallHeightMeters=settings.wall_height_m,
        wallThicknessMeters=settings.wall_thickness_m,
        floorThicknessMeters=settings.floor_thickness_m,
        lengthUnit=settings.length_unit,
        coordinateSystem=settings.coordinate_system,
    )
    document = _assemble(
        content,
        units=units,
        name=name,
        created=created,
        axes=settings.axes,
        offset_format=settings.offset_format,
        sim_limits=SimLimits(maxTilesX=settings.max_tiles_x, maxTilesY=settings.max_tiles_y),
        origin_offset=OriginOffset(x=content.bounds.min_x, y=content.bounds.min_y),
    )
    parity = content.parity
    logger.info(
        f"[EXPORT:3d] Parity: tiles={parity.tiles}, edgesH={parity.edgesH}, "
        f"edgesV={parity.edgesV}, digest={content.digest}"
    )
    return document


def canonicalize_document(
    document: Scene3DDocument,
    settings: ExportSettings | None = None,
    *,
    max_examples: int = MAX_WARNING_EXAMPLES,
) -> Scene3DDocument:
    """Re-run validation, dedup, sort and normalization over a document's content.

    Units, name and ``created`` are kept. Any further translation is added
    to ``originOffset`` so it still points at the source grid position.
    Canonical input comes back unchanged.
    """
    settings = settings or ExportSettings()
    limits = document.meta.simLimits or SimLimits(maxTilesX=settings.max_tiles_x, maxTilesY=settings.max_tiles_y)
    content = canonicalize_content(
        document.tiles.floor,
        document.edges.horizontal,
        document.edges.vertical,
        max_tiles_x=limits.maxTilesX,
        max_tiles_y=limits.maxTilesY,
        allow_negative_edges=True,
        max_examples=max_examples,
    )
    offset = OriginOffset(
        x=document.originOffset.x + content.bounds.min_x,
        y=document.originOffset.y + content.bounds.min_y,
    )
    return _assemble(
        content,
        units=document.units,
        name=document.meta.name,
        created=document.meta.created,
        axes=document.meta.axes,
        offset_format=document.meta.offsetFormat,
        sim_limits=limits,
        origin_offset=offset,
        source_schema=document.meta.sourceSchema,
    )


def document_to_json(document: Scene3DDocument, *, indent: int | None = 2) -> str:
    return json.dumps(document.to_json_dict(), indent=indent, ensure_ascii=False)
