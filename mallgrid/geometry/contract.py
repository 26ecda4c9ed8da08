from __future__ import annotations

"""
Grid Contract

Single source of truth for schema identifiers, grid defaults and unit
conversions used throughout the editor core. All modules should import from
here instead of hardcoding.
"""

from config.scene_standards import STANDARDS

# Schema identifiers
SCENE_SCHEMA = "scene.v1"
SCENE_3D_SCHEMA = "scene.3d.v1"
SCENE_3D_VERSION = "1.0"
MALL_TEMPLATE_SCHEMA = "mall-template.v1"
UNIT_TEMPLATE_SCHEMA = "unit-template.v1"
ROOM_TEMPLATE_SCHEMA = "room-template.v1"

# Grid defaults (tiles / px)
DEFAULT_GRID_WIDTH = int(STANDARDS["GRID_WIDTH"])
DEFAULT_GRID_HEIGHT = int(STANDARDS["GRID_HEIGHT"])
DEFAULT_CELL_SIZE_PX = int(STANDARDS["DEFAULT_CELL_SIZE_PX"])

# Units
METERS_PER_PIXEL = float(STANDARDS["METERS_PER_PIXEL"])

# Legacy instance import: world position / INSTANCE_CELL_SIZE → grid cell
INSTANCE_CELL_SIZE = 2.0
INSTANCE_WALL_HEIGHT = 4.0

# Diagnostics
MAX_WARNING_EXAMPLES = 3


def cell_meters(cell_size_px: float, meters_per_pixel: float = METERS_PER_PIXEL) -> float:
    """Convert a cell size in pixels to meters."""
    return float(cell_size_px * meters_per_pixel)


def tiles_to_meters(tiles: int, cell_size_m: float) -> float:
    """Convert a tile count to meters."""
    return float(tiles * cell_size_m)
