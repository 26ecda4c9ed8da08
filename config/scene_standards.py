"""Scene Export Standard Values

This module contains the standard values attached to every scene.3d.v1 export.
All lengths are in meters unless otherwise specified.
"""

STANDARDS = {
    # --- EINHEITEN ---
    "METERS_PER_PIXEL": 0.05,  # worldUnit = cellSize × 0.05
    "DEFAULT_CELL_SIZE_PX": 20,  # 20 px → 1 m Zelle
    "LENGTH_UNIT": "meters",

    # --- WÄNDE ---
    "WALL_HEIGHT": 3.0,  # in Meter
    "WALL_THICKNESS": 0.2,  # in Meter

    # --- BÖDEN ---
    "FLOOR_THICKNESS": 0.1,  # in Meter

    # --- KOORDINATEN ---
    "AXES": "Y_up_XZ_ground",
    "COORDINATE_SYSTEM": "right-handed-y-up",
    "OFFSET_FORMAT": "xy_standard",

    # --- SIMULATIONSGRENZEN ---
    "SIM_MAX_TILES_X": 60,
    "SIM_MAX_TILES_Y": 40,

    # --- EDITOR-RASTER ---
    "GRID_WIDTH": 60,
    "GRID_HEIGHT": 40,
}
