"""Tile/edge grid model.

The layout is the authoritative editable state: a ``height × width`` tile
array plus two boolean edge arrays. Horizontal edges have one extra row,
vertical edges one extra column, so every tile has all four sides
addressable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator

import numpy as np

from mallgrid.exceptions import CoordinateError


class TileKind(IntEnum):
    EMPTY = 0
    FLOOR = 1
    WALL = 2  # legacy/derived only, never written by the editing surface

    @classmethod
    def parse(cls, value: "str | int | TileKind") -> "TileKind":
        if isinstance(value, TileKind):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError as exc:
                raise ValueError(f"Unknown tile kind: {value!r}") from exc
        return cls(int(value))


class Orientation(str, Enum):
    HORIZONTAL = "H"
    VERTICAL = "V"


@dataclass(frozen=True)
class Edge:
    """Unit wall segment.

    ``H(x, y)`` sits between tile rows ``y-1`` and ``y`` at column ``x``;
    ``V(x, y)`` sits between tile columns ``x-1`` and ``x`` at row ``y``.
    """

    orientation: Orientation
    x: int
    y: int

    @classmethod
    def h(cls, x: int, y: int) -> "Edge":
        return cls(Orientation.HORIZONTAL, x, y)

    @classmethod
    def v(cls, x: int, y: int) -> "Edge":
        return cls(Orientation.VERTICAL, x, y)

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.orientation.value, self.x, self.y)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        # H before V, then row-major
        return (0 if self.orientation is Orientation.HORIZONTAL else 1, self.y, self.x)

    def adjacent_tiles(self) -> tuple[tuple[int, int], tuple[int, int]]:
        """The two tile positions this edge separates (either may be off-grid)."""
        if self.orientation is Orientation.HORIZONTAL:
            return (self.x, self.y - 1), (self.x, self.y)
        return (self.x - 1, self.y), (self.x, self.y)

    def __str__(self) -> str:
        return f"{self.orientation.value}({self.x},{self.y})"


class Layout:
    """Floor layout with tile and edge arrays.

    Every mutation goes through :meth:`set_tile` / :meth:`set_edge`, which
    reject out-of-range indices before touching the arrays.
    """

    def __init__(self, width: int, height: int) -> None:
        if not isinstance(width, (int, np.integer)) or not isinstance(height, (int, np.integer)):
            raise CoordinateError(f"Layout size must be integral, got {width}×{height}")
        if width < 0 or height < 0:
            raise CoordinateError(f"Layout size must be non-negative, got {width}×{height}")
        self.width = int(width)
        self.height = int(height)
        self.tiles = np.zeros((self.height, self.width), dtype=np.int8)
        self.horizontal_edges = np.zeros((self.height + 1, self.width), dtype=bool)
        self.vertical_edges = np.zeros((self.height, self.width + 1), dtype=bool)

    @classmethod
    def from_arrays(
        cls,
        tiles: np.ndarray,
        horizontal_edges: np.ndarray | None = None,
        vertical_edges: np.ndarray | None = None,
    ) -> "Layout":
        tiles = np.asarray(tiles)
        if tiles.ndim != 2:
            raise CoordinateError(f"Tile array must be 2-D, got shape {tiles.shape}")
        height, width = tiles.shape
        layout = cls(width, height)
        layout.tiles[:, :] = tiles.astype(np.int8)
        if horizontal_edges is not None:
            horizontal_edges = np.asarray(horizontal_edges, dtype=bool)
            if horizontal_edges.shape != layout.horizontal_edges.shape:
                raise CoordinateError(
                    f"Horizontal edges must have shape {layout.horizontal_edges.shape}, "
                    f"got {horizontal_edges.shape}"
                )
            layout.horizontal_edges[:, :] = horizontal_edges
        if vertical_edges is not None:
            vertical_edges = np.asarray(vertical_edges, dtype=bool)
            if vertical_edges.shape != layout.vertical_edges.shape:
                raise CoordinateError(
                    f"Vertical edges must have shape {layout.vertical_edges.shape}, "
                    f"got {vertical_edges.shape}"
                )
            layout.vertical_edges[:, :] = vertical_edges
        return layout

    @classmethod
    def from_rows(cls, rows: Iterable[str], *, floor: str = "#", wall: str = "W") -> "Layout":
        """Build a layout from ASCII rows, e.g. ``["..#", ".##"]``."""
        lines = [row for row in rows]
        width = len(lines[0]) if lines else 0
        layout = cls(width, len(lines))
        for y, row in enumerate(lines):
            if len(row) != width:
                raise CoordinateError(f"Row {y} has length {len(row)}, expected {width}")
            for x, char in enumerate(row):
                if char == floor:
                    layout.tiles[y, x] = TileKind.FLOOR
                elif char == wall:
                    layout.tiles[y, x] = TileKind.WALL
        return layout

    def copy(self) -> "Layout":
        return Layout.from_arrays(self.tiles.copy(), self.horizontal_edges.copy(), self.vertical_edges.copy())

    # -- tiles -------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile(self, x: int, y: int) -> TileKind:
        """Tile kind at (x, y); positions outside the grid read as EMPTY."""
        if not self.in_bounds(x, y):
            return TileKind.EMPTY
        return TileKind(int(self.tiles[y, x]))

    def set_tile(self, x: int, y: int, kind: "TileKind | str") -> None:
        if not self.in_bounds(x, y):
            raise CoordinateError(
                f"Tile ({x},{y}) outside {self.width}×{self.height} grid",
                {"x": str(x), "y": str(y)},
            )
        self.tiles[y, x] = TileKind.parse(kind)

    def positions(self, kind: TileKind) -> list[tuple[int, int]]:
        """(x, y) positions of all tiles of ``kind`` in row-major order."""
        return [(int(x), int(y)) for y, x in np.argwhere(self.tiles == kind)]

    def floor_tiles(self) -> list[tuple[int, int]]:
        return self.positions(TileKind.FLOOR)

    def mask(self, kind: TileKind) -> np.ndarray:
        return self.tiles == kind

    # -- edges -------------------------------------------------------------

    def _edge_array(self, orientation: Orientation) -> np.ndarray:
        if orientation is Orientation.HORIZONTAL:
            return self.horizontal_edges
        return self.vertical_edges

    def edge_in_bounds(self, edge: Edge) -> bool:
        rows, cols = self._edge_array(edge.orientation).shape
        return 0 <= edge.x < cols and 0 <= edge.y < rows

    def has_edge(self, edge: Edge) -> bool:
        if not self.edge_in_bounds(edge):
            return False
        return bool(self._edge_array(edge.orientation)[edge.y, edge.x])

    def set_edge(self, edge: Edge, present: bool = True) -> None:
        if not self.edge_in_bounds(edge):
            raise CoordinateError(
                f"Edge {edge} outside {self.width}×{self.height} grid",
                {"edge": str(edge)},
            )
        self._edge_array(edge.orientation)[edge.y, edge.x] = present

    def add_edges(self, edges: Iterable[Edge]) -> None:
        for edge in edges:
            self.set_edge(edge, True)

    def horizontal_edge_coords(self) -> list[tuple[int, int]]:
        return [(int(x), int(y)) for y, x in np.argwhere(self.horizontal_edges)]

    def vertical_edge_coords(self) -> list[tuple[int, int]]:
        return [(int(x), int(y)) for y, x in np.argwhere(self.vertical_edges)]

    def iter_edges(self) -> Iterator[Edge]:
        for x, y in self.horizontal_edge_coords():
            yield Edge.h(x, y)
        for x, y in self.vertical_edge_coords():
            yield Edge.v(x, y)

    def edges(self) -> list[Edge]:
        return list(self.iter_edges())

    def __repr__(self) -> str:
        return (
            f"Layout({self.width}×{self.height}, floors={int(self.mask(TileKind.FLOOR).sum())}, "
            f"edgesH={int(self.horizontal_edges.sum())}, edgesV={int(self.vertical_edges.sum())})"
        )
