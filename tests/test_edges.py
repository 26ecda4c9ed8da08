from __future__ import annotations

import numpy as np
import pytest

from mallgrid.exceptions import CoordinateError
from mallgrid.grid.edges import (
    SolidRule,
    extract_edges,
    rasterize_edges,
    rasterize_layout,
    reconstruct_edges_from_walls,
    split_edges,
)
from mallgrid.grid.model import Edge, Layout, TileKind


def test_single_wall_tile_gets_four_edges(single_wall: Layout) -> None:
    edges = extract_edges(single_wall)
    assert edges == [Edge.h(1, 1), Edge.h(1, 2), Edge.v(1, 1), Edge.v(2, 1)]
    assert [str(edge) for edge in edges] == ["H(1,1)", "H(1,2)", "V(1,1)", "V(2,1)"]


def test_floor_rule_matches_wall_rule_for_same_mask() -> None:
    layout = Layout.from_rows(["...", ".#.", "..."])
    assert extract_edges(layout, SolidRule.FLOOR) == [Edge.h(1, 1), Edge.h(1, 2), Edge.v(1, 1), Edge.v(2, 1)]
    # no wall tiles, so the canonical rule finds nothing
    assert extract_edges(layout) == []


def test_l_shape_outer_boundary(l_shape: Layout) -> None:
    horizontal, vertical = split_edges(extract_edges(l_shape, SolidRule.FLOOR))
    assert len(l_shape.floor_tiles()) == 5
    assert horizontal == [(0, 0), (1, 0), (2, 0), (1, 1), (2, 1), (0, 3)]
    assert vertical == [(0, 0), (3, 0), (0, 1), (1, 1), (0, 2), (1, 2)]


def test_l_shape_every_tile_walled(walled_l_shape: Layout) -> None:
    assert len(walled_l_shape.horizontal_edge_coords()) == 8
    assert len(walled_l_shape.vertical_edge_coords()) == 8


def test_edges_on_grid_boundary() -> None:
    layout = Layout.from_rows(["W"])
    assert extract_edges(layout) == [Edge.h(0, 0), Edge.h(0, 1), Edge.v(0, 0), Edge.v(1, 0)]


def test_extract_empty_grid() -> None:
    assert extract_edges(Layout(0, 0)) == []
    assert extract_edges(Layout(4, 3)) == []


def test_extract_is_deterministic() -> None:
    layout = Layout.from_rows(["WW.", "W.W", ".WW"])
    first = extract_edges(layout)
    assert first == extract_edges(layout.copy())
    assert first == sorted(set(first), key=lambda edge: edge.sort_key)


def test_extract_does_not_mutate_layout(single_wall: Layout) -> None:
    before = single_wall.copy()
    extract_edges(single_wall)
    assert np.array_equal(before.tiles, single_wall.tiles)
    assert not single_wall.horizontal_edges.any()


def test_rasterize_marks_tile_above_and_left() -> None:
    walls = rasterize_edges([(1, 1)], [(2, 0)], width=3, height=2)
    assert walls[0, 1]  # H(1,1) -> tile (1,0)
    assert walls.sum() == 1  # V(2,0) -> tile (1,0) as well


def test_rasterize_drops_top_and_left_boundary() -> None:
    walls = rasterize_edges([(0, 0), (1, 0)], [(0, 0), (0, 1)], width=2, height=2)
    assert not walls.any()


def test_rasterize_accepts_arrays() -> None:
    layout = Layout(2, 2)
    layout.set_edge(Edge.h(1, 2))
    layout.set_edge(Edge.v(1, 0))
    walls = rasterize_layout(layout)
    assert walls.tolist() == [[True, False], [False, True]]


def test_round_trip_is_not_identity(single_wall: Layout) -> None:
    horizontal, vertical = split_edges(extract_edges(single_wall))
    walls = rasterize_edges(horizontal, vertical, single_wall.width, single_wall.height)
    marked = {(int(x), int(y)) for y, x in np.argwhere(walls)}
    assert marked == {(1, 0), (1, 1), (0, 1)}
    assert marked != set(single_wall.positions(TileKind.WALL))


def test_reconstruct_edges_from_walls() -> None:
    mask = np.zeros((3, 3), dtype=bool)
    mask[1, 1] = True
    horizontal, vertical = reconstruct_edges_from_walls(mask)
    assert horizontal.shape == (4, 3)
    assert vertical.shape == (3, 4)
    assert {(int(x), int(y)) for y, x in np.argwhere(horizontal)} == {(1, 1), (1, 2)}
    assert {(int(x), int(y)) for y, x in np.argwhere(vertical)} == {(1, 1), (2, 1)}


def test_reconstruct_thick_wall_loses_interior() -> None:
    mask = np.ones((1, 2), dtype=bool)
    horizontal, vertical = reconstruct_edges_from_walls(mask)
    assert int(horizontal.sum()) == 4
    # no edge between the two wall tiles
    assert vertical.tolist() == [[True, False, True]]


def test_layout_rejects_out_of_grid_edits() -> None:
    layout = Layout(2, 2)
    with pytest.raises(CoordinateError):
        layout.set_tile(2, 0, TileKind.FLOOR)
    with pytest.raises(CoordinateError):
        layout.set_edge(Edge.v(3, 0))
    assert layout.tile(-1, 0) is TileKind.EMPTY
    assert not layout.has_edge(Edge.h(0, 5))


def test_edge_adjacent_tiles() -> None:
    assert Edge.h(2, 3).adjacent_tiles() == ((2, 2), (2, 3))
    assert Edge.v(2, 3).adjacent_tiles() == ((1, 3), (2, 3))
