from __future__ import annotations

import pytest

from mallgrid.exceptions import CoordinateError, MalformedDocumentError
from mallgrid.grid.edges import SolidRule, extract_edges
from mallgrid.grid.model import Edge, Layout, TileKind
from mallgrid.grid.scene_io import (
    is_wall_instance,
    layout_from_instances,
    layout_from_scene,
    layout_to_instances,
    layout_to_scene,
)


def _scene(**overrides) -> dict:
    scene = {
        "meta": {"schema": "scene.v1", "name": "atrium"},
        "grid": {"width": 3, "height": 2, "cellSize": 25},
        "tiles": {"floor": [[0, 0], [1, 0]]},
        "edges": {"horizontal": [[0, 0], [1, 0]], "vertical": [[0, 0]]},
    }
    scene.update(overrides)
    return scene


def test_layout_from_scene() -> None:
    loaded = layout_from_scene(_scene())
    assert loaded.name == "atrium"
    assert loaded.cell_size == 25
    assert loaded.layout.floor_tiles() == [(0, 0), (1, 0)]
    assert loaded.layout.has_edge(Edge.h(1, 0))
    assert loaded.layout.has_edge(Edge.v(0, 0))
    assert not loaded.layout.has_edge(Edge.v(1, 0))


def test_scene_round_trip(l_shape: Layout) -> None:
    l_shape.add_edges(extract_edges(l_shape, SolidRule.FLOOR))
    document = layout_to_scene(l_shape, cell_size=20, created="2024-01-01T00:00:00Z")
    loaded = layout_from_scene(document)
    assert (loaded.layout.tiles == l_shape.tiles).all()
    assert loaded.layout.edges() == l_shape.edges()


def test_scene_without_grid_is_malformed() -> None:
    with pytest.raises(MalformedDocumentError):
        layout_from_scene({"tiles": {"floor": []}})
    with pytest.raises(MalformedDocumentError):
        layout_from_scene(_scene(grid={"width": "wide"}))
    with pytest.raises(MalformedDocumentError):
        layout_from_scene(_scene(tiles={"floor": "none"}))
    with pytest.raises(MalformedDocumentError):
        layout_from_scene("scene")


def test_scene_grid_values_must_be_integral() -> None:
    with pytest.raises(MalformedDocumentError):
        layout_from_scene(_scene(grid={"width": 3, "height": 2, "cellSize": "big"}))
    with pytest.raises(MalformedDocumentError):
        layout_from_scene(_scene(grid={"width": float("inf"), "height": 2}))
    assert layout_from_scene(_scene(grid={"width": 3, "height": 2})).cell_size == 20


def test_scene_coordinate_errors() -> None:
    with pytest.raises(CoordinateError):
        layout_from_scene(_scene(tiles={"floor": [[0.5, 0]]}))
    with pytest.raises(CoordinateError):
        layout_from_scene(_scene(tiles={"floor": [[5, 0]]}))
    with pytest.raises(CoordinateError):
        layout_from_scene(_scene(edges={"horizontal": [[0, 9]], "vertical": []}))


def test_wall_instance_types() -> None:
    assert is_wall_instance("lobbyWall")
    assert is_wall_instance("lobbyNorthWall")
    assert not is_wall_instance("lobbyFloor")


def test_layout_from_instances() -> None:
    instances = [
        {"type": "referencePole", "position": [0, 0.5, 0]},
        {"type": "lobbyFloor", "position": [0, 0, 0]},
        {"type": "lobbyFloor", "position": [2, 0, 0]},
        {"type": "lobbyWall", "position": [4, 4, 0]},
        {"type": "lobbyFloor", "position": [100, 0, 0]},
        {"type": "lobbyFloor"},
        "junk",
    ]
    layout = layout_from_instances(instances, width=4, height=2, cell=2.0)
    assert layout.floor_tiles() == [(0, 0), (1, 0)]
    # wall tiles become edges, not tiles
    assert layout.positions(TileKind.WALL) == []
    assert layout.horizontal_edge_coords() == [(2, 0), (2, 1)]
    assert layout.vertical_edge_coords() == [(2, 0), (3, 0)]


def test_instances_with_bad_positions_are_skipped() -> None:
    instances = [
        {"type": "lobbyFloor", "position": ["a", 0, 0]},
        {"type": "lobbyFloor", "position": [float("nan"), 0, 0]},
        {"type": "lobbyWall", "position": [0, 0, float("inf")]},
        {"type": "lobbyFloor", "position": [True, 0, 0]},
        {"type": "lobbyFloor", "position": [2, 0, 2]},
    ]
    layout = layout_from_instances(instances, width=2, height=2, cell=2.0)
    assert layout.floor_tiles() == [(1, 1)]
    assert layout.edges() == []


def test_layout_to_instances() -> None:
    layout = Layout(2, 1)
    layout.set_tile(0, 0, TileKind.FLOOR)
    layout.set_edge(Edge.v(2, 0))
    instances = layout_to_instances(layout)
    assert [item["type"] for item in instances] == ["referencePole", "lobbyFloor", "lobbyWall"]
    assert instances[2]["position"] == [2.0, 4.0, 0.0]


def test_layout_to_instances_without_pole() -> None:
    layout = Layout(1, 1)
    layout.set_tile(0, 0, TileKind.FLOOR)
    instances = layout_to_instances(layout, include_reference_pole=False)
    assert len(instances) == 1
    assert instances[0]["type"] == "lobbyFloor"
    assert instances[0]["position"] == [0.0, 0.0, 0.0]
