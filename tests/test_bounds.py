from __future__ import annotations

import json

import pytest

from mallgrid.exceptions import InvalidRectError
from mallgrid.grid.model import Edge
from mallgrid.spatial.bounds import UNRESTRICTED, edge_is_inside, make_bounds, tile_is_inside
from mallgrid.spatial.rect import Rect, bounding_rect, is_valid_rect, union_area
from mallgrid.templates.loader import load_template
from mallgrid.templates.nodes import ChildRect, GridSize, MallNode, RoomNode, SceneNode, UnitNode


def _mall(**fields) -> MallNode:
    return load_template({"meta": {"schema": "mall-template.v1"}, "id": "m1", **fields})


def test_rect_is_half_open() -> None:
    rect = Rect(0, 0, 2, 2)
    assert rect.contains(0, 0)
    assert rect.contains(1, 1)
    assert not rect.contains(2, 0)
    assert not rect.contains(0, 2)
    assert not rect.contains(-1, 0)


def test_rect_requires_positive_size() -> None:
    with pytest.raises(InvalidRectError):
        Rect(0, 0, 0, 2)
    with pytest.raises(InvalidRectError):
        Rect(0, 0, 2, -1)
    assert not is_valid_rect({"x": 0, "y": 0, "w": 0, "h": 1})
    assert is_valid_rect({"x": 0, "y": 0, "w": 1, "h": 1})


def test_bounding_rect_and_union_area() -> None:
    assert bounding_rect([Rect(0, 0, 2, 2), Rect(4, 1, 1, 3)]) == Rect(0, 0, 5, 4)
    assert bounding_rect([]) is None
    assert union_area([Rect(0, 0, 2, 2), Rect(1, 1, 2, 2)]) == pytest.approx(7.0)


def test_mall_rect_wins_over_units() -> None:
    mall = _mall(rect={"x": 0, "y": 0, "w": 2, "h": 2}, units=[{"id": "u1", "rect": {"x": 10, "y": 10, "w": 2, "h": 2}}])
    bounds = make_bounds(mall)
    assert bounds.is_inside(1, 1)
    assert not bounds.is_inside(10, 10)
    assert bounds.source == "mall:m1:rect"


def test_mall_without_rect_uses_unit_union() -> None:
    mall = _mall(
        units=[
            {"id": "u1", "rect": {"x": 0, "y": 0, "w": 2, "h": 2}},
            {"id": "u2", "rect": {"x": 5, "y": 5, "w": 2, "h": 2}},
        ]
    )
    bounds = make_bounds(mall)
    assert bounds.is_inside(1, 0)
    assert bounds.is_inside(6, 6)
    assert not bounds.is_inside(3, 3)
    assert bounds.extent == Rect(0, 0, 7, 7)
    assert bounds.area == pytest.approx(8.0)


def test_invalid_unit_rects_are_excluded() -> None:
    mall = _mall(
        units=[
            {"id": "u1", "rect": {"x": 0, "y": 0, "w": 0, "h": 2}},
            {"id": "u2", "rect": {"x": 5, "y": 5, "w": 2, "h": 2}},
        ]
    )
    bounds = make_bounds(mall)
    assert not bounds.is_inside(0, 0)
    assert bounds.is_inside(5, 5)


def test_mall_falls_back_to_grid_size() -> None:
    bounds = make_bounds(_mall(gridSize={"width": 4, "height": 3}))
    assert bounds.is_inside(3, 2)
    assert not bounds.is_inside(4, 0)
    assert not bounds.is_inside(0, 3)


def test_bare_mall_is_unrestricted() -> None:
    bounds = make_bounds(MallNode(id="m"))
    assert bounds.unrestricted
    assert bounds.is_inside(1000, -5)
    assert bounds.extent is None


def test_direct_mall_node_precedence() -> None:
    node = MallNode(
        id="m",
        units=(ChildRect("u", Rect(0, 0, 1, 1)),),
        grid_size=GridSize(10, 10),
    )
    # units beat grid size
    assert not make_bounds(node).is_inside(5, 5)


def test_unit_and_room_bounds() -> None:
    unit = make_bounds(UnitNode(id="u", rect=Rect(2, 2, 3, 3)))
    assert unit.is_inside(4, 4)
    assert not unit(5, 4)
    room = make_bounds(RoomNode(id="r", rect=Rect(0, 0, 1, 1)))
    assert room.is_inside(0, 0)
    assert not room.is_inside(1, 0)


def test_missing_rect_is_unrestricted() -> None:
    assert make_bounds(UnitNode(id="u")) is UNRESTRICTED
    assert make_bounds(RoomNode(id="r")).is_inside(99, 99)
    assert make_bounds(SceneNode()) is UNRESTRICTED
    assert make_bounds(None) is UNRESTRICTED


def test_unknown_node_type_is_unrestricted() -> None:
    assert make_bounds("mall") is UNRESTRICTED


def test_rect_rejects_non_finite_values() -> None:
    for fields in ((0, 0, float("nan"), 2), (0, 0, 2, float("inf")), (float("nan"), 0, 1, 1), (0, float("-inf"), 1, 1)):
        with pytest.raises(InvalidRectError):
            Rect(*fields)
    assert not is_valid_rect({"x": 0, "y": 0, "w": float("nan"), "h": 2})


def test_nan_unit_rect_is_unrestricted() -> None:
    document = json.loads('{"meta": {"schema": "unit-template.v1"}, "id": "u", "rect": {"x": 0, "y": 0, "w": NaN, "h": 2}}')
    unit = load_template(document)
    assert unit.rect is None
    bounds = make_bounds(unit)
    assert bounds is UNRESTRICTED
    assert bounds.is_inside(0, 0)


def test_edge_inside_when_either_side_inside() -> None:
    bounds = make_bounds(UnitNode(id="u", rect=Rect(0, 0, 2, 2)))
    assert edge_is_inside(bounds, Edge.v(2, 0))  # (1,0) inside, (2,0) outside
    assert edge_is_inside(bounds, Edge.h(0, 2))  # (0,1) inside
    assert edge_is_inside(bounds, Edge.h(0, 0))  # (0,0) inside, (0,-1) outside
    assert not edge_is_inside(bounds, Edge.v(3, 0))
    assert not edge_is_inside(bounds, Edge.h(0, 3))


def test_inside_helpers_accept_callables_and_none() -> None:
    assert edge_is_inside(None, Edge.h(100, 100))
    assert tile_is_inside(None, -1, -1)

    def only_origin(x: int, y: int) -> bool:
        return (x, y) == (0, 0)

    assert tile_is_inside(only_origin, 0, 0)
    assert edge_is_inside(only_origin, Edge.v(1, 0))
    assert not edge_is_inside(only_origin, Edge.v(2, 0))
