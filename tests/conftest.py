from __future__ import annotations

import pytest

from mallgrid.grid.model import Edge, Layout


def wall_every_tile(layout: Layout) -> Layout:
    """Give every floor tile all four of its own edges."""
    for x, y in layout.floor_tiles():
        layout.add_edges([Edge.h(x, y), Edge.h(x, y + 1), Edge.v(x, y), Edge.v(x + 1, y)])
    return layout


@pytest.fixture
def single_wall() -> Layout:
    return Layout.from_rows(["...", ".W.", "..."])


@pytest.fixture
def l_shape() -> Layout:
    # (0,0) (1,0) (2,0) (0,1) (0,2)
    return Layout.from_rows(["###", "#..", "#.."])


@pytest.fixture
def walled_l_shape(l_shape: Layout) -> Layout:
    return wall_every_tile(l_shape)


@pytest.fixture
def donut() -> Layout:
    """3×3 floor ring around an empty centre, walled on the outside only."""
    layout = Layout.from_rows(["###", "#.#", "###"])
    for i in range(3):
        layout.add_edges([Edge.h(i, 0), Edge.h(i, 3), Edge.v(0, i), Edge.v(3, i)])
    return layout
