from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

from shapely.geometry import box
from shapely.ops import unary_union

from mallgrid.exceptions import InvalidRectError

Number = int | float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned region ``[x, x+w) × [y, y+h)``."""

    x: Number
    y: Number
    w: Number
    h: Number

    def __post_init__(self) -> None:
        for name in ("x", "y", "w", "h"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidRectError(f"Rect field '{name}' must be a finite number, got {value!r}", {"field": name})
        if not (self.w > 0 and self.h > 0):
            raise InvalidRectError(
                f"Rect must have positive size, got w={self.w}, h={self.h}",
                {"w": str(self.w), "h": str(self.h)},
            )

    def contains(self, x: Number, y: Number) -> bool:
        return self.x <= x < self.x + self.w and self.y <= y < self.y + self.h

    @property
    def right(self) -> Number:
        return self.x + self.w

    @property
    def bottom(self) -> Number:
        return self.y + self.h

    def to_dict(self) -> dict[str, Number]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    def to_polygon(self):
        return box(self.x, self.y, self.right, self.bottom)


def is_valid_rect(value: Any) -> bool:
    if isinstance(value, Rect):
        return True
    if not isinstance(value, dict):
        return False
    try:
        Rect(value.get("x"), value.get("y"), value.get("w"), value.get("h"))
    except InvalidRectError:
        return False
    return True


def bounding_rect(rects: Iterable[Rect]) -> Rect | None:
    """Bounding rect of the union of ``rects``; None when there are none."""
    polygons = [rect.to_polygon() for rect in rects]
    if not polygons:
        return None
    min_x, min_y, max_x, max_y = unary_union(polygons).bounds
    return Rect(_tidy(min_x), _tidy(min_y), _tidy(max_x - min_x), _tidy(max_y - min_y))


def union_area(rects: Iterable[Rect]) -> float:
    """Area covered by ``rects`` with overlaps counted once."""
    polygons = [rect.to_polygon() for rect in rects]
    if not polygons:
        return 0.0
    return float(unary_union(polygons).area)


def _tidy(value: float) -> Number:
    # shapely hands back floats; keep integer grids integral
    return int(value) if float(value).is_integer() else value
