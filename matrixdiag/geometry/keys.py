"""
Key outline geometry for renderers and click hit-testing.

Coordinates in keyboard units, origin top-left, Y grows downward (screen
convention).  A key's rotation is applied about its rotation origin
(rx, ry); with Y down a positive angle turns the key clockwise on screen.
"""

from __future__ import annotations

from typing import Sequence

from shapely.affinity import rotate
from shapely.geometry import Point, Polygon, box
from shapely.ops import unary_union

from matrixdiag.topology.models import PhysicalKey


def key_polygon(key: PhysicalKey) -> Polygon:
    """The key's outline after rotation."""
    outline = box(key.x, key.y, key.x + key.w, key.y + key.h)
    if not key.r:
        return outline
    return rotate(outline, key.r, origin=(key.rx, key.ry))


def key_at(keys: Sequence[PhysicalKey], x: float, y: float) -> int | None:
    """Index of the first key whose outline covers (x, y), or None.

    Edges count as inside, so a click exactly on a border selects the
    earlier key.
    """
    pt = Point(x, y)
    for i, key in enumerate(keys):
        if key_polygon(key).covers(pt):
            return i
    return None


def layout_bounds(keys: Sequence[PhysicalKey]) -> tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of all rotated key outlines."""
    if not keys:
        return (0.0, 0.0, 0.0, 0.0)
    return tuple(unary_union([key_polygon(k) for k in keys]).bounds)


def key_outlines(keys: Sequence[PhysicalKey]) -> list[list[list[float]]]:
    """Corner lists ([[x, y], ...], closing point dropped) for every key."""
    return [
        [[round(x, 4), round(y, 4)] for x, y in list(key_polygon(k).exterior.coords)[:-1]]
        for k in keys
    ]
