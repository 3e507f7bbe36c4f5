from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional

from ..grid import GridBuilder, Point, TileKind

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = Point(0, 0)


def ring(cx: int, cy: int, r: int) -> Iterator[Point]:
    """Cells at Chebyshev distance r from (cx, cy), in a fixed order."""
    if r == 0:
        yield Point(cx, cy)
        return
    for x in range(cx - r, cx + r + 1):
        yield Point(x, cy - r)
    for y in range(cy - r + 1, cy + r):
        yield Point(cx - r, y)
        yield Point(cx + r, y)
    for x in range(cx - r, cx + r + 1):
        yield Point(x, cy + r)


def search_near(
    builder: GridBuilder,
    cx: int,
    cy: int,
    max_radius: int,
    accept: Optional[Callable[[TileKind], bool]] = None,
) -> Point:
    """Nearest accepted cell to (cx, cy) within max_radius rings.

    Falls back to the default origin with a warning when nothing matches; the
    search is bounded and never retried.
    """
    if accept is None:
        accept = lambda kind: kind is TileKind.FLOOR  # noqa: E731
    for r in range(max_radius + 1):
        for p in ring(cx, cy, r):
            if builder.in_bounds(p.x, p.y) and accept(builder.get(p.x, p.y)):
                return p
    logger.warning(
        "Spawn search found no floor within radius %d of (%d,%d); using origin %s",
        max_radius,
        cx,
        cy,
        DEFAULT_ORIGIN,
    )
    return DEFAULT_ORIGIN


def first_floor_or_origin(builder: GridBuilder, what: str) -> Point:
    """First interior FLOOR scanning bottom-to-top, left-to-right."""
    found = builder.find_first(TileKind.FLOOR, margin=1)
    if found is None:
        logger.warning("%s: no floor tile found; using origin %s", what, DEFAULT_ORIGIN)
        return DEFAULT_ORIGIN
    return found
