"""Pick river/wall sprite variants from the 4-neighbour wall pattern.

The 16 raw (up, down, left, right) patterns collapse onto eleven variants.
Precedence, first match wins:

1. all four or none        -> CENTER
2. left+right only          -> HORIZONTAL; up+down only -> VERTICAL
3. two adjacent sides       -> a corner named after the open quadrant
                               (up+right -> CORNER_BL, up+left -> CORNER_BR,
                               down+right -> CORNER_TL, down+left -> CORNER_TR)
4. three sides              -> the edge facing the missing side
                               (no down -> EDGE_BOTTOM, no up -> EDGE_TOP,
                               no right -> EDGE_RIGHT, no left -> EDGE_LEFT)
5. anything else (a single neighbour) -> CENTER
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from ..grid import Grid, TileKind


class RiverVariant(Enum):
    CENTER = "center"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    EDGE_TOP = "edge_top"
    EDGE_BOTTOM = "edge_bottom"
    EDGE_LEFT = "edge_left"
    EDGE_RIGHT = "edge_right"
    CORNER_TL = "corner_tl"
    CORNER_TR = "corner_tr"
    CORNER_BL = "corner_bl"
    CORNER_BR = "corner_br"


UP = 1
DOWN = 2
LEFT = 4
RIGHT = 8

_BY_MASK: Dict[int, RiverVariant] = {
    LEFT | RIGHT: RiverVariant.HORIZONTAL,
    UP | DOWN: RiverVariant.VERTICAL,
    UP | RIGHT: RiverVariant.CORNER_BL,
    UP | LEFT: RiverVariant.CORNER_BR,
    DOWN | RIGHT: RiverVariant.CORNER_TL,
    DOWN | LEFT: RiverVariant.CORNER_TR,
    UP | LEFT | RIGHT: RiverVariant.EDGE_BOTTOM,
    DOWN | LEFT | RIGHT: RiverVariant.EDGE_TOP,
    UP | DOWN | LEFT: RiverVariant.EDGE_RIGHT,
    UP | DOWN | RIGHT: RiverVariant.EDGE_LEFT,
}


def neighbour_mask(up: bool, down: bool, left: bool, right: bool) -> int:
    return (UP if up else 0) | (DOWN if down else 0) | (LEFT if left else 0) | (RIGHT if right else 0)


def river_variant(up: bool, down: bool, left: bool, right: bool) -> RiverVariant:
    return _BY_MASK.get(neighbour_mask(up, down, left, right), RiverVariant.CENTER)


def wall_neighbours(grid: Grid, x: int, y: int) -> Tuple[bool, bool, bool, bool]:
    """(up, down, left, right) wall flags; off-grid neighbours read as walls."""
    return (
        grid.get_tile(x, y + 1) is TileKind.WALL,
        grid.get_tile(x, y - 1) is TileKind.WALL,
        grid.get_tile(x - 1, y) is TileKind.WALL,
        grid.get_tile(x + 1, y) is TileKind.WALL,
    )


def variant_at(grid: Grid, x: int, y: int) -> RiverVariant:
    return river_variant(*wall_neighbours(grid, x, y))
