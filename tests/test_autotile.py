import itertools

import pytest

from strata.grid import Grid
from strata.rendering.autotile import RiverVariant, river_variant, variant_at, wall_neighbours

EXPECTED = {
    # (up, down, left, right)
    (False, False, False, False): RiverVariant.CENTER,
    (True, True, True, True): RiverVariant.CENTER,
    (False, False, True, True): RiverVariant.HORIZONTAL,
    (True, True, False, False): RiverVariant.VERTICAL,
    (True, False, False, True): RiverVariant.CORNER_BL,
    (True, False, True, False): RiverVariant.CORNER_BR,
    (False, True, False, True): RiverVariant.CORNER_TL,
    (False, True, True, False): RiverVariant.CORNER_TR,
    (True, False, True, True): RiverVariant.EDGE_BOTTOM,
    (False, True, True, True): RiverVariant.EDGE_TOP,
    (True, True, True, False): RiverVariant.EDGE_RIGHT,
    (True, True, False, True): RiverVariant.EDGE_LEFT,
}


@pytest.mark.parametrize("pattern", list(itertools.product([False, True], repeat=4)))
def test_every_neighbour_pattern_has_a_variant(pattern):
    # Lone-neighbour patterns are not listed and fall back to the centre tile
    assert river_variant(*pattern) is EXPECTED.get(pattern, RiverVariant.CENTER)


def test_off_grid_neighbours_read_as_walls():
    grid = Grid.from_ascii(["...", "###", "..."])
    assert wall_neighbours(grid, 0, 1) == (False, False, True, True)
    assert variant_at(grid, 0, 1) is RiverVariant.HORIZONTAL
    assert variant_at(Grid.from_ascii(["#"]), 0, 0) is RiverVariant.CENTER


def test_river_bend():
    grid = Grid.from_ascii(
        [
            ".#.",
            ".##",
            "...",
        ]
    )
    assert variant_at(grid, 1, 1) is RiverVariant.CORNER_BL
    assert variant_at(grid, 1, 2) is RiverVariant.VERTICAL
    assert variant_at(grid, 2, 1) is RiverVariant.HORIZONTAL
