import pytest

from strata.exceptions import GenerationError
from strata.grid import Grid, GridBuilder, Point, TileKind, require_bordered_size


def test_from_ascii_top_row_is_highest_y():
    grid = Grid.from_ascii(["#.", ".C"])
    assert grid.width == 2 and grid.height == 2
    assert grid.get_tile(0, 1) is TileKind.WALL
    assert grid.get_tile(1, 1) is TileKind.FLOOR
    assert grid.get_tile(0, 0) is TileKind.FLOOR
    assert grid.get_tile(1, 0) is TileKind.CAVE_ENTRANCE


def test_to_str_lines_round_trips_ascii():
    rows = ["#####", "#.T>#", "#CD.#", "#####"]
    assert Grid.from_ascii(rows).to_str_lines() == rows


def test_out_of_bounds_reads_as_wall():
    grid = Grid.from_ascii(["..", ".."])
    for x, y in [(-1, 0), (0, -1), (2, 0), (0, 2), (100, -100)]:
        assert grid.get_tile(x, y) is TileKind.WALL
        assert grid.is_walkable(x, y) is False


def test_walkable_kinds():
    walkable = {k for k in TileKind if k.is_walkable}
    assert walkable == {
        TileKind.FLOOR,
        TileKind.DECORATION,
        TileKind.CAVE_ENTRANCE,
        TileKind.DUNGEON_ENTRANCE,
        TileKind.EXIT,
    }
    assert TileKind.CAVE_ENTRANCE.is_entrance and TileKind.DUNGEON_ENTRANCE.is_entrance
    assert not TileKind.EXIT.is_entrance


def test_from_ascii_rejects_bad_input():
    with pytest.raises(ValueError):
        Grid.from_ascii([])
    with pytest.raises(ValueError):
        Grid.from_ascii(["..", "..."])
    with pytest.raises(ValueError):
        Grid.from_ascii([".?"])


def test_grid_constructor_validates_cells():
    with pytest.raises(ValueError):
        Grid(0, 3, [])
    with pytest.raises(ValueError):
        Grid(2, 2, [TileKind.FLOOR] * 3)


def test_neighbors4_order_and_bounds():
    grid = Grid.from_ascii(["...", "...", "..."])
    assert list(grid.neighbors4(1, 1)) == [Point(1, 2), Point(2, 1), Point(1, 0), Point(0, 1)]
    assert list(grid.neighbors4(0, 0)) == [Point(0, 1), Point(1, 0)]


def test_queries_count_and_scan_bottom_up():
    grid = Grid.from_ascii(["#.#", "#..", "###"])
    assert grid.count(TileKind.FLOOR) == 3
    assert grid.positions_of(TileKind.FLOOR) == [Point(1, 1), Point(2, 1), Point(1, 2)]
    assert grid.find_first(lambda k: k is TileKind.FLOOR) == Point(1, 1)
    assert grid.find_first(lambda k: k is TileKind.FLOOR, margin=1) == Point(1, 1)
    assert grid.find_first(lambda k: k is TileKind.EXIT) is None


def test_equality_and_snapshot():
    a = Grid.from_ascii(["#.", ".#"])
    b = Grid.from_ascii(["#.", ".#"])
    c = Grid.from_ascii(["..", ".#"])
    assert a == b and hash(a) == hash(b)
    assert a != c
    assert a.snapshot() == ((TileKind.FLOOR.value, TileKind.WALL.value), (TileKind.WALL.value, TileKind.FLOOR.value))


def test_builder_carve_leaves_border_alone():
    builder = GridBuilder(4, 4)
    assert builder.carve(0, 2) is False
    assert builder.carve(3, 3) is False
    assert builder.carve(1, 2) is True
    grid = builder.freeze()
    assert grid.get_tile(1, 2) is TileKind.FLOOR
    assert grid.count(TileKind.FLOOR) == 1


def test_builder_out_of_bounds_write_is_ignored(caplog):
    builder = GridBuilder(3, 3, TileKind.FLOOR)
    builder.set(5, 5, TileKind.WALL)
    assert builder.freeze().count(TileKind.WALL) == 0
    assert "out-of-bounds" in caplog.text


def test_freeze_keeps_markers():
    builder = GridBuilder(4, 3, TileKind.FLOOR)
    for x in range(4):
        builder.set(x, 0, TileKind.WALL)
        builder.set(x, 2, TileKind.WALL)
    builder.set(0, 1, TileKind.WALL)
    builder.set(3, 1, TileKind.WALL)
    builder.spawn = Point(1, 1)
    builder.exit = Point(2, 1)
    grid = builder.freeze()
    assert grid.to_str_lines() == ["####", "#..#", "####"]
    assert grid.spawn == Point(1, 1) and grid.exit == Point(2, 1)


def test_require_bordered_size():
    require_bordered_size(3, 3, "Cave")
    with pytest.raises(GenerationError):
        require_bordered_size(2, 10, "Cave")


def test_grid_attributes_are_read_only():
    grid = Grid.from_ascii(["..", ".."])
    for name, value in (("width", 5), ("height", 5), ("spawn", Point(0, 0)), ("exit", Point(1, 1))):
        with pytest.raises(AttributeError):
            setattr(grid, name, value)
    assert (grid.width, grid.height, grid.spawn, grid.exit) == (2, 2, None, None)
