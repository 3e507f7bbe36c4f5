from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .exceptions import GenerationError

logger = logging.getLogger(__name__)


class TileKind(Enum):
    """Closed set of tile kinds shared by every layer.

    - WALL: impassable (overworld rivers, cave rock, dungeon walls)
    - FLOOR / DECORATION: passable ground, decoration is forest on the overworld
    - CAVE_ENTRANCE / DUNGEON_ENTRANCE / EXIT: passable, trigger layer transitions
    - EMPTY: unused cell, impassable
    """

    EMPTY = 0
    FLOOR = 1
    WALL = 2
    DECORATION = 3
    CAVE_ENTRANCE = 4
    DUNGEON_ENTRANCE = 5
    EXIT = 6

    @property
    def is_walkable(self) -> bool:
        return self in _WALKABLE

    @property
    def is_entrance(self) -> bool:
        return self in (TileKind.CAVE_ENTRANCE, TileKind.DUNGEON_ENTRANCE)

    @property
    def glyph(self) -> str:
        """A single-character visualization useful for logs/debug."""
        return _GLYPHS[self]


_WALKABLE = frozenset(
    {
        TileKind.FLOOR,
        TileKind.DECORATION,
        TileKind.CAVE_ENTRANCE,
        TileKind.DUNGEON_ENTRANCE,
        TileKind.EXIT,
    }
)

_GLYPHS = {
    TileKind.EMPTY: " ",
    TileKind.FLOOR: ".",
    TileKind.WALL: "#",
    TileKind.DECORATION: "T",
    TileKind.CAVE_ENTRANCE: "C",
    TileKind.DUNGEON_ENTRANCE: "D",
    TileKind.EXIT: ">",
}
_KIND_BY_GLYPH = {glyph: kind for kind, glyph in _GLYPHS.items()}


@dataclass(frozen=True)
class Point:
    x: int
    y: int


class Grid:
    """
    Immutable 2D tile array shared by all generators.

    Coordinates are (x, y) with (0, 0) at the bottom-left; x grows to the right,
    y grows up. Every read is bounds-checked and anything outside the grid reads
    as WALL, so movement code can read neighbours without guarding.

    Generators fill a GridBuilder and call freeze(); the resulting Grid has no
    mutators. ``spawn`` and ``exit`` are grid points chosen by the generator.
    """

    __slots__ = ("_width", "_height", "_cells", "_spawn", "_exit")

    def __init__(
        self,
        width: int,
        height: int,
        cells: Sequence[TileKind],
        spawn: Optional[Point] = None,
        exit: Optional[Point] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid width/height must be > 0")
        if len(cells) != width * height:
            raise ValueError(f"Expected {width * height} cells, got {len(cells)}")
        self._width = width
        self._height = height
        self._cells: Tuple[TileKind, ...] = tuple(cells)
        self._spawn = spawn
        self._exit = exit

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def spawn(self) -> Optional[Point]:
        return self._spawn

    @property
    def exit(self) -> Optional[Point]:
        return self._exit

    # ---- Query -----------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> TileKind:
        if not self.in_bounds(x, y):
            return TileKind.WALL
        return self._cells[y * self.width + x]

    def is_walkable(self, x: int, y: int) -> bool:
        return self.get_tile(x, y).is_walkable

    def neighbors4(self, x: int, y: int) -> Iterator[Point]:
        # Ordered for deterministic traversal: up, right, down, left
        for dx, dy in ((0, 1), (1, 0), (0, -1), (-1, 0)):
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield Point(nx, ny)

    def iter_cells(self) -> Iterator[Tuple[int, int, TileKind]]:
        """Yield (x, y, kind) for every cell, row by row from the bottom."""
        for y in range(self.height):
            row = y * self.width
            for x in range(self.width):
                yield x, y, self._cells[row + x]

    def count(self, kind: TileKind) -> int:
        return self._cells.count(kind)

    def find_first(self, predicate: Callable[[TileKind], bool], margin: int = 0) -> Optional[Point]:
        """First matching cell scanning rows bottom-to-top, columns left-to-right."""
        return _scan(self.width, self.height, lambda x, y: predicate(self.get_tile(x, y)), margin)

    def positions_of(self, kind: TileKind) -> List[Point]:
        return [Point(x, y) for x, y, k in self.iter_cells() if k is kind]

    # ---- Export / Compare -----------------------------------------------
    def to_str_lines(self) -> List[str]:
        """ASCII rows, top row first so the output reads like a map."""
        lines: List[str] = []
        for y in range(self.height - 1, -1, -1):
            row = self._cells[y * self.width:(y + 1) * self.width]
            lines.append("".join(k.glyph for k in row))
        return lines

    def snapshot(self) -> Tuple[Tuple[int, ...], ...]:
        """
        Deterministic, hashable snapshot of the tiles for equality tests.
        """
        return tuple(
            tuple(k.value for k in self._cells[y * self.width:(y + 1) * self.width])
            for y in range(self.height)
        )

    @classmethod
    def from_ascii(cls, rows: Sequence[str]) -> "Grid":
        """
        Build a Grid from ASCII rows for tests/tools, top row first.
        Glyphs follow TileKind.glyph.
        """
        if not rows:
            raise ValueError("rows must not be empty")
        width = len(rows[0])
        for r in rows:
            if len(r) != width:
                raise ValueError("All rows must be same width")
        builder = GridBuilder(width, len(rows), TileKind.EMPTY)
        for row_index, row in enumerate(rows):
            y = len(rows) - 1 - row_index
            for x, ch in enumerate(row):
                try:
                    builder.set(x, y, _KIND_BY_GLYPH[ch])
                except KeyError:
                    raise ValueError(f"Unknown tile glyph {ch!r}") from None
        return builder.freeze()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._cells == other._cells
            and self.spawn == other.spawn
            and self.exit == other.exit
        )

    def __hash__(self) -> int:
        return hash((self.width, self.height, self._cells, self.spawn, self.exit))

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, spawn={self.spawn}, exit={self.exit})"


class GridBuilder:
    """Mutable buffer used by a single generation pass; freeze() yields a Grid."""

    def __init__(self, width: int, height: int, fill: TileKind = TileKind.WALL) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid width/height must be > 0")
        self.width = width
        self.height = height
        self._cells: List[TileKind] = [fill] * (width * height)
        self.spawn: Optional[Point] = None
        self.exit: Optional[Point] = None

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def get(self, x: int, y: int) -> TileKind:
        if not self.in_bounds(x, y):
            return TileKind.WALL
        return self._cells[y * self.width + x]

    def set(self, x: int, y: int, kind: TileKind) -> None:
        if not self.in_bounds(x, y):
            # Generators never write OOB; guard and log to catch regressions.
            logger.error("Attempt to write out-of-bounds tile at (%d,%d)", x, y)
            return
        self._cells[y * self.width + x] = kind

    def carve(self, x: int, y: int, kind: TileKind = TileKind.FLOOR) -> bool:
        """Set an interior cell; border cells are left untouched. Returns True if written."""
        if not self.in_bounds(x, y) or self.is_border(x, y):
            return False
        self._cells[y * self.width + x] = kind
        return True

    def find_first(self, kind: TileKind, margin: int = 0) -> Optional[Point]:
        return _scan(self.width, self.height, lambda x, y: self.get(x, y) is kind, margin)

    def freeze(self) -> Grid:
        return Grid(self.width, self.height, self._cells, spawn=self.spawn, exit=self.exit)


def _scan(width: int, height: int, match: Callable[[int, int], bool], margin: int) -> Optional[Point]:
    for y in range(margin, height - margin):
        for x in range(margin, width - margin):
            if match(x, y):
                return Point(x, y)
    return None


def require_bordered_size(width: int, height: int, what: str) -> None:
    """Bordered layers need at least one interior cell."""
    if width < 3 or height < 3:
        raise GenerationError(f"{what} must be at least 3x3 to keep a wall border, got {width}x{height}")
