from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..config import DungeonSettings
from ..exceptions import GenerationError
from ..grid import Grid, GridBuilder, Point, TileKind, require_bordered_size
from .base import LayerGenerator
from .spawn import DEFAULT_ORIGIN, first_floor_or_origin

logger = logging.getLogger(__name__)

ROOM_MARGIN = 1


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def top(self) -> int:
        return self.y + self.height

    def center(self) -> Point:
        return Point(self.x + self.width // 2, self.y + self.height // 2)

    def contains(self, p: Point) -> bool:
        return (self.x <= p.x < self.right) and (self.y <= p.y < self.top)


@dataclass(frozen=True)
class DungeonLayout:
    grid: Grid
    rooms: Tuple[Rect, ...]


class DungeonField(LayerGenerator):
    """
    BSP (Binary Space Partition) room + corridor generator.

    - The interior is split recursively along the longer axis until a node
      reaches max_depth or is too small on both axes (< 2 * min_room_size).
    - Each leaf becomes one room, randomly shrunk inside its cell.
    - Rooms are joined in generation order (i-1 -> i) by a random walk that
      steps toward the next room centre on a coin-flipped axis.

    Only consecutive rooms are joined, so the room graph is a chain of walks
    that is not guaranteed to be connected everywhere.
    """

    def __init__(self, min_room_size: int = 6, max_depth: int = 4) -> None:
        self.min_room_size = int(min_room_size)
        self.max_depth = int(max_depth)

    @classmethod
    def from_settings(cls, settings: DungeonSettings) -> "DungeonField":
        return cls(min_room_size=settings.min_room_size, max_depth=settings.max_depth)

    def generate(
        self,
        width: int,
        height: int,
        seed: int,
        min_room_size: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> Grid:
        return self.layout(width, height, seed, min_room_size, max_depth).grid

    def layout(
        self,
        width: int,
        height: int,
        seed: int,
        min_room_size: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> DungeonLayout:
        """Generate the grid and also return the rooms in generation order."""
        min_size = self.min_room_size if min_room_size is None else int(min_room_size)
        depth_cap = self.max_depth if max_depth is None else int(max_depth)
        require_bordered_size(width, height, "Dungeon")
        if min_size < 1:
            raise GenerationError(f"min_room_size must be >= 1, got {min_size}")
        if depth_cap < 0:
            raise GenerationError(f"max_depth must be >= 0, got {depth_cap}")

        rng = random.Random(seed)
        logger.debug("Generating BSP dungeon: seed=%d size=%dx%d min_room=%d depth=%d", seed, width, height, min_size, depth_cap)
        builder = GridBuilder(width, height, TileKind.WALL)

        rooms: List[Rect] = []
        root = Rect(1, 1, width - 2, height - 2)
        self._split(root, 0, depth_cap, min_size, rng, rooms)

        for room in rooms:
            self._carve_room(builder, room)
        for i in range(1, len(rooms)):
            self._carve_random_walk(builder, rooms[i - 1].center(), rooms[i].center(), rng)

        exit_pos = first_floor_or_origin(builder, "Dungeon")
        if exit_pos != DEFAULT_ORIGIN:
            builder.set(exit_pos.x, exit_pos.y, TileKind.EXIT)
            builder.exit = exit_pos
            builder.spawn = self._spawn_above(builder, exit_pos)
        else:
            builder.spawn = DEFAULT_ORIGIN

        grid = builder.freeze()
        logger.debug("BSP dungeon ready: %d rooms, spawn=%s exit=%s", len(rooms), grid.spawn, grid.exit)
        return DungeonLayout(grid=grid, rooms=tuple(rooms))

    # ---- BSP ---------------------------------------------------------------
    def _split(
        self,
        node: Rect,
        depth: int,
        max_depth: int,
        min_size: int,
        rng: random.Random,
        rooms: List[Rect],
    ) -> None:
        too_small = node.width < min_size * 2 and node.height < min_size * 2
        if depth >= max_depth or too_small:
            rooms.append(self._shrink(node, rng))
            return

        if node.width > node.height:
            split_vertical = True
        elif node.height > node.width:
            split_vertical = False
        else:
            split_vertical = rng.random() < 0.5

        # The longer side is at least 2 * min_size here, so the range is never empty
        if split_vertical:
            split = rng.randint(min_size, node.width - min_size)
            self._split(Rect(node.x, node.y, split, node.height), depth + 1, max_depth, min_size, rng, rooms)
            self._split(Rect(node.x + split, node.y, node.width - split, node.height), depth + 1, max_depth, min_size, rng, rooms)
        else:
            split = rng.randint(min_size, node.height - min_size)
            self._split(Rect(node.x, node.y, node.width, split), depth + 1, max_depth, min_size, rng, rooms)
            self._split(Rect(node.x, node.y + split, node.width, node.height - split), depth + 1, max_depth, min_size, rng, rooms)

    @staticmethod
    def _shrink_axis(size: int, rng: random.Random) -> Tuple[int, int]:
        """Pick (offset, length) for a room inside a cell of the given size."""
        lo = max(1, size // 2)
        hi = max(lo, size - ROOM_MARGIN - 1)
        length = rng.randint(lo, hi)
        offset = rng.randint(1, max(1, size - length - 1))
        # Cells of size 1 have no room for an offset
        return min(offset, size - length), length

    def _shrink(self, rect: Rect, rng: random.Random) -> Rect:
        dx, w = self._shrink_axis(rect.width, rng)
        dy, h = self._shrink_axis(rect.height, rng)
        return Rect(rect.x + dx, rect.y + dy, w, h)

    # ---- Carving -------------------------------------------------------------
    @staticmethod
    def _carve_room(builder: GridBuilder, room: Rect) -> None:
        for y in range(room.y, room.top):
            for x in range(room.x, room.right):
                builder.carve(x, y)

    @staticmethod
    def _carve_random_walk(builder: GridBuilder, start: Point, target: Point, rng: random.Random) -> None:
        x, y = start.x, start.y
        builder.carve(x, y)
        while (x, y) != (target.x, target.y):
            move_x = rng.random() < 0.5
            if move_x and x == target.x:
                move_x = False
            elif not move_x and y == target.y:
                move_x = True
            if move_x:
                x += 1 if x < target.x else -1
            else:
                y += 1 if y < target.y else -1
            builder.carve(x, y)

    @staticmethod
    def _spawn_above(builder: GridBuilder, exit_pos: Point) -> Point:
        above = Point(exit_pos.x, exit_pos.y + 1)
        if builder.get(above.x, above.y).is_walkable:
            return above
        # The exit is the lowest floor, so the cell above can be rock; stay next to it
        for dx, dy in ((1, 0), (-1, 0), (0, -1)):
            p = Point(exit_pos.x + dx, exit_pos.y + dy)
            if builder.get(p.x, p.y).is_walkable:
                return p
        return exit_pos
