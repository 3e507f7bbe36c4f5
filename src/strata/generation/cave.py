from __future__ import annotations

import logging
import random
from typing import List, Optional

from ..config import CaveSettings
from ..exceptions import GenerationError
from ..grid import Grid, GridBuilder, Point, TileKind, require_bordered_size
from .base import LayerGenerator
from .spawn import DEFAULT_ORIGIN, first_floor_or_origin

logger = logging.getLogger(__name__)

# Wall count in the Moore neighbourhood that leaves a cell unchanged
TIE_COUNT = 4


class CaveField(LayerGenerator):
    """Cellular automata cavern generator.

    Algorithm:
    - Border cells are walls; interior cells start as walls with probability
      initial_wall_chance.
    - Each smoothing step reads the previous generation only: more than four
      walls among the eight neighbours makes a wall, fewer than four makes
      floor, exactly four keeps the cell. Out-of-bounds neighbours count as walls.
    - Spawn is the first floor scanning bottom-to-top, left-to-right; the exit
      sits one row below it, clamped to the interior. A cave without floor gets
      no exit.
    """

    def __init__(self, initial_wall_chance: float = 0.45, iterations: int = 5) -> None:
        self.initial_wall_chance = float(initial_wall_chance)
        self.iterations = int(iterations)

    @classmethod
    def from_settings(cls, settings: CaveSettings) -> "CaveField":
        return cls(initial_wall_chance=settings.initial_wall_chance, iterations=settings.iterations)

    def generate(
        self,
        width: int,
        height: int,
        seed: int,
        initial_wall_chance: Optional[float] = None,
        iterations: Optional[int] = None,
    ) -> Grid:
        chance = self.initial_wall_chance if initial_wall_chance is None else float(initial_wall_chance)
        steps = self.iterations if iterations is None else int(iterations)
        require_bordered_size(width, height, "Cave")
        if not 0.0 <= chance <= 1.0:
            raise GenerationError(f"initial_wall_chance must be within [0, 1], got {chance}")
        if steps < 0:
            raise GenerationError(f"iterations must be >= 0, got {steps}")

        logger.debug("Generating cave: seed=%d size=%dx%d chance=%.2f steps=%d", seed, width, height, chance, steps)
        rng = random.Random(seed)
        walls = self.initial_fill(width, height, chance, rng)
        for _ in range(steps):
            walls = self.smooth_step(walls, width, height)

        builder = GridBuilder(width, height, TileKind.WALL)
        for y in range(height):
            for x in range(width):
                if not walls[y * width + x]:
                    builder.set(x, y, TileKind.FLOOR)

        spawn = first_floor_or_origin(builder, "Cave")
        builder.spawn = spawn
        exit_pos = None
        if spawn != DEFAULT_ORIGIN:
            exit_pos = Point(
                min(max(spawn.x, 1), width - 2),
                min(max(spawn.y - 1, 1), height - 2),
            )
            builder.set(exit_pos.x, exit_pos.y, TileKind.EXIT)
            builder.exit = exit_pos
        grid = builder.freeze()
        logger.debug("Cave ready: floors=%d spawn=%s exit=%s", grid.count(TileKind.FLOOR), spawn, exit_pos)
        return grid

    @staticmethod
    def initial_fill(width: int, height: int, chance: float, rng: random.Random) -> List[bool]:
        walls = [True] * (width * height)
        for y in range(height):
            for x in range(width):
                border = x == 0 or y == 0 or x == width - 1 or y == height - 1
                if not border:
                    walls[y * width + x] = rng.random() < chance
        return walls

    @staticmethod
    def count_walls(walls: List[bool], width: int, height: int, x: int, y: int) -> int:
        count = 0
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = x + dx, y + dy
                if nx < 0 or ny < 0 or nx >= width or ny >= height:
                    count += 1
                elif walls[ny * width + nx]:
                    count += 1
        return count

    @classmethod
    def smooth_step(cls, walls: List[bool], width: int, height: int) -> List[bool]:
        """One double-buffered smoothing pass; the border stays solid."""
        out = list(walls)
        for y in range(1, height - 1):
            for x in range(1, width - 1):
                count = cls.count_walls(walls, width, height, x, y)
                if count > TIE_COUNT:
                    out[y * width + x] = True
                elif count < TIE_COUNT:
                    out[y * width + x] = False
        return out
