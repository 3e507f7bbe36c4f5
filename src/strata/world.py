from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .config import Settings
from .events import EventBus
from .exceptions import TransitionError
from .generation.factory import LayerFactory
from .grid import Grid, Point, TileKind
from .layers import Layer
from .seed import SeedDeriver, resolve_world_seed

logger = logging.getLogger(__name__)

# Events published on WorldState.bus
GRID_GENERATED = "grid_generated"
LAYER_ENTERED = "layer_entered"
LAYER_EXITED = "layer_exited"

Clock = Callable[[], float]


@dataclass(frozen=True)
class Vec2:
    """A world-space position."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


PositionLike = Union[Vec2, Tuple[float, float]]


def _as_vec(position: PositionLike) -> Vec2:
    if isinstance(position, Vec2):
        return position
    x, y = position
    return Vec2(float(x), float(y))


class WorldState:
    """Owns the active layer and its grid and runs layer transitions.

    The host loop creates one WorldState per session and reports player
    movement through on_player_moved(). Whenever the grid cell under the player
    changes, the new cell is classified:

    - an entrance while on the overworld (and not in the post-exit cooldown)
      generates the cave or dungeon for that entrance and moves the player to
      its spawn, remembering where they stood;
    - the exit while in a cave or dungeon drops the sub-area, puts the player
      back exactly where they entered and starts the entrance cooldown.

    Sub-areas are never cached: each entry regenerates the grid from a seed
    derived from (world_seed, entrance_x, entrance_y), so re-entry is identical.
    A new grid is always built before any state changes, so the state never
    lacks an active grid.
    """

    def __init__(
        self,
        seed: Union[int, str, None] = None,
        settings: Optional[Settings] = None,
        clock: Clock = time.monotonic,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.settings.validate()
        self.world_seed = resolve_world_seed(seed if seed else self.settings.world.seed)
        self.cell_size = float(self.settings.world.cell_size)
        self.bus = bus or EventBus()
        self._deriver = SeedDeriver(self.world_seed)
        self._clock = clock
        self._suppressed_until: Optional[float] = None

        self._overworld: Grid = LayerFactory.generate(Layer.OVERWORLD, self.settings, self.world_seed)
        self._layer = Layer.OVERWORLD
        self._active_grid: Grid = self._overworld
        self._player = self.get_spawn_position()
        self._return_position = self._player
        self._current_cell = self.world_to_grid(self._player)
        logger.info("World created: seed=%d overworld=%dx%d", self.world_seed, self._overworld.width, self._overworld.height)
        self._announce_grid(self.world_seed)

    # ---- State -----------------------------------------------------------
    @property
    def layer(self) -> Layer:
        return self._layer

    @property
    def active_grid(self) -> Grid:
        return self._active_grid

    @property
    def overworld(self) -> Grid:
        return self._overworld

    @property
    def player_position(self) -> Vec2:
        return self._player

    @property
    def entrance_suppressed(self) -> bool:
        """True while the post-exit cooldown is running; clears itself once it lapses."""
        if self._suppressed_until is None:
            return False
        if self._clock() >= self._suppressed_until:
            logger.debug("Entrance cooldown elapsed")
            self._suppressed_until = None
            return False
        return True

    # ---- Grid query contract ----------------------------------------------
    def get_tile(self, x: int, y: int) -> TileKind:
        return self._active_grid.get_tile(x, y)

    def is_walkable(self, position: PositionLike) -> bool:
        cell = self.world_to_grid(position)
        return self._active_grid.is_walkable(cell.x, cell.y)

    def world_to_grid(self, position: PositionLike) -> Point:
        p = _as_vec(position)
        return Point(math.floor(p.x / self.cell_size), math.floor(p.y / self.cell_size))

    def grid_to_world(self, x: int, y: int) -> Vec2:
        """Centre of cell (x, y) in world space."""
        return Vec2((x + 0.5) * self.cell_size, (y + 0.5) * self.cell_size)

    def get_spawn_position(self) -> Vec2:
        spawn = self._active_grid.spawn
        if spawn is None:
            logger.warning("Active %s grid has no spawn; using origin", self._layer.value)
            return self.grid_to_world(0, 0)
        return self.grid_to_world(spawn.x, spawn.y)

    def get_return_position(self) -> Vec2:
        return self._return_position

    # ---- Movement events -------------------------------------------------
    def on_player_moved(self, position: PositionLike) -> bool:
        """Record the player's new world position.

        Raises on_enter_tile only when the grid cell under the player changes.
        Returns True if a layer transition happened.
        """
        self._player = _as_vec(position)
        cell = self.world_to_grid(self._player)
        if cell == self._current_cell:
            return False
        self._current_cell = cell
        return self.on_enter_tile(cell.x, cell.y)

    def on_enter_tile(self, x: int, y: int) -> bool:
        """Classify a freshly entered cell and run a transition if it triggers one."""
        kind = self.get_tile(x, y)
        if self._layer is Layer.OVERWORLD and kind.is_entrance:
            if self.entrance_suppressed:
                logger.debug("Entrance at (%d,%d) ignored during cooldown", x, y)
                return False
            self.enter_sub_area(kind, x, y)
            return True
        if self._layer is not Layer.OVERWORLD and kind is TileKind.EXIT:
            self.exit_sub_area()
            return True
        return False

    # ---- Transitions -----------------------------------------------------
    def enter_sub_area(self, entrance: TileKind, x: int, y: int) -> Grid:
        if self._layer is not Layer.OVERWORLD:
            raise TransitionError(f"Cannot enter a sub-area from the {self._layer.value} layer")
        if entrance is TileKind.CAVE_ENTRANCE:
            target, seed = Layer.CAVE, self._deriver.cave_seed(x, y)
        elif entrance is TileKind.DUNGEON_ENTRANCE:
            target, seed = Layer.DUNGEON, self._deriver.dungeon_seed(x, y)
        else:
            raise TransitionError(f"{entrance.name} is not an entrance tile")

        grid = LayerFactory.generate(target, self.settings, seed)

        self._return_position = self._player
        self._active_grid = grid
        self._layer = target
        self._player = self.get_spawn_position()
        self._current_cell = self.world_to_grid(self._player)
        logger.info(
            "Entered %s from (%d,%d): seed=%d spawn=%s return=%s",
            target.value,
            x,
            y,
            seed,
            self._player,
            self._return_position,
        )
        self.bus.emit(LAYER_ENTERED, {"layer": target, "entrance": Point(x, y), "seed": seed})
        self._announce_grid(seed)
        return grid

    def exit_sub_area(self) -> None:
        if self._layer is Layer.OVERWORLD:
            raise TransitionError("Already on the overworld")
        left = self._layer
        self._active_grid = self._overworld
        self._layer = Layer.OVERWORLD
        self._player = self._return_position
        self._current_cell = self.world_to_grid(self._player)
        cooldown = self.settings.world.entrance_cooldown
        self._suppressed_until = self._clock() + cooldown
        logger.info("Left %s; returned to %s (entrances suppressed for %.2fs)", left.value, self._player, cooldown)
        self.bus.emit(LAYER_EXITED, {"layer": left, "position": self._player})
        self._announce_grid(self.world_seed)

    # ---- Helpers ---------------------------------------------------------
    def _announce_grid(self, seed: int) -> None:
        self.bus.emit(GRID_GENERATED, {"layer": self._layer, "grid": self._active_grid, "seed": seed})

    def describe(self) -> Dict[str, Any]:
        """JSON-friendly summary of the current state."""
        return {
            "world_seed": self.world_seed,
            "layer": self._layer.value,
            "grid": [self._active_grid.width, self._active_grid.height],
            "player": list(self._player.as_tuple()),
            "return_position": list(self._return_position.as_tuple()),
            "entrance_suppressed": self.entrance_suppressed,
        }
