from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..events import EventBus
from ..grid import Grid, TileKind
from ..layers import Layer
from ..world import GRID_GENERATED
from .autotile import RiverVariant, variant_at
from .batch import ChunkedTileBatch

logger = logging.getLogger(__name__)

GROUND = "ground"
DECORATION = "decoration"
CANOPY = "canopy"
LAYERS = (GROUND, DECORATION, CANOPY)


@dataclass
class TextureSet:
    """Texture identifiers (paths or atlas keys) for every drawable tile."""

    floor: Optional[str] = "floor"
    wall: Optional[str] = "wall"
    tree_trunk: Optional[str] = "tree_trunk"
    tree_canopy: Optional[str] = "tree_canopy"
    cave_entrance: Optional[str] = "cave_entrance"
    dungeon_entrance: Optional[str] = "dungeon_entrance"
    exit: Optional[str] = "exit"
    river: Dict[RiverVariant, Optional[str]] = field(
        default_factory=lambda: {v: f"river_{v.value}" for v in RiverVariant}
    )


class TileRenderer:
    """Turns a generated Grid into layered sprites.

    - Every cell gets a ground sprite.
    - Overworld walls are rivers and pick an autotile variant; cave and
      dungeon walls use the plain wall texture.
    - Forest cells get a trunk on every third diagonal with the canopy one
      cell above it; other forest cells get canopy only.
    - Entrances and exits are drawn on the decoration layer.

    No generation logic lives here; the renderer only reads the grid.
    """

    def __init__(self, batch: ChunkedTileBatch, textures: Optional[TextureSet] = None) -> None:
        missing = [name for name in LAYERS if name not in batch.layers]
        if missing:
            raise ValueError(f"Batch is missing layers: {missing}")
        self.batch = batch
        self.textures = textures or TextureSet()
        self.renders = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, bus: EventBus) -> None:
        """Re-render whenever a new grid becomes active."""
        self.detach()
        self._unsubscribe = bus.subscribe(GRID_GENERATED, self._on_grid_generated)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_grid_generated(self, payload: Dict[str, Any]) -> None:
        self.render(payload["grid"], payload["layer"])

    def render(self, grid: Grid, layer: Layer) -> None:
        self.batch.clear()
        t = self.textures
        for x, y, kind in grid.iter_cells():
            if kind is TileKind.EMPTY:
                continue
            if kind is TileKind.WALL:
                if layer is Layer.OVERWORLD:
                    self.batch.add_tile(x, y, t.river.get(variant_at(grid, x, y)), GROUND)
                else:
                    self.batch.add_tile(x, y, t.wall, GROUND)
                continue
            self.batch.add_tile(x, y, t.floor, GROUND)
            if kind is TileKind.DECORATION:
                if (x + y) % 3 == 0:
                    self.batch.add_tile(x, y, t.tree_trunk, DECORATION)
                    self.batch.add_tile(x, y + 1, t.tree_canopy, CANOPY)
                else:
                    self.batch.add_tile(x, y, t.tree_canopy, CANOPY)
            elif kind is TileKind.CAVE_ENTRANCE:
                self.batch.add_tile(x, y, t.cave_entrance, DECORATION)
            elif kind is TileKind.DUNGEON_ENTRANCE:
                self.batch.add_tile(x, y, t.dungeon_entrance, DECORATION)
            elif kind is TileKind.EXIT:
                self.batch.add_tile(x, y, t.exit, DECORATION)
        self.renders += 1
        logger.debug("Rendered %s grid %dx%d into %d sprites", layer.value, grid.width, grid.height, self.batch.num_tiles)
