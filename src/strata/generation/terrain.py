from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .. import noise
from ..config import TerrainSettings
from ..exceptions import GenerationError
from ..grid import Grid, GridBuilder, TileKind
from ..seed import SeedDeriver
from .base import LayerGenerator
from .spawn import search_near

logger = logging.getLogger(__name__)

Offset = Tuple[float, float]

SPARSE_BIOME_BELOW = 0.4
DENSE_BIOME_ABOVE = 0.6


@dataclass(frozen=True)
class NoiseSample:
    terrain: float
    biome: float
    river: float


class TerrainField(LayerGenerator):
    """Overworld generator: grass, forest and rivers from layered noise.

    Algorithm, per cell:
    - Sample terrain, biome and river noise; each feature samples the same noise
      function from its own seed-derived origin.
    - River noise at or below river_threshold makes a river (WALL). Nothing else
      is considered for that cell.
    - The biome band nudges the tree threshold: sparse below 0.4, dense above 0.6.
    - Terrain noise at or above the adjusted threshold is forest (DECORATION),
      everything else grass (FLOOR).

    Afterwards cave and dungeon entrances are scattered on grass by bounded
    rejection sampling, and a spawn point is picked near the centre.
    """

    def __init__(
        self,
        terrain_scale: float = 0.1,
        biome_scale: float = 0.03,
        river_scale: float = 0.05,
        river_threshold: float = 0.3,
        tree_threshold: float = 0.6,
        sparse_bias: float = 0.1,
        dense_bias: float = 0.1,
        cave_entrances: int = 6,
        dungeon_entrances: int = 4,
        entrance_attempts: int = 500,
        spawn_search_radius: int = 16,
    ) -> None:
        self.terrain_scale = float(terrain_scale)
        self.biome_scale = float(biome_scale)
        self.river_scale = float(river_scale)
        self.river_threshold = float(river_threshold)
        self.tree_threshold = float(tree_threshold)
        self.sparse_bias = float(sparse_bias)
        self.dense_bias = float(dense_bias)
        self.cave_entrances = int(cave_entrances)
        self.dungeon_entrances = int(dungeon_entrances)
        self.entrance_attempts = int(entrance_attempts)
        self.spawn_search_radius = int(spawn_search_radius)

    @classmethod
    def from_settings(cls, settings: TerrainSettings, spawn_search_radius: int = 16) -> "TerrainField":
        return cls(
            terrain_scale=settings.terrain_scale,
            biome_scale=settings.biome_scale,
            river_scale=settings.river_scale,
            river_threshold=settings.river_threshold,
            tree_threshold=settings.tree_threshold,
            sparse_bias=settings.sparse_bias,
            dense_bias=settings.dense_bias,
            cave_entrances=settings.cave_entrances,
            dungeon_entrances=settings.dungeon_entrances,
            entrance_attempts=settings.entrance_attempts,
            spawn_search_radius=spawn_search_radius,
        )

    # ---- Noise -----------------------------------------------------------
    @staticmethod
    def offsets(world_seed: int) -> Dict[str, Offset]:
        deriver = SeedDeriver(world_seed)
        return {feature: deriver.noise_offset(feature) for feature in ("terrain", "biome", "river")}

    def sample(self, x: int, y: int, offsets: Dict[str, Offset]) -> NoiseSample:
        return NoiseSample(
            terrain=noise.sample(x, y, offsets["terrain"], self.terrain_scale),
            biome=noise.sample(x, y, offsets["biome"], self.biome_scale),
            river=noise.sample(x, y, offsets["river"], self.river_scale),
        )

    def biome_bias(self, biome: float) -> float:
        if biome < SPARSE_BIOME_BELOW:
            return self.sparse_bias
        if biome > DENSE_BIOME_ABOVE:
            return -self.dense_bias
        return 0.0

    def classify(self, s: NoiseSample) -> TileKind:
        # Order matters: river, then forest, then grass
        if s.river <= self.river_threshold:
            return TileKind.WALL
        if s.terrain >= self.tree_threshold + self.biome_bias(s.biome):
            return TileKind.DECORATION
        return TileKind.FLOOR

    # ---- Generation ------------------------------------------------------
    def generate(self, width: int, height: int, seed: int) -> Grid:
        if width <= 0 or height <= 0:
            raise GenerationError(f"Overworld width/height must be > 0, got {width}x{height}")
        logger.debug("Generating overworld: seed=%d size=%dx%d", seed, width, height)
        offsets = self.offsets(seed)
        builder = GridBuilder(width, height, TileKind.FLOOR)
        for y in range(height):
            for x in range(width):
                builder.set(x, y, self.classify(self.sample(x, y, offsets)))

        rng = SeedDeriver(seed).feature_rng("entrance")
        self._place_entrances(builder, rng)
        builder.spawn = search_near(builder, width // 2, height // 2, self.spawn_search_radius)

        grid = builder.freeze()
        logger.debug(
            "Overworld ready: rivers=%d forest=%d caves=%d dungeons=%d spawn=%s",
            grid.count(TileKind.WALL),
            grid.count(TileKind.DECORATION),
            grid.count(TileKind.CAVE_ENTRANCE),
            grid.count(TileKind.DUNGEON_ENTRANCE),
            grid.spawn,
        )
        return grid

    def _place_entrances(self, builder: GridBuilder, rng: random.Random) -> int:
        wanted: List[TileKind] = [TileKind.CAVE_ENTRANCE] * self.cave_entrances
        wanted += [TileKind.DUNGEON_ENTRANCE] * self.dungeon_entrances
        placed = 0
        attempts = 0
        while placed < len(wanted) and attempts < self.entrance_attempts:
            attempts += 1
            x = rng.randrange(builder.width)
            y = rng.randrange(builder.height)
            if builder.get(x, y) is not TileKind.FLOOR:
                continue
            builder.set(x, y, wanted[placed])
            placed += 1
        if placed < len(wanted):
            logger.warning(
                "Entrance placement stopped after %d attempts: placed %d of %d",
                attempts,
                placed,
                len(wanted),
            )
        return placed
