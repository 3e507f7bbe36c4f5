from __future__ import annotations

import hashlib
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Dict, Tuple, Union

logger = logging.getLogger(__name__)

SEED_MASK = 0x7FFFFFFF

# Per-feature salts; each feature gets its own linear offset from the world seed.
FEATURE_SALTS: Dict[str, int] = {
    "terrain": 0,
    "biome": 1013,
    "river": 2029,
    "entrance": 3049,
}

# Coordinate multipliers and salts for sub-area seeds. Both multiplier
# differences are even and the salt difference is odd, so for any entrance
# coordinate the cave and dungeon seeds differ in the lowest bit.
CAVE_MULTIPLIERS: Tuple[int, int] = (73856093, 19349663)
DUNGEON_MULTIPLIERS: Tuple[int, int] = (83492791, 50331653)
CAVE_SALT = 0x2F6B5A21
DUNGEON_SALT = 0x5D3C1A40

NOISE_OFFSET_RANGE = 10000.0


def resolve_world_seed(seed: Union[int, str, None]) -> int:
    """Turn user input into a usable non-zero world seed.

    - None or 0: draw a fresh random seed in [1, 2**31 - 1].
    - str: stable SHA-256 fold into 31 bits (numeric strings are parsed as ints).
    - int: masked into 31 bits; a masked zero becomes 1.
    """
    if isinstance(seed, str):
        text = seed.strip()
        try:
            seed = int(text, 0)
        except ValueError:
            digest = hashlib.sha256(text.encode("utf-8")).digest()
            seed = int.from_bytes(digest[:8], "big", signed=False)
            return (seed & SEED_MASK) or 1
    if not seed:
        fresh = secrets.randbelow(SEED_MASK) + 1
        logger.info("No world seed provided; generated random seed: %d", fresh)
        return fresh
    return (seed & SEED_MASK) or 1


@dataclass(frozen=True)
class SeedDeriver:
    """Derives per-feature and per-entrance sub-seeds from a world seed.

    Every generated layer is a pure function of its sub-seed, so an overworld
    is reproducible from ``world_seed`` and a sub-area from
    ``(world_seed, entrance_x, entrance_y)``.

    Usage pattern:
        deriver = SeedDeriver(world_seed)
        river_rng = deriver.feature_rng("river")
        cave_seed = deriver.cave_seed(12, 40)
    """

    world_seed: int

    def feature_seed(self, feature: str) -> int:
        """Sub-seed for a named overworld feature (terrain, biome, river, entrance)."""
        try:
            salt = FEATURE_SALTS[feature]
        except KeyError:
            raise ValueError(f"Unknown feature: {feature!r}") from None
        return (self.world_seed * 31 + salt) & SEED_MASK

    def feature_rng(self, feature: str) -> random.Random:
        return random.Random(self.feature_seed(feature))

    def noise_offset(self, feature: str) -> Tuple[float, float]:
        """Noise-space origin for a feature; shifts sampling, never the noise function."""
        rng = self.feature_rng(feature)
        return (
            rng.uniform(-NOISE_OFFSET_RANGE, NOISE_OFFSET_RANGE),
            rng.uniform(-NOISE_OFFSET_RANGE, NOISE_OFFSET_RANGE),
        )

    def cave_seed(self, x: int, y: int) -> int:
        mx, my = CAVE_MULTIPLIERS
        seed = (self.world_seed + x * mx + y * my + CAVE_SALT) & SEED_MASK
        logger.debug("Derived cave seed for (%d,%d) -> %d", x, y, seed)
        return seed

    def dungeon_seed(self, x: int, y: int) -> int:
        mx, my = DUNGEON_MULTIPLIERS
        seed = (self.world_seed + x * mx + y * my + DUNGEON_SALT) & SEED_MASK
        logger.debug("Derived dungeon seed for (%d,%d) -> %d", x, y, seed)
        return seed

