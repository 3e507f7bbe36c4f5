from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_CONFIG = "STRATA_CONFIG"
ENV_SEED = "STRATA_SEED"
ENV_WIDTH = "STRATA_WIDTH"
ENV_HEIGHT = "STRATA_HEIGHT"


@dataclass
class WorldSettings:
    # 0 means "pick a random seed at startup"
    seed: int = 0
    # World units per grid cell
    cell_size: float = 1.0
    # Seconds during which entrances ignore the player after leaving a sub-area
    entrance_cooldown: float = 1.0
    spawn_search_radius: int = 16


@dataclass
class TerrainSettings:
    width: int = 128
    height: int = 128
    terrain_scale: float = 0.1
    biome_scale: float = 0.03
    river_scale: float = 0.05
    river_threshold: float = 0.3
    tree_threshold: float = 0.6
    sparse_bias: float = 0.1
    dense_bias: float = 0.1
    cave_entrances: int = 6
    dungeon_entrances: int = 4
    entrance_attempts: int = 500


@dataclass
class CaveSettings:
    width: int = 40
    height: int = 30
    initial_wall_chance: float = 0.45
    iterations: int = 5


@dataclass
class DungeonSettings:
    width: int = 50
    height: int = 40
    min_room_size: int = 6
    max_depth: int = 4


@dataclass
class Settings:
    world: WorldSettings = field(default_factory=WorldSettings)
    terrain: TerrainSettings = field(default_factory=TerrainSettings)
    cave: CaveSettings = field(default_factory=CaveSettings)
    dungeon: DungeonSettings = field(default_factory=DungeonSettings)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file must contain a mapping: {path}")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        sections = {
            "world": WorldSettings,
            "terrain": TerrainSettings,
            "cave": CaveSettings,
            "dungeon": DungeonSettings,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown settings sections: {sorted(unknown)}")
        parsed = {}
        for name, section_cls in sections.items():
            raw = data.get(name) or {}
            if not isinstance(raw, dict):
                raise ConfigError(f"[{name}] must be a mapping")
            try:
                parsed[name] = section_cls(**raw)
            except TypeError as exc:
                raise ConfigError(f"Invalid keys in [{name}]: {exc}") from exc
        settings = cls(**parsed)
        settings.validate()
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "Settings":
        """Load settings from built-in defaults and optional user override file.

        If user_path is provided and exists, overlay values onto defaults.
        When user_path is None, the STRATA_CONFIG env var is consulted.
        """
        try:
            with resources.files("strata.data").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        if user_path is None and os.getenv(ENV_CONFIG):
            user_path = Path(os.environ[ENV_CONFIG])

        user_data: dict = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file not found: %s", user_path)

        merged = cls._deep_merge(default_data, user_data)
        settings = cls.from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings

    def apply_env(self) -> "Settings":
        """Overlay STRATA_SEED / STRATA_WIDTH / STRATA_HEIGHT onto these settings.

        Width and height apply to the overworld only.
        """
        seed = os.getenv(ENV_SEED)
        if seed:
            self.world.seed = _env_int(ENV_SEED, seed)
        width = os.getenv(ENV_WIDTH)
        if width:
            self.terrain.width = _env_int(ENV_WIDTH, width)
        height = os.getenv(ENV_HEIGHT)
        if height:
            self.terrain.height = _env_int(ENV_HEIGHT, height)
        self.validate()
        return self

    def validate(self) -> None:
        if self.terrain.width <= 0 or self.terrain.height <= 0:
            raise ConfigError("[terrain] width/height must be > 0")
        # Caves and dungeons keep a wall border around at least one interior cell
        for name, section in (("cave", self.cave), ("dungeon", self.dungeon)):
            if section.width < 3 or section.height < 3:
                raise ConfigError(f"[{name}] width/height must be >= 3")
        if self.world.cell_size <= 0:
            raise ConfigError("world.cell_size must be > 0")
        if self.world.entrance_cooldown < 0:
            raise ConfigError("world.entrance_cooldown must be >= 0")
        if self.world.spawn_search_radius < 0:
            raise ConfigError("world.spawn_search_radius must be >= 0")
        if not 0.0 <= self.cave.initial_wall_chance <= 1.0:
            raise ConfigError("cave.initial_wall_chance must be within [0, 1]")
        if self.cave.iterations < 0:
            raise ConfigError("cave.iterations must be >= 0")
        if self.dungeon.min_room_size < 1:
            raise ConfigError("dungeon.min_room_size must be >= 1")
        if self.dungeon.max_depth < 0:
            raise ConfigError("dungeon.max_depth must be >= 0")
        t = self.terrain
        if min(t.cave_entrances, t.dungeon_entrances, t.entrance_attempts) < 0:
            raise ConfigError("terrain entrance counts must be >= 0")
        if min(t.terrain_scale, t.biome_scale, t.river_scale) <= 0:
            raise ConfigError("terrain noise scales must be > 0")

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        logger.info("Saved settings to %s", path)


def _env_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
