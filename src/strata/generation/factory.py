from __future__ import annotations
import logging
from typing import Optional, Tuple

from ..config import Settings
from ..grid import Grid
from ..layers import Layer
from .base import LayerGenerator
from .cave import CaveField
from .dungeon import DungeonField
from .terrain import TerrainField

logger = logging.getLogger(__name__)


class LayerFactory:
    """Factory to produce layer grids from settings.

    Usage:
      settings = Settings.load()
      grid = LayerFactory.generate(Layer.CAVE, settings, seed=1234)
    """

    @staticmethod
    def build_generator(layer: Layer, settings: Settings) -> LayerGenerator:
        if layer is Layer.OVERWORLD:
            return TerrainField.from_settings(settings.terrain, spawn_search_radius=settings.world.spawn_search_radius)
        if layer is Layer.CAVE:
            return CaveField.from_settings(settings.cave)
        if layer is Layer.DUNGEON:
            return DungeonField.from_settings(settings.dungeon)
        raise ValueError(f"No generator for layer {layer!r}")

    @staticmethod
    def dimensions(layer: Layer, settings: Settings) -> Tuple[int, int]:
        section = {
            Layer.OVERWORLD: settings.terrain,
            Layer.CAVE: settings.cave,
            Layer.DUNGEON: settings.dungeon,
        }[layer]
        return section.width, section.height

    @classmethod
    def generate(
        cls,
        layer: Layer,
        settings: Settings,
        seed: int,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Grid:
        gen = cls.build_generator(layer, settings)
        default_w, default_h = cls.dimensions(layer, settings)
        w = default_w if width is None else width
        h = default_h if height is None else height
        logger.info("LayerFactory: generating %s %dx%d (seed=%d)", layer.value, w, h, seed)
        return gen.generate(w, h, seed)
