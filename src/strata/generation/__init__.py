from .base import LayerGenerator
from .cave import CaveField
from .dungeon import DungeonField, DungeonLayout, Rect
from .factory import LayerFactory
from .terrain import NoiseSample, TerrainField

__all__ = [
    "CaveField",
    "DungeonField",
    "DungeonLayout",
    "LayerFactory",
    "LayerGenerator",
    "NoiseSample",
    "Rect",
    "TerrainField",
]
