from .autotile import RiverVariant, river_variant, variant_at
from .batch import ArcadeSpriteFactory, ChunkedTileBatch, DummySpriteFactory, ViewRect
from .tile_renderer import LAYERS, TextureSet, TileRenderer

__all__ = [
    "ArcadeSpriteFactory",
    "ChunkedTileBatch",
    "DummySpriteFactory",
    "LAYERS",
    "RiverVariant",
    "TextureSet",
    "TileRenderer",
    "ViewRect",
    "river_variant",
    "variant_at",
]
