from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

ChunkKey = Tuple[int, int]


@dataclass(frozen=True)
class ViewRect:
    """Camera viewport in world pixels; left/bottom inclusive."""

    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height


class SpriteLike(Protocol):
    center_x: float
    center_y: float


class SpriteListLike(Protocol):
    def append(self, sprite: SpriteLike) -> None:
        ...

    def draw(self) -> None:
        ...

    def __len__(self) -> int:
        ...


class SpriteFactory(Protocol):
    """Creates engine sprites and sprite lists.

    Use ArcadeSpriteFactory in the game; DummySpriteFactory keeps tests and
    CLI tools headless.
    """

    def create_sprite(self, texture: Optional[str], center_x: float, center_y: float, scale: float = 1.0) -> SpriteLike:
        ...

    def create_sprite_list(self) -> SpriteListLike:
        ...


@dataclass
class DummySprite:
    center_x: float
    center_y: float
    texture: Optional[str] = None


class DummySpriteList:
    def __init__(self) -> None:
        self.sprites: List[DummySprite] = []
        self.draw_count: int = 0

    def append(self, sprite: DummySprite) -> None:
        self.sprites.append(sprite)

    def draw(self) -> None:
        # Headless: count draws for tests
        self.draw_count += 1

    def __len__(self) -> int:
        return len(self.sprites)


class DummySpriteFactory:
    """Headless factory used in tests or CLI tools without a GL context."""

    def create_sprite(self, texture: Optional[str], center_x: float, center_y: float, scale: float = 1.0) -> DummySprite:
        return DummySprite(center_x=center_x, center_y=center_y, texture=texture)

    def create_sprite_list(self) -> DummySpriteList:
        return DummySpriteList()


class ArcadeSpriteFactory:
    """Factory backed by arcade.Sprite / arcade.SpriteList.

    Import is deferred to runtime to keep tests headless.
    """

    def __init__(self) -> None:
        try:
            import arcade  # type: ignore
        except ImportError as e:  # pragma: no cover - runtime only
            raise RuntimeError("ArcadeSpriteFactory requires the 'arcade' package at runtime") from e
        self._arcade = arcade

    def create_sprite(self, texture: Optional[str], center_x: float, center_y: float, scale: float = 1.0):  # pragma: no cover - requires arcade
        sprite = self._arcade.Sprite(texture, scale=scale)
        sprite.center_x = center_x
        sprite.center_y = center_y
        return sprite

    def create_sprite_list(self):  # pragma: no cover - requires arcade
        return self._arcade.SpriteList()


class ChunkedTileBatch:
    """Layered sprite lists split into square chunks of tiles.

    Tiles are added once per generated grid; drawing walks the configured
    layers in order and only touches chunks that intersect the viewport.
    """

    def __init__(
        self,
        tile_px: int,
        chunk_tiles: int = 16,
        layers: Sequence[str] = ("ground",),
        sprite_factory: Optional[SpriteFactory] = None,
    ) -> None:
        if tile_px <= 0:
            raise ValueError("tile_px must be > 0")
        if chunk_tiles <= 0:
            raise ValueError("chunk_tiles must be > 0")
        if not layers:
            raise ValueError("layers must be a non-empty sequence of layer names")
        self.tile_px = tile_px
        self.chunk_tiles = chunk_tiles
        self._layers: List[str] = list(layers)
        self._factory: SpriteFactory = sprite_factory or DummySpriteFactory()
        self._chunks: Dict[ChunkKey, Dict[str, SpriteListLike]] = {}
        self._count = 0
        self._last_visible: List[ChunkKey] = []

    @property
    def layers(self) -> List[str]:
        return list(self._layers)

    @property
    def num_tiles(self) -> int:
        return self._count

    @property
    def num_chunks(self) -> int:
        return len(self._chunks)

    @property
    def num_chunks_visible_last(self) -> int:
        return len(self._last_visible)

    def add_tile(self, x: int, y: int, texture: Optional[str], layer: str) -> SpriteLike:
        """Place a sprite centred on grid cell (x, y) in the named layer."""
        if layer not in self._layers:
            raise ValueError(f"Unknown layer '{layer}'. Known: {self._layers}")
        cx = (x + 0.5) * self.tile_px
        cy = (y + 0.5) * self.tile_px
        sprite = self._factory.create_sprite(texture, cx, cy)
        key = (x // self.chunk_tiles, y // self.chunk_tiles)
        layer_map = self._chunks.setdefault(key, {})
        sprites = layer_map.get(layer)
        if sprites is None:
            sprites = self._factory.create_sprite_list()
            layer_map[layer] = sprites
        sprites.append(sprite)
        self._count += 1
        return sprite

    def sprites_in(self, layer: str) -> Iterable[SpriteLike]:
        for layer_map in self._chunks.values():
            sprites = layer_map.get(layer)
            if sprites is not None:
                yield from getattr(sprites, "sprites", sprites)

    def clear(self) -> None:
        logger.debug("Clearing %d tiles in %d chunks", self._count, len(self._chunks))
        self._chunks.clear()
        self._last_visible.clear()
        self._count = 0

    def draw(self, viewport: ViewRect) -> None:
        chunk_px = self.chunk_tiles * self.tile_px
        first_cx = int(viewport.left // chunk_px)
        last_cx = int((viewport.right - 1) // chunk_px)
        first_cy = int(viewport.bottom // chunk_px)
        last_cy = int((viewport.top - 1) // chunk_px)
        visible = [
            (cx, cy)
            for cy in range(first_cy, last_cy + 1)
            for cx in range(first_cx, last_cx + 1)
            if (cx, cy) in self._chunks
        ]
        self._last_visible = visible
        for layer in self._layers:
            for key in visible:
                sprites = self._chunks[key].get(layer)
                if sprites is not None and len(sprites) > 0:
                    sprites.draw()
