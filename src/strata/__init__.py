"""Seed-driven layered world generation: overworld, caves and dungeons."""
from importlib.metadata import version, PackageNotFoundError

from .grid import Grid, Point, TileKind
from .seed import SeedDeriver, resolve_world_seed
from .layers import Layer
from .world import Vec2, WorldState

__all__ = [
    "__version__",
    "Grid",
    "Layer",
    "Point",
    "SeedDeriver",
    "TileKind",
    "Vec2",
    "WorldState",
    "resolve_world_seed",
]

try:
    __version__ = version("strata")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
