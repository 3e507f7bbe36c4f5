import pytest

from strata.config import Settings
from strata.generation import CaveField, DungeonField, LayerFactory, TerrainField
from strata.layers import Layer


def test_build_generator_per_layer():
    settings = Settings()
    assert isinstance(LayerFactory.build_generator(Layer.OVERWORLD, settings), TerrainField)
    assert isinstance(LayerFactory.build_generator(Layer.CAVE, settings), CaveField)
    assert isinstance(LayerFactory.build_generator(Layer.DUNGEON, settings), DungeonField)


def test_generate_uses_section_dimensions_and_overrides():
    settings = Settings()
    settings.cave.width, settings.cave.height = 24, 16
    grid = LayerFactory.generate(Layer.CAVE, settings, seed=9)
    assert (grid.width, grid.height) == (24, 16)
    grid = LayerFactory.generate(Layer.DUNGEON, settings, seed=9, width=20, height=18)
    assert (grid.width, grid.height) == (20, 18)


def test_settings_flow_into_generators():
    settings = Settings()
    settings.dungeon.max_depth = 2
    settings.cave.iterations = 1
    settings.world.spawn_search_radius = 3
    assert LayerFactory.build_generator(Layer.DUNGEON, settings).max_depth == 2
    assert LayerFactory.build_generator(Layer.CAVE, settings).iterations == 1
    assert LayerFactory.build_generator(Layer.OVERWORLD, settings).spawn_search_radius == 3


def test_layer_parse():
    assert Layer.parse(" Cave ") is Layer.CAVE
    with pytest.raises(ValueError):
        Layer.parse("nether")
