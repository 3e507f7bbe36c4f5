import pytest

from strata.events import EventBus
from strata.grid import Grid, TileKind
from strata.layers import Layer
from strata.rendering import LAYERS, ChunkedTileBatch, TileRenderer, ViewRect
from strata.rendering.tile_renderer import CANOPY, DECORATION, GROUND
from strata.world import WorldState

MAP = [
    "#####",
    "#TT.#",
    "#C>D#",
    "#####",
]


def textures(batch, layer):
    return sorted(s.texture for s in batch.sprites_in(layer))


@pytest.fixture
def batch():
    return ChunkedTileBatch(16, chunk_tiles=4, layers=LAYERS)


def test_overworld_walls_become_river_variants(batch):
    TileRenderer(batch).render(Grid.from_ascii(MAP), Layer.OVERWORLD)
    ground = textures(batch, GROUND)
    assert len(ground) == 20
    assert "wall" not in ground
    by_pos = {(s.center_x, s.center_y): s.texture for s in batch.sprites_in(GROUND)}
    # corner (0,0): every neighbour is wall or off-grid
    assert by_pos[(8.0, 8.0)] == "river_center"
    # (2,0) sits under the exit tile
    assert by_pos[(40.0, 8.0)] == "river_edge_top"


def test_forest_trunk_and_canopy_placement(batch):
    TileRenderer(batch).render(Grid.from_ascii(MAP), Layer.OVERWORLD)
    assert textures(batch, DECORATION) == ["cave_entrance", "dungeon_entrance", "exit", "tree_trunk"]
    canopy = {(s.center_x, s.center_y) for s in batch.sprites_in(CANOPY)}
    # (1,2) has a trunk so its canopy sits on (1,3); (2,2) is canopy only
    assert canopy == {(24.0, 56.0), (40.0, 40.0)}


def test_sub_area_walls_use_plain_texture(batch):
    TileRenderer(batch).render(Grid.from_ascii(["###", "#>#", "###"]), Layer.CAVE)
    assert textures(batch, GROUND) == ["floor"] + ["wall"] * 8
    assert textures(batch, DECORATION) == ["exit"]


def test_empty_cells_are_skipped_and_render_replaces_previous(batch):
    renderer = TileRenderer(batch)
    renderer.render(Grid.from_ascii(["###"]), Layer.CAVE)
    renderer.render(Grid.from_ascii([" . "]), Layer.CAVE)
    assert batch.num_tiles == 1
    assert renderer.renders == 2


def test_renderer_requires_all_layers():
    with pytest.raises(ValueError):
        TileRenderer(ChunkedTileBatch(16, layers=(GROUND,)))


def test_renderer_follows_world_events(batch, small_settings, clock):
    bus = EventBus()
    renderer = TileRenderer(batch)
    renderer.attach(bus)
    world = WorldState(424242, settings=small_settings, clock=clock, bus=bus)
    assert renderer.renders == 1
    assert batch.num_tiles >= 48 * 48

    entrance = world.overworld.positions_of(TileKind.CAVE_ENTRANCE)[0]
    world.enter_sub_area(TileKind.CAVE_ENTRANCE, entrance.x, entrance.y)
    assert renderer.renders == 2
    ground = set(textures(batch, GROUND))
    assert ground <= {"floor", "wall"}


def test_batch_draws_only_visible_chunks():
    batch = ChunkedTileBatch(16, chunk_tiles=4, layers=("ground",))
    batch.add_tile(0, 0, "a", "ground")
    batch.add_tile(10, 10, "b", "ground")
    assert batch.num_chunks == 2

    batch.draw(ViewRect(0, 0, 64, 64))
    assert batch.num_chunks_visible_last == 1
    batch.draw(ViewRect(0, 0, 200, 200))
    assert batch.num_chunks_visible_last == 2

    batch.clear()
    assert batch.num_tiles == 0 and batch.num_chunks == 0


def test_batch_rejects_bad_arguments():
    with pytest.raises(ValueError):
        ChunkedTileBatch(0)
    with pytest.raises(ValueError):
        ChunkedTileBatch(16, chunk_tiles=0)
    with pytest.raises(ValueError):
        ChunkedTileBatch(16, layers=())
    with pytest.raises(ValueError):
        ChunkedTileBatch(16).add_tile(0, 0, None, "sky")


def test_detach_stops_rerendering(batch, small_settings, clock):
    bus = EventBus()
    renderer = TileRenderer(batch)
    renderer.attach(bus)
    renderer.attach(bus)
    world = WorldState(424242, settings=small_settings, clock=clock, bus=bus)
    # attaching twice still renders once per grid
    assert renderer.renders == 1

    renderer.detach()
    entrance = world.overworld.positions_of(TileKind.CAVE_ENTRANCE)[0]
    world.enter_sub_area(TileKind.CAVE_ENTRANCE, entrance.x, entrance.y)
    assert renderer.renders == 1
