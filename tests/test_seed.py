import pytest

from strata.seed import (
    CAVE_MULTIPLIERS,
    CAVE_SALT,
    FEATURE_SALTS,
    NOISE_OFFSET_RANGE,
    SEED_MASK,
    SeedDeriver,
    resolve_world_seed,
)


def test_zero_or_missing_seed_is_replaced_with_random_positive():
    for raw in (None, 0):
        seed = resolve_world_seed(raw)
        assert 1 <= seed <= SEED_MASK


def test_int_seeds_are_masked_and_never_zero():
    assert resolve_world_seed(12345) == 12345
    assert resolve_world_seed(-1) == SEED_MASK
    assert resolve_world_seed(2**31) == 1


def test_string_seeds_parse_numbers_and_hash_text():
    assert resolve_world_seed("42") == 42
    assert resolve_world_seed("0x10") == 16
    a = resolve_world_seed("misty-valley")
    assert a == resolve_world_seed("misty-valley")
    assert a != resolve_world_seed("misty-valley-2")
    assert 1 <= a <= SEED_MASK


def test_feature_seeds_are_stable_and_distinct():
    d = SeedDeriver(777)
    assert d.feature_seed("terrain") == (777 * 31) & SEED_MASK
    assert d.feature_seed("river") == (777 * 31 + FEATURE_SALTS["river"]) & SEED_MASK
    seeds = {d.feature_seed(name) for name in FEATURE_SALTS}
    assert len(seeds) == len(FEATURE_SALTS)


def test_unknown_feature_raises():
    with pytest.raises(ValueError):
        SeedDeriver(1).feature_seed("lava")


def test_feature_rng_determinism():
    r1 = SeedDeriver(99).feature_rng("entrance")
    r2 = SeedDeriver(99).feature_rng("entrance")
    assert [r1.randrange(100) for _ in range(10)] == [r2.randrange(100) for _ in range(10)]


def test_noise_offsets_in_range_and_per_feature():
    d = SeedDeriver(5)
    offsets = {name: d.noise_offset(name) for name in ("terrain", "biome", "river")}
    assert offsets["terrain"] == SeedDeriver(5).noise_offset("terrain")
    assert len(set(offsets.values())) == 3
    for ox, oy in offsets.values():
        assert -NOISE_OFFSET_RANGE <= ox <= NOISE_OFFSET_RANGE
        assert -NOISE_OFFSET_RANGE <= oy <= NOISE_OFFSET_RANGE


def test_sub_area_seeds_depend_on_coordinates_and_kind():
    d = SeedDeriver(1000)
    mx, my = CAVE_MULTIPLIERS
    assert d.cave_seed(3, 4) == (1000 + 3 * mx + 4 * my + CAVE_SALT) & SEED_MASK
    assert d.cave_seed(3, 4) == SeedDeriver(1000).cave_seed(3, 4)
    assert d.cave_seed(3, 4) != d.cave_seed(4, 3)
    assert d.cave_seed(3, 4) != d.dungeon_seed(3, 4)
    assert 0 <= d.dungeon_seed(10_000, 10_000) <= SEED_MASK


@pytest.mark.parametrize("world_seed", [1, 12345, SEED_MASK])
def test_cave_and_dungeon_seeds_never_collide(world_seed):
    d = SeedDeriver(world_seed)
    coords = [(x, y) for x in range(64) for y in range(64)]
    coords += [(0, 2**30), (2**30, 0), (2**30, 2**30), (-(2**30), 7), (0, -1)]
    for x, y in coords:
        cave, dungeon = d.cave_seed(x, y), d.dungeon_seed(x, y)
        assert cave != dungeon, (x, y)
        assert (cave ^ dungeon) & 1 == 1
