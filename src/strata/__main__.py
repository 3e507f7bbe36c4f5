from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .config import Settings
from .exceptions import StrataError
from .generation.factory import LayerFactory
from .grid import Grid, TileKind
from .layers import Layer
from .logging_config import configure_logging, level_for_verbosity
from .seed import resolve_world_seed
from .world import WorldState

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    configure_logging(level_for_verbosity(verbosity))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strata",
        description="Generate overworld, cave and dungeon layers from a world seed",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file overlaying the defaults")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate one layer and print it")
    gen.add_argument("layer", choices=[layer.value for layer in Layer])
    gen.add_argument("--seed", default=None, help="World seed (int or text); 0 or omitted picks one at random")
    gen.add_argument("--width", type=int, default=None)
    gen.add_argument("--height", type=int, default=None)
    gen.add_argument("--json", action="store_true", help="Print a JSON summary instead of ASCII")

    tour = sub.add_parser("tour", help="Walk into the first cave and dungeon entrance and back out")
    tour.add_argument("--seed", default=None, help="World seed (int or text)")
    return parser


def grid_summary(grid: Grid, layer: Layer, seed: int) -> Dict[str, Any]:
    return {
        "layer": layer.value,
        "seed": seed,
        "width": grid.width,
        "height": grid.height,
        "spawn": [grid.spawn.x, grid.spawn.y] if grid.spawn else None,
        "exit": [grid.exit.x, grid.exit.y] if grid.exit else None,
        "counts": {kind.name.lower(): grid.count(kind) for kind in TileKind if grid.count(kind)},
        "rows": grid.to_str_lines(),
    }


def run_generate(settings: Settings, args: argparse.Namespace) -> int:
    layer = Layer.parse(args.layer)
    seed = resolve_world_seed(args.seed if args.seed is not None else settings.world.seed)
    grid = LayerFactory.generate(layer, settings, seed, width=args.width, height=args.height)
    if args.json:
        print(json.dumps(grid_summary(grid, layer, seed), indent=2, sort_keys=True))
    else:
        print("\n".join(grid.to_str_lines()))
    return 0


def run_tour(settings: Settings, args: argparse.Namespace) -> int:
    """Visit the first entrance of each kind, printing one JSON line per step.

    Time is simulated so the post-exit cooldown never blocks the tour.
    """
    now = [0.0]
    world = WorldState(args.seed, settings=settings, clock=lambda: now[0])
    transcript: List[Dict[str, Any]] = [dict(world.describe(), step="start")]
    for kind in (TileKind.CAVE_ENTRANCE, TileKind.DUNGEON_ENTRANCE):
        targets = world.overworld.positions_of(kind)
        if not targets:
            logger.warning("No %s on this overworld", kind.name.lower())
            continue
        entrance = targets[0]
        world.on_player_moved(world.grid_to_world(entrance.x, entrance.y))
        transcript.append(dict(world.describe(), step=f"enter {kind.name.lower()}"))
        exit_pos = world.active_grid.exit
        if exit_pos is not None and not world.on_player_moved(world.grid_to_world(exit_pos.x, exit_pos.y)):
            # spawn shares the exit cell
            world.on_enter_tile(exit_pos.x, exit_pos.y)
        transcript.append(dict(world.describe(), step="exit"))
        now[0] += settings.world.entrance_cooldown
    for entry in transcript:
        print(json.dumps(entry, sort_keys=True))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        settings = Settings.load(args.config).apply_env()
        if args.command == "generate":
            return run_generate(settings, args)
        return run_tour(settings, args)
    except StrataError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
