#!/usr/bin/env python3

from __future__ import annotations

import argparse
from collections import Counter

from layout_builder import LayoutBuilder
from layout_config import LayoutConfig
from layout_constants import (
    DEFAULT_ADJUSTED_MIN_ROOM_SIZE,
    DEFAULT_CORRIDOR_WIDTH,
    DEFAULT_FREE_SPACE_BUFFER,
    DEFAULT_MIN_ITERATIONS_BEFORE_CHANCE_APPLIES,
    DEFAULT_MIN_ROOM_SIZE,
    DEFAULT_SPLIT_CHANCE,
    RANDOM_SEED,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a BSP dungeon layout and print it to the console."
    )
    parser.add_argument("--width", type=int, default=120, help="Dungeon width in tiles (default: 120)")
    parser.add_argument("--height", type=int, default=80, help="Dungeon height in tiles (default: 80)")
    parser.add_argument(
        "--corridor-width",
        type=int,
        default=DEFAULT_CORRIDOR_WIDTH,
        help=f"Width of corridors between split regions (default: {DEFAULT_CORRIDOR_WIDTH})",
    )
    parser.add_argument(
        "--min-room-size",
        type=int,
        default=DEFAULT_MIN_ROOM_SIZE,
        help=f"Smallest room edge while corridors are carved (default: {DEFAULT_MIN_ROOM_SIZE})",
    )
    parser.add_argument(
        "--adjusted-min-room-size",
        type=int,
        default=DEFAULT_ADJUSTED_MIN_ROOM_SIZE,
        help=(
            "Smallest room edge once regions fall back to shared walls"
            f" (default: {DEFAULT_ADJUSTED_MIN_ROOM_SIZE})"
        ),
    )
    parser.add_argument(
        "--split-chance",
        type=float,
        default=DEFAULT_SPLIT_CHANCE,
        help="Probability that a region stops splitting early (default: %(default)s)",
    )
    parser.add_argument(
        "--min-iterations",
        type=int,
        default=DEFAULT_MIN_ITERATIONS_BEFORE_CHANCE_APPLIES,
        help="Nodes that must exist before --split-chance applies (default: %(default)s)",
    )
    parser.add_argument(
        "--free-space-buffer",
        type=int,
        default=DEFAULT_FREE_SPACE_BUFFER,
        help="Margin between the grid edge and the outer wall (default: %(default)s)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=RANDOM_SEED,
        help="Seed for reproducible layouts; a random one is picked and printed when omitted",
    )
    parser.add_argument(
        "--highlight-doors",
        action="store_true",
        help="Draw doors as '*' so they stand out in the printed grid",
    )
    parser.add_argument(
        "--no-bridging",
        action="store_true",
        help="Skip the extra corridor doors that join cut-off parts of the layout",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()

    try:
        config = LayoutConfig(
            width=args.width,
            height=args.height,
            corridor_width=args.corridor_width,
            min_room_size=args.min_room_size,
            adjusted_min_room_size=args.adjusted_min_room_size,
            split_chance=args.split_chance,
            min_iterations_before_chance_applies=args.min_iterations,
            free_space_buffer=args.free_space_buffer,
            random_seed=args.seed,
            bridge_components=not args.no_bridging,
        )
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")

    layout = LayoutBuilder(config).generate()

    highlight = layout.door_positions() if args.highlight_doors else None
    for row in layout.grid.render_rows(highlight=highlight):
        print(row)

    print()
    print(f"Seed {layout.seed}: {len(layout.rooms)} rooms, {len(layout.doors)} doors")
    sides = Counter(door.side.value for door in layout.doors)
    if sides:
        print("  Doors by side: " + ", ".join(f"{side}={count}" for side, count in sorted(sides.items())))
    stitched = sum(1 for door in layout.doors if door.connected_room_index is not None)
    print(f"  Room-to-room doors: {stitched}")
    if layout.rooms_without_doors:
        print(f"  Rooms without doors: {list(layout.rooms_without_doors)}")
    print(
        f"  Largest connected group: {len(layout.connectivity.largest_component_rooms)}"
        f"/{len(layout.rooms)} rooms ({layout.connectivity.largest_component_fraction:.1%})"
    )


if __name__ == "__main__":
    main()
