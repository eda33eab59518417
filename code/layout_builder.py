"""LayoutBuilder orchestrates partitioning, painting and door placement."""

from __future__ import annotations

import random
from time import perf_counter
from typing import Callable, List, Optional, TypeVar

from connectivity import ConnectivityReport, analyze_connectivity
from door_placer import DoorPlacer
from generation_context import GenerationContext
from layout_config import LayoutConfig
from layout_constants import DEFAULT_FREE_SPACE_BUFFER
from layout_geometry import Rect
from layout_metrics import GenerationMetrics
from layout_models import DoorRecord, GeneratedLayout, Room
from partition_node import PartitionNode
from tile_grid import TileGrid
from tiles import TileKind

T = TypeVar("T")


class LayoutBuilder:
    """Manages the overall process of generating a dungeon layout.

    A builder can be run any number of times. Each run starts from a fresh grid,
    a zeroed node counter and empty door bookkeeping, so runs with the same seed
    produce the same layout.
    """

    def __init__(self, config: LayoutConfig) -> None:
        self.config = config
        self.context = GenerationContext()
        self.door_placer = DoorPlacer(self.context.rng, bridge_components=config.bridge_components)
        self.grid = TileGrid(config.dungeon_bounds)
        self.metrics = GenerationMetrics() if config.collect_metrics else None

    def _run_stage(
        self,
        name: str,
        func: Callable[..., T],
        *args,
        item_count: Optional[Callable[[T], int]] = None,
        **kwargs,
    ) -> T:
        if self.metrics is None:
            return func(*args, **kwargs)

        start = perf_counter()
        result = func(*args, **kwargs)
        duration = perf_counter() - start
        items = item_count(result) if item_count is not None else 0
        self.metrics.record_stage(name, duration, items)
        return result

    def _resolve_seed(self, seed: Optional[int]) -> int:
        if seed is None:
            seed = self.config.random_seed
        if seed is None:
            # Pick a seed and print it, so a bad layout can be reproduced by passing the seed back in.
            seed = random.randint(0, 1000000)
        print(f"Using random seed {seed}")
        return seed

    def generate(self, seed: Optional[int] = None) -> GeneratedLayout:
        """Generates one layout, returning the painted grid, rooms and doors."""
        seed = self._resolve_seed(seed)
        self.context.reset(seed)
        self.door_placer.reset()
        self.grid = TileGrid(self.config.dungeon_bounds)

        # Step 1: Carve the root region into a tree of rooms and corridors.
        root = self._run_stage(
            "partition",
            self._partition,
            item_count=lambda _: self.context.iterations,
        )
        rooms = [Room(index, leaf.bounds) for index, leaf in enumerate(root.collect_leaf_nodes())]
        corridors = root.collect_corridors()
        print(
            f"Partitioned {self.context.iterations} nodes into {len(rooms)} rooms"
            f" and {len(corridors)} corridors."
        )

        # Step 2: Paint the grid, in an order where later layers overwrite earlier ones.
        self._run_stage("paint", self._paint, root, corridors, rooms, item_count=lambda _: len(rooms))

        # Step 3: Cut doors, then check which rooms can actually be reached.
        doors: List[DoorRecord] = self._run_stage(
            "doors", self.door_placer.place_doors, self.grid, rooms, item_count=len
        )
        connectivity: ConnectivityReport = self._run_stage(
            "connectivity",
            analyze_connectivity,
            self.grid,
            rooms,
            item_count=lambda report: report.component_count,
        )
        if connectivity.disconnected_rooms:
            print(
                f"WARNING: {len(connectivity.disconnected_rooms)} rooms are not reachable"
                f" from the main component: {list(connectivity.disconnected_rooms)}"
            )

        return GeneratedLayout(
            config=self.config,
            seed=seed,
            root=root,
            grid=self.grid,
            rooms=rooms,
            corridors=corridors,
            doors=doors,
            rooms_without_doors=self.door_placer.unconnected_room_indices,
            connectivity=connectivity,
            metrics=self.metrics,
        )

    def _partition(self) -> PartitionNode:
        config = self.config
        root = PartitionNode(
            config.root_bounds,
            config.corridor_width,
            config.min_room_size,
            config.adjusted_min_room_size,
            config.split_chance,
            config.min_iterations_before_chance_applies,
            self.context,
            split_grid_step=config.split_grid_step,
        )
        root.split()
        return root

    def _paint(self, root: PartitionNode, corridors: List[Rect], rooms: List[Room]) -> None:
        grid = self.grid
        grid.fill_rectangle(self.config.dungeon_bounds, TileKind.GRASS)
        grid.draw_perimeter_walls(root.bounds)
        for corridor in corridors:
            grid.fill_rectangle(corridor, TileKind.CORRIDOR)
        for room in rooms:
            grid.fill_rectangle(room.bounds, TileKind.FLOOR)
            grid.draw_perimeter_walls(room.bounds)


def generate_layout(
    dungeon_bounds: Rect,
    corridor_width: int,
    min_room_size: int,
    adjusted_min_room_size: int,
    split_chance: float,
    min_iterations_before_chance_applies: int,
    seed: Optional[int],
    free_space_buffer: int = DEFAULT_FREE_SPACE_BUFFER,
) -> GeneratedLayout:
    """Build and run a LayoutBuilder in one call.

    The result unpacks as ``grid, doors = generate_layout(...)``.
    """
    config = LayoutConfig.from_bounds(
        dungeon_bounds,
        corridor_width=corridor_width,
        min_room_size=min_room_size,
        adjusted_min_room_size=adjusted_min_room_size,
        split_chance=split_chance,
        min_iterations_before_chance_applies=min_iterations_before_chance_applies,
        free_space_buffer=free_space_buffer,
        random_seed=seed,
    )
    return LayoutBuilder(config).generate()
