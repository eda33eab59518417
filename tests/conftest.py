import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from generation_context import GenerationContext
from layout_config import LayoutConfig
from layout_geometry import Rect
from partition_node import PartitionNode
from tile_grid import TileGrid


@pytest.fixture
def layout_config() -> LayoutConfig:
    return LayoutConfig(
        width=60,
        height=60,
        corridor_width=6,
        min_room_size=10,
        adjusted_min_room_size=16,
        split_chance=0.0,
        min_iterations_before_chance_applies=0,
        random_seed=1234,
    )


@pytest.fixture
def make_context() -> Callable[..., GenerationContext]:
    def _make_context(seed: int = 0) -> GenerationContext:
        return GenerationContext.seeded(seed)

    return _make_context


@pytest.fixture
def make_node(make_context) -> Callable[..., PartitionNode]:
    def _make_node(
        bounds: Rect = Rect(0, 0, 60, 60),
        *,
        corridor_width: int = 6,
        min_room_size: int = 10,
        adjusted_min_room_size: int = 5,
        split_chance: float = 0.0,
        min_iterations_before_chance_applies: int = 0,
        seed: int = 0,
        context: Optional[GenerationContext] = None,
    ) -> PartitionNode:
        return PartitionNode(
            bounds,
            corridor_width,
            min_room_size,
            adjusted_min_room_size,
            split_chance,
            min_iterations_before_chance_applies,
            context if context is not None else make_context(seed),
        )

    return _make_node


@pytest.fixture
def small_grid() -> TileGrid:
    return TileGrid(Rect(0, 0, 20, 20))
