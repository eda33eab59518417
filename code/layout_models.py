"""Core dataclasses produced by layout generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from layout_geometry import Direction, Rect, Side, TilePos

if TYPE_CHECKING:
    from connectivity import ConnectivityReport
    from layout_config import LayoutConfig
    from layout_metrics import GenerationMetrics
    from partition_node import PartitionNode
    from tile_grid import TileGrid


@dataclass
class Room:
    """A leaf partition's bounds, as seen by door placement."""

    index: int
    bounds: Rect
    has_door: bool = False

    @property
    def x(self) -> int:
        return self.bounds.x

    @property
    def y(self) -> int:
        return self.bounds.y

    @property
    def max_x(self) -> int:
        return self.bounds.max_x

    @property
    def max_y(self) -> int:
        return self.bounds.max_y


@dataclass(frozen=True)
class DoorRecord:
    """A door cut through the ``side`` wall of room ``room_index``."""

    position: TilePos
    side: Side
    room_index: int
    connected_room_index: Optional[int] = None  # Set when the door joins two rooms directly.

    @property
    def opening_direction(self) -> Direction:
        return self.side.opening_direction


@dataclass
class GeneratedLayout:
    """Everything one generation run produced."""

    config: LayoutConfig
    seed: int
    root: PartitionNode
    grid: TileGrid
    rooms: List[Room]
    corridors: List[Rect]
    doors: List[DoorRecord]
    rooms_without_doors: Tuple[int, ...]
    connectivity: ConnectivityReport
    metrics: Optional[GenerationMetrics] = field(default=None, repr=False)

    def __iter__(self) -> Iterator:
        # Allows ``grid, doors = generate_layout(...)``.
        yield self.grid
        yield self.doors

    @property
    def disconnected_rooms(self) -> Tuple[int, ...]:
        return self.connectivity.disconnected_rooms

    @property
    def is_fully_connected(self) -> bool:
        return not self.connectivity.disconnected_rooms

    def door_positions(self) -> List[TilePos]:
        return [door.position for door in self.doors]
