"""Cut doors through room walls so the rooms of a painted layout are reachable."""

from __future__ import annotations

import random
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from connectivity import label_components, report_for_rooms
from layout_constants import DOOR_CORNER_MARGIN
from layout_geometry import Rect, Side, TilePos
from layout_models import DoorRecord, Room
from tile_grid import TileGrid
from tiles import TileKind


class AdjacencyType(Enum):
    """How two rooms touch, if they do."""

    NONE = 0
    HORIZONTAL = 1  # Side by side: x-ranges touch, y-ranges overlap.
    VERTICAL = 2  # Stacked: y-ranges touch, x-ranges overlap.


def room_adjacency(room_a: Rect, room_b: Rect) -> AdjacencyType:
    """Classify how two non-overlapping rooms share an edge."""
    adjacent_horizontally = (room_a.x == room_b.max_x or room_a.max_x == room_b.x) and (
        room_a.y < room_b.max_y and room_a.max_y > room_b.y
    )
    if adjacent_horizontally:
        return AdjacencyType.HORIZONTAL
    adjacent_vertically = (room_a.y == room_b.max_y or room_a.max_y == room_b.y) and (
        room_a.x < room_b.max_x and room_a.max_x > room_b.x
    )
    if adjacent_vertically:
        return AdjacencyType.VERTICAL
    return AdjacencyType.NONE


class DoorPlacer:
    """Places one door per room where a corridor is reachable, then stitches the rest.

    Phase 1 gives each room a single door onto a neighbouring corridor. Rooms
    with no corridor-facing wall are queued, and phase 2 repeatedly joins a
    queued room to an adjacent room that already has a door. Phase 2 stops as
    soon as a full pass makes no progress. When ``bridge_components`` is set,
    phase 3 adds corridor doors until every room that can be joined to the main
    walkable component is. Rooms that still have no door are reported through
    ``rooms_without_doors``.
    """

    def __init__(
        self,
        rng: random.Random,
        corner_margin: int = DOOR_CORNER_MARGIN,
        bridge_components: bool = True,
    ) -> None:
        self.rng = rng
        self.corner_margin = corner_margin
        self.bridge_components = bridge_components
        self.rooms_with_doors: List[Room] = []
        self.rooms_without_doors: List[Room] = []
        self.doors: List[DoorRecord] = []

    def reset(self) -> None:
        """Forget every room and door from a previous run."""
        self.rooms_with_doors.clear()
        self.rooms_without_doors.clear()
        self.doors.clear()

    def place_doors(self, grid: TileGrid, rooms: Sequence[Room]) -> List[DoorRecord]:
        """Mutate ``grid`` with doors for ``rooms`` and return the records in placement order."""
        for room in rooms:
            self._place_initial_door(grid, room)
        initial_count = len(self.doors)

        stitched = self._stitch_rooms(grid)
        bridged = self._bridge_components(grid, rooms) if self.bridge_components else 0

        print(
            f"Door placement: {initial_count} corridor doors, {stitched} room-to-room doors, "
            f"{bridged} bridging doors, {len(self.rooms_without_doors)} rooms left without a door."
        )
        return list(self.doors)

    @property
    def unconnected_room_indices(self) -> Tuple[int, ...]:
        return tuple(sorted(room.index for room in self.rooms_without_doors))

    # ------------------------------------------------------------------
    # Phase 1: one door per room onto a corridor
    # ------------------------------------------------------------------
    def find_door_candidates(self, grid: TileGrid, room: Room) -> List[Tuple[TilePos, Side]]:
        """Return every wall cell of ``room`` that backs onto a corridor, with its side."""
        bounds = room.bounds
        margin = self.corner_margin
        candidates: List[Tuple[TilePos, Side]] = []

        for x in range(bounds.x + margin, bounds.max_x - margin):
            top = TilePos(x, bounds.max_y)
            if self._is_valid_door_position(grid, top, Side.TOP):
                candidates.append((top, Side.TOP))
            bottom = TilePos(x, bounds.y - 1)
            if self._is_valid_door_position(grid, bottom, Side.BOTTOM):
                candidates.append((bottom, Side.BOTTOM))

        for y in range(bounds.y + margin, bounds.max_y - margin):
            left = TilePos(bounds.x - 1, y)
            if self._is_valid_door_position(grid, left, Side.LEFT):
                candidates.append((left, Side.LEFT))
            right = TilePos(bounds.max_x, y)
            if self._is_valid_door_position(grid, right, Side.RIGHT):
                candidates.append((right, Side.RIGHT))

        return candidates

    @staticmethod
    def _is_valid_door_position(
        grid: TileGrid,
        position: TilePos,
        side: Side,
        adjacent_kind: TileKind = TileKind.CORRIDOR,
    ) -> bool:
        if grid.get_cell(position.x, position.y) is not TileKind.WALL:
            return False
        return grid.get_cell(position.x + side.dx, position.y + side.dy) is adjacent_kind

    def _place_initial_door(self, grid: TileGrid, room: Room) -> Optional[DoorRecord]:
        candidates = self.find_door_candidates(grid, room)
        if not candidates:
            self.rooms_without_doors.append(room)
            return None
        self.rooms_with_doors.append(room)
        position, side = candidates[self.rng.randrange(len(candidates))]
        return self._cut_door(grid, position, side, room)

    # ------------------------------------------------------------------
    # Phase 2: join doorless rooms to adjacent rooms that have a door
    # ------------------------------------------------------------------
    def _stitch_rooms(self, grid: TileGrid) -> int:
        stitched = 0
        while self.rooms_without_doors:
            self.rng.shuffle(self.rooms_with_doors)
            self.rng.shuffle(self.rooms_without_doors)
            if not self._stitch_one_room(grid):
                break
            stitched += 1
        return stitched

    def _stitch_one_room(self, grid: TileGrid) -> bool:
        for i in range(len(self.rooms_with_doors) - 1, -1, -1):
            room_with_door = self.rooms_with_doors[i]
            for j in range(len(self.rooms_without_doors) - 1, -1, -1):
                room_without_door = self.rooms_without_doors[j]
                adjacency = room_adjacency(room_with_door.bounds, room_without_door.bounds)
                if adjacency is AdjacencyType.NONE:
                    continue
                door = self.place_door_between_rooms(
                    grid, room_with_door, room_without_door, adjacency
                )
                if door is None:
                    continue
                del self.rooms_without_doors[j]
                self.rooms_with_doors.append(room_without_door)
                return True
        return False

    def place_door_between_rooms(
        self,
        grid: TileGrid,
        room_with_door: Room,
        room_without_door: Room,
        adjacency: AdjacencyType,
    ) -> Optional[DoorRecord]:
        """Cut a door in the wall shared by two adjacent rooms.

        The door goes on a random cell of the shared edge, skipping the last
        ``corner_margin`` cells, and only on cells that are still walls. Returns
        None when no such cell exists.
        """
        with_bounds = room_with_door.bounds
        without_bounds = room_without_door.bounds
        margin = self.corner_margin
        line: List[TilePos] = []

        if adjacency is AdjacencyType.HORIZONTAL:
            shared_min = max(with_bounds.y, without_bounds.y)
            shared_max = min(with_bounds.max_y, without_bounds.max_y) - margin
            if with_bounds.max_x == without_bounds.x:
                x = with_bounds.max_x
                side = Side.RIGHT
            else:
                x = with_bounds.x
                side = Side.LEFT
            line = [TilePos(x - 1, y) for y in range(shared_min, shared_max + 1)]
        elif adjacency is AdjacencyType.VERTICAL:
            shared_min = max(with_bounds.x, without_bounds.x)
            shared_max = min(with_bounds.max_x, without_bounds.max_x) - margin
            if with_bounds.max_y == without_bounds.y:
                y = with_bounds.max_y
                side = Side.TOP
            else:
                y = with_bounds.y
                side = Side.BOTTOM
            line = [TilePos(x, y - 1) for x in range(shared_min, shared_max + 1)]
        else:
            return None

        line = [pos for pos in line if grid.get_cell(pos.x, pos.y) is TileKind.WALL]
        if not line:
            return None
        position = line[self.rng.randrange(len(line))]
        return self._cut_door(grid, position, side, room_with_door, room_without_door)

    # ------------------------------------------------------------------
    # Phase 3: extra corridor doors that join walkable components
    # ------------------------------------------------------------------
    def _bridge_components(self, grid: TileGrid, rooms: Sequence[Room]) -> int:
        """Cut extra corridor doors until every room shares the main component.

        A room between two corridors gets one door in phase 1, so the corridor
        on its other side can end up cut off. Each door cut here joins two
        different components, so the loop ends after at most one door per
        component.
        """
        bridged = 0
        while True:
            lookup, component_count = label_components(grid)
            report = report_for_rooms(lookup, component_count, rooms)
            main = report.main_component
            if not report.disconnected_rooms or main is None:
                return bridged

            stranded = {
                report.room_components[index] for index in report.disconnected_rooms
            } - {None}
            bridges = self._find_bridges(grid, rooms, lookup, report.room_components)
            # Prefer doors that join a stranded room straight to the main component.
            choices = [
                (room, position, side)
                for room, position, side, own, beyond in bridges
                if main in (own, beyond) and (own in stranded or beyond in stranded)
            ]
            if not choices:
                # Otherwise hook a stranded room onto a corridor that may lead there later.
                choices = [
                    (room, position, side)
                    for room, position, side, own, beyond in bridges
                    if main not in (own, beyond) and (own in stranded or beyond in stranded)
                ]
            if not choices:
                return bridged

            room, position, side = choices[self.rng.randrange(len(choices))]
            self._cut_door(grid, position, side, room)
            bridged += 1

    def _find_bridges(
        self,
        grid: TileGrid,
        rooms: Sequence[Room],
        lookup: Dict[Tuple[int, int], int],
        room_components: Dict[int, Optional[int]],
    ) -> List[Tuple[Room, TilePos, Side, int, int]]:
        """Corridor door candidates whose corridor lies in another component than the room."""
        bridges: List[Tuple[Room, TilePos, Side, int, int]] = []
        for room in rooms:
            own = room_components.get(room.index)
            if own is None:
                continue
            for position, side in self.find_door_candidates(grid, room):
                beyond = lookup.get((position.x + side.dx, position.y + side.dy))
                if beyond is None or beyond == own:
                    continue
                bridges.append((room, position, side, own, beyond))
        return bridges

    def _cut_door(
        self,
        grid: TileGrid,
        position: TilePos,
        side: Side,
        room: Room,
        other_room: Optional[Room] = None,
    ) -> DoorRecord:
        grid.set_cell(position.x, position.y, TileKind.FLOOR)
        grid.set_cell(position.x, position.y, TileKind.DOOR)
        room.has_door = True
        if other_room is not None:
            other_room.has_door = True
        record = DoorRecord(
            position=position,
            side=side,
            room_index=room.index,
            connected_room_index=other_room.index if other_room is not None else None,
        )
        self.doors.append(record)
        return record
