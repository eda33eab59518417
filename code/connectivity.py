"""Reachability analysis of a painted layout, built on networkx graphs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from layout_geometry import TilePos
from layout_models import DoorRecord, Room
from tile_grid import TileGrid
from tiles import TileKind


@dataclass(frozen=True)
class ConnectivityReport:
    """Which walkable component each room landed in."""

    component_count: int
    room_components: Dict[int, Optional[int]]
    largest_component_rooms: Tuple[int, ...]
    disconnected_rooms: Tuple[int, ...]

    @property
    def main_component(self) -> Optional[int]:
        """Tile component holding the largest group of rooms, if any room is walkable."""
        if not self.largest_component_rooms:
            return None
        return self.room_components[self.largest_component_rooms[0]]

    @property
    def largest_component_fraction(self) -> float:
        if not self.room_components:
            return 0.0
        return len(self.largest_component_rooms) / len(self.room_components)


def build_tile_graph(grid: TileGrid) -> nx.Graph:
    """Graph whose nodes are walkable tiles and whose edges join 4-neighbours."""
    graph = nx.Graph()
    for pos, kind in grid.iter_cells():
        if not kind.walkable:
            continue
        x, y = pos
        graph.add_node((x, y))
        # Only look back, so each edge is added once.
        for other_x, other_y in ((x - 1, y), (x, y - 1)):
            if grid.in_bounds(other_x, other_y) and grid.get_cell(other_x, other_y).walkable:
                graph.add_edge((x, y), (other_x, other_y))
    return graph


def label_components(grid: TileGrid) -> Tuple[Dict[Tuple[int, int], int], int]:
    """Map every walkable tile to the index of its component, and count the components."""
    graph = build_tile_graph(grid)
    lookup: Dict[Tuple[int, int], int] = {}
    count = 0
    for index, component in enumerate(nx.connected_components(graph)):
        for tile in component:
            lookup[tile] = index
        count += 1
    return lookup, count


def _room_component(room: Room, lookup: Dict[Tuple[int, int], int]) -> Optional[int]:
    for pos in room.bounds.iter_tiles():
        component = lookup.get((pos.x, pos.y))
        if component is not None:
            return component
    return None


def analyze_connectivity(grid: TileGrid, rooms: Sequence[Room]) -> ConnectivityReport:
    """Group rooms by the walkable component that contains their floor.

    Rooms outside the group holding the most rooms are reported as
    disconnected. Ties go to the group containing the lowest room index.
    """
    lookup, component_count = label_components(grid)
    return report_for_rooms(lookup, component_count, rooms)


def report_for_rooms(
    lookup: Dict[Tuple[int, int], int],
    component_count: int,
    rooms: Sequence[Room],
) -> ConnectivityReport:
    """Build a ConnectivityReport from an existing tile labelling."""
    room_components: Dict[int, Optional[int]] = {}
    groups: Dict[Optional[int], List[int]] = {}
    for room in rooms:
        component = _room_component(room, lookup)
        room_components[room.index] = component
        groups.setdefault(component, []).append(room.index)

    largest: Tuple[int, ...] = ()
    candidates = [members for component, members in groups.items() if component is not None]
    if candidates:
        best = max(candidates, key=lambda members: (len(members), -min(members)))
        largest = tuple(sorted(best))

    in_largest = set(largest)
    disconnected = tuple(
        sorted(index for index in room_components if index not in in_largest)
    )
    return ConnectivityReport(
        component_count=component_count,
        room_components=room_components,
        largest_component_rooms=largest,
        disconnected_rooms=disconnected,
    )


def _pairs(members: Sequence[int]) -> Iterable[Tuple[int, int]]:
    for i, room_a in enumerate(members):
        for room_b in members[i + 1:]:
            yield room_a, room_b


def build_room_graph(
    grid: TileGrid,
    rooms: Sequence[Room],
    doors: Sequence[DoorRecord],
) -> nx.Graph:
    """Graph of rooms with an edge wherever one room can walk into another.

    Doors cut between two rooms link them directly. Rooms whose corridor doors
    open onto the same corridor network are linked to each other.
    """
    graph = nx.Graph()
    for room in rooms:
        graph.add_node(room.index)

    lookup, _ = label_components(grid)
    corridor_groups: Dict[int, List[int]] = {}
    for door in doors:
        if door.connected_room_index is not None:
            graph.add_edge(door.room_index, door.connected_room_index)
            continue
        beyond = door.position.offset(door.side.dx, door.side.dy)
        if not grid.in_bounds(beyond.x, beyond.y):
            continue
        if grid.get_cell(beyond.x, beyond.y) is not TileKind.CORRIDOR:
            continue
        component = lookup.get((beyond.x, beyond.y))
        if component is not None:
            corridor_groups.setdefault(component, []).append(door.room_index)

    for members in corridor_groups.values():
        for room_a, room_b in _pairs(sorted(set(members))):
            graph.add_edge(room_a, room_b)

    return graph


def reachable_tiles(grid: TileGrid, start: TilePos) -> set:
    """All walkable tiles reachable from ``start`` (empty if ``start`` is not walkable)."""
    graph = build_tile_graph(grid)
    key = (start.x, start.y)
    if key not in graph:
        return set()
    return set(nx.node_connected_component(graph, key))
