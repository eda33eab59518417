import random

import pytest

from connectivity import analyze_connectivity
from door_placer import AdjacencyType, DoorPlacer, room_adjacency
from layout_geometry import Direction, Rect, Side, TilePos
from layout_models import Room
from tile_grid import TileGrid
from tiles import TileKind


def _paint(grid: TileGrid, background: TileKind, corridors, rooms) -> None:
    grid.fill_rectangle(grid.bounds, background)
    for corridor in corridors:
        grid.fill_rectangle(corridor, TileKind.CORRIDOR)
    for room in rooms:
        grid.fill_rectangle(room.bounds, TileKind.FLOOR)
        grid.draw_perimeter_walls(room.bounds)


@pytest.fixture
def placer() -> DoorPlacer:
    return DoorPlacer(random.Random(0))


@pytest.mark.parametrize(
    "room_a,room_b,expected",
    [
        (Rect(0, 0, 5, 5), Rect(5, 2, 5, 5), AdjacencyType.HORIZONTAL),
        (Rect(5, 2, 5, 5), Rect(0, 0, 5, 5), AdjacencyType.HORIZONTAL),
        (Rect(0, 0, 5, 5), Rect(2, 5, 5, 5), AdjacencyType.VERTICAL),
        (Rect(0, 0, 5, 5), Rect(5, 5, 5, 5), AdjacencyType.NONE),
        (Rect(0, 0, 5, 5), Rect(7, 0, 5, 5), AdjacencyType.NONE),
    ],
)
def test_room_adjacency(room_a, room_b, expected):
    assert room_adjacency(room_a, room_b) is expected


def test_find_door_candidates_scans_all_sides_in_order(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    room = Room(0, Rect(5, 5, 8, 6))
    _paint(grid, TileKind.GRASS, [grid.bounds], [room])

    candidates = placer.find_door_candidates(grid, room)

    assert len(candidates) == 4 + 4 + 2 + 2
    assert candidates[0] == (TilePos(7, 11), Side.TOP)
    assert candidates[1] == (TilePos(7, 4), Side.BOTTOM)
    assert candidates[-1] == (TilePos(13, 8), Side.RIGHT)
    xs = {pos.x for pos, side in candidates if side in (Side.TOP, Side.BOTTOM)}
    ys = {pos.y for pos, side in candidates if side in (Side.LEFT, Side.RIGHT)}
    assert xs == {7, 8, 9, 10}
    assert ys == {7, 8}


def test_door_only_opens_onto_corridor(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    room = Room(0, Rect(5, 5, 8, 6))
    _paint(grid, TileKind.GRASS, [Rect(0, 12, 20, 3)], [room])

    doors = placer.place_doors(grid, [room])

    assert len(doors) == 1
    door = doors[0]
    assert door.side is Side.TOP
    assert door.opening_direction is Direction.SOUTH
    assert door.position.y == 11
    assert 7 <= door.position.x < 11
    assert door.connected_room_index is None
    assert grid.get_cell(door.position.x, door.position.y) is TileKind.DOOR
    assert grid.get_cell(door.position.x, door.position.y + 1) is TileKind.CORRIDOR
    assert room.has_door
    assert placer.rooms_without_doors == []


def test_stitching_side_by_side_rooms(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    left = Room(0, Rect(3, 3, 6, 8))
    right = Room(1, Rect(9, 3, 6, 8))
    _paint(grid, TileKind.GRASS, [Rect(0, 12, 9, 3)], [left, right])

    doors = placer.place_doors(grid, [left, right])

    assert len(doors) == 2
    assert doors[0].room_index == 0
    assert doors[0].side is Side.TOP
    stitched = doors[1]
    assert stitched.room_index == 0
    assert stitched.connected_room_index == 1
    assert stitched.side is Side.RIGHT
    assert stitched.position.x == 8
    assert 3 <= stitched.position.y <= 9
    assert grid.get_cell(7, stitched.position.y) is TileKind.FLOOR
    assert grid.get_cell(9, stitched.position.y) is TileKind.FLOOR
    assert right.has_door
    assert placer.unconnected_room_indices == ()


def test_stitching_stacked_rooms(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    lower = Room(0, Rect(3, 3, 8, 6))
    upper = Room(1, Rect(3, 9, 8, 6))
    _paint(grid, TileKind.GRASS, [Rect(0, 0, 2, 9)], [lower, upper])

    doors = placer.place_doors(grid, [lower, upper])

    assert len(doors) == 2
    assert doors[0].side is Side.LEFT
    stitched = doors[1]
    assert stitched.connected_room_index == 1
    assert stitched.side is Side.TOP
    assert stitched.position.y == 8
    assert 3 <= stitched.position.x <= 9
    assert grid.get_cell(stitched.position.x, 7) is TileKind.FLOOR
    assert grid.get_cell(stitched.position.x, 9) is TileKind.FLOOR


def test_isolated_rooms_are_reported_not_raised(placer, capsys):
    grid = TileGrid(Rect(0, 0, 30, 20))
    rooms = [Room(0, Rect(3, 3, 6, 6)), Room(1, Rect(15, 3, 6, 6))]
    _paint(grid, TileKind.GRASS, [], rooms)

    doors = placer.place_doors(grid, rooms)

    assert doors == []
    assert placer.unconnected_room_indices == (0, 1)
    assert not any(room.has_door for room in rooms)
    assert "2 rooms left without a door" in capsys.readouterr().out


def test_door_between_rooms_skips_cells_that_are_not_walls(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    left = Room(0, Rect(3, 3, 6, 8))
    right = Room(1, Rect(9, 3, 6, 8))
    _paint(grid, TileKind.GRASS, [], [left, right])
    grid.fill_rectangle(Rect(8, 3, 1, 7), TileKind.FLOOR)

    door = placer.place_door_between_rooms(grid, left, right, AdjacencyType.HORIZONTAL)

    assert door is None
    assert grid.count(TileKind.DOOR) == 0


def test_door_between_rooms_keeps_clear_of_far_corner(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    left = Room(0, Rect(3, 3, 6, 8))
    right = Room(1, Rect(9, 3, 6, 8))
    _paint(grid, TileKind.GRASS, [], [left, right])

    positions = set()
    for _ in range(50):
        door = placer.place_door_between_rooms(grid, right, left, AdjacencyType.HORIZONTAL)
        assert door is not None
        assert door.side is Side.LEFT
        positions.add(door.position)
        grid.set_cell(door.position.x, door.position.y, TileKind.WALL)

    assert {pos.x for pos in positions} == {8}
    assert max(pos.y for pos in positions) <= 9


def test_reset_clears_bookkeeping(placer):
    grid = TileGrid(Rect(0, 0, 20, 20))
    room = Room(0, Rect(5, 5, 8, 6))
    _paint(grid, TileKind.GRASS, [grid.bounds], [room])
    placer.place_doors(grid, [room])

    placer.reset()

    assert placer.doors == []
    assert placer.rooms_with_doors == []
    assert placer.rooms_without_doors == []


def _three_rooms_between_two_corridors():
    grid = TileGrid(Rect(0, 0, 42, 20))
    rooms = [
        Room(0, Rect(2, 4, 8, 10)),
        Room(1, Rect(17, 4, 8, 10)),
        Room(2, Rect(32, 4, 8, 10)),
    ]
    _paint(grid, TileKind.GRASS, [Rect(11, 0, 5, 20), Rect(26, 0, 5, 20)], rooms)
    return grid, rooms


def test_middle_room_gets_a_second_door_joining_both_corridors(capsys):
    grid, rooms = _three_rooms_between_two_corridors()
    placer = DoorPlacer(random.Random(3))

    doors = placer.place_doors(grid, rooms)

    assert len(doors) == 4
    bridge = doors[-1]
    assert bridge.room_index == 1
    assert bridge.connected_room_index is None
    assert {door.side for door in doors if door.room_index == 1} == {Side.LEFT, Side.RIGHT}
    beyond = bridge.position.offset(bridge.side.dx, bridge.side.dy)
    assert grid.get_cell(beyond.x, beyond.y) is TileKind.CORRIDOR
    assert analyze_connectivity(grid, rooms).disconnected_rooms == ()
    assert "1 bridging doors" in capsys.readouterr().out


def test_without_bridging_one_corridor_stays_cut_off():
    grid, rooms = _three_rooms_between_two_corridors()
    placer = DoorPlacer(random.Random(3), bridge_components=False)

    doors = placer.place_doors(grid, rooms)

    assert len(doors) == 3
    assert placer.unconnected_room_indices == ()
    assert len(analyze_connectivity(grid, rooms).disconnected_rooms) == 1
