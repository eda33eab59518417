import pytest

from layout_builder import LayoutBuilder, generate_layout
from layout_config import LayoutConfig
from layout_geometry import Rect
from tiles import TileKind


def _corridor_config(seed: int, **overrides) -> LayoutConfig:
    # adjusted_min_room_size above min_room_size means no region ever falls back to shared walls.
    kwargs = dict(
        width=100,
        height=80,
        corridor_width=6,
        min_room_size=10,
        adjusted_min_room_size=16,
        split_chance=0.0,
        min_iterations_before_chance_applies=0,
        random_seed=seed,
    )
    kwargs.update(overrides)
    return LayoutConfig(**kwargs)


def test_square_dungeon_produces_several_rooms():
    layout = generate_layout(Rect(0, 0, 60, 60), 6, 10, 10, 0.0, 0, seed=11)

    assert layout.root.bounds == Rect(2, 2, 56, 56)
    assert layout.root.depth() >= 2
    assert len(layout.rooms) >= 4
    for room in layout.rooms:
        assert room.bounds.width >= 10
        assert room.bounds.height >= 10
    assert len(layout.doors) >= len(layout.rooms) - len(layout.disconnected_rooms)
    assert layout.seed == 11


def test_result_unpacks_as_grid_and_doors():
    grid, doors = generate_layout(Rect(0, 0, 60, 60), 6, 10, 5, 0.0, 0, seed=3)

    assert grid.bounds == Rect(0, 0, 60, 60)
    assert all(grid.get_cell(door.position.x, door.position.y) is TileKind.DOOR for door in doors)


def test_early_stop_yields_single_doorless_room():
    layout = generate_layout(Rect(0, 0, 60, 60), 6, 10, 5, 1.0, 0, seed=5)

    assert len(layout.rooms) == 1
    assert layout.rooms[0].bounds == Rect(2, 2, 56, 56)
    assert layout.doors == []
    assert layout.rooms_without_doors == (0,)
    assert layout.disconnected_rooms == ()
    assert layout.grid.count(TileKind.FLOOR) == 56 * 56
    assert layout.grid.count(TileKind.CORRIDOR) == 0


def test_outer_area_is_grass_inside_outer_wall():
    layout = LayoutBuilder(_corridor_config(1)).generate()
    grid = layout.grid

    for x in range(grid.bounds.x, grid.bounds.max_x):
        assert grid.get_cell(x, 0) is TileKind.GRASS
        assert grid.get_cell(x, grid.bounds.max_y - 1) is TileKind.GRASS
    for x in range(1, 99):
        assert grid.get_cell(x, 1) is TileKind.WALL
        assert grid.get_cell(x, 78) is TileKind.WALL
    assert grid.count(TileKind.EMPTY) == 0


@pytest.mark.parametrize("seed", range(5))
def test_every_root_cell_is_painted(seed):
    layout = LayoutBuilder(_corridor_config(seed)).generate()
    grid = layout.grid
    interior = {TileKind.FLOOR, TileKind.CORRIDOR, TileKind.WALL, TileKind.DOOR}

    for pos in layout.root.bounds.iter_tiles():
        assert grid.get_cell(pos.x, pos.y) in interior


@pytest.mark.parametrize("seed", range(8))
def test_corridor_doors_open_from_room_onto_corridor(seed):
    layout = LayoutBuilder(_corridor_config(seed)).generate()
    grid = layout.grid
    rooms = {room.index: room for room in layout.rooms}

    positions = layout.door_positions()
    assert len(positions) == len(set(positions))
    assert grid.count(TileKind.DOOR) == len(positions)

    for door in layout.doors:
        assert door.connected_room_index is None
        beyond = door.position.offset(door.side.dx, door.side.dy)
        inward = door.position.offset(-door.side.dx, -door.side.dy)
        assert grid.get_cell(door.position.x, door.position.y) is TileKind.DOOR
        assert grid.get_cell(beyond.x, beyond.y) is TileKind.CORRIDOR
        assert rooms[door.room_index].bounds.contains(inward)
        assert grid.get_cell(inward.x, inward.y) is TileKind.FLOOR


def _early_stop_config(seed: int, **overrides) -> LayoutConfig:
    # Regions stop splitting at random, so corridors of different depths sit side by side.
    kwargs = dict(
        width=120,
        height=80,
        corridor_width=6,
        min_room_size=10,
        adjusted_min_room_size=50,
        split_chance=0.2,
        min_iterations_before_chance_applies=5,
        random_seed=seed,
    )
    kwargs.update(overrides)
    return LayoutConfig(**kwargs)


@pytest.mark.parametrize("seed", range(80))
def test_early_stop_corridor_layouts_are_fully_connected(seed):
    layout = LayoutBuilder(_early_stop_config(seed)).generate()
    grid = layout.grid

    assert not any(node.is_corridor_less and not node.is_leaf() for node in layout.root.iter_nodes())
    assert layout.rooms_without_doors == ()
    assert layout.disconnected_rooms == ()
    assert len(layout.doors) >= len(layout.rooms)
    for door in layout.doors:
        beyond = door.position.offset(door.side.dx, door.side.dy)
        assert door.connected_room_index is None
        assert grid.get_cell(door.position.x, door.position.y) is TileKind.DOOR
        assert grid.get_cell(beyond.x, beyond.y) is TileKind.CORRIDOR


@pytest.mark.parametrize("seed", [12, 14, 27])
def test_higher_split_chance_layouts_are_fully_connected(seed):
    layout = LayoutBuilder(_early_stop_config(seed, split_chance=0.4)).generate()

    assert layout.disconnected_rooms == ()
    assert layout.is_fully_connected


def test_bridging_only_adds_doors_after_the_usual_ones():
    stranded = 0
    for seed in range(80):
        plain = LayoutBuilder(_early_stop_config(seed, bridge_components=False)).generate()
        bridged = LayoutBuilder(_early_stop_config(seed)).generate()

        assert len(plain.doors) == len(plain.rooms)
        assert bridged.doors[: len(plain.doors)] == plain.doors
        assert [room.bounds for room in bridged.rooms] == [room.bounds for room in plain.rooms]
        if plain.disconnected_rooms:
            stranded += 1
            assert len(bridged.doors) > len(plain.doors)

    assert stranded > 0


@pytest.mark.parametrize("seed", range(8))
def test_corridor_layouts_are_fully_connected(seed):
    layout = LayoutBuilder(_corridor_config(seed)).generate()

    assert layout.rooms_without_doors == ()
    assert layout.disconnected_rooms == ()
    assert layout.is_fully_connected
    assert len(layout.doors) == len(layout.rooms)
    assert all(room.has_door for room in layout.rooms)


@pytest.mark.parametrize("seed", range(5))
def test_shared_wall_layouts_report_rather_than_raise(seed):
    config = _corridor_config(seed, adjusted_min_room_size=5)

    layout = LayoutBuilder(config).generate()

    assert set(layout.rooms_without_doors) <= {room.index for room in layout.rooms}
    assert set(layout.disconnected_rooms) <= {room.index for room in layout.rooms}
    for door in layout.doors:
        assert layout.grid.get_cell(door.position.x, door.position.y) is TileKind.DOOR
        beyond = door.position.offset(door.side.dx, door.side.dy)
        inward = door.position.offset(-door.side.dx, -door.side.dy)
        assert layout.grid.get_cell(beyond.x, beyond.y).walkable
        assert layout.grid.get_cell(inward.x, inward.y).walkable


def test_same_seed_reproduces_layout():
    first = LayoutBuilder(_corridor_config(99, adjusted_min_room_size=5)).generate()
    second = LayoutBuilder(_corridor_config(99, adjusted_min_room_size=5)).generate()

    assert first.grid.snapshot() == second.grid.snapshot()
    assert first.doors == second.doors
    assert [room.bounds for room in first.rooms] == [room.bounds for room in second.rooms]


def test_regeneration_resets_state():
    builder = LayoutBuilder(_corridor_config(0, adjusted_min_room_size=5))

    first = builder.generate(seed=21)
    first_snapshot = first.grid.snapshot()
    first_nodes = builder.context.iterations
    builder.generate(seed=4)
    third = builder.generate(seed=21)

    assert third.grid.snapshot() == first_snapshot
    assert builder.context.iterations == first_nodes
    assert third.doors == first.doors
    assert builder.door_placer.doors == third.doors


def test_seed_argument_overrides_config_seed():
    builder = LayoutBuilder(_corridor_config(1))

    layout = builder.generate(seed=77)

    assert layout.seed == 77


def test_missing_seed_is_picked_and_printed(capsys):
    layout = LayoutBuilder(_corridor_config(None)).generate()

    out = capsys.readouterr().out
    assert f"Using random seed {layout.seed}" in out


def test_non_zero_origin_is_supported():
    layout = generate_layout(Rect(-30, 10, 60, 50), 6, 10, 16, 0.0, 0, seed=8)

    assert layout.grid.bounds == Rect(-30, 10, 60, 50)
    assert layout.root.bounds == Rect(-28, 12, 56, 46)
    assert layout.grid.get_cell(-30, 10) is TileKind.GRASS
    assert layout.is_fully_connected


def test_metrics_are_collected_per_stage():
    builder = LayoutBuilder(_corridor_config(2, collect_metrics=True))

    layout = builder.generate()
    snapshot = layout.metrics.snapshot()

    assert set(snapshot) == {"partition", "paint", "doors", "connectivity"}
    assert all(stage["invocations"] == 1 for stage in snapshot.values())
    assert snapshot["partition"]["total_items"] == len(layout.root.collect_all_nodes())
    assert snapshot["paint"]["total_items"] == len(layout.rooms)
    assert snapshot["doors"]["total_items"] == len(layout.doors)


def test_metrics_are_off_by_default(layout_config):
    layout = LayoutBuilder(layout_config).generate()

    assert layout.metrics is None
    assert layout.seed == 1234
    assert layout.is_fully_connected
