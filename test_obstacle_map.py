"""
Tests for level records, wall extraction and the obstacle cache.

Usage:
    python test_obstacle_map.py
"""
import pytest

from npcs_ai.errors import MapDataMissing
from npcs_ai.map import (
    LayerInstance,
    Level,
    LevelSelection,
    ObstacleCache,
    ObstacleMap,
    TileInstance,
    extract_obstacles,
)
from npcs_ai.navigation import Cell


def make_level(iid="Level_0", walls=(), width=16, height=16, grid_size=16, world_x=0.0, world_y=0.0):
    tiles = [TileInstance(px=(col * grid_size, row * grid_size)) for col, row in walls]
    return Level(
        iid=iid,
        px_wid=width * grid_size,
        px_hei=height * grid_size,
        world_x=world_x,
        world_y=world_y,
        layer_instances=[
            LayerInstance("Entities", c_wid=width, c_hei=height, grid_size=grid_size),
            LayerInstance("Walls", c_wid=width, c_hei=height, grid_size=grid_size,
                          auto_layer_tiles=tiles),
        ],
    )


def test_extract_walls_divides_by_tile_size():
    level = Level(
        iid="Level_0",
        px_wid=256,
        px_hei=256,
        layer_instances=[
            LayerInstance("Walls", c_wid=16, c_hei=16, auto_layer_tiles=[
                TileInstance(px=(0, 0)),
                TileInstance(px=(16, 0)),
                TileInstance(px=(32, 48)),
            ]),
        ],
    )
    obstacle_map = extract_obstacles(level)

    assert obstacle_map.cells == {Cell(0, 0), Cell(1, 0), Cell(2, 3)}
    assert obstacle_map.width == 16 and obstacle_map.height == 16
    assert obstacle_map.level_iid == "Level_0"
    assert Cell(2, 3) in obstacle_map
    assert Cell(3, 2) not in obstacle_map
    print(repr(obstacle_map))


def test_missing_walls_layer_raises():
    level = Level(
        iid="Level_1",
        px_wid=64,
        px_hei=64,
        layer_instances=[LayerInstance("Entities", c_wid=4, c_hei=4)],
    )
    with pytest.raises(MapDataMissing) as excinfo:
        extract_obstacles(level)
    assert excinfo.value.layer == "Walls"
    assert excinfo.value.level_iid == "Level_1"


def test_level_from_dict():
    data = {
        "iid": "abc",
        "identifier": "Level_0",
        "pxWid": 80,
        "pxHei": 48,
        "worldX": 0,
        "worldY": 0,
        "layerInstances": [
            {
                "__identifier": "Walls",
                "__gridSize": 16,
                "__cWid": 5,
                "__cHei": 3,
                "autoLayerTiles": [{"px": [16, 32], "src": [0, 0]}],
            }
        ],
    }
    level = Level.from_dict(data)
    assert level.has_layer("Walls")
    assert extract_obstacles(level).cells == {Cell(1, 2)}


def test_neighbors_order_and_bounds():
    obstacle_map = ObstacleMap(3, 3, [Cell(2, 1)])

    assert obstacle_map.neighbors(Cell(1, 1)) == [Cell(0, 1), Cell(1, 0), Cell(1, 2)]
    # Corner: left and up fall outside the grid
    assert obstacle_map.neighbors(Cell(0, 0)) == [Cell(1, 0), Cell(0, 1)]
    assert obstacle_map.is_blocked(-1, 0)
    assert obstacle_map.is_blocked(0, 3)
    assert obstacle_map.is_passable(0, 0)


def test_walls_outside_grid_are_ignored():
    obstacle_map = ObstacleMap(2, 2, [Cell(0, 0), Cell(5, 5)])
    assert obstacle_map.cells == {Cell(0, 0)}
    assert len(obstacle_map) == 1


def test_grid_is_read_only():
    obstacle_map = ObstacleMap(2, 2)
    with pytest.raises(ValueError):
        obstacle_map.grid[0, 0] = True


def test_ascii_round_trip_view():
    text = "#..\n.#.\n..#"
    obstacle_map = ObstacleMap.from_ascii(text)
    assert obstacle_map.to_ascii() == text
    assert obstacle_map.to_ascii([Cell(1, 0)]).splitlines()[0] == "#*."


def test_cache_keeps_one_map_per_level():
    cache = ObstacleCache()
    level_a = make_level("A", walls=[(1, 1)])
    level_b = make_level("B", walls=[(2, 2)])

    first = cache.get(level_a)
    assert cache.get(level_a) is first
    assert cache.builds == 1

    second = cache.get(level_b)
    assert second.cells == {Cell(2, 2)}
    assert cache.builds == 2

    # Going back to A reuses its map
    assert cache.get(level_a) is first
    assert cache.builds == 2

    cache.invalidate("B")
    assert "A" in cache and "B" not in cache
    cache.get(level_b)
    assert cache.builds == 3

    cache.invalidate()
    assert "A" not in cache
    cache.get(level_a)
    assert cache.builds == 4


def test_cache_does_not_remember_failures():
    cache = ObstacleCache()
    broken = Level(iid="broken", px_wid=16, px_hei=16)
    for _ in range(2):
        with pytest.raises(MapDataMissing):
            cache.get(broken)
    assert cache.builds == 0


def test_level_selection_follows_position():
    level_a = make_level("A", width=4, height=4)
    level_b = make_level("B", width=4, height=4, world_x=64.0)
    selection = LevelSelection([level_a, level_b])

    assert selection.current is level_a
    revision = selection.revision

    # Inside A: no change
    assert not selection.update(10.0, 10.0)
    assert selection.revision == revision

    # Into B
    assert selection.update(70.0, 10.0)
    assert selection.current is level_b
    assert selection.revision == revision + 1

    # On the boundary: strictly inside neither, selection stays
    assert not selection.update(64.0, 10.0)
    assert selection.current is level_b


def test_level_selection_overlap_last_match_wins():
    outer = make_level("outer", width=8, height=8)
    inner = make_level("inner", width=4, height=4, world_x=32.0, world_y=32.0)
    selection = LevelSelection([outer, inner])

    assert selection.update(40.0, 40.0)
    assert selection.current is inner

    # Only the outer level contains this point
    assert selection.update(10.0, 10.0)
    assert selection.current is outer
    assert selection.get("inner") is inner
    assert selection.get("missing") is None


if __name__ == "__main__":
    test_extract_walls_divides_by_tile_size()
    test_missing_walls_layer_raises()
    test_level_from_dict()
    test_neighbors_order_and_bounds()
    test_walls_outside_grid_are_ignored()
    test_grid_is_read_only()
    test_ascii_round_trip_view()
    test_cache_keeps_one_map_per_level()
    test_cache_does_not_remember_failures()
    test_level_selection_follows_position()
    test_level_selection_overlap_last_match_wins()
    print("\nAll obstacle map tests passed!")
