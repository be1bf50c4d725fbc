"""
Tests for cells and the world <-> grid conversion.

Usage:
    python test_grid.py
"""
from npcs_ai.map import LayerInstance, Level
from npcs_ai.navigation import Cell, GridTransform


def test_cell_value_semantics():
    assert Cell(1, 2) == Cell(1, 2)
    assert len({Cell(1, 2), Cell(1, 2), Cell(2, 1)}) == 2
    assert Cell(0, 0).manhattan_distance(Cell(3, -4)) == 7
    assert Cell(1, 1).neighbors() == [Cell(0, 1), Cell(2, 1), Cell(1, 0), Cell(1, 2)]
    assert Cell(1, 1).is_adjacent(Cell(1, 2))
    assert not Cell(1, 1).is_adjacent(Cell(2, 2))


def test_row_flip():
    transform = GridTransform(tile_size=16, grid_height=16)

    # Bottom-left tile of the world is the last stored row
    assert transform.world_to_cell(8.0, 8.0) == Cell(0, 15)
    assert transform.world_to_cell(8.0, 250.0) == Cell(0, 0)
    assert transform.world_to_cell(17.0, 15.9) == Cell(1, 15)
    assert transform.cell_to_world(Cell(0, 15)) == (8.0, 8.0)
    assert transform.cell_to_world(Cell(2, 0)) == (40.0, 248.0)


def test_conversion_is_consistent_both_ways():
    for transform in (
        GridTransform(tile_size=16, grid_height=16),
        GridTransform(tile_size=16, grid_height=16, invert_rows=False),
        GridTransform(tile_size=1, grid_height=5, origin=(-3.0, 10.0)),
    ):
        for col in range(5):
            for row in range(5):
                cell = Cell(col, row)
                assert transform.world_to_cell(*transform.cell_to_world(cell)) == cell


def test_without_flip_rows_follow_world_y():
    transform = GridTransform(tile_size=1, grid_height=5, invert_rows=False)
    assert transform.world_to_cell(0.5, 1.5) == Cell(0, 1)
    assert transform.cell_to_world(Cell(0, 1)) == (0.5, 1.5)


def test_negative_positions_floor():
    transform = GridTransform(tile_size=16, grid_height=16, invert_rows=False)
    assert transform.world_to_cell(-0.5, -16.5) == Cell(-1, -2)


def test_for_level_uses_layer_metrics():
    level = Level(
        iid="L",
        px_wid=160,
        px_hei=96,
        world_x=320.0,
        world_y=0.0,
        layer_instances=[LayerInstance("Walls", c_wid=10, c_hei=6, grid_size=16)],
    )
    transform = GridTransform.for_level(level)
    assert transform.tile_size == 16.0
    assert transform.grid_height == 6
    assert transform.world_to_cell(328.0, 8.0) == Cell(0, 5)


if __name__ == "__main__":
    test_cell_value_semantics()
    test_row_flip()
    test_conversion_is_consistent_both_ways()
    test_without_flip_rows_follow_world_y()
    test_negative_positions_floor()
    test_for_level_uses_layer_metrics()
    print("\nAll grid tests passed!")
