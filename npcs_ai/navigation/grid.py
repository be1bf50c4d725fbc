"""
Grid cells and the conversion between world space and grid space.

Tile data is stored top-down (row 0 is the top of the level) while world
space has Y pointing up, so rows are flipped relative to world Y. Both
directions of the conversion live in GridTransform so the flip is applied
identically when deriving cells from positions and when turning waypoints
back into world points.
"""
import math
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from npcs_ai.map.levels import Level


class Cell(NamedTuple):
    """One grid tile, identified by (column, row)."""
    col: int
    row: int

    def manhattan_distance(self, other: "Cell") -> int:
        return abs(self.col - other.col) + abs(self.row - other.row)

    def neighbors(self) -> List["Cell"]:
        """Axis neighbors in fixed order: left, right, up, down."""
        return [
            Cell(self.col - 1, self.row),
            Cell(self.col + 1, self.row),
            Cell(self.col, self.row - 1),
            Cell(self.col, self.row + 1),
        ]

    def is_adjacent(self, other: "Cell") -> bool:
        return self.manhattan_distance(other) == 1


@dataclass(frozen=True)
class GridTransform:
    """
    Bidirectional world <-> cell conversion for one level.

    Args:
        tile_size: World units per cell edge
        grid_height: Number of rows in the level grid (used by the row flip)
        origin: World position of the level's bottom-left corner
        invert_rows: Flip rows so that row 0 is the top of the level
    """
    tile_size: float = 16.0
    grid_height: int = 16
    origin: Tuple[float, float] = (0.0, 0.0)
    invert_rows: bool = True

    def _flip(self, row: int) -> int:
        if self.invert_rows:
            return self.grid_height - row - 1
        return row

    def world_to_cell(self, x: float, y: float) -> Cell:
        """Convert a world position to the cell that contains it."""
        col = math.floor((x - self.origin[0]) / self.tile_size)
        raw_row = math.floor((y - self.origin[1]) / self.tile_size)
        return Cell(col, self._flip(raw_row))

    def cell_to_world(self, cell: Cell) -> Tuple[float, float]:
        """Convert a cell to the world position of its center."""
        raw_row = self._flip(cell.row)
        x = (cell.col + 0.5) * self.tile_size + self.origin[0]
        y = (raw_row + 0.5) * self.tile_size + self.origin[1]
        return x, y

    @classmethod
    def for_level(
        cls,
        level: "Level",
        layer_identifier: str = "Walls",
        invert_rows: bool = True,
    ) -> "GridTransform":
        """Build the transform from a level's layer metrics and world offset."""
        layer = level.get_layer(layer_identifier)
        return cls(
            tile_size=float(layer.grid_size),
            grid_height=layer.c_hei,
            origin=(level.world_x, level.world_y),
            invert_rows=invert_rows,
        )
