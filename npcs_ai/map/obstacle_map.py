"""
Grid-based obstacle map for pathfinding.

Derives the set of blocked cells for a level from its "Walls" tile layer.
The map is immutable once built so it can be shared read-only by every
agent during a tick.
"""
import logging
from typing import Dict, Iterable, List, Optional, FrozenSet

import numpy as np

from npcs_ai.navigation.grid import Cell
from .levels import Level, WALLS_LAYER

logger = logging.getLogger(__name__)


class ObstacleMap:
    """
    Blocked cells of one level.

    Backed by a (height, width) boolean grid indexed as grid[row, col].
    Cells outside the grid count as blocked, which bounds every search to
    the level.
    """

    def __init__(
        self,
        width: int,
        height: int,
        blocked: Iterable[Cell] = (),
        level_iid: Optional[str] = None,
    ):
        self.width = width
        self.height = height
        self.level_iid = level_iid

        self._grid = np.zeros((height, width), dtype=bool)
        for col, row in blocked:
            if 0 <= col < width and 0 <= row < height:
                self._grid[row, col] = True
            else:
                logger.debug("Ignoring wall cell (%d, %d) outside %dx%d grid",
                             col, row, width, height)
        self._grid.setflags(write=False)

    @property
    def grid(self) -> np.ndarray:
        """Read-only view of the blocked grid, indexed [row, col]."""
        return self._grid

    @property
    def cells(self) -> FrozenSet[Cell]:
        rows, cols = np.nonzero(self._grid)
        return frozenset(Cell(int(c), int(r)) for r, c in zip(rows, cols))

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def is_blocked(self, col: int, row: int) -> bool:
        """Check if a cell is blocked. Out of bounds is blocked."""
        if not self.in_bounds(col, row):
            return True
        return bool(self._grid[row, col])

    def is_passable(self, col: int, row: int) -> bool:
        return not self.is_blocked(col, row)

    def __contains__(self, cell: object) -> bool:
        if not isinstance(cell, tuple) or len(cell) != 2:
            return False
        col, row = cell
        return self.in_bounds(col, row) and bool(self._grid[row, col])

    def __len__(self) -> int:
        return int(self._grid.sum())

    def neighbors(self, cell: Cell) -> List[Cell]:
        """Passable axis neighbors of `cell` in left, right, up, down order."""
        return [n for n in cell.neighbors() if self.is_passable(n.col, n.row)]

    def to_ascii(self, path: Optional[Iterable[Cell]] = None) -> str:
        """
        ASCII view of the map, top row first.

        '#' blocked, '*' path cell, '.' free.
        """
        path_set = set(path) if path else set()
        lines = []
        for row in range(self.height):
            line = ""
            for col in range(self.width):
                if (col, row) in path_set:
                    line += "*"
                elif self._grid[row, col]:
                    line += "#"
                else:
                    line += "."
            lines.append(line)
        return "\n".join(lines)

    @classmethod
    def from_ascii(cls, text: str, level_iid: Optional[str] = None) -> "ObstacleMap":
        """Build a map from rows of '#' (blocked) and '.' (free), top row first."""
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        height = len(rows)
        width = max(len(line) for line in rows) if rows else 0
        blocked = [
            Cell(col, row)
            for row, line in enumerate(rows)
            for col, char in enumerate(line)
            if char == "#"
        ]
        return cls(width, height, blocked, level_iid=level_iid)

    def __repr__(self) -> str:
        return (
            f"ObstacleMap(level={self.level_iid!r}, "
            f"grid_size={self.width}x{self.height}, "
            f"blocked={len(self)}/{self.width * self.height})"
        )


def extract_obstacles(level: Level, layer_identifier: str = WALLS_LAYER) -> ObstacleMap:
    """
    Derive the obstacle map of a level from its wall tiles.

    Each tile's pixel coordinate is divided by the layer's grid size. Pixel
    coordinates are top-down, so the resulting rows are already in grid
    space (row 0 at the top).

    Raises:
        MapDataMissing: If the level has no layer named `layer_identifier`
    """
    layer = level.get_layer(layer_identifier)
    blocked = [
        Cell(tile.px[0] // layer.grid_size, tile.px[1] // layer.grid_size)
        for tile in layer.auto_layer_tiles
    ]
    return ObstacleMap(layer.c_wid, layer.c_hei, blocked, level_iid=level.iid)


class ObstacleCache:
    """
    Caches obstacle maps by level iid.

    A level's map is built the first time it is asked for and reused until
    invalidated; a failed extraction is not cached, so the next tick retries.
    """

    def __init__(self, layer_identifier: str = WALLS_LAYER):
        self.layer_identifier = layer_identifier
        self._maps: Dict[str, ObstacleMap] = {}
        self.builds = 0

    def get(self, level: Level) -> ObstacleMap:
        obstacle_map = self._maps.get(level.iid)
        if obstacle_map is not None:
            return obstacle_map

        obstacle_map = extract_obstacles(level, self.layer_identifier)
        self._maps[level.iid] = obstacle_map
        self.builds += 1
        logger.debug("Built %r", obstacle_map)
        return obstacle_map

    def invalidate(self, level_iid: Optional[str] = None) -> None:
        """Drop the map of one level, or of every level when no iid is given."""
        if level_iid is None:
            self._maps.clear()
        else:
            self._maps.pop(level_iid, None)

    def __contains__(self, level_iid: str) -> bool:
        return level_iid in self._maps
