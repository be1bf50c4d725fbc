"""
A* pathfinding algorithm implementation.

Finds the shortest path through the 4-connected level grid while avoiding
blocked cells. Every step costs 1 and the heuristic is the Manhattan
distance, so the returned path is shortest in cell count.
"""
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from .grid import Cell

if TYPE_CHECKING:
    from npcs_ai.map.obstacle_map import ObstacleMap


@dataclass
class PathfindingConfig:
    """Configuration for A* pathfinding."""
    # Safety limit on node expansions; None runs until the open set is empty.
    # The grid is bounded, so the search terminates either way.
    max_iterations: Optional[int] = None


@dataclass(order=True)
class PriorityNode:
    """Node for priority queue in A*."""
    f_score: int
    order: int  # insertion counter, keeps ties first-in first-out
    position: Cell = field(compare=False)


def path_cost(path: List[Cell]) -> int:
    """Number of unit steps along a path."""
    return max(0, len(path) - 1)


def trim_visited(path: List[Cell], current: Cell) -> List[Cell]:
    """
    Cells still ahead of `current` on `path`.

    If `current` is not on the path (rounding, map edges) the whole path is
    still ahead.
    """
    try:
        index = path.index(current)
    except ValueError:
        return list(path)
    return path[index + 1:]


class AStarPathfinder:
    """
    A* pathfinding over the obstacle map.

    Successors are the four axis neighbors in a fixed order (left, right,
    up, down), so ties always resolve to the same path for the same inputs.
    """

    def __init__(self, config: Optional[PathfindingConfig] = None):
        self.config = config or PathfindingConfig()

    @staticmethod
    def _heuristic(pos: Cell, goal: Cell) -> int:
        return pos.manhattan_distance(goal)

    @staticmethod
    def _reconstruct_path(came_from: Dict[Cell, Cell], current: Cell) -> List[Cell]:
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path

    def find_path(
        self,
        obstacle_map: "ObstacleMap",
        start: Cell,
        goal: Cell,
    ) -> Optional[List[Cell]]:
        """
        Find shortest path from start to goal avoiding obstacles.

        Args:
            obstacle_map: Blocked cells of the current level
            start: Starting cell (usually the agent's cell)
            goal: Goal cell

        Returns:
            Cells from start to goal inclusive, or None if no path exists
        """
        start, goal = Cell(*start), Cell(*goal)

        # A blocked goal can never be entered; skip exhausting the grid
        if goal != start and obstacle_map.is_blocked(*goal):
            return None

        counter = itertools.count()
        open_set: List[PriorityNode] = []
        heapq.heappush(open_set, PriorityNode(self._heuristic(start, goal), next(counter), start))

        came_from: Dict[Cell, Cell] = {}
        g_score: Dict[Cell, int] = {start: 0}
        closed = set()
        iterations = 0

        while open_set:
            if self.config.max_iterations is not None and iterations >= self.config.max_iterations:
                break
            iterations += 1

            current = heapq.heappop(open_set).position
            if current == goal:
                return self._reconstruct_path(came_from, current)
            if current in closed:
                continue  # stale heap entry
            closed.add(current)

            for neighbor in obstacle_map.neighbors(current):
                if neighbor in closed:
                    continue
                tentative_g = g_score[current] + 1
                if tentative_g < g_score.get(neighbor, tentative_g + 1):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative_g
                    f_score = tentative_g + self._heuristic(neighbor, goal)
                    heapq.heappush(open_set, PriorityNode(f_score, next(counter), neighbor))

        # No path found
        return None
