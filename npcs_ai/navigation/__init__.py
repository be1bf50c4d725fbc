"""
Navigation module: grid cells, A* pathfinding and steering.

Example usage:
    from npcs_ai.navigation import AStarPathfinder, Cell, GridTransform, Steering

    transform = GridTransform(tile_size=16, grid_height=16)
    path = AStarPathfinder().find_path(obstacle_map, Cell(0, 0), Cell(5, 3))

    steering = Steering()
    result = steering.compute(state, npc_xy, player_xy, obstacle_map,
                              transform, tick_duration=1 / 60, return_speed=250.0)
    controller_translation += result.delta
"""

# Grid cells and coordinate conversion
from .grid import (
    Cell,
    GridTransform,
)

# A* pathfinding
from .pathfinding import (
    AStarPathfinder,
    PathfindingConfig,
    path_cost,
    trim_visited,
)

# Steering
from .steering import (
    Steering,
    SteeringResult,
    goal_cell_for,
    steer_towards,
    zero_delta,
)

__all__ = [
    # Grid
    "Cell",
    "GridTransform",
    # Pathfinding
    "AStarPathfinder",
    "PathfindingConfig",
    "path_cost",
    "trim_visited",
    # Steering
    "Steering",
    "SteeringResult",
    "goal_cell_for",
    "steer_towards",
    "zero_delta",
]
