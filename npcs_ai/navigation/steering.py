"""
Steering: turn the agent's behavior state into a bounded movement delta.

Per tick the goal cell is chosen from the state, a fresh A* path is planned
from the agent's cell, and the agent steers toward the center of the next
cell on that path. The delta is handed to the kinematic controller, which
resolves collisions; steering never writes positions itself.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from npcs_ai.behavior.states import BehaviorState, Follow, Idle, Returning
from .grid import Cell, GridTransform
from .pathfinding import AStarPathfinder, trim_visited

if TYPE_CHECKING:
    from npcs_ai.map.obstacle_map import ObstacleMap


@dataclass
class SteeringResult:
    """Outcome of one steering computation."""
    delta: np.ndarray
    reason: str  # "idle", "no_path", "no_map", "arrived" or "moving"
    path: Optional[List[Cell]] = None
    waypoint: Optional[Cell] = None
    world_target: Optional[Tuple[float, float]] = None

    @property
    def arrived(self) -> bool:
        return self.reason == "arrived"

    @property
    def is_zero(self) -> bool:
        return not np.any(self.delta)

    def to_dict(self) -> dict:
        return {
            "delta": [float(v) for v in self.delta],
            "reason": self.reason,
            "waypoint": list(self.waypoint) if self.waypoint is not None else None,
            "path_length": len(self.path) if self.path is not None else None,
        }


def zero_delta() -> np.ndarray:
    return np.zeros(2, dtype=np.float64)


def goal_cell_for(state: BehaviorState, target_cell: Optional[Cell]) -> Optional[Cell]:
    """Follow heads for the target's cell, Returning for the anchor, Idle nowhere."""
    if isinstance(state, Follow):
        return target_cell
    if isinstance(state, Returning):
        return state.anchor
    return None


def steer_towards(
    position: Tuple[float, float],
    world_target: Tuple[float, float],
    speed: float,
    tick_duration: float,
) -> np.ndarray:
    """
    Movement of at most speed * tick_duration toward world_target.

    Returns the exact zero vector when position already equals the target.
    """
    offset = np.asarray(world_target, dtype=np.float64) - np.asarray(position, dtype=np.float64)
    distance = float(np.linalg.norm(offset))
    if distance == 0.0:
        return zero_delta()
    limit = speed * tick_duration
    delta = offset / distance * limit
    # Rounding in the division can overshoot the limit by a few ulps
    norm = float(np.linalg.norm(delta))
    if norm > limit:
        delta *= limit / norm
        while float(np.linalg.norm(delta)) > limit:
            delta = np.nextafter(delta, 0.0)
    return delta


@dataclass
class Steering:
    """Plans toward the state's goal and emits the per-tick movement delta."""
    pathfinder: AStarPathfinder = field(default_factory=AStarPathfinder)

    def compute(
        self,
        state: BehaviorState,
        agent_position: Tuple[float, float],
        target_position: Optional[Tuple[float, float]],
        obstacle_map: "ObstacleMap",
        transform: GridTransform,
        tick_duration: float,
        return_speed: float,
    ) -> SteeringResult:
        """
        Args:
            state: Post-transition behavior state
            agent_position: Agent world position this tick
            target_position: Pursued target's world position, None if gone
            obstacle_map: Blocked cells of the agent's level
            transform: World <-> cell conversion for the agent's level
            tick_duration: Seconds simulated by this tick
            return_speed: Speed used while Returning (Follow carries its own)
        """
        if isinstance(state, Idle):
            return SteeringResult(zero_delta(), "idle")

        agent_cell = transform.world_to_cell(*agent_position)
        target_cell = (
            transform.world_to_cell(*target_position)
            if target_position is not None else None
        )
        goal = goal_cell_for(state, target_cell)
        if goal is None:
            return SteeringResult(zero_delta(), "idle")

        path = self.pathfinder.find_path(obstacle_map, agent_cell, goal)
        if path is None:
            return SteeringResult(zero_delta(), "no_path")

        ahead = trim_visited(path, agent_cell)
        if not ahead:
            return SteeringResult(zero_delta(), "arrived", path=path)

        waypoint = ahead[0]
        world_target = transform.cell_to_world(waypoint)
        speed = state.speed if isinstance(state, Follow) else return_speed
        delta = steer_towards(agent_position, world_target, speed, tick_duration)
        return SteeringResult(
            delta, "moving", path=path, waypoint=waypoint, world_target=world_target
        )
