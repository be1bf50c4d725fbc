"""
Trigger conditions for the behavior state machine.

A condition is a boolean predicate over a TickContext, the fresh snapshot
of positions and map data for one agent in one tick. Conditions compose
with Not/And/Or (or the ~, & and | operators).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple, TYPE_CHECKING

from npcs_ai.navigation.grid import Cell, GridTransform
from npcs_ai.navigation.pathfinding import AStarPathfinder, trim_visited

if TYPE_CHECKING:
    from npcs_ai.map.obstacle_map import ObstacleMap


@dataclass
class TickContext:
    """Everything a condition may read about one agent during one tick."""
    agent_position: Tuple[float, float]
    agent_cell: Cell
    anchor: Cell
    target_position: Optional[Tuple[float, float]]
    obstacle_map: "ObstacleMap"
    transform: GridTransform
    pathfinder: AStarPathfinder = field(default_factory=AStarPathfinder)

    @property
    def target_missing(self) -> bool:
        return self.target_position is None

    def distance_to_target(self) -> Optional[float]:
        if self.target_position is None:
            return None
        dx = self.target_position[0] - self.agent_position[0]
        dy = self.target_position[1] - self.agent_position[1]
        return (dx * dx + dy * dy) ** 0.5


class Condition(ABC):
    """Boolean predicate evaluated against a TickContext."""

    @abstractmethod
    def evaluate(self, ctx: TickContext) -> bool:
        pass

    def __call__(self, ctx: TickContext) -> bool:
        return self.evaluate(ctx)

    def __invert__(self) -> "Condition":
        return Not(self)

    def __and__(self, other: "Condition") -> "Condition":
        return And(self, other)

    def __or__(self, other: "Condition") -> "Condition":
        return Or(self, other)


@dataclass(frozen=True)
class Not(Condition):
    inner: Condition

    def evaluate(self, ctx: TickContext) -> bool:
        return not self.inner.evaluate(ctx)


@dataclass(frozen=True)
class And(Condition):
    left: Condition
    right: Condition

    def evaluate(self, ctx: TickContext) -> bool:
        return self.left.evaluate(ctx) and self.right.evaluate(ctx)


@dataclass(frozen=True)
class Or(Condition):
    left: Condition
    right: Condition

    def evaluate(self, ctx: TickContext) -> bool:
        return self.left.evaluate(ctx) or self.right.evaluate(ctx)


@dataclass(frozen=True)
class Near(Condition):
    """True when the target is strictly closer than `range` world units."""
    range: float

    def evaluate(self, ctx: TickContext) -> bool:
        distance = ctx.distance_to_target()
        if distance is None:
            return False
        return distance < self.range


@dataclass(frozen=True)
class PathComplete(Condition):
    """
    True when the agent has nothing left to walk on its way to the anchor.

    The path from the agent's cell to the anchor is planned fresh; it is
    complete when it is a single cell or empty once the visited prefix is
    trimmed. An unreachable anchor never completes.
    """

    def evaluate(self, ctx: TickContext) -> bool:
        path = ctx.pathfinder.find_path(ctx.obstacle_map, ctx.agent_cell, ctx.anchor)
        if path is None:
            return False
        return len(path) == 1 or not trim_visited(path, ctx.agent_cell)
