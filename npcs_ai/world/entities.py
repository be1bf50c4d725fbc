from dataclasses import dataclass, field
from typing import Optional, Tuple

from npcs_ai.behavior.state_machine import (
    BehaviorStateMachine,
    DEFAULT_FOLLOW_RANGE,
    DEFAULT_FOLLOW_SPEED,
)
from npcs_ai.behavior.states import BehaviorState, Idle, state_name
from npcs_ai.navigation.grid import Cell, GridTransform


@dataclass
class Position:
    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def copy(self) -> "Position":
        return Position(self.x, self.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Entity:
    position: Position
    entity_id: str

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "position": self.position.to_dict(),
        }


@dataclass
class Target(Entity):
    """Something agents pursue, typically the player."""

    def to_dict(self) -> dict:
        base = super().to_dict()
        base["type"] = "target"
        return base


@dataclass
class Agent(Entity):
    """
    A pursuing NPC.

    The anchor is the cell the agent spawned in, inside level `level_iid`;
    Returning walks back to it. Agents only ever path on their own level.
    The target is referenced by id only and resolved every tick.
    """
    anchor: Cell = Cell(0, 0)
    level_iid: Optional[str] = None  # level the anchor belongs to
    target_id: Optional[str] = None
    follow_speed: float = DEFAULT_FOLLOW_SPEED  # world units per second
    follow_range: float = DEFAULT_FOLLOW_RANGE  # world units
    return_speed: Optional[float] = None  # defaults to follow_speed
    state: BehaviorState = field(default_factory=Idle)
    machine: Optional[BehaviorStateMachine] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.anchor = Cell(*self.anchor)
        if self.machine is None and self.target_id is not None:
            self.machine = BehaviorStateMachine.default(
                self.target_id,
                anchor=self.anchor,
                follow_speed=self.follow_speed,
                follow_range=self.follow_range,
            )

    @classmethod
    def spawn(
        cls,
        entity_id: str,
        position: Position,
        transform: GridTransform,
        target_id: str,
        **kwargs,
    ) -> "Agent":
        """Create an agent anchored at the cell containing its spawn position."""
        anchor = transform.world_to_cell(position.x, position.y)
        return cls(
            position=position,
            entity_id=entity_id,
            anchor=anchor,
            target_id=target_id,
            **kwargs,
        )

    @property
    def effective_return_speed(self) -> float:
        return self.return_speed if self.return_speed is not None else self.follow_speed

    def to_dict(self) -> dict:
        base = super().to_dict()
        base["type"] = "agent"
        base["anchor"] = list(self.anchor)
        base["level_iid"] = self.level_iid
        base["target_id"] = self.target_id
        base["follow_speed"] = self.follow_speed
        base["follow_range"] = self.follow_range
        base["state"] = state_name(self.state)
        base["behavior"] = self.state.to_dict()
        return base
