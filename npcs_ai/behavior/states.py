"""Behavior states of a pursuing agent. Exactly one is active at a time."""
from dataclasses import dataclass
from typing import Any, Dict, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from npcs_ai.navigation.grid import Cell


@dataclass(frozen=True)
class Idle:
    """Do nothing until the target comes near."""

    def to_dict(self) -> Dict[str, Any]:
        return {"state": "idle"}


@dataclass(frozen=True)
class Follow:
    """Pursue `target` at `speed` world units per second."""
    target: str
    speed: float

    def to_dict(self) -> Dict[str, Any]:
        return {"state": "follow", "target": self.target, "speed": self.speed}


@dataclass(frozen=True)
class Returning:
    """Walk back to the agent's spawn anchor."""
    anchor: "Cell"

    def to_dict(self) -> Dict[str, Any]:
        return {"state": "returning", "anchor": list(self.anchor)}


BehaviorState = Union[Idle, Follow, Returning]


def state_name(state: BehaviorState) -> str:
    return type(state).__name__.lower()
