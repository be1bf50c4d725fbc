"""
Behavior module: the Idle / Follow / Returning automaton.

Example usage:
    from npcs_ai.behavior import BehaviorStateMachine, Idle

    machine = BehaviorStateMachine.default("player", anchor=Cell(2, 3))
    state = machine.next_state(Idle(), ctx)
"""

# States first: navigation.steering imports them while this package loads
from .states import (
    BehaviorState,
    Idle,
    Follow,
    Returning,
    state_name,
)

from .conditions import (
    Condition,
    TickContext,
    Not,
    And,
    Or,
    Near,
    PathComplete,
)

from .state_machine import (
    BehaviorStateMachine,
    Transition,
    DEFAULT_FOLLOW_SPEED,
    DEFAULT_FOLLOW_RANGE,
)

__all__ = [
    # States
    "BehaviorState",
    "Idle",
    "Follow",
    "Returning",
    "state_name",
    # Conditions
    "Condition",
    "TickContext",
    "Not",
    "And",
    "Or",
    "Near",
    "PathComplete",
    # State machine
    "BehaviorStateMachine",
    "Transition",
    "DEFAULT_FOLLOW_SPEED",
    "DEFAULT_FOLLOW_RANGE",
]
