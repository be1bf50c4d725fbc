"""
Per-agent behavior state machine.

The machine is a fixed, ordered transition table. Each tick the table is
evaluated once against a fresh TickContext; the first transition whose
source matches the current state and whose condition holds wins. The
result is a pure function of (state, context): no side effects, at most
one transition per tick.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple, Type

from npcs_ai.navigation.grid import Cell
from .conditions import Condition, Near, PathComplete, TickContext
from .states import BehaviorState, Follow, Idle, Returning

# Default pursuit tuning (world units)
DEFAULT_FOLLOW_SPEED = 250.0
DEFAULT_FOLLOW_RANGE = 100.0


@dataclass(frozen=True)
class Transition:
    source: Type
    condition: Condition
    target: BehaviorState

    def applies(self, state: BehaviorState, ctx: TickContext) -> bool:
        return isinstance(state, self.source) and self.condition.evaluate(ctx)


class BehaviorStateMachine:
    """
    Ordered transition table for one agent.

    Usage:
        machine = BehaviorStateMachine.default("player", anchor=Cell(3, 4))
        state = machine.next_state(state, ctx)
    """

    def __init__(self, transitions: Optional[List[Transition]] = None):
        self._transitions: List[Transition] = list(transitions or [])

    def trans(
        self,
        source: Type,
        condition: Condition,
        target: BehaviorState,
    ) -> "BehaviorStateMachine":
        """Append a transition; earlier transitions take precedence."""
        self._transitions.append(Transition(source, condition, target))
        return self

    @property
    def transitions(self) -> List[Transition]:
        return list(self._transitions)

    def evaluate(
        self,
        state: BehaviorState,
        ctx: TickContext,
    ) -> Tuple[BehaviorState, Optional[Transition]]:
        """
        Compute the state for this tick.

        Returns:
            (next_state, transition) where transition is the one that fired,
            or None if the state is unchanged or was forced to Idle because
            the target no longer exists.
        """
        if ctx.target_missing:
            return Idle(), None

        for transition in self._transitions:
            if transition.applies(state, ctx):
                return transition.target, transition
        return state, None

    def next_state(self, state: BehaviorState, ctx: TickContext) -> BehaviorState:
        return self.evaluate(state, ctx)[0]

    @classmethod
    def default(
        cls,
        target_id: str,
        anchor: Cell,
        follow_speed: float = DEFAULT_FOLLOW_SPEED,
        follow_range: float = DEFAULT_FOLLOW_RANGE,
    ) -> "BehaviorStateMachine":
        """
        Standard pursuit table:

            Idle      --near-->          Follow
            Follow    --not near-->      Returning(anchor)
            Returning --near-->          Follow
            Returning --path complete--> Idle
        """
        near_target = Near(follow_range)
        follow = Follow(target_id, follow_speed)
        return (
            cls()
            .trans(Idle, near_target, follow)
            .trans(Follow, ~near_target, Returning(anchor))
            .trans(Returning, near_target, follow)
            .trans(Returning, PathComplete(), Idle())
        )
