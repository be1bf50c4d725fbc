"""
Tests for the behavior state machine and its trigger conditions.

Usage:
    python test_state_machine.py
"""
from npcs_ai.behavior import (
    And,
    BehaviorStateMachine,
    Follow,
    Idle,
    Near,
    Not,
    Or,
    PathComplete,
    Returning,
    TickContext,
)
from npcs_ai.map import ObstacleMap
from npcs_ai.navigation import Cell, GridTransform

TRANSFORM = GridTransform(tile_size=1, grid_height=5, invert_rows=False)
ANCHOR = Cell(0, 0)


def make_ctx(agent_xy, target_xy, anchor=ANCHOR, obstacle_map=None):
    return TickContext(
        agent_position=agent_xy,
        agent_cell=TRANSFORM.world_to_cell(*agent_xy),
        anchor=anchor,
        target_position=target_xy,
        obstacle_map=obstacle_map or ObstacleMap(5, 5),
        transform=TRANSFORM,
    )


def make_machine(anchor=ANCHOR):
    return BehaviorStateMachine.default("player", anchor=anchor, follow_speed=3.0, follow_range=2.0)


def test_near_is_strict():
    near = Near(2.0)
    assert near.evaluate(make_ctx((0.5, 0.5), (0.5, 1.5)))
    assert not near.evaluate(make_ctx((0.5, 0.5), (0.5, 2.5)))  # exactly 2.0
    assert not near.evaluate(make_ctx((0.5, 0.5), None))


def test_combinators():
    ctx = make_ctx((0.5, 0.5), (0.5, 1.5))
    near, far = Near(2.0), Near(0.5)
    assert Not(far).evaluate(ctx)
    assert (~far).evaluate(ctx)
    assert And(near, ~far).evaluate(ctx)
    assert not (near & far).evaluate(ctx)
    assert Or(far, near).evaluate(ctx)
    assert not (far | Not(near)).evaluate(ctx)


def test_idle_to_follow_exactly_once():
    print("=" * 60)
    print("Testing Idle -> Follow")
    print("=" * 60)

    machine = make_machine()
    ctx = make_ctx((0.5, 0.5), (0.5, 1.5))

    state, transition = machine.evaluate(Idle(), ctx)
    assert state == Follow("player", 3.0)
    assert transition is not None and transition.source is Idle
    print(f"  Idle -> {state}")

    # Same inputs again: stays in Follow, no further transition
    again, transition = machine.evaluate(state, ctx)
    assert again == state
    assert transition is None


def test_evaluation_is_idempotent():
    machine = make_machine()
    ctx = make_ctx((0.5, 0.5), (0.5, 4.5))
    for state in (Idle(), Follow("player", 3.0), Returning(ANCHOR)):
        first = machine.next_state(state, ctx)
        assert machine.next_state(state, ctx) == first


def test_follow_to_returning_when_far():
    machine = make_machine()
    state = machine.next_state(Follow("player", 3.0), make_ctx((1.5, 1.5), (1.5, 4.5)))
    assert state == Returning(ANCHOR)


def test_one_transition_per_tick():
    """Follow -> Returning fires; Returning -> Idle must wait for the next tick."""
    machine = make_machine()
    ctx = make_ctx((0.5, 0.5), (0.5, 4.5))  # at anchor, target far
    state = machine.next_state(Follow("player", 3.0), ctx)
    assert state == Returning(ANCHOR)
    assert machine.next_state(state, ctx) == Idle()


def test_returning_prefers_follow_when_near():
    machine = make_machine()
    # Standing on the anchor and the target is near: Near is listed first
    state = machine.next_state(Returning(ANCHOR), make_ctx((0.5, 0.5), (1.5, 0.5)))
    assert state == Follow("player", 3.0)


def test_returning_stays_until_anchor():
    machine = make_machine()
    # Target about 3.16 units away, agent three cells from the anchor
    state = machine.next_state(Returning(ANCHOR), make_ctx((3.5, 3.5), (4.5, 0.5)))
    assert state == Returning(ANCHOR)


def test_path_complete():
    complete = PathComplete()
    assert complete.evaluate(make_ctx((0.5, 0.5), None))
    assert not complete.evaluate(make_ctx((2.5, 0.5), None))

    # Anchor walled in on all four sides: never complete from outside
    walled = ObstacleMap(5, 5, [Cell(1, 2), Cell(3, 2), Cell(2, 1), Cell(2, 3)])
    assert not complete.evaluate(make_ctx((0.5, 0.5), None, anchor=Cell(2, 2), obstacle_map=walled))


def test_missing_target_forces_idle():
    machine = make_machine()
    for state in (Follow("player", 3.0), Returning(ANCHOR), Idle()):
        next_state, transition = machine.evaluate(state, make_ctx((2.5, 2.5), None))
        assert next_state == Idle()
        assert transition is None


def test_states_serialize():
    assert Idle().to_dict() == {"state": "idle"}
    assert Follow("player", 3.0).to_dict()["target"] == "player"
    assert Returning(Cell(1, 2)).to_dict() == {"state": "returning", "anchor": [1, 2]}


if __name__ == "__main__":
    test_near_is_strict()
    test_combinators()
    test_idle_to_follow_exactly_once()
    test_evaluation_is_idempotent()
    test_follow_to_returning_when_far()
    test_one_transition_per_tick()
    test_returning_prefers_follow_when_near()
    test_returning_stays_until_anchor()
    test_path_complete()
    test_missing_target_forces_idle()
    test_states_serialize()
    print("\nAll state machine tests passed!")
