"""
Runtime orchestrator for the navigation core.

Flow per tick:
1. Update the level selection from the target positions
2. Get the obstacle map of the active level (cached per level)
3. For every agent, independently:
   a. resolve its target (a missing target forces Idle)
   b. evaluate the behavior state machine once
   c. steer on the post-transition state and emit a movement delta
4. Return the step result

Failures never escape step(): a missing walls layer skips navigation for
the tick, a missing target reverts the agent to Idle, and an unreachable
goal leaves the agent standing still. All are recorded as events.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from npcs_ai.behavior import BehaviorStateMachine, Idle, TickContext, state_name
from npcs_ai.errors import MapDataMissing, TargetEntityMissing
from npcs_ai.map import Level, ObstacleCache, ObstacleMap, WALLS_LAYER
from npcs_ai.navigation import (
    AStarPathfinder,
    GridTransform,
    PathfindingConfig,
    Steering,
    SteeringResult,
    zero_delta,
)
from npcs_ai.world import Agent, World
from .events import Event, EventQueue, EventType

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """Configuration for the runtime loop."""
    tick_duration: float = 1.0 / 60.0  # seconds per tick
    walls_layer: str = WALLS_LAYER
    invert_rows: bool = True  # tile rows are stored top-down
    apply_movement: bool = True  # add deltas to agent positions
    selection_target_id: Optional[str] = None  # drives level selection; None = any target
    enable_logging: bool = True  # keep step history
    pathfinding: PathfindingConfig = field(default_factory=PathfindingConfig)


@dataclass
class StepResult:
    """Result of a single runtime step."""
    tick: int
    movements: Dict[str, np.ndarray]
    states: Dict[str, str]
    steering: Dict[str, SteeringResult]
    events: List[Event]
    skipped: bool = False  # navigation skipped for the whole tick

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "movements": {k: [float(v) for v in d] for k, d in self.movements.items()},
            "states": dict(self.states),
            "steering": {k: r.to_dict() for k, r in self.steering.items()},
            "events": [e.to_dict() for e in self.events],
            "skipped": self.skipped,
        }


class Runtime:
    """
    Main runtime loop driving every agent in a World.

    Usage:
        runtime = Runtime(world)
        while running:
            result = runtime.step()
            for agent_id, delta in result.movements.items():
                ...
    """

    def __init__(self, world: World, config: Optional[RuntimeConfig] = None):
        self.config = config or RuntimeConfig()
        self._world = world

        self._obstacles = ObstacleCache(self.config.walls_layer)
        self._pathfinder = AStarPathfinder(self.config.pathfinding)
        self._steering = Steering(self._pathfinder)
        self._event_queue = EventQueue()

        self._step_history: List[StepResult] = []
        self._tick_events: List[Event] = []
        self._level_revision = world.level_selection.revision

    @property
    def tick(self) -> int:
        return self._world.tick_count

    @property
    def world(self) -> World:
        return self._world

    @property
    def event_queue(self) -> EventQueue:
        return self._event_queue

    @property
    def obstacle_cache(self) -> ObstacleCache:
        return self._obstacles

    def reset(self) -> None:
        self._obstacles.invalidate()
        self._event_queue.pop_all()
        self._step_history.clear()
        self._tick_events.clear()
        self._level_revision = self._world.level_selection.revision

    def step(self) -> StepResult:
        """Advance every agent by one tick."""
        self._tick_events.clear()
        self._update_level_selection()

        movements: Dict[str, np.ndarray] = {}
        steering: Dict[str, SteeringResult] = {}
        skipped = False

        try:
            geometry = self._level_geometry(self._world.current_level)
        except MapDataMissing as e:
            logger.warning("Skipping navigation on tick %d: %s", self.tick, e)
            self._emit_event(EventType.MAP_DATA_MISSING, {
                "layer": e.layer,
                "level": e.level_iid,
            })
            skipped = True
            for agent_id in self._world.agents:
                movements[agent_id] = zero_delta()
        else:
            for agent in list(self._world.agents.values()):
                result = self._update_agent(agent, geometry)
                steering[agent.entity_id] = result
                movements[agent.entity_id] = result.delta

        result = StepResult(
            tick=self.tick,
            movements=movements,
            states={a.entity_id: state_name(a.state) for a in self._world.agents.values()},
            steering=steering,
            events=list(self._tick_events),
            skipped=skipped,
        )

        self._world.tick_count += 1
        if self.config.enable_logging:
            self._step_history.append(result)
        return result

    def _update_level_selection(self) -> None:
        selection = self._world.level_selection
        target_id = self.config.selection_target_id
        targets = (
            [self._world.targets[target_id]]
            if target_id in self._world.targets
            else list(self._world.targets.values())
        )
        for target in targets:
            selection.update(target.position.x, target.position.y)

        if selection.revision != self._level_revision:
            self._level_revision = selection.revision
            self._obstacles.invalidate()
            level = selection.current
            self._emit_event(EventType.LEVEL_CHANGED, {
                "level": level.iid if level is not None else None,
            })

    def _level_geometry(self, level: Optional[Level]) -> Tuple[ObstacleMap, GridTransform]:
        """
        Obstacle map and grid transform of a level.

        Raises:
            MapDataMissing: If there is no level or it lacks the walls layer
        """
        if level is None:
            raise MapDataMissing(self.config.walls_layer)
        obstacle_map = self._obstacles.get(level)
        transform = GridTransform.for_level(
            level, self.config.walls_layer, invert_rows=self.config.invert_rows
        )
        return obstacle_map, transform

    def _agent_geometry(
        self,
        agent: Agent,
        current: Tuple[ObstacleMap, GridTransform],
    ) -> Tuple[ObstacleMap, GridTransform]:
        """
        Geometry of the level the agent belongs to.

        Raises:
            MapDataMissing: If that level is unknown or lacks the walls layer
        """
        level = self._world.level_of(agent)
        current_level = self._world.current_level
        if level is not None and current_level is not None and level.iid == current_level.iid:
            return current
        if level is None:
            raise MapDataMissing(self.config.walls_layer, agent.level_iid)
        return self._level_geometry(level)

    def _update_agent(
        self,
        agent: Agent,
        current: Tuple[ObstacleMap, GridTransform],
    ) -> SteeringResult:
        """Evaluate one agent's state machine on its own level, then steer it."""
        try:
            obstacle_map, transform = self._agent_geometry(agent, current)
        except MapDataMissing as e:
            logger.warning("Holding agent %s on tick %d: %s", agent.entity_id, self.tick, e)
            self._emit_event(EventType.MAP_DATA_MISSING, {
                "agent_id": agent.entity_id,
                "layer": e.layer,
                "level": e.level_iid,
            })
            return SteeringResult(zero_delta(), "no_map")

        target_position = None
        try:
            target = self._world.resolve_target(agent.target_id)
            target_position = target.position.to_tuple()
        except TargetEntityMissing as e:
            if not isinstance(agent.state, Idle):
                logger.debug("Agent %s lost its target: %s", agent.entity_id, e)
                self._emit_event(EventType.TARGET_MISSING, {
                    "agent_id": agent.entity_id,
                    "target_id": e.target_id,
                })

        agent_position = agent.position.to_tuple()
        ctx = TickContext(
            agent_position=agent_position,
            agent_cell=transform.world_to_cell(*agent_position),
            anchor=agent.anchor,
            target_position=target_position,
            obstacle_map=obstacle_map,
            transform=transform,
            pathfinder=self._pathfinder,
        )

        machine = agent.machine or BehaviorStateMachine()
        next_state = machine.next_state(agent.state, ctx)
        if next_state != agent.state:
            logger.debug("Agent %s: %s -> %s", agent.entity_id,
                         state_name(agent.state), state_name(next_state))
            self._emit_event(EventType.STATE_CHANGED, {
                "agent_id": agent.entity_id,
                "from": state_name(agent.state),
                "to": state_name(next_state),
            })
            agent.state = next_state

        result = self._steering.compute(
            agent.state,
            agent_position,
            target_position,
            obstacle_map,
            transform,
            self.config.tick_duration,
            agent.effective_return_speed,
        )

        if result.reason == "no_path":
            logger.debug("Agent %s has no path this tick", agent.entity_id)
            self._emit_event(EventType.NO_PATH, {
                "agent_id": agent.entity_id,
                "state": state_name(agent.state),
            })
        elif self.config.apply_movement and not result.is_zero:
            self._world.apply_movement(agent.entity_id, result.delta)

        return result

    def _emit_event(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Emit an event for this tick."""
        event = Event(event_type=event_type, tick=self.tick, data=data)
        self._tick_events.append(event)
        self._event_queue.push(event)

    def get_state(self) -> Dict[str, Any]:
        """Get complete runtime state (for debugging)."""
        return {
            "tick": self.tick,
            "world": self._world.get_state(),
            "pending_events": self._event_queue.pending_count,
        }

    def get_step_history(self, last_n: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get step history for analysis."""
        history = self._step_history[-last_n:] if last_n else self._step_history
        return [r.to_dict() for r in history]
