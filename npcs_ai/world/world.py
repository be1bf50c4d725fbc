from typing import Dict, List, Optional, Tuple

import numpy as np

from npcs_ai.errors import TargetEntityMissing
from npcs_ai.map.levels import Level, LevelSelection
from npcs_ai.navigation.grid import GridTransform
from .entities import Agent, Position, Target


class World:
    """
    In-memory registry of levels, pursuing agents and their targets.

    Everything here is transient: reloading a level resets it. Movement is
    applied by adding the steering delta to the agent position, standing in
    for the external kinematic controller.
    """

    def __init__(self, levels: Optional[List[Level]] = None):
        self.level_selection = LevelSelection(levels)
        self.agents: Dict[str, Agent] = {}
        self.targets: Dict[str, Target] = {}
        self.tick_count: int = 0

    @property
    def current_level(self) -> Optional[Level]:
        return self.level_selection.current

    def add_level(self, level: Level) -> None:
        self.level_selection.add_level(level)

    def load_level(self, level: Level) -> None:
        """Replace all levels with `level` and drop every entity."""
        self.level_selection.clear()
        self.level_selection.add_level(level)
        self.agents.clear()
        self.targets.clear()
        self.tick_count = 0

    def add_target(self, target: Target) -> Target:
        self.targets[target.entity_id] = target
        return target

    def remove_target(self, target_id: str) -> Optional[Target]:
        return self.targets.pop(target_id, None)

    def add_agent(self, agent: Agent) -> Agent:
        self.agents[agent.entity_id] = agent
        return agent

    def spawn_agent(
        self,
        entity_id: str,
        x: float,
        y: float,
        target_id: str,
        transform: GridTransform,
        **kwargs,
    ) -> Agent:
        """
        Create an agent whose anchor is the cell containing (x, y).

        The agent belongs to the current level unless `level_iid` is given.
        """
        if "level_iid" not in kwargs and self.current_level is not None:
            kwargs["level_iid"] = self.current_level.iid
        agent = Agent.spawn(entity_id, Position(x, y), transform, target_id, **kwargs)
        return self.add_agent(agent)

    def remove_agent(self, agent_id: str) -> Optional[Agent]:
        return self.agents.pop(agent_id, None)

    def level_of(self, agent: Agent) -> Optional[Level]:
        """The level an agent navigates on; unassigned agents use the current one."""
        if agent.level_iid is None:
            return self.current_level
        return self.level_selection.get(agent.level_iid)

    def resolve_target(self, target_id: Optional[str]) -> Target:
        """
        Look up a target by id.

        Raises:
            TargetEntityMissing: If no such target exists
        """
        target = self.targets.get(target_id) if target_id is not None else None
        if target is None:
            raise TargetEntityMissing(str(target_id))
        return target

    def move_target(self, target_id: str, dx: float, dy: float) -> None:
        target = self.resolve_target(target_id)
        target.position = Position(target.position.x + dx, target.position.y + dy)

    def apply_movement(self, agent_id: str, delta: np.ndarray) -> Position:
        agent = self.agents[agent_id]
        agent.position = Position(
            agent.position.x + float(delta[0]),
            agent.position.y + float(delta[1]),
        )
        return agent.position

    def get_entity_positions(self) -> Dict[str, Tuple[float, float]]:
        positions = {t.entity_id: t.position.to_tuple() for t in self.targets.values()}
        positions.update({a.entity_id: a.position.to_tuple() for a in self.agents.values()})
        return positions

    def get_state(self) -> Dict:
        level = self.current_level
        return {
            "tick": self.tick_count,
            "level": level.iid if level is not None else None,
            "agents": [agent.to_dict() for agent in self.agents.values()],
            "targets": [target.to_dict() for target in self.targets.values()],
        }
