from .entities import Position, Entity, Target, Agent
from .world import World

__all__ = [
    "Position",
    "Entity",
    "Target",
    "Agent",
    "World",
]
