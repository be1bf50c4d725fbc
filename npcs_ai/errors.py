"""
Error kinds raised at the lookup seams of the navigation core.

None of these halt the simulation: the runtime catches them per tick and
per agent, records an event, and carries on. An unreachable goal is not an
error at all; the pathfinder simply returns None.
"""
from typing import Optional


class NavigationError(Exception):
    """Base class for recoverable navigation failures."""


class MapDataMissing(NavigationError):
    """A level is unknown or has no tile layer with the expected identifier."""

    def __init__(self, layer: str, level_iid: Optional[str] = None):
        self.layer = layer
        self.level_iid = level_iid
        where = f" in level {level_iid!r}" if level_iid else ""
        super().__init__(f"Tile layer {layer!r} not found{where}")


class TargetEntityMissing(NavigationError):
    """A pursued target no longer resolves (e.g. it was despawned)."""

    def __init__(self, target_id: str):
        self.target_id = target_id
        super().__init__(f"Target entity {target_id!r} does not exist")
