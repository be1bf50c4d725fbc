"""
Level records handed over by the tile-map collaborator.

These mirror the shape of an LDtk level (layers of auto-tiles with pixel
coordinates) so a loader can pass its parsed data straight through
Level.from_dict. Parsing files is the loader's job, not ours.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from npcs_ai.errors import MapDataMissing

# World units per grid cell in every shipped level
TILE_SIZE = 16

WALLS_LAYER = "Walls"


@dataclass(frozen=True)
class TileInstance:
    """A tile inside a layer; px is measured from the level's top-left corner."""
    px: Tuple[int, int]


@dataclass
class LayerInstance:
    identifier: str
    c_wid: int
    c_hei: int
    grid_size: int = TILE_SIZE
    auto_layer_tiles: List[TileInstance] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayerInstance":
        return cls(
            identifier=data["__identifier"],
            c_wid=data["__cWid"],
            c_hei=data["__cHei"],
            grid_size=data.get("__gridSize", TILE_SIZE),
            auto_layer_tiles=[
                TileInstance(px=(tile["px"][0], tile["px"][1]))
                for tile in data.get("autoLayerTiles", [])
            ],
        )


@dataclass
class Level:
    iid: str
    px_wid: int
    px_hei: int
    identifier: str = ""
    world_x: float = 0.0
    world_y: float = 0.0
    layer_instances: List[LayerInstance] = field(default_factory=list)

    def get_layer(self, identifier: str) -> LayerInstance:
        """Typed layer lookup; fails fast instead of defaulting to empty."""
        for layer in self.layer_instances:
            if layer.identifier == identifier:
                return layer
        raise MapDataMissing(identifier, self.iid)

    def has_layer(self, identifier: str) -> bool:
        return any(layer.identifier == identifier for layer in self.layer_instances)

    def contains(self, x: float, y: float) -> bool:
        """True if the world point lies strictly inside the level bounds."""
        return (
            self.world_x < x < self.world_x + self.px_wid
            and self.world_y < y < self.world_y + self.px_hei
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Level":
        return cls(
            iid=data["iid"],
            identifier=data.get("identifier", ""),
            px_wid=data["pxWid"],
            px_hei=data["pxHei"],
            world_x=data.get("worldX", 0.0),
            world_y=data.get("worldY", 0.0),
            layer_instances=[
                LayerInstance.from_dict(layer)
                for layer in data.get("layerInstances") or []
            ],
        )


class LevelSelection:
    """
    Tracks which level is active.

    The selected level follows a reference position (usually the player):
    whenever that position enters another level's bounds, that level becomes
    current and the revision counter is bumped, which invalidates anything
    derived from the previous level.
    """

    def __init__(self, levels: Optional[List[Level]] = None, index: int = 0):
        self._levels: List[Level] = list(levels or [])
        self._current: Optional[Level] = (
            self._levels[index] if index < len(self._levels) else None
        )
        self._revision = 0

    @property
    def current(self) -> Optional[Level]:
        return self._current

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def levels(self) -> List[Level]:
        return list(self._levels)

    def add_level(self, level: Level) -> None:
        self._levels.append(level)
        if self._current is None:
            self.select(level)

    def select(self, level: Level) -> bool:
        """Make `level` current. Returns True if the selection changed."""
        if self._current is not None and self._current.iid == level.iid:
            return False
        self._current = level
        self._revision += 1
        return True

    def get(self, level_iid: str) -> Optional[Level]:
        """Level with the given iid, or None."""
        for level in self._levels:
            if level.iid == level_iid:
                return level
        return None

    def update(self, x: float, y: float) -> bool:
        """
        Select the level containing (x, y). Returns True on change.

        Where level bounds overlap the last matching level wins.
        """
        match = None
        for level in self._levels:
            if level.contains(x, y):
                match = level
        if match is None:
            return False
        return self.select(match)

    def clear(self) -> None:
        self._levels.clear()
        self._current = None
        self._revision += 1
