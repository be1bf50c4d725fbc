"""
Map module: level records and the obstacle map derived from them.

Example usage:
    from npcs_ai.map import Level, ObstacleCache

    level = Level.from_dict(ldtk_level_dict)
    cache = ObstacleCache()
    obstacle_map = cache.get(level)  # raises MapDataMissing without "Walls"
"""

from .levels import (
    TileInstance,
    LayerInstance,
    Level,
    LevelSelection,
    TILE_SIZE,
    WALLS_LAYER,
)

from .obstacle_map import (
    ObstacleMap,
    ObstacleCache,
    extract_obstacles,
)

__all__ = [
    # Levels
    "TileInstance",
    "LayerInstance",
    "Level",
    "LevelSelection",
    "TILE_SIZE",
    "WALLS_LAYER",
    # Obstacle map
    "ObstacleMap",
    "ObstacleCache",
    "extract_obstacles",
]
