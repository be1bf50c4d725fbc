"""
Navigation and behavior core for pursuing NPCs.

Sub-packages:
- map: level records and the obstacle map derived from the "Walls" layer
- navigation: grid cells, A* pathfinding and steering
- behavior: the Idle / Follow / Returning state machine
- world: agents and targets
- runtime: the per-tick loop tying it all together
"""

__version__ = "0.1.0"
