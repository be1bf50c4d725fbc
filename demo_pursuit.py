"""
Demo script: an enemy chases the player around a walled level, loses
interest when the player walks away, and returns to its post.
Run from project root: python demo_pursuit.py
"""
import argparse
import logging

from npcs_ai.map import LayerInstance, Level, TileInstance, TILE_SIZE
from npcs_ai.navigation import Cell, GridTransform
from npcs_ai.runtime import Runtime, RuntimeConfig
from npcs_ai.world import Position, Target, World

LEVEL = """
................
.######..######.
.#............#.
.#..######....#.
.#.......#....#.
.#.......#....#.
.####....#..###.
.........#......
.........#......
.####....#..###.
.#.......#....#.
.#..######....#.
.#............#.
.######..######.
................
................
"""


def level_from_ascii(text: str, iid: str = "Level_0") -> Level:
    rows = [line for line in text.strip().splitlines() if line]
    height, width = len(rows), len(rows[0])
    tiles = [
        TileInstance(px=(col * TILE_SIZE, row * TILE_SIZE))
        for row, line in enumerate(rows)
        for col, char in enumerate(line)
        if char == "#"
    ]
    return Level(
        iid=iid,
        identifier=iid,
        px_wid=width * TILE_SIZE,
        px_hei=height * TILE_SIZE,
        layer_instances=[
            LayerInstance("Walls", c_wid=width, c_hei=height, auto_layer_tiles=tiles),
        ],
    )


def render(runtime: Runtime, transform: GridTransform) -> str:
    world = runtime.world
    obstacle_map = runtime.obstacle_cache.get(world.current_level)
    rows = [list(line) for line in obstacle_map.to_ascii().splitlines()]

    def mark(cell: Cell, char: str) -> None:
        if obstacle_map.in_bounds(cell.col, cell.row):
            rows[cell.row][cell.col] = char

    for target in world.targets.values():
        mark(transform.world_to_cell(target.position.x, target.position.y), "P")
    for agent in world.agents.values():
        mark(agent.anchor, "a")
        mark(transform.world_to_cell(agent.position.x, agent.position.y), "E")
    return "\n".join("".join(row) for row in rows)


def main():
    parser = argparse.ArgumentParser(description="Pursuit behavior demo")
    parser.add_argument("--ticks", type=int, default=600, help="Ticks to simulate")
    parser.add_argument("--every", type=int, default=60, help="Render every N ticks")
    parser.add_argument("--speed", type=float, default=250.0, help="Enemy follow speed")
    parser.add_argument("--range", type=float, default=100.0, help="Enemy follow distance")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    print("=== Pursuit Demo ===\n")

    level = level_from_ascii(LEVEL)
    world = World([level])
    runtime = Runtime(world, RuntimeConfig(tick_duration=1.0 / 60.0))
    transform = GridTransform.for_level(level)

    spawn_x, spawn_y = transform.cell_to_world(Cell(5, 5))
    world.spawn_agent("enemy_0", spawn_x, spawn_y, "player", transform,
                      follow_speed=args.speed, follow_range=args.range)

    player_x, player_y = transform.cell_to_world(Cell(12, 4))
    world.add_target(Target(Position(player_x, player_y), "player"))

    # Player walks toward the enemy for a while, then runs off to the corner
    half = args.ticks // 2
    for tick in range(args.ticks):
        if tick < half:
            world.move_target("player", -1.0, 0.0)
        else:
            world.move_target("player", 1.5, -1.5)

        result = runtime.step()
        for event in result.events:
            print(f"[tick {event.tick}] {event.event_type.name.lower()}: {event.data}")

        if tick % args.every == 0:
            print(f"\n--- Tick {tick}: enemy is {result.states.get('enemy_0')} ---")
            print(render(runtime, transform))

    print("\nFinal state:")
    for agent in world.agents.values():
        print(f"  {agent.entity_id}: {agent.to_dict()['behavior']} at "
              f"({agent.position.x:.1f}, {agent.position.y:.1f})")


if __name__ == "__main__":
    main()
