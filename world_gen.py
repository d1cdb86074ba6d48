# world_gen.py
import random
from typing import Dict, List, Optional

from world_store import Block, BlockType, Coord

WORLD_RADIUS = 20  # ground spans -WORLD_RADIUS..WORLD_RADIUS on x and z
GROUND_Y = -1
BUMP_COUNT = 40
TREE_COUNT = 6
LEAF_SKIP_CHANCE = 0.2

# Leaf offsets relative to the top of the trunk.
LEAF_PATTERN = [
    (dx, dy, dz)
    for dy in (0, 1)
    for dx in range(-2, 3)
    for dz in range(-2, 3)
    if (dx, dz) != (0, 0) and abs(dx) + abs(dz) <= 3 - dy
] + [(0, 1, 0), (0, 2, 0), (1, 2, 0), (-1, 2, 0), (0, 2, 1), (0, 2, -1)]


def _set(blocks: Dict[Coord, Block], x, y, z, block_type):
    # first placement at a coordinate wins, matching the store's merge rule
    if (x, y, z) not in blocks:
        blocks[(x, y, z)] = Block(x, y, z, block_type)


def _place_ground(blocks):
    for x in range(-WORLD_RADIUS, WORLD_RADIUS + 1):
        for z in range(-WORLD_RADIUS, WORLD_RADIUS + 1):
            _set(blocks, x, GROUND_Y, z, BlockType.GRASS)


def _place_landmarks(blocks):
    # Brick hut with a glass window, north-east of spawn.
    hx, hz, width, height = 8, 8, 4, 3
    for dx in range(width):
        for dz in range(width):
            if dx in (0, width - 1) or dz in (0, width - 1):
                for dy in range(height):
                    block_type = BlockType.BRICK
                    if dy == 1 and dz == 0 and dx == 2:
                        block_type = BlockType.GLASS
                    if dy < 2 and dz == 0 and dx == 1:
                        continue  # doorway
                    _set(blocks, hx + dx, dy, hz + dz, block_type)
            _set(blocks, hx + dx, height, hz + dz, BlockType.BRICK)

    # Stone pillar.
    for dy in range(6):
        _set(blocks, -10, dy, -10, BlockType.STONE)

    # Sand pad.
    for dx in range(3):
        for dz in range(3):
            _set(blocks, -12 + dx, 0, 10 + dz, BlockType.SAND)


def _place_bumps(blocks, rng):
    for _ in range(BUMP_COUNT):
        x = rng.randint(-WORLD_RADIUS + 1, WORLD_RADIUS - 1)
        z = rng.randint(-WORLD_RADIUS + 1, WORLD_RADIUS - 1)
        if (x, 0, z) in blocks:
            continue
        block_type = rng.choice((BlockType.DIRT, BlockType.STONE))
        _set(blocks, x, 0, z, block_type)
        if rng.random() < 0.25:
            _set(blocks, x, 1, z, block_type)


def _place_tree(blocks, rng, x, z):
    trunk_height = rng.randint(3, 5)
    for dy in range(trunk_height):
        _set(blocks, x, dy, z, BlockType.WOOD)
    top = trunk_height - 1
    for dx, dy, dz in LEAF_PATTERN:
        if rng.random() < LEAF_SKIP_CHANCE:
            continue
        _set(blocks, x + dx, top + dy, z + dz, BlockType.LEAF)


def _place_trees(blocks, rng):
    trees = []
    attempts = 0
    while len(trees) < TREE_COUNT and attempts < TREE_COUNT * 50:
        attempts += 1
        x = rng.randint(-WORLD_RADIUS + 3, WORLD_RADIUS - 3)
        z = rng.randint(-WORLD_RADIUS + 3, WORLD_RADIUS - 3)
        # keep the spawn area clear
        if abs(x) <= 6 and abs(z) <= 6:
            continue
        # trunk column must be free (bumps, hut roof, pillar)
        if any((x, y, z) in blocks for y in range(0, 8)):
            continue
        # canopies must not reach another trunk
        if any(max(abs(x - tx), abs(z - tz)) < 5 for tx, tz in trees):
            continue
        _place_tree(blocks, rng, x, z)
        trees.append((x, z))


def generate_world(rng: Optional[random.Random] = None) -> List[Block]:
    """Build the seed block layout used when the world is empty.

    Randomness is unseeded unless an rng is passed in; callers must only
    invoke this when no blocks exist yet.
    """
    rng = rng or random.Random()
    blocks: Dict[Coord, Block] = {}
    _place_ground(blocks)
    _place_landmarks(blocks)
    _place_bumps(blocks, rng)
    _place_trees(blocks, rng)
    return list(blocks.values())
