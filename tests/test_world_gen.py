import random
import unittest
from collections import Counter

from world_gen import GROUND_Y, TREE_COUNT, WORLD_RADIUS, generate_world
from world_store import BlockType


class TestWorldGen(unittest.TestCase):
    def setUp(self):
        self.blocks = generate_world(random.Random(1234))
        self.by_key = {b.key: b for b in self.blocks}

    def test_no_duplicate_coordinates(self):
        self.assertEqual(len(self.by_key), len(self.blocks))

    def test_ground_plane_is_complete(self):
        side = 2 * WORLD_RADIUS + 1
        ground = [b for b in self.blocks if b.y == GROUND_Y]
        self.assertEqual(len(ground), side * side)
        self.assertTrue(all(b.type == BlockType.GRASS for b in ground))

    def test_landmarks_are_fixed(self):
        for dy in range(6):
            self.assertEqual(self.by_key[(-10, dy, -10)].type, BlockType.STONE)
        self.assertEqual(self.by_key[(10, 1, 8)].type, BlockType.GLASS)
        self.assertEqual(self.by_key[(-12, 0, 10)].type, BlockType.SAND)

    def test_trees_have_trunks_and_leaves(self):
        counts = Counter(b.type for b in self.blocks)
        self.assertGreaterEqual(counts[BlockType.WOOD], TREE_COUNT * 3)
        self.assertGreater(counts[BlockType.LEAF], 0)
        # trunks stand on the ground
        trunk_bases = [b for b in self.blocks if b.type == BlockType.WOOD and b.y == 0]
        self.assertEqual(len(trunk_bases), TREE_COUNT)

    def test_coordinates_are_integers(self):
        for b in self.blocks:
            self.assertIsInstance(b.x, int)
            self.assertIsInstance(b.y, int)
            self.assertIsInstance(b.z, int)

    def test_unseeded_runs_can_differ(self):
        # Only the fixed parts are guaranteed to match between runs.
        other = {b.key for b in generate_world()}
        self.assertIn((0, GROUND_Y, 0), other)
        self.assertIn((-10, 5, -10), other)


if __name__ == "__main__":
    unittest.main()
