import random
import unittest

from session_registry import BoundsPolicy, SessionRegistry


class TestSessionRegistry(unittest.TestCase):
    def test_ids_are_monotonic_and_never_reused(self):
        registry = SessionRegistry()
        a = registry.register(object())
        b = registry.register(object())
        registry.unregister(a.id)
        c = registry.register(object())
        self.assertEqual([a.id, b.id, c.id], [1, 2, 3])
        self.assertEqual({s.id for s in registry.all()}, {2, 3})

    def test_spawn_and_identity(self):
        registry = SessionRegistry(rng=random.Random(7))
        session = registry.register(object())
        self.assertEqual(session.y, 2.0)
        self.assertTrue(-5 <= session.x < 5)
        self.assertTrue(-5 <= session.z < 5)
        self.assertTrue(session.color.startswith("hsl("))
        self.assertEqual(session.name, "Player 1")
        self.assertEqual(set(session.to_data()), {"id", "x", "y", "z", "rotation", "color", "name"})

    def test_update_position_trusts_client(self):
        registry = SessionRegistry()
        session = registry.register(object())
        moved = registry.update_position(session.id, 1000.5, -3.0, 7.25, 1.5)
        self.assertIs(moved, session)
        self.assertEqual((session.x, session.y, session.z, session.rotation), (1000.5, -3.0, 7.25, 1.5))

    def test_update_position_unknown_session(self):
        registry = SessionRegistry()
        self.assertIsNone(registry.update_position(42, 0, 0, 0, 0))

    def test_unregister_is_idempotent(self):
        registry = SessionRegistry()
        session = registry.register(object())
        self.assertIs(registry.unregister(session.id), session)
        self.assertIsNone(registry.unregister(session.id))
        self.assertEqual(len(registry), 0)

    def test_bounds_policy_rejects_out_of_bounds(self):
        bounds = {"min_x": -10, "max_x": 10, "min_y": -5, "max_y": 50, "min_z": -10, "max_z": 10}
        registry = SessionRegistry(policy=BoundsPolicy(bounds))
        session = registry.register(object())
        start = (session.x, session.y, session.z)
        self.assertIsNone(registry.update_position(session.id, 11, 0, 0, 0))
        self.assertEqual((session.x, session.y, session.z), start)
        self.assertIsNotNone(registry.update_position(session.id, 9, 0, -9, 0))
        self.assertEqual((session.x, session.z), (9, -9))


if __name__ == "__main__":
    unittest.main()
