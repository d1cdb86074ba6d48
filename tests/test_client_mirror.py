import unittest

from client_mirror import RendererListener, WorldMirror
from protocol import PacketType
from world_store import BlockType


class RecordingListener(RendererListener):
    def __init__(self):
        self.events = []

    def on_world_reset(self, blocks):
        self.events.append(("reset", len(blocks)))

    def on_block_added(self, block):
        self.events.append(("added", block.key))

    def on_block_removed(self, block):
        self.events.append(("removed", block.key))

    def on_player_added(self, player):
        self.events.append(("player_added", player.id))

    def on_player_moved(self, player):
        self.events.append(("player_moved", player.id))

    def on_player_removed(self, player):
        self.events.append(("player_removed", player.id))


def init_message(client_id=1, players=None, blocks=None):
    return {
        "type": PacketType.INIT,
        "clientId": client_id,
        "players": players if players is not None else [],
        "blocks": blocks if blocks is not None else [],
    }


def player(pid, x=0.0):
    return {"id": pid, "x": x, "y": 2.0, "z": 0.0, "rotation": 0.0, "color": "hsl(1, 70%, 60%)",
            "name": f"Player {pid}"}


class TestWorldMirror(unittest.TestCase):
    def test_init_replaces_world_and_skips_self(self):
        listener = RecordingListener()
        mirror = WorldMirror(listener)
        mirror.place_local(9, 9, 9, "glass")
        mirror.apply(init_message(
            client_id=2,
            players=[player(1), player(2)],
            blocks=[{"x": 0, "y": -1, "z": 0, "type": "grass"}, {"x": 1, "y": -1, "z": 0, "type": "grass"}],
        ))
        self.assertEqual(mirror.client_id, 2)
        self.assertEqual(set(mirror.blocks), {(0, -1, 0), (1, -1, 0)})
        self.assertEqual(set(mirror.players), {1})
        self.assertIn(("reset", 2), listener.events)

    def test_own_placement_echo_is_idempotent(self):
        listener = RecordingListener()
        mirror = WorldMirror(listener)
        mirror.apply(init_message(client_id=1))
        self.assertTrue(mirror.place_local(5, 0, 5, BlockType.STONE))
        mirror.apply({"type": PacketType.BLOCK_PLACED, "clientId": 1, "x": 5, "y": 0, "z": 5,
                      "blockType": "stone"})
        self.assertEqual(len(mirror.blocks), 1)
        self.assertEqual(listener.events.count(("added", (5, 0, 5))), 1)

    def test_lost_race_keeps_local_block(self):
        # The server accepted someone else's glass; the local stone stays until the next init.
        mirror = WorldMirror()
        mirror.apply(init_message(client_id=1))
        mirror.place_local(5, 0, 5, "stone")
        mirror.apply({"type": PacketType.BLOCK_PLACED, "clientId": 2, "x": 5, "y": 0, "z": 5,
                      "blockType": "glass"})
        self.assertEqual(mirror.get_block(5, 0, 5).type, BlockType.STONE)

    def test_remote_remove(self):
        mirror = WorldMirror()
        mirror.apply(init_message(blocks=[{"x": 3, "y": 0, "z": 3, "type": "dirt"}]))
        mirror.apply({"type": PacketType.BLOCK_REMOVED, "clientId": 2, "x": 3, "y": 0, "z": 3,
                      "blockType": "dirt"})
        self.assertIsNone(mirror.get_block(3, 0, 3))
        # echo of an already applied local removal is a no-op
        mirror.apply({"type": PacketType.BLOCK_REMOVED, "clientId": 1, "x": 3, "y": 0, "z": 3,
                      "blockType": "dirt"})
        self.assertEqual(mirror.blocks, {})

    def test_local_coordinates_are_rounded(self):
        mirror = WorldMirror()
        mirror.place_local(1.4, 2.6, -0.4, "sand")
        self.assertIsNotNone(mirror.get_block(1, 3, 0))

    def test_halves_round_up(self):
        mirror = WorldMirror()
        mirror.place_local(2.5, 0.5, -1.5, "sand")
        self.assertEqual(list(mirror.blocks), [(3, 1, -1)])

    def test_bad_player_entries_are_skipped(self):
        listener = RecordingListener()
        mirror = WorldMirror(listener)
        mirror.apply(init_message(client_id=1, players=["nobody", {"x": 1}, {"id": None}, player(3)]))
        self.assertEqual(set(mirror.players), {3})
        mirror.apply({"type": PacketType.PLAYER_JOINED, "player": {"name": "no id"}})
        self.assertEqual(set(mirror.players), {3})
        self.assertEqual([e for e in listener.events if e[0] == "player_added"], [("player_added", 3)])

    def test_remote_players_snap(self):
        listener = RecordingListener()
        mirror = WorldMirror(listener)
        mirror.apply(init_message(client_id=1, players=[player(1)]))
        mirror.apply({"type": PacketType.PLAYER_JOINED, "player": player(2)})
        mirror.apply({"type": PacketType.PLAYER_MOVED, "clientId": 2, "x": 4.5, "y": 2, "z": -1,
                      "rotation": 3.14})
        remote = mirror.players[2]
        self.assertEqual((remote.x, remote.y, remote.z, remote.rotation), (4.5, 2.0, -1.0, 3.14))
        mirror.apply({"type": PacketType.PLAYER_LEFT, "clientId": 2})
        self.assertNotIn(2, mirror.players)
        self.assertEqual(
            [e for e in listener.events if e[0].startswith("player")],
            [("player_added", 2), ("player_moved", 2), ("player_removed", 2)],
        )

    def test_self_events_are_ignored(self):
        mirror = WorldMirror()
        mirror.apply(init_message(client_id=1))
        mirror.apply({"type": PacketType.PLAYER_JOINED, "player": player(1)})
        mirror.apply({"type": PacketType.PLAYER_MOVED, "clientId": 1, "x": 1, "y": 1, "z": 1, "rotation": 0})
        self.assertEqual(mirror.players, {})

    def test_malformed_and_unknown_messages_are_ignored(self):
        mirror = WorldMirror()
        mirror.apply({"type": PacketType.BLOCK_PLACED, "x": 1})
        mirror.apply({"type": "weather", "rain": True})
        mirror.apply({"type": PacketType.BLOCK_REJECTED, "action": "placeBlock", "x": 0, "y": 0, "z": 0})
        self.assertEqual(mirror.blocks, {})


if __name__ == "__main__":
    unittest.main()
