# client_mirror.py
"""Client-side mirror of the world used for prediction and reconciliation.

Local edits are applied optimistically before the request is sent. Echoed
blockPlaced/blockRemoved events re-apply idempotently, so a client never
rolls back its own action. A client that lost a placement race stays out
of sync until its next init snapshot.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from packets import MalformedPacket, parse_raw_packet
from protocol import PacketType
from world_store import Block, BlockType, Coord

logger = logging.getLogger(__name__)


@dataclass
class RemotePlayer:
    id: int
    x: float
    y: float
    z: float
    rotation: float = 0.0
    color: str = ""
    name: str = ""

    @classmethod
    def from_data(cls, data):
        return cls(
            id=int(data["id"]),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            z=float(data.get("z", 0)),
            rotation=float(data.get("rotation", 0)),
            color=data.get("color", ""),
            name=data.get("name", ""),
        )


class RendererListener:
    """Presentation hooks; the default implementation ignores everything."""

    def on_world_reset(self, blocks):
        pass

    def on_block_added(self, block):
        pass

    def on_block_removed(self, block):
        pass

    def on_player_added(self, player):
        pass

    def on_player_moved(self, player):
        pass

    def on_player_removed(self, player):
        pass


def _key(x, y, z) -> Coord:
    # halves round up, not to even
    return (math.floor(x + 0.5), math.floor(y + 0.5), math.floor(z + 0.5))


class WorldMirror:
    def __init__(self, listener: Optional[RendererListener] = None):
        self.listener = listener or RendererListener()
        self.client_id: Optional[int] = None
        self.blocks: Dict[Coord, Block] = {}
        self.players: Dict[int, RemotePlayer] = {}

    # -- local optimistic edits -------------------------------------------

    def place_local(self, x, y, z, block_type) -> bool:
        key = _key(x, y, z)
        if key in self.blocks:
            return False
        block = Block(*key, BlockType(block_type))
        self.blocks[key] = block
        self.listener.on_block_added(block)
        return True

    def remove_local(self, x, y, z) -> Optional[Block]:
        block = self.blocks.pop(_key(x, y, z), None)
        if block is not None:
            self.listener.on_block_removed(block)
        return block

    def get_block(self, x, y, z) -> Optional[Block]:
        return self.blocks.get(_key(x, y, z))

    # -- server events ----------------------------------------------------

    def apply(self, message: dict):
        """Apply one decoded server message to the mirror."""
        try:
            packet = parse_raw_packet(message)
        except MalformedPacket as e:
            logger.warning("[MIRROR] Ignoring malformed server message: %s", e)
            return
        if packet is None:
            return

        handler = {
            PacketType.INIT: self._on_init,
            PacketType.PLAYER_JOINED: self._on_player_joined,
            PacketType.PLAYER_MOVED: self._on_player_moved,
            PacketType.PLAYER_LEFT: self._on_player_left,
            PacketType.BLOCK_PLACED: self._on_block_placed,
            PacketType.BLOCK_REMOVED: self._on_block_removed,
            PacketType.BLOCK_REJECTED: self._on_block_rejected,
        }.get(packet.packet_type)
        if handler is None:
            logger.debug("[MIRROR] Ignoring message kind %r", message.get("type"))
            return
        handler(packet)

    def _on_init(self, packet):
        self.client_id = packet.clientId
        self.blocks.clear()
        for data in packet.blocks:
            try:
                block = Block(*_key(data["x"], data["y"], data["z"]), BlockType(data["type"]))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("[MIRROR] Skipping bad snapshot block %r: %s", data, e)
                continue
            self.blocks.setdefault(block.key, block)
        self.listener.on_world_reset(list(self.blocks.values()))

        for player in list(self.players.values()):
            self.listener.on_player_removed(player)
        self.players.clear()
        for data in packet.players:
            self._add_player(data)

    def _add_player(self, data):
        try:
            player = RemotePlayer.from_data(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("[MIRROR] Skipping bad player entry %r: %s", data, e)
            return
        if player.id == self.client_id:
            return
        self.players[player.id] = player
        self.listener.on_player_added(player)

    def _on_player_joined(self, packet):
        self._add_player(packet.player)

    def _on_player_moved(self, packet):
        if packet.clientId == self.client_id:
            return
        player = self.players.get(packet.clientId)
        if player is None:
            return
        # no interpolation: snap to the latest transform
        player.x, player.y, player.z = packet.x, packet.y, packet.z
        player.rotation = packet.rotation
        self.listener.on_player_moved(player)

    def _on_player_left(self, packet):
        player = self.players.pop(packet.clientId, None)
        if player is not None:
            self.listener.on_player_removed(player)

    def _on_block_placed(self, packet):
        self.place_local(packet.x, packet.y, packet.z, packet.blockType)

    def _on_block_removed(self, packet):
        self.remove_local(packet.x, packet.y, packet.z)

    def _on_block_rejected(self, packet):
        logger.info("[MIRROR] Server rejected %s at (%s, %s, %s)", packet.action, packet.x, packet.y, packet.z)
