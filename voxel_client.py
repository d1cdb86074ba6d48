# voxel_client.py
import json
import logging

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from client_mirror import WorldMirror
from packet_factory import PacketFactory
from packets.block import PlaceBlockPacket, RemoveBlockPacket
from packets.player import PlayerMovePacket
from world_store import BlockType

logger = logging.getLogger(__name__)


class VoxelClient:
    """WebSocket client that keeps a WorldMirror in sync with the server.

    Block edits are applied to the mirror first and then sent; the server's
    echo re-applies as a no-op.
    """

    def __init__(self, url="ws://127.0.0.1:3000", mirror=None):
        self.url = url
        self.mirror = mirror or WorldMirror()
        self.websocket = None

    async def connect(self):
        self.websocket = await connect(self.url)
        logger.info("[CLIENT] Connected to %s", self.url)
        return self

    async def close(self):
        if self.websocket is not None:
            await self.websocket.close()
            self.websocket = None

    async def __aenter__(self):
        return await self.connect()

    async def __aexit__(self, *exc):
        await self.close()

    async def _send(self, packet):
        if self.websocket is None:
            logger.warning("[CLIENT] Not connected, dropping %s", packet.packet_type)
            return False
        try:
            await self.websocket.send(PacketFactory.build(packet))
            return True
        except ConnectionClosed as e:
            logger.warning("[CLIENT] Connection closed while sending: %s", e)
            return False

    async def place_block(self, x, y, z, block_type) -> bool:
        block_type = BlockType(block_type)
        if not self.mirror.place_local(x, y, z, block_type):
            return False
        await self._send(PlaceBlockPacket(x=round(x), y=round(y), z=round(z), blockType=block_type.value))
        return True

    async def remove_block(self, x, y, z) -> bool:
        if self.mirror.remove_local(x, y, z) is None:
            return False
        await self._send(RemoveBlockPacket(x=round(x), y=round(y), z=round(z)))
        return True

    async def move(self, x, y, z, rotation):
        await self._send(PlayerMovePacket(x=x, y=y, z=z, rotation=rotation))

    async def run(self):
        """Apply server messages to the mirror until the connection closes."""
        try:
            async for raw in self.websocket:
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError as e:
                    logger.warning("[CLIENT] Bad message from server: %s", e)
                    continue
                self.mirror.apply(message)
        except ConnectionClosed:
            pass
        logger.info("[CLIENT] Disconnected from %s", self.url)
