import logging

from packets.block import BlockPlacedPacket, BlockRejectedPacket, BlockRemovedPacket
from protocol import PacketType

logger = logging.getLogger(__name__)


def _reject(server, session, action, packet):
    # Race losses are silent unless the optional rejection notice is enabled.
    logger.debug("[RACE] %s from %s at (%s, %s, %s) had no effect",
                 action, session, packet.x, packet.y, packet.z)
    if server.config.notify_rejections:
        server.send(session, BlockRejectedPacket(action=action, x=packet.x, y=packet.y, z=packet.z))


async def handle_place_block(server, session, packet):
    block = server.store.put(packet.x, packet.y, packet.z, packet.blockType)
    if block is None:
        _reject(server, session, PacketType.PLACE_BLOCK, packet)
        return

    # The requester gets the event too so it can reconcile its optimistic copy.
    server.broadcast(BlockPlacedPacket(
        clientId=session.id,
        x=block.x,
        y=block.y,
        z=block.z,
        blockType=block.type.value,
    ))
    logger.info("[BLOCK] Player %s placed %s at %s", session.id, block.type.value, block.key)
    server.persist(server.persistence.save(block))


async def handle_remove_block(server, session, packet):
    block = server.store.remove(packet.x, packet.y, packet.z)
    if block is None:
        _reject(server, session, PacketType.REMOVE_BLOCK, packet)
        return

    server.broadcast(BlockRemovedPacket(
        clientId=session.id,
        x=block.x,
        y=block.y,
        z=block.z,
        blockType=block.type.value,
    ))
    logger.info("[BLOCK] Player %s removed %s at %s", session.id, block.type.value, block.key)
    server.persist(server.persistence.delete(block.x, block.y, block.z))
