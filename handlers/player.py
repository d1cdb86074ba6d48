import logging

from packets.player import InitPacket, PlayerJoinedPacket, PlayerLeftPacket, PlayerMovedPacket

logger = logging.getLogger(__name__)


def handle_join(server, connection):
    """Register a new connection and bootstrap it with the full world."""
    session = server.registry.register(connection)

    server.send(session, InitPacket(
        clientId=session.id,
        players=[s.to_data() for s in server.registry.all()],
        blocks=[b.to_data() for b in server.store.list_all()],
    ))
    server.broadcast(PlayerJoinedPacket(player=session.to_data()), exclude=session.id)
    logger.info("[JOIN] Player %s joined at (%s, %s, %s)", session.id, session.x, session.y, session.z)
    return session


async def handle_player_move(server, session, packet):
    moved = server.registry.update_position(session.id, packet.x, packet.y, packet.z, packet.rotation)
    if moved is None:
        logger.debug("[MOVE] Ignored move from %s", session)
        return
    server.broadcast(PlayerMovedPacket(
        clientId=moved.id,
        x=moved.x,
        y=moved.y,
        z=moved.z,
        rotation=moved.rotation,
    ), exclude=moved.id)


def handle_leave(server, session) -> bool:
    """Unregister a session and tell the others. Safe to call more than once."""
    if server.registry.unregister(session.id) is None:
        return False
    server.broadcast(PlayerLeftPacket(clientId=session.id))
    logger.info("[LEAVE] Player %s left, %d online", session.id, len(server.registry))
    return True
