import asyncio
import logging

from packet_factory import PacketFactory

logger = logging.getLogger(__name__)


def queue_for_session(server, session, packet_str: str) -> bool:
    """Queue an encoded packet on one session's outbox without waiting.

    A full outbox means the client is not keeping up; it is treated as a
    dead connection instead of backpressuring the caller.
    """
    try:
        session.outbox.put_nowait(packet_str)
        return True
    except asyncio.QueueFull:
        logger.warning("[SLOW] Outbox full for %s, dropping connection", session)
        server.drop(session)
        return False


def broadcast_packet(server, packet, exclude=None) -> int:
    """Queue `packet` for every live session except the one with id `exclude`."""
    packet_str = PacketFactory.build(packet)
    delivered = 0
    for session in server.registry.all():
        if exclude is not None and session.id == exclude:
            continue
        # may have been dropped by a nested broadcast during this loop
        if server.registry.get(session.id) is None:
            continue
        if queue_for_session(server, session, packet_str):
            delivered += 1
    logger.debug("[BROADCAST] %s to %d sessions", getattr(packet, "packet_type", packet), delivered)
    return delivered
