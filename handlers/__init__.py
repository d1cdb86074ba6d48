"""Handlers package for packet logic.
Request handlers are coroutines with signature:
    async def handle_xxx(server, session, packet)
"""

__all__ = ["broadcast", "player", "world"]
