# connection.py
"""Transport adapters. Both carry one JSON message per frame/line."""
import logging
from typing import Optional, Union

from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)


class StreamConnection:
    """Newline-delimited JSON over an asyncio reader/writer pair."""

    def __init__(self, reader, writer):
        self.reader = reader
        self.writer = writer

    @property
    def peer(self):
        return self.writer.get_extra_info("peername")

    async def send(self, text: str):
        self.writer.write((text + "\n").encode())
        await self.writer.drain()

    async def receive(self) -> Optional[str]:
        while True:
            data = await self.reader.readline()
            if not data:
                return None
            message = data.decode(errors="replace").strip()
            if message:
                return message

    def abort(self):
        transport = self.writer.transport
        if transport is not None:
            transport.abort()

    async def close(self):
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug("[DISCONNECT] %s closed with error: %s", self.peer, e)


class WebSocketConnection:
    """One JSON message per WebSocket text frame."""

    def __init__(self, websocket):
        self.websocket = websocket

    @property
    def peer(self):
        return self.websocket.remote_address

    async def send(self, text: str):
        await self.websocket.send(text)

    async def receive(self) -> Optional[Union[str, bytes]]:
        try:
            return await self.websocket.recv()
        except ConnectionClosed:
            return None

    def abort(self):
        self.websocket.transport.abort()

    async def close(self):
        await self.websocket.close()
