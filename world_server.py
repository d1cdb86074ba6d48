# world_server.py
import asyncio
import json
import logging
from http import HTTPStatus

from websockets.asyncio.server import serve as websocket_serve

from connection import StreamConnection, WebSocketConnection
from handlers import player as player_handlers
from handlers import world as world_handlers
from handlers.broadcast import broadcast_packet, queue_for_session
from packet_factory import PacketFactory
from packets import MalformedPacket
from persistence import WorldPersistence
from protocol import PacketType
from server_config import ServerConfig, configure_logging, load_config
from session_registry import SessionRegistry
from status_service import start_status_server
from world_store import WorldStore

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 1 << 20

HANDLERS = {
    PacketType.PLAYER_MOVE: player_handlers.handle_player_move,
    PacketType.PLACE_BLOCK: world_handlers.handle_place_block,
    PacketType.REMOVE_BLOCK: world_handlers.handle_remove_block,
}


class WorldServer:
    """Owns the world store and session registry and runs the sync protocol.

    All mutations happen on the event loop thread between suspension
    points, so requests from every connection are applied in one total order.
    """

    def __init__(self, config=None, store=None, registry=None, persistence=None):
        self.config = config or ServerConfig()
        # empty stores and registries are falsy, so compare against None
        self.store = store if store is not None else WorldStore()
        if registry is None:
            registry = SessionRegistry(outbox_limit=self.config.outbox_limit)
        self.registry = registry
        if persistence is None:
            persistence = WorldPersistence(self.config.database_url, timeout=self.config.db_timeout)
        self.persistence = persistence
        self._pending_writes = set()

    async def load_world(self):
        blocks = await self.persistence.load_or_init()
        added = self.store.load(blocks)
        logger.info("[WORLD] %d blocks loaded (persistence %s)",
                    added, "on" if self.persistence.enabled else "off")

    async def handle_client(self, reader, writer):
        await self.serve_connection(StreamConnection(reader, writer))

    async def handle_websocket(self, websocket):
        await self.serve_connection(WebSocketConnection(websocket))

    async def serve_connection(self, connection):
        addr = connection.peer
        logger.info("[CONNECT] %s", addr)

        session = player_handlers.handle_join(self, connection)
        sender = asyncio.create_task(self._pump(session))
        try:
            self.persist(self.persistence.record_player(session))
            while True:
                try:
                    message = await connection.receive()
                except Exception as e:
                    logger.info("[ERROR] Transport error from %s: %s", addr, e)
                    break
                if message is None:
                    break
                if self.registry.get(session.id) is None:
                    # dropped while lines were still buffered; CLOSED sessions do not mutate
                    logger.debug("[DROP] Discarding input from closed %s", session)
                    break

                logger.debug("[RECV] From %s: %s", addr, message)
                try:
                    packet = PacketFactory.parse(message)
                    await self.handle_packet(session, packet)
                except MalformedPacket as e:
                    logger.warning("[DROP] Malformed packet from %s: %s", addr, e)
                except Exception:
                    logger.exception("[ERROR] Failed to process packet from %s", addr)
        finally:
            self.disconnect(session)
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
            try:
                await connection.close()
            except Exception as e:
                logger.debug("[DISCONNECT] Close failed for %s: %s", addr, e)
            logger.info("[DISCONNECT] %s, player %s", addr, session.id)

    async def handle_packet(self, session, packet):
        if packet is None or self.registry.get(session.id) is None:
            return
        packet_type = packet.packet_type or packet._data.get("_raw_type")
        handler = HANDLERS.get(packet_type)
        if handler is None:
            logger.warning("[DROP] Unknown packet type %r from %s", packet_type, session)
            return
        await handler(self, session, packet)

    async def _pump(self, session):
        # Drains one session's outbox; a failed or stalled send drops that session only.
        connection = session.connection
        while True:
            packet_str = await session.outbox.get()
            try:
                await asyncio.wait_for(connection.send(packet_str), self.config.send_timeout)
            except Exception as e:
                logger.warning("[ERROR] Send to %s failed: %s", session, e)
                self.drop(session)
                return

    def persist(self, coro):
        """Run a persistence call without holding up the caller's read loop.

        The adapter logs and swallows its own failures. Writes are not
        serialized against each other; same-coordinate races rely on the
        idempotent upsert and delete-if-exists.
        """
        task = asyncio.create_task(coro)
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        return task

    async def flush(self):
        """Wait for in-flight persistence calls."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    def send(self, session, packet) -> bool:
        return queue_for_session(self, session, PacketFactory.build(packet))

    def broadcast(self, packet, exclude=None) -> int:
        return broadcast_packet(self, packet, exclude=exclude)

    def disconnect(self, session) -> bool:
        return player_handlers.handle_leave(self, session)

    def drop(self, session) -> bool:
        """Tear down a stuck connection and handle it as closed."""
        left = self.disconnect(session)
        if left:
            session.connection.abort()
        return left

    async def status(self) -> dict:
        return {
            "online": len(self.registry),
            "cachedBlocks": len(self.store),
            "persistence": await self.persistence.status(),
        }

    async def process_request(self, connection, request):
        # Plain HTTP liveness check on the WebSocket port.
        if request.path.split("?", 1)[0] not in ("/health", "/status"):
            return None
        body = json.dumps(await self.status()) + "\n"
        response = connection.respond(HTTPStatus.OK, body)
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response


async def main(config=None):
    config = config or load_config()
    configure_logging(config.log_level)

    server = WorldServer(config)
    await server.load_world()

    ws_server = await websocket_serve(
        server.handle_websocket,
        config.host,
        config.port,
        process_request=server.process_request,
        ping_interval=config.ws_ping_interval,
    )
    logger.info("[SERVER] WebSocket listening on ws://%s:%d", config.host, config.port)
    tasks = [ws_server.serve_forever()]

    if config.tcp_port:
        tcp_server = await asyncio.start_server(
            server.handle_client, config.host, config.tcp_port, limit=MAX_LINE_BYTES
        )
        logger.info("[SERVER] TCP listening on %s:%d", config.host, config.tcp_port)
        tasks.append(tcp_server.serve_forever())

    if config.status_port:
        tasks.append(start_status_server(server, config.status_port))

    try:
        await asyncio.gather(*tasks)
    finally:
        await server.flush()
        await server.persistence.close()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("[SERVER] Shutting down")


if __name__ == "__main__":
    run()
