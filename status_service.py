# status_service.py
"""Read-only gRPC introspection service for a running world server.

Messages are plain JSON objects carried through grpc's generic handlers,
so no generated stubs are needed.
"""
import asyncio
import json
import logging
import sys

import grpc

logger = logging.getLogger(__name__)

SERVICE_NAME = "voxelworld.WorldStatus"


def _encode(message) -> bytes:
    return json.dumps(message).encode()


def _decode(data: bytes):
    return json.loads(data) if data else {}


class WorldStatusServicer:
    def __init__(self, world_server):
        self.world_server = world_server

    async def GetStatus(self, request, context):
        """Online sessions, cached blocks and durable-store health."""
        return await self.world_server.status()


def add_WorldStatusServicer_to_server(servicer, server):
    rpc_method_handlers = {
        "GetStatus": grpc.unary_unary_rpc_method_handler(
            servicer.GetStatus,
            request_deserializer=_decode,
            response_serializer=_encode,
        ),
    }
    generic_handler = grpc.method_handlers_generic_handler(SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))


async def start_status_server(world_server, port=6000):
    """Start the gRPC status service and block until it terminates."""
    server = grpc.aio.server()
    add_WorldStatusServicer_to_server(WorldStatusServicer(world_server), server)
    server.add_insecure_port(f"[::]:{port}")
    await server.start()
    logger.info("[STATUS] gRPC WorldStatus running on port %d", port)
    await server.wait_for_termination()


async def fetch_status(target="127.0.0.1:6000", timeout=5.0):
    async with grpc.aio.insecure_channel(target) as channel:
        get_status = channel.unary_unary(
            f"/{SERVICE_NAME}/GetStatus",
            request_serializer=_encode,
            response_deserializer=_decode,
        )
        return await get_status({}, timeout=timeout)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "127.0.0.1:6000"
    print(json.dumps(asyncio.run(fetch_status(target)), indent=2))
