import unittest
import asyncio

import grpc

from server_config import ServerConfig
from status_service import WorldStatusServicer, add_WorldStatusServicer_to_server, fetch_status
from world_server import WorldServer


class TestStatusService(unittest.TestCase):
    def test_get_status_over_grpc(self):
        async def run():
            world = WorldServer(ServerConfig())
            world.store.put(0, 0, 0, "stone")
            world.store.put(1, 0, 0, "stone")

            server = grpc.aio.server()
            add_WorldStatusServicer_to_server(WorldStatusServicer(world), server)
            port = server.add_insecure_port("127.0.0.1:0")
            await server.start()
            try:
                status = await fetch_status(f"127.0.0.1:{port}", timeout=5.0)
            finally:
                await server.stop(None)
            return status

        status = asyncio.run(run())
        self.assertEqual(status["online"], 0)
        self.assertEqual(status["cachedBlocks"], 2)
        self.assertFalse(status["persistence"]["enabled"])


if __name__ == "__main__":
    unittest.main()
