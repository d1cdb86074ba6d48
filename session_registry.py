# session_registry.py
import asyncio
import itertools
import logging
import random
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, session_id, connection, x, y, z, color, outbox_limit=256):
        self.id = session_id
        self.connection = connection
        self.x = x
        self.y = y
        self.z = z
        self.rotation = 0.0
        self.color = color
        self.name = f"Player {session_id}"
        # Outbound wire messages, drained by the server's per-session sender task.
        self.outbox = asyncio.Queue(maxsize=outbox_limit)

    def to_data(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "rotation": self.rotation,
            "color": self.color,
            "name": self.name,
        }

    def __repr__(self):
        return f"<Session {self.id} {self.name}>"


class TrustClientPolicy:
    """Accepts every client-reported transform unchanged."""

    def check(self, session, x, y, z, rotation):
        return x, y, z, rotation


class BoundsPolicy:
    """Rejects transforms that leave an axis-aligned box."""

    def __init__(self, world_bounds):
        self.world_bounds = world_bounds

    def check(self, session, x, y, z, rotation):
        wb = self.world_bounds
        if not (wb["min_x"] <= x <= wb["max_x"] and
                wb["min_y"] <= y <= wb["max_y"] and
                wb["min_z"] <= z <= wb["max_z"]):
            logger.warning("[CHEAT?] %s out of bounds at (%.2f, %.2f, %.2f)", session, x, y, z)
            return None
        return x, y, z, rotation


class SessionRegistry:
    """Live sessions keyed by id. Ids come from a counter and are never reused."""

    def __init__(self, policy=None, rng: Optional[random.Random] = None, outbox_limit=256):
        self.policy = policy or TrustClientPolicy()
        self.rng = rng or random.Random()
        self.outbox_limit = outbox_limit
        self._ids = itertools.count(1)
        self._sessions: Dict[int, Session] = {}

    def register(self, connection) -> Session:
        session_id = next(self._ids)
        x = float(self.rng.randrange(-5, 5))
        z = float(self.rng.randrange(-5, 5))
        color = f"hsl({self.rng.uniform(0, 360):.0f}, 70%, 60%)"
        session = Session(session_id, connection, x, 2.0, z, color, outbox_limit=self.outbox_limit)
        self._sessions[session_id] = session
        return session

    def update_position(self, session_id, x, y, z, rotation) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        accepted = self.policy.check(session, x, y, z, rotation)
        if accepted is None:
            return None
        session.x, session.y, session.z, session.rotation = accepted
        return session

    def unregister(self, session_id) -> Optional[Session]:
        return self._sessions.pop(session_id, None)

    def get(self, session_id) -> Optional[Session]:
        return self._sessions.get(session_id)

    def all(self) -> List[Session]:
        return list(self._sessions.values())

    def __len__(self):
        return len(self._sessions)
