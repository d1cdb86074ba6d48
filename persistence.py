# persistence.py
"""Best-effort relational storage for the block table.

The in-memory WorldStore stays authoritative for live play; this adapter
only mirrors accepted mutations into the database and seeds the store at
startup. Every public coroutine swallows and logs its own failures.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    and_,
    delete,
    func,
    select,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from world_gen import generate_world
from world_store import Block, BlockType

logger = logging.getLogger(__name__)

metadata = MetaData()

blocks_table = Table(
    "blocks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("x", Integer, nullable=False),
    Column("y", Integer, nullable=False),
    Column("z", Integer, nullable=False),
    Column("type", String(32), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    # Makes save() an idempotent upsert.
    UniqueConstraint("x", "y", "z", name="uq_blocks_xyz"),
)

players_table = Table(
    "players",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String(64), nullable=False),
    Column("color", String(32), nullable=False),
    Column("last_seen", DateTime(timezone=True), nullable=False),
)

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class WorldPersistence:
    def __init__(self, database_url: Optional[str] = None,
                 generator: Callable[[], List[Block]] = generate_world,
                 timeout: float = 5.0):
        self.database_url = database_url
        self.generator = generator
        self.timeout = timeout
        self.enabled = False
        self._engine: Optional[AsyncEngine] = None
        self._insert = None

    async def load_or_init(self) -> List[Block]:
        if not self.database_url:
            logger.info("[DB] No database configured, world is in-memory only")
            return self.generator()

        try:
            self._engine = create_async_engine(self.database_url, pool_pre_ping=True)
            dialect = self._engine.dialect.name
            if dialect not in _INSERTS:
                raise ValueError(f"unsupported database dialect '{dialect}'")
            self._insert = _INSERTS[dialect]
            rows = await asyncio.wait_for(self._load_rows(), self.timeout)
        except Exception as e:
            logger.warning("[DB] Store unavailable, falling back to in-memory world: %s", e)
            await self._disable()
            return self.generator()

        self.enabled = True
        if rows:
            blocks = []
            for row in rows:
                try:
                    blocks.append(Block(row.x, row.y, row.z, BlockType(row.type)))
                except ValueError:
                    logger.warning("[DB] Skipping stored block with unknown type %r at (%s, %s, %s)",
                                   row.type, row.x, row.y, row.z)
            logger.info("[DB] Loaded %d blocks", len(blocks))
            return blocks

        blocks = self.generator()
        try:
            await asyncio.wait_for(self._insert_many(blocks), self.timeout)
            logger.info("[DB] Seeded empty store with %d generated blocks", len(blocks))
        except Exception as e:
            logger.warning("[DB] Failed to persist generated world: %s", e)
        return blocks

    async def _load_rows(self):
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
            result = await conn.execute(
                select(blocks_table.c.x, blocks_table.c.y, blocks_table.c.z, blocks_table.c.type)
            )
            return result.all()

    async def _insert_many(self, blocks):
        if not blocks:
            return
        stmt = self._insert(blocks_table).on_conflict_do_nothing(index_elements=["x", "y", "z"])
        async with self._engine.begin() as conn:
            await conn.execute(stmt, [
                {"x": b.x, "y": b.y, "z": b.z, "type": b.type.value} for b in blocks
            ])

    async def save(self, block: Block) -> bool:
        if not self.enabled:
            return False
        stmt = self._insert(blocks_table).values(x=block.x, y=block.y, z=block.z, type=block.type.value)
        stmt = stmt.on_conflict_do_update(index_elements=["x", "y", "z"], set_={"type": stmt.excluded.type})
        try:
            await asyncio.wait_for(self._execute(stmt), self.timeout)
            return True
        except Exception as e:
            logger.warning("[DB] Failed to save block at %s: %s", block.key, e)
            return False

    async def delete(self, x: int, y: int, z: int) -> bool:
        if not self.enabled:
            return False
        c = blocks_table.c
        stmt = delete(blocks_table).where(and_(c.x == x, c.y == y, c.z == z))
        try:
            await asyncio.wait_for(self._execute(stmt), self.timeout)
            return True
        except Exception as e:
            logger.warning("[DB] Failed to delete block at %s: %s", (x, y, z), e)
            return False

    async def record_player(self, session) -> bool:
        if not self.enabled:
            return False
        values = {
            "id": session.id,
            "name": session.name,
            "color": session.color,
            "last_seen": datetime.now(timezone.utc),
        }
        stmt = self._insert(players_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"name": stmt.excluded.name, "color": stmt.excluded.color,
                  "last_seen": stmt.excluded.last_seen},
        )
        try:
            await asyncio.wait_for(self._execute(stmt), self.timeout)
            return True
        except Exception as e:
            logger.warning("[DB] Failed to record player %s: %s", session.id, e)
            return False

    async def count_blocks(self) -> Optional[int]:
        if not self.enabled:
            return None
        try:
            return await asyncio.wait_for(self._count(), self.timeout)
        except Exception as e:
            logger.warning("[DB] Failed to count blocks: %s", e)
            return None

    async def status(self) -> dict:
        stored = await self.count_blocks()
        return {
            "enabled": self.enabled,
            "connected": stored is not None,
            "storedBlocks": stored,
        }

    async def _execute(self, stmt):
        async with self._engine.begin() as conn:
            await conn.execute(stmt)

    async def _count(self) -> int:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(func.count()).select_from(blocks_table))
            return result.scalar_one()

    async def _disable(self):
        self.enabled = False
        if self._engine is not None:
            try:
                await self._engine.dispose()
            except Exception as e:
                logger.debug("[DB] Engine dispose failed: %s", e)
            self._engine = None

    async def close(self):
        await self._disable()
