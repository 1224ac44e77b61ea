"""
Database connection management using SQLAlchemy 2.0 async with aiosqlite.

Provides:
- SQLAlchemy AsyncEngine with the aiosqlite dialect
- Schema creation from the Core metadata
- Async read/write transaction context managers
"""

import asyncio
import contextlib
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from taskscope.core.config import StorageConfig
from taskscope.core.exceptions import PersistenceError
from taskscope.core.logging import get_logger
from taskscope.database.schema import metadata

logger = get_logger("database")

MEMORY_DB = ":memory:"


class ConnectionPool:
    """
    SQLAlchemy 2.0 async connection pool manager.

    Uses create_async_engine with the aiosqlite dialect. In-memory databases
    share one connection through StaticPool so every transaction sees the
    same data.
    """

    def __init__(self, db_path: str = MEMORY_DB, max_connections: int = 5):
        """
        Initialize connection pool.

        Args:
            db_path: Path to SQLite database, or ":memory:"
            max_connections: Maximum connections in pool
        """
        self.db_path = db_path
        self.max_connections = max_connections
        self.engine: Optional[AsyncEngine] = None
        # One shared connection in memory mode; transactions must not interleave
        self._memory_lock: Optional[asyncio.Lock] = None
        # Read-then-write transactions (max order, seq) must not interleave
        self._write_lock: Optional[asyncio.Lock] = None
        self.stats = {
            "read_queries": 0,
            "write_queries": 0,
        }

    @classmethod
    def from_config(cls, config: StorageConfig) -> "ConnectionPool":
        return cls(config.db_path, max_connections=config.max_connections)

    @property
    def is_memory(self) -> bool:
        return self.db_path == MEMORY_DB

    async def initialize(self) -> None:
        """Create the async engine and the schema."""
        if self.engine is not None:
            return

        logger.info("Initializing SQLAlchemy async engine",
                    db_path=self.db_path,
                    max_connections=self.max_connections)

        engine_kwargs = {
            "echo": False,
            "connect_args": {"check_same_thread": False},
        }

        if self.is_memory:
            database_url = "sqlite+aiosqlite:///:memory:"
            engine_kwargs["poolclass"] = StaticPool
        else:
            db_file = Path(self.db_path)
            db_file.parent.mkdir(parents=True, exist_ok=True)
            database_url = f"sqlite+aiosqlite:///{db_file}"
            engine_kwargs["pool_size"] = self.max_connections
            engine_kwargs["max_overflow"] = 0
            engine_kwargs["pool_pre_ping"] = True

        self.engine = create_async_engine(database_url, **engine_kwargs)
        if self.is_memory:
            self._memory_lock = asyncio.Lock()
        else:
            self._write_lock = asyncio.Lock()

        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

        logger.info("SQLAlchemy async engine initialized successfully")

    async def close(self) -> None:
        """Close the engine and all connections."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._memory_lock = None
            self._write_lock = None
            logger.info("Connection pool closed", stats=self.stats)

    @contextlib.asynccontextmanager
    async def _serialized(self, write: bool = False) -> AsyncIterator[None]:
        lock = self._memory_lock or (self._write_lock if write else None)
        if lock is None:
            yield
        else:
            async with lock:
                yield

    @contextlib.asynccontextmanager
    async def read_transaction(self) -> AsyncIterator[AsyncConnection]:
        """
        Get async connection for read operations.

        Returns:
            AsyncConnection for read queries
        """
        if not self.engine:
            raise PersistenceError("Connection pool not initialized", error_code="POOL_NOT_INIT")

        async with self._serialized(), self.engine.connect() as conn:
            self.stats["read_queries"] += 1
            try:
                yield conn
            except Exception as e:
                logger.error("Read transaction failed", error=str(e))
                raise

    @contextlib.asynccontextmanager
    async def write_transaction(self) -> AsyncIterator[AsyncConnection]:
        """
        Get async connection for write operations with transaction.

        Returns:
            AsyncConnection with automatic commit/rollback
        """
        if not self.engine:
            raise PersistenceError("Connection pool not initialized", error_code="POOL_NOT_INIT")

        async with self._serialized(write=True), self.engine.begin() as conn:
            self.stats["write_queries"] += 1
            try:
                yield conn
            except Exception as e:
                logger.error("Write transaction failed", error=str(e))
                # Rolled back by the begin() context manager
                raise

    async def health_check(self) -> bool:
        """
        Perform database health check.

        Returns:
            True if database is accessible
        """
        try:
            async with self.read_transaction() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error("Health check failed", error=str(e))
            return False
