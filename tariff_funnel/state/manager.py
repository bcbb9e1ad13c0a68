"""Async database manager shared by the API and the scripts."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tariff_funnel.config import get_settings
from tariff_funnel.state.tables import Base
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, database_url: str | None = None) -> None:
        settings = get_settings()
        self.database_url = database_url or settings.database_url
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    async def connect(self) -> None:
        """Create the engine."""
        if self.engine is not None:
            return

        engine_options: dict[str, Any] = {}
        if self.is_sqlite and ":memory:" in self.database_url:
            # One shared connection, otherwise every checkout sees an empty database
            engine_options["poolclass"] = StaticPool
            engine_options["connect_args"] = {"check_same_thread": False}
        elif not self.is_sqlite:
            engine_options["pool_pre_ping"] = True

        self.engine = create_async_engine(self.database_url, **engine_options)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info("database_connected", dialect=self.engine.dialect.name)

    async def disconnect(self) -> None:
        """Dispose of the engine and its pool."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("database_disconnected")

    async def create_schema(self) -> None:
        if self.engine is None:
            await self.connect()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_created")

    async def drop_schema(self) -> None:
        if self.engine is None:
            await self.connect()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("database_schema_dropped")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session wrapped in one transaction.

        The transaction commits when the block exits normally and rolls back
        on any exception, which is then re-raised.
        """
        if self.session_factory is None:
            await self.connect()

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                logger.debug("database_transaction_rolled_back")
                raise

    async def ping(self) -> bool:
        """Check that the database answers."""
        if self.engine is None:
            await self.connect()

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def table_counts(self) -> dict[str, int]:
        """Row count per table, for the internal status endpoint."""
        counts: dict[str, int] = {}
        async with self.session() as session:
            for table in Base.metadata.sorted_tables:
                result = await session.execute(text(f"SELECT COUNT(*) FROM {table.name}"))
                counts[table.name] = result.scalar_one()
        return counts


# Global database manager instance
_database_manager: DatabaseManager | None = None


async def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _database_manager
    if _database_manager is None:
        _database_manager = DatabaseManager()
        await _database_manager.connect()
    return _database_manager
