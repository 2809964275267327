"""Async SQLAlchemy engine lifecycle and session management.

The engine (and therefore its connection pool) is created lazily on first
use and then shared by every request for the life of the process.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from sqlalchemy import DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.expression import FunctionElement

from incident_intake.config import Settings
from incident_intake.errors import ConfigurationError, StoreError

logger = logging.getLogger("incident_intake.database")

EngineFactory = Callable[..., AsyncEngine]


class Base(DeclarativeBase):
    pass


class utc_timestamp(FunctionElement):
    """Server-evaluated current UTC instant, rendered per dialect."""

    type = DateTime()
    inherit_cache = True


@compiles(utc_timestamp)
def _utc_timestamp_default(element, compiler, **kw) -> str:
    # SQLite's CURRENT_TIMESTAMP is already UTC.
    return "CURRENT_TIMESTAMP"


@compiles(utc_timestamp, "mssql")
def _utc_timestamp_mssql(element, compiler, **kw) -> str:
    return "SYSUTCDATETIME()"


@compiles(utc_timestamp, "postgresql")
def _utc_timestamp_postgresql(element, compiler, **kw) -> str:
    return "TIMEZONE('utc', CURRENT_TIMESTAMP)"


def describe_db_error(err: BaseException) -> str:
    """Return the backend's own message for a failed database call."""
    orig = getattr(err, "orig", None)
    if orig is not None:
        return str(orig) or repr(orig)
    return str(err) or repr(err)


class ConnectionPool:
    """Process-wide, lazily established pool of backend connections."""

    def __init__(self, settings: Settings, engine_factory: EngineFactory = create_async_engine) -> None:
        self._settings = settings
        self._engine_factory = engine_factory
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._sessionmaker is not None

    async def get_sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        """Return the shared session factory, creating the pool exactly once."""
        if self._sessionmaker is not None:
            return self._sessionmaker

        # Configuration is checked before any connection attempt.
        missing = self._settings.missing_database_settings()
        if missing:
            raise ConfigurationError(missing)

        async with self._lock:
            if self._sessionmaker is None:
                engine = self._build_engine()
                await self._warm_up(engine)
                self._engine = engine
                self._sessionmaker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            return self._sessionmaker

    async def get_engine(self) -> AsyncEngine:
        """Return the shared engine, creating it exactly once."""
        await self.get_sessionmaker()
        return self._engine

    def _build_engine(self) -> AsyncEngine:
        s = self._settings
        schema = s.db_schema.strip() or None
        logger.info(f"Creating connection pool for {s.db_server}/{s.db_name} (max={s.db_pool_max})")
        return self._engine_factory(
            s.database_url(),
            echo=False,
            pool_size=s.db_pool_max,
            max_overflow=0,
            pool_timeout=s.db_pool_timeout,
            pool_recycle=s.pool_recycle_seconds,
            pool_pre_ping=True,
            execution_options={"schema_translate_map": {None: schema}},
        )

    async def _warm_up(self, engine: AsyncEngine) -> None:
        """Open the configured minimum number of connections up front.

        On any interruption, including cancellation of the first caller, the
        connections opened so far are closed and the engine is disposed; a
        half-built pool is never published.
        """
        count = self._settings.pool_min_connections
        if not count:
            return

        connections = []
        try:
            for _ in range(count):
                connections.append(await engine.connect())
        except BaseException as err:
            for conn in connections:
                await conn.close()
            await engine.dispose()
            if isinstance(err, (SQLAlchemyError, OSError)):
                raise StoreError(describe_db_error(err)) from err
            raise
        for conn in connections:
            await conn.close()
        logger.info(f"Connection pool warmed with {count} connection(s)")

    @asynccontextmanager
    async def acquire_connection(self) -> AsyncIterator[AsyncSession]:
        """Yield a session in a transaction that commits on clean exit.

        Checkout, statement and commit failures surface as StoreError. The
        session is always closed, returning its connection to the pool, even
        when the caller is cancelled.
        """
        sessionmaker = await self.get_sessionmaker()

        try:
            async with sessionmaker() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError) as err:
            raise StoreError(describe_db_error(err)) from err
