"""Database utilities for the Steam Explorer service."""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, delete, event, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Catalog cache slot; reset whenever the app store is recreated.
APPS_CACHED_KEY = "apps.cached"


class Base(DeclarativeBase):
    """Declarative base with consistent naming conventions."""

    metadata = MetaData()


class Database:
    """Thin wrapper managing the SQLAlchemy async engine and sessions."""

    def __init__(self, database_url: str):
        self._engine: AsyncEngine = create_async_engine(database_url, future=True)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )
        if self._engine.dialect.name == "sqlite":
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_wal)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_all(self) -> None:
        """Create tables, upgrading the app store when its schema is outdated."""

        try:
            async with self._engine.begin() as connection:
                await connection.run_sync(self._apply_schema_upgrade)
        except StoreUnavailable:
            raise
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable(f"Cannot open app database: {exc}") from exc

    @staticmethod
    def _apply_schema_upgrade(sync_connection) -> None:
        """(Re)create the app store and its indexes when the version is stale."""

        from .db_models import AppRecord, CacheSlot, SchemaInfo

        inspector = inspect(sync_connection)
        table_names = inspector.get_table_names()

        version: int | None = None
        if SchemaInfo.__tablename__ in table_names:
            version = sync_connection.execute(
                select(SchemaInfo.version).where(SchemaInfo.id == 1)
            ).scalar_one_or_none()

        if version is not None and version > SCHEMA_VERSION:
            raise StoreUnavailable(
                f"App database schema version {version} is newer than "
                f"supported version {SCHEMA_VERSION}"
            )

        if version is None or version < SCHEMA_VERSION:
            if AppRecord.__tablename__ in table_names:
                AppRecord.__table__.drop(sync_connection)
            logger.info(
                "Upgrading app database schema from %s to %s",
                version,
                SCHEMA_VERSION,
            )

        Base.metadata.create_all(sync_connection)

        if version != SCHEMA_VERSION:
            # The recreated store is empty, so the catalog must be refetched.
            sync_connection.execute(
                delete(CacheSlot).where(CacheSlot.key == APPS_CACHED_KEY)
            )
            sync_connection.execute(
                CacheSlot.__table__.insert().values(key=APPS_CACHED_KEY, value="0")
            )
            sync_connection.execute(delete(SchemaInfo))
            sync_connection.execute(
                SchemaInfo.__table__.insert().values(id=1, version=SCHEMA_VERSION)
            )

    async def dispose(self) -> None:
        """Dispose of the underlying database engine."""

        await self._engine.dispose()


def _enable_sqlite_wal(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()
