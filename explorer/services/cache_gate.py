"""Timestamp based staleness checks for the cached remote documents."""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, Protocol

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import APPS_CACHED_KEY
from ..db_models import CacheSlot
from ..errors import StoreUnavailable
from ..models import UserStatus

logger = logging.getLogger(__name__)

USER_DATA_CACHED_KEY = "userData.cached"
USER_DATA_STORED_KEY = "userData.stored"


class ScalarStore(Protocol):
    """Minimal key/value substrate holding cache timestamps and blobs."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class SqlScalarStore:
    """``ScalarStore`` backed by the ``cache_slots`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(CacheSlot.value).where(CacheSlot.key == key)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot read cache slot {key}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.merge(CacheSlot(key=key, value=value))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot write cache slot {key}: {exc}") from exc


class CacheGate:
    """Decide per cache slot whether the cached data has expired."""

    def __init__(
        self,
        scalar_store: ScalarStore,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self._scalars = scalar_store
        self._clock = clock

    async def is_stale(self, key: str, ttl: float) -> bool:
        """Return ``True`` when ``key`` has no timestamp or it is older than ``ttl``.

        A zero timestamp marks an invalidated slot and is stale for any ``ttl``.
        """

        timestamp = await self.timestamp(key)
        if timestamp is None or timestamp <= 0:
            return True
        return self._clock() - timestamp > ttl

    async def timestamp(self, key: str) -> float | None:
        raw = await self._scalars.get(key)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning("Ignoring unreadable timestamp %r for cache slot %s", raw, key)
            return None

    async def touch(self, key: str) -> None:
        """Record the current time as the last refresh of ``key``."""

        await self._scalars.set(key, repr(self._clock()))

    async def invalidate(self) -> None:
        """Force both cache slots stale on their next check."""

        await self._scalars.set(APPS_CACHED_KEY, "0")
        await self._scalars.set(USER_DATA_CACHED_KEY, "0")
        logger.info("Cache invalidated")

    async def load_snapshot(self) -> UserStatus | None:
        """Restore the cached user status snapshot, if one was stored."""

        raw = await self._scalars.get(USER_DATA_STORED_KEY)
        if raw is None:
            return None
        try:
            return UserStatus.from_userdata(json.loads(raw))
        except (ValueError, TypeError, AttributeError, ValidationError):
            logger.warning("Discarding unreadable cached user status snapshot")
            return None

    async def store_snapshot(self, status: UserStatus) -> None:
        """Persist ``status`` and mark the user status slot fresh."""

        await self._scalars.set(USER_DATA_STORED_KEY, json.dumps(status.to_userdata()))
        await self.touch(USER_DATA_CACHED_KEY)
