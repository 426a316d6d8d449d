"""Persistent, indexed storage of catalog apps."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Iterable, Protocol

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import AppRecord
from ..errors import StoreUnavailable
from ..models import AppEntry

logger = logging.getLogger(__name__)

INDEX_NAMES: tuple[str, ...] = ("name", "seen", "owned", "ignored", "wishlisted")
_INSERT_CHUNK_SIZE = 5_000
_STREAM_BATCH_SIZE = 500


class AppStore(Protocol):
    """Ordered, index-filtered access to the stored apps."""

    async def get(self, appid: int) -> AppEntry | None: ...

    async def put(self, entry: AppEntry) -> None: ...

    async def replace_all(self, entries: Iterable[AppEntry]) -> None: ...

    def iter_index(
        self,
        index: str,
        value: Any,
        *,
        descending: bool = False,
        offset: int = 0,
    ) -> AsyncIterator[AppEntry]: ...

    async def count(self, index: str, value: Any) -> int: ...

    async def seen_ids(self) -> set[int]: ...


def check_index(index: str) -> str:
    if index not in INDEX_NAMES:
        raise ValueError(f"Unknown app index {index!r}")
    return index


class SqlAppStore:
    """``AppStore`` backed by the ``apps`` table and its secondary indexes."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, appid: int) -> AppEntry | None:
        try:
            async with self._session_factory() as session:
                record = await session.get(AppRecord, appid)
                return _to_entry(record) if record is not None else None
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot read app {appid}: {exc}") from exc

    async def put(self, entry: AppEntry) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.merge(AppRecord(**entry.model_dump()))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot store app {entry.appid}: {exc}") from exc

    async def replace_all(self, entries: Iterable[AppEntry]) -> None:
        """Swap the whole table contents inside a single transaction."""

        rows = [entry.model_dump() for entry in entries]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(delete(AppRecord))
                    for start in range(0, len(rows), _INSERT_CHUNK_SIZE):
                        await session.execute(
                            insert(AppRecord), rows[start : start + _INSERT_CHUNK_SIZE]
                        )
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot replace stored apps: {exc}") from exc
        logger.debug("Replaced app store contents with %d entries", len(rows))

    async def iter_index(
        self,
        index: str,
        value: Any,
        *,
        descending: bool = False,
        offset: int = 0,
    ) -> AsyncIterator[AppEntry]:
        column = getattr(AppRecord, check_index(index))
        if descending:
            order = (column.desc(), AppRecord.appid.desc())
        else:
            order = (column.asc(), AppRecord.appid.asc())
        stmt = select(AppRecord).where(column == value).order_by(*order)
        if offset:
            stmt = stmt.offset(offset)
        stmt = stmt.execution_options(yield_per=_STREAM_BATCH_SIZE)

        try:
            async with self._session_factory() as session:
                records = await session.stream_scalars(stmt)
                async for record in records:
                    yield _to_entry(record)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot scan app index {index}: {exc}") from exc

    async def count(self, index: str, value: Any) -> int:
        column = getattr(AppRecord, check_index(index))
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(func.count()).select_from(AppRecord).where(column == value)
                )
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot count app index {index}: {exc}") from exc

    async def seen_ids(self) -> set[int]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AppRecord.appid).where(AppRecord.seen.is_(True))
                )
                return set(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Cannot read seen apps: {exc}") from exc


def _to_entry(record: AppRecord) -> AppEntry:
    return AppEntry(
        appid=record.appid,
        name=record.name,
        owned=record.owned,
        ignored=record.ignored,
        wishlisted=record.wishlisted,
        seen=record.seen,
    )
