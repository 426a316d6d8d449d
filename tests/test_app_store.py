"""Tests for the SQLAlchemy-backed app store."""

from __future__ import annotations

import asyncio

import pytest

from explorer.database import Database
from explorer.errors import StoreUnavailable
from explorer.models import AppEntry
from explorer.services.app_store import SqlAppStore


def _run(tmp_path, scenario) -> None:
    async def runner() -> None:
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'apps.db'}")
        await database.create_all()
        try:
            await scenario(SqlAppStore(database.session_factory))
        finally:
            await database.dispose()

    asyncio.run(runner())


async def _collect(iterator) -> list[int]:
    return [entry.appid async for entry in iterator]


def test_put_inserts_and_replaces(tmp_path) -> None:
    async def scenario(store: SqlAppStore) -> None:
        assert await store.get(1) is None
        await store.put(AppEntry(appid=1, name="First"))
        await store.put(AppEntry(appid=1, name="First", seen=True))

        entry = await store.get(1)
        assert entry == AppEntry(appid=1, name="First", seen=True)
        assert await store.count("seen", True) == 1

    _run(tmp_path, scenario)


def test_index_iteration_orders_by_appid_in_both_directions(tmp_path) -> None:
    async def scenario(store: SqlAppStore) -> None:
        await store.replace_all(
            [
                AppEntry(appid=30, name="C"),
                AppEntry(appid=10, name="A"),
                AppEntry(appid=20, name="B", seen=True, owned=True),
                AppEntry(appid=40, name="D"),
            ]
        )

        assert await _collect(store.iter_index("seen", False)) == [10, 30, 40]
        assert await _collect(store.iter_index("seen", False, descending=True)) == [40, 30, 10]
        assert await _collect(
            store.iter_index("seen", False, descending=True, offset=1)
        ) == [30, 10]
        assert await _collect(store.iter_index("owned", True)) == [20]
        assert await _collect(store.iter_index("name", "D")) == [40]
        assert await store.count("seen", False) == 3
        assert await store.seen_ids() == {20}

    _run(tmp_path, scenario)


def test_replace_all_discards_previous_contents(tmp_path) -> None:
    async def scenario(store: SqlAppStore) -> None:
        await store.replace_all([AppEntry(appid=appid, name=f"Old {appid}") for appid in range(5)])
        await store.replace_all([AppEntry(appid=100, name="New")])

        assert await _collect(store.iter_index("seen", False)) == [100]
        assert await store.get(0) is None

    _run(tmp_path, scenario)


def test_failed_replace_leaves_previous_contents(tmp_path) -> None:
    """A bulk replacement that fails midway must not leave a partial store."""

    async def scenario(store: SqlAppStore) -> None:
        await store.replace_all([AppEntry(appid=1, name="Kept")])

        with pytest.raises(StoreUnavailable):
            await store.replace_all(
                [AppEntry(appid=2, name="New"), AppEntry(appid=2, name="Clash")]
            )

        assert await _collect(store.iter_index("seen", False)) == [1]

    _run(tmp_path, scenario)


def test_unknown_index_is_rejected(tmp_path) -> None:
    async def scenario(store: SqlAppStore) -> None:
        with pytest.raises(ValueError):
            await store.count("price", 10)

    _run(tmp_path, scenario)
