"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, AsyncIterator, Iterable

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``explorer``
# sits at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from explorer.models import AppEntry  # noqa: E402
from explorer.services.app_store import check_index  # noqa: E402


class InMemoryAppStore:
    """Dictionary backed ``AppStore`` used to test store consumers in isolation."""

    def __init__(self, entries: Iterable[AppEntry] = ()):
        self.entries: dict[int, AppEntry] = {entry.appid: entry for entry in entries}
        self.puts = 0

    async def get(self, appid: int) -> AppEntry | None:
        entry = self.entries.get(appid)
        return entry.model_copy() if entry is not None else None

    async def put(self, entry: AppEntry) -> None:
        self.puts += 1
        self.entries[entry.appid] = entry.model_copy()

    async def replace_all(self, entries: Iterable[AppEntry]) -> None:
        self.entries = {entry.appid: entry.model_copy() for entry in entries}

    async def iter_index(
        self,
        index: str,
        value: Any,
        *,
        descending: bool = False,
        offset: int = 0,
    ) -> AsyncIterator[AppEntry]:
        check_index(index)
        matching = sorted(
            (entry for entry in self.entries.values() if getattr(entry, index) == value),
            key=lambda entry: (getattr(entry, index), entry.appid),
            reverse=descending,
        )
        for entry in matching[offset:]:
            yield entry.model_copy()

    async def count(self, index: str, value: Any) -> int:
        check_index(index)
        return sum(1 for entry in self.entries.values() if getattr(entry, index) == value)

    async def seen_ids(self) -> set[int]:
        return {appid for appid, entry in self.entries.items() if entry.seen}


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def memory_store() -> type[InMemoryAppStore]:
    """Return the in-memory store class so tests can seed their own entries."""

    return InMemoryAppStore


@pytest.fixture
def make_entry():
    """Build an ``AppEntry`` with sensible defaults."""

    def _make(appid: int, name: str | None = None, **flags: bool) -> AppEntry:
        return AppEntry(appid=appid, name=name or f"App {appid}", **flags)

    return _make
