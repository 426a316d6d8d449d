"""Merge the fetched catalog with the user's status into store entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable

from ..models import AppEntry, CatalogApp, UserStatus
from .app_store import AppStore

logger = logging.getLogger(__name__)

NON_CANONICAL_SUFFIXES: tuple[str, ...] = (" Demo", " Playtest")


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of rebuilding the app store from a fresh catalog."""

    stored: int
    skipped: int
    unseen: int


def is_canonical(name: str) -> bool:
    """Return ``False`` for demo and playtest variants of a base title."""

    return not name.endswith(NON_CANONICAL_SUFFIXES)


def reconcile(
    apps: Iterable[CatalogApp],
    status: UserStatus,
    *,
    previously_seen: AbstractSet[int] = frozenset(),
) -> list[AppEntry]:
    """Return canonical entries with flags derived from ``status``.

    The first occurrence of a duplicated app id wins. ``previously_seen``
    carries forward ids already marked seen so a refresh never unsees them.
    """

    entries: list[AppEntry] = []
    emitted: set[int] = set()
    for app in apps:
        if app.appid in emitted or not is_canonical(app.name):
            continue
        owned = app.appid in status.owned
        ignored = app.appid in status.ignored
        wishlisted = app.appid in status.wishlisted
        entries.append(
            AppEntry(
                appid=app.appid,
                name=app.name,
                owned=owned,
                ignored=ignored,
                wishlisted=wishlisted,
                seen=owned or ignored or wishlisted or app.appid in previously_seen,
            )
        )
        emitted.add(app.appid)
    return entries


async def rebuild_store(
    store: AppStore, apps: list[CatalogApp], status: UserStatus
) -> ReconcileResult:
    """Replace the whole store with entries reconciled from ``apps``."""

    logger.info("Updating apps in database.")
    previously_seen = await store.seen_ids()
    entries = reconcile(apps, status, previously_seen=previously_seen)
    await store.replace_all(entries)

    unseen = sum(1 for entry in entries if not entry.seen)
    result = ReconcileResult(
        stored=len(entries), skipped=len(apps) - len(entries), unseen=unseen
    )
    logger.info(
        "Apps up to date in database: %d stored, %d skipped, %d unseen",
        result.stored,
        result.skipped,
        result.unseen,
    )
    return result
