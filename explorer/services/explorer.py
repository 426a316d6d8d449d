"""Session context running the refresh, selection and injection pipeline."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any

from ..config import Settings
from ..errors import FetchFailed
from ..models import UserStatus
from ..utils import origin_of, parse_current_appid
from .affordance import build_affordance, inject_affordances
from .app_store import AppStore
from .cache_gate import APPS_CACHED_KEY, USER_DATA_CACHED_KEY, CacheGate
from .reconciler import ReconcileResult, rebuild_store
from .seen_tracker import mark_seen
from .selector import next_unseen, random_unseen
from .steam import SteamClient

logger = logging.getLogger(__name__)

NEXT_LABEL = "Next"
RANDOM_LABEL = "Random"


@dataclass(slots=True)
class HostPage:
    """The store page the explorer is activated on."""

    url: str | None = None
    html: str | None = None


@dataclass(slots=True)
class StaleCheck:
    key: str
    stale: bool


@dataclass(slots=True)
class FetchResult:
    """Whether a stage refreshed its remote document and how it went."""

    source: str
    fetched: bool
    count: int = 0
    error: str | None = None


@dataclass
class SelectionResult:
    """Outcome of one activation, exposed to the calling surface."""

    current_appid: int | None = None
    next_appid: int | None = None
    random_appid: int | None = None
    next_url: str | None = None
    random_url: str | None = None
    html: str | None = None
    reconciled: ReconcileResult | None = None
    fetches: list[FetchResult] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "currentAppid": self.current_appid,
            "nextAppid": self.next_appid,
            "randomAppid": self.random_appid,
            "nextUrl": self.next_url,
            "randomUrl": self.random_url,
            "html": self.html,
            "reconciled": (
                {
                    "stored": self.reconciled.stored,
                    "skipped": self.reconciled.skipped,
                    "unseen": self.reconciled.unseen,
                }
                if self.reconciled
                else None
            ),
            "fetches": [
                {"source": fetch.source, "fetched": fetch.fetched, "count": fetch.count}
                for fetch in self.fetches
            ],
            "diagnostics": list(self.diagnostics),
        }


class ExplorerSession:
    """Explicit session state shared by the pipeline stages.

    Stages run strictly in the order user status, catalog, seen marking,
    selection and injection.
    """

    def __init__(
        self,
        settings: Settings,
        steam_client: SteamClient,
        store: AppStore,
        gate: CacheGate,
        *,
        rng: random.Random | None = None,
    ):
        self._settings = settings
        self._steam = steam_client
        self._store = store
        self._gate = gate
        self._rng = rng or random.Random()
        self._user_status: UserStatus | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def store(self) -> AppStore:
        return self._store

    async def start(self, page: HostPage | None = None) -> SelectionResult:
        """Run the full gate-check, fetch, reconcile, select and inject sequence."""

        page = page or HostPage()
        result = SelectionResult()

        async with self._refresh_lock:
            status_check = await self.check_user_status()
            status_fetch = await self.load_user_status(status_check)
            catalog_check = await self.check_catalog()
            catalog_fetch, result.reconciled = await self.load_catalog(catalog_check)

        for fetch in (status_fetch, catalog_fetch):
            result.fetches.append(fetch)
            if fetch.error:
                result.diagnostics.append(fetch.error)

        result.current_appid = parse_current_appid(page.url)
        if result.current_appid is not None:
            await self.mark_visited(result.current_appid)

        result.next_appid = await next_unseen(
            self._store, ceiling=self._settings.next_appid_ceiling
        )
        result.random_appid = await random_unseen(self._store, rng=self._rng)
        if result.next_appid is None:
            logger.info("Every stored app has been seen")

        origin = origin_of(page.url, self._settings.steam_store_origin)
        next_target = build_affordance(NEXT_LABEL, result.next_appid, origin)
        random_target = build_affordance(RANDOM_LABEL, result.random_appid, origin)
        result.next_url = next_target.url if next_target else None
        result.random_url = random_target.url if random_target else None
        if page.html is not None:
            result.html = inject_affordances(page.html, [next_target, random_target])
        return result

    async def mark_visited(self, appid: int) -> bool:
        """Mark ``appid`` seen once no catalog rebuild is in progress."""

        async with self._refresh_lock:
            return await mark_seen(self._store, appid)

    async def check_user_status(self) -> StaleCheck:
        stale = await self._gate.is_stale(
            USER_DATA_CACHED_KEY, self._settings.user_data_cache_seconds
        )
        return StaleCheck(key=USER_DATA_CACHED_KEY, stale=stale)

    async def load_user_status(self, check: StaleCheck) -> FetchResult:
        """Fetch the user status when stale, otherwise restore the cached snapshot."""

        if not check.stale:
            snapshot = await self._gate.load_snapshot()
            if snapshot is not None:
                self._user_status = snapshot
                return FetchResult(source=check.key, fetched=False)
            logger.info("Cached user data missing; refetching")

        try:
            status = await self._steam.fetch_user_status()
        except FetchFailed as exc:
            logger.warning("%s; using cached user data", exc)
            self._user_status = await self._gate.load_snapshot()
            return FetchResult(source=check.key, fetched=False, error=str(exc))
        await self._gate.store_snapshot(status)
        self._user_status = status
        return FetchResult(
            source=check.key,
            fetched=True,
            count=len(status.owned) + len(status.ignored) + len(status.wishlisted),
        )

    async def check_catalog(self) -> StaleCheck:
        stale = await self._gate.is_stale(
            APPS_CACHED_KEY, self._settings.apps_cache_seconds
        )
        return StaleCheck(key=APPS_CACHED_KEY, stale=stale)

    async def load_catalog(
        self, check: StaleCheck
    ) -> tuple[FetchResult, ReconcileResult | None]:
        """Refetch the catalog and rebuild the store when the slot is stale."""

        if not check.stale:
            return FetchResult(source=check.key, fetched=False), None

        if self._user_status is None:
            reason = "No user data available; keeping the stored apps"
            logger.warning(reason)
            return FetchResult(source=check.key, fetched=False, error=reason), None

        try:
            apps = await self._steam.fetch_catalog()
        except FetchFailed as exc:
            logger.warning("%s; keeping the stored apps", exc)
            return FetchResult(source=check.key, fetched=False, error=str(exc)), None

        reconciled = await rebuild_store(self._store, apps, self._user_status)
        await self._gate.touch(APPS_CACHED_KEY)
        return FetchResult(source=check.key, fetched=True, count=len(apps)), reconciled

    async def invalidate(self) -> None:
        """Force both remote documents to be refetched on the next activation."""

        await self._gate.invalidate()
