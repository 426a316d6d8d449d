"""Record apps the user has visited."""

from __future__ import annotations

import logging

from .app_store import AppStore

logger = logging.getLogger(__name__)


async def mark_seen(store: AppStore, appid: int) -> bool:
    """Flag ``appid`` as seen; returns whether the store was written."""

    entry = await store.get(appid)
    if entry is None or entry.seen:
        return False
    await store.put(entry.model_copy(update={"seen": True}))
    logger.debug("Marked app %s as seen", appid)
    return True
