"""Pick unseen apps from the store, deterministically or at random."""

from __future__ import annotations

import logging
import random
from contextlib import aclosing

from .app_store import AppStore

logger = logging.getLogger(__name__)

SEEN_INDEX = "seen"


async def next_unseen(store: AppStore, *, ceiling: int | None = None) -> int | None:
    """Return the highest unseen app id not above ``ceiling``."""

    async with aclosing(
        store.iter_index(SEEN_INDEX, False, descending=True)
    ) as cursor:
        async for entry in cursor:
            if ceiling is not None and entry.appid > ceiling:
                continue
            logger.debug("Next app to see is %s - %s", entry.appid, entry.name)
            return entry.appid
    return None


async def random_unseen(
    store: AppStore, *, rng: random.Random | None = None
) -> int | None:
    """Return a uniformly drawn unseen app id, or ``None`` if all are seen.

    The partition must not change between the count and the seek.
    """

    total = await store.count(SEEN_INDEX, False)
    if total == 0:
        return None
    offset = (rng or random).randrange(total)

    async with aclosing(
        store.iter_index(SEEN_INDEX, False, descending=True, offset=offset)
    ) as cursor:
        async for entry in cursor:
            logger.debug("Random app to see is %s - %s", entry.appid, entry.name)
            return entry.appid
    return None
