"""Clients for the remote Steam catalog and user status endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import FetchFailed, MalformedRemoteData
from ..models import CatalogApp, UserStatus

logger = logging.getLogger(__name__)

CATALOG_SOURCE = "app list"
USER_DATA_SOURCE = "user data"


class SteamClient:
    """Thin wrapper around the Steam app list and dynamic store endpoints."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": f"{self._settings.app_name} (steam-explorer)",
        }
        if self._settings.steam_cookie:
            headers["Cookie"] = self._settings.steam_cookie
        return headers

    async def fetch_catalog(self) -> list[CatalogApp]:
        """Fetch the full app list, dropping items without an id or name."""

        payload = await self._get_json(str(self._settings.steam_app_list_url), CATALOG_SOURCE)
        applist = payload.get("applist")
        raw_apps = applist.get("apps") if isinstance(applist, dict) else None
        if not isinstance(raw_apps, list):
            raise FetchFailed(CATALOG_SOURCE, "response has no applist.apps array")

        apps: list[CatalogApp] = []
        dropped = 0
        for raw in raw_apps:
            try:
                apps.append(CatalogApp.from_payload(raw))
            except MalformedRemoteData as exc:
                dropped += 1
                logger.debug("%s", exc)
        if dropped:
            logger.info("Dropped %d malformed catalog entries", dropped)
        logger.info("Fetched %d catalog entries", len(apps))
        return apps

    async def fetch_user_status(self) -> UserStatus:
        """Fetch the user's owned, ignored and wishlisted apps."""

        payload = await self._get_json(
            str(self._settings.steam_user_data_url), USER_DATA_SOURCE
        )
        status = UserStatus.from_userdata(payload)
        logger.info(
            "Fetched user data: %d owned, %d ignored, %d wishlisted",
            len(status.owned),
            len(status.ignored),
            len(status.wishlisted),
        )
        return status

    async def _get_json(self, url: str, source: str) -> dict[str, Any]:
        try:
            response = await self._client.get(url, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchFailed(source, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchFailed(source, exc.__class__.__name__) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchFailed(source, "response is not JSON") from exc
        if not isinstance(data, dict):
            raise FetchFailed(source, "unexpected response structure")
        return data
