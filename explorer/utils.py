"""Utility helpers for the Steam Explorer service."""

from __future__ import annotations

from urllib.parse import urlsplit


APP_PATH_MARKER = "app"


def parse_current_appid(path_or_url: str | None) -> int | None:
    """Return the app id of a ``/app/<appid>/...`` store page, if any."""

    if not path_or_url:
        return None
    path = urlsplit(path_or_url).path
    segments = path.split("/")[1:3]
    if len(segments) != 2 or segments[0] != APP_PATH_MARKER:
        return None
    raw = segments[1]
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def origin_of(url: str | None, fallback: str) -> str:
    """Return ``scheme://host`` for ``url`` or ``fallback`` when it has none."""

    if url:
        parts = urlsplit(url)
        if parts.scheme and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}"
    return fallback.rstrip("/")


def build_app_url(origin: str, appid: int) -> str:
    """Return the store page URL for ``appid`` under ``origin``."""

    return f"{origin.rstrip('/')}/{APP_PATH_MARKER}/{appid}"
