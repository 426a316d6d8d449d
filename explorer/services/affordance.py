"""Attach navigation buttons for selected apps to a store page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from bs4 import BeautifulSoup

from ..utils import build_app_url

logger = logging.getLogger(__name__)

NAV_CONTAINER_CLASS = "store_nav"
NAV_TAB_CLASS = "tab"


@dataclass(slots=True, frozen=True)
class Affordance:
    """A labelled link to an app's store page."""

    label: str
    appid: int
    url: str


def build_affordance(label: str, appid: int | None, origin: str) -> Affordance | None:
    if appid is None:
        return None
    return Affordance(label=label, appid=appid, url=build_app_url(origin, appid))


def inject_affordances(html: str, affordances: Iterable[Affordance | None]) -> str:
    """Append one tab per affordance to the page's ``store_nav`` bar."""

    targets = [affordance for affordance in affordances if affordance is not None]
    if not targets:
        return html

    soup = BeautifulSoup(html, "html.parser")
    nav_bar = soup.select_one(f".{NAV_CONTAINER_CLASS}")
    if nav_bar is None:
        logger.warning("No .%s container on page; skipping navigation tabs", NAV_CONTAINER_CLASS)
        return html

    for affordance in targets:
        tab = soup.new_tag("a", href=affordance.url)
        tab["class"] = [NAV_TAB_CLASS]
        label = soup.new_tag("span")
        label.string = affordance.label
        tab.append(label)
        nav_bar.append(tab)
    return str(soup)
