from __future__ import annotations

from bs4 import BeautifulSoup

from explorer.services.affordance import build_affordance, inject_affordances

PAGE = """
<html><body>
<div class="store_nav_area"><div class="store_nav">
<a class="tab" href="/search"><span>Search</span></a>
</div></div>
</body></html>
"""


def test_inject_appends_tabs_to_store_nav() -> None:
    origin = "https://store.steampowered.com"
    html = inject_affordances(
        PAGE,
        [build_affordance("Next", 730, origin), build_affordance("Random", 440, origin)],
    )

    soup = BeautifulSoup(html, "html.parser")
    tabs = soup.select(".store_nav a.tab")
    assert [tab.get_text() for tab in tabs] == ["Search", "Next", "Random"]
    assert tabs[1]["href"] == "https://store.steampowered.com/app/730"
    assert tabs[2]["href"] == "https://store.steampowered.com/app/440"


def test_no_target_leaves_page_untouched() -> None:
    assert build_affordance("Next", None, "https://store.example.com") is None
    assert inject_affordances(PAGE, [None, None]) == PAGE


def test_missing_container_leaves_page_untouched() -> None:
    page = "<html><body><div id='nav'></div></body></html>"
    target = build_affordance("Next", 1, "https://store.example.com")

    assert inject_affordances(page, [target]) == page
