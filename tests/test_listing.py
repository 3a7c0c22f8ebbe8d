"""Tests for menu listing discovery."""

from unittest.mock import AsyncMock, patch

from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.listing import (
    PlaywrightListingDiscoverer,
    StaticListingDiscoverer,
    parse_category_links,
    scroll_to_bottom,
)
from tests.pages import BASE_URL, MENU_URL, FakeSite, listing_page


class FakePage:
    """Minimal stand-in for a Playwright page with a growing document."""

    def __init__(self, heights: list[int]) -> None:
        self.heights = heights
        self.scroll_calls = 0

    async def evaluate(self, script: str) -> int | None:
        if script.startswith("window.scrollTo"):
            self.scroll_calls += 1
            return None
        index = min(self.scroll_calls, len(self.heights) - 1)
        return self.heights[index]


def test_parse_category_links() -> None:
    """Relative links resolve, duplicates collapse, empty categories vanish."""
    html = listing_page(
        {
            "Десерты": ["/menu/cheesecake", "/menu/cheesecake", f"{BASE_URL}/menu/medovik"],
            "Завтраки": ["/menu/syrniki", "/about", "/delivery"],
            "Пустая": ["/about"],
        }
    )

    links = parse_category_links(html, BASE_URL)

    assert set(links) == {"Десерты", "Завтраки"}
    assert links.categories["Десерты"] == {
        f"{BASE_URL}/menu/cheesecake",
        f"{BASE_URL}/menu/medovik",
    }
    assert links.categories["Завтраки"] == {f"{BASE_URL}/menu/syrniki"}
    assert links.total_links == 3


def test_parse_category_links_without_title() -> None:
    html = (
        '<div class="deliveryCategoryBlockWrapper deliveryCategoryContainer">'
        '<a href="/menu/latte">Латте</a></div>'
    )
    links = parse_category_links(html, BASE_URL)
    assert list(links) == ["Неизвестная категория"]


async def test_scroll_stops_when_height_is_stable() -> None:
    page = FakePage([1000, 2000, 3000, 3000])

    loaded = await scroll_to_bottom(page, pause=0.0, max_scrolls=20)

    assert loaded == 2
    assert page.scroll_calls == 3


async def test_scroll_stops_at_cap() -> None:
    page = FakePage(list(range(1000, 100_000, 1000)))

    loaded = await scroll_to_bottom(page, pause=0.0, max_scrolls=5)

    assert loaded == 5
    assert page.scroll_calls == 5


async def test_static_discoverer(site: FakeSite, fetcher: Fetcher) -> None:
    site.pages[MENU_URL] = listing_page({"Кофе": ["/menu/latte", "/menu/cappuccino"]})

    links = await StaticListingDiscoverer(fetcher, BASE_URL).discover(MENU_URL)

    assert links.categories == {
        "Кофе": {f"{BASE_URL}/menu/latte", f"{BASE_URL}/menu/cappuccino"}
    }


async def test_static_discoverer_unavailable_listing(fetcher: Fetcher) -> None:
    links = await StaticListingDiscoverer(fetcher, BASE_URL).discover(MENU_URL)
    assert len(links) == 0


async def test_playwright_discoverer_parses_scrolled_dom() -> None:
    """The browser path scrolls, reads the DOM and always closes the browser."""
    page = AsyncMock()
    page.evaluate.side_effect = [1000, None, 1000]
    page.content.return_value = listing_page({"Кофе": ["/menu/latte"]})
    browser = AsyncMock()
    browser.new_page.return_value = page
    pw = AsyncMock()
    pw.chromium.launch.return_value = browser
    pw_context = AsyncMock()
    pw_context.__aenter__.return_value = pw

    with patch("playwright.async_api.async_playwright", return_value=pw_context), patch(
        "coffeemania_sync.listing._SETTLE_DELAY", 0.0
    ):
        links = await PlaywrightListingDiscoverer(BASE_URL).discover(MENU_URL)

    assert links.categories == {"Кофе": {f"{BASE_URL}/menu/latte"}}
    page.goto.assert_awaited_once()
    browser.close.assert_awaited_once()
