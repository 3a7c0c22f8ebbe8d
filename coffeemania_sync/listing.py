"""Discovery of category → item links on the menu listing page.

The live listing reveals items through infinite scroll, so the default
discoverer drives a headless Chromium via Playwright. A static variant
parses a plain GET of the same page, for server-rendered or mocked
listings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.records import CategoryLinkSet

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

_CATEGORY_SELECTOR = ".deliveryCategoryBlockWrapper.deliveryCategoryContainer"
_UNKNOWN_CATEGORY = "Неизвестная категория"

DEFAULT_MAX_SCROLLS = 20
DEFAULT_SCROLL_PAUSE = 0.0
_PW_NAV_TIMEOUT = 60_000  # ms
_SETTLE_DELAY = 1.0  # seconds after DOMContentLoaded before scrolling


class ListingDiscoverer(Protocol):
    """Anything that can turn the listing URL into a category link map."""

    async def discover(self, listing_url: str) -> CategoryLinkSet: ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_category_links(
    html: str,
    base_url: str,
    item_marker: str = "/menu/",
) -> CategoryLinkSet:
    """Collect item links per category container of the expanded listing.

    Relative hrefs are resolved against *base_url*, duplicates collapse,
    and categories without a single item link are left out.
    """
    soup = BeautifulSoup(html, "html.parser")
    links = CategoryLinkSet()

    for container in soup.select(_CATEGORY_SELECTOR):
        title = str(container.get("data-title") or "").strip() or _UNKNOWN_CATEGORY
        for a_tag in container.find_all("a", href=True):
            href = str(a_tag["href"])
            if item_marker not in href:
                continue
            links.add(title, urljoin(base_url, href))

    return links


# ---------------------------------------------------------------------------
# Browser-driven discovery
# ---------------------------------------------------------------------------


async def scroll_to_bottom(
    page: Page,
    pause: float = DEFAULT_SCROLL_PAUSE,
    max_scrolls: int = DEFAULT_MAX_SCROLLS,
) -> int:
    """Scroll until the document height stops growing.

    Returns the number of scrolls that loaded new content. Stops after
    *max_scrolls* of them even if the page keeps growing.
    """
    last_height = await page.evaluate("document.body.scrollHeight")
    scrolls = 0
    while True:
        await page.evaluate("window.scrollTo(0, document.body.scrollHeight);")
        await asyncio.sleep(pause)
        new_height = await page.evaluate("document.body.scrollHeight")
        if new_height == last_height:
            break
        last_height = new_height
        scrolls += 1
        if scrolls >= max_scrolls:
            logger.info("Reached scroll limit (%d)", max_scrolls)
            break
    return scrolls


class PlaywrightListingDiscoverer:
    """Render the listing in headless Chromium, scroll it out, then parse."""

    def __init__(
        self,
        base_url: str,
        *,
        item_marker: str = "/menu/",
        max_scrolls: int = DEFAULT_MAX_SCROLLS,
        scroll_pause: float = DEFAULT_SCROLL_PAUSE,
        nav_timeout: int = _PW_NAV_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self.item_marker = item_marker
        self.max_scrolls = max_scrolls
        self.scroll_pause = scroll_pause
        self.nav_timeout = nav_timeout

    async def discover(self, listing_url: str) -> CategoryLinkSet:
        from playwright.async_api import async_playwright

        logger.info("Launching Playwright browser for %s", listing_url)
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True)
            try:
                page = await browser.new_page()
                await page.goto(
                    listing_url,
                    timeout=self.nav_timeout,
                    wait_until="domcontentloaded",
                )
                await asyncio.sleep(_SETTLE_DELAY)
                await scroll_to_bottom(page, self.scroll_pause, self.max_scrolls)
                html = await page.content()
            finally:
                await browser.close()

        links = parse_category_links(html, self.base_url, self.item_marker)
        logger.info(
            "Discovered %d categories with %d item links",
            len(links),
            links.total_links,
        )
        return links


# ---------------------------------------------------------------------------
# Static discovery
# ---------------------------------------------------------------------------


class StaticListingDiscoverer:
    """Parse the listing from a plain GET, without running its JavaScript."""

    def __init__(
        self,
        fetcher: Fetcher,
        base_url: str,
        *,
        item_marker: str = "/menu/",
    ) -> None:
        self.fetcher = fetcher
        self.base_url = base_url
        self.item_marker = item_marker

    async def discover(self, listing_url: str) -> CategoryLinkSet:
        html = await self.fetcher.fetch_text(listing_url)
        if html is None:
            logger.error("Menu listing %s is unavailable", listing_url)
            return CategoryLinkSet()
        return parse_category_links(html, self.base_url, self.item_marker)
