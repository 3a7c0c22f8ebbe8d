"""Reconciliation of the live site against the database.

One run goes through ``discover → extract (bounded concurrency) → upsert →
delete stale``. Re-running against unchanged pages leaves the database
unchanged.

Deletion is aggressive: a category that is discovered but
yields no SKU at all in this run (for example because every item page
timed out) is wiped entirely, exactly like a category that disappeared.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from app.config import Settings, settings as default_settings
from coffeemania_sync.fetcher import Fetcher, create_client
from coffeemania_sync.images import ImageCache
from coffeemania_sync.listing import (
    ListingDiscoverer,
    PlaywrightListingDiscoverer,
    StaticListingDiscoverer,
)
from coffeemania_sync.menu import extract_item
from coffeemania_sync.records import MenuItemRecord, RestaurantLinks, SyncResult
from coffeemania_sync.restaurants import discover_restaurants, extract_restaurant
from coffeemania_sync.storage import Storage

logger = logging.getLogger(__name__)


class Reconciler:
    """Drive one sync of the menu and/or the restaurants into *storage*.

    Args:
        storage: Database handle, owned by the caller.
        settings: Site, fetching and cache configuration.
        discoverer: Menu listing discoverer. Defaults to Playwright, or to a
            plain GET when ``settings.listing_mode == "static"``.
        transport: Optional httpx transport (tests use ``MockTransport``).
    """

    def __init__(
        self,
        storage: Storage,
        settings: Settings = default_settings,
        *,
        discoverer: ListingDiscoverer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.storage = storage
        self.settings = settings
        self.discoverer = discoverer
        self.transport = transport

    @asynccontextmanager
    async def _batch(self) -> AsyncIterator[Fetcher]:
        """A fresh client and concurrency gate for one batch of requests."""
        async with create_client(self.settings, self.transport) as client:
            yield Fetcher.from_settings(client, self.settings)

    def _listing_discoverer(self, fetcher: Fetcher) -> ListingDiscoverer:
        if self.discoverer is not None:
            return self.discoverer
        if self.settings.listing_mode == "static":
            return StaticListingDiscoverer(
                fetcher,
                self.settings.base_url,
                item_marker=self.settings.item_path_marker,
            )
        return PlaywrightListingDiscoverer(
            self.settings.base_url,
            item_marker=self.settings.item_path_marker,
            max_scrolls=self.settings.max_scrolls,
            scroll_pause=self.settings.scroll_pause,
            nav_timeout=self.settings.page_load_timeout_ms,
        )

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def run_sync(self, menu: bool = True, restaurants: bool = True) -> SyncResult:
        """Run one full sync.

        Page-level failures only shrink the result; database errors
        propagate and leave whatever batches already committed in place.
        """
        result = SyncResult()
        if menu:
            await self._sync_menu(result)
        if restaurants:
            await self._sync_restaurants(result)
        logger.info(
            "Sync finished: %d items upserted, %d categories and %d items deleted, "
            "%d restaurants upserted, %d records dropped",
            result.updated,
            result.deleted_categories,
            result.deleted_items,
            result.restaurants_updated,
            result.dropped,
        )
        return result

    async def sync_menu(self) -> SyncResult:
        result = SyncResult()
        await self._sync_menu(result)
        return result

    async def sync_restaurants(self) -> tuple[SyncResult, dict[str, RestaurantLinks]]:
        result = SyncResult()
        links = await self._sync_restaurants(result)
        return result, links

    async def get_links(self) -> dict[str, RestaurantLinks]:
        """Sync restaurants and return their menu / wine-card links by id."""
        return await self._sync_restaurants(SyncResult())

    # ---------------------------------------------------------------------------
    # Menu
    # ---------------------------------------------------------------------------

    async def _sync_menu(self, result: SyncResult) -> None:
        base_url = self.settings.base_url
        async with self._batch() as fetcher:
            links = await self._listing_discoverer(fetcher).discover(self.settings.menu_url)
            if not links:
                logger.warning("No menu categories discovered; leaving stored menu as is")
                return

            logger.info(
                "Scraping %d items in %d categories …", links.total_links, len(links)
            )
            images = ImageCache(fetcher, self.settings.images_dir)
            records = await asyncio.gather(
                *(
                    extract_item(url, category, fetcher, images, base_url)
                    for category, urls in links.items()
                    for url in sorted(urls)
                )
            )

        scraped: dict[str, list[MenuItemRecord]] = {category: [] for category in links}
        for record in records:
            if record is not None:
                scraped[record.category].append(record)

        rows = self._menu_rows(scraped, result)
        result.updated += await self.storage.upsert_menu_items(rows)

        categories_deleted, rows_deleted = await self.storage.delete_categories_except(
            list(scraped)
        )
        result.deleted_categories += categories_deleted
        result.deleted_items += rows_deleted

        for category, items in scraped.items():
            skus = {item.sku for item in items if item.sku is not None}
            if not skus:
                logger.warning(
                    "No SKUs scraped for category %r; deleting all its stored items",
                    category,
                )
            result.deleted_items += await self.storage.prune_category(category, skus)

    @staticmethod
    def _menu_rows(
        scraped: dict[str, list[MenuItemRecord]], result: SyncResult
    ) -> list[dict[str, Any]]:
        """Rows keyed by (sku, category); SKU-less items cannot be reconciled."""
        rows: dict[tuple[int, str], dict[str, Any]] = {}
        for items in scraped.values():
            for item in items:
                if item.sku is None:
                    logger.warning("Skipping dish without SKU: %s", item.name)
                    result.dropped += 1
                    continue
                rows[(item.sku, item.category)] = item.to_row()
        return list(rows.values())

    # ---------------------------------------------------------------------------
    # Restaurants
    # ---------------------------------------------------------------------------

    async def _sync_restaurants(self, result: SyncResult) -> dict[str, RestaurantLinks]:
        base_url = self.settings.base_url
        async with self._batch() as fetcher:
            listing = await discover_restaurants(
                fetcher,
                self.settings.restaurants_url,
                base_url,
                self.settings.excluded_restaurant_names,
            )
            images = ImageCache(fetcher, self.settings.restaurant_images_dir)
            records = await asyncio.gather(
                *(
                    extract_restaurant(url, name, fetcher, images, base_url)
                    for name, url in listing.items()
                )
            )

        rows: dict[str, dict[str, Any]] = {}
        links: dict[str, RestaurantLinks] = {}
        for record in records:
            if record is None:
                continue
            if record.external_id is None:
                logger.warning("Skipping restaurant without ID: %s", record.name)
                result.dropped += 1
                continue
            rows[record.external_id] = record.to_row()
            links[record.external_id] = record.links

        result.restaurants_updated += await self.storage.upsert_restaurants(
            list(rows.values())
        )
        return links
