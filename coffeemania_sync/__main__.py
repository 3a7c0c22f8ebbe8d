"""Entry point for the Coffeemania sync pipeline.

Usage::

    python -m coffeemania_sync                          # Menu + restaurants, once
    python -m coffeemania_sync --menu-only              # Menu items only
    python -m coffeemania_sync --restaurants-only       # Restaurants only
    python -m coffeemania_sync --links                  # Restaurants, print menu/wine links
    python -m coffeemania_sync --listing-mode static    # No browser for the menu listing
    python -m coffeemania_sync --every 3600             # Re-run every hour
"""

import argparse
import asyncio
import json
import logging
from dataclasses import asdict

from dotenv import load_dotenv

load_dotenv()

from app.config import Settings, settings
from coffeemania_sync.reconciler import Reconciler
from coffeemania_sync.records import SyncResult
from coffeemania_sync.storage import Storage

logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _log_summary(result: SyncResult) -> None:
    logger.info("=" * 50)
    logger.info("SYNC SUMMARY")
    logger.info("-" * 50)
    logger.info("  Menu items upserted:   %d", result.updated)
    logger.info("  Categories deleted:    %d", result.deleted_categories)
    logger.info("  Menu items deleted:    %d", result.deleted_items)
    logger.info("  Restaurants upserted:  %d", result.restaurants_updated)
    logger.info("  Dropped (no ID/SKU):   %d", result.dropped)
    logger.info("=" * 50)


async def run(
    config: Settings,
    *,
    menu: bool = True,
    restaurants: bool = True,
    links: bool = False,
    every: int = 0,
) -> None:
    """Open storage once, then sync once or every *every* seconds."""
    storage = Storage.from_url(config.database_url, echo=config.debug)
    try:
        await storage.create_schema()
        reconciler = Reconciler(storage, config)

        if links:
            link_map = await reconciler.get_links()
            print(
                json.dumps(
                    {rid: asdict(link) for rid, link in link_map.items()},
                    indent=2,
                    ensure_ascii=False,
                )
            )
            return

        while True:
            logger.info("Starting sync run …")
            try:
                _log_summary(
                    await reconciler.run_sync(menu=menu, restaurants=restaurants)
                )
            except Exception:
                # A failed run is retried by the next interval, not fatal
                if not every:
                    raise
                logger.exception("Sync run failed")
            if not every:
                break
            logger.info("Waiting %d seconds until the next run …", every)
            await asyncio.sleep(every)
    finally:
        await storage.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Scrape the Coffeemania menu and restaurants into the database."
    )
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument(
        "--menu-only", action="store_true", help="Sync menu items only."
    )
    scope.add_argument(
        "--restaurants-only", action="store_true", help="Sync restaurants only."
    )
    scope.add_argument(
        "--links",
        action="store_true",
        help="Sync restaurants and print their menu / wine-card links as JSON.",
    )
    parser.add_argument(
        "--listing-mode",
        choices=("browser", "static"),
        default=None,
        help=(
            "How to read the menu listing: 'browser' scrolls it in headless"
            " Chromium (requires 'playwright install chromium'), 'static'"
            " parses a plain GET."
        ),
    )
    parser.add_argument(
        "--every",
        type=int,
        nargs="?",
        const=settings.sync_interval,
        default=0,
        metavar="SECONDS",
        help=(
            "Keep running, one sync every SECONDS"
            f" (default {settings.sync_interval} when given without a value)."
        ),
    )
    args = parser.parse_args()

    if args.every and args.links:
        parser.error("--every cannot be combined with --links")

    config = settings
    if args.listing_mode:
        config = settings.model_copy(update={"listing_mode": args.listing_mode})

    try:
        asyncio.run(
            run(
                config,
                menu=not args.restaurants_only,
                restaurants=not args.menu_only,
                links=args.links,
                every=args.every,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
