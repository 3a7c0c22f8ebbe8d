"""Extraction of a single menu item from its page.

Item pages carry the SKU only in a Schema.org ``Product`` JSON-LD block; the
rest (name, price, nutrition, composition, allergens, photo) comes from the
``#itemInfo`` container and the image slots around it.
"""

from __future__ import annotations

import json
import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.images import ImageCache
from coffeemania_sync.normalize import clean_text, parse_price
from coffeemania_sync.records import (
    NO_ALLERGENS,
    NO_COMPOSITION,
    NO_DESCRIPTION,
    NO_IMAGE,
    NO_NAME,
    NO_PRICE,
    MenuItemRecord,
    Nutrition,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------


def _extract_sku(soup: BeautifulSoup, url: str) -> int | None:
    """Read the numeric SKU from a ``Product`` JSON-LD block, if any."""
    script = soup.find("script", type="application/ld+json")
    if script is None:
        return None
    try:
        data = json.loads(script.string or "")
        if isinstance(data, dict) and data.get("@type") == "Product":
            return int(data.get("sku"))
    except (ValueError, TypeError) as exc:
        logger.warning("Bad JSON-LD SKU on %s: %s", url, exc)
    return None


def _text_or(tag: Tag | None, default: str) -> str:
    if tag is None:
        return default
    return clean_text(tag.get_text())


def _extract_nutrition(item_info: Tag) -> dict[str, str]:
    """Label → value pairs, e.g. ``{"Ккал": "250", "Белки": "5 г"}``."""
    pairs: dict[str, str] = {}
    section = item_info.find("div", class_="itemAboutValueContent")
    if section is None:
        return pairs
    for stat in section.find_all("div", class_="itemStat"):
        key_tag = stat.find("span")
        if key_tag is None:
            continue
        key = clean_text(key_tag.get_text())
        pairs[key] = clean_text(stat.get_text().replace(key, ""))
    return pairs


def _extract_composition(item_info: Tag) -> str:
    section = item_info.find("div", class_="itemAboutCompositionContent")
    if section is None:
        return NO_COMPOSITION
    return _text_or(section.find("p"), NO_COMPOSITION)


def _image_src(container: Tag | None) -> str | None:
    if container is None:
        return None
    img = container.find("img", itemprop="contentUrl")
    if img is None or not img.has_attr("src"):
        return None
    return str(img["src"])


def _extract_image_url(soup: BeautifulSoup, base_url: str) -> str:
    """Primary photo, else the first carousel slide; SVGs count as absent."""
    src = _image_src(soup.find("div", id="itemImage"))
    if src is None:
        slider = soup.find("div", id="itemSlider")
        if slider is not None:
            src = _image_src(slider.find("div", class_="itemSlide"))

    if not src or src.lower().split("?")[0].endswith(".svg"):
        return NO_IMAGE
    return urljoin(base_url, src)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_item_page(
    html: str,
    url: str,
    category: str,
    base_url: str,
) -> MenuItemRecord | None:
    """Parse an item page; ``image_url`` is left as the absolute remote URL.

    Returns ``None`` when the page has no ``#itemInfo`` container.
    """
    soup = BeautifulSoup(html, "html.parser")
    sku = _extract_sku(soup, url)

    item_info = soup.find("div", id="itemInfo")
    if item_info is None:
        logger.error("No itemInfo block on %s", url)
        return None

    price_tag = item_info.find("div", class_="itemPrice")
    time_label = soup.find("div", class_="timeLabel")

    return MenuItemRecord(
        sku=sku,
        category=category,
        name=_text_or(item_info.find("h1", class_="itemTitle"), NO_NAME),
        price=parse_price(price_tag.get_text(strip=True)) if price_tag else NO_PRICE,
        nutrition=Nutrition.from_pairs(_extract_nutrition(item_info)),
        description=_text_or(item_info.find("div", class_="itemDesc"), NO_DESCRIPTION),
        composition=_extract_composition(item_info),
        allergens=_text_or(item_info.find("p", style="font-style: italic"), NO_ALLERGENS),
        image_url=_extract_image_url(soup, base_url),
        timetable=time_label.get_text(strip=True) if time_label else "",
    )


async def extract_item(
    url: str,
    category: str,
    fetcher: Fetcher,
    images: ImageCache,
    base_url: str,
) -> MenuItemRecord | None:
    """Fetch and parse one item page, caching its photo locally.

    Never raises: an unavailable or malformed page yields ``None`` so one
    bad page cannot abort the batch.
    """
    html = await fetcher.fetch_text(url)
    if html is None:
        logger.error("Could not fetch item page %s", url)
        return None

    try:
        record = parse_item_page(html, url, category, base_url)
        if record is None:
            return None
        record.image_url = await images.ensure_image(
            record.image_url, record.name, group_key=category
        )
    except Exception:
        logger.warning("Unexpected error parsing %s", url, exc_info=True)
        return None

    return record
