"""Restaurant listing and restaurant page extraction.

Restaurant pages are Next.js-rendered: most facts live in the
``__NEXT_DATA__`` JSON state, while the description, amenity texts, wine
list, photo and menu link only exist in the DOM.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.images import ImageCache
from coffeemania_sync.normalize import clean_text
from coffeemania_sync.records import NO_DATA, NO_DESCRIPTION, NO_IMAGE, NO_MENU, RestaurantRecord

logger = logging.getLogger(__name__)

_MENU_LINK_TEXT = "Смотреть меню"

# Positional meaning of the "extra info" items; index 1 is not used
_VERANDA_SLOT = 0
_ANIMATION_SLOT = 2
_NO_VERANDA = "Без летней веранды"
_NO_ANIMATION = "Без детской анимации"


class StructureError(Exception):
    """Raised when a restaurant page lacks its embedded state blob."""

    pass


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def parse_restaurant_list(
    html: str,
    base_url: str,
    excluded: list[str] | None = None,
) -> dict[str, str]:
    """Map restaurant name → absolute page URL from the restaurants listing."""
    soup = BeautifulSoup(html, "html.parser")
    skip = set(excluded or [])
    restaurants: dict[str, str] = {}

    for a_tag in soup.find_all("a", class_="image-side", href=True):
        img = a_tag.find("img")
        name = clean_text(str(img.get("title") or "")) if img else ""
        if not name or name in skip:
            continue
        restaurants[name] = urljoin(base_url, str(a_tag["href"]))

    return restaurants


async def discover_restaurants(
    fetcher: Fetcher,
    restaurants_url: str,
    base_url: str,
    excluded: list[str] | None = None,
) -> dict[str, str]:
    """Fetch the restaurants listing; empty mapping if it is unavailable."""
    html = await fetcher.fetch_text(restaurants_url)
    if html is None:
        logger.error("Restaurant listing %s is unavailable", restaurants_url)
        return {}
    restaurants = parse_restaurant_list(html, base_url, excluded)
    logger.info("Found %d restaurants on %s", len(restaurants), restaurants_url)
    return restaurants


# ---------------------------------------------------------------------------
# Restaurant page
# ---------------------------------------------------------------------------


def _next_data(soup: BeautifulSoup) -> dict[str, Any]:
    """The ``props.pageProps.restaurant`` object of the Next.js state."""
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None or not script.string:
        raise StructureError("no __NEXT_DATA__ script")
    try:
        data = json.loads(script.string)
    except ValueError as exc:
        raise StructureError(f"unparsable __NEXT_DATA__: {exc}") from exc
    restaurant = data.get("props", {}).get("pageProps", {}).get("restaurant")
    if not isinstance(restaurant, dict):
        raise StructureError("no restaurant in __NEXT_DATA__")
    return restaurant


def _render(value: Any, default: str) -> str:
    """Flatten a JSON value to display text; lists lose their brackets."""
    if value is None or value == "" or value == []:
        return default
    if isinstance(value, list):
        return ", ".join(clean_text(str(v)) for v in value)
    return clean_text(str(value))


def _render_changing_table(value: Any) -> str:
    if isinstance(value, bool):
        return "Есть пеленальный столик" if value else "Без пеленального столика"
    return _render(value, NO_DATA)


def parse_restaurant_page(html: str, name: str, base_url: str) -> RestaurantRecord:
    """Parse a restaurant page; ``image_url`` is left as the remote URL.

    A missing ``inner-id`` is not an error here: the record comes back with
    ``external_id=None`` and is dropped when persisted.

    Raises:
        StructureError: If the page has no usable ``__NEXT_DATA__`` blob.
    """
    soup = BeautifulSoup(html, "html.parser")
    state = _next_data(soup)

    inner_id = state.get("inner-id")
    description = soup.select_one('div[class*="AboutContent"]')
    extra_info = soup.select('div[class*="ExtraInfoItemText"]')
    wine = soup.find("a", class_="underline", attrs={"rel": "noopener noreferrer"})
    image = soup.find("img", attrs={"itemprop": "contentUrl"})
    menu_link = soup.find(
        "a", string=lambda s: s is not None and clean_text(s) == _MENU_LINK_TEXT
    )

    def extra(slot: int, default: str) -> str:
        if len(extra_info) > slot:
            return extra_info[slot].get_text(strip=True) or default
        return default

    image_url = NO_IMAGE
    if image is not None and image.get("src"):
        image_url = urljoin(base_url, str(image["src"]))

    return RestaurantRecord(
        external_id=str(inner_id) if inner_id not in (None, "") else None,
        name=name or _render(state.get("title"), "Без названия"),
        title=_render(state.get("title"), ""),
        address=_render(state.get("address"), "Нет адреса"),
        image_url=image_url,
        metro=_render(state.get("metro"), "Нет данных о метро"),
        description=description.get_text(strip=True) if description else NO_DESCRIPTION,
        veranda=extra(_VERANDA_SLOT, _NO_VERANDA),
        changing_table=_render_changing_table(state.get("changing-tables")),
        animation=extra(_ANIMATION_SLOT, _NO_ANIMATION),
        work_time=_render(state.get("working-hours"), "Нет данных о времени работы"),
        contacts=_render(state.get("phone"), "Нет контактов"),
        wine_label=wine.get_text(strip=True) if wine else "",
        wine_url=urljoin(base_url, str(wine["href"])) if wine and wine.get("href") else "",
        menu_url=(
            urljoin(base_url, str(menu_link["href"]))
            if menu_link is not None and menu_link.get("href")
            else NO_MENU
        ),
    )


async def extract_restaurant(
    url: str,
    name: str,
    fetcher: Fetcher,
    images: ImageCache,
    base_url: str,
) -> RestaurantRecord | None:
    """Fetch and parse one restaurant page; ``None`` if it is unusable."""
    html = await fetcher.fetch_text(url)
    if html is None:
        logger.error("Could not fetch restaurant page %s", url)
        return None

    try:
        record = parse_restaurant_page(html, name, base_url)
    except StructureError as exc:
        logger.error("Malformed restaurant page %s: %s", url, exc)
        return None
    except Exception:
        logger.warning("Unexpected error parsing %s", url, exc_info=True)
        return None

    record.image_url = await images.ensure_image(
        record.image_url, record.title or record.name
    )
    return record
