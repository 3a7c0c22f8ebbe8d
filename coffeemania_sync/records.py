"""Records passed between the extractors, the reconciler and storage."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from coffeemania_sync.normalize import parse_calories

# Sentinel stored in image columns when the page has no usable photo
NO_IMAGE = "no-image"

# Display placeholders shown by the bot when a field is missing on the site
NO_NAME = "Нет названия"
NO_PRICE = "Нет цены"
NO_DESCRIPTION = "Нет описания"
NO_COMPOSITION = "Нет состава"
NO_ALLERGENS = "Нет информации"
NO_DATA = "Нет данных"
NO_MENU = "Нет меню"


@dataclass
class Nutrition:
    """Nutrition facts of a dish; only calories are numeric."""

    calories: int = 0
    proteins: str = NO_DATA
    fats: str = NO_DATA
    carbohydrates: str = NO_DATA
    weight: str = NO_DATA

    @classmethod
    def from_pairs(cls, pairs: dict[str, str]) -> Nutrition:
        """Build from the label → value pairs shown on an item page."""
        return cls(
            calories=parse_calories(pairs.get("Ккал", "0")),
            proteins=pairs.get("Белки", NO_DATA),
            fats=pairs.get("Жиры", NO_DATA),
            carbohydrates=pairs.get("Углеводы", NO_DATA),
            weight=pairs.get("Вес", NO_DATA),
        )


@dataclass
class MenuItemRecord:
    """One dish scraped from its item page."""

    sku: int | None
    category: str
    name: str = NO_NAME
    price: str = NO_PRICE
    nutrition: Nutrition = field(default_factory=Nutrition)
    description: str = NO_DESCRIPTION
    composition: str = NO_COMPOSITION
    allergens: str = NO_ALLERGENS
    image_url: str = NO_IMAGE
    # No stock signal on the site; always True
    availability: bool = True
    timetable: str = ""

    def to_row(self) -> dict[str, Any]:
        """Column values for the ``menu_items`` table."""
        return {
            "id": self.sku,
            "category": self.category,
            "name": self.name,
            "price": self.price,
            "calories": self.nutrition.calories,
            "proteins": self.nutrition.proteins,
            "fats": self.nutrition.fats,
            "carbohydrates": self.nutrition.carbohydrates,
            "weight": self.nutrition.weight,
            "description": self.description,
            "composition": self.composition,
            "allergens": self.allergens,
            "image_url": self.image_url,
            "availability": self.availability,
            "timetable": self.timetable,
        }


@dataclass
class RestaurantRecord:
    """One restaurant scraped from its page."""

    external_id: str | None
    name: str
    # Page title from the embedded state; names the cached photo
    title: str = ""
    address: str = "Нет адреса"
    image_url: str = NO_IMAGE
    metro: str = "Нет данных о метро"
    description: str = NO_DESCRIPTION
    veranda: str = "Без летней веранды"
    changing_table: str = NO_DATA
    animation: str = "Без детской анимации"
    work_time: str = "Нет данных о времени работы"
    contacts: str = "Нет контактов"
    wine_label: str = ""
    wine_url: str = ""
    menu_url: str = NO_MENU

    def to_row(self) -> dict[str, Any]:
        """Column values for the ``restaurants_db`` table."""
        return {
            "restaurant_id": self.external_id,
            "name": self.name,
            "address": self.address,
            "restaurant_image": self.image_url,
            "metro": self.metro,
            "description": self.description,
            "veranda": self.veranda,
            "changing_table": self.changing_table,
            "animation": self.animation,
            "work_time": self.work_time,
            "contacts": self.contacts,
            "vine_card": self.wine_label or "Нет данных о винной карте",
        }

    @property
    def links(self) -> RestaurantLinks:
        return RestaurantLinks(
            menu_url=self.menu_url,
            wine_card_url=self.wine_url or "Нет винной карты",
        )


@dataclass(frozen=True)
class RestaurantLinks:
    """Menu and wine-card URLs of a restaurant; returned, never stored."""

    menu_url: str
    wine_card_url: str


@dataclass
class CategoryLinkSet:
    """Category name → absolute item-page URLs discovered on the listing."""

    categories: dict[str, set[str]] = field(default_factory=dict)

    def add(self, category: str, url: str) -> None:
        self.categories.setdefault(category, set()).add(url)

    def __len__(self) -> int:
        return len(self.categories)

    def __iter__(self) -> Iterator[str]:
        return iter(self.categories)

    def items(self) -> Iterator[tuple[str, set[str]]]:
        return iter(self.categories.items())

    @property
    def total_links(self) -> int:
        return sum(len(urls) for urls in self.categories.values())


@dataclass
class SyncResult:
    """Counters reported by one reconciliation run."""

    updated: int = 0
    deleted_categories: int = 0
    deleted_items: int = 0
    restaurants_updated: int = 0
    dropped: int = 0
