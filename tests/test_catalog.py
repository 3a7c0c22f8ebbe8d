"""Tests for the catalog service and read API."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.catalog import (
    CategoryNotFoundError,
    RestaurantNotFoundError,
    find_restaurants,
    get_menu_by_category,
    get_restaurant,
    list_categories,
    search_menu_items,
)


async def test_list_categories(session: AsyncSession, sample_catalog: None) -> None:
    assert await list_categories(session) == ["Десерты", "Завтраки"]


async def test_menu_by_category_sorted_by_name(
    session: AsyncSession, sample_catalog: None
) -> None:
    items = await get_menu_by_category(session, "Десерты")
    assert [item.name for item in items] == ["Медовик", "Чизкейк"]


async def test_menu_by_unknown_category(session: AsyncSession) -> None:
    """Test handling of a category with no stored dishes."""
    with pytest.raises(CategoryNotFoundError):
        await get_menu_by_category(session, "Коктейли")


async def test_search_menu_items(session: AsyncSession, sample_catalog: None) -> None:
    items = await search_menu_items(session, "кейк")
    assert [(item.id, item.category) for item in items] == [(101, "Десерты")]


async def test_restaurant_lookup(session: AsyncSession, sample_catalog: None) -> None:
    restaurant = await get_restaurant(session, "42")
    assert restaurant.name == "Кофемания Никитская"

    with pytest.raises(RestaurantNotFoundError):
        await get_restaurant(session, "999")


async def test_find_restaurants(session: AsyncSession, sample_catalog: None) -> None:
    everything = await find_restaurants(session)
    assert [r.restaurant_id for r in everything] == ["43", "42"]

    filtered = await find_restaurants(session, "Никит")
    assert [r.restaurant_id for r in filtered] == ["42"]


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_categories_endpoint(client: AsyncClient, sample_catalog: None) -> None:
    response = await client.get("/api/categories")
    assert response.status_code == 200
    assert response.json() == {"categories": ["Десерты", "Завтраки"]}


async def test_menu_endpoint(client: AsyncClient, sample_catalog: None) -> None:
    response = await client.get("/api/menu/Завтраки")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == 201
    assert data[0]["name"] == "Сырники"
    assert data[0]["price"] == "450 ₽"
    assert data[0]["availability"] is True


async def test_menu_endpoint_unknown_category(client: AsyncClient) -> None:
    response = await client.get("/api/menu/Коктейли")
    assert response.status_code == 404


async def test_menu_item_endpoint(client: AsyncClient, sample_catalog: None) -> None:
    response = await client.get("/api/menu/Десерты/102")
    assert response.status_code == 200
    assert response.json()["name"] == "Медовик"

    missing = await client.get("/api/menu/Завтраки/102")
    assert missing.status_code == 404


async def test_search_endpoint(client: AsyncClient, sample_catalog: None) -> None:
    response = await client.get("/api/menu/search", params={"q": "Сыр"})
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [201]


async def test_search_endpoint_requires_query(client: AsyncClient) -> None:
    response = await client.get("/api/menu/search")
    assert response.status_code == 422


async def test_restaurants_endpoints(client: AsyncClient, sample_catalog: None) -> None:
    listing = await client.get("/api/restaurants", params={"name": "Кудрин"})
    assert listing.status_code == 200
    assert [r["restaurant_id"] for r in listing.json()] == ["43"]

    one = await client.get("/api/restaurants/42")
    assert one.status_code == 200
    assert one.json()["address"] == "Большая Никитская, 13"

    missing = await client.get("/api/restaurants/999")
    assert missing.status_code == 404


async def test_unexpected_errors_map_to_500(client: AsyncClient) -> None:
    failing = AsyncMock(side_effect=RuntimeError("connection reset"))

    with patch("app.services.catalog.list_categories", failing), patch(
        "app.services.catalog.get_menu_by_category", failing
    ), patch("app.services.catalog.get_restaurant", failing):
        responses = [
            await client.get("/api/categories"),
            await client.get("/api/menu/Десерты"),
            await client.get("/api/restaurants/42"),
        ]

    for response in responses:
        assert response.status_code == 500
        assert "connection reset" not in response.text
