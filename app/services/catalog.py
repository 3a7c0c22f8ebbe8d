"""Read-only queries over the synced menu and restaurants."""

from sqlalchemy import distinct, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.menu_item import MenuItem
from app.models.restaurant import Restaurant


class CategoryNotFoundError(Exception):
    """Raised when a menu category has no stored items."""

    pass


class RestaurantNotFoundError(Exception):
    """Raised when no restaurant matches the given id or name."""

    pass


async def list_categories(session: AsyncSession) -> list[str]:
    """All categories currently on the menu, alphabetically."""
    result = await session.execute(
        select(distinct(MenuItem.category)).order_by(MenuItem.category)
    )
    return list(result.scalars().all())


async def get_menu_by_category(session: AsyncSession, category: str) -> list[MenuItem]:
    """
    Get every item of a category, sorted by name.

    Args:
        session: Database session
        category: Exact category name as shown on the site

    Returns:
        List of MenuItem objects

    Raises:
        CategoryNotFoundError: If the category has no stored items
    """
    result = await session.execute(
        select(MenuItem).where(MenuItem.category == category).order_by(MenuItem.name)
    )
    items = list(result.scalars().all())
    if not items:
        raise CategoryNotFoundError(f"No menu items in category '{category}'")
    return items


async def get_menu_item(
    session: AsyncSession, sku: int, category: str
) -> MenuItem | None:
    return await session.get(MenuItem, (sku, category))


async def search_menu_items(
    session: AsyncSession, query: str, limit: int = 20
) -> list[MenuItem]:
    """Items whose name contains *query*, case-insensitively."""
    result = await session.execute(
        select(MenuItem)
        .where(MenuItem.name.ilike(f"%{query}%"))
        .order_by(MenuItem.name, MenuItem.category)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_restaurant(session: AsyncSession, restaurant_id: str) -> Restaurant:
    """
    Get a restaurant by its site id.

    Raises:
        RestaurantNotFoundError: If no restaurant has this id
    """
    restaurant = await session.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise RestaurantNotFoundError(f"No restaurant with id '{restaurant_id}'")
    return restaurant


async def find_restaurants(
    session: AsyncSession, name: str | None = None, limit: int = 50
) -> list[Restaurant]:
    """Restaurants sorted by name, optionally filtered by a name fragment."""
    query = select(Restaurant).order_by(Restaurant.name).limit(limit)
    if name:
        query = query.where(Restaurant.name.ilike(f"%{name}%"))
    result = await session.execute(query)
    return list(result.scalars().all())
