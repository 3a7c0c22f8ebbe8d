"""Read-only catalog endpoints consumed by the chat bot."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.schemas.catalog import CategoryListResponse, MenuItemResponse, RestaurantResponse
from app.services import catalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])

_SERVER_ERROR = "An error occurred while reading the catalog. Please try again."


@router.get("/categories", response_model=CategoryListResponse)
async def categories(
    session: AsyncSession = Depends(get_session),
) -> CategoryListResponse:
    """List menu categories currently in the database."""
    try:
        return CategoryListResponse(categories=await catalog.list_categories(session))
    except Exception as e:
        logger.error("Error listing categories: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)


@router.get("/menu/search", response_model=list[MenuItemResponse])
async def search_menu(
    q: str = Query(..., min_length=1, max_length=200, description="Dish name fragment"),
    session: AsyncSession = Depends(get_session),
) -> list[MenuItemResponse]:
    """Find dishes by name across all categories."""
    try:
        items = await catalog.search_menu_items(session, q)
        return [MenuItemResponse.model_validate(item) for item in items]
    except Exception as e:
        logger.error("Error searching menu for %r: %s", q, e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)


@router.get("/menu/{category}", response_model=list[MenuItemResponse])
async def menu_by_category(
    category: str,
    session: AsyncSession = Depends(get_session),
) -> list[MenuItemResponse]:
    """
    Return every dish of a menu category.

    Raises:
        HTTPException: 404 if the category has no dishes, 500 on other errors
    """
    try:
        items = await catalog.get_menu_by_category(session, category)
        return [MenuItemResponse.model_validate(item) for item in items]

    except catalog.CategoryNotFoundError as e:
        logger.info("Category lookup failed: %s", e)
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        logger.error("Error reading category %r: %s", category, e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)


@router.get("/menu/{category}/{sku}", response_model=MenuItemResponse)
async def menu_item(
    category: str,
    sku: int,
    session: AsyncSession = Depends(get_session),
) -> MenuItemResponse:
    """Return a single dish by category and SKU."""
    try:
        item = await catalog.get_menu_item(session, sku, category)
    except Exception as e:
        logger.error("Error reading dish %d in %r: %s", sku, category, e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)

    if item is None:
        raise HTTPException(
            status_code=404, detail=f"No dish {sku} in category '{category}'"
        )
    return MenuItemResponse.model_validate(item)


@router.get("/restaurants", response_model=list[RestaurantResponse])
async def restaurants(
    name: str | None = Query(default=None, max_length=200),
    session: AsyncSession = Depends(get_session),
) -> list[RestaurantResponse]:
    """List restaurants, optionally filtered by a name fragment."""
    try:
        found = await catalog.find_restaurants(session, name)
        return [RestaurantResponse.model_validate(r) for r in found]
    except Exception as e:
        logger.error("Error listing restaurants: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantResponse)
async def restaurant(
    restaurant_id: str,
    session: AsyncSession = Depends(get_session),
) -> RestaurantResponse:
    """Return one restaurant by its site id."""
    try:
        found = await catalog.get_restaurant(session, restaurant_id)
        return RestaurantResponse.model_validate(found)

    except catalog.RestaurantNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        logger.error("Error reading restaurant %r: %s", restaurant_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=_SERVER_ERROR)
