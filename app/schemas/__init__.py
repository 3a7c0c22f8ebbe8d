from app.schemas.catalog import (
    CategoryListResponse,
    MenuItemResponse,
    RestaurantResponse,
)

__all__ = ["CategoryListResponse", "MenuItemResponse", "RestaurantResponse"]
