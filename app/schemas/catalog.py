from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MenuItemResponse(BaseModel):
    """Response schema for a single menu item."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Site SKU")
    category: str
    name: str
    price: Optional[str] = None
    calories: int = 0
    proteins: Optional[str] = None
    fats: Optional[str] = None
    carbohydrates: Optional[str] = None
    weight: Optional[str] = None
    description: Optional[str] = None
    composition: Optional[str] = None
    allergens: Optional[str] = None
    image_url: Optional[str] = Field(
        default=None, description="Local image path, remote URL or 'no-image'"
    )
    availability: bool = True
    timetable: Optional[str] = None


class RestaurantResponse(BaseModel):
    """Response schema for restaurant data."""

    model_config = ConfigDict(from_attributes=True)

    restaurant_id: str
    name: str
    address: Optional[str] = None
    restaurant_image: Optional[str] = None
    metro: Optional[str] = None
    description: Optional[str] = None
    veranda: Optional[str] = None
    changing_table: Optional[str] = None
    animation: Optional[str] = None
    work_time: Optional[str] = None
    contacts: Optional[str] = None
    vine_card: Optional[str] = None


class CategoryListResponse(BaseModel):
    """Menu categories currently stored."""

    categories: list[str] = Field(default_factory=list)
