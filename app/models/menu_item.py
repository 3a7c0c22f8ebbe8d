from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.restaurant import Base


class MenuItem(Base):
    """A single dish/drink of the chain-wide menu, keyed by (SKU, category)."""

    __tablename__ = "menu_items"

    # Site SKU; the same dish may be listed under several categories
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    category: Mapped[str] = mapped_column(String(200), primary_key=True)

    name: Mapped[str] = mapped_column(String(300), nullable=False, index=True)
    price: Mapped[Optional[str]] = mapped_column(String(50))

    calories: Mapped[int] = mapped_column(Integer, default=0)
    proteins: Mapped[Optional[str]] = mapped_column(String(50))
    fats: Mapped[Optional[str]] = mapped_column(String(50))
    carbohydrates: Mapped[Optional[str]] = mapped_column(String(50))
    weight: Mapped[Optional[str]] = mapped_column(String(50))

    description: Mapped[Optional[str]] = mapped_column(Text)
    composition: Mapped[Optional[str]] = mapped_column(Text)
    allergens: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))

    availability: Mapped[bool] = mapped_column(Boolean, default=True)
    timetable: Mapped[Optional[str]] = mapped_column(String(200))

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, category='{self.category}', name='{self.name}')>"
