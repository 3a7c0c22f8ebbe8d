from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Restaurant(Base):
    """A Coffeemania restaurant as scraped from its page on the chain's site."""

    __tablename__ = "restaurants_db"

    # "inner-id" from the page's __NEXT_DATA__ payload
    restaurant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    address: Mapped[Optional[str]] = mapped_column(String(300))

    # Local cache path, remote URL, or the no-image sentinel
    restaurant_image: Mapped[Optional[str]] = mapped_column(String(500))

    metro: Mapped[Optional[str]] = mapped_column(String(300))
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Amenities are display strings, not booleans
    veranda: Mapped[Optional[str]] = mapped_column(String(300))
    changing_table: Mapped[Optional[str]] = mapped_column(String(300))
    animation: Mapped[Optional[str]] = mapped_column(String(300))

    work_time: Mapped[Optional[str]] = mapped_column(Text)
    contacts: Mapped[Optional[str]] = mapped_column(String(100))

    # Wine list label only; the link itself is returned by get_links()
    vine_card: Mapped[Optional[str]] = mapped_column(String(300))

    def __repr__(self) -> str:
        return f"<Restaurant(restaurant_id='{self.restaurant_id}', name='{self.name}')>"
