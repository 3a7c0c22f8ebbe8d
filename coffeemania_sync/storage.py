"""Write-side storage handle used by the reconciler.

Each upsert batch and each delete runs in its own transaction; there is no
run-wide transaction. Database errors propagate to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator
from typing import Any

from sqlalchemy import delete, distinct, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.models.menu_item import MenuItem
from app.models.restaurant import Base, Restaurant

logger = logging.getLogger(__name__)

# Keeps a multi-row VALUES under SQLite's bound-parameter limit
_BATCH_SIZE = 500

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _chunks(rows: list[dict[str, Any]], size: int) -> Iterator[list[dict[str, Any]]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]


class Storage:
    """Explicitly constructed database handle: one engine per process."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> Storage:
        return cls(create_async_engine(database_url, echo=echo))

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    # --- Upserts ---------------------------------------------------------------

    async def _upsert(
        self,
        model: type[Base],
        rows: list[dict[str, Any]],
        keys: list[str],
    ) -> int:
        if not rows:
            return 0
        dialect = self.engine.dialect.name
        try:
            insert = _UPSERT_DIALECTS[dialect]
        except KeyError:
            msg = f"Upsert is not supported on the {dialect!r} dialect"
            raise NotImplementedError(msg) from None

        async with self.session_factory() as session:
            for batch in _chunks(rows, _BATCH_SIZE):
                stmt = insert(model).values(batch)
                stmt = stmt.on_conflict_do_update(
                    index_elements=keys,
                    set_={col: stmt.excluded[col] for col in batch[0] if col not in keys},
                )
                await session.execute(stmt)
            await session.commit()
        return len(rows)

    async def upsert_menu_items(self, rows: list[dict[str, Any]]) -> int:
        """Insert or overwrite ``menu_items`` rows keyed on (id, category)."""
        return await self._upsert(MenuItem, rows, ["id", "category"])

    async def upsert_restaurants(self, rows: list[dict[str, Any]]) -> int:
        """Insert or overwrite ``restaurants_db`` rows keyed on restaurant_id."""
        return await self._upsert(Restaurant, rows, ["restaurant_id"])

    # --- Stale-row deletion ----------------------------------------------------

    async def stored_categories(self) -> set[str]:
        async with self.session_factory() as session:
            result = await session.execute(select(distinct(MenuItem.category)))
            return set(result.scalars().all())

    async def delete_categories_except(
        self, categories: Collection[str]
    ) -> tuple[int, int]:
        """Delete every stored category not in *categories*.

        Returns:
            ``(categories_deleted, rows_deleted)``.
        """
        stale = await self.stored_categories() - set(categories)
        if not stale:
            return 0, 0
        async with self.session_factory() as session:
            result = await session.execute(
                delete(MenuItem)
                .where(MenuItem.category.in_(stale))
                .execution_options(synchronize_session=False)
            )
            await session.commit()
        logger.info("Deleted categories no longer on the site: %s", sorted(stale))
        return len(stale), result.rowcount or 0

    async def prune_category(self, category: str, skus: Collection[int]) -> int:
        """Delete items of *category* whose SKU is not in *skus*.

        An empty *skus* wipes the whole category.
        """
        stmt = delete(MenuItem).where(MenuItem.category == category)
        if skus:
            stmt = stmt.where(MenuItem.id.not_in(list(skus)))
        async with self.session_factory() as session:
            result = await session.execute(
                stmt.execution_options(synchronize_session=False)
            )
            await session.commit()
        return result.rowcount or 0
