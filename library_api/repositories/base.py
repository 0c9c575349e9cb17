"""
Generic data access for the catalog tables.

Repositories flush but never commit on their own: a command decides when
its unit of work is complete and calls ``commit()`` once, so the response
cache is invalidated only after the data is durable. Failed writes roll the
session back before the error propagates.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.sql.expression import SelectOfScalar

from library_api.constants import MAX_ROW_ID, MIN_ROW_ID
from library_api.logging import logger

T = TypeVar("T")


def is_storable_id(id: int) -> bool:
    """Whether id fits the primary key column (larger ids match no row)."""
    return MIN_ROW_ID <= id <= MAX_ROW_ID


class BaseRepository(Generic[T]):
    """
    CRUD over one SQLModel table.

    Subclasses bind the model and add the queries their commands need::

        class BookRepository(BaseRepository[Book]):
            def __init__(self, session: AsyncSession):
                super().__init__(session, Book)
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @asynccontextmanager
    async def _write(self, action: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as ex:
            await self.session.rollback()
            logger.error(f"Failed to {action} {self.entity_name}: {ex}")
            raise

    def _select(self, **filters: Any) -> SelectOfScalar[T]:
        # None means "no constraint" so optional query params can pass through
        stmt = select(self.model)
        for field, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, field) == value)
        return stmt

    async def get_by_id(self, id: int) -> T | None:
        if not is_storable_id(id):
            return None
        return await self.session.get(self.model, id)

    async def get_all(self, **filters: Any) -> list[T]:
        """
        Rows matching every non-None filter, ordered by id.

        Example:
            >>> await repo.get_all(last_name="Nom-1")
        """
        stmt = self._select(**filters).order_by(self.model.id)  # type: ignore[attr-defined]
        result = await self.session.exec(stmt)
        return list(result.all())

    async def exists(self, **filters: Any) -> bool:
        result = await self.session.exec(self._select(**filters).limit(1))
        return result.first() is not None

    async def create(self, entity: T) -> T:
        """
        Insert entity and load its generated columns (id, defaults).

        Raises:
            SQLAlchemyError: After rolling the session back.
        """
        async with self._write("create"):
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Flush in-place changes to entity and reload it."""
        async with self._write("update"):
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        async with self._write("delete"):
            await self.session.delete(entity)
            await self.session.flush()

    async def commit(self) -> None:
        """
        End the unit of work; flushed changes become visible to every
        other session.

        Raises:
            SQLAlchemyError: After rolling the session back.
        """
        async with self._write("commit"):
            await self.session.commit()
