"""
Repository for Book entity with pagination support.

Example:
    ```python
    from library_api.repositories.book_repository import BookRepository
    from library_api.storage.db import async_session

    async with async_session() as session:
        repo = BookRepository(session)
        first_page = await repo.find_all_with_pagination(page=1, limit=10)
        total = await repo.count()
    ```
"""

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from library_api.logging import logger
from library_api.models.book import Book
from library_api.repositories.base import BaseRepository, is_storable_id


class BookRepository(BaseRepository[Book]):
    """
    Repository for Book entity operations.

    Every query eagerly loads the book's author so serializers never trigger
    lazy loads outside the session's greenlet.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Book repository.

        Args:
            session: Database session for executing queries.
        """
        super().__init__(session, Book)

    async def get_by_id(self, id: int) -> Book | None:
        """
        Get a book by id with its author loaded.

        The row is always re-read so a book fetched again after a commit
        reflects the committed author reference.

        Args:
            id: Primary key value.

        Returns:
            Book if found, None otherwise.
        """
        if not is_storable_id(id):
            return None

        stmt = (
            select(Book)
            .where(Book.id == id)
            .options(selectinload(Book.author))  # type: ignore[arg-type]
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_all_with_pagination(
        self, page: int, limit: int
    ) -> list[Book]:
        """
        Get one page of books ordered by ascending id.

        Args:
            page: 1-based page number.
            limit: Page size.

        Returns:
            Up to ``limit`` books starting at offset ``(page - 1) * limit``.
            Pages past the end are empty.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        try:
            stmt = (
                select(Book)
                .options(selectinload(Book.author))  # type: ignore[arg-type]
                .order_by(Book.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving books page={page} limit={limit}: {e}"
            )
            raise

    async def count(self) -> int:
        """Total number of books."""
        stmt = select(func.count()).select_from(Book)
        result = await self.session.exec(stmt)
        return result.one()
