"""
Commands for Book business operations.

Every write follows the same sequence: parse the body, validate the
resulting book, resolve its author (an unknown id gives no author), commit,
then invalidate the cached book list. Invalidation happens after the
commit and before the command returns, so no read issued after the
response can observe the pre-write list.

Example:
    ```python
    command = CreateBookCommand(book_repo, author_repo, cache)
    book = await command.execute(await request.body())
    ```
"""

from pydantic import BaseModel, Field

from library_api.commands.base import BaseCommand
from library_api.constants import (
    BOOK_LIST_CACHE_TAG,
    BOOK_LIST_OPERATION,
    DEFAULT_PAGE,
    MAX_PAGE,
    MAX_PAGE_SIZE,
)
from library_api.exceptions import NotFoundError, ValidationError
from library_api.logging import logger
from library_api.managers.cache_manager import CacheManager
from library_api.models.book import Book
from library_api.repositories.author_repository import AuthorRepository
from library_api.repositories.book_repository import BookRepository
from library_api.schemas.book import BookPayload, validate_book
from library_api.serialization import ViewGroup, parse, serialize
from library_api.settings import app_settings
from library_api.utils.cache_keys import CacheKeyFactory

# ============================================================================
# Input Models
# ============================================================================


class GetBooksInput(BaseModel):  # type: ignore[misc]
    """Pagination parameters for the book list."""

    page: int = Field(
        default=DEFAULT_PAGE, ge=1, le=MAX_PAGE, description="1-based page"
    )
    limit: int = Field(
        default=app_settings.DEFAULT_PAGE_SIZE,
        ge=1,
        description=f"Page size, capped at {MAX_PAGE_SIZE}",
    )

    @property
    def effective_limit(self) -> int:
        return min(self.limit, MAX_PAGE_SIZE)


class UpdateBookInput(BaseModel):  # type: ignore[misc]
    """Target book id and the raw request body."""

    id: int
    body: bytes


# ============================================================================
# Helpers
# ============================================================================


async def _apply_payload(
    payload: BookPayload,
    authors: AuthorRepository,
    existing: Book | None = None,
) -> Book:
    book = payload.to_entity(existing)

    violations = validate_book(book)
    if violations:
        raise ValidationError("Invalid book", violations=violations)

    # Unknown (or absent) author id resolves to no author
    book.author = await authors.get_by_id(payload.author_id)
    return book


async def _invalidate_book_list(cache: CacheManager) -> None:
    await cache.invalidate([BOOK_LIST_CACHE_TAG])


# ============================================================================
# Commands
# ============================================================================


class GetBooksCommand(BaseCommand[GetBooksInput, bytes]):
    """
    Command to get one page of the book list as serialized JSON.

    The page is served from the response cache, keyed by page and
    (capped) limit and tagged with the book-list tag.
    """

    def __init__(self, repository: BookRepository, cache: CacheManager):
        self.repository = repository
        self.cache = cache

    async def execute(self, input_data: GetBooksInput) -> bytes:
        """
        Args:
            input_data: Page and limit.

        Returns:
            JSON array of books (getBooks view).
        """
        page = input_data.page
        limit = input_data.effective_limit
        key = CacheKeyFactory.list_key(BOOK_LIST_OPERATION, page, limit)

        async def populate() -> tuple[bytes, set[str]]:
            books = await self.repository.find_all_with_pagination(page, limit)
            return serialize(books, ViewGroup.GET_BOOKS), {BOOK_LIST_CACHE_TAG}

        return await self.cache.get(key, populate)


class GetBookCommand(BaseCommand[int, Book]):
    """Command to fetch one book by id."""

    def __init__(self, repository: BookRepository):
        self.repository = repository

    async def execute(self, book_id: int) -> Book:
        """
        Raises:
            NotFoundError: If no book has this id.
        """
        book = await self.repository.get_by_id(book_id)
        if book is None:
            raise NotFoundError(f"Book with ID {book_id} not found")
        return book


class CreateBookCommand(BaseCommand[bytes, Book]):
    """
    Command to create a book from a JSON body.

    Note: Uses both repositories because the author is resolved from the
    body's idAuthor.
    """

    def __init__(
        self,
        repository: BookRepository,
        author_repository: AuthorRepository,
        cache: CacheManager,
    ):
        self.repository = repository
        self.author_repository = author_repository
        self.cache = cache

    async def execute(self, body: bytes) -> Book:
        """
        Args:
            body: Raw JSON request body.

        Returns:
            The created book, with its author loaded.

        Raises:
            ValidationError: If the body is malformed or the book invalid.
            CacheError: If the book list could not be invalidated.
        """
        payload = parse(body, BookPayload)
        book = await _apply_payload(payload, self.author_repository)

        book = await self.repository.create(book)
        await self.repository.commit()
        await _invalidate_book_list(self.cache)

        logger.info(f"Created book {book.id}")
        return await self.repository.get_by_id(book.id)  # type: ignore[arg-type, return-value]


class UpdateBookCommand(BaseCommand[UpdateBookInput, Book]):
    """
    Command to update a book in place.

    Fields present in the body replace the stored ones; the author is
    re-resolved from idAuthor every time, so omitting it clears the author.
    """

    def __init__(
        self,
        repository: BookRepository,
        author_repository: AuthorRepository,
        cache: CacheManager,
    ):
        self.repository = repository
        self.author_repository = author_repository
        self.cache = cache

    async def execute(self, input_data: UpdateBookInput) -> Book:
        """
        Raises:
            NotFoundError: If no book has this id.
            ValidationError: If the body is malformed or the merged book
                invalid.
            CacheError: If the book list could not be invalidated.
        """
        book = await self.repository.get_by_id(input_data.id)
        if book is None:
            raise NotFoundError(f"Book with ID {input_data.id} not found")

        payload = parse(input_data.body, BookPayload)
        book = await _apply_payload(payload, self.author_repository, book)

        book = await self.repository.update(book)
        await self.repository.commit()
        await _invalidate_book_list(self.cache)

        logger.info(f"Updated book {book.id}")
        return book


class DeleteBookCommand(BaseCommand[int, None]):
    """Command to delete a book."""

    def __init__(self, repository: BookRepository, cache: CacheManager):
        self.repository = repository
        self.cache = cache

    async def execute(self, book_id: int) -> None:
        """
        Raises:
            NotFoundError: If no book has this id.
            CacheError: If the book list could not be invalidated.
        """
        book = await self.repository.get_by_id(book_id)
        if book is None:
            raise NotFoundError(f"Book with ID {book_id} not found")

        await self.repository.delete(book)
        await self.repository.commit()
        await _invalidate_book_list(self.cache)

        logger.info(f"Deleted book {book_id}")
