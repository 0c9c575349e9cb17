"""
Base command for encapsulating business operations.

The Command pattern encapsulates business logic as objects, keeping route
handlers thin and making each operation easy to test in isolation with
mocked repositories.

Example:
    ```python
    from library_api.commands.base import BaseCommand


    class GetBookCommand(BaseCommand[int, Book]):
        def __init__(self, repository: BookRepository):
            self.repository = repository

        async def execute(self, book_id: int) -> Book:
            book = await self.repository.get_by_id(book_id)
            if book is None:
                raise NotFoundError(f"Book with ID {book_id} not found")
            return book


    # Usage in HTTP handler
    @router.get("/api/books/{id}")
    @handle_http_errors
    async def get_book(id: int, repo: BookRepoDep) -> Response:
        book = await GetBookCommand(repo).execute(id)
        return Response(serialize(book, ViewGroup.GET_BOOKS))
    ```
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BaseCommand(ABC, Generic[TInput, TOutput]):
    """
    Base command for business operations.

    Commands depend on repositories for data access and, for the book list,
    on the response cache.

    Type Parameters:
        TInput: Input data type (a Pydantic model, an id, or raw body bytes).
        TOutput: Output data type.
    """

    @abstractmethod
    async def execute(self, input_data: TInput) -> TOutput:
        """
        Execute the command.

        Args:
            input_data: Input data for the command.

        Returns:
            Result of the command execution.

        Raises:
            AppException: Subclasses raise NotFoundError, ValidationError,
                CacheError as appropriate.
        """
        pass
