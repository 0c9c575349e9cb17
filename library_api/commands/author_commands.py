"""
Commands for Author read operations.

Authors are read-only through the API; they are created by the fixture
loader or provisioned out of band.
"""

from library_api.commands.base import BaseCommand
from library_api.exceptions import NotFoundError
from library_api.models.author import Author
from library_api.repositories.author_repository import AuthorRepository


class GetAuthorsCommand(BaseCommand[None, list[Author]]):
    """
    Command to list every author with their books.

    Note: Uses concrete AuthorRepository type instead of Repository[Author]
    protocol because it requires the get_all_with_books() extension method.
    """

    def __init__(self, repository: AuthorRepository):
        self.repository = repository

    async def execute(self, input_data: None = None) -> list[Author]:
        """
        Returns:
            Authors ordered by id, books loaded.
        """
        return await self.repository.get_all_with_books()


class GetAuthorCommand(BaseCommand[int, Author]):
    """Command to fetch one author by id."""

    def __init__(self, repository: AuthorRepository):
        self.repository = repository

    async def execute(self, author_id: int) -> Author:
        """
        Args:
            author_id: ID of the author to fetch.

        Returns:
            The author.

        Raises:
            NotFoundError: If no author has this id.
        """
        author = await self.repository.get_by_id(author_id)
        if author is None:
            raise NotFoundError(f"Author with ID {author_id} not found")
        return author
