from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship

from library_api.models.base import BaseModel

if TYPE_CHECKING:
    from library_api.models.book import Book


class Author(BaseModel, table=True):
    """
    SQLModel representing an author of books in the catalog.

    This is a clean data model without Active Record methods.
    Use AuthorRepository for all database operations.

    Attributes:
        id: Primary key identifier for the author
        first_name: Given name (serialized as "firstName")
        last_name: Family name (serialized as "lastName")
        books: Books written by the author
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)

    books: list["Book"] = Relationship(
        back_populates="author",
        sa_relationship_kwargs={"lazy": "selectin", "order_by": "Book.id"},
    )
