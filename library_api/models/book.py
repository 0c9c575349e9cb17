from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, Text
from sqlmodel import Field, Relationship

from library_api.models.base import BaseModel

if TYPE_CHECKING:
    from library_api.models.author import Author


class Book(BaseModel, table=True):
    """
    SQLModel representing a book in the catalog.

    The author reference is nullable: a book created or updated with an
    author id that matches no record simply has no author. Removing an
    author row out of band sets the reference to NULL instead of deleting
    the book.

    Attributes:
        id: Primary key identifier for the book
        title: Book title (required, at most 255 characters)
        cover_text: Back-cover blurb (serialized as "coverText")
        comment: Librarian's note, exposed from API version 2.0
        author_id: Foreign key to the author, or None
        author: The resolved author, or None
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    cover_text: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    comment: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    author_id: int | None = Field(
        default=None,
        foreign_key="author.id",
        nullable=True,
        ondelete="SET NULL",
    )

    author: Optional["Author"] = Relationship(
        back_populates="books",
        sa_relationship_kwargs={"lazy": "selectin"},
    )
