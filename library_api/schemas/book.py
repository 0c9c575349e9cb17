"""
Inbound book payloads and field validation.

Parsing (JSON shape and types) and validation (field constraints) are
separate steps: a PUT body is merged onto the stored book first, and the
merged result is what gets validated.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from library_api.constants import UNRESOLVED_AUTHOR_ID
from library_api.models.book import Book

TITLE_MAX_LENGTH = 255

# Payload fields copied onto the entity; idAuthor is resolved separately
ENTITY_FIELDS = frozenset({"title", "cover_text", "comment"})


class BookPayload(BaseModel):  # type: ignore[misc]
    """Body accepted by POST /api/books and PUT /api/books/{id}."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = None
    cover_text: str | None = Field(default=None, alias="coverText")
    comment: str | None = None
    id_author: int | None = Field(default=None, alias="idAuthor")

    @property
    def author_id(self) -> int:
        """Author id to resolve, or the sentinel that never matches."""
        if self.id_author is None:
            return UNRESOLVED_AUTHOR_ID
        return self.id_author

    def to_entity(self, existing: Book | None = None) -> Book:
        """
        Build a new Book, or merge the fields present in the body onto
        ``existing`` in place.

        Args:
            existing: Stored book to update (None = create a new one).

        Returns:
            The new or updated Book (not yet validated or persisted).
        """
        values: dict[str, Any] = self.model_dump(
            include=self.model_fields_set & ENTITY_FIELDS
        )
        if existing is None:
            return Book(**values)

        for field, value in values.items():
            setattr(existing, field, value)
        return existing


def validate_book(book: Book) -> list[dict[str, str]]:
    """
    Check a book against its field constraints.

    Args:
        book: Book to check.

    Returns:
        One ``{"field", "message"}`` violation per failed constraint; empty
        when the book is valid.
    """
    violations: list[dict[str, str]] = []

    if book.title is None or not book.title.strip():
        violations.append(
            {"field": "title", "message": "The book title is required."}
        )
    elif len(book.title) > TITLE_MAX_LENGTH:
        violations.append(
            {
                "field": "title",
                "message": f"The book title must be at most {TITLE_MAX_LENGTH} characters long.",
            }
        )

    return violations
