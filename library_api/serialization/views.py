"""
View groups and per-version field availability.

Each (entity type, view group) pair maps to one projection function
returning a plain dict keyed by the JSON field names. Version-dependent
fields are listed in FIELD_SINCE; a field listed there is only emitted
when the requested version is at least its minimum version.
"""

from enum import Enum
from typing import Any, Callable

from library_api.models.author import Author
from library_api.models.book import Book


class ViewGroup(str, Enum):
    """Named JSON views of the catalog entities."""

    GET_BOOKS = "getBooks"
    GET_AUTHORS = "getAuthors"


Version = tuple[int, ...]

# (entity type, JSON field) -> first API version exposing the field
FIELD_SINCE: dict[tuple[type, str], str] = {
    (Book, "comment"): "2.0",
}


def parse_version(version: str) -> Version:
    """
    Turn a dotted version token into a comparable tuple.

    Non-numeric components compare as 0, so "2.0-beta" is (2, 0).
    """
    parts = []
    for part in version.strip().split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def _since(entity_type: type, field: str, version: Version | None) -> bool:
    if version is None:
        return True
    minimum = FIELD_SINCE.get((entity_type, field))
    return minimum is None or version >= parse_version(minimum)


def _versioned(
    entity_type: type, data: dict[str, Any], version: Version | None
) -> dict[str, Any]:
    return {
        field: value
        for field, value in data.items()
        if _since(entity_type, field, version)
    }


def book_in_book_list(book: Book, version: Version | None) -> dict[str, Any]:
    """Book with its nested author (getBooks)."""
    author = book.author
    return _versioned(
        Book,
        {
            "id": book.id,
            "title": book.title,
            "coverText": book.cover_text,
            "comment": book.comment,
            "author": (
                author_in_book_list(author, version)
                if author is not None
                else None
            ),
        },
        version,
    )


def book_in_author_list(book: Book, version: Version | None) -> dict[str, Any]:
    """Book nested under its author (getAuthors); no back-reference."""
    return _versioned(
        Book,
        {"id": book.id, "title": book.title, "coverText": book.cover_text},
        version,
    )


def author_in_book_list(
    author: Author, version: Version | None
) -> dict[str, Any]:
    """Author without books (getBooks)."""
    return _versioned(
        Author,
        {
            "id": author.id,
            "firstName": author.first_name,
            "lastName": author.last_name,
        },
        version,
    )


def author_in_author_list(
    author: Author, version: Version | None
) -> dict[str, Any]:
    """Author with the books they wrote (getAuthors)."""
    data = author_in_book_list(author, version)
    data["books"] = [book_in_author_list(b, version) for b in author.books]
    return data


Projection = Callable[[Any, Version | None], dict[str, Any]]

PROJECTIONS: dict[tuple[type, ViewGroup], Projection] = {
    (Book, ViewGroup.GET_BOOKS): book_in_book_list,
    (Book, ViewGroup.GET_AUTHORS): book_in_author_list,
    (Author, ViewGroup.GET_AUTHORS): author_in_author_list,
    (Author, ViewGroup.GET_BOOKS): author_in_book_list,
}


def project(obj: Any, group: ViewGroup, version: Version | None) -> dict[str, Any]:
    """
    Apply the projection registered for type(obj) and group.

    Raises:
        TypeError: If no projection is registered for the pair.
    """
    try:
        projection = PROJECTIONS[(type(obj), group)]
    except KeyError:
        raise TypeError(
            f"No {group.value} view for {type(obj).__name__}"
        ) from None
    return projection(obj, version)
