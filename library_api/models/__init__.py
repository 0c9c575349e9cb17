"""Database table models."""

from library_api.models.author import Author
from library_api.models.book import Book
from library_api.models.user import User

__all__ = ["Author", "Book", "User"]
