"""Data access layer: one repository per table model."""

from library_api.repositories.author_repository import AuthorRepository
from library_api.repositories.base import BaseRepository
from library_api.repositories.book_repository import BookRepository
from library_api.repositories.user_repository import UserRepository

__all__ = [
    "AuthorRepository",
    "BaseRepository",
    "BookRepository",
    "UserRepository",
]
