"""
Base model for all database tables with async relationship support.

This module provides the BaseModel class that all SQLModel table models
should inherit from. It includes SQLAlchemy's AsyncAttrs mixin to enable
proper handling of lazy-loaded relationships in async contexts.
"""

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlmodel import SQLModel


class BaseModel(SQLModel, AsyncAttrs):  # type: ignore[misc]
    """
    Base model for all database tables with async relationship support.

    Combines SQLModel with SQLAlchemy's AsyncAttrs mixin so relationships
    can be awaited through ``awaitable_attrs`` instead of raising
    MissingGreenlet in async contexts.

    Note:
        Author.books and Book.author are declared with ``lazy="selectin"``
        and repositories add explicit ``selectinload`` options, so handlers
        never need to await relationships themselves.
    """

    pass
