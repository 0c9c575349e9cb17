"""
Dependency injection configuration for FastAPI.

Example:
    ```python
    from fastapi import APIRouter
    from library_api.dependencies import BookRepoDep, CacheDep

    router = APIRouter()

    @router.get("/api/books")
    async def get_books(repo: BookRepoDep, cache: CacheDep) -> Response: ...
    ```
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from library_api.dependencies.permissions import require_admin, require_roles
from library_api.managers.cache_manager import CacheManager
from library_api.managers.keycloak_manager import KeycloakManager
from library_api.repositories.author_repository import AuthorRepository
from library_api.repositories.book_repository import BookRepository
from library_api.storage.db import get_session
from library_api.versioning import VersioningService

# ============================================================================
# Database Session Dependencies
# ============================================================================

SessionDep = Annotated[AsyncSession, Depends(get_session)]


# ============================================================================
# Manager Dependencies
# ============================================================================


@lru_cache
def get_keycloak_manager() -> KeycloakManager:
    """
    Get cached Keycloak manager instance.

    Uses @lru_cache to provide singleton-like behavior while maintaining
    testability.

    Returns:
        Cached KeycloakManager instance.
    """
    return KeycloakManager()


def get_cache_manager(request: Request) -> CacheManager:
    """
    Get the response cache created by the application factory.

    Can be overridden in tests using app.dependency_overrides.
    """
    return request.app.state.cache


CacheDep = Annotated[CacheManager, Depends(get_cache_manager)]


# ============================================================================
# Repository Dependencies
# ============================================================================


def get_author_repository(session: SessionDep) -> AuthorRepository:
    """
    Get Author repository instance.

    Args:
        session: Database session from dependency injection.

    Returns:
        AuthorRepository instance.
    """
    return AuthorRepository(session)


def get_book_repository(session: SessionDep) -> BookRepository:
    """
    Get Book repository instance.

    Args:
        session: Database session from dependency injection.

    Returns:
        BookRepository instance.
    """
    return BookRepository(session)


AuthorRepoDep = Annotated[AuthorRepository, Depends(get_author_repository)]
BookRepoDep = Annotated[BookRepository, Depends(get_book_repository)]


# ============================================================================
# Versioning
# ============================================================================


def get_api_version(request: Request) -> str:
    """Requested API version (Accept header ``version`` parameter)."""
    return VersioningService(request).get_version()


VersionDep = Annotated[str, Depends(get_api_version)]

__all__ = [
    "AuthorRepoDep",
    "BookRepoDep",
    "CacheDep",
    "SessionDep",
    "VersionDep",
    "get_keycloak_manager",
    "require_admin",
    "require_roles",
]
