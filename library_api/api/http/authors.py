"""
Author endpoints (read-only).

Responses are pre-serialized JSON views (see library_api.serialization),
returned as raw application/json bodies.
"""

from fastapi import APIRouter, Response

from library_api.commands.author_commands import (
    GetAuthorCommand,
    GetAuthorsCommand,
)
from library_api.dependencies import AuthorRepoDep
from library_api.serialization import ViewGroup, serialize
from library_api.utils.error_handler import handle_http_errors

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get(
    "",
    summary="Get all authors",
    description="Every author with the books they wrote",
    name="all_authors",
)
@handle_http_errors
async def get_authors(repo: AuthorRepoDep) -> Response:
    """
    Example:
        GET /api/authors
    """
    authors = await GetAuthorsCommand(repo).execute()
    return Response(
        content=serialize(authors, ViewGroup.GET_AUTHORS),
        media_type="application/json",
    )


@router.get(
    "/{id}",
    summary="Get one author",
    name="one_author",
)
@handle_http_errors
async def get_author(id: int, repo: AuthorRepoDep) -> Response:
    """
    Get a single author without their books.

    Raises:
        HTTPException: 404 if no author has this id.
    """
    author = await GetAuthorCommand(repo).execute(id)
    return Response(
        content=serialize(author, ViewGroup.GET_BOOKS),
        media_type="application/json",
    )
