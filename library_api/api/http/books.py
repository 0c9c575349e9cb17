"""
Book endpoints using Repository + Command + Dependency Injection.

Reads are public. Writes require the admin role; the role gate is a route
dependency, so it runs before the request body is read. Write handlers read
the raw body themselves (instead of declaring a body model) for the same
reason, and so malformed JSON is reported as a 400 validation error.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from library_api.commands.book_commands import (
    CreateBookCommand,
    DeleteBookCommand,
    GetBookCommand,
    GetBooksCommand,
    GetBooksInput,
    UpdateBookCommand,
    UpdateBookInput,
)
from library_api.constants import DEFAULT_PAGE, MAX_PAGE, MAX_PAGE_SIZE
from library_api.dependencies import (
    AuthorRepoDep,
    BookRepoDep,
    CacheDep,
    VersionDep,
)
from library_api.dependencies.permissions import require_admin
from library_api.serialization import ViewGroup, serialize
from library_api.settings import app_settings
from library_api.utils.error_handler import handle_http_errors

router = APIRouter(prefix="/api/books", tags=["books"])

BOOK_BODY_SCHEMA = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["title"],
                    "properties": {
                        "title": {"type": "string", "maxLength": 255},
                        "coverText": {"type": "string"},
                        "comment": {"type": "string"},
                        "idAuthor": {"type": "integer"},
                    },
                }
            }
        },
    }
}


def _json(content: bytes, status_code: int = status.HTTP_200_OK, **kwargs) -> Response:  # type: ignore[no-untyped-def]
    return Response(
        content=content,
        status_code=status_code,
        media_type="application/json",
        **kwargs,
    )


@router.get(
    "",
    summary="Get one page of books",
    description=f"Books ordered by id. The page size is capped at {MAX_PAGE_SIZE}.",
    name="all_books",
)
@handle_http_errors
async def get_books(
    repo: BookRepoDep,
    cache: CacheDep,
    page: Annotated[int, Query(ge=1, le=MAX_PAGE)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1)] = app_settings.DEFAULT_PAGE_SIZE,
) -> Response:
    """
    Example:
        GET /api/books?page=2&limit=5
    """
    command = GetBooksCommand(repo, cache)
    payload = await command.execute(GetBooksInput(page=page, limit=limit))
    return _json(payload)


@router.get(
    "/{id}",
    summary="Get one book",
    description="Field set depends on the version requested in the Accept header",
    name="one_book",
)
@handle_http_errors
async def get_book(id: int, repo: BookRepoDep, version: VersionDep) -> Response:
    """
    Example:
        GET /api/books/1
        Accept: application/json; version=2.0
    """
    book = await GetBookCommand(repo).execute(id)
    return _json(serialize(book, ViewGroup.GET_BOOKS, version))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
    name="create_book",
    dependencies=[Depends(require_admin)],
    openapi_extra=BOOK_BODY_SCHEMA,
)
@handle_http_errors
async def create_book(
    request: Request,
    repo: BookRepoDep,
    author_repo: AuthorRepoDep,
    cache: CacheDep,
) -> Response:
    """
    Create a book; an unknown idAuthor yields a book without author.

    Returns:
        201 with the created book and its URL in the Location header.
    """
    command = CreateBookCommand(repo, author_repo, cache)
    book = await command.execute(await request.body())
    return _json(
        serialize(book, ViewGroup.GET_BOOKS),
        status_code=status.HTTP_201_CREATED,
        headers={"Location": str(request.url_for("one_book", id=book.id))},
    )


@router.put(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Update a book",
    name="update_book",
    dependencies=[Depends(require_admin)],
    openapi_extra=BOOK_BODY_SCHEMA,
)
@handle_http_errors
async def update_book(
    id: int,
    request: Request,
    repo: BookRepoDep,
    author_repo: AuthorRepoDep,
    cache: CacheDep,
) -> Response:
    command = UpdateBookCommand(repo, author_repo, cache)
    await command.execute(UpdateBookInput(id=id, body=await request.body()))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    name="delete_book",
    dependencies=[Depends(require_admin)],
)
@handle_http_errors
async def delete_book(id: int, repo: BookRepoDep, cache: CacheDep) -> Response:
    await DeleteBookCommand(repo, cache).execute(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
