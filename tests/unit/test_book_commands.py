"""
Tests for the book commands with mocked repositories and cache.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from library_api.commands.book_commands import (
    CreateBookCommand,
    DeleteBookCommand,
    GetBookCommand,
    GetBooksCommand,
    GetBooksInput,
    UpdateBookCommand,
    UpdateBookInput,
)
from library_api.constants import BOOK_LIST_CACHE_TAG, UNRESOLVED_AUTHOR_ID
from library_api.exceptions import NotFoundError, ValidationError
from library_api.managers.cache_manager import CacheManager
from library_api.models import Author, Book
from library_api.storage.memory_cache import MemoryCacheBackend


@pytest.fixture
def calls() -> list[str]:
    """Order in which repository and cache side effects happen."""
    return []


@pytest.fixture
def book_repo(calls):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.find_all_with_pagination = AsyncMock(return_value=[])

    async def create(book: Book) -> Book:
        calls.append("create")
        book.id = 21
        return book

    async def update(book: Book) -> Book:
        calls.append("update")
        return book

    async def delete(book: Book) -> None:
        calls.append("delete")

    async def commit() -> None:
        calls.append("commit")

    repo.create = AsyncMock(side_effect=create)
    repo.update = AsyncMock(side_effect=update)
    repo.delete = AsyncMock(side_effect=delete)
    repo.commit = AsyncMock(side_effect=commit)
    return repo


@pytest.fixture
def author_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def cache(calls):
    cache = MagicMock(spec=CacheManager)

    async def invalidate(tags) -> int:
        calls.append("invalidate")
        return 0

    cache.invalidate = AsyncMock(side_effect=invalidate)
    return cache


class TestGetBooksCommand:
    async def test_page_is_cached(self) -> None:
        repo = MagicMock()
        repo.find_all_with_pagination = AsyncMock(
            return_value=[Book(id=1, title="Titre-0")]
        )
        backend = MemoryCacheBackend()
        command = GetBooksCommand(repo, CacheManager(backend))

        first = await command.execute(GetBooksInput(page=1, limit=10))
        second = await command.execute(GetBooksInput(page=1, limit=10))

        assert first == second
        assert json.loads(first)[0]["title"] == "Titre-0"
        repo.find_all_with_pagination.assert_awaited_once_with(1, 10)
        assert await backend.get("getAllBooks-1-10") == first

    async def test_limit_is_capped_before_key_is_built(self) -> None:
        repo = MagicMock()
        repo.find_all_with_pagination = AsyncMock(return_value=[])
        backend = MemoryCacheBackend()
        command = GetBooksCommand(repo, CacheManager(backend))

        await command.execute(GetBooksInput(page=2, limit=500))

        repo.find_all_with_pagination.assert_awaited_once_with(2, 100)
        assert await backend.get("getAllBooks-2-100") == b"[]"

    async def test_entries_carry_book_list_tag(self) -> None:
        repo = MagicMock()
        repo.find_all_with_pagination = AsyncMock(return_value=[])
        cache = CacheManager(MemoryCacheBackend())

        await GetBooksCommand(repo, cache).execute(GetBooksInput())

        assert await cache.invalidate([BOOK_LIST_CACHE_TAG]) == 1

    def test_input_defaults(self) -> None:
        data = GetBooksInput()

        assert (data.page, data.limit) == (1, 10)


class TestGetBookCommand:
    async def test_not_found(self, book_repo) -> None:
        with pytest.raises(NotFoundError):
            await GetBookCommand(book_repo).execute(99)


class TestCreateBookCommand:
    async def test_creates_then_commits_then_invalidates(
        self, book_repo, author_repo, cache, calls
    ) -> None:
        author = Author(id=2, first_name="Prénom-1", last_name="Nom-1")
        author_repo.get_by_id.return_value = author
        book_repo.get_by_id.return_value = Book(id=21, title="Dune")

        book = await CreateBookCommand(book_repo, author_repo, cache).execute(
            b'{"title": "Dune", "coverText": "Arrakis", "idAuthor": 2}'
        )

        assert calls == ["create", "commit", "invalidate"]
        cache.invalidate.assert_awaited_once_with([BOOK_LIST_CACHE_TAG])
        author_repo.get_by_id.assert_awaited_once_with(2)
        created = book_repo.create.call_args.args[0]
        assert created.title == "Dune"
        assert created.author is author
        assert book.id == 21

    async def test_missing_author_id_resolves_sentinel(
        self, book_repo, author_repo, cache
    ) -> None:
        book_repo.get_by_id.return_value = Book(id=21, title="Dune")

        await CreateBookCommand(book_repo, author_repo, cache).execute(
            b'{"title": "Dune"}'
        )

        author_repo.get_by_id.assert_awaited_once_with(UNRESOLVED_AUTHOR_ID)
        assert book_repo.create.call_args.args[0].author is None

    async def test_invalid_book_is_not_persisted(
        self, book_repo, author_repo, cache, calls
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await CreateBookCommand(book_repo, author_repo, cache).execute(
                b'{"coverText": "No title"}'
            )

        assert exc_info.value.violations[0]["field"] == "title"
        assert calls == []
        author_repo.get_by_id.assert_not_called()

    async def test_malformed_body(self, book_repo, author_repo, cache, calls) -> None:
        with pytest.raises(ValidationError):
            await CreateBookCommand(book_repo, author_repo, cache).execute(b"{")

        assert calls == []


class TestUpdateBookCommand:
    async def test_updates_and_invalidates_book_list_tag(
        self, book_repo, author_repo, cache, calls
    ) -> None:
        stored = Book(id=4, title="Old", cover_text="Keep")
        book_repo.get_by_id.return_value = stored

        book = await UpdateBookCommand(book_repo, author_repo, cache).execute(
            UpdateBookInput(id=4, body=b'{"title": "New"}')
        )

        assert book is stored
        assert (book.title, book.cover_text) == ("New", "Keep")
        assert calls == ["update", "commit", "invalidate"]
        cache.invalidate.assert_awaited_once_with([BOOK_LIST_CACHE_TAG])

    async def test_author_re_resolved_on_every_update(
        self, book_repo, author_repo, cache
    ) -> None:
        stored = Book(id=4, title="Old")
        stored.author = Author(id=1, first_name="A", last_name="B")
        book_repo.get_by_id.return_value = stored

        await UpdateBookCommand(book_repo, author_repo, cache).execute(
            UpdateBookInput(id=4, body=b'{"title": "New"}')
        )

        author_repo.get_by_id.assert_awaited_once_with(UNRESOLVED_AUTHOR_ID)
        assert stored.author is None

    async def test_not_found(self, book_repo, author_repo, cache, calls) -> None:
        with pytest.raises(NotFoundError):
            await UpdateBookCommand(book_repo, author_repo, cache).execute(
                UpdateBookInput(id=99, body=b'{"title": "New"}')
            )

        assert calls == []

    async def test_blank_title_rejected(
        self, book_repo, author_repo, cache, calls
    ) -> None:
        book_repo.get_by_id.return_value = Book(id=4, title="Old")

        with pytest.raises(ValidationError):
            await UpdateBookCommand(book_repo, author_repo, cache).execute(
                UpdateBookInput(id=4, body=b'{"title": ""}')
            )

        assert calls == []


class TestDeleteBookCommand:
    async def test_deletes_then_invalidates(self, book_repo, cache, calls) -> None:
        book_repo.get_by_id.return_value = Book(id=4, title="Old")

        await DeleteBookCommand(book_repo, cache).execute(4)

        assert calls == ["delete", "commit", "invalidate"]
        cache.invalidate.assert_awaited_once_with([BOOK_LIST_CACHE_TAG])

    async def test_not_found(self, book_repo, cache, calls) -> None:
        with pytest.raises(NotFoundError):
            await DeleteBookCommand(book_repo, cache).execute(99)

        assert calls == []
