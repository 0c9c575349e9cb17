"""
End-to-end tests for the book endpoints over an in-memory SQLite database
seeded with the demo fixtures (20 books, 10 authors).
"""

import json

import pytest

from library_api.constants import MAX_PAGE_SIZE


async def list_books(client, **params) -> list[dict]:
    response = await client.get("/api/books", params=params)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    return response.json()


class TestListBooks:
    async def test_default_page(self, client) -> None:
        books = await list_books(client)

        assert [b["id"] for b in books] == list(range(1, 11))
        assert books[0]["title"] == "Titre-0"
        assert books[0]["coverText"] == "Quatrième de couverture n° : 0"
        assert set(books[0]) == {"id", "title", "coverText", "comment", "author"}
        assert set(books[0]["author"]) == {"id", "firstName", "lastName"}

    async def test_pagination_is_deterministic(self, client) -> None:
        page = await list_books(client, page=2, limit=5)
        again = await list_books(client, page=2, limit=5)

        assert [b["id"] for b in page] == [6, 7, 8, 9, 10]
        assert page == again

    async def test_page_past_the_end_is_empty(self, client) -> None:
        assert await list_books(client, page=5, limit=10) == []

    async def test_limit_is_capped(self, client, app) -> None:
        books = await list_books(client, limit=MAX_PAGE_SIZE + 400)

        assert len(books) == 20
        assert await app.state.cache.backend.get(f"getAllBooks-1-{MAX_PAGE_SIZE}")

    @pytest.mark.parametrize(
        "params",
        [
            {"page": 0},
            {"limit": 0},
            {"page": "abc"},
            {"limit": -3},
            {"page": 10**19},
        ],
    )
    async def test_invalid_query_is_400(self, client, params) -> None:
        response = await client.get("/api/books", params=params)

        assert response.status_code == 400
        assert response.json()["detail"][0]["field"] in params

    async def test_list_is_cached(self, client, app) -> None:
        await list_books(client)

        assert await app.state.cache.backend.get("getAllBooks-1-10") is not None


class TestGetBook:
    async def test_default_version_hides_comment(self, client) -> None:
        response = await client.get("/api/books/1")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Titre-0"
        assert "comment" not in data

    async def test_version_2_shows_comment(self, client) -> None:
        response = await client.get(
            "/api/books/1", headers={"Accept": "application/json; version=2.0"}
        )

        assert response.json()["comment"] == "Commentaire du bibliothécaire 0"

    @pytest.mark.parametrize("book_id", [999, 2**70, -(2**70)])
    async def test_unknown_book_is_404(self, client, book_id) -> None:
        response = await client.get(f"/api/books/{book_id}")

        assert response.status_code == 404


class TestCreateBook:
    async def test_create(self, client, admin_headers) -> None:
        response = await client.post(
            "/api/books",
            content=json.dumps(
                {"title": "Dune", "coverText": "Arrakis", "idAuthor": 3}
            ),
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 21
        assert data["title"] == "Dune"
        assert data["author"]["id"] == 3
        assert data["author"]["firstName"] == "Prénom-2"
        assert response.headers["location"] == "http://test/api/books/21"

        location = await client.get(response.headers["location"])
        assert location.json()["title"] == "Dune"

    @pytest.mark.parametrize(
        "body",
        [
            {"title": "Orphan", "idAuthor": 9999},
            {"title": "Orphan"},
            {"title": "Orphan", "idAuthor": 2**70},
            {"title": "Orphan", "idAuthor": -(2**70)},
        ],
    )
    async def test_unresolved_author_gives_null_author(
        self, client, admin_headers, body
    ) -> None:
        response = await client.post(
            "/api/books", content=json.dumps(body), headers=admin_headers
        )

        assert response.status_code == 201
        assert response.json()["author"] is None

    async def test_create_invalidates_list(self, client, admin_headers) -> None:
        before = await list_books(client, limit=100)

        await client.post(
            "/api/books",
            content=json.dumps({"title": "Dune"}),
            headers=admin_headers,
        )
        after = await list_books(client, limit=100)

        assert len(before) == 20
        assert len(after) == 21
        assert after[-1]["title"] == "Dune"

    async def test_missing_title_is_400(self, client, admin_headers) -> None:
        response = await client.post(
            "/api/books",
            content=json.dumps({"coverText": "No title"}),
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"][0]["field"] == "title"
        assert len(await list_books(client, limit=100)) == 20

    async def test_malformed_json_is_400(self, client, admin_headers) -> None:
        response = await client.post(
            "/api/books", content=b"{title:", headers=admin_headers
        )

        assert response.status_code == 400

    async def test_non_admin_is_403_and_store_unchanged(
        self, client, user_headers
    ) -> None:
        before = await list_books(client, limit=100)

        response = await client.post(
            "/api/books",
            content=json.dumps({"title": "Dune"}),
            headers=user_headers,
        )

        assert response.status_code == 403
        assert response.json() == {
            "detail": "You do not have sufficient rights to modify books."
        }
        assert await list_books(client, limit=100) == before

    async def test_non_admin_rejected_before_body_is_parsed(
        self, client, user_headers
    ) -> None:
        response = await client.post(
            "/api/books", content=b"{not json", headers=user_headers
        )

        assert response.status_code == 403

    async def test_anonymous_is_401(self, client) -> None:
        response = await client.post(
            "/api/books", content=json.dumps({"title": "Dune"})
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_wrong_password_is_401(
        self, client, wrong_password_headers
    ) -> None:
        response = await client.post(
            "/api/books",
            content=json.dumps({"title": "Dune"}),
            headers=wrong_password_headers,
        )

        assert response.status_code == 401


class TestUpdateBook:
    async def test_update_invalidates_list(self, client, admin_headers) -> None:
        # Populate the cached page first
        assert (await list_books(client))[0]["title"] == "Titre-0"

        response = await client.put(
            "/api/books/1",
            content=json.dumps({"title": "Renamed", "idAuthor": 1}),
            headers=admin_headers,
        )

        assert response.status_code == 204
        assert response.content == b""
        books = await list_books(client)
        assert books[0]["title"] == "Renamed"
        assert books[0]["author"]["id"] == 1

    async def test_partial_body_keeps_other_fields(
        self, client, admin_headers
    ) -> None:
        await client.put(
            "/api/books/2",
            content=json.dumps({"title": "Renamed"}),
            headers=admin_headers,
        )

        data = (await client.get("/api/books/2")).json()
        assert data["title"] == "Renamed"
        assert data["coverText"] == "Quatrième de couverture n° : 1"
        # idAuthor absent: the author is re-resolved to nothing
        assert data["author"] is None

    @pytest.mark.parametrize("book_id", [999, 2**70])
    async def test_unknown_book_is_404(
        self, client, admin_headers, book_id
    ) -> None:
        response = await client.put(
            f"/api/books/{book_id}",
            content=json.dumps({"title": "Renamed"}),
            headers=admin_headers,
        )

        assert response.status_code == 404

    async def test_blank_title_is_400(self, client, admin_headers) -> None:
        response = await client.put(
            "/api/books/1",
            content=json.dumps({"title": ""}),
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert (await client.get("/api/books/1")).json()["title"] == "Titre-0"

    async def test_non_admin_is_403(self, client, user_headers) -> None:
        response = await client.put(
            "/api/books/1",
            content=json.dumps({"title": "Renamed"}),
            headers=user_headers,
        )

        assert response.status_code == 403
        assert (await client.get("/api/books/1")).json()["title"] == "Titre-0"


class TestDeleteBook:
    async def test_delete_invalidates_list(self, client, admin_headers) -> None:
        assert len(await list_books(client, limit=100)) == 20

        response = await client.delete("/api/books/5", headers=admin_headers)

        assert response.status_code == 204
        books = await list_books(client, limit=100)
        assert len(books) == 19
        assert 5 not in [b["id"] for b in books]
        assert (await client.get("/api/books/5")).status_code == 404

    @pytest.mark.parametrize("book_id", [999, 2**70])
    async def test_unknown_book_is_404(
        self, client, admin_headers, book_id
    ) -> None:
        response = await client.delete(
            f"/api/books/{book_id}", headers=admin_headers
        )

        assert response.status_code == 404

    async def test_non_admin_is_403(self, client, user_headers) -> None:
        response = await client.delete("/api/books/5", headers=user_headers)

        assert response.status_code == 403
        assert (await client.get("/api/books/5")).status_code == 200

    async def test_anonymous_is_401(self, client) -> None:
        response = await client.delete("/api/books/5")

        assert response.status_code == 401
