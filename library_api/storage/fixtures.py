"""
Demo data for development databases and tests.

Seeds 10 authors, 20 books each pointing at a random author, and two local
accounts (a regular user and an administrator) sharing the password
``password``.
"""

import random

from sqlmodel.ext.asyncio.session import AsyncSession

from library_api.constants import ROLE_ADMIN, ROLE_USER
from library_api.logging import logger
from library_api.models import Author, Book, User
from library_api.utils.password import hash_password

AUTHOR_COUNT = 10
BOOK_COUNT = 20
FIXTURE_PASSWORD = "password"

FIXTURE_USERS = [
    ("test1.test1@sfr.fr", [ROLE_USER]),
    ("test2.test2@sfr.fr", [ROLE_ADMIN]),
]


async def load_fixtures(
    session: AsyncSession, rng: random.Random | None = None
) -> None:
    """
    Insert the demo catalog and accounts, then commit.

    Args:
        session: Open database session.
        rng: Random source used to assign authors to books (pass a seeded
            instance for reproducible data).
    """
    rng = rng or random.Random()

    authors = [
        Author(first_name=f"Prénom-{i}", last_name=f"Nom-{i}")
        for i in range(AUTHOR_COUNT)
    ]
    session.add_all(authors)

    books = [
        Book(
            title=f"Titre-{i}",
            cover_text=f"Quatrième de couverture n° : {i}",
            comment=f"Commentaire du bibliothécaire {i}",
            author=rng.choice(authors),
        )
        for i in range(BOOK_COUNT)
    ]
    session.add_all(books)

    password = hash_password(FIXTURE_PASSWORD)
    session.add_all(
        User(email=email, roles=roles, password=password)
        for email, roles in FIXTURE_USERS
    )

    await session.commit()
    logger.info(
        f"Loaded fixtures: {AUTHOR_COUNT} authors, {BOOK_COUNT} books, "
        f"{len(FIXTURE_USERS)} users"
    )
