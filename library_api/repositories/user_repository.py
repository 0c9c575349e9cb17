from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from library_api.models.user import User
from library_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Lookups for locally provisioned API accounts."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by login email.

        Args:
            email: Exact email address.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.first()
