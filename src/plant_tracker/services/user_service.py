"""User lookups shared by the auth and plant services."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from plant_tracker.db.models import User
from plant_tracker.errors import UserNotFound


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_by_email(self, email: str) -> User:
        """Like find_by_email, but a missing user is an error.

        Used to resolve the caller behind a validated token, so a miss
        means the account vanished after the token was issued.
        """
        user = await self.find_by_email(email)
        if user is None:
            raise UserNotFound(email)
        return user

    async def email_exists(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def username_exists(self, username: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.username == username)
        )
        return result.first() is not None
