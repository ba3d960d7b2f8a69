"""Account service: a user's authored content and account record."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.models.post import Post
from devconnector.models.user import APIKey, User


class AccountService:
    """Deletes and counts what a user owns outside their profile.

    Methods only stage statements; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_posts(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Post.id)).where(Post.user_id == user_id)
        )
        return result.scalar_one()

    async def delete_posts(self, user_id: UUID) -> int:
        """Delete every post written by the user. Returns how many were removed."""
        result = await self.db.execute(delete(Post).where(Post.user_id == user_id))
        return result.rowcount

    async def delete_account(self, user_id: UUID) -> None:
        """Delete the user's API keys and account record."""
        await self.db.execute(delete(APIKey).where(APIKey.user_id == user_id))
        await self.db.execute(delete(User).where(User.id == user_id))
