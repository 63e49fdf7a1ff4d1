"""
User Repository

Lookups used by API key authentication.
"""

from sqlalchemy import select

from globalstyles.models import User
from globalstyles.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for users."""

    model = User

    async def get_by_api_key_hash(self, api_key_hash: str) -> User | None:
        """Get the active user owning an API key hash."""
        result = await self.session.execute(
            select(User).where(
                User.api_key_hash == api_key_hash,
                User.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()
