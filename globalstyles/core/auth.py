"""
API key authentication.

Callers authenticate with "Authorization: Bearer <api key>". Keys are looked
up by their SHA-256 hash. Requests without credentials, or with an unknown
key, are treated as anonymous; permission checks decide whether anonymous
callers may proceed.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from globalstyles.core.database import DbSession
from globalstyles.models import User
from globalstyles.repositories.users import UserRepository

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class UserPrincipal:
    """The authenticated caller."""

    user_id: int
    email: str
    name: str
    role: str
    is_super_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "UserPrincipal":
        return cls(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            is_super_admin=user.is_super_admin,
        )


def hash_api_key(api_key: str) -> str:
    """Hex SHA-256 digest of an API key, as stored on the user."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: DbSession,
) -> UserPrincipal | None:
    """
    Resolve the caller from bearer credentials.

    Returns:
        The caller, or None for anonymous requests
    """
    if credentials is None or not credentials.credentials:
        return None

    user = await UserRepository(db).get_by_api_key_hash(
        hash_api_key(credentials.credentials)
    )
    if user is None:
        logger.warning("Rejected unknown or inactive API key; treating request as anonymous")
        return None

    return UserPrincipal.from_user(user)


CurrentUserOptional = Annotated[UserPrincipal | None, Depends(get_current_user_optional)]
