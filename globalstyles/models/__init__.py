"""
Models package.

ORM models live in models.orm; request/response contracts in models.contracts.
"""

from globalstyles.models.orm import (
    GLOBAL_STYLES_POST_TYPE,
    Base,
    Post,
    User,
    UserRoleName,
)

__all__ = [
    "Base",
    "GLOBAL_STYLES_POST_TYPE",
    "Post",
    "User",
    "UserRoleName",
]
