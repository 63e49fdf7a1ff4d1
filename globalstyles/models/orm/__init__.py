"""ORM models."""

from globalstyles.models.orm.base import Base
from globalstyles.models.orm.posts import GLOBAL_STYLES_POST_TYPE, Post
from globalstyles.models.orm.users import User, UserRoleName

__all__ = [
    "Base",
    "GLOBAL_STYLES_POST_TYPE",
    "Post",
    "User",
    "UserRoleName",
]
