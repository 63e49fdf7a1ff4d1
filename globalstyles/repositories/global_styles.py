"""
Global Styles Repository

Database operations for user global styles documents.

Global styles are stored in the posts table with post_type="global_styles",
one document per theme. The document content is a JSON object flagged with
isGlobalStylesUserThemeJSON.
"""

import json
import logging
from urllib.parse import quote_plus

from sqlalchemy import select

from globalstyles.models import GLOBAL_STYLES_POST_TYPE, Post
from globalstyles.models.contracts.global_styles import LATEST_SCHEMA
from globalstyles.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Custom Styles"


def global_styles_post_name(stylesheet: str) -> str:
    """Slug of the user global styles document for a theme."""
    return f"wp-global-styles-{quote_plus(stylesheet)}"


class GlobalStylesRepository(BaseRepository[Post]):
    """Repository for global styles posts."""

    model = Post

    async def get_for_theme(self, stylesheet: str) -> Post | None:
        """Get the user global styles document of a theme."""
        result = await self.session.execute(
            select(Post)
            .where(Post.post_type == GLOBAL_STYLES_POST_TYPE)
            .where(Post.theme == stylesheet)
            .order_by(Post.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_or_create_for_theme(self, stylesheet: str) -> Post:
        """
        Get the user global styles document of a theme, creating an empty
        flagged document when the theme has none yet.
        """
        post = await self.get_for_theme(stylesheet)
        if post:
            return post

        content = {"version": LATEST_SCHEMA, "isGlobalStylesUserThemeJSON": True}
        post = await self.create(
            Post(
                post_type=GLOBAL_STYLES_POST_TYPE,
                name=global_styles_post_name(stylesheet),
                title=DEFAULT_TITLE,
                content=json.dumps(content),
                status="publish",
                theme=stylesheet,
            )
        )
        logger.info(f"Created global styles {post.id} for theme {stylesheet!r}")
        return post
