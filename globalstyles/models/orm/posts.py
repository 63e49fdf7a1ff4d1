"""
Post ORM model.

Generic content storage. Global styles documents are posts with
post_type="global_styles" whose content is a JSON document; other post
types share the same id space.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from globalstyles.models.orm.base import Base

GLOBAL_STYLES_POST_TYPE = "global_styles"


class Post(Base):
    """A stored content record."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_type: Mapped[str] = mapped_column(String(20), default="post")
    name: Mapped[str] = mapped_column(String(200), default="")
    title: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default="publish")
    theme: Mapped[str | None] = mapped_column(String(255), default=None)
    author_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_posts_post_type_theme", "post_type", "theme"),
    )

    @property
    def is_global_styles(self) -> bool:
        return self.post_type == GLOBAL_STYLES_POST_TYPE
