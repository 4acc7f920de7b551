from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional

from ..core.clock import utcnow


class Star(SQLModel, table=True):
    """A reader's star on a blog post."""

    id: Optional[int] = Field(default=None, primary_key=True)
    blog_id: int = Field(foreign_key="blog.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)

    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_star_pair"),)


class SavedBlog(SQLModel, table=True):
    """Entry in a reader's saved list."""

    __tablename__ = "saved_blog"

    id: Optional[int] = Field(default=None, primary_key=True)
    blog_id: int = Field(foreign_key="blog.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)

    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_saved_blog"),)


class Search(SQLModel, table=True):
    """A recent search query. Only the newest few per user are kept."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    content: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=utcnow, index=True)
