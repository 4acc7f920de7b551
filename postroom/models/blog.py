from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Text, UniqueConstraint
from datetime import datetime
from typing import Optional

from ..core.clock import utcnow


class Blog(SQLModel, table=True):
    """Blog post. Starts as a draft; publishing is one-way."""

    id: Optional[int] = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="user.id", index=True)

    title: str = Field(default="", max_length=200)
    content: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    image_url: Optional[str] = Field(default=None, max_length=500)

    draft: bool = Field(default=True, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=50)


class BlogCategory(SQLModel, table=True):
    """Category tag on a blog post."""

    __tablename__ = "blog_category"

    id: Optional[int] = Field(default=None, primary_key=True)
    blog_id: int = Field(foreign_key="blog.id", index=True)
    category_id: int = Field(foreign_key="category.id", index=True)

    __table_args__ = (UniqueConstraint("blog_id", "category_id", name="uq_blog_category"),)


class UserCategory(SQLModel, table=True):
    """Category a user has picked as an interest."""

    __tablename__ = "user_category"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    category_id: int = Field(foreign_key="category.id", index=True)

    __table_args__ = (UniqueConstraint("user_id", "category_id", name="uq_user_category"),)
