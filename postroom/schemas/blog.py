from datetime import datetime
from typing import List
from pydantic import BaseModel


class DraftCreate(BaseModel):
    """Draft creation request."""

    title: str
    content: str


class DraftUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    image_url: str | None = None
    categories: List[str] = []


class CategoryResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class AuthorSummary(BaseModel):
    """Public face of a user shown next to posts and comments."""

    id: int
    username: str | None = None
    fullname: str | None = None
    image_url: str | None = None

    class Config:
        from_attributes = True


class BlogSummary(BaseModel):
    id: int
    title: str
    image_url: str | None = None
    author: AuthorSummary | None = None

    class Config:
        from_attributes = True


class BlogResponse(BaseModel):
    """Blog response model."""

    id: int
    author_id: int
    title: str
    content: str
    image_url: str | None = None
    draft: bool
    created_at: datetime
    updated_at: datetime
    categories: List[CategoryResponse] = []

    # Reader context
    author: AuthorSummary | None = None
    star_count: int = 0
    comment_count: int = 0
    starred: bool = False
    saved: bool = False
    following: bool = False

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: int
    blog_id: int
    author_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary | None = None

    class Config:
        from_attributes = True


class SearchResponse(BaseModel):
    id: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
