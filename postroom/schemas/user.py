from datetime import datetime
from typing import List
from pydantic import BaseModel, EmailStr

from ..models.user import AccountProvider
from .blog import BlogResponse, BlogSummary


class UserResponse(BaseModel):
    """User response model."""

    id: int
    email: EmailStr
    username: str | None = None
    fullname: str | None = None
    bio: str | None = None
    image_url: str | None = None
    provider: AccountProvider
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    fullname: str | None = None
    username: str | None = None
    bio: str | None = None
    image_url: str | None = None


class FollowResponse(BaseModel):
    id: int
    user_id: int
    follower_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: int
    blog_id: int
    seen: bool
    created_at: datetime
    blog: BlogSummary | None = None

    class Config:
        from_attributes = True


class NotificationsSeenResponse(BaseModel):
    updated: int


class ProfileResponse(BaseModel):
    """Public profile with the account's published posts."""

    id: int
    username: str | None = None
    fullname: str | None = None
    bio: str | None = None
    image_url: str | None = None
    follower_count: int = 0
    following_count: int = 0
    following: bool | None = None
    blogs: List[BlogResponse] = []

    class Config:
        from_attributes = True


class InterestsUpdate(BaseModel):
    categories: List[str]
