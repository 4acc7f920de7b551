"""
SQLModel models for the Post Room backend.

This module exports all database models so they are registered with
SQLModel metadata before tables are created.
"""

from .user import User, AccountProvider
from .token import (
    SingleUseToken,
    ActivationToken,
    PasswordResetToken,
    DeletionToken,
    TokenPurpose,
    TOKEN_MODELS,
)
from .follow import Follow
from .blog import Blog, Category, BlogCategory, UserCategory
from .comment import Comment
from .engagement import Star, SavedBlog, Search
from .notification import Notification

__all__ = [
    "User",
    "AccountProvider",
    "SingleUseToken",
    "ActivationToken",
    "PasswordResetToken",
    "DeletionToken",
    "TokenPurpose",
    "TOKEN_MODELS",
    "Follow",
    "Blog",
    "Category",
    "BlogCategory",
    "UserCategory",
    "Comment",
    "Star",
    "SavedBlog",
    "Search",
    "Notification",
]
