from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum

from ..core.clock import utcnow


class AccountProvider(str, Enum):
    """Where the account was created."""

    DEFAULT = "default"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    APPLE = "apple"


class User(SQLModel, table=True):
    """User model for authentication and profile management."""

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=50)

    # Profile
    fullname: Optional[str] = Field(default=None, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=250)
    image_url: Optional[str] = Field(default=None, max_length=500)

    # Authentication
    hashed_password: Optional[str] = Field(default=None)  # None for provider accounts
    provider: AccountProvider = Field(default=AccountProvider.DEFAULT)
    is_email_verified: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
