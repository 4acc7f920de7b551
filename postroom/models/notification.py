from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional

from ..core.clock import utcnow


class Notification(SQLModel, table=True):
    """New-post notification for one follower, created when a draft is published."""

    id: Optional[int] = Field(default=None, primary_key=True)
    blog_id: int = Field(foreign_key="blog.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    seen: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)

    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_notification_recipient"),)
