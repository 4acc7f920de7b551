from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, UniqueConstraint
from datetime import datetime
from typing import Optional

from ..core.clock import utcnow


class Follow(SQLModel, table=True):
    """Directed edge: ``follower_id`` follows ``user_id``."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    follower_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "follower_id", name="uq_follow_pair"),
        CheckConstraint("user_id != follower_id", name="ck_follow_not_self"),
    )
