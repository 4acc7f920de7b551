from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum

from ..core.clock import utcnow


class TokenPurpose(str, Enum):
    """What a single-use token authorizes. Each purpose has its own table."""

    ACTIVATE = "activate"
    RESET_PASSWORD = "reset_password"
    DELETE_ACCOUNT = "delete_account"


class SingleUseToken(SQLModel):
    """Shared shape of the activation, password-reset and deletion tokens."""

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=128)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    consumed_at: Optional[datetime] = Field(default=None)


class ActivationToken(SingleUseToken, table=True):
    __tablename__ = "activation_token"


class PasswordResetToken(SingleUseToken, table=True):
    __tablename__ = "password_reset_token"


class DeletionToken(SingleUseToken, table=True):
    __tablename__ = "deletion_token"


TOKEN_MODELS = {
    TokenPurpose.ACTIVATE: ActivationToken,
    TokenPurpose.RESET_PASSWORD: PasswordResetToken,
    TokenPurpose.DELETE_ACCOUNT: DeletionToken,
}
