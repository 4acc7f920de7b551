from pydantic import BaseModel, EmailStr


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr
    password: str


class ProviderLogin(BaseModel):
    """OAuth login request: the provider's access token and the provider name."""

    token: str
    provider: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    password: str


class MessageResponse(BaseModel):
    message: str
