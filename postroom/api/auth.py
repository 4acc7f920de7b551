from fastapi import APIRouter, Depends, Response, status

from ..core.deps import (
    get_identity_verifier,
    get_link_base,
    get_session_issuer,
    get_store,
    get_token_manager,
)
from ..core.identity import IdentityVerifier
from ..core.store import Store
from ..schemas.auth import (
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    ProviderLogin,
    UserLogin,
    UserRegister,
)
from ..schemas.user import UserResponse
from ..services import accounts
from ..services.sessions import SessionIssuer
from ..services.tokens import TokenManager

router = APIRouter()


def _set_session_header(response: Response, session_token: str) -> None:
    response.headers["Authorization"] = f"Bearer {session_token}"


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    response: Response,
    store: Store = Depends(get_store),
    tokens: TokenManager = Depends(get_token_manager),
    sessions: SessionIssuer = Depends(get_session_issuer),
    link_base: str = Depends(get_link_base),
):
    """Register a new user and send the activation email."""
    user, session_token = await accounts.register(
        store, tokens, sessions, user_data.email, user_data.password, link_base
    )
    _set_session_header(response, session_token)
    return user


@router.post("/register/oauth", response_model=UserResponse)
async def login_with_provider(
    login_data: ProviderLogin,
    response: Response,
    store: Store = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
):
    """Log in with an OAuth provider, creating the account on first use."""
    user, session_token, created = await sessions.authenticate_with_provider(
        store, verifier, login_data.token, login_data.provider
    )
    _set_session_header(response, session_token)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    user_data: UserLogin,
    response: Response,
    store: Store = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
):
    """Login user and return the session token in the Authorization header."""
    user, session_token = sessions.authenticate(store, user_data.email, user_data.password)
    _set_session_header(response, session_token)
    return user


@router.post("/activate/{token}", response_model=UserResponse)
async def activate(
    token: str,
    store: Store = Depends(get_store),
    tokens: TokenManager = Depends(get_token_manager),
):
    """Verify user email with token."""
    return accounts.activate(store, tokens, token)


@router.post("/user/reset-password", response_model=MessageResponse)
async def request_password_reset(
    request_data: PasswordResetRequest,
    store: Store = Depends(get_store),
    tokens: TokenManager = Depends(get_token_manager),
    link_base: str = Depends(get_link_base),
):
    await accounts.request_password_reset(store, tokens, request_data.email, link_base)
    return MessageResponse(message="Password reset link sent to email")


@router.post("/user/reset-password/{token}", response_model=UserResponse)
async def reset_password(
    token: str,
    request_data: PasswordResetConfirm,
    store: Store = Depends(get_store),
    tokens: TokenManager = Depends(get_token_manager),
):
    return accounts.reset_password(store, tokens, token, request_data.password)
