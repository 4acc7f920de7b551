from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .config import settings
from .database import get_db
from .email import MailTransport
from .errors import SessionInvalid
from .identity import IdentityVerifier
from .store import Store
from ..models.user import User
from ..services.sessions import SessionIssuer
from ..services.tokens import TokenManager

security = HTTPBearer(auto_error=False)


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)


@lru_cache(maxsize=1)
def get_session_issuer() -> SessionIssuer:
    """One issuer per process; its secret is fixed at startup."""
    return SessionIssuer(settings)


@lru_cache(maxsize=1)
def get_mail_transport() -> MailTransport:
    return MailTransport()


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(settings)


def get_token_manager(
    store: Store = Depends(get_store),
    mail: MailTransport = Depends(get_mail_transport),
) -> TokenManager:
    return TokenManager(store, mail)


def get_link_base(request: Request) -> str:
    """
    Email links point back at the frontend that made the request when it is
    one of the allowed CORS origins; any other Origin gets ``FRONTEND_URL``.
    """
    origin = (request.headers.get("origin") or "").rstrip("/")
    allowed = {allowed_origin.rstrip("/") for allowed_origin in settings.CORS_ORIGINS}
    if origin and origin in allowed:
        return origin
    return settings.FRONTEND_URL


def get_current_user(
    store: Store = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Get the current authenticated user."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = sessions.verify_session(credentials.credentials)

    user = store.find_user_by_id(user_id)
    if user is None:
        raise SessionInvalid("User not found")

    return user


def get_optional_user(
    store: Store = Depends(get_store),
    sessions: SessionIssuer = Depends(get_session_issuer),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """The signed-in user, or None for anonymous readers. A bad token is still rejected."""
    if credentials is None:
        return None
    return get_current_user(store, sessions, credentials)
