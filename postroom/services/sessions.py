"""
Session issuer: signed bearer credentials asserting a user id.

Sessions are HS256 JWTs carrying ``{"id": <user id>}`` plus ``iat``/``exp``.
The signing secret is read from settings once, when the issuer is built,
and never changes afterwards. Rotating ``SECRET_KEY`` and restarting
invalidates every outstanding session.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..core.clock import Clock, utcnow
from ..core.config import Settings, settings as default_settings
from ..core.errors import InvalidCredentials, SessionInvalid
from ..core.identity import IdentityVerifier
from ..core.security import JWTError, decode_jwt_token, encode_jwt_token, verify_password
from ..core.store import Store
from ..models import AccountProvider, User

logger = logging.getLogger(__name__)


class SessionIssuer:
    def __init__(self, settings: Settings = default_settings, clock: Clock = utcnow):
        self._secret = settings.SECRET_KEY
        self._algorithm = settings.JWT_ALGORITHM
        self._lifetime = timedelta(days=settings.SESSION_EXPIRE_DAYS)
        self.clock = clock

    def issue_session(self, user_id: int) -> str:
        now = self.clock()
        return encode_jwt_token(
            {"id": user_id},
            self._secret,
            self._algorithm,
            issued_at=now,
            expires_at=now + self._lifetime,
        )

    def verify_session(self, token: str) -> int:
        """Return the user id of a valid, unexpired session token."""
        try:
            claims = decode_jwt_token(token, self._secret, self._algorithm)
        except JWTError as e:
            raise SessionInvalid() from e

        user_id = claims.get("id")
        exp = claims.get("exp")
        if not isinstance(user_id, int) or not isinstance(exp, (int, float)):
            raise SessionInvalid()

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        if self.clock() >= expires_at:
            raise SessionInvalid("Session expired")
        return user_id

    def authenticate(self, store: Store, email: str, password: str) -> tuple[User, str]:
        """
        Check an email/password pair and return the user with a new session.

        Unknown emails, provider-created accounts and wrong passwords all
        raise ``InvalidCredentials``.
        """
        user = store.find_user_by_email(email)
        if user is None:
            raise InvalidCredentials()
        if user.provider != AccountProvider.DEFAULT or not user.hashed_password:
            logger.info(f"Password login refused for provider account {user.id}")
            raise InvalidCredentials("Account signed up using a provider")
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentials()
        return user, self.issue_session(user.id)

    async def authenticate_with_provider(
        self,
        store: Store,
        verifier: IdentityVerifier,
        provider_token: str,
        provider_name: str,
    ) -> tuple[User, str, bool]:
        """
        Log in with an OAuth access token, provisioning the account on first use.

        An existing unverified password account with the same email is taken
        over by the provider login: it becomes verified and loses its password,
        which can be set again through a password reset.

        Returns the user, a session token and whether the user was created.
        """
        provider = verifier.resolve_provider(provider_name)
        email = await verifier.verify(provider_name, provider_token)

        user: Optional[User] = store.find_user_by_email(email)
        created = False
        if user is None:
            user = store.create_user(User(email=email, provider=provider, is_email_verified=True))
            store.commit()
            store.refresh(user)
            created = True
            logger.info(f"Provisioned {provider.value} account {user.id}")
        elif not user.is_email_verified:
            # Whoever set this password never proved they own the address
            store.update_user(user, is_email_verified=True, hashed_password=None, updated_at=self.clock())
            store.commit()
            store.refresh(user)
            logger.info(f"Verified account {user.id} through {provider.value}, dropped its unverified password")

        return user, self.issue_session(user.id), created
