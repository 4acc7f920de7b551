"""
Single-use token lifecycle for account activation, password reset and
account deletion.

A token is valid while it is unconsumed and no older than the configured
window (24 hours by default). Each purpose lives in its own table, so a
token issued for one purpose is never found when validating another.
"""

import logging
from datetime import timedelta

from ..core.clock import Clock, utcnow
from ..core.config import settings
from ..core.email import MailTransport, render_token_email, token_link, TOKEN_EMAILS
from ..core.errors import NotificationDeliveryFailed, TokenExpired, TokenNotFound
from ..core.security import generate_opaque_token
from ..core.store import Store
from ..models import SingleUseToken, TokenPurpose, User

logger = logging.getLogger(__name__)


class TokenManager:
    def __init__(
        self,
        store: Store,
        mail: MailTransport,
        clock: Clock = utcnow,
        ttl: timedelta = timedelta(hours=settings.TOKEN_TTL_HOURS),
    ):
        self.store = store
        self.mail = mail
        self.clock = clock
        self.ttl = ttl

    async def issue(self, user: User, purpose: TokenPurpose, link_base: str) -> str:
        """
        Create a token for ``user`` and email them a link containing it.

        Earlier unconsumed tokens of the same purpose are retired first, so a
        user holds at most one live token per purpose. The token is committed
        only after the email went out; if sending fails nothing is kept and
        ``NotificationDeliveryFailed`` is raised.
        """
        now = self.clock()
        retired = self.store.consume_outstanding_tokens(purpose, user.id, now)
        if retired:
            logger.info(f"Retired {retired} outstanding {purpose.value} token(s) for user {user.id}")

        value = generate_opaque_token()
        self.store.create_token(purpose, user.id, value, now)

        link = token_link(purpose, link_base, value)
        body = render_token_email(purpose, link, int(self.ttl.total_seconds() // 3600))
        try:
            await self.mail.send(user.email, TOKEN_EMAILS[purpose].subject, body)
        except Exception as e:
            self.store.rollback()
            logger.error(f"Failed to send {purpose.value} email to user {user.id}: {e}")
            raise NotificationDeliveryFailed(context={"purpose": purpose.value}) from e

        self.store.commit()
        logger.info(f"Issued {purpose.value} token for user {user.id}")
        return value

    def _lookup(self, token: str, purpose: TokenPurpose) -> SingleUseToken:
        record = self.store.find_token_by_value(purpose, token)
        if record is None:
            raise TokenNotFound(purpose.value)
        if record.consumed_at is not None or self.clock() - record.created_at > self.ttl:
            raise TokenExpired(purpose.value)
        return record

    def validate(self, token: str, purpose: TokenPurpose) -> int:
        """Return the user id bound to a live token. Does not consume it."""
        return self._lookup(token, purpose).user_id

    def consume(self, token: str, purpose: TokenPurpose) -> int:
        """
        Mark a live token as used and return its user id.

        The write is staged on the store; the caller commits it together
        with the change the token authorizes.
        """
        record = self._lookup(token, purpose)
        if not self.store.mark_token_consumed(purpose, record.id, self.clock()):
            raise TokenExpired(purpose.value)
        return record.user_id
