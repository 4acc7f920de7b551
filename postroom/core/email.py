import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from jinja2 import Template

from .config import Settings, settings as default_settings
from ..models.token import TokenPurpose

logger = logging.getLogger(__name__)


def build_connection_config(settings: Settings = default_settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USER,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM or settings.MAIL_USER,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_HOST,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_STARTTLS=settings.MAIL_SECURE,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


class MailTransport:
    """Sends HTML email through SMTP. Any failure propagates to the caller."""

    def __init__(self, config: Optional[ConnectionConfig] = None):
        self._fastmail = FastMail(config or build_connection_config())

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to_address],
            body=html_body,
            subtype=MessageType.html,
        )
        await self._fastmail.send_message(message)
        logger.info(f"Email '{subject}' sent to {to_address}")


TOKEN_EMAIL_TEMPLATE = """
<div>
    <h1 style="font-size: 24px; font-weight: 600; margin-bottom: 1rem;">{{ heading }}</h1>
    <a href="{{ link }}" target="_blank"
       style="background-color: {{ color }}; font-size: 14px; color: #ffffff; font-weight: 600;
              border-radius: 0.5rem; padding: 0.75rem; text-decoration: none;">
        {{ button }}
    </a>
    {% if warning %}
    <h2 style="color: {{ color }}; font-size: 24px; margin-top: 1rem;">{{ warning }}</h2>
    {% endif %}
    <div style="margin-top: 5rem;">
        <p style="font-size: 14px;">If you can't see the button, use this link instead:</p>
        <a href="{{ link }}" target="_blank" style="color: #0072dd;">{{ link }}</a>
    </div>
    <p style="margin-top: 1rem;">This link will expire in {{ ttl_hours }} hours.</p>
</div>
"""


@dataclass(frozen=True)
class TokenEmail:
    subject: str
    heading: str
    button: str
    path: str
    color: str = "#0072dd"
    warning: str = ""


TOKEN_EMAILS: Dict[TokenPurpose, TokenEmail] = {
    TokenPurpose.ACTIVATE: TokenEmail(
        subject="Verify your Post Room account email",
        heading="Verify your email to start using Post Room",
        button="Verify Your Email",
        path="activate",
    ),
    TokenPurpose.RESET_PASSWORD: TokenEmail(
        subject="Password reset request for Post Room account",
        heading="Reset your Post Room password",
        button="Reset Your Password",
        path="reset-password",
    ),
    TokenPurpose.DELETE_ACCOUNT: TokenEmail(
        subject="Account delete confirmation for Post Room account",
        heading="Delete your Post Room account",
        button="Delete Your Account",
        path="delete-account",
        color="#ff2020",
        warning="Warning: this action is irreversible!",
    ),
}


def token_link(purpose: TokenPurpose, link_base: str, token: str) -> str:
    return f"{link_base.rstrip('/')}/{TOKEN_EMAILS[purpose].path}/{token}"


def render_token_email(purpose: TokenPurpose, link: str, ttl_hours: int) -> str:
    email = TOKEN_EMAILS[purpose]
    return Template(TOKEN_EMAIL_TEMPLATE).render(
        heading=email.heading,
        button=email.button,
        color=email.color,
        warning=email.warning,
        link=link,
        ttl_hours=ttl_hours,
    )
