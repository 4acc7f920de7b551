"""
Shared fixtures: in-memory database, fake mail transport and a controllable clock.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from postroom import models  # noqa: F401  registers tables
from postroom.core.config import Settings
from postroom.core.identity import IdentityVerifier
from postroom.core.security import get_password_hash
from postroom.core.store import Store
from postroom.models import AccountProvider, User
from postroom.services.sessions import SessionIssuer
from postroom.services.tokens import TokenManager

TEST_PASSWORD = "Secr3t!pass"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def verifier_returning(test_settings, status_code=200, payload=None, seen=None):
    """IdentityVerifier whose HTTP calls hit an in-process handler."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else {})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityVerifier(test_settings, client=client)


class FakeMailTransport:
    """Records every message instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append({"to": to_address, "subject": subject, "body": html_body})


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(engine):
    """Create a database session for testing."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(db_session):
    return Store(db_session)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def mail():
    return FakeMailTransport()


@pytest.fixture
def test_settings():
    return Settings(SECRET_KEY="test-secret-key", _env_file=None)


@pytest.fixture
def tokens(store, mail, clock):
    return TokenManager(store, mail, clock=clock)


@pytest.fixture
def sessions(test_settings, clock):
    return SessionIssuer(test_settings, clock=clock)


@pytest.fixture
def make_user(db_session):
    """Factory for committed users. Uses a cheap bcrypt cost to keep tests fast."""

    def _make_user(email, username=None, password=TEST_PASSWORD, provider=AccountProvider.DEFAULT, **fields):
        user = User(
            email=email,
            username=username,
            hashed_password=get_password_hash(password, rounds=4) if password else None,
            provider=provider,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user
