from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import logging
from fastapi import HTTPException

from .config import settings

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True
)
def create_database_engine(url: str = settings.DATABASE_URL) -> Engine:
    """Create database engine with retry logic."""
    logger.info(f"Attempting to connect to database: {url.split('@')[1] if '@' in url else 'hidden'}")

    kwargs = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(pool_recycle=300, pool_size=10, max_overflow=20)

    engine = create_engine(url, **kwargs)

    # Test the connection
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        logger.info("Database connection successful!")

    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine | None:
    """Process-wide engine, created on first use. None when the database is unreachable."""
    try:
        return create_database_engine()
    except Exception as e:
        logger.error(f"Failed to create database engine after retries: {e}")
        return None


def create_tables(engine: Engine) -> None:
    # Importing the package registers every table with SQLModel metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_db() -> Iterator[Session]:
    """Get database session."""
    engine = get_engine()
    if engine is None:
        raise HTTPException(
            status_code=503,
            detail="Database is temporarily unavailable. Please try again later."
        )

    with Session(engine) as session:
        yield session
