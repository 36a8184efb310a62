"""Async engine and session factory shared by the store and fastapi-users."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from memoraize.core.config import settings
from memoraize.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# Postgres/asyncpg unless DATABASE_URL points elsewhere
engine = create_async_engine(
    settings.postgres.connection_string,
    echo=settings.app.is_testing,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Request-scoped session for the user database; commits on success."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"User DB session rolled back: {e}")
            raise
