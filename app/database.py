"""
Database connection and session management.
Handles the SQLAlchemy async engine and the default template seed.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator
import logging

from app.config import settings

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    future=True,
    pool_pre_ping=True,
    poolclass=NullPool,  # Use NullPool for better async compatibility
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for ORM models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. Handlers only flush; the commit happens here once
    the handler returns, so a raised HTTPException rolls back every write.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            await session.close()


async def seed_default_templates(session: AsyncSession) -> int:
    """
    Insert the public brand voice templates when none exist yet.

    Returns:
        Number of templates inserted (0 when the table already has rows).
    """
    from app.models.database_models import BrandVoiceTemplate, DEFAULT_TEMPLATES

    existing = await session.execute(select(func.count(BrandVoiceTemplate.id)))
    if existing.scalar():
        return 0

    for spec in DEFAULT_TEMPLATES:
        session.add(BrandVoiceTemplate(is_public=True, **spec))
    await session.flush()
    return len(DEFAULT_TEMPLATES)


async def init_db() -> None:
    """
    Initialize database tables.
    Creates all tables defined in Base metadata and seeds default templates.
    """
    try:
        async with engine.begin() as conn:
            # Import all models to ensure they're registered
            from app.models import database_models  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created/verified")

        if settings.SEED_DEFAULT_TEMPLATES:
            async with AsyncSessionLocal() as session:
                inserted = await seed_default_templates(session)
                await session.commit()
            if inserted:
                logger.info("Seeded %d default brand voice templates", inserted)

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


async def close_db() -> None:
    """Close database connections gracefully."""
    try:
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}")
        raise
