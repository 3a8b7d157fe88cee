"""Async PostgreSQL engine and sessions for the marketplace tables.

The engine and session maker are created lazily from Settings and shared
by the request dependencies, the lifespan hooks and the maintenance
scripts under ``scripts/``.
"""

import logging
import uuid
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel, select

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SEED_ADMIN_ID = uuid.UUID("3c5ff1b3-b0d6-4dba-b254-a2be667bbd52")

_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Return the shared engine, creating it on first use."""
    global _engine

    if _engine is None:
        settings = settings or get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        logger.info("Marketplace database engine created")

    return _engine


def get_session_maker(settings: Settings | None = None) -> async_sessionmaker[AsyncSession]:
    """Return the shared session maker bound to :func:`get_engine`."""
    global _async_session_maker

    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            get_engine(settings),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _async_session_maker


async def get_async_session(settings: Settings | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session, rolling back if the request fails with a database error.

    Example:
        ```python
        async for session in get_async_session(settings):
            repository = SqlTemplateRepository(session)
        ```
    """
    async with get_session_maker(settings)() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Rolling back session after database error: {e}", exc_info=True)
            await session.rollback()
            raise


async def create_all_tables(settings: Settings | None = None) -> None:
    """Create the users, templates and admin_actions tables if missing."""
    from app.db import models  # noqa: F401

    async with get_engine(settings).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info("Marketplace tables created")


async def drop_all_tables(settings: Settings | None = None) -> None:
    """Drop every marketplace table. All data is lost."""
    from app.db import models  # noqa: F401

    logger.warning("Dropping marketplace tables")

    async with get_engine(settings).begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def init_db(settings: Settings | None = None) -> None:
    """Create tables and seed a moderation account when none exists.

    The seeded admin has an unusable password hash; set a real one before
    exposing the account.

    Args:
        settings: Optional settings. If None, uses global settings.
    """
    from app.db.models import User, UserRole

    settings = settings or get_settings()
    await create_all_tables(settings)

    async with get_session_maker(settings)() as session:
        result = await session.execute(select(User).where(User.role == UserRole.ADMIN).limit(1))
        if result.scalar_one_or_none() is not None:
            return

        admin = User(
            id=SEED_ADMIN_ID,
            email=settings.seed_admin_email,
            full_name="Marketplace Admin",
            hashed_password="!",
            role=UserRole.ADMIN,
        )
        session.add(admin)
        try:
            await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to seed admin account: {e}", exc_info=True)
            await session.rollback()
            raise

        logger.info(f"Seeded admin account {admin.id} <{admin.email}>")


async def close_db() -> None:
    """Dispose of the shared engine so the next call recreates it."""
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
        logger.info("Marketplace database engine disposed")
