"""Database connection and session management"""
import logging
from typing import AsyncGenerator, Optional
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from config import get_settings
from domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# Errors that mean the store could not be reached, not that the query was wrong
STORE_ERRORS = (OperationalError, InterfaceError, OSError)

# Lazy initialization - engine created on first use
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[sessionmaker] = None


def _get_database_url() -> str:
    """Get and normalize DATABASE_URL"""
    url = get_settings().database_url

    if not url:
        raise RuntimeError(
            "DATABASE_URL environment variable is not set. "
            "Please configure it in your .env file."
        )

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def get_engine() -> AsyncEngine:
    """Get or create the async engine (lazy initialization)"""
    global _engine

    if _engine is None:
        url = _get_database_url()
        echo = get_settings().debug

        if url.startswith("postgresql+asyncpg://"):
            # SSL is required for Supabase connections
            # statement_cache_size=0 is required for pgbouncer/Supabase pooler
            connect_args = {
                "ssl": "require",
                "statement_cache_size": 0,
                "server_settings": {
                    "application_name": "control-visitantes"
                }
            }
            _engine = create_async_engine(
                url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                connect_args=connect_args,
            )
        else:
            # Local runs (e.g. sqlite+aiosqlite)
            _engine = create_async_engine(url, echo=echo)

    return _engine


def get_session_maker() -> sessionmaker:
    """Get or create the session maker (lazy initialization)"""
    global _async_session_maker

    if _async_session_maker is None:
        _async_session_maker = sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_session_maker


async def init_db() -> None:
    """Create tables if they do not exist (local/dev databases only)"""
    # Register every table on the metadata
    import domain.models  # noqa: F401

    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
    except STORE_ERRORS as e:
        logger.error(f"Failed to initialize database: {e}")
        raise StoreUnavailableError() from e
    logger.info("Database initialized successfully")


async def dispose_engine() -> None:
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_maker = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session"""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except STORE_ERRORS as e:
            await session.rollback()
            logger.error(f"Database unavailable: {e}")
            raise StoreUnavailableError() from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
