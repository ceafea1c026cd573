from typing import AsyncIterator
from fastapi import Request
from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from app.core.config import Settings
import structlog

logger = structlog.get_logger()


class Database:
    """Owns the async engine (connection pool) and the session factory."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            echo=settings.log_level.upper() == "DEBUG",
        )
        self.session_maker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        # Registers the products table on SQLModel.metadata
        from app.models import product  # noqa: F401

        logger.info(
            "Creating database tables",
            host=self.settings.db_host,
            port=self.settings.db_port,
            database=self.settings.db_name,
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def ping(self) -> None:
        """Lightweight liveness probe, raises when the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_async_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency for getting database session"""
    database = get_database(request)
    async with database.session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database session error", error_type=type(e).__name__, error=str(e))
            raise
