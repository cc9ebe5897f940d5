"""Database client for SQLite/PostgreSQL connections."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from case_content.config import settings
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Async database client for SQLAlchemy."""

    def __init__(self, database_url: str = None):
        """Initialize database engine and session factory.

        Args:
            database_url: Overrides ``settings.database_url``
        """
        self.database_url = database_url or settings.database_url

        # SQLite gets NullPool; other backends keep the default pool
        pool_class = NullPool if "sqlite" in self.database_url else None

        self.engine = create_async_engine(
            self.database_url,
            echo=settings.log_level == "DEBUG",
            poolclass=pool_class,
        )

        self.async_session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info(f"Database client initialized with URL: {self.database_url}")

    async def verify_connection(self):
        """Verify the database answers a trivial query."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def create_tables(self):
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def close(self):
        """Close database engine."""
        await self.engine.dispose()
        logger.info("Database client closed")


# Global database client instance
db_client = DatabaseClient()
