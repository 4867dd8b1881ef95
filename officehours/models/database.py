"""
Database Configuration for Office Hours Queue
Async engine, session factory and schema bootstrap.
"""

from typing import AsyncGenerator, Optional

import structlog
from sqlalchemy import event, MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from officehours.config.settings import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

# Database metadata with naming convention for constraints
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s"
    }
)

# Create declarative base
Base = declarative_base(metadata=metadata)

# Global engine and session maker
engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


def get_database_url() -> str:
    """Get database URL with environment-specific configuration."""
    if settings.TESTING:
        return settings.TEST_DATABASE_URL or settings.DATABASE_URL
    return settings.DATABASE_URL


async def create_database_engine() -> AsyncEngine:
    """Create database engine with pooling suited to the backend."""
    database_url = get_database_url()
    
    engine_kwargs = {
        "url": database_url,
        "echo": settings.DEBUG and not settings.TESTING,
    }
    
    if "sqlite" not in database_url:
        # PostgreSQL configuration with connection pooling
        engine_kwargs.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        })
        
        logger.info(
            "Configuring PostgreSQL connection pool",
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            timeout=settings.DB_POOL_TIMEOUT
        )
    else:
        engine_kwargs.update({
            "poolclass": NullPool,
            "connect_args": {"check_same_thread": False}
        })
        
        logger.info("Configuring SQLite database")
    
    engine = create_async_engine(**engine_kwargs)
    
    if "sqlite" in database_url:
        # SQLite leaves foreign keys off unless asked per connection
        @event.listens_for(engine.sync_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    
    @event.listens_for(engine.sync_engine, "checkout")
    def on_checkout(dbapi_connection, connection_record, connection_proxy):
        logger.debug("Database connection checked out from pool")
    
    return engine


async def init_database() -> None:
    """
    Initialize database connection and create tables.
    
    This function should be called during application startup.
    """
    global engine, async_session_maker
    
    try:
        logger.info("Initializing database connection")
        
        engine = await create_database_engine()
        
        async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        
        async with engine.begin() as conn:
            # Import all models to ensure they're registered
            from officehours.models import user, course, queue, question  # noqa: F401
            
            await conn.run_sync(Base.metadata.create_all)
            
            logger.info("Database tables created successfully")
        
        logger.info("Database initialization completed")
        
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise


async def close_database() -> None:
    """
    Close database connections gracefully.
    
    This function should be called during application shutdown.
    """
    global engine, async_session_maker
    
    if engine:
        logger.info("Closing database connections")
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connections closed")


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session with proper error handling.
    
    Yields:
        AsyncSession: Database session
        
    Raises:
        RuntimeError: If database is not initialized
    """
    if not async_session_maker:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", error=str(e))
            raise


async def get_db_health() -> dict:
    """
    Check database health for monitoring.
    
    Returns:
        dict: Health status information
    """
    if not engine:
        return {
            "status": "unhealthy",
            "error": "Database not initialized"
        }
    
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        
        database_url = get_database_url()
        return {
            "status": "healthy",
            "database_url": database_url.split("@")[-1] if "@" in database_url else "sqlite"
        }
        
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
