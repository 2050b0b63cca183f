import logging
from collections.abc import Generator

from sqlalchemy import text
from sqlmodel import Session, create_engine
from supabase import Client, create_client

from lvlai_api.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager"""

    def __init__(self):
        self._client: Client | None = None
        self._engine = None

    def get_client(self) -> Client:
        """Get Supabase client used for token verification"""
        if self._client is None:
            self._client = create_client(
                settings.supabase_url, settings.supabase_anon_key
            )
            logger.info("✅ Supabase client initialized")
        return self._client

    def get_engine(self):
        """Get SQLModel engine for database operations"""
        if self._engine is None:
            database_url = settings.database_url

            if database_url.startswith("sqlite"):
                self._engine = create_engine(
                    database_url,
                    echo=settings.debug,
                    connect_args={"check_same_thread": False},
                )
            else:
                self._engine = create_engine(
                    database_url,
                    echo=settings.debug,  # Show SQL queries in debug mode
                    pool_pre_ping=True,  # Enable connection health checks
                    pool_recycle=3600,  # Recycle connections after 1 hour
                    pool_size=5,
                    max_overflow=10,
                    pool_timeout=30,
                    connect_args={
                        "connect_timeout": 10,
                        "application_name": "LVLAI-API",
                    },
                )

            logger.info("✅ SQLModel engine initialized")
        return self._engine

    def get_session(self) -> Generator[Session, None, None]:
        """Get database session"""
        engine = self.get_engine()
        with Session(engine) as session:
            yield session

    async def health_check(self) -> bool:
        """Check database connection health"""
        try:
            with Session(self.get_engine()) as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"❌ Database health check failed: {e}")
            return False


# Global database instance
db = Database()


# Dependency for FastAPI
def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency to get database session"""
    yield from db.get_session()


# Alias for compatibility
get_session = get_db
