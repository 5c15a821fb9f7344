from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
import logging
import redis
from .config import settings
from .exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)

def _build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    # PostgreSQL with appropriate connection pool settings
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
        pool_pre_ping=True,
    )

engine = _build_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Redis setup - in-process counter for testing
if settings.TESTING:
    class RedisMock:
        def __init__(self):
            self.data = {}

        def setex(self, key, time, value):
            self.data[key] = str(value)
            return True

        def get(self, key):
            return self.data.get(key)

        def incr(self, key):
            self.data[key] = str(int(self.data.get(key, 0)) + 1)
            return int(self.data[key])

        def flushall(self):
            self.data.clear()
            return True

    redis_client = RedisMock()
else:
    # Real Redis client for production
    redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

class DatabaseHealthCheck:
    """Per-request store reachability check, attached to routers at startup."""

    def __init__(self, bind):
        self.bind = bind

    def is_healthy(self) -> bool:
        try:
            with self.bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    def __call__(self) -> None:
        if not self.is_healthy():
            raise ServiceUnavailableError(
                "Database connection error. Please make sure the database is running."
            )

# Database initialization
def init_db():
    """Initialize database tables."""
    # Register models on the metadata
    from .. import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
