"""
Database configuration and session management
"""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi import Request
from typing import Generator, Optional
import logging
from datetime import datetime, timezone

from photofeed.core.exceptions import Internal

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


class Database:
    """
    Explicitly constructed handle around the engine and session factory.

    Created once by the application factory, stored on ``app.state.database``
    and disposed on shutdown.
    """

    def __init__(self, database_url: str, echo: bool = False):
        if not database_url:
            raise ValueError("DATABASE_URL is not configured")

        self.url = database_url
        self.engine = self._create_engine(database_url, echo)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )
        logger.info("Database engine created for %s", self.engine.url.render_as_string(hide_password=True))

    @staticmethod
    def _create_engine(database_url: str, echo: bool) -> Engine:
        if database_url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            # In-memory databases live and die with a single connection
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                options["poolclass"] = StaticPool
            return create_engine(database_url, echo=echo, **options)

        return create_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,  # Recycle connections after 30 min
            echo=echo,
        )

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self):
        """Create tables if needed"""
        # Register every model on Base.metadata
        import photofeed.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables initialized")

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self):
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Optional[Database]:
    return getattr(request.app.state, "database", None)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get a request-scoped database session.

    Example:
        @router.get("/post")
        async def feed(db: Session = Depends(get_db)):
            ...
    """
    database = get_database(request)
    if database is None:
        raise Internal("Database connection not established")

    db = database.session()
    try:
        yield db
    except Exception as e:
        logger.debug("Rolling back database session: %s", e)
        db.rollback()
        raise
    finally:
        db.close()


def require_db(db: Optional[Session]) -> Session:
    """Guard used at the top of every service call."""
    if db is None:
        raise Internal("Database connection not established")
    return db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
