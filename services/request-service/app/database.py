"""
Database configuration and connection management.

The engine is built explicitly by the application lifespan and handed to
repositories through a session factory; nothing connects at import time.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings
from .models import Base

logger = logging.getLogger(__name__)


def _safe_url(db_url: str) -> str:
    """Strip credentials from a database URL for logging."""
    if "@" in db_url and "://" in db_url:
        scheme, rest = db_url.split("://", 1)
        return f"{scheme}://***@{rest.split('@', 1)[1]}"
    return db_url


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if "sqlite" in db_url:
        return {"check_same_thread": False}
    return {}


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy drive transactions on pysqlite.

    pysqlite's implicit BEGIN handling breaks SAVEPOINT, which batch
    writes rely on for per-item isolation.
    """

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for ``settings.DATABASE_URL``.

    SQLite gets a single shared connection so in-memory databases
    survive across sessions; other backends get a sized pool.

    Args:
        settings: Service settings

    Returns:
        Configured engine
    """
    db_url = settings.DATABASE_URL
    logger.info(f"Using database: {_safe_url(db_url)}")

    if db_url.startswith("sqlite"):
        engine = create_engine(
            db_url,
            connect_args=get_connect_args(db_url),
            poolclass=StaticPool,
            echo=False,
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        db_url,
        connect_args=get_connect_args(db_url),
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@retry(
    retry=retry_if_exception_type(OperationalError),
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    reraise=True,
)
def _create_tables(engine: Engine) -> None:
    """Create tables, retrying while the database is still starting up."""
    Base.metadata.create_all(bind=engine, checkfirst=True)


def init_db(engine: Engine) -> None:
    """
    Initialize database tables.

    Creates all tables on application startup.
    Uses checkfirst=True to safely handle existing tables.
    """
    try:
        logger.info("Initializing database tables...")
        _create_tables(engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        error_msg = str(e).lower()
        if "already exists" in error_msg or "duplicate" in error_msg:
            logger.warning("Database objects already exist (expected)")
        else:
            logger.error(f"Failed to initialize database: {e}")
            raise


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Yield a session and always close it.

    Args:
        session_factory: Factory returned by ``create_session_factory``

    Yields:
        SQLAlchemy database session
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
