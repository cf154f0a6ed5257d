"""Database connection and session management.

This module provides the SQLAlchemy engine, session factory, and the
request-scoped and context-managed sessions used by services.

Usage:
    from planet.db.database import get_db, get_db_session

    async def my_endpoint(db: Session = Depends(get_db)):
        node = db.get(Node, node_id)
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from planet.exceptions import ConflictError
from planet.settings import settings
from planet.utils import get_logger

logger = get_logger(__name__)


def _build_database_url() -> str:
    """Build database connection URL from settings.

    Supports both SQLite and MySQL based on settings.database_type.
    """
    url = settings.get_database_url_auto()

    # Convert mysql:// to mysql+pymysql:// if needed
    if url.startswith("mysql://"):
        url = url.replace("mysql://", "mysql+pymysql://", 1)

    return url


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine with the per-backend options this service relies on.

    SQLite connections get foreign keys switched on so ON DELETE CASCADE
    behaves as it does on MySQL. An in-memory SQLite database is pinned to a
    single shared connection, otherwise every checkout would see an empty
    database.
    """
    kwargs: dict = {"echo": echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            {
                "pool_size": settings.mysql_pool_size,
                "max_overflow": settings.mysql_max_overflow,
                "pool_pre_ping": settings.mysql_pool_pre_ping,
                "pool_recycle": 3600,  # Recycle connections after 1 hour
                "connect_args": {"connect_timeout": settings.mysql_connect_timeout},
            }
        )

    db_engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(db_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return db_engine


_database_url = _build_database_url()

if _database_url.startswith("sqlite"):
    logger.info(f"Using SQLite database: {_database_url}")
else:
    logger.info(f"Using MySQL database: {_database_url.split('@')[1] if '@' in _database_url else 'unknown'}")

engine: Engine = create_db_engine(
    _database_url,
    echo=settings.debug and settings.environment == "local-dev",
)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Get database session for dependency injection.

    Yields:
        Database session

    Example:
        @router.get("/nodes/{node_id}")
        async def read_node(node_id: str, db: Session = Depends(get_db)):
            return db.get(Node, node_id)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Get database session as context manager.

    Commits on success and rolls back on any exception.

    Usage:
        with get_db_session() as db:
            editing_service.start_session(db, user_id, planet_id)
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """Commit the work done in the block as one unit, or roll all of it back.

    Constraint violations surface as ConflictError; everything else is
    re-raised unchanged after the rollback.

    Usage:
        with transaction(db):
            node_backup_repository.record(db, ...)
            node_repository.insert_node(db, ...)
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Transaction rejected by a constraint: {e.orig}")
        raise ConflictError("The change conflicts with existing data") from e
    except Exception:
        db.rollback()
        raise


def check_connection() -> bool:
    """Check if database connection is working.

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


def init_db() -> None:
    """Initialize database (create tables if not exist).

    This function should be called during application startup.
    """
    from planet.db.models import Base

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def close_db() -> None:
    """Close database connections.

    This function should be called during application shutdown.
    """
    engine.dispose()
    logger.info("Database connections closed")
