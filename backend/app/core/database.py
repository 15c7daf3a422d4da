"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the database holding saved scenarios and the
  read-only marts (spend, orders, traffic, cohorts, customers).
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Own the shared declarative `Base` every ORM model registers on.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- No Alembic migrations — `init_db()` creates any missing tables at startup.
- Session is opened at the start of a request and closed after the response.

This module does NOT:
- Define ORM models (see app/models/*).
- Perform any business queries.
"""

from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------


def normalize_database_url(db_url: str) -> str:
    """
    Use the psycopg (v3) driver for bare postgresql:// URLs.

    Example:
        "postgresql://u:p@host/db" → "postgresql+psycopg://u:p@host/db"
    """
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        return db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across FastAPI's worker threads, so the
    same-thread check is disabled for them.
    """
    db_url = normalize_database_url(db_url)
    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,  # Ensures connections are valid before use
        connect_args=connect_args,
    )


# Only create engine if DATABASE_URL is provided (compute endpoints work without a DB)
engine: Optional[Engine]
if settings.DATABASE_URL:
    engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
else:
    engine = None
    SessionLocal = None


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables registered on `Base` (no-op for tables that exist).
    """
    # Register every ORM model on Base.metadata
    import app.models.growth_scenario  # noqa: F401
    import app.models.marts  # noqa: F401

    target = bind if bind is not None else engine
    if target is None:
        raise RuntimeError("Database is not configured. Please set DATABASE_URL.")
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ensured on %s", target.url.render_as_string(hide_password=True))


def check_database() -> bool:
    """
    Return True when the configured database answers a trivial query.
    """
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return False


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            ScenarioStore(db).list()

    Raises:
        RuntimeError: If database is not configured (DATABASE_URL is empty)
    """
    if SessionLocal is None:
        raise RuntimeError(
            "Database is not configured. Please set DATABASE_URL environment variable. "
            "The stateless compute endpoint works without a database; scenario and "
            "baseline endpoints do not."
        )

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
