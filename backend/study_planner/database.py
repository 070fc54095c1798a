"""Database engine and helpers.

This module builds the single SQLModel/SQLAlchemy engine (and with it
the connection pool) from `DATABASE_URL`. The engine lives for the whole
process; request handlers borrow a `Session` through `get_session`.
"""

import logging

from sqlmodel import SQLModel, create_engine, Session

from .config import settings

logger = logging.getLogger("study_planner.db")


def _connect_args(url: str) -> dict:
    # sqlite connections are shared across the threadpool FastAPI runs sync handlers in
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    connect_args=_connect_args(settings.DATABASE_URL),
)


def create_db_and_tables():
    """Create any missing tables from the SQLModel metadata.

    Existing tables are left as they are; there is no column migration.
    """
    # models must be imported so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("database schema ready (%s)", engine.url.render_as_string(hide_password=True))


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
