"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` (a local SQLite file by default) and provides the
session dependency used by the routes. SQLite connections get
`PRAGMA foreign_keys=ON` so that profile deletion cascades to the
student/lecturer rows that reference it.
"""

import sqlite3

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from .config import settings


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine for `url` with SQLite thread checks relaxed."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, **kwargs)


engine = build_engine(settings.DATABASE_URL)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_and_tables(bind: Engine = engine):
    """Create database tables using SQLModel metadata.

    Intended for local development and tests; there is no migration tool
    in this project, tables are created from the model metadata.
    """
    from . import models  # noqa: F401  registers the tables on the metadata

    SQLModel.metadata.create_all(bind)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
