"""SQLAlchemy engine and session plumbing.

Everything that touches the database goes through the objects defined here:

* ``engine`` is created once per process from ``settings.database_url``
  (SQLite under ``DATA_DIR`` unless ``DATABASE_URL`` says otherwise).
* ``SessionLocal`` builds a short-lived session per request or CLI run.
* ``Base`` is the declarative parent of every model in ``ocie_helper.models``.
* :func:`get_db` is the FastAPI dependency; tests swap it through
  ``app.dependency_overrides`` to point at an in-memory database.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..core.config import settings

# SQLite connections are handed between FastAPI worker threads (handlers run in
# the threadpool), so the same-thread check must be off. Other drivers reject
# the argument, hence the conditional.
CONNECT_ARGS = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

# One pool per process.
engine = create_engine(settings.database_url, connect_args=CONNECT_ARGS)
# Explicit commits only; the gateway functions in ``crud`` decide when to flush.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Yield a session for one request and always close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
