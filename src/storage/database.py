"""Engine and session factory for the pokedex store."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from configs.constants import Constants
from src.storage.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str = Constants.DATABASE_URL, echo: bool = False) -> Engine:
    """Create an engine; SQLite files get their parent directory and FK enforcement."""
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        # writes happen on storage worker threads, reads on request threads
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    if url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)
    logger.info(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # saved graphs are handed back to callers after commit, keep them loaded
    return sessionmaker(bind=engine, expire_on_commit=False)


__all__ = ["build_session_factory", "create_db_engine", "init_db"]
