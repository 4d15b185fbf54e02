from __future__ import annotations

import os
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from supportchat.logging import get_logger

from .models import ChatBase


logger = get_logger(__name__)


def _sqlite_uri(db_path: str | Path) -> str:
    raw = str(db_path).strip()
    if raw.startswith("sqlite"):
        return raw
    path = Path(raw).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return "sqlite:///" + str(path)


def get_db_dir() -> Path:
    raw = (os.getenv("SUPPORTCHAT_DB_DIR") or "").strip()
    db_dir = Path(raw).expanduser() if raw else Path.home() / ".supportchat"
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir


def get_chat_db_uri(file: str | Path | None = None) -> str:
    """Return a SQLite URI string for the chat DB.

    Resolution order:
      1) explicit ``file`` argument
      2) env ``SUPPORTCHAT_DB_PATH``
      3) ``chat.sqlite`` inside :func:`get_db_dir`
    """

    if file is not None:
        return _sqlite_uri(file)

    env_path = (os.getenv("SUPPORTCHAT_DB_PATH") or "").strip()
    if env_path:
        return _sqlite_uri(env_path)

    return _sqlite_uri(get_db_dir() / "chat.sqlite")


def sqlite_engine(db_uri: str) -> Engine:
    engine = create_engine(
        db_uri,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    trace_sql = os.getenv("SUPPORTCHAT_SQL_TRACE")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if trace_sql:
            dbapi_connection.set_trace_callback(lambda x: logger.info(x))
        cursor.close()

    return engine


@lru_cache(maxsize=None)
def get_engine(db_uri: str) -> Engine:
    engine = sqlite_engine(db_uri)
    ChatBase.metadata.create_all(bind=engine)
    logger.info("Chat DB ready at %s", db_uri)
    return engine


@contextmanager
def get_chat_session(file_path: str | Path | None = None) -> Iterator[Session]:
    """Context-managed SQLAlchemy session for the chat DB."""

    engine = get_engine(get_chat_db_uri(file_path))
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

