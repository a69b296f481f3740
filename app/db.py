from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Generator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine


def _database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./panels.db")


def _create_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, pool_pre_ping=True)
    # An in-memory database only exists on the connection that created it.
    poolclass = StaticPool if ":memory:" in url else None
    return create_engine(url, echo=False, connect_args={"check_same_thread": False}, poolclass=poolclass)


DATABASE_URL = _database_url()
engine = _create_engine(DATABASE_URL)


def init_db(bind: Engine | None = None) -> None:
    """Create the server, panel and profile tables that are missing."""
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


def get_session() -> Generator[Session, None, None]:
    with session_scope() as session:
        yield session
