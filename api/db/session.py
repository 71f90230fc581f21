"""
api/db/session.py – Engine factory + Session helper.

One Engine per database URL, cached for the lifetime of the process.
`db_session` is a contextmanager that commits, rolls back and closes for you.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base


# ── Engine cache (1 engine / URL) ─────────────────────────────────────────────

_engines: dict[str, Engine] = {}
_session_factories: dict[str, sessionmaker] = {}


def _get_engine(database_url: str) -> Engine:
    if database_url not in _engines:
        if database_url.startswith("sqlite"):
            engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                echo=False,
            )

            # WAL keeps concurrent reads cheap while sync writes
            @event.listens_for(engine, "connect")
            def set_wal(conn, _):
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
        else:
            engine = create_engine(database_url, pool_pre_ping=True, pool_size=10, max_overflow=20)

        _engines[database_url] = engine
        _session_factories[database_url] = sessionmaker(bind=engine, expire_on_commit=False)
    return _engines[database_url]


def get_session_factory(database_url: str) -> sessionmaker:
    _get_engine(database_url)
    return _session_factories[database_url]


def init_db(database_url: str) -> None:
    """Create any missing tables (and the SQLite file's folder)."""
    url = make_url(database_url)
    if url.drivername.startswith("sqlite") and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=_get_engine(database_url))


@contextmanager
def db_session(database_url: str) -> Generator[Session, None, None]:
    """Context manager returning a Session; commits, rolls back and closes automatically."""
    factory = get_session_factory(database_url)
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
