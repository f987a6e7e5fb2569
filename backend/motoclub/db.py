from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker

from motoclub.config import database_url


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync routes in a threadpool.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


ENGINE = create_engine(database_url(), future=True, **_engine_kwargs(database_url()))
SessionLocal = sessionmaker(bind=ENGINE, class_=Session, expire_on_commit=False, autoflush=False, autocommit=False)


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE clauses unless the pragma is set per connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


enable_sqlite_foreign_keys(ENGINE)


@contextmanager
def session_scope(factory=SessionLocal):
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def dialect_insert(db: Session, entity):
    """INSERT supporting ON CONFLICT for the bound dialect (PostgreSQL / SQLite)."""
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return pg_insert(entity)
    if name == "sqlite":
        return sqlite_insert(entity)
    raise RuntimeError(f"Upsert is not supported for dialect {name!r}")
