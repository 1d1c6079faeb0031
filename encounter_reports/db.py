from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from . import config


DATABASE_URL = config.DATABASE_URL


class Base(DeclarativeBase):
    pass


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options: dict = {"connect_args": {"check_same_thread": False}}
        # One shared connection, otherwise every session sees its own empty in-memory DB
        if make_url(url).database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True}


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def get_session():
    session = SessionLocal()
    try:
        yield session
        session.close()
    except Exception:
        session.rollback()
        session.close()
        raise


def ensure_database_exists() -> None:
    """Create the target database if it does not exist.

    Only meaningful for PostgreSQL; connects to the default 'postgres'
    database and checks pg_database.
    """
    url = make_url(DATABASE_URL)
    if not url.drivername.startswith("postgresql"):
        return
    default_engine = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT", pool_pre_ping=True)
    with default_engine.connect() as conn:
        exists = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :name"), {"name": url.database}
        ).scalar()
        if not exists:
            conn.execute(text(f'CREATE DATABASE "{url.database}"'))
    default_engine.dispose()
