"""
Database engine and per-request sessions (SQLAlchemy)

PostgreSQL through psycopg in production; a SQLite URL is accepted for local
runs of the seed script and the API.
"""
import re

import psycopg
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from groupbudget.config import get_settings


class Base(DeclarativeBase):
    """Declarative base of the budget tables"""
    pass


_engine: Engine | None = None
_SessionLocal = None


def build_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo, pool_pre_ping=True)


def get_engine() -> Engine:
    """Engine for DATABASE_URL, created once per process"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.get_sqlalchemy_url(), echo=settings.DEBUG)
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Session:
    """
    FastAPI dependency: one session per request, closed afterwards.
    Routers commit explicitly after a successful write.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def psycopg_conninfo(url: str) -> str:
    """Strip a SQLAlchemy driver suffix (postgresql+psycopg://) so libpq accepts the URL"""
    return re.sub(r"^postgresql\+\w+://", "postgresql://", url)


def check_db_connection() -> None:
    """
    Readiness check: run SELECT 1 against the configured database

    Raises:
        psycopg.OperationalError: if PostgreSQL is unreachable
    """
    settings = get_settings()
    if not settings.DATABASE_URL.startswith("postgresql"):
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return

    with psycopg.connect(psycopg_conninfo(settings.DATABASE_URL), connect_timeout=3) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")
            cur.fetchone()
