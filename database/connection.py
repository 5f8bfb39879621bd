"""
Database Connection
SQLite for development and tests, PostgreSQL in production
"""
from contextlib import contextmanager

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings

load_dotenv()

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def normalize_database_url(url: str) -> str:
    """Render/Supabase hand out postgres:// URLs, SQLAlchemy wants postgresql://"""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def build_engine(url: str) -> Engine:
    url = normalize_database_url(url)

    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in _MEMORY_URLS:
            # in-memory database lives on a single shared connection
            options["poolclass"] = StaticPool
        return create_engine(url, echo=False, **options)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


DATABASE_URL = normalize_database_url(get_settings().database_url)

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for scripts and startup hooks"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
