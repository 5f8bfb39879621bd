from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from database.connection import build_engine, normalize_database_url


def test_postgres_url_is_normalized():
    assert normalize_database_url("postgres://u:p@host/db") == "postgresql://u:p@host/db"
    assert normalize_database_url("postgresql://u:p@host/db") == "postgresql://u:p@host/db"
    assert normalize_database_url("sqlite:///./dutch_thrift.db") == "sqlite:///./dutch_thrift.db"


def test_in_memory_sqlite_shares_one_connection():
    engine = build_engine("sqlite://")
    assert isinstance(engine.pool, StaticPool)

    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE scratch (id INTEGER)"))
    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM scratch")).scalar() == 0
    engine.dispose()
