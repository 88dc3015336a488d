from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from envmonitor.config import settings


def _enable_wal(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; for file-backed SQLite make sure the data directory exists and use WAL."""
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        event.listen(engine, "connect", _enable_wal)
    return engine


class DatabaseEngine:
    _engine: Engine = None

    @classmethod
    def get_engine(cls) -> Engine:
        if cls._engine is None:
            cls._engine = build_engine(settings.database_url, echo=settings.db_echo)
        return cls._engine

    @classmethod
    def reset_engine(cls):
        if cls._engine is not None:
            cls._engine.dispose()
        cls._engine = None


def get_engine() -> Engine:
    return DatabaseEngine.get_engine()
