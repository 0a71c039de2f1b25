"""Engine and session lifecycle.

A ``Database`` is opened once when the application starts and disposed at
shutdown; request handlers receive sessions through ``app.core.deps.get_db``.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    def open(self) -> "Database":
        if self.engine is not None:
            return self
        kwargs: dict = {"echo": self.echo, "future": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite+pysqlite://"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self.engine = create_engine(self.url, **kwargs)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._sessionmaker = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        logger.info("Database opened (%s)", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        logger.info("Database closed")
        self.engine = None
        self._sessionmaker = None

    def create_all(self) -> None:
        from app.models import application, course, email_template  # noqa: F401
        Base.metadata.create_all(self.engine)

    def new_session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        return self._sessionmaker()

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.new_session()
        try:
            yield db
        finally:
            db.close()
