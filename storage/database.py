"""SQLAlchemy engine and session factory for the local cache.

A single Database instance is created at startup and handed to every
component that touches the store.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from config import ApplicationConfig
from utils import create_contextual_logger

from .tables import Base


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


class Database:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.logger = create_contextual_logger(__name__, service="database")
        self.database_url = database_url
        self._ensure_parent_dir(database_url)

        self.engine: Engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def from_config(cls, config: ApplicationConfig) -> "Database":
        return cls(config.database_url, echo=config.database_echo)

    @staticmethod
    def _ensure_parent_dir(database_url: str) -> None:
        path: Optional[str] = make_url(database_url).database
        if path and path != ":memory:" and not path.startswith("file:"):
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    def create_schema(self) -> None:
        """Create all cache tables if they do not exist yet."""
        Base.metadata.create_all(self.engine)
        self.logger.info("Database schema ready", url=self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        """A plain session; the caller controls the transaction."""
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session wrapped in one transaction: commit on success, rollback on error."""
        with self._session_factory.begin() as session:
            yield session

    def dispose(self) -> None:
        self.engine.dispose()
        self.logger.info("Database engine disposed")
