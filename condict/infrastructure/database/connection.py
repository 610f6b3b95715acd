"""
Database Connection Manager

Owns the SQLite engine, hands out sessions and wraps work in transactions.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

DATABASE_URL_ENV_VAR = "CONDICT_DATABASE_URL"
MEMORY_URL = "sqlite:///:memory:"

# Columns added to ``words`` after the first release, as (name, DDL)
WORD_COLUMN_UPGRADES = [
    ("location_tags", "location_tags JSON NOT NULL DEFAULT '[]'"),
    ("is_pinned", "is_pinned BOOLEAN NOT NULL DEFAULT 0"),
    ("inflection_data", "inflection_data TEXT NOT NULL DEFAULT '{}'"),
    ("parent_word_id", "parent_word_id INTEGER REFERENCES words(id) ON DELETE SET NULL"),
]


class DatabaseManager:
    """
    SQLite access for the dictionary.

    Features:
    - File or in-memory databases
    - WAL journal and enforced foreign keys on file databases
    - Table creation and additive column upgrades on first use
    - ``session_scope()`` commit/rollback context manager
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        db_url: str | None = None,
    ):
        """
        Args:
            db_path: SQLite file, or ":memory:"
            db_url: ``sqlite://`` URL; takes precedence over db_path
        """
        self.db_url, self.db_path = self._resolve_target(db_path, db_url)

        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._initialized = False

    @staticmethod
    def _resolve_target(
        db_path: str | Path | None,
        db_url: str | None,
    ) -> tuple[str, Optional[Path]]:
        url = (db_url or "").strip()
        if url:
            if not url.startswith("sqlite://"):
                raise ValueError(f"Only sqlite:// URLs are supported, got {url}")
            database = make_url(url).database
            if not database or database == ":memory:":
                return url, None
            return url, Path(database)

        if db_path is None:
            raise ValueError("Either db_path or db_url is required")
        if str(db_path).strip() == ":memory:":
            return MEMORY_URL, None

        path = Path(db_path)
        return f"sqlite:///{path}", path

    @property
    def in_memory(self) -> bool:
        return self.db_path is None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._create_engine()
        return self._engine

    def _create_engine(self) -> None:
        connect_args = {"check_same_thread": False, "timeout": 30}

        if self.in_memory:
            # Every pooled connection would otherwise open its own empty database
            engine = create_engine(self.db_url, connect_args=connect_args, poolclass=StaticPool)
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(self.db_url, connect_args=connect_args, pool_pre_ping=True)

        in_memory = self.in_memory

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Database engine created: %s", self.db_path or self.db_url)

    def init_db(self) -> None:
        """Create missing tables and columns. Safe to call repeatedly."""
        if self._initialized:
            return

        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database is not reachable: %s", e)
            raise

        Base.metadata.create_all(self.engine)
        self._upgrade_schema()
        self._initialized = True
        logger.info("Database tables initialized")

    def _upgrade_schema(self) -> None:
        """Add word columns missing from databases created by older releases."""
        with self.engine.begin() as conn:
            existing = {row[1] for row in conn.execute(text("PRAGMA table_info(words)"))}
            for name, ddl in WORD_COLUMN_UPGRADES:
                if name not in existing:
                    conn.execute(text(f"ALTER TABLE words ADD COLUMN {ddl}"))
                    logger.info("Added column words.%s", name)

    def get_session(self) -> Session:
        """Open a new session; the caller owns commit and close."""
        if self._session_factory is None:
            self._create_engine()
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Run a block in one transaction.

        Commits when the block finishes, rolls back and re-raises when it
        raises.

        Usage:
            with db_manager.session_scope() as session:
                session.add(word)
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose of the engine. The manager can be reused afterwards."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._initialized = False
            logger.info("Database connection closed")


def _runtime_database_target() -> tuple[str, Optional[Path]]:
    """
    Pick the application database.

    Order: ``database.url`` setting, then the CONDICT_DATABASE_URL
    environment variable, then ``<data>/database/<sqlite_filename>``.
    """
    from condict.core.config import AppConfig
    from condict.runtime.runtime_config import get_runtime_config

    configured_url = str(AppConfig.get("database.url", "") or "").strip()
    if configured_url:
        return configured_url, None

    env_url = (os.environ.get(DATABASE_URL_ENV_VAR) or "").strip()
    if env_url:
        return env_url, None

    filename = str(AppConfig.get("database.sqlite_filename", "") or "").strip() or "condict.db"
    return "", get_runtime_config().paths.database_dir / filename


_db_manager: Optional[DatabaseManager] = None
_db_lock = threading.Lock()


def get_db_manager() -> DatabaseManager:
    """Get the application database manager, creating it on first use."""
    global _db_manager

    if _db_manager is None:
        with _db_lock:
            if _db_manager is None:
                url, path = _runtime_database_target()
                manager = DatabaseManager(path, db_url=url or None)
                manager.init_db()
                _db_manager = manager

    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    """Install a database manager; None makes the next access re-resolve it."""
    global _db_manager
    with _db_lock:
        _db_manager = manager


def get_session() -> Session:
    return get_db_manager().get_session()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """``DatabaseManager.session_scope`` on the application database."""
    with get_db_manager().session_scope() as session:
        yield session
