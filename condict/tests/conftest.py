"""
Shared fixtures.

Every test runs against its own CONDICT_HOME under tmp_path, with the global
runtime, config and database singletons reset around it.
"""

from dataclasses import dataclass
from typing import Optional

import pytest

from condict.core.config import reset_config_manager
from condict.infrastructure.database import connection
from condict.infrastructure.database.connection import DatabaseManager, set_db_manager
from condict.runtime.bootstrap import reset_bootstrap
from condict.runtime.runtime_config import reset_runtime_config


def _reset_globals():
    if connection._db_manager is not None:
        connection._db_manager.close()
    reset_bootstrap()
    reset_runtime_config()
    reset_config_manager()
    set_db_manager(None)


@pytest.fixture(autouse=True)
def condict_home(tmp_path, monkeypatch):
    """Isolated application root."""
    home = tmp_path / "condict_home"
    monkeypatch.setenv("CONDICT_HOME", str(home))
    monkeypatch.delenv("CONDICT_DATABASE_URL", raising=False)
    _reset_globals()
    yield home
    _reset_globals()


@pytest.fixture
def db_manager():
    """In-memory database installed as the global manager."""
    manager = DatabaseManager(":memory:")
    manager.init_db()
    set_db_manager(manager)
    yield manager
    manager.close()
    set_db_manager(None)


@dataclass
class FakeWord:
    """Minimal term holder with a field the applier must leave alone."""

    term: str
    definition: str = ""
    id: Optional[int] = None
