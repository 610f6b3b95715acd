"""
Database Infrastructure Module

Provides database models and connection management.
"""

from .models import (
    Base,
    Library,
    Folder,
    Word,
    SoundChangePreset,
)

from .connection import (
    DatabaseManager,
    get_db_manager,
    set_db_manager,
    get_session,
    session_scope,
)

__all__ = [
    # Models
    "Base",
    "Library",
    "Folder",
    "Word",
    "SoundChangePreset",
    # Connection
    "DatabaseManager",
    "get_db_manager",
    "set_db_manager",
    "get_session",
    "session_scope",
]
