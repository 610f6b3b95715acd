"""
Repositories Module

Data access for words, libraries and sound change presets.
"""

from .word_repository import WordRepository
from .preset_repository import DatabasePresetStore

__all__ = [
    "WordRepository",
    "DatabasePresetStore",
]
