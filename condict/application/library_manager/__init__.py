"""
Library Manager Module

JSON import and export of the word corpus.
"""

from .exporter import (
    IMPORT_LIBRARY_NAME,
    ImportResult,
    export_words,
    import_words,
    word_to_export,
)

__all__ = [
    "IMPORT_LIBRARY_NAME",
    "ImportResult",
    "export_words",
    "import_words",
    "word_to_export",
]
