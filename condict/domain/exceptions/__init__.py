"""
Domain Exceptions Module

Contains domain-specific exceptions:
- InvalidPatternError: A rule's find pattern does not compile
- RuleIndexError: Editor operation on a nonexistent rule slot
- PresetNotFoundError: No preset with the given name
- DuplicatePresetError: A preset with the given name already exists
- InvalidPresetError: Preset cannot be built from the given input
- WordNotFoundError: Word not found in the corpus
- WordImportError: Word exchange file could not be read
"""

from __future__ import annotations

from typing import Optional


class ConDictError(Exception):
    """Base class for all ConDict errors."""


class InvalidPatternError(ConDictError):
    """
    A rule's find pattern failed to compile.

    The engine never raises this to its callers; it is the per-rule outcome
    that gets folded into a skipped-rule diagnostic.
    """

    def __init__(self, pattern: str, message: str, index: Optional[int] = None):
        self.pattern = pattern
        self.index = index
        self.message = message
        where = f"rule {index}: " if index is not None else ""
        super().__init__(f"{where}invalid pattern {pattern!r}: {message}")


class RuleIndexError(ConDictError, IndexError):
    """Editor operation addressed a rule slot that does not exist."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"rule index {index} out of range (rule set has {size} rules)")


class PresetError(ConDictError):
    """Base class for preset store errors."""


class PresetNotFoundError(PresetError, KeyError):
    """No preset is stored under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"preset not found: {self.name!r}"


class DuplicatePresetError(PresetError):
    """A preset with this name already exists and overwrite was not requested."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"preset already exists: {name!r}")


class InvalidPresetError(PresetError, ValueError):
    """A preset could not be created from the supplied name or rules."""


class WordNotFoundError(ConDictError, LookupError):
    """No word with the given id exists in the corpus."""

    def __init__(self, word_id: int):
        self.word_id = word_id
        super().__init__(f"word not found: id={word_id}")


class WordImportError(ConDictError):
    """A word exchange file is missing, unreadable or malformed."""


__all__ = [
    "ConDictError",
    "InvalidPatternError",
    "RuleIndexError",
    "PresetError",
    "PresetNotFoundError",
    "DuplicatePresetError",
    "InvalidPresetError",
    "WordNotFoundError",
    "WordImportError",
]
