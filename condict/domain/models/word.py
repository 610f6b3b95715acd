"""
Word Domain Model

Represents dictionary words and their exchange format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Translation:
    """A gloss of a word in a natural language."""

    language: str = "English"
    text: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"language": self.language, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Translation:
        return cls(
            language=data.get("language", "English"),
            text=data.get("text", ""),
        )


@dataclass
class Variation:
    """A regional or social variant of a word."""

    name: str = ""
    pronunciation: str = ""
    location: str = ""
    gender: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "pronunciation": self.pronunciation,
            "location": self.location,
            "gender": self.gender,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Variation:
        return cls(
            name=data.get("name", ""),
            pronunciation=data.get("pronunciation", ""),
            location=data.get("location", ""),
            gender=data.get("gender", ""),
        )


@dataclass
class WordExport:
    """
    Exchange record for one word.

    Keys use the camelCase names of the JSON exchange files, so files written
    by older ConDict releases import unchanged.
    """

    term: str = ""
    pronunciation: str = ""
    definition: str = ""
    part_of_speech: str = "Noun"
    example: str = ""
    notes: str = ""
    translations: List[Translation] = field(default_factory=list)
    variations: List[Variation] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    location_tags: List[str] = field(default_factory=list)
    is_pinned: bool = False
    folder_name: Optional[str] = None
    library_name: Optional[str] = None
    parent_word_term: Optional[str] = None
    inflection_data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "term": self.term,
            "pronunciation": self.pronunciation,
            "definition": self.definition,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
            "notes": self.notes,
            "translations": [t.to_dict() for t in self.translations],
            "variations": [v.to_dict() for v in self.variations],
            "tags": list(self.tags),
            "locationTags": list(self.location_tags),
            "isPinned": self.is_pinned,
            "folderName": self.folder_name,
            "libraryName": self.library_name,
            "parentWordTerm": self.parent_word_term,
            "inflectionData": self.inflection_data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WordExport:
        """
        Create a record from a decoded JSON object.

        Raises:
            KeyError: If the required ``term`` key is missing.
        """
        return cls(
            term=data["term"],
            pronunciation=data.get("pronunciation", ""),
            definition=data.get("definition", ""),
            part_of_speech=data.get("partOfSpeech", "Noun"),
            example=data.get("example", ""),
            notes=data.get("notes", ""),
            translations=[Translation.from_dict(t) for t in data.get("translations") or []],
            variations=[Variation.from_dict(v) for v in data.get("variations") or []],
            tags=list(data.get("tags") or []),
            location_tags=list(data.get("locationTags") or []),
            is_pinned=bool(data.get("isPinned", False)),
            folder_name=data.get("folderName"),
            library_name=data.get("libraryName"),
            parent_word_term=data.get("parentWordTerm"),
            inflection_data=data.get("inflectionData"),
        )
