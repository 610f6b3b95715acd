"""
Word Exporter

Exports the word corpus to a JSON exchange file and imports it back.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ...domain.exceptions import WordImportError
from ...domain.models.word import Translation, Variation, WordExport
from ...infrastructure.database.models import Library, Word

logger = logging.getLogger(__name__)

IMPORT_LIBRARY_NAME = "Imported Data"


@dataclass
class ImportResult:
    """Result of a word import."""

    library_id: Optional[int] = None
    library_name: str = IMPORT_LIBRARY_NAME
    imported: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'library_id': self.library_id,
            'library_name': self.library_name,
            'imported': self.imported,
        }


def word_to_export(word: Word) -> WordExport:
    """Build the exchange record for a stored word."""
    return WordExport(
        term=word.term,
        pronunciation=word.pronunciation,
        definition=word.definition,
        part_of_speech=word.part_of_speech,
        example=word.example,
        notes=word.notes,
        translations=[Translation.from_dict(t) for t in word.translations or []],
        variations=[Variation.from_dict(v) for v in word.variations or []],
        tags=list(word.tags or []),
        location_tags=list(word.location_tags or []),
        is_pinned=word.is_pinned,
        folder_name=word.folder.name if word.folder else None,
        library_name=word.library.name if word.library else None,
        parent_word_term=word.parent_word.term if word.parent_word else None,
        inflection_data=word.inflection_data,
    )


def export_words(session: Session, path: Path, library_id: Optional[int] = None) -> int:
    """
    Write every word (or every word of one library) to a JSON array.

    Args:
        session: Open database session
        path: Output file
        library_id: Restrict the export to one library

    Returns:
        Number of words written
    """
    query = session.query(Word)
    if library_id is not None:
        query = query.filter(Word.library_id == library_id)
    words = query.order_by(Word.term, Word.id).all()

    items = [word_to_export(w).to_dict() for w in words]

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(items, f, ensure_ascii=False, indent=2)

    logger.info(f"Exported {len(items)} words to {path}")
    return len(items)


def _read_records(path: Path) -> List[WordExport]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise WordImportError(f"cannot read word file {path}: {e}") from e

    if not isinstance(data, list):
        raise WordImportError(f"{path} does not contain a list of words")

    records = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise WordImportError(f"entry {i} in {path} is not an object")
        try:
            records.append(WordExport.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            raise WordImportError(f"entry {i} in {path} is malformed: {e}") from e
    return records


def import_words(session: Session, path: Path) -> ImportResult:
    """
    Import words from a JSON exchange file into a new library.

    Every word goes into a fresh library named "Imported Data". Folder and
    etymology links are not re-established.

    Raises:
        WordImportError: If the file is unreadable or malformed. Nothing is
            added in that case.
    """
    records = _read_records(Path(path))

    library = Library(name=IMPORT_LIBRARY_NAME)
    session.add(library)

    for record in records:
        word = Word(
            term=record.term,
            pronunciation=record.pronunciation,
            definition=record.definition,
            part_of_speech=record.part_of_speech,
            example=record.example,
            notes=record.notes,
            translations=[t.to_dict() for t in record.translations],
            variations=[v.to_dict() for v in record.variations],
            tags=list(record.tags),
            location_tags=list(record.location_tags),
            is_pinned=record.is_pinned,
            library=library,
        )
        if record.inflection_data:
            word.inflection_data = record.inflection_data
        session.add(word)

    session.flush()
    logger.info(f"Imported {len(records)} words into library '{library.name}' (id={library.id})")
    return ImportResult(library_id=library.id, library_name=library.name, imported=len(records))
