"""
Word Repository

Reads and writes the word corpus, and runs Sound Change Applier batches
against it inside a single transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from ....application.sound_change.batch import BatchApplyResult, SoundChangeApplier
from ....domain.exceptions import WordNotFoundError
from ....domain.models.sound_change import SoundChangeResult, SoundChangeRule
from ..connection import DatabaseManager, get_db_manager
from ..models import Library, Word

logger = logging.getLogger(__name__)


class WordRepository:
    """
    Repository for dictionary words and libraries.

    Objects returned by the query methods are detached from their session;
    their columns stay readable, relationships are not loaded.
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self._db = db_manager or get_db_manager()

    # Libraries

    def create_library(self, name: str) -> Library:
        with self._db.session_scope() as session:
            library = Library(name=name)
            session.add(library)
            session.flush()
            logger.info(f"Created library: {name} (id={library.id})")
            return library

    def list_libraries(self) -> List[Library]:
        with self._db.session_scope() as session:
            return session.query(Library).order_by(Library.name).all()

    def get_library_by_name(self, name: str) -> Optional[Library]:
        with self._db.session_scope() as session:
            return session.query(Library).filter(Library.name == name).first()

    # Words

    def create(self, term: str, library_id: Optional[int] = None, **fields: Any) -> Word:
        """
        Create a word.

        Args:
            term: The word itself
            library_id: Owning library, if any
            **fields: Other Word columns (definition, part_of_speech, tags, ...)
        """
        with self._db.session_scope() as session:
            word = Word(term=term, library_id=library_id, **fields)
            session.add(word)
            session.flush()
            logger.debug(f"Created word: {term} (id={word.id})")
            return word

    def get(self, word_id: int) -> Word:
        """
        Raises:
            WordNotFoundError: If no word has this id.
        """
        with self._db.session_scope() as session:
            word = session.get(Word, word_id)
            if word is None:
                raise WordNotFoundError(word_id)
            return word

    def get_by_term(self, term: str, library_id: Optional[int] = None) -> Optional[Word]:
        with self._db.session_scope() as session:
            query = session.query(Word).filter(Word.term == term)
            if library_id is not None:
                query = query.filter(Word.library_id == library_id)
            return query.order_by(Word.id).first()

    def list_words(self, library_id: Optional[int] = None) -> List[Word]:
        """All words, sorted by term, optionally limited to one library."""
        with self._db.session_scope() as session:
            return self._query_words(session, library_id).all()

    def count(self, library_id: Optional[int] = None) -> int:
        with self._db.session_scope() as session:
            return self._query_words(session, library_id).count()

    def delete(self, word_id: int) -> bool:
        with self._db.session_scope() as session:
            word = session.get(Word, word_id)
            if word is None:
                return False
            session.delete(word)
        logger.info(f"Deleted word id={word_id}")
        return True

    def restore_terms(self, terms: Dict[int, str]) -> int:
        """Set terms by word id; returns how many words were found."""
        updated = 0
        with self._db.session_scope() as session:
            for word_id, term in terms.items():
                word = session.get(Word, word_id)
                if word is None:
                    continue
                word.term = term
                updated += 1
        return updated

    @staticmethod
    def _query_words(session, library_id: Optional[int]):
        query = session.query(Word)
        if library_id is not None:
            query = query.filter(Word.library_id == library_id)
        return query.order_by(Word.term, Word.id)

    # Sound changes

    def evolve_word(
        self,
        word_id: int,
        applier: SoundChangeApplier,
        rules: Iterable[SoundChangeRule],
    ) -> SoundChangeResult:
        """
        Apply a rule set to one stored word.

        Raises:
            WordNotFoundError: If no word has this id.
        """
        with self._db.session_scope() as session:
            word = session.get(Word, word_id)
            if word is None:
                raise WordNotFoundError(word_id)
            return applier.apply_to_word(word, rules)

    def evolve_all(
        self,
        applier: SoundChangeApplier,
        rules: Iterable[SoundChangeRule],
        library_id: Optional[int] = None,
        dry_run: bool = False,
    ) -> BatchApplyResult:
        """
        Apply a rule set to every stored word (or every word of one library).

        All writes share one transaction; a cancelled batch commits the words
        processed before cancellation.
        """
        with self._db.session_scope() as session:
            words = self._query_words(session, library_id).all()
            result = applier.apply_to_all(words, rules, dry_run=dry_run)

        logger.info(f"Evolved {result.changed} of {result.total} stored words")
        return result

    def undo_last_batch(self, applier: SoundChangeApplier) -> int:
        """Restore the terms rewritten by the applier's most recent batch."""
        with self._db.session_scope() as session:
            restored = applier.restore_last_batch(
                lambda word_id: session.get(Word, word_id) if word_id is not None else None
            )
        # history keeps the batch if the commit above raised
        applier.forget_last_batch()
        return restored
