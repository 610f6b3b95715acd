"""
Sound Change Applier

Preview, single-word apply and apply-to-all on top of the engine, with
progress reporting, cooperative cancellation and undo history.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from ...domain.models.sound_change import (
    SkippedRule,
    SoundChangeResult,
    SoundChangeRule,
    TermChange,
    rules_to_list,
)
from .engine import SoundChangeEngine
from .history import SoundChangeHistory, SoundChangeHistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class BatchApplyResult:
    """Outcome of applying a rule set to many words."""

    total: int = 0
    processed: int = 0
    changed: int = 0
    cancelled: bool = False
    dry_run: bool = False
    batch_id: str = ""

    changes: List[TermChange] = field(default_factory=list)
    skipped_rules: List[SkippedRule] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return not self.cancelled and self.processed == self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "processed": self.processed,
            "changed": self.changed,
            "cancelled": self.cancelled,
            "dry_run": self.dry_run,
            "batch_id": self.batch_id,
            "skipped_rules": [s.to_dict() for s in self.skipped_rules],
        }


class SoundChangeApplier:
    """
    Runs the three Sound Change Applier actions.

    Features:
    - Preview a single word without touching it
    - Apply to one word or to every word in a corpus
    - Progress callback and cooperative cancellation between words
    - Optional worker threads for large corpora
    - Undo of the last batch through the history
    """

    def __init__(
        self,
        engine: Optional[SoundChangeEngine] = None,
        history: Optional[SoundChangeHistory] = None,
        max_workers: int = 1,
    ):
        self.engine = engine or SoundChangeEngine()
        self.history = history
        self.max_workers = max(1, int(max_workers or 1))

        self._cancelled = False
        self._progress_callback: Optional[Callable[[int, int, str], None]] = None

    @classmethod
    def from_config(cls) -> SoundChangeApplier:
        """Create an applier from the ``sound_change`` and ``history`` settings."""
        from ...core.config import AppConfig, get_sound_change_settings
        from ...runtime.runtime_config import get_config_dir

        history = None
        if AppConfig.get("history.enabled", True):
            history = SoundChangeHistory(get_config_dir())

        return cls(
            engine=SoundChangeEngine.from_config(),
            history=history,
            max_workers=get_sound_change_settings()["batch_workers"],
        )

    def set_progress_callback(self, callback: Callable[[int, int, str], None]) -> None:
        """Set the progress callback, called as (current, total, term)."""
        self._progress_callback = callback

    def cancel(self) -> None:
        """Stop the running batch before the next word."""
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def preview(self, word: str, rules: Iterable[SoundChangeRule]) -> SoundChangeResult:
        """Evolve a word without writing anything."""
        return self.engine.apply_with_report(word, rules)

    def apply_to_word(self, word: Any, rules: Iterable[SoundChangeRule]) -> SoundChangeResult:
        """Evolve one term holder in place."""
        rules = list(rules)
        result = self.engine.apply_with_report(word.term, rules)
        word.term = result.output

        if result.changed and self.history is not None:
            self._record(
                self._new_batch_id(),
                [TermChange(getattr(word, "id", None), result.source, result.output)],
                rules,
            )
        return result

    def _compute_sequential(
        self,
        terms: List[str],
        rules: Sequence[SoundChangeRule],
    ) -> Iterator[SoundChangeResult]:
        for term in terms:
            yield self.engine.apply_with_report(term, rules)

    def _compute_parallel(
        self,
        terms: List[str],
        rules: Sequence[SoundChangeRule],
    ) -> Iterator[SoundChangeResult]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.engine.apply_with_report, term, rules) for term in terms]
            try:
                for future in futures:
                    yield future.result()
            finally:
                for future in futures:
                    future.cancel()

    def apply_to_all(
        self,
        words: Iterable[Any],
        rules: Iterable[SoundChangeRule],
        dry_run: bool = False,
    ) -> BatchApplyResult:
        """
        Evolve every word's term.

        Each final term equals ``engine.apply(original_term, rules)``; terms
        are computed from a snapshot taken before any write, then written
        back one word at a time.

        Args:
            words: Term holders (objects with a mutable ``term``)
            rules: Rule set
            dry_run: Compute changes without writing them

        Returns:
            BatchApplyResult with the per-word changes
        """
        self._cancelled = False
        words = list(words)
        rules = list(rules)
        terms = [w.term for w in words]

        result = BatchApplyResult(total=len(words), dry_run=dry_run)
        skipped: Dict[int, SkippedRule] = {}

        if self.max_workers > 1 and len(words) > 1:
            reports = self._compute_parallel(terms, rules)
        else:
            reports = self._compute_sequential(terms, rules)

        try:
            for i, word in enumerate(words):
                if self._cancelled:
                    result.cancelled = True
                    logger.info(f"Sound change batch cancelled after {result.processed}/{result.total} words")
                    break

                if self._progress_callback:
                    self._progress_callback(i + 1, result.total, terms[i])

                report = next(reports)
                for s in report.skipped:
                    skipped.setdefault(s.index, s)

                if not dry_run:
                    word.term = report.output
                if report.changed:
                    result.changed += 1
                    result.changes.append(TermChange(getattr(word, "id", None), report.source, report.output))
                result.processed += 1
        finally:
            reports.close()

        result.skipped_rules = [skipped[i] for i in sorted(skipped)]

        if not dry_run and result.changes and self.history is not None:
            result.batch_id = self._new_batch_id()
            self._record(result.batch_id, result.changes, rules)

        logger.info(
            f"Sound change batch: {result.changed} of {result.processed} words changed"
            + (" (dry run)" if dry_run else "")
        )
        return result

    def undo_last_batch(self, resolve: Callable[[Optional[int]], Any]) -> int:
        """
        Restore the terms rewritten by the most recent batch and drop it
        from history.

        Args:
            resolve: Maps a word id to its term holder, or None if it is gone

        Returns:
            Number of words restored. Words whose term was edited after the
            batch are left alone.
        """
        restored = self.restore_last_batch(resolve)
        self.forget_last_batch()
        return restored

    def restore_last_batch(self, resolve: Callable[[Optional[int]], Any]) -> int:
        """
        Restore the terms of the most recent batch without touching history.

        Callers that persist the words call ``forget_last_batch`` once the
        restored terms are stored.
        """
        if self.history is None:
            return 0

        entries = self.history.get_last_batch()
        if not entries:
            return 0

        restored = 0
        for entry in reversed(entries):
            word = resolve(entry.word_id)
            if word is None:
                logger.warning(f"Word {entry.word_id} no longer exists, cannot restore '{entry.old_term}'")
                continue
            if word.term != entry.new_term:
                logger.warning(f"Word {entry.word_id} was edited after the batch, leaving '{word.term}'")
                continue
            word.term = entry.old_term
            restored += 1

        logger.info(f"Undid sound change batch, restored {restored} words")
        return restored

    def forget_last_batch(self) -> bool:
        """Drop the most recent batch from history. Returns False if there was none."""
        if self.history is None or not self.history.get_last_batch():
            return False
        self.history.remove_last_batch()
        self.history.save()
        return True

    def _new_batch_id(self) -> str:
        return f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"

    def _record(
        self,
        batch_id: str,
        changes: List[TermChange],
        rules: Iterable[SoundChangeRule],
    ) -> None:
        rule_data = rules_to_list(rules)
        now = datetime.now()
        for change in changes:
            self.history.add_entry(SoundChangeHistoryEntry(
                batch_id=batch_id,
                word_id=change.word_id,
                old_term=change.old_term,
                new_term=change.new_term,
                timestamp=now,
                rules=rule_data,
            ))
        self.history.save()
