"""
Sound Change History

Records the term rewrites made by batch applies so a batch can be undone.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

HISTORY_FILE = "sound_change_history.json"


@dataclass
class SoundChangeHistoryEntry:
    """One word's term rewrite within a batch."""

    batch_id: str
    word_id: Optional[int]
    old_term: str
    new_term: str
    timestamp: datetime = field(default_factory=datetime.now)

    # Rule set that produced the change, as {"find", "replace"} dicts
    rules: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "word_id": self.word_id,
            "old_term": self.old_term,
            "new_term": self.new_term,
            "timestamp": self.timestamp.isoformat(),
            "rules": self.rules,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SoundChangeHistoryEntry:
        return cls(
            batch_id=data.get("batch_id", ""),
            word_id=data.get("word_id"),
            old_term=data.get("old_term", ""),
            new_term=data.get("new_term", ""),
            timestamp=datetime.fromisoformat(data.get("timestamp", datetime.now().isoformat())),
            rules=data.get("rules", []),
        )


class SoundChangeHistory:
    """
    Batch-grouped history of term rewrites.

    Features:
    - Entries grouped by batch id
    - Undo support for the most recent batch
    - JSON persistence in the config directory
    """

    MAX_HISTORY_SIZE = 10000

    def __init__(self, config_dir: Optional[Path] = None):
        self._entries: List[SoundChangeHistoryEntry] = []
        self._config_dir = Path(config_dir) if config_dir else None

        if self._config_dir:
            self._load()

    @property
    def history_file(self) -> Optional[Path]:
        if not self._config_dir:
            return None
        return self._config_dir / HISTORY_FILE

    def add_entry(self, entry: SoundChangeHistoryEntry) -> None:
        self._entries.append(entry)

        if len(self._entries) > self.MAX_HISTORY_SIZE:
            self._entries = self._entries[-self.MAX_HISTORY_SIZE:]

    def get_all_entries(self) -> List[SoundChangeHistoryEntry]:
        return self._entries.copy()

    def get_batch(self, batch_id: str) -> List[SoundChangeHistoryEntry]:
        return [e for e in self._entries if e.batch_id == batch_id]

    def get_last_batch(self) -> List[SoundChangeHistoryEntry]:
        if not self._entries:
            return []
        return self.get_batch(self._entries[-1].batch_id)

    def get_batch_ids(self) -> List[str]:
        """Batch ids, newest first."""
        batch_ids = []
        seen = set()
        for entry in reversed(self._entries):
            if entry.batch_id not in seen:
                batch_ids.append(entry.batch_id)
                seen.add(entry.batch_id)
        return batch_ids

    def remove_batch(self, batch_id: str) -> int:
        original_count = len(self._entries)
        self._entries = [e for e in self._entries if e.batch_id != batch_id]
        return original_count - len(self._entries)

    def remove_last_batch(self) -> int:
        if not self._entries:
            return 0
        return self.remove_batch(self._entries[-1].batch_id)

    def clear(self) -> None:
        self._entries.clear()

    def can_undo(self) -> bool:
        return bool(self._entries)

    def get_undo_preview(self) -> List[Dict[str, Any]]:
        """
        Rewrites that undoing the last batch would perform.

        Returns:
            [{"word_id": ..., "from": new_term, "to": old_term}, ...]
        """
        return [
            {"word_id": e.word_id, "from": e.new_term, "to": e.old_term}
            for e in reversed(self.get_last_batch())
        ]

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_entries": len(self._entries),
            "total_batches": len(self.get_batch_ids()),
            "oldest_entry": self._entries[0].timestamp.isoformat() if self._entries else None,
            "newest_entry": self._entries[-1].timestamp.isoformat() if self._entries else None,
        }

    def save(self) -> None:
        history_file = self.history_file
        if history_file is None:
            return

        try:
            history_file.parent.mkdir(parents=True, exist_ok=True)
            data = [e.to_dict() for e in self._entries]
            with open(history_file, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.debug(f"Saved {len(data)} sound change history entries")
        except Exception as e:
            logger.error(f"Failed to save sound change history: {e}")

    def _load(self) -> None:
        history_file = self.history_file
        if history_file is None or not history_file.exists():
            return

        try:
            with open(history_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._entries = [SoundChangeHistoryEntry.from_dict(item) for item in data]
            logger.debug(f"Loaded {len(self._entries)} sound change history entries")
        except Exception as e:
            logger.error(f"Failed to load sound change history: {e}")
