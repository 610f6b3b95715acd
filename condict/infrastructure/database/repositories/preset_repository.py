"""
Preset Repository

Sound change presets stored in the ``sound_change_presets`` table.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ....application.sound_change.presets import PresetStore, preset_from
from ....domain.exceptions import DuplicatePresetError, PresetNotFoundError
from ....domain.models.sound_change import Preset, SoundChangeRule, rules_from_json, rules_to_json
from ..connection import DatabaseManager, get_db_manager
from ..models import SoundChangePreset

logger = logging.getLogger(__name__)


class DatabasePresetStore(PresetStore):
    """
    Preset store on the application database.

    Names are unique (enforced by the table as well as by ``save``).
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self._db = db_manager or get_db_manager()

    @staticmethod
    def _to_domain(row: SoundChangePreset) -> Preset:
        try:
            rules = rules_from_json(row.rules_json)
        except ValueError as e:
            logger.error(f"Preset '{row.name}' has unreadable rules, loading it empty: {e}")
            rules = []
        return Preset(name=row.name, rules=tuple(rules), created_at=row.created_at)

    def list(self) -> List[Preset]:
        with self._db.session_scope() as session:
            rows = session.query(SoundChangePreset).order_by(SoundChangePreset.name).all()
            return [self._to_domain(row) for row in rows]

    def get(self, name: str) -> Preset:
        key = (name or "").strip()
        with self._db.session_scope() as session:
            row = session.query(SoundChangePreset).filter(SoundChangePreset.name == key).first()
            if row is None:
                raise PresetNotFoundError(name)
            return self._to_domain(row)

    def save(
        self,
        name: str,
        rules: Iterable[SoundChangeRule],
        overwrite: bool = False,
    ) -> Preset:
        preset = preset_from(name, rules)

        with self._db.session_scope() as session:
            row = session.query(SoundChangePreset).filter(SoundChangePreset.name == preset.name).first()
            if row is not None and not overwrite:
                raise DuplicatePresetError(preset.name)

            if row is None:
                row = SoundChangePreset(name=preset.name)
                session.add(row)
            row.rules_json = rules_to_json(preset.rules)
            row.created_at = preset.created_at

        logger.info(f"Saved preset '{preset.name}' ({preset.rule_count} rules)")
        return preset

    def delete(self, name: str) -> bool:
        key = (name or "").strip()
        with self._db.session_scope() as session:
            row = session.query(SoundChangePreset).filter(SoundChangePreset.name == key).first()
            if row is None:
                return False
            session.delete(row)

        logger.info(f"Deleted preset '{key}'")
        return True
