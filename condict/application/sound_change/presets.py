"""
Sound Change Presets

Named rule sets saved for reuse across sessions.

Preset names are unique within a store. Saving under an existing name fails
with DuplicatePresetError unless overwrite is requested explicitly.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ...domain.exceptions import (
    DuplicatePresetError,
    InvalidPresetError,
    PresetNotFoundError,
)
from ...domain.models.sound_change import Preset, RuleSet, SoundChangeRule, copy_rules

logger = logging.getLogger(__name__)

PRESETS_FILE = "sound_change_presets.json"
EXCHANGE_FORMAT_VERSION = 1


def preset_from(name: str, rules: Iterable[SoundChangeRule]) -> Preset:
    """
    Build a preset from a name and a copy of the given rules.

    Raises:
        InvalidPresetError: If the name is blank.
    """
    clean_name = (name or "").strip()
    if not clean_name:
        raise InvalidPresetError("preset name must not be empty")
    return Preset(name=clean_name, rules=tuple(copy_rules(rules)), created_at=datetime.now())


def rules_from_preset(preset: Preset) -> RuleSet:
    """Return an editable copy of a preset's rules."""
    return copy_rules(preset.rules)


class PresetStore(ABC):
    """
    Key-value store of preset name -> rule set.
    """

    @abstractmethod
    def list(self) -> List[Preset]:
        """All presets, sorted by name."""

    @abstractmethod
    def get(self, name: str) -> Preset:
        """
        Raises:
            PresetNotFoundError: If no preset has this name.
        """

    @abstractmethod
    def save(
        self,
        name: str,
        rules: Iterable[SoundChangeRule],
        overwrite: bool = False,
    ) -> Preset:
        """
        Persist a new preset.

        Raises:
            InvalidPresetError: If the name is blank.
            DuplicatePresetError: If the name exists and overwrite is False.
        """

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Delete a preset; returns False if it did not exist."""

    def exists(self, name: str) -> bool:
        try:
            self.get(name)
            return True
        except PresetNotFoundError:
            return False

    def names(self) -> List[str]:
        return [p.name for p in self.list()]


class JsonPresetStore(PresetStore):
    """
    Preset store backed by a JSON file in the config directory.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._presets: Dict[str, Preset] = {}
        if config_dir is None:
            from ...runtime.runtime_config import get_config_dir
            config_dir = get_config_dir()
        self._file_path = Path(config_dir) / PRESETS_FILE
        self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load(self) -> None:
        if not self._file_path.exists():
            return
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            for item in data:
                preset = Preset.from_dict(item)
                if preset.name and preset.name not in self._presets:
                    self._presets[preset.name] = preset
            logger.info(f"Loaded {len(self._presets)} sound change presets")
        except Exception as e:
            logger.error(f"Failed to load sound change presets: {e}")

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            data = [p.to_dict() for p in self.list()]
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            logger.debug(f"Saved {len(data)} sound change presets")
        except Exception as e:
            logger.error(f"Failed to save sound change presets: {e}")

    def list(self) -> List[Preset]:
        return sorted(self._presets.values(), key=lambda p: p.name)

    def get(self, name: str) -> Preset:
        preset = self._presets.get((name or "").strip())
        if preset is None:
            raise PresetNotFoundError(name)
        return preset

    def save(
        self,
        name: str,
        rules: Iterable[SoundChangeRule],
        overwrite: bool = False,
    ) -> Preset:
        preset = preset_from(name, rules)
        if preset.name in self._presets and not overwrite:
            raise DuplicatePresetError(preset.name)
        self._presets[preset.name] = preset
        self._save()
        logger.info(f"Saved preset '{preset.name}' ({preset.rule_count} rules)")
        return preset

    def delete(self, name: str) -> bool:
        key = (name or "").strip()
        if key not in self._presets:
            return False
        del self._presets[key]
        self._save()
        logger.info(f"Deleted preset '{key}'")
        return True


def export_presets(presets: Iterable[Preset], path: Path) -> int:
    """
    Write presets to a JSON exchange file.

    Returns:
        Number of presets written
    """
    items = [p.to_dict() for p in presets]
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(
            {"_version": EXCHANGE_FORMAT_VERSION, "presets": items},
            f,
            ensure_ascii=False,
            indent=2,
        )
    logger.info(f"Exported {len(items)} presets to {path}")
    return len(items)


def import_presets(path: Path) -> List[Preset]:
    """
    Read presets from a JSON exchange file.

    Accepts the versioned object written by ``export_presets`` or a bare
    list of preset objects.

    Raises:
        InvalidPresetError: If the file is not a valid preset file.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidPresetError(f"cannot read preset file {path}: {e}") from e

    items = data.get("presets") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise InvalidPresetError(f"no preset list in {path}")

    presets = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidPresetError(f"malformed preset entry in {path}")
        rules = item.get("rules")
        if rules is not None and (
            not isinstance(rules, list) or not all(isinstance(r, dict) for r in rules)
        ):
            raise InvalidPresetError(f"rules of preset {item.get('name')!r} in {path} must be a list of objects")
        try:
            presets.append(preset_from(item.get("name", ""), Preset.from_dict(item).rules))
        except InvalidPresetError:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise InvalidPresetError(f"malformed preset entry in {path}: {e}") from e
    return presets


def import_presets_into(
    store: PresetStore,
    presets: Iterable[Preset],
    overwrite: bool = False,
) -> Tuple[List[str], List[str]]:
    """
    Save presets into a store.

    Returns:
        (imported names, skipped names); names already in the store are
        skipped unless overwrite is True.
    """
    imported, skipped = [], []
    for preset in presets:
        try:
            store.save(preset.name, preset.rules, overwrite=overwrite)
            imported.append(preset.name)
        except DuplicatePresetError:
            skipped.append(preset.name)
    return imported, skipped


def get_preset_store(backend: Optional[str] = None) -> PresetStore:
    """Create the preset store selected by the ``presets.backend`` setting."""
    if backend is None:
        from ...core.config import get_preset_backend
        backend = get_preset_backend()

    if backend == "json":
        return JsonPresetStore()
    if backend == "database":
        from ...infrastructure.database.repositories.preset_repository import DatabasePresetStore
        return DatabasePresetStore()
    raise ValueError(f"Unknown preset backend: {backend}")
