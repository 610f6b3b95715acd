"""
Configuration Management Module

Provides configuration management with JSON storage for ConDict.
"""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


# Default configuration values
DEFAULT_CONFIG = {
    # Sound Change Applier
    "sound_change": {
        "rule_timeout_seconds": 1.0,   # per-substitution budget; None/0 = unbounded
        "template_syntax": "python",   # "python" (\1, \g<name>) | "dollar" ($1, ${name})
        "batch_workers": 1,            # >1 computes batch terms on worker threads
    },

    # Preset storage
    "presets": {
        "backend": "database",  # "database" | "json"
    },

    # Undo history for batch applies
    "history": {
        "enabled": True,
    },

    # Database settings
    "database": {
        "url": "",
        "sqlite_filename": "condict.db",
    },
}


@dataclass
class ConfigManager:
    """
    Manages application configuration with JSON storage.

    Features:
    - Load/save configuration from JSON files
    - Default value fallback
    - Import/export profiles
    """

    config_dir: Path
    config_file: str = "config.json"
    _config: dict = field(default_factory=dict)
    _defaults: dict = field(default_factory=lambda: deepcopy(DEFAULT_CONFIG))
    _loaded: bool = False

    def __post_init__(self):
        self.config_dir = Path(self.config_dir)
        self._config = deepcopy(self._defaults)

    @property
    def config_path(self) -> Path:
        """Get the full path to the configuration file."""
        return self.config_dir / self.config_file

    def load(self) -> bool:
        """
        Load configuration from file.

        Returns:
            bool: True if loaded successfully, False otherwise.
        """
        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)

                # Merge with defaults (loaded values override defaults)
                self._config = self._merge_config(self._defaults, loaded)
                logger.info(f"Configuration loaded from {self.config_path}")
            else:
                self._config = deepcopy(self._defaults)
                self.save()
                logger.info("Using default configuration")

            self._loaded = True
            return True

        except json.JSONDecodeError as e:
            logger.error(f"Invalid configuration file: {e}")
            self._config = deepcopy(self._defaults)
            self._loaded = True
            return False

        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            self._config = deepcopy(self._defaults)
            self._loaded = True
            return False

    def save(self) -> bool:
        """
        Save configuration to file.

        Returns:
            bool: True if saved successfully.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)

            logger.debug(f"Configuration saved to {self.config_path}")
            return True

        except PermissionError as e:
            logger.error(f"Permission denied saving configuration to {self.config_path}: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to save configuration to {self.config_path}: {e}", exc_info=True)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "sound_change.template_syntax")
            default: Default value if key not found

        Returns:
            The configuration value or default.
        """
        if not self._loaded:
            self.load()

        value = self._config
        try:
            for part in key.split('.'):
                value = value[part]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "presets.backend")
            value: Value to set
            save: Whether to save immediately
        """
        if not self._loaded:
            self.load()

        parts = key.split('.')
        config = self._config

        # Navigate to the parent
        for part in parts[:-1]:
            if part not in config:
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value

        if save:
            self.save()

    def reset(self, key: Optional[str] = None) -> None:
        """
        Reset configuration to defaults.

        Args:
            key: Specific key to reset, or None to reset all.
        """
        if key is None:
            self._config = deepcopy(self._defaults)
        else:
            default_value = self._get_default(key)
            if default_value is not None:
                self.set(key, default_value, save=False)

        self.save()

    def _get_default(self, key: str) -> Any:
        value = self._defaults
        try:
            for part in key.split('.'):
                value = value[part]
            return deepcopy(value)
        except (KeyError, TypeError):
            return None

    def _merge_config(self, defaults: dict, loaded: dict) -> dict:
        """Recursively merge loaded config with defaults."""
        result = deepcopy(defaults)

        for key, value in loaded.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def export_profile(self, path: Path) -> bool:
        """Export current configuration as a profile."""
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
            logger.info(f"Configuration exported to {path}")
            return True
        except Exception as e:
            logger.error(f"Failed to export configuration: {e}")
            return False

    def import_profile(self, path: Path) -> bool:
        """Import configuration from a profile."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                imported = json.load(f)

            self._config = self._merge_config(self._defaults, imported)
            self._loaded = True
            self.save()
            logger.info(f"Configuration imported from {path}")
            return True
        except Exception as e:
            logger.error(f"Failed to import configuration: {e}")
            return False

    def get_all(self) -> dict:
        if not self._loaded:
            self.load()
        return deepcopy(self._config)


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """
    Get the global configuration manager.
    """
    global _config_manager

    if _config_manager is None:
        from condict.runtime.runtime_config import get_config_dir
        _config_manager = ConfigManager(config_dir=get_config_dir())
        _config_manager.load()

    return _config_manager


def reset_config_manager() -> None:
    """Drop the global manager so the next access reloads from disk."""
    global _config_manager
    _config_manager = None


def get_config(key: str, default: Any = None) -> Any:
    return get_config_manager().get(key, default)


def set_config(key: str, value: Any) -> None:
    get_config_manager().set(key, value)


class AppConfig:
    """Static wrapper for configuration access."""

    @staticmethod
    def get(key: str, default: Any = None) -> Any:
        return get_config(key, default)

    @staticmethod
    def set(key: str, value: Any) -> None:
        set_config(key, value)


TEMPLATE_SYNTAX_CHOICES = ("python", "dollar")
PRESET_BACKEND_CHOICES = ("database", "json")
MAX_BATCH_WORKERS = 32


def get_sound_change_settings() -> dict:
    """
    Sound Change Applier settings, coerced to usable values.

    A bad entry falls back to its default with a warning.
    """
    defaults = DEFAULT_CONFIG["sound_change"]
    raw = get_config("sound_change", {}) or {}
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring malformed sound_change section: {raw!r}")
        raw = {}

    timeout = raw.get("rule_timeout_seconds", defaults["rule_timeout_seconds"])
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            logger.warning(f"Invalid rule_timeout_seconds {timeout!r}, using default")
            timeout = defaults["rule_timeout_seconds"]
        if timeout < 0:
            logger.warning(f"Negative rule_timeout_seconds {timeout!r}, using default")
            timeout = defaults["rule_timeout_seconds"]

    syntax = str(raw.get("template_syntax", defaults["template_syntax"]) or "").strip().lower()
    if syntax not in TEMPLATE_SYNTAX_CHOICES:
        logger.warning(f"Unknown template_syntax {syntax!r}, using {defaults['template_syntax']!r}")
        syntax = defaults["template_syntax"]

    try:
        workers = int(raw.get("batch_workers", defaults["batch_workers"]))
    except (TypeError, ValueError):
        logger.warning("Invalid batch_workers, using 1")
        workers = 1
    workers = max(1, min(MAX_BATCH_WORKERS, workers))

    return {
        "rule_timeout_seconds": timeout,
        "template_syntax": syntax,
        "batch_workers": workers,
    }


def get_preset_backend() -> str:
    backend = str(get_config("presets.backend", "database") or "").strip().lower()
    if backend not in PRESET_BACKEND_CHOICES:
        logger.warning(f"Unknown presets.backend {backend!r}, using 'database'")
        return "database"
    return backend
