"""
Runtime Configuration Module

Resolves where ConDict keeps its data, configuration, logs and database.

Resolution order for the root directory:
1. ``CONDICT_HOME`` environment variable
2. Directory of the frozen executable (portable build)
3. ``~/.condict``
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

HOME_ENV_VAR = "CONDICT_HOME"


@dataclass
class RuntimePaths:
    """Container for all runtime-related paths."""

    app_root: Path

    data_dir: Path
    config_dir: Path
    logs_dir: Path
    database_dir: Path


@dataclass
class RuntimeConfig:
    """
    Runtime environment configuration.
    """

    is_frozen: bool = False  # True if running from PyInstaller/cx_Freeze

    min_python_version: tuple[int, int] = (3, 9)

    paths: Optional[RuntimePaths] = None

    env_vars: dict[str, str] = field(default_factory=dict)

    @classmethod
    def detect(cls) -> RuntimeConfig:
        """
        Detect the current runtime configuration.

        Returns:
            RuntimeConfig: Detected configuration for the current environment.
        """
        config = cls()
        config.is_frozen = getattr(sys, 'frozen', False)

        env_home = os.environ.get(HOME_ENV_VAR, "").strip()
        if env_home:
            app_root = Path(env_home).expanduser()
        elif config.is_frozen:
            app_root = Path(os.path.abspath(sys.executable)).parent
        else:
            app_root = Path.home() / ".condict"

        config.paths = cls._build_paths(app_root)
        config.env_vars = {
            "CONDICT_ROOT": str(config.paths.app_root),
            "CONDICT_DATA": str(config.paths.data_dir),
            "CONDICT_CONFIG": str(config.paths.config_dir),
        }
        return config

    @staticmethod
    def _build_paths(app_root: Path) -> RuntimePaths:
        data_dir = app_root / "data"
        return RuntimePaths(
            app_root=app_root,
            data_dir=data_dir,
            config_dir=app_root / "config",
            logs_dir=data_dir / "logs",
            database_dir=data_dir / "database",
        )

    def validate_python_version(self) -> tuple[bool, str]:
        """
        Validate that the Python version meets requirements.

        Returns:
            tuple: (is_valid, message)
        """
        current = (sys.version_info.major, sys.version_info.minor)
        required = self.min_python_version

        if current >= required:
            return True, f"Python {current[0]}.{current[1]} meets requirement >= {required[0]}.{required[1]}"
        return False, f"Python {current[0]}.{current[1]} does not meet requirement >= {required[0]}.{required[1]}"

    def get_runtime_info(self) -> dict[str, str]:
        """Get information about the current runtime for diagnostics."""
        return {
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "python_executable": sys.executable,
            "is_frozen": str(self.is_frozen),
            "platform": sys.platform,
            "app_root": str(self.paths.app_root) if self.paths else "unknown",
        }


# Global runtime configuration instance
_runtime_config: Optional[RuntimeConfig] = None


def get_runtime_config() -> RuntimeConfig:
    """
    Get the global runtime configuration, detecting it if necessary.
    """
    global _runtime_config
    if _runtime_config is None:
        _runtime_config = RuntimeConfig.detect()
    return _runtime_config


def reset_runtime_config() -> None:
    """Forget the detected configuration so the next call re-detects it."""
    global _runtime_config
    _runtime_config = None


def get_app_root() -> Path:
    return get_runtime_config().paths.app_root


def get_data_dir() -> Path:
    return get_runtime_config().paths.data_dir


def get_config_dir() -> Path:
    return get_runtime_config().paths.config_dir
