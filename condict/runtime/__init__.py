"""
Runtime Module

Handles runtime path resolution, bootstrap and logging setup.

Usage:
    from condict.runtime import bootstrap
    bootstrap()

    from condict.runtime import get_config_dir
    config_dir = get_config_dir()
"""

from .runtime_config import (
    RuntimeConfig,
    RuntimePaths,
    get_runtime_config,
    reset_runtime_config,
    get_app_root,
    get_data_dir,
    get_config_dir,
)

from .bootstrap import (
    BootstrapError,
    RuntimeBootstrap,
    get_bootstrap,
    bootstrap,
    is_bootstrapped,
    reset_bootstrap,
)

__all__ = [
    "RuntimeConfig",
    "RuntimePaths",
    "get_runtime_config",
    "reset_runtime_config",
    "get_app_root",
    "get_data_dir",
    "get_config_dir",
    "BootstrapError",
    "RuntimeBootstrap",
    "get_bootstrap",
    "bootstrap",
    "is_bootstrapped",
    "reset_bootstrap",
]
