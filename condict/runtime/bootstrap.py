"""
Bootstrap Module

Prepares the runtime before the application starts: checks the Python
version, creates the data directories and sets up logging.
"""

from __future__ import annotations

import logging
from typing import Optional

# Configure basic logging before anything else
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class BootstrapError(Exception):
    """Exception raised during bootstrap process."""
    pass


class RuntimeBootstrap:
    """
    Handles the bootstrap process.

    This class is responsible for:
    - Runtime detection and Python version check
    - Data directory creation
    - File logging
    """

    def __init__(self):
        self._initialized = False
        self._file_handler: Optional[logging.Handler] = None
        self._errors: list[str] = []
        self._warnings: list[str] = []

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def errors(self) -> list[str]:
        return self._errors.copy()

    @property
    def warnings(self) -> list[str]:
        return self._warnings.copy()

    def bootstrap(self, file_logging: bool = True) -> bool:
        """
        Perform the bootstrap process.

        Args:
            file_logging: Also write logs to ``<data>/logs/condict.log``.

        Returns:
            bool: True if bootstrap was successful.

        Raises:
            BootstrapError: If a critical error occurs during bootstrap.
        """
        if self._initialized:
            logger.debug("Bootstrap already completed")
            return True

        logger.debug("Starting runtime bootstrap...")

        try:
            self._configure_runtime()
            self._create_directories()
            if file_logging:
                self._initialize_logging()

            self._initialized = True
            logger.debug("Runtime bootstrap completed successfully")

            for warning in self._warnings:
                logger.warning(warning)

            return True

        except BootstrapError:
            raise
        except Exception as e:
            error_msg = f"Bootstrap failed: {e}"
            self._errors.append(error_msg)
            logger.error(error_msg)
            raise BootstrapError(error_msg) from e

    def _configure_runtime(self) -> None:
        from .runtime_config import get_runtime_config

        config = get_runtime_config()

        version_ok, version_msg = config.validate_python_version()
        if not version_ok:
            raise BootstrapError(version_msg)

        logger.debug(f"App root: {config.paths.app_root}")

    def _create_directories(self) -> None:
        from .runtime_config import get_runtime_config

        paths = get_runtime_config().paths
        for directory in (paths.data_dir, paths.config_dir, paths.logs_dir, paths.database_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def _initialize_logging(self) -> None:
        """Add a rotating file handler to the root logger."""
        from .runtime_config import get_runtime_config

        logs_dir = get_runtime_config().paths.logs_dir
        log_file = logs_dir / "condict.log"

        try:
            from logging.handlers import RotatingFileHandler

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ))

            logging.getLogger().addHandler(file_handler)
            self._file_handler = file_handler

            logger.debug(f"Log file: {log_file}")

        except Exception as e:
            self._warnings.append(f"Could not set up file logging: {e}")


# Global bootstrap instance
_bootstrap: Optional[RuntimeBootstrap] = None


def get_bootstrap() -> RuntimeBootstrap:
    global _bootstrap
    if _bootstrap is None:
        _bootstrap = RuntimeBootstrap()
    return _bootstrap


def bootstrap(file_logging: bool = True) -> bool:
    """
    Perform the runtime bootstrap.

    Call this at the very start of the application.

    Raises:
        BootstrapError: If bootstrap fails.
    """
    return get_bootstrap().bootstrap(file_logging=file_logging)


def is_bootstrapped() -> bool:
    return get_bootstrap().is_initialized


def reset_bootstrap() -> None:
    """Detach the log file handler and forget the bootstrap state."""
    global _bootstrap
    if _bootstrap is not None and _bootstrap._file_handler is not None:
        logging.getLogger().removeHandler(_bootstrap._file_handler)
        _bootstrap._file_handler.close()
    _bootstrap = None
