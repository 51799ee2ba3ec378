"""
Core module for letterboxd-sync.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading from config.yaml and the environment
    - cache: Persistent candidate name -> film ID cache
    - logger: Logging system with console and file outputs
    - progress: Progress display for candidate resolution

Usage:
    from letterboxd_sync.core import (
        Config, load_config,
        CacheStore, FilmCache,
        setup_logging, get_logger,
        LetterboxdSyncError, ConfigError, CacheError
    )
"""

from letterboxd_sync.core.cache import CacheStore, FilmCache
from letterboxd_sync.core.config import (
    Config,
    LetterboxdConfig,
    LoggingConfig,
    SyncConfig,
    load_config,
)
from letterboxd_sync.core.exceptions import (
    CacheError,
    ConfigError,
    LetterboxdError,
    LetterboxdSyncError,
    PaginationError,
    ScanError,
)
from letterboxd_sync.core.logger import (
    get_logger,
    log_dropped_candidate,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "LetterboxdConfig",
    "SyncConfig",
    "LoggingConfig",
    "load_config",
    # Cache
    "CacheStore",
    "FilmCache",
    # Exceptions
    "LetterboxdSyncError",
    "ConfigError",
    "CacheError",
    "ScanError",
    "LetterboxdError",
    "PaginationError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_dropped_candidate",
    "shutdown_logging",
]
