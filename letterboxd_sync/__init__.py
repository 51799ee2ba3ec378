"""
letterboxd-sync: Keep a Letterboxd list in sync with a folder of movies.

Every movie file in a folder is turned into a candidate name with a regular
expression, the candidate is matched to a Letterboxd film, and the list is
updated so that it contains exactly the films found in the folder.

Architecture:
    A run goes through these steps:

    SCAN (sync/scanner.py): List the folder
        - Apply the --pattern regex to every file name
        - Collect candidate names ("Solaris 1972")

    RESOLVE (sync/resolver.py): Candidate name -> Letterboxd film ID
        - Answer from the film cache (.movies.json) when possible
        - Otherwise search Letterboxd, at most 16 searches in flight
        - Drop candidates without a match (with a warning)

    FETCH (sync/fetcher.py): Read the list's current films
        - Follow the entries cursor page by page until the end

    DIFF (sync/reconciler.py): Compare both sets
        - Films in the folder but not on the list are added
        - Films on the list but not in the folder are removed

    UPDATE (sync/driver.py): Apply the changes
        - Save the film cache
        - Send a single list update (skipped if nothing changed)

Modules:
    core/        - Configuration, film cache, logging, exceptions, progress
    letterboxd/  - Letterboxd API client and models
    sync/        - Scan, resolve, fetch, diff and update
    utils/       - Small async helpers
    cli.py       - Command-line interface

Usage:
    Command Line:
        letterboxd-sync --pattern '^(.+?)\\.(\\d{4})' aBc1 ~/Movies
        letterboxd-sync --pattern '...' --dry-run aBc1 ~/Movies

    Python API:
        from letterboxd_sync import load_config, run_sync

        config = load_config()
        report = asyncio.run(run_sync(config, "aBc1", Path("~/Movies"), pattern))

Configuration:
    Credentials are read from the environment (or a .env file):
        LETTERBOXD_KEY, LETTERBOXD_SECRET, LETTERBOXD_USERNAME, LETTERBOXD_PASSWORD

    An optional config.yaml in the current directory tunes the sync
    (concurrency, page size, cache file, logging).

Dependencies:
    - aiohttp: Asynchronous HTTP client for the Letterboxd API
    - rich-click: CLI framework with colored help
    - rich: Progress bar
    - tqdm: Progress-bar-safe console logging
    - colorama: Colored log levels
    - pyyaml: Configuration file parsing
    - python-dotenv: .env support for credentials
"""

__version__ = "0.1.0"
__author__ = "letterboxd-sync"
__license__ = "MIT"

# Convenience imports for common usage
from letterboxd_sync.core import (
    CacheError,
    CacheStore,
    Config,
    ConfigError,
    FilmCache,
    LetterboxdError,
    LetterboxdSyncError,
    PaginationError,
    ScanError,
    get_logger,
    load_config,
    setup_logging,
)
from letterboxd_sync.letterboxd import LetterboxdClient
from letterboxd_sync.sync import Delta, SyncDriver, SyncReport, diff, run_sync

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "CacheStore",
    "FilmCache",
    "setup_logging",
    "get_logger",
    # Exceptions
    "LetterboxdSyncError",
    "ConfigError",
    "CacheError",
    "ScanError",
    "LetterboxdError",
    "PaginationError",
    # Client
    "LetterboxdClient",
    # Sync
    "Delta",
    "diff",
    "SyncDriver",
    "SyncReport",
    "run_sync",
]
