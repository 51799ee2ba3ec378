"""
Configuration management for letterboxd-sync.

This module handles loading, validating, and providing access to the
application configuration. Values come from two sources:

    - config.yaml in the current working directory (optional)
    - Environment variables, also read from a .env file if present

Credentials are normally supplied through the environment:

    LETTERBOXD_KEY       API key issued by Letterboxd
    LETTERBOXD_SECRET    API shared secret used to sign requests
    LETTERBOXD_USERNAME  Account owning the list
    LETTERBOXD_PASSWORD  Password for that account

Environment variables take precedence over the config file.

Example config.yaml:
    letterboxd:
      base_url: "https://api.letterboxd.com/api/v0"

    sync:
      concurrency: 16        # Parallel film searches
      page_size: 100         # List entries per page
      max_pages: 1000        # Safety cap on pagination
      cache_file: ".movies.json"
      request_timeout: 30

    logging:
      directory: null        # Set to a path to also write log files
      level: "INFO"
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from letterboxd_sync.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_BASE_URL = "https://api.letterboxd.com/api/v0"
DEFAULT_CACHE_FILENAME = ".movies.json"
DEFAULT_CONCURRENCY = 16
DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 1000
DEFAULT_REQUEST_TIMEOUT = 30.0

# Environment variable -> LetterboxdConfig field
CREDENTIAL_ENV_VARS = {
    "LETTERBOXD_KEY": "api_key",
    "LETTERBOXD_SECRET": "api_secret",
    "LETTERBOXD_USERNAME": "username",
    "LETTERBOXD_PASSWORD": "password",
}


@dataclass(frozen=True)
class LetterboxdConfig:
    """
    Letterboxd API credentials.

    API keys are issued by Letterboxd on request:
    https://letterboxd.com/api-beta/

    Attributes:
        api_key: Public API key sent with every request.
        api_secret: Shared secret used to sign every request.
        username: Letterboxd account name (owner of the list).
        password: Letterboxd account password.
        base_url: API root, without trailing slash.
    """
    api_key: str
    api_secret: str
    username: str
    password: str
    base_url: str = DEFAULT_BASE_URL

    def __repr__(self) -> str:
        return (
            f"LetterboxdConfig(api_key={self.api_key!r}, username={self.username!r}, "
            f"base_url={self.base_url!r})"
        )


@dataclass(frozen=True)
class SyncConfig:
    """
    Sync behavior configuration.

    Attributes:
        concurrency: Maximum number of film searches in flight at once.
                     The API is rate sensitive; 16 is a safe default.
        page_size: Number of list entries requested per page (max 100).
        max_pages: Upper bound on pages fetched for one list. Reaching it
                   aborts the run instead of looping forever.
        cache_file: Path of the candidate name -> film ID cache.
        request_timeout: Total timeout in seconds for one HTTP request.
    """
    concurrency: int = DEFAULT_CONCURRENCY
    page_size: int = DEFAULT_PAGE_SIZE
    max_pages: int = DEFAULT_MAX_PAGES
    cache_file: Path = Path(DEFAULT_CACHE_FILENAME)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Directory for log files, or None for console only.
        level: Console log level name.
    """
    directory: Path | None = None
    level: str = "INFO"


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Example:
        config = load_config()
        print(f"Cache: {config.sync.cache_file}")
        print(f"Up to {config.sync.concurrency} searches in flight")
    """
    letterboxd: LetterboxdConfig
    sync: SyncConfig
    logging: LoggingConfig


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None
) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to a config file. If given, the
                     file must exist. If None, config.yaml in the current
                     working directory is used when present.
        environ: Environment mapping to read credentials from. Defaults to
                 os.environ after loading a .env file.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is unreadable, has invalid YAML,
                     contains invalid values, or a credential is missing.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    raw_config = _read_config_file(config_path)

    letterboxd_section = _section(raw_config, "letterboxd")
    sync_section = _section(raw_config, "sync")
    logging_section = _section(raw_config, "logging")

    return Config(
        letterboxd=_parse_letterboxd_config(letterboxd_section, environ),
        sync=_parse_sync_config(sync_section),
        logging=_parse_logging_config(logging_section),
    )


def _read_config_file(config_path: Path | None) -> dict[str, Any]:
    """
    Read and parse the YAML config file.

    A missing default config.yaml is fine (empty configuration); a missing
    explicitly requested file is an error.
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME
        if not config_path.exists():
            return {}
    elif not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_letterboxd_config(
    section: dict[str, Any],
    environ: Mapping[str, str]
) -> LetterboxdConfig:
    """
    Merge credentials from the environment and the 'letterboxd' section.

    Raises:
        ConfigError: If any credential is missing or empty, listing the
                     environment variables that need to be set.
    """
    values: dict[str, str] = {}
    missing: list[str] = []

    for env_var, field in CREDENTIAL_ENV_VARS.items():
        value = environ.get(env_var) or section.get(field)
        if not isinstance(value, str) or not value.strip():
            missing.append(env_var)
            continue
        values[field] = value.strip()

    if missing:
        raise ConfigError(
            f"Missing Letterboxd credentials: set {', '.join(missing)}",
            details={"missing": missing}
        )

    base_url = section.get("base_url", DEFAULT_BASE_URL)
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigError(
            "'letterboxd.base_url' must be a non-empty string",
            details={"field": "letterboxd.base_url"}
        )

    return LetterboxdConfig(base_url=base_url.strip().rstrip("/"), **values)


def _parse_positive_int(section: dict[str, Any], key: str, default: int) -> int:
    raw = section.get(key)
    if raw is None:
        return default
    # bool is an int subclass; "true" is not a count
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ConfigError(
            f"'sync.{key}' must be a positive integer",
            details={"field": f"sync.{key}", "value": raw}
        )
    return raw


def _parse_sync_config(section: dict[str, Any]) -> SyncConfig:
    """
    Parse the 'sync' section, applying defaults for missing fields.

    Raises:
        ConfigError: If a numeric field is not positive or cache_file
                     is not a non-empty string.
    """
    concurrency = _parse_positive_int(section, "concurrency", DEFAULT_CONCURRENCY)
    page_size = _parse_positive_int(section, "page_size", DEFAULT_PAGE_SIZE)
    max_pages = _parse_positive_int(section, "max_pages", DEFAULT_MAX_PAGES)

    if page_size > DEFAULT_PAGE_SIZE:
        raise ConfigError(
            f"'sync.page_size' cannot exceed {DEFAULT_PAGE_SIZE}",
            details={"field": "sync.page_size", "value": page_size}
        )

    raw_cache = section.get("cache_file", DEFAULT_CACHE_FILENAME)
    if not isinstance(raw_cache, str) or not raw_cache.strip():
        raise ConfigError(
            "'sync.cache_file' must be a non-empty string",
            details={"field": "sync.cache_file"}
        )

    raw_timeout = section.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
    if isinstance(raw_timeout, bool) or not isinstance(raw_timeout, (int, float)) or raw_timeout <= 0:
        raise ConfigError(
            "'sync.request_timeout' must be a positive number",
            details={"field": "sync.request_timeout", "value": raw_timeout}
        )

    return SyncConfig(
        concurrency=concurrency,
        page_size=page_size,
        max_pages=max_pages,
        cache_file=Path(raw_cache.strip()).expanduser(),
        request_timeout=float(raw_timeout),
    )


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    raw_dir = section.get("directory")
    directory = None
    if raw_dir is not None:
        if not isinstance(raw_dir, str) or not raw_dir.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string or null",
                details={"field": "logging.directory"}
            )
        directory = Path(raw_dir.strip()).expanduser().resolve()

    level = section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in (
        "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    ):
        raise ConfigError(
            "'logging.level' must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL",
            details={"field": "logging.level", "value": level}
        )

    return LoggingConfig(directory=directory, level=level.upper())
