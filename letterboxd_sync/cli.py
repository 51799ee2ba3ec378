"""
Command-line interface for letterboxd-sync.

This module implements the CLI using Click, with rich-click for colored help.

Usage:
    letterboxd-sync --pattern <regex> <list-id> <folder>

    # Preview the changes without touching the list or the cache
    letterboxd-sync --pattern '^(.+?)\\.(\\d{4})\\.' --dry-run aBc1 ~/Movies

    # Titles written as "Title (Year).ext"
    letterboxd-sync --pattern '^(?P<title>.+) \\((?P<year>\\d{4})\\)' aBc1 ~/Movies

Configuration:
    Credentials come from LETTERBOXD_KEY, LETTERBOXD_SECRET,
    LETTERBOXD_USERNAME and LETTERBOXD_PASSWORD (environment or .env).
    An optional config.yaml in the current directory tunes the sync;
    command-line options override it.

Exit Codes:
    0   Success (including "nothing to do")
    1   Configuration error or unexpected error
    2   Film cache error
    3   Letterboxd API error (authentication, list access, update refused)
    4   Other errors (unreadable folder, invalid pattern, pagination)
    130 Interrupted by user
"""

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "letterboxd-sync": [
        {
            "name": "Sync Options",
            "options": ["--pattern", "--dry-run", "--cache-file", "--concurrency"],
        },
        {
            "name": "Configuration",
            "options": ["--config", "--log-dir", "--verbose"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from letterboxd_sync import __version__
from letterboxd_sync.core import (
    CacheError,
    Config,
    ConfigError,
    LetterboxdError,
    LetterboxdSyncError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from letterboxd_sync.sync import SyncReport, run_sync

logger = get_logger(__name__)


@click.command(name="letterboxd-sync")
@click.option(
    "--pattern",
    type=str,
    required=True,
    metavar="<regex>",
    help="Regex extracting the movie name from a file name (group 1, or groups 'title' and 'year')"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the changes without updating the list or saving the cache"
)
@click.option(
    "--cache-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<path>",
    help="Film cache file [default: .movies.json]"
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    metavar="<n>",
    help="Maximum parallel film searches [default: 16]"
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file [default: ./config.yaml if present]"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Also write log files to this directory"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug messages on the console"
)
@click.version_option(__version__, prog_name="letterboxd-sync")
@click.argument("list_id", metavar="LIST_ID")
@click.argument(
    "folder",
    type=click.Path(path_type=Path),
    metavar="FOLDER"
)
def cli(
    pattern: str,
    dry_run: bool,
    cache_file: Optional[Path],
    concurrency: Optional[int],
    config_path: Optional[Path],
    log_dir: Optional[Path],
    verbose: bool,
    list_id: str,
    folder: Path
) -> None:
    """
    Synchronize the movies in FOLDER with the Letterboxd list LIST_ID.

    Every file name in FOLDER is matched against --pattern to get a movie
    name, which is looked up on Letterboxd. The list is then updated to
    contain exactly the movies found: missing ones are added, others removed.

    Lookups are cached in .movies.json so later runs only search new files.
    """
    try:
        config = _load_configuration(config_path, cache_file, concurrency, log_dir, verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    try:
        setup_logging(config.logging.directory, level=config.logging.level)
        logger.info(f"letterboxd-sync {__version__} starting")
        if dry_run:
            logger.info("Dry run: the list and the film cache will not be modified")

        report = asyncio.run(
            run_sync(
                config,
                list_id,
                folder.expanduser(),
                pattern,
                dry_run=dry_run,
                show_progress=True,
            )
        )
        _print_report(report)
        logger.info("letterboxd-sync completed successfully")

    except CacheError as e:
        click.echo(f"Cache error: {e.message}", err=True)
        click.echo("Fix or delete the cache file and run again", err=True)
        logger.error(f"Cache error: {e.message}", exc_info=True)
        sys.exit(2)

    except LetterboxdError as e:
        click.echo(f"Letterboxd error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check LETTERBOXD_KEY, LETTERBOXD_SECRET, LETTERBOXD_USERNAME and LETTERBOXD_PASSWORD", err=True)
        logger.error(f"Letterboxd error: {e.message}", exc_info=True)
        sys.exit(3)

    except LetterboxdSyncError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _load_configuration(
    config_path: Path | None,
    cache_file: Path | None,
    concurrency: int | None,
    log_dir: Path | None,
    verbose: bool
) -> Config:
    """
    Load the configuration and apply command-line overrides.

    Raises:
        ConfigError: If configuration is invalid or credentials are missing.
    """
    config = load_config(config_path)

    sync_config = config.sync
    if cache_file is not None:
        sync_config = replace(sync_config, cache_file=cache_file.expanduser())
    if concurrency is not None:
        sync_config = replace(sync_config, concurrency=concurrency)

    logging_config = config.logging
    if log_dir is not None:
        logging_config = replace(logging_config, directory=log_dir.expanduser().resolve())
    if verbose:
        logging_config = replace(logging_config, level="DEBUG")

    return replace(config, sync=sync_config, logging=logging_config)


def _print_report(report: SyncReport) -> None:
    """Log the final statistics of a run."""
    logger.info("-" * 60)
    logger.info(f"Candidates:  {len(report.candidates)}")
    logger.info(f"Resolved:    {len(report.resolved)} ({len(report.local_ids)} unique films)")
    if report.dropped:
        logger.info(f"Dropped:     {len(report.dropped)}")
    logger.info(f"On list:     {len(report.remote_ids)}")
    logger.info(f"Changes:     {report.delta.summary()}")
    if report.dry_run and not report.delta.is_empty:
        logger.info("Dry run: run again without --dry-run to apply")
    logger.info("-" * 60)


def main() -> None:
    """Entry point for the letterboxd-sync console script."""
    cli()


if __name__ == "__main__":
    main()
