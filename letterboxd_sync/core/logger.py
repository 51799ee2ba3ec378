"""
Logging configuration for letterboxd-sync.

This module sets up the logging system with multiple outputs:
    - Console: Real-time messages with tqdm-compatible, colored formatting
    - log_full_<ts>.log: Complete log of all events (DEBUG and above)
    - log_errors_<ts>.log: Only ERROR and CRITICAL level messages
    - dropped_candidates_<ts>.log: Candidate names that could not be
      resolved to a film, with the reason

Log files are only written when a log directory is configured. Without one,
everything goes to the console.

Usage:
    from letterboxd_sync.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Resolving 42 candidates")
    log_dropped_candidate(logger, "Some Film 1999", "no match")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

import colorama
from colorama import Fore, Style
from tqdm import tqdm


# Log file name prefixes (created in the log directory)
LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
DROPPED_CANDIDATES_PREFIX = "dropped_candidates"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("aiohttp", "aiohttp.access", "aiohttp.client", "asyncio")

# Extra fields used by log_dropped_candidate()
DROPPED_NAME_FIELD = "dropped_candidate_name"
DROPPED_REASON_FIELD = "dropped_candidate_reason"


# Initialize colorama for Windows compatibility
colorama.init()


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that prefixes console messages with a colored level name.

    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bright Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Style.BRIGHT + Fore.RED,
    }

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as '<LEVEL>: <message>'."""
        levelname = record.levelname
        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, Fore.WHITE)
            levelname = f"{color}{levelname}{Style.RESET_ALL}"
        message = f"{levelname}: {record.getMessage()}"
        if record.exc_info and record.levelno >= logging.ERROR:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to the console without breaking progress bars.

    Uses tqdm.write(), which prints above any active bar instead of
    interleaving with its carriage-return updates.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class DroppedCandidateHandler(logging.Handler):
    """
    Handler that records dropped candidates in a plain report file.

    Only records carrying the fields set by log_dropped_candidate() are
    written. Each entry looks like:

        Some Film 1999
            no match on Letterboxd

    Systematic extraction problems (a pattern capturing the wrong part of
    the file name) show up here as long runs of similar entries.

    Attributes:
        report_path: Path to the report file.
        report_file: Open file handle (opened by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__(level=logging.WARNING)
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        name = getattr(record, DROPPED_NAME_FIELD, None)
        if name is None or self.report_file is None:
            return
        reason = getattr(record, DROPPED_REASON_FIELD, "")
        try:
            self.report_file.write(f"{name}\n    {reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        if self.report_file is not None:
            self.report_file.close()
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only passes ERROR and CRITICAL records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(
    log_dir: Path | None = None,
    level: str = "INFO",
    colored: bool | None = None
) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        log_dir: Directory where log files are created, or None to log to
                 the console only. Created if it doesn't exist.
        level: Console log level name (DEBUG, INFO, WARNING, ...).
        colored: Force colors on or off. Defaults to colors when stderr
                 is a terminal.

    Behavior:
        1. Set the root logger level to DEBUG (handlers filter)
        2. Add the tqdm-compatible console handler at the requested level
        3. If log_dir is set, add the full log, error log and dropped
           candidate report handlers, one file each per run
        4. Quieten third-party loggers
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if colored is None:
        colored = sys.stderr.isatty()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredConsoleFormatter(use_colors=colored))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

        full_handler = logging.FileHandler(
            log_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        full_handler.setLevel(logging.DEBUG)
        full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(full_handler)

        error_handler = logging.FileHandler(
            log_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
        error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        error_handler.addFilter(ErrorOnlyFilter())
        root_logger.addHandler(error_handler)

        dropped_handler = DroppedCandidateHandler(
            log_dir / f"{DROPPED_CANDIDATES_PREFIX}_{timestamp}.log"
        )
        dropped_handler.open()
        root_logger.addHandler(dropped_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called have no handlers
        of their own; records propagate to whatever the root logger has.
    """
    return logging.getLogger(name)


def log_dropped_candidate(logger: logging.Logger, name: str, reason: str) -> None:
    """
    Log a candidate that will not take part in the sync.

    Emits a WARNING on the console and, when file logging is enabled, an
    entry in the dropped candidates report.

    Args:
        logger: Logger of the calling module.
        name: The candidate name as extracted from the file name.
        reason: Short human-readable reason ("no match", "search failed: ...").
    """
    logger.warning(
        f"Skipping '{name}': {reason}",
        extra={
            DROPPED_NAME_FIELD: name,
            DROPPED_REASON_FIELD: reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close all handlers of the root logger.

    Called from the CLI in a finally block. Logging to the root logger
    produces no output afterwards until setup_logging() runs again.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
