"""
Exception classes for letterboxd-sync.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus a details dictionary,
and distinguishes between failures that abort a run and failures that only
cost a single candidate.

Exception Hierarchy:
    LetterboxdSyncError (base)
        ConfigError - Configuration file or credential issues
        CacheError - Film cache file issues
        ScanError - Target folder or filename pattern issues
        LetterboxdError - Letterboxd API issues
        PaginationError - List pagination never terminating
"""


class LetterboxdSyncError(Exception):
    """
    Base exception for all letterboxd-sync errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every application error with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        details: Dictionary with additional context (list id, path, status...).

    Example:
        try:
            report = asyncio.run(run_sync(config, list_id, folder, pattern))
        except LetterboxdSyncError as e:
            logger.error(f"Sync failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary with additional context. Common keys:
                     - 'path': File or folder involved in the error
                     - 'list_id': Letterboxd list involved in the error
                     - 'original_error': The wrapped exception, as a string
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LetterboxdSyncError):
    """
    Raised when the configuration cannot be loaded or is incomplete.

    This is a CRITICAL error that stops program execution.

    Common causes:
        - LETTERBOXD_KEY / LETTERBOXD_SECRET / LETTERBOXD_USERNAME /
          LETTERBOXD_PASSWORD not set
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g. concurrency of zero)
    """
    pass


class CacheError(LetterboxdSyncError):
    """
    Raised when the film cache file cannot be read or written.

    Loading a malformed cache is CRITICAL: the cache decides which films
    end up on the list, so a corrupted one cannot be trusted.
    Failing to save the cache is NOT critical: the next run only pays
    for a few extra lookups. The sync driver logs it as a warning.

    Example:
        raise CacheError(
            "Cache file is not valid JSON",
            details={'path': '.movies.json', 'line': 3}
        )
    """
    pass


class ScanError(LetterboxdSyncError):
    """
    Raised when the target folder cannot be scanned.

    This is a CRITICAL error.

    Common causes:
        - Folder does not exist or is not a directory
        - Permission denied
        - The --pattern argument is not a valid regular expression
    """
    pass


class LetterboxdError(LetterboxdSyncError):
    """
    Raised when there's an issue with the Letterboxd API.

    Can be CRITICAL (authentication failure, list update rejected) or
    NON-CRITICAL (a single film search failing). The resolver turns
    non-authentication failures of a search into a dropped candidate.

    Attributes:
        is_auth_error: True if this is an authentication error (CRITICAL).
        is_rate_limit: True if the API answered 429 Too Many Requests.

    Example:
        raise LetterboxdError(
            "Access token rejected",
            details={'path': '/list/abc1/entries', 'status': 401},
            is_auth_error=True
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Letterboxd error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True for authentication failures.
                           These are CRITICAL and abort the run.
            is_rate_limit: Set to True for rate limit responses.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class PaginationError(LetterboxdSyncError):
    """
    Raised when list pagination does not terminate.

    The list entries endpoint is trusted to eventually stop returning a
    cursor. A cursor that repeats, or a page count beyond the configured
    cap, means the membership snapshot can never be completed, so the
    run is aborted instead of diffing against a partial list.
    """
    pass
