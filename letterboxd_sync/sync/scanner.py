"""
Folder scanning for letterboxd-sync.

Turns the files of a folder into candidate names: the strings that get
searched on Letterboxd. The user supplies a regular expression that picks
the title out of each file name:

    --pattern '^(.+?)\\.\\d{4}\\.'        "Solaris.1972.1080p.mkv" -> "Solaris"
    --pattern '^(?P<title>.+) \\((?P<year>\\d{4})\\)'
                                        "Solaris (1972).mkv"    -> "Solaris 1972"

Extraction rules:
    - A named group 'title' is used if present, else group 1, else the
      whole match.
    - If a named group 'year' also matched, the candidate is
      "<title> <year>", which helps the search pick the right film.
    - Dots and underscores are left alone: candidates are the cache keys,
      and the cache requires the exact same string on every run.

Only regular files directly inside the folder are considered (no
recursion). Subdirectories and unreadable entries are skipped.
"""

import re
from pathlib import Path
from typing import Iterator

from letterboxd_sync.core.exceptions import ScanError
from letterboxd_sync.core.logger import get_logger

logger = get_logger(__name__)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile the user-supplied extraction pattern.

    Raises:
        ScanError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ScanError(
            f"Invalid pattern '{pattern}': {e}",
            details={"pattern": pattern, "original_error": str(e)}
        ) from e


def list_files(folder: Path) -> Iterator[str]:
    """
    Yield the names of regular files in a folder, sorted.

    Args:
        folder: Directory to list.

    Raises:
        ScanError: If the folder does not exist, is not a directory, or
                   cannot be read.
    """
    if not folder.is_dir():
        raise ScanError(
            f"Not a directory: {folder}",
            details={"path": str(folder)}
        )

    try:
        entries = sorted(folder.iterdir())
    except OSError as e:
        raise ScanError(
            f"Cannot read directory {folder}: {e}",
            details={"path": str(folder), "original_error": str(e)}
        ) from e

    for entry in entries:
        try:
            if entry.is_file():
                yield entry.name
        except OSError as e:
            logger.debug(f"Skipping unreadable entry {entry}: {e}")


def extract_candidate(pattern: re.Pattern[str], file_name: str) -> str | None:
    """
    Extract the candidate name from a file name.

    Args:
        pattern: Compiled extraction pattern.
        file_name: Bare file name (no directory).

    Returns:
        The stripped candidate, or None if the pattern does not match or
        captures only whitespace.
    """
    match = pattern.search(file_name)
    if match is None:
        return None

    groups = match.groupdict()
    if groups.get("title") is not None:
        title = groups["title"]
    elif pattern.groups >= 1:
        title = match.group(1)
    else:
        title = match.group(0)

    if title is None or not title.strip():
        return None

    candidate = title.strip()
    year = groups.get("year")
    if year:
        candidate = f"{candidate} {year.strip()}"
    return candidate


def scan_candidates(folder: Path, pattern: str) -> list[str]:
    """
    Scan a folder and return the candidate name of every matching file.

    Duplicates are kept (two files of the same film give the same
    candidate twice); the resolver collapses them.

    Args:
        folder: Directory holding the movie files.
        pattern: Extraction regular expression (see module docstring).

    Returns:
        Candidate names in file name order.

    Raises:
        ScanError: If the pattern is invalid or the folder unreadable.
    """
    regex = compile_pattern(pattern)
    candidates: list[str] = []
    skipped = 0

    for file_name in list_files(folder):
        candidate = extract_candidate(regex, file_name)
        if candidate is None:
            logger.debug(f"Pattern does not match '{file_name}', skipping")
            skipped += 1
            continue
        candidates.append(candidate)

    logger.info(f"Found {len(candidates)} candidates in {folder}")
    if skipped:
        logger.info(f"{skipped} files did not match the pattern")
    return candidates
