"""
Film cache for letterboxd-sync.

Resolving a candidate name to a Letterboxd film ID costs one search request.
The cache remembers every successful resolution in a small JSON document so
that later runs only search for files that are new:

    {
      "Blade Runner 1982": "2bbs",
      "Solaris 1972": "1Tbq"
    }

Keys are the exact candidate strings extracted from file names (no case
folding, no whitespace normalization); a hit requires an identical string.
Entries are never invalidated: a stale mapping keeps pointing at the same
film until the cache file is edited or deleted by hand.

Two classes split the responsibilities:
    CacheStore: reads and writes the JSON document on disk.
    FilmCache: the in-memory mapping used during a run. Lookups that
               complete concurrently record their results through it.

Usage:
    store = CacheStore(Path(".movies.json"))
    cache = FilmCache(store.load())

    film_id = cache.get("Solaris 1972")
    await cache.set("Stalker 1979", "1Zd2")

    if cache.dirty:
        store.save(cache.snapshot())
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path

from letterboxd_sync.core.exceptions import CacheError
from letterboxd_sync.core.logger import get_logger

logger = get_logger(__name__)


class CacheStore:
    """
    Persistent candidate name -> film ID mapping stored as JSON.

    A single process owns the file for the duration of a run, so no file
    locking is done. Writes go to a temporary file in the same directory
    which then replaces the cache atomically: a crash mid-write leaves the
    previous cache intact.

    Attributes:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, str]:
        """
        Read the cache from disk.

        Returns:
            Mapping of candidate name to film ID. Empty if the file does
            not exist yet.

        Raises:
            CacheError: If the file cannot be read, is not valid JSON, is
                        not a JSON object, or holds a non-string or empty
                        film ID.
        """
        if not self.path.exists():
            logger.debug(f"No cache at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise CacheError(
                f"Cache file is not valid JSON: {self.path} (line {e.lineno})",
                details={"path": str(self.path), "line": e.lineno, "original_error": str(e)}
            ) from e
        except OSError as e:
            raise CacheError(
                f"Failed to read cache file: {e}",
                details={"path": str(self.path), "original_error": str(e)}
            ) from e

        if not isinstance(raw, dict):
            raise CacheError(
                f"Cache file must contain a JSON object: {self.path}",
                details={"path": str(self.path), "type": type(raw).__name__}
            )

        for name, film_id in raw.items():
            if not isinstance(film_id, str) or not film_id:
                raise CacheError(
                    f"Invalid film ID for '{name}' in cache file: {self.path}",
                    details={"path": str(self.path), "name": name, "value": film_id}
                )

        logger.debug(f"Loaded {len(raw)} cached films from {self.path}")
        return raw

    def save(self, mapping: dict[str, str]) -> None:
        """
        Write the cache to disk, replacing the previous document atomically.

        Args:
            mapping: Complete candidate name -> film ID mapping.

        Raises:
            CacheError: If the temporary file cannot be written or moved
                        into place. The previous cache is left untouched.
        """
        directory = self.path.parent
        tmp_path: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                json.dump(mapping, tmp, indent=2, sort_keys=True, ensure_ascii=False)
                tmp.write("\n")
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CacheError(
                f"Failed to write cache file: {e}",
                details={"path": str(self.path), "original_error": str(e)}
            ) from e

        logger.debug(f"Saved {len(mapping)} cached films to {self.path}")


class FilmCache:
    """
    In-memory film cache shared by concurrent lookups.

    Reads are plain dictionary lookups. Writes go through set(), which
    holds an asyncio.Lock, so concurrent completions never interleave
    inside an update.

    Attributes:
        dirty: True once an entry has been added or changed this run.
    """

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})
        self._lock = asyncio.Lock()
        self.dirty = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def get(self, name: str) -> str | None:
        """Return the cached film ID for an exact candidate name, or None."""
        return self._entries.get(name)

    async def set(self, name: str, film_id: str) -> None:
        """
        Record a resolved film ID.

        Raises:
            ValueError: If film_id is empty. Unresolved candidates are
                        never stored.
        """
        if not film_id:
            raise ValueError(f"Refusing to cache empty film ID for '{name}'")
        async with self._lock:
            if self._entries.get(name) != film_id:
                self._entries[name] = film_id
                self.dirty = True

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all entries, suitable for CacheStore.save()."""
        return dict(self._entries)
