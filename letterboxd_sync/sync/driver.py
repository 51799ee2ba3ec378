"""
Sync orchestration for letterboxd-sync.

SyncDriver runs one reconciliation of a local folder against a Letterboxd
list:

    1. Load the film cache
    2. Resolve candidates and fetch the list membership, concurrently
    3. Save the film cache (also when step 2 failed part way)
    4. Compute the delta and log what would change
    5. Apply the delta with a single list update, unless it is empty or
       this is a dry run

Dry Run:
    Resolution, fetching and the diff all happen, so the log shows exactly
    what a real run would do. The film cache is not saved and the list is
    not updated.

Usage:
    from letterboxd_sync.sync.driver import run_sync

    config = load_config()
    report = asyncio.run(run_sync(config, "aBc1", Path("~/Movies"), r"^(.+?)\\.\\d{4}"))
    print(report.delta.summary())
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Iterable, Protocol

from letterboxd_sync.core.cache import CacheStore, FilmCache
from letterboxd_sync.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_SIZE,
    Config,
)
from letterboxd_sync.core.exceptions import CacheError
from letterboxd_sync.core.logger import get_logger
from letterboxd_sync.core.progress import ResolveProgressBar
from letterboxd_sync.letterboxd.client import LetterboxdClient
from letterboxd_sync.letterboxd.models import ListUpdateResult
from letterboxd_sync.sync.fetcher import ListPageService, fetch_all_film_ids
from letterboxd_sync.sync.reconciler import Delta, diff
from letterboxd_sync.sync.resolver import FilmResolver, LookupService
from letterboxd_sync.sync.scanner import scan_candidates
from letterboxd_sync.utils import gather_cancelling, unique

logger = get_logger(__name__)


class ListService(ListPageService, Protocol):
    """List pages plus the single update call."""

    async def update_list(
        self,
        list_id: str,
        to_add: AbstractSet[str],
        to_remove: AbstractSet[str]
    ) -> ListUpdateResult:
        ...


@dataclass
class SyncReport:
    """
    What a sync run found and did.

    Attributes:
        list_id: The Letterboxd list.
        candidates: Unique candidate names considered.
        resolved: Candidate name -> film ID for every resolved candidate.
        remote_ids: Film IDs on the list before the update.
        delta: Computed changes.
        dry_run: Whether this was a dry run.
        cache_saved: Whether the film cache was written.
        applied: Whether the list update was sent and accepted.
    """
    list_id: str
    candidates: list[str]
    resolved: dict[str, str]
    remote_ids: set[str]
    delta: Delta
    dry_run: bool = False
    cache_saved: bool = False
    applied: bool = False
    remote_titles: dict[str, str] = field(default_factory=dict)

    @property
    def local_ids(self) -> set[str]:
        return set(self.resolved.values())

    @property
    def dropped(self) -> list[str]:
        return [name for name in self.candidates if name not in self.resolved]


class SyncDriver:
    """
    Runs the resolve / fetch / diff / update sequence for one list.

    Attributes:
        dry_run: Suppress cache saving and the list update.
    """

    def __init__(
        self,
        lookup_service: LookupService,
        list_service: ListService,
        cache_store: CacheStore,
        concurrency: int = DEFAULT_CONCURRENCY,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        dry_run: bool = False,
        show_progress: bool = False
    ) -> None:
        self._lookup_service = lookup_service
        self._list_service = list_service
        self._cache_store = cache_store
        self._concurrency = concurrency
        self._page_size = page_size
        self._max_pages = max_pages
        self.dry_run = dry_run
        self._show_progress = show_progress

    async def run(self, list_id: str, candidates: Iterable[str]) -> SyncReport:
        """
        Reconcile the list with the given candidates.

        Args:
            list_id: Letterboxd list ID.
            candidates: Candidate names from the folder scan.

        Returns:
            SyncReport describing the run.

        Raises:
            CacheError: If the film cache can't be loaded.
            LetterboxdError: On authentication failures, list fetch
                             failures, or a rejected update.
            PaginationError: If the list pagination does not terminate.
        """
        names = unique(candidates)
        cache = FilmCache(self._cache_store.load())
        remote_titles: dict[str, str] = {}

        try:
            resolved, remote_ids = await gather_cancelling(
                self._resolve(names, cache),
                fetch_all_film_ids(
                    list_id,
                    self._list_service,
                    page_size=self._page_size,
                    max_pages=self._max_pages,
                    titles=remote_titles,
                ),
            )
        finally:
            cache_saved = self._save_cache(cache)

        delta = diff(set(resolved.values()), remote_ids)
        report = SyncReport(
            list_id=list_id,
            candidates=names,
            resolved=resolved,
            remote_ids=remote_ids,
            delta=delta,
            dry_run=self.dry_run,
            cache_saved=cache_saved,
            remote_titles=remote_titles,
        )

        if delta.is_empty:
            logger.info(f"List {list_id} already matches the folder, nothing to do")
            return report

        self._log_delta(report)

        if self.dry_run:
            logger.info(f"Dry run: list {list_id} not updated ({delta.summary()})")
            return report

        await self._list_service.update_list(list_id, delta.to_add, delta.to_remove)
        report.applied = True
        logger.info(f"List {list_id} updated: {delta.summary()}")
        return report

    async def _resolve(self, names: list[str], cache: FilmCache) -> dict[str, str]:
        resolver = FilmResolver(self._lookup_service, cache, self._concurrency)
        if not self._show_progress:
            return await resolver.resolve(names)
        with ResolveProgressBar(total=len(names)) as progress:
            return await resolver.resolve(names, on_result=progress.on_result)

    def _save_cache(self, cache: FilmCache) -> bool:
        """Persist the film cache; failures are warnings. Returns True if written."""
        if self.dry_run:
            logger.info("Dry run: film cache not saved")
            return False
        if not cache.dirty:
            logger.debug("Film cache unchanged, not saving")
            return False
        try:
            self._cache_store.save(cache.snapshot())
        except CacheError as e:
            logger.warning(f"Could not save film cache: {e.message}")
            return False
        logger.info(f"Saved {len(cache)} films to {self._cache_store.path}")
        return True

    def _log_delta(self, report: SyncReport) -> None:
        """Log every film that will be added or removed."""
        names_by_id: dict[str, str] = {}
        for name, film_id in report.resolved.items():
            names_by_id.setdefault(film_id, name)

        logger.info(f"Changes for list {report.list_id}: {report.delta.summary()}")
        for film_id in sorted(report.delta.to_add, key=lambda i: names_by_id.get(i, i)):
            logger.info(f"  + {names_by_id.get(film_id, film_id)} [{film_id}]")
        for film_id in sorted(report.delta.to_remove, key=lambda i: report.remote_titles.get(i) or i):
            logger.info(f"  - {report.remote_titles.get(film_id) or film_id} [{film_id}]")


async def run_sync(
    config: Config,
    list_id: str,
    folder: Path,
    pattern: str,
    dry_run: bool = False,
    show_progress: bool = False
) -> SyncReport:
    """
    Scan a folder and sync it to a Letterboxd list.

    Args:
        config: Loaded application configuration.
        list_id: Letterboxd list ID.
        folder: Folder holding the movie files.
        pattern: Regular expression extracting candidate names.
        dry_run: Compute and log the changes without saving or updating.
        show_progress: Draw a progress bar while resolving.

    Returns:
        SyncReport describing the run.

    Raises:
        ScanError: If the folder or pattern is invalid.
        CacheError: If the film cache can't be loaded.
        LetterboxdError: On authentication or API failures.
        PaginationError: If the list pagination does not terminate.
    """
    candidates = scan_candidates(folder, pattern)
    cache_store = CacheStore(config.sync.cache_file)

    async with LetterboxdClient.from_config(
        config.letterboxd,
        timeout=config.sync.request_timeout
    ) as client:
        await client.authenticate(config.letterboxd.username, config.letterboxd.password)

        driver = SyncDriver(
            lookup_service=client,
            list_service=client,
            cache_store=cache_store,
            concurrency=config.sync.concurrency,
            page_size=config.sync.page_size,
            max_pages=config.sync.max_pages,
            dry_run=dry_run,
            show_progress=show_progress,
        )
        return await driver.run(list_id, candidates)
