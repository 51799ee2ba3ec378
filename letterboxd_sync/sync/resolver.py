"""
Candidate resolution for letterboxd-sync.

Maps candidate names (extracted from file names) to Letterboxd film IDs.

Resolution Algorithm:
    1. De-duplicate the candidate names, keeping their order
    2. Answer every name found in the film cache without any request
    3. Search Letterboxd for the remaining names, at most `concurrency`
       searches in flight at once
    4. Record each found film in the cache so the next run skips the search
    5. Drop names with no match or a failed search (warning, not error)
    6. Abort on an authentication failure: cancel the searches still
       running and re-raise

The result only contains names that resolved. Its content does not depend
on the order in which searches complete.

Usage:
    from letterboxd_sync.sync.resolver import resolve_candidates

    cache = FilmCache(store.load())
    resolved = await resolve_candidates(names, cache, client)
    local_ids = set(resolved.values())
"""

import asyncio
from typing import Callable, Iterable, Protocol

from letterboxd_sync.core.cache import FilmCache
from letterboxd_sync.core.config import DEFAULT_CONCURRENCY
from letterboxd_sync.core.exceptions import LetterboxdError
from letterboxd_sync.core.logger import get_logger, log_dropped_candidate
from letterboxd_sync.letterboxd.models import LookupKind, LookupOutcome
from letterboxd_sync.utils import gather_cancelling, unique

logger = get_logger(__name__)


# on_result(name, film_id or None, from_cache)
ResultCallback = Callable[[str, str | None, bool], None]


class LookupService(Protocol):
    """Anything that can search for the best film match of a name."""

    async def search_film(self, query: str) -> LookupOutcome:
        ...


class FilmResolver:
    """
    Resolves candidate names through the film cache and a lookup service.

    Attributes:
        concurrency: Maximum number of searches in flight.
    """

    def __init__(
        self,
        lookup_service: LookupService,
        cache: FilmCache,
        concurrency: int = DEFAULT_CONCURRENCY
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._lookup_service = lookup_service
        self._cache = cache
        self.concurrency = concurrency

    async def resolve(
        self,
        names: Iterable[str],
        on_result: ResultCallback | None = None
    ) -> dict[str, str]:
        """
        Resolve candidate names to film IDs.

        Args:
            names: Candidate names; duplicates are allowed.
            on_result: Optional callback invoked once per unique name when
                       it is settled (resolved, cached or dropped).

        Returns:
            Mapping of each successfully resolved name to its film ID, in
            the order the names were first given.

        Raises:
            LetterboxdError: If a search reports an authentication failure.
        """
        candidates = unique(names)
        film_ids: dict[str, str] = {}
        pending: list[str] = []

        for name in candidates:
            film_id = self._cache.get(name)
            if film_id is not None:
                film_ids[name] = film_id
                if on_result is not None:
                    on_result(name, film_id, True)
            else:
                pending.append(name)

        logger.info(
            f"Resolving {len(candidates)} candidates: "
            f"{len(film_ids)} cached, {len(pending)} to search"
        )

        if pending:
            semaphore = asyncio.Semaphore(self.concurrency)
            results = await gather_cancelling(
                *(self._lookup(name, semaphore, on_result) for name in pending)
            )
            for name, film_id in zip(pending, results):
                if film_id is not None:
                    film_ids[name] = film_id

        resolved = {name: film_ids[name] for name in candidates if name in film_ids}
        dropped = len(candidates) - len(resolved)
        if dropped:
            logger.warning(f"{dropped} of {len(candidates)} candidates could not be resolved")
        return resolved

    async def _lookup(
        self,
        name: str,
        semaphore: asyncio.Semaphore,
        on_result: ResultCallback | None
    ) -> str | None:
        """Search one name; return its film ID, or None if dropped."""
        async with semaphore:
            try:
                outcome = await self._lookup_service.search_film(name)
            except LetterboxdError as e:
                outcome = LookupOutcome.from_error(name, e)

        film_id: str | None = None

        if outcome.kind is LookupKind.FATAL:
            if outcome.error is not None:
                raise outcome.error
            raise LetterboxdError(
                f"Fatal error while searching for '{name}'",
                details={"query": name},
                is_auth_error=True
            )
        elif outcome.kind is LookupKind.NOT_FOUND:
            log_dropped_candidate(logger, name, "no match on Letterboxd")
        elif outcome.kind is LookupKind.TRANSIENT:
            log_dropped_candidate(logger, name, f"search failed: {outcome.error}")
        else:
            film_id = outcome.film_id
            await self._cache.set(name, film_id)
            logger.debug(f"'{name}' -> {outcome.match.display_name} [{film_id}]")

        if on_result is not None:
            on_result(name, film_id, False)
        return film_id


async def resolve_candidates(
    names: Iterable[str],
    cache: FilmCache,
    lookup_service: LookupService,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_result: ResultCallback | None = None
) -> dict[str, str]:
    """
    Convenience function: resolve names with a one-off FilmResolver.

    See FilmResolver.resolve() for arguments, return value and errors.
    """
    resolver = FilmResolver(lookup_service, cache, concurrency)
    return await resolver.resolve(names, on_result=on_result)
