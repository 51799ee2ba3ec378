"""
List membership fetching for letterboxd-sync.

Reads every film currently on a Letterboxd list by following the list
entries cursor until the API stops returning one. Pages are requested one
after another: each request needs the cursor of the previous response.

The result is a snapshot for the current run only. Unlike candidate
resolution it is never cached: the list may have been edited on the
website since the last run.

Termination Guards:
    - A cursor that was already followed means the API is looping.
    - More than max_pages pages means the list can't be read in full.
    Both raise PaginationError. Diffing against a partial list would
    remove films that are still on it.

Usage:
    from letterboxd_sync.sync.fetcher import fetch_all_film_ids

    remote_ids = await fetch_all_film_ids("aBc1", client)
"""

from typing import Protocol

from letterboxd_sync.core.config import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE
from letterboxd_sync.core.exceptions import PaginationError
from letterboxd_sync.core.logger import get_logger
from letterboxd_sync.letterboxd.models import ListEntriesPage

logger = get_logger(__name__)


class ListPageService(Protocol):
    """Anything that can return one page of a list's entries."""

    async def list_entries_page(
        self,
        list_id: str,
        cursor: str | None = None,
        per_page: int = DEFAULT_PAGE_SIZE
    ) -> ListEntriesPage:
        ...


async def fetch_all_film_ids(
    list_id: str,
    service: ListPageService,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
    titles: dict[str, str] | None = None
) -> set[str]:
    """
    Fetch the complete set of film IDs on a list.

    Args:
        list_id: Letterboxd list ID.
        service: List service providing list_entries_page().
        page_size: Number of entries requested per page.
        max_pages: Maximum number of pages to follow.
        titles: Optional dictionary filled with film ID -> film name, used
                to report removals by name.

    Returns:
        Set of film IDs currently on the list.

    Raises:
        PaginationError: If a cursor repeats or max_pages is exceeded.
        LetterboxdError: If a page request fails.
    """
    film_ids: set[str] = set()
    seen_cursors: set[str] = set()
    cursor: str | None = None
    pages = 0

    while True:
        if pages >= max_pages:
            raise PaginationError(
                f"List {list_id} has more than {max_pages} pages; giving up",
                details={"list_id": list_id, "max_pages": max_pages, "films": len(film_ids)}
            )

        page = await service.list_entries_page(list_id, cursor=cursor, per_page=page_size)
        pages += 1
        film_ids.update(page.film_ids)
        if titles is not None:
            titles.update(page.films)

        logger.debug(
            f"List {list_id} page {pages}: {len(page.films)} films, "
            f"next cursor {page.next_cursor!r}"
        )

        if page.next_cursor is None:
            break

        if page.next_cursor in seen_cursors:
            raise PaginationError(
                f"List {list_id} returned cursor {page.next_cursor!r} twice",
                details={"list_id": list_id, "cursor": page.next_cursor, "pages": pages}
            )
        seen_cursors.add(page.next_cursor)
        cursor = page.next_cursor

    logger.info(f"List {list_id} has {len(film_ids)} films ({pages} pages)")
    return film_ids
