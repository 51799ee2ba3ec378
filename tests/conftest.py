"""Test configuration and fixtures"""

import asyncio
from pathlib import Path

import pytest

from letterboxd_sync.core.cache import CacheStore
from letterboxd_sync.core.exceptions import LetterboxdError
from letterboxd_sync.letterboxd.models import (
    FilmMatch,
    ListEntriesPage,
    ListUpdateResult,
    LookupOutcome,
)


class FakeLookupService:
    """
    Lookup service stub.

    Counts calls and tracks how many searches are in flight at once.
    """

    def __init__(self, films=None, errors=None, delay=0.0):
        self.films = dict(films or {})
        self.errors = dict(errors or {})
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search_film(self, query):
        self.calls.append(query)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if query in self.errors:
                return LookupOutcome.from_error(query, self.errors[query])
            film_id = self.films.get(query)
            if film_id is None:
                return LookupOutcome.not_found(query)
            return LookupOutcome.found(query, FilmMatch(film_id=film_id, name=query))
        finally:
            self.in_flight -= 1


class FakeListService:
    """
    List service stub serving fixed pages.

    Page i is returned for cursor None (i == 0) or cursor str(i). An update
    replaces the membership with a single page, so a second run sees the
    result of the first.
    """

    def __init__(self, pages=None, film_ids=None, update_error=None, delay=0.0):
        if pages is None:
            pages = [(sorted(film_ids or []), None)]
        self.pages = [list(ids) for ids, _ in pages]
        self.cursors = [cursor for _, cursor in pages]
        self.page_calls = []
        self.updates = []
        self.update_error = update_error
        self.delay = delay

    @property
    def film_ids(self):
        return {film_id for page in self.pages for film_id in page}

    async def list_entries_page(self, list_id, cursor=None, per_page=100):
        self.page_calls.append((list_id, cursor, per_page))
        await asyncio.sleep(self.delay)
        index = 0 if cursor is None else int(cursor)
        films = {film_id: f"Film {film_id}" for film_id in self.pages[index]}
        return ListEntriesPage(films=films, next_cursor=self.cursors[index])

    async def update_list(self, list_id, to_add, to_remove):
        self.updates.append((list_id, set(to_add), set(to_remove)))
        if self.update_error is not None:
            raise self.update_error
        membership = (self.film_ids | set(to_add)) - set(to_remove)
        self.pages = [sorted(membership)]
        self.cursors = [None]
        return ListUpdateResult(list_id=list_id)


@pytest.fixture
def cache_path(tmp_path) -> Path:
    """Path of a film cache inside a temporary directory"""
    return tmp_path / ".movies.json"


@pytest.fixture
def cache_store(cache_path) -> CacheStore:
    return CacheStore(cache_path)


@pytest.fixture
def auth_error() -> LetterboxdError:
    return LetterboxdError(
        "Letterboxd rejected the credentials (401)",
        details={"status": 401},
        is_auth_error=True
    )


@pytest.fixture
def credentials_env() -> dict:
    """Complete credential environment"""
    return {
        "LETTERBOXD_KEY": "key-123",
        "LETTERBOXD_SECRET": "secret-456",
        "LETTERBOXD_USERNAME": "cinephile",
        "LETTERBOXD_PASSWORD": "hunter2",
    }


@pytest.fixture
def make_lookup_service():
    """Factory for FakeLookupService instances"""
    return FakeLookupService


@pytest.fixture
def make_list_service():
    """Factory for FakeListService instances"""
    return FakeListService
