"""
Letterboxd API integration for letterboxd-sync.

Components:
    - LetterboxdClient: Signed, asynchronous API client (aiohttp)
    - FilmMatch, LookupOutcome, LookupKind: Film search results
    - ListEntriesPage, ListSummary, ListUpdateResult: List models

Usage:
    from letterboxd_sync.letterboxd import LetterboxdClient, LookupKind

    async with LetterboxdClient(api_key, api_secret) as client:
        outcome = await client.search_film("Solaris 1972")
        if outcome.kind is LookupKind.FOUND:
            print(outcome.match.display_name)
"""

from letterboxd_sync.letterboxd.client import (
    LetterboxdClient,
    error_for_status,
    sign_request,
)
from letterboxd_sync.letterboxd.models import (
    AccessToken,
    FilmMatch,
    ListEntriesPage,
    ListSummary,
    ListUpdateMessage,
    ListUpdateResult,
    LookupKind,
    LookupOutcome,
)

__all__ = [
    # Client
    "LetterboxdClient",
    "sign_request",
    "error_for_status",
    # Models
    "AccessToken",
    "FilmMatch",
    "LookupKind",
    "LookupOutcome",
    "ListSummary",
    "ListEntriesPage",
    "ListUpdateMessage",
    "ListUpdateResult",
]
