"""
Data models for Letterboxd API entities.

This module defines immutable dataclasses for the parts of the Letterboxd API
that the sync uses: film search results, pages of list entries, list
metadata, and the outcome of a list update. Each model knows how to build
itself from the API's JSON payload.

It also defines LookupOutcome, the tagged result returned by a film search.
A search never raises for ordinary failures: it reports whether a film was
found, not found, failed transiently, or failed fatally. The resolver decides
from the tag alone whether to drop the candidate or abort the run.

Usage:
    from letterboxd_sync.letterboxd.models import FilmMatch, LookupOutcome

    outcome = await client.search_film("Solaris 1972")
    if outcome.kind is LookupKind.FOUND:
        print(outcome.match.film_id)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from letterboxd_sync.core.exceptions import LetterboxdError


@dataclass(frozen=True)
class AccessToken:
    """
    OAuth access token returned by POST /auth/token.

    Attributes:
        access_token: Bearer token sent with authenticated requests.
        token_type: Usually "bearer".
        expires_in: Lifetime in seconds, if reported.
        refresh_token: Token usable to renew the session, if reported.
    """
    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    refresh_token: str | None = None

    @classmethod
    def from_api_data(cls, data: dict[str, Any]) -> "AccessToken":
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise LetterboxdError(
                "Authentication response did not contain an access token",
                details={"keys": sorted(data)},
                is_auth_error=True
            )
        return cls(
            access_token=token,
            token_type=data.get("token_type", "bearer"),
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token"),
        )

    def __repr__(self) -> str:
        return f"AccessToken(token_type={self.token_type!r}, expires_in={self.expires_in!r})"


@dataclass(frozen=True)
class FilmMatch:
    """
    Best match returned by a film search.

    Attributes:
        film_id: Letterboxd film ID (LID), e.g. "2bbs".
        name: Film title as listed on Letterboxd.
        release_year: Year of release, if known.
    """
    film_id: str
    name: str
    release_year: int | None = None

    @classmethod
    def from_search_item(cls, item: dict[str, Any]) -> "FilmMatch | None":
        """
        Create a FilmMatch from one item of a SearchResponse.

        Returns:
            FilmMatch, or None if the item is not a film search item or
            carries no film ID.
        """
        if item.get("type") != "FilmSearchItem":
            return None
        film = item.get("film")
        if not isinstance(film, dict):
            return None
        film_id = film.get("id")
        if not isinstance(film_id, str) or not film_id:
            return None
        return cls(
            film_id=film_id,
            name=film.get("name", ""),
            release_year=film.get("releaseYear"),
        )

    @property
    def display_name(self) -> str:
        if self.release_year:
            return f"{self.name} ({self.release_year})"
        return self.name


class LookupKind(Enum):
    """Tag of a LookupOutcome."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass(frozen=True)
class LookupOutcome:
    """
    Tagged result of a single film search.

    Attributes:
        query: The search input (the candidate name).
        kind: What happened.
        match: The best match when kind is FOUND, else None.
        error: The underlying error when kind is TRANSIENT or FATAL.
    """
    query: str
    kind: LookupKind
    match: FilmMatch | None = None
    error: LetterboxdError | None = None

    @classmethod
    def found(cls, query: str, match: FilmMatch) -> "LookupOutcome":
        return cls(query=query, kind=LookupKind.FOUND, match=match)

    @classmethod
    def not_found(cls, query: str) -> "LookupOutcome":
        return cls(query=query, kind=LookupKind.NOT_FOUND)

    @classmethod
    def from_error(cls, query: str, error: LetterboxdError) -> "LookupOutcome":
        """
        Tag a failed search.

        Authentication failures are FATAL: every following request would
        fail the same way. Everything else only affects this query.
        """
        kind = LookupKind.FATAL if error.is_auth_error else LookupKind.TRANSIENT
        return cls(query=query, kind=kind, error=error)

    @property
    def film_id(self) -> str | None:
        return self.match.film_id if self.match is not None else None


@dataclass(frozen=True)
class ListSummary:
    """
    Metadata of a Letterboxd list (GET /list/{id}).

    Attributes:
        list_id: Letterboxd list ID.
        name: List name, required by the update endpoint.
        film_count: Number of films currently on the list, if reported.
    """
    list_id: str
    name: str
    film_count: int | None = None

    @classmethod
    def from_api_data(cls, data: dict[str, Any]) -> "ListSummary":
        list_id = data.get("id")
        name = data.get("name")
        if not isinstance(list_id, str) or not isinstance(name, str):
            raise LetterboxdError(
                "List response is missing 'id' or 'name'",
                details={"keys": sorted(data)}
            )
        return cls(list_id=list_id, name=name, film_count=data.get("filmCount"))


@dataclass(frozen=True)
class ListEntriesPage:
    """
    One page of GET /list/{id}/entries.

    Attributes:
        films: Film ID -> film name for every entry on this page.
        next_cursor: Cursor for the following page, None on the last page.
    """
    films: dict[str, str] = field(default_factory=dict)
    next_cursor: str | None = None

    @classmethod
    def from_api_data(cls, data: dict[str, Any]) -> "ListEntriesPage":
        """
        Create a page from a ListEntriesResponse.

        Entries without a film ID are skipped. An empty string cursor is
        treated as no cursor.

        Raises:
            LetterboxdError: If 'items' is present but not a list.
        """
        items = data.get("items", [])
        if not isinstance(items, list):
            raise LetterboxdError(
                "List entries response has a malformed 'items' field",
                details={"type": type(items).__name__}
            )

        films: dict[str, str] = {}
        for entry in items:
            film = entry.get("film") if isinstance(entry, dict) else None
            if not isinstance(film, dict):
                continue
            film_id = film.get("id")
            if isinstance(film_id, str) and film_id:
                films[film_id] = film.get("name", "")

        return cls(films=films, next_cursor=data.get("next") or None)

    @property
    def film_ids(self) -> set[str]:
        return set(self.films)


@dataclass(frozen=True)
class ListUpdateMessage:
    """
    Message attached to a list update response.

    Attributes:
        type: "Error", "Success" or another informational type.
        code: Machine-readable code (e.g. "UnknownFilm").
        title: Human-readable message.
    """
    type: str
    code: str = ""
    title: str = ""

    @property
    def is_error(self) -> bool:
        return self.type == "Error"


@dataclass(frozen=True)
class ListUpdateResult:
    """
    Parsed response of PATCH /list/{id}.

    Attributes:
        list_id: The list that was updated.
        messages: Messages returned by the API.
    """
    list_id: str
    messages: tuple[ListUpdateMessage, ...] = ()

    @classmethod
    def from_api_data(cls, list_id: str, data: dict[str, Any]) -> "ListUpdateResult":
        messages = tuple(
            ListUpdateMessage(
                type=str(raw.get("type", "")),
                code=str(raw.get("code", "")),
                title=str(raw.get("title", "")),
            )
            for raw in data.get("messages", []) or []
            if isinstance(raw, dict)
        )
        return cls(list_id=list_id, messages=messages)

    @property
    def errors(self) -> list[ListUpdateMessage]:
        return [m for m in self.messages if m.is_error]

    @property
    def succeeded(self) -> bool:
        return not self.errors
