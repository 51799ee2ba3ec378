"""
Asynchronous Letterboxd API client for letterboxd-sync.

This module wraps the Letterboxd REST API (https://api-docs.letterboxd.com)
with aiohttp. It implements the two service boundaries the sync needs:

    Lookup service: search_film() -> LookupOutcome
    List service:   list_entries_page(), update_list()

Request Signing:
    Every request carries the query parameters apikey, nonce (a random UUID)
    and timestamp (UNIX seconds), followed by a signature parameter. The
    signature is the lowercase hex HMAC-SHA256, keyed with the API secret,
    of the string:

        <METHOD> \\0 <URL including apikey/nonce/timestamp> \\0 <BODY>

    The URL is sent exactly as signed; it is never re-encoded.

Authentication:
    authenticate() exchanges the account's username and password for an
    access token (OAuth password grant). Later requests send it as a bearer
    token. Public endpoints (search) work without it.

Usage:
    async with LetterboxdClient(api_key, api_secret) as client:
        await client.authenticate(username, password)

        outcome = await client.search_film("Solaris 1972")
        page = await client.list_entries_page("aBc1", cursor=None)
        await client.update_list("aBc1", {"2bbs"}, {"1Tbq"})
"""

import asyncio
import hashlib
import hmac
import json
import time
import uuid
from typing import Any, Iterable
from urllib.parse import urlencode

import aiohttp
from yarl import URL

from letterboxd_sync.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    LetterboxdConfig,
)
from letterboxd_sync.core.exceptions import LetterboxdError
from letterboxd_sync.core.logger import get_logger
from letterboxd_sync.letterboxd.models import (
    AccessToken,
    FilmMatch,
    ListEntriesPage,
    ListSummary,
    ListUpdateResult,
    LookupOutcome,
)

logger = get_logger(__name__)


# Search options: one result, best match first (same as the website's search box)
SEARCH_METHOD = "Autocomplete"
SEARCH_INCLUDE = "FilmSearchItem"
SEARCH_PER_PAGE = 1

# Maximum characters of an error body kept in exception details
ERROR_BODY_PREVIEW = 300


def sign_request(secret: str, method: str, url: str, body: str = "") -> str:
    """
    Compute the Letterboxd request signature.

    Args:
        secret: API shared secret.
        method: HTTP method, upper case.
        url: Full URL including apikey, nonce and timestamp parameters.
        body: Request body as sent, or "" for requests without a body.

    Returns:
        Lowercase hexadecimal HMAC-SHA256 digest.
    """
    message = f"{method.upper()}\u0000{url}\u0000{body}"
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def error_for_status(
    status: int,
    method: str,
    path: str,
    body: str = ""
) -> LetterboxdError | None:
    """
    Map an HTTP status to a LetterboxdError.

    Args:
        status: HTTP status code of the response.
        method: HTTP method of the request.
        path: API path of the request (without base URL or query).
        body: Response body, kept (truncated) in the error details.

    Returns:
        None for 2xx/3xx responses, otherwise the error to raise:
        401/403 are authentication errors, 429 is a rate limit,
        404 and everything else are plain API errors.
    """
    if status < 400:
        return None

    details = {
        "method": method,
        "path": path,
        "status": status,
        "body": body[:ERROR_BODY_PREVIEW],
    }

    if status in (401, 403):
        return LetterboxdError(
            f"Letterboxd rejected the credentials ({status}) for {method} {path}",
            details=details,
            is_auth_error=True
        )
    if status == 429:
        return LetterboxdError(
            f"Rate limited by Letterboxd for {method} {path}",
            details=details,
            is_rate_limit=True
        )
    if status == 404:
        return LetterboxdError(f"Not found: {method} {path}", details=details)
    return LetterboxdError(
        f"Letterboxd API error {status} for {method} {path}",
        details=details
    )


class LetterboxdClient:
    """
    Letterboxd API client.

    The client owns an aiohttp.ClientSession for its lifetime. Use it as an
    async context manager, or pass an existing session (which the client
    then does not close).

    Attributes:
        api_key: Public API key.
        base_url: API root without trailing slash.
        token: Access token after authenticate(), else None.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: aiohttp.ClientSession | None = None
    ) -> None:
        self.api_key = api_key
        self._api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self.token: AccessToken | None = None
        self._list_names: dict[str, str] = {}

    @classmethod
    def from_config(
        cls,
        config: LetterboxdConfig,
        timeout: float = DEFAULT_REQUEST_TIMEOUT
    ) -> "LetterboxdClient":
        return cls(
            api_key=config.api_key,
            api_secret=config.api_secret,
            base_url=config.base_url,
            timeout=timeout,
        )

    async def __aenter__(self) -> "LetterboxdClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    # =========================================================================
    # Request plumbing
    # =========================================================================

    def signed_url(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: str = "",
        nonce: str | None = None,
        timestamp: int | None = None
    ) -> str:
        """
        Build the full, signed URL for a request.

        Args:
            method: HTTP method.
            path: API path starting with '/'.
            params: Endpoint query parameters. None values are dropped.
            body: Request body that will be sent.
            nonce: Override for the random nonce (tests).
            timestamp: Override for the current time (tests).

        Returns:
            URL with the endpoint parameters, apikey, nonce, timestamp and
            finally signature.
        """
        query = [(k, v) for k, v in (params or {}).items() if v is not None]
        query += [
            ("apikey", self.api_key),
            ("nonce", nonce or str(uuid.uuid4())),
            ("timestamp", timestamp if timestamp is not None else int(time.time())),
        ]
        url = f"{self.base_url}{path}?{urlencode(query)}"
        signature = sign_request(self._api_secret, method, url, body)
        return f"{url}&signature={signature}"

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        form: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """
        Send a signed request and return the decoded JSON payload.

        Raises:
            LetterboxdError: On transport errors, timeouts, error statuses
                             and responses that are not a JSON object.
        """
        if self._session is None:
            raise LetterboxdError(
                "LetterboxdClient session is not open. Use 'async with LetterboxdClient(...)'.",
                details={"method": method, "path": path}
            )

        headers = {"Accept": "application/json"}
        body = ""
        if json_body is not None:
            body = json.dumps(json_body)
            headers["Content-Type"] = "application/json"
        elif form is not None:
            body = urlencode(form)
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        if self.token is not None:
            headers["Authorization"] = f"Bearer {self.token.access_token}"

        url = self.signed_url(method, path, params, body)
        logger.debug(f"{method} {path} {params or ''}")

        try:
            async with self._session.request(
                method,
                URL(url, encoded=True),
                data=body.encode("utf-8") if body else None,
                headers=headers,
            ) as response:
                status = response.status
                text = await response.text()
        except asyncio.TimeoutError as e:
            raise LetterboxdError(
                f"Timed out waiting for Letterboxd: {method} {path}",
                details={"method": method, "path": path, "original_error": repr(e)}
            ) from e
        except aiohttp.ClientError as e:
            raise LetterboxdError(
                f"Network error talking to Letterboxd: {e}",
                details={"method": method, "path": path, "original_error": str(e)}
            ) from e
        except UnicodeDecodeError as e:
            raise LetterboxdError(
                f"Letterboxd returned an undecodable body for {method} {path}",
                details={"method": method, "path": path, "original_error": str(e)}
            ) from e

        error = error_for_status(status, method, path, text)
        if error is not None:
            raise error

        if not text:
            return {}

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise LetterboxdError(
                f"Letterboxd returned invalid JSON for {method} {path}",
                details={"method": method, "path": path, "body": text[:ERROR_BODY_PREVIEW]}
            ) from e

        if not isinstance(payload, dict):
            raise LetterboxdError(
                f"Unexpected response shape for {method} {path}",
                details={"method": method, "path": path, "type": type(payload).__name__}
            )
        return payload

    # =========================================================================
    # Authentication
    # =========================================================================

    async def authenticate(self, username: str, password: str) -> AccessToken:
        """
        Log in with the account credentials and keep the access token.

        Raises:
            LetterboxdError: With is_auth_error=True if the credentials are
                             rejected or the token request fails.
        """
        try:
            data = await self._request(
                "POST",
                "/auth/token",
                form={
                    "grant_type": "password",
                    "username": username,
                    "password": password,
                },
            )
        except LetterboxdError as e:
            raise LetterboxdError(
                f"Letterboxd authentication failed for '{username}': {e.message}",
                details={**e.details, "username": username},
                is_auth_error=True
            ) from e

        self.token = AccessToken.from_api_data(data)
        logger.debug(f"Authenticated as {username}")
        return self.token

    # =========================================================================
    # Lookup service
    # =========================================================================

    async def search_film(self, query: str) -> LookupOutcome:
        """
        Search for the single best film match for a query.

        Never raises for API failures: they are returned as a TRANSIENT or
        FATAL outcome (see LookupOutcome.from_error).

        Args:
            query: Candidate name, e.g. "Solaris 1972".

        Returns:
            LookupOutcome tagged FOUND, NOT_FOUND, TRANSIENT or FATAL.
        """
        try:
            data = await self._request(
                "GET",
                "/search",
                params={
                    "input": query,
                    "perPage": SEARCH_PER_PAGE,
                    "searchMethod": SEARCH_METHOD,
                    "include": SEARCH_INCLUDE,
                },
            )
        except LetterboxdError as e:
            return LookupOutcome.from_error(query, e)

        items = data.get("items") or []
        if not isinstance(items, list):
            return LookupOutcome.from_error(query, LetterboxdError(
                f"Search response for '{query}' has a malformed 'items' field",
                details={"query": query, "type": type(items).__name__}
            ))

        for item in items:
            if not isinstance(item, dict):
                continue
            match = FilmMatch.from_search_item(item)
            if match is not None:
                return LookupOutcome.found(query, match)

        return LookupOutcome.not_found(query)

    # =========================================================================
    # List service
    # =========================================================================

    async def get_list(self, list_id: str) -> ListSummary:
        """
        Fetch list metadata.

        Raises:
            LetterboxdError: If the list does not exist or is not accessible.
        """
        data = await self._request("GET", f"/list/{list_id}")
        summary = ListSummary.from_api_data(data)
        self._list_names[list_id] = summary.name
        return summary

    async def list_entries_page(
        self,
        list_id: str,
        cursor: str | None = None,
        per_page: int = DEFAULT_PAGE_SIZE
    ) -> ListEntriesPage:
        """
        Fetch one page of list entries.

        Args:
            list_id: Letterboxd list ID.
            cursor: Cursor from the previous page, None for the first page.
            per_page: Page size hint (the API caps it at 100).

        Raises:
            LetterboxdError: On any API failure. Pagination failures abort
                             the run; a partial membership is never used.
        """
        data = await self._request(
            "GET",
            f"/list/{list_id}/entries",
            params={"perPage": per_page, "cursor": cursor},
        )
        return ListEntriesPage.from_api_data(data)

    async def update_list(
        self,
        list_id: str,
        to_add: Iterable[str],
        to_remove: Iterable[str]
    ) -> ListUpdateResult:
        """
        Add and remove films on a list in a single PATCH.

        The update endpoint requires the list name, so it is read from the
        list first (once per client).

        Args:
            list_id: Letterboxd list ID.
            to_add: Film IDs to append to the list.
            to_remove: Film IDs to take off the list.

        Returns:
            ListUpdateResult with the API's messages.

        Raises:
            LetterboxdError: If the request fails or the API reports an
                             error message for the update.
        """
        name = self._list_names.get(list_id)
        if name is None:
            name = (await self.get_list(list_id)).name

        body = {
            "name": name,
            "entries": [{"film": film_id} for film_id in sorted(to_add)],
            "filmsToRemove": sorted(to_remove),
        }
        data = await self._request("PATCH", f"/list/{list_id}", json_body=body)
        result = ListUpdateResult.from_api_data(list_id, data)

        if not result.succeeded:
            titles = "; ".join(m.title or m.code for m in result.errors)
            raise LetterboxdError(
                f"Letterboxd refused the list update: {titles}",
                details={
                    "list_id": list_id,
                    "errors": [m.code for m in result.errors],
                }
            )

        for message in result.messages:
            logger.debug(f"List update message: {message.type} {message.code} {message.title}")
        return result
